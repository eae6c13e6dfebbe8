import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .db import init_db
from .errors import ActionError, ConfigurationError, UnknownError, flatten_validation_errors
from .routers import api_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Hyperliquid Actions",
    description="HTTP actions to place, cancel and manage Hyperliquid perpetual positions for one configured wallet.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"ok": False, "error": flatten_validation_errors(exc.errors())},
    )


@app.exception_handler(ActionError)
async def action_error_handler(request: Request, exc: ActionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))


@app.exception_handler(Exception)
async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s -> unhandled error", request.method, request.url.path)
    error = UnknownError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.on_event("startup")
def check_configuration() -> None:
    current = get_settings()
    missing = current.missing_required()
    if missing:
        message = f"Missing required configuration: {', '.join(missing)}"
        if current.REQUIRE_CONFIG_ON_STARTUP:
            raise ConfigurationError(message)
        logger.warning(message)


@app.on_event("startup")
def prepare_database() -> None:
    init_db()


@app.on_event("startup")
async def print_routes() -> None:
    logger.info("--- Registered Routes ---")
    for route in app.router.routes:
        logger.info(f"PATH: {route.path} METHODS: {getattr(route, 'methods', None)}")
    logger.info("-------------------------")


app.include_router(api_router)
