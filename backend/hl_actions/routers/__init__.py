from fastapi import APIRouter

from .actions import router as actions_router
from .health import router as health_router
from .history import router as history_router

api_router = APIRouter()

# Mount all sub-routers here. This keeps main.py clean.
api_router.include_router(health_router)
api_router.include_router(actions_router)
api_router.include_router(history_router)
