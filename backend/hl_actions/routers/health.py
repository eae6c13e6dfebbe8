from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """
    Liveness probe. Does not touch the exchange or the database.
    """
    return {"status": "ok"}
