from fastapi import APIRouter, Query
from sqlalchemy import func, select

from ..deps import DbDep
from ..models import ActionRecord
from ..schemas import ActionRecordListResponse, ActionRecordRead

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("", response_model=ActionRecordListResponse)
def list_actions(
    db: DbDep,
    skip: int = Query(0, ge=0, description="Number of records to skip (for pagination)"),
    limit: int = Query(50, ge=1, le=200, description="Max records to return"),
    wallet_address: str | None = Query(None, alias="walletAddress"),
    action: str | None = Query(None, description="Filter by action tag, e.g. order or cancel"),
) -> ActionRecordListResponse:
    """
    List recorded actions, most recent first.
    """
    stmt = select(ActionRecord)
    if wallet_address:
        stmt = stmt.where(ActionRecord.wallet_address == wallet_address)
    if action:
        stmt = stmt.where(ActionRecord.action == action)

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    items = db.scalars(
        stmt.order_by(ActionRecord.created_at.desc(), ActionRecord.id.desc()).offset(skip).limit(limit)
    ).all()
    return ActionRecordListResponse(total=total, items=[ActionRecordRead.model_validate(r) for r in items])
