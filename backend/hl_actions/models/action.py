from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionRecord(Base):
    """
    One attempted action against the exchange (order, cancel, transfer, ...).

    Rows are only ever inserted. `ref` is the audit key: the exchange order
    reference when one exists, otherwise a synthetic value built by the
    orchestrator. Action-specific payloads (exchange responses, approval /
    transfer / margin records) go into `details`, stored in the `metadata`
    column.
    """

    __tablename__ = "action_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )

    source: Mapped[str] = mapped_column(String(64), nullable=False)
    ref: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # submitted / cancelled / failed / partial / rejected
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    notional: Mapped[str | None] = mapped_column(String(64), nullable=True)
    network: Mapped[str | None] = mapped_column(String(32), nullable=True)

    details: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
