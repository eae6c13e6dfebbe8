from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..services.environment import Environment


class ApprovalRecord(BaseModel):
    """Builder fee approval attached to a `builder-approval` action record."""

    environment: Environment
    builder: str
    max_fee_rate: str = Field(..., serialization_alias="maxFeeRate")
    approval: Any = None


class TransferRecord(BaseModel):
    environment: Environment
    sub_account_user: str = Field(..., serialization_alias="subAccountUser")
    direction: Literal["deposit", "withdraw"]
    amount: str
    result: Any = None


class MarginRecord(BaseModel):
    environment: Environment
    enabled: bool
    user: str
    result: Any = None


class ActionRecordRead(BaseModel):
    id: int
    created_at: datetime = Field(..., serialization_alias="createdAt")
    source: str
    ref: str
    status: str
    wallet_address: str = Field(..., serialization_alias="walletAddress")
    action: str
    notional: str | None
    network: str | None
    details: dict | None = Field(None, serialization_alias="metadata")

    class Config:
        from_attributes = True


class ActionRecordListResponse(BaseModel):
    total: int
    items: list[ActionRecordRead]
