"""
Pydantic models (schemas) used for request / response payloads.
"""

from .orders import EntryRequest, EntryResponse, CancelRequest, CancelResponse
from .account import (
    StatusRequest,
    StatusResponse,
    AccountSnapshot,
    CreateSubAccountRequest,
    CreateSubAccountResponse,
    TransferSubAccountRequest,
    TransferSubAccountResponse,
    PortfolioMarginRequest,
    PortfolioMarginResponse,
    BuilderFeeRequest,
    BuilderFeeResponse,
)
from .records import (
    ApprovalRecord,
    TransferRecord,
    MarginRecord,
    ActionRecordRead,
    ActionRecordListResponse,
)

__all__ = [
    "EntryRequest",
    "EntryResponse",
    "CancelRequest",
    "CancelResponse",
    "StatusRequest",
    "StatusResponse",
    "AccountSnapshot",
    "CreateSubAccountRequest",
    "CreateSubAccountResponse",
    "TransferSubAccountRequest",
    "TransferSubAccountResponse",
    "PortfolioMarginRequest",
    "PortfolioMarginResponse",
    "BuilderFeeRequest",
    "BuilderFeeResponse",
    "ApprovalRecord",
    "TransferRecord",
    "MarginRecord",
    "ActionRecordRead",
    "ActionRecordListResponse",
]
