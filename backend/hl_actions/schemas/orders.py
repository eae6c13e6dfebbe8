from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from ..services.environment import Environment
from .common import CLOID_PATTERN, DecimalStr


class EntryRequest(BaseModel):
    """
    Open (or reduce) a position with one primary order.

    Market orders are priced at the gateway mark price and sent with the
    aggressive `FrontendMarket` time in force. Take-profit / stop-loss prices,
    when given, become separate reduce-only trigger orders.
    """

    symbol: str = Field(..., min_length=1, description="Symbol such as BTC-USD")
    side: Literal["buy", "sell"]
    type: Literal["market", "limit"] = "market"
    price: DecimalStr | None = Field(None, description="Required for limit orders, ignored for market orders")
    size: DecimalStr
    tif: Literal["FrontendMarket", "Ioc", "Gtc", "Alo"] | None = None

    leverage: float | None = Field(None, gt=0, le=100)
    leverage_mode: Literal["cross", "isolated"] = Field("cross", alias="leverageMode")

    take_profit_px: DecimalStr | None = Field(None, alias="takeProfitPx")
    stop_loss_px: DecimalStr | None = Field(None, alias="stopLossPx")
    reduce_only: bool = Field(False, alias="reduceOnly")

    environment: Environment = Environment.TESTNET

    class Config:
        populate_by_name = True

    @field_validator("leverage")
    @classmethod
    def _whole_leverage(cls, value: float | None) -> float | None:
        # The exchange only takes integer leverage.
        if value is not None and value != int(value):
            raise ValueError("leverage must be a whole number")
        return value


class EntryResponse(BaseModel):
    ok: bool = True
    environment: Environment
    order_ref: str = Field(..., serialization_alias="orderRef")
    entry: Any
    tp_sl: Any = Field(None, serialization_alias="tpSl")


class CancelRequest(BaseModel):
    oid: int | str | None = Field(None, description="Exchange order id")
    cloid: str | None = Field(None, pattern=CLOID_PATTERN, description="Client order id, 0x + 32 hex chars")
    symbol: str = Field("BTC-USD", min_length=1)
    environment: Environment = Environment.TESTNET

    @field_validator("oid")
    @classmethod
    def _numeric_oid(cls, value: int | str | None) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("oid must be a non-negative integer")
        if isinstance(value, str):
            if not value.isdigit():
                raise ValueError("oid must be a non-negative integer")
            return int(value)
        if value < 0:
            raise ValueError("oid must be a non-negative integer")
        return value


class CancelResponse(BaseModel):
    ok: bool = True
    environment: Environment
    result: Any
