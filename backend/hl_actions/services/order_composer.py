from dataclasses import asdict, dataclass
from typing import Any, Literal

from ..errors import PreconditionError

Side = Literal["buy", "sell"]
OrderType = Literal["market", "limit"]
Tif = Literal["FrontendMarket", "Ioc", "Gtc", "Alo"]
TpSl = Literal["tp", "sl"]

MARKET_TIF: Tif = "FrontendMarket"
DEFAULT_LIMIT_TIF: Tif = "Ioc"


@dataclass(frozen=True)
class TriggerSpec:
    trigger_px: str
    tpsl: TpSl
    is_market: bool = True


@dataclass(frozen=True)
class OrderRequest:
    """
    One order as submitted to the exchange adapter.

    Prices and sizes stay decimal strings until the adapter converts them to
    the SDK's wire format.
    """

    symbol: str
    side: Side
    price: str
    size: str
    tif: Tif
    reduce_only: bool = False
    trigger: TriggerSpec | None = None

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


def opposite_side(side: Side) -> Side:
    return "sell" if side == "buy" else "buy"


def select_tif(order_type: OrderType, user_tif: Tif | None) -> Tif:
    """Market orders always fill aggressively; limit orders default to IOC."""
    if order_type == "market":
        return MARKET_TIF
    return user_tif or DEFAULT_LIMIT_TIF


def require_limit_price(order_type: OrderType, price: str | None) -> None:
    if order_type == "limit" and not price:
        raise PreconditionError("price is required for limit orders")


def compose_trigger_order(
    *,
    symbol: str,
    side: Side,
    size: str,
    trigger_px: str,
    tpsl: TpSl,
) -> OrderRequest:
    """Reduce-only, opposite-side, market-style trigger closing the primary order."""
    return OrderRequest(
        symbol=symbol,
        side=opposite_side(side),
        price=trigger_px,
        size=size,
        tif=DEFAULT_LIMIT_TIF,
        reduce_only=True,
        trigger=TriggerSpec(trigger_px=trigger_px, tpsl=tpsl),
    )


def compose_entry_orders(
    *,
    symbol: str,
    side: Side,
    order_type: OrderType,
    price: str | None,
    size: str,
    tif: Tif | None = None,
    reduce_only: bool = False,
    take_profit_px: str | None = None,
    stop_loss_px: str | None = None,
) -> tuple[OrderRequest, list[OrderRequest]]:
    """
    Build the primary order and its optional take-profit / stop-loss triggers.

    `price` must already be resolved: the caller fetches the mark for market
    orders. Returns `(primary, triggers)`; triggers are ordered tp, sl and go
    out as a separate batch after the primary settles.
    """
    require_limit_price(order_type, price)
    if not price:
        raise PreconditionError("price must be resolved before composing a market order")

    primary = OrderRequest(
        symbol=symbol,
        side=side,
        price=price,
        size=size,
        tif=select_tif(order_type, tif),
        reduce_only=reduce_only,
    )

    triggers: list[OrderRequest] = []
    if take_profit_px is not None:
        triggers.append(
            compose_trigger_order(symbol=symbol, side=side, size=size, trigger_px=take_profit_px, tpsl="tp")
        )
    if stop_loss_px is not None:
        triggers.append(
            compose_trigger_order(symbol=symbol, side=side, size=size, trigger_px=stop_loss_px, tpsl="sl")
        )

    return primary, triggers
