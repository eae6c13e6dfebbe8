import logging

from ..config import Settings
from ..errors import ActionError, PreconditionError
from ..schemas import CancelRequest, CancelResponse, EntryRequest, EntryResponse
from .action_recorder import ActionAttempt, ActionRecorder
from .environment import resolve_chain_config
from .execution_client import ExchangeClient
from .market_price import MarketPriceResolver
from .order_composer import compose_entry_orders, require_limit_price
from .order_ref import extract_order_ref, fallback_order_ref
from .wallet import WalletProvider

logger = logging.getLogger(__name__)


def execute_entry(
    payload: EntryRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    prices: MarketPriceResolver,
    recorder: ActionRecorder,
) -> EntryResponse:
    """
    Place an entry order with optional leverage update and TP/SL triggers.

    Steps, each feeding the next:
    - resolve the chain for the environment and acquire the wallet context;
    - reject a limit order without price (recorded, nothing sent);
    - update leverage when requested (never rolled back);
    - price market orders at the gateway mark;
    - submit the primary order, then the trigger batch if any;
    - record one `order` action keyed by the exchange order reference.

    If the trigger batch fails after the primary order went through, the
    record is written as `partial` and the error response carries the primary
    order's exchange response under `entry`.
    """
    environment = payload.environment
    chain = resolve_chain_config(environment, settings)
    ctx = wallets.wallet(chain)

    attempt = ActionAttempt(
        recorder,
        action="order",
        wallet=ctx,
        environment=environment,
        # Replaced by the exchange order reference once the primary order returns.
        ref=fallback_order_ref(payload.symbol),
        notional=payload.size,
        metadata={
            "symbol": payload.symbol,
            "side": payload.side,
            "type": payload.type,
            "price": payload.price,
            "size": payload.size,
            "leverage": payload.leverage,
            "leverageMode": payload.leverage_mode,
            "reduceOnly": payload.reduce_only,
            "takeProfitPx": payload.take_profit_px,
            "stopLossPx": payload.stop_loss_px,
            "environment": environment,
        },
    )

    try:
        require_limit_price(payload.type, payload.price)
    except PreconditionError as exc:
        raise attempt.reject(exc) from None

    with attempt.guard():
        if payload.leverage is not None:
            logger.info(
                "[ExecutionService] set leverage %s=%sx (%s) for %s",
                payload.symbol, payload.leverage, payload.leverage_mode, ctx.address,
            )
            attempt.metadata["leverageResponse"] = exchange.update_leverage(
                ctx,
                environment,
                symbol=payload.symbol,
                leverage=int(payload.leverage),
                leverage_mode=payload.leverage_mode,
            )

        if payload.type == "market":
            entry_price = prices.resolve(payload.symbol, environment)
        else:
            entry_price = payload.price
        attempt.metadata["price"] = entry_price

        primary, triggers = compose_entry_orders(
            symbol=payload.symbol,
            side=payload.side,
            order_type=payload.type,
            price=entry_price,
            size=payload.size,
            tif=payload.tif,
            reduce_only=payload.reduce_only,
            take_profit_px=payload.take_profit_px,
            stop_loss_px=payload.stop_loss_px,
        )

        entry = exchange.place_orders(ctx, environment, [primary])
        attempt.ref = extract_order_ref(entry) or attempt.ref
        attempt.metadata["entryResponse"] = entry
        attempt.failure_status = "partial"
        logger.info(
            "[ExecutionService] entry %s %s %s @ %s tif=%s ref=%s",
            payload.symbol, primary.side, primary.size, primary.price, primary.tif, attempt.ref,
        )

        tp_sl = None
        if triggers:
            try:
                tp_sl = exchange.place_orders(ctx, environment, triggers)
            except ActionError as exc:
                # The primary order is live; surface it alongside the error.
                exc.details.setdefault("entry", entry)
                raise
            logger.info("[ExecutionService] placed %d trigger order(s) for %s", len(triggers), attempt.ref)
        attempt.metadata["tpSlResponse"] = tp_sl

    attempt.succeed("submitted")
    return EntryResponse(environment=environment, order_ref=attempt.ref, entry=entry, tp_sl=tp_sl)


def cancel_order(
    payload: CancelRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> CancelResponse:
    """
    Cancel one order by client order id or exchange order id.

    `cloid` wins when both are supplied. A request with neither is rejected
    (and recorded) without calling the exchange.
    """
    environment = payload.environment
    chain = resolve_chain_config(environment, settings)
    ctx = wallets.wallet(chain)

    target = payload.cloid if payload.cloid is not None else payload.oid
    attempt = ActionAttempt(
        recorder,
        action="cancel",
        wallet=ctx,
        environment=environment,
        ref=str(target) if target is not None else fallback_order_ref(payload.symbol),
        metadata={"symbol": payload.symbol, "cancelled": target, "environment": environment},
    )

    if target is None:
        raise attempt.reject(PreconditionError("oid or cloid is required"))

    with attempt.guard():
        if payload.cloid is not None:
            result = exchange.cancel_order_by_cloid(ctx, environment, symbol=payload.symbol, cloid=payload.cloid)
        else:
            result = exchange.cancel_order(ctx, environment, symbol=payload.symbol, oid=payload.oid)

    logger.info("[ExecutionService] cancelled %s on %s", target, payload.symbol)
    attempt.succeed("cancelled", result=result)
    return CancelResponse(environment=environment, result=result)
