import logging
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from ..config import Settings
from ..errors import ConfigurationError
from ..schemas import (
    AccountSnapshot,
    ApprovalRecord,
    BuilderFeeRequest,
    BuilderFeeResponse,
    CreateSubAccountRequest,
    CreateSubAccountResponse,
    MarginRecord,
    PortfolioMarginRequest,
    PortfolioMarginResponse,
    StatusRequest,
    StatusResponse,
    TransferRecord,
    TransferSubAccountRequest,
    TransferSubAccountResponse,
)
from .action_recorder import ActionAttempt, ActionRecorder
from .environment import resolve_chain_config
from .execution_client import ExchangeClient
from .wallet import WalletProvider

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def fetch_status(
    payload: StatusRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> StatusResponse:
    """
    Clearinghouse state for the wallet and any listed sub-accounts.

    The fetches are independent and run concurrently; snapshots come back in
    request order (wallet first). One failed fetch fails the whole request.
    """
    environment = payload.environment
    ctx = wallets.wallet(resolve_chain_config(environment, settings))
    addresses = [ctx.address, *payload.sub_accounts]

    attempt = ActionAttempt(
        recorder,
        action="status",
        wallet=ctx,
        environment=environment,
        ref=f"status-{_now_ms()}",
        metadata={"environment": environment, "addresses": addresses},
    )

    with attempt.guard():
        workers = max(1, min(len(addresses), settings.STATUS_MAX_WORKERS))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            states = list(pool.map(lambda addr: exchange.fetch_clearinghouse_state(environment, addr), addresses))

    snapshots = [
        AccountSnapshot(wallet_address=addr, clearinghouse=state)
        for addr, state in zip(addresses, states)
    ]
    attempt.succeed(snapshots=[s.model_dump(by_alias=True) for s in snapshots])
    return StatusResponse(environment=environment, wallet_address=ctx.address, snapshots=snapshots)


def create_subaccount(
    payload: CreateSubAccountRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> CreateSubAccountResponse:
    environment = payload.environment
    ctx = wallets.wallet(resolve_chain_config(environment, settings))

    attempt = ActionAttempt(
        recorder,
        action="subaccount-create",
        wallet=ctx,
        environment=environment,
        ref=f"{environment}-subaccount-{_now_ms()}",
        metadata={"environment": environment, "name": payload.name},
    )
    with attempt.guard():
        result = exchange.create_sub_account(ctx, environment, name=payload.name)

    logger.info("[AccountService] created sub-account %r for %s", payload.name, ctx.address)
    attempt.succeed(result=result)
    return CreateSubAccountResponse(
        environment=environment,
        name=payload.name,
        wallet_address=ctx.address,
        result=result,
    )


def transfer_subaccount(
    payload: TransferSubAccountRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> TransferSubAccountResponse:
    environment = payload.environment
    ctx = wallets.wallet(resolve_chain_config(environment, settings))

    record = TransferRecord(
        environment=environment,
        sub_account_user=payload.sub_account_user,
        direction=payload.direction,
        amount=payload.amount,
    )
    attempt = ActionAttempt(
        recorder,
        action="subaccount-transfer",
        wallet=ctx,
        environment=environment,
        ref=f"{environment}-subaccount-transfer-{_now_ms()}",
        notional=payload.amount,
        metadata=record.model_dump(by_alias=True),
    )
    with attempt.guard():
        result = exchange.transfer_sub_account(
            ctx,
            environment,
            sub_account_user=payload.sub_account_user,
            is_deposit=payload.direction == "deposit",
            usd=Decimal(payload.amount),
        )

    logger.info(
        "[AccountService] %s %s USDC %s sub-account %s",
        payload.direction, payload.amount, "to" if payload.direction == "deposit" else "from", payload.sub_account_user,
    )
    attempt.succeed(result=result)
    return TransferSubAccountResponse(
        environment=environment,
        sub_account_user=payload.sub_account_user,
        direction=payload.direction,
        amount=payload.amount,
        result=result,
    )


def set_portfolio_margin(
    payload: PortfolioMarginRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> PortfolioMarginResponse:
    """Enable or disable portfolio margin for the wallet's own account."""
    environment = payload.environment
    ctx = wallets.wallet(resolve_chain_config(environment, settings))

    attempt = ActionAttempt(
        recorder,
        action="portfolio-margin",
        wallet=ctx,
        environment=environment,
        ref=f"portfolio-margin-{_now_ms()}",
        metadata=MarginRecord(environment=environment, enabled=payload.enabled, user=ctx.address).model_dump(),
    )
    with attempt.guard():
        result = exchange.set_portfolio_margin(ctx, environment, user=ctx.address, enabled=payload.enabled)

    attempt.succeed(result=result)
    return PortfolioMarginResponse(
        environment=environment,
        enabled=payload.enabled,
        user=ctx.address,
        result=result,
    )


def accept_builder_fee(
    payload: BuilderFeeRequest,
    *,
    settings: Settings,
    wallets: WalletProvider,
    exchange: ExchangeClient,
    recorder: ActionRecorder,
) -> BuilderFeeResponse:
    """Approve the configured builder's max fee rate for the wallet."""
    environment = payload.environment
    ctx = wallets.wallet(resolve_chain_config(environment, settings))

    builder = settings.HYPERLIQUID_BUILDER_ADDRESS
    max_fee_rate = settings.HYPERLIQUID_BUILDER_MAX_FEE_RATE
    record = ApprovalRecord(environment=environment, builder=builder or "", max_fee_rate=max_fee_rate)
    attempt = ActionAttempt(
        recorder,
        action="builder-approval",
        wallet=ctx,
        environment=environment,
        ref=f"{environment}-builder-{_now_ms()}",
        metadata=record.model_dump(by_alias=True),
    )

    if not builder:
        raise attempt.reject(ConfigurationError("HYPERLIQUID_BUILDER_ADDRESS is not configured."))

    with attempt.guard():
        approval = exchange.approve_builder_fee(ctx, environment, builder=builder, max_fee_rate=max_fee_rate)

    logger.info("[AccountService] approved builder %s at %s for %s", builder, max_fee_rate, ctx.address)
    attempt.succeed(approval=approval)
    return BuilderFeeResponse(environment=environment, wallet_address=ctx.address, approval=approval)
