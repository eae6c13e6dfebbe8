from fastapi import APIRouter

from ..deps import ExchangeDep, PricesDep, RecorderDep, SettingsDep, WalletsDep
from ..schemas import (
    BuilderFeeRequest,
    BuilderFeeResponse,
    CancelRequest,
    CancelResponse,
    CreateSubAccountRequest,
    CreateSubAccountResponse,
    EntryRequest,
    EntryResponse,
    PortfolioMarginRequest,
    PortfolioMarginResponse,
    StatusRequest,
    StatusResponse,
    TransferSubAccountRequest,
    TransferSubAccountResponse,
)
from ..services import account_service, execution_service

router = APIRouter(prefix="/hyperliquid", tags=["hyperliquid"])


@router.post("/entry", response_model=EntryResponse)
def entry(
    payload: EntryRequest,
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    prices: PricesDep,
    recorder: RecorderDep,
) -> EntryResponse:
    """
    Place a Hyperliquid entry (market or limit) with optional leverage, TP, SL
    and reduce-only flag. TP/SL are placed as separate reduce-only trigger orders.
    """
    return execution_service.execute_entry(
        payload, settings=settings, wallets=wallets, exchange=exchange, prices=prices, recorder=recorder
    )


@router.post("/cancel", response_model=CancelResponse)
def cancel(
    payload: CancelRequest,
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
) -> CancelResponse:
    """Cancel a Hyperliquid order by oid or client order id (cloid)."""
    return execution_service.cancel_order(
        payload, settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )


@router.post("/status", response_model=StatusResponse)
def status(
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
    payload: StatusRequest | None = None,
) -> StatusResponse:
    """Clearinghouse state for the configured wallet and optional sub-accounts."""
    return account_service.fetch_status(
        payload or StatusRequest(), settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )


@router.post("/create-subaccount", response_model=CreateSubAccountResponse)
def create_subaccount(
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
    payload: CreateSubAccountRequest | None = None,
) -> CreateSubAccountResponse:
    """Create a Hyperliquid sub-account for the configured wallet."""
    return account_service.create_subaccount(
        payload or CreateSubAccountRequest(), settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )


@router.post("/transfer-subaccount", response_model=TransferSubAccountResponse)
def transfer_subaccount(
    payload: TransferSubAccountRequest,
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
) -> TransferSubAccountResponse:
    """Transfer USDC between the main account and a Hyperliquid sub-account."""
    return account_service.transfer_subaccount(
        payload, settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )


@router.post("/portfolio-margin", response_model=PortfolioMarginResponse)
def portfolio_margin(
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
    payload: PortfolioMarginRequest | None = None,
) -> PortfolioMarginResponse:
    """Enable or disable Hyperliquid portfolio margin for the configured wallet."""
    return account_service.set_portfolio_margin(
        payload or PortfolioMarginRequest(), settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )


@router.post("/accept-builder-fee", response_model=BuilderFeeResponse)
def accept_builder_fee(
    settings: SettingsDep,
    wallets: WalletsDep,
    exchange: ExchangeDep,
    recorder: RecorderDep,
    payload: BuilderFeeRequest | None = None,
) -> BuilderFeeResponse:
    """Sign and submit the max builder fee approval for the configured wallet."""
    return account_service.accept_builder_fee(
        payload or BuilderFeeRequest(), settings=settings, wallets=wallets, exchange=exchange, recorder=recorder
    )
