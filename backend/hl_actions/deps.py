"""
FastAPI dependencies wiring the external collaborators into the handlers.

Each provider is request-scoped so nothing signing- or exchange-related is
shared between requests. Tests replace them via `app.dependency_overrides`.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import get_db
from .services.action_recorder import ActionRecorder
from .services.execution_client import ExchangeClient, HyperliquidExecutionClient
from .services.market_price import MarketPriceResolver
from .services.wallet import LocalKeyWalletProvider, WalletProvider

SettingsDep = Annotated[Settings, Depends(get_settings)]
DbDep = Annotated[Session, Depends(get_db)]


def get_wallet_provider(settings: SettingsDep) -> WalletProvider:
    return LocalKeyWalletProvider(settings.HYPERLIQUID_PRIVATE_KEY, settings.HYPERLIQUID_ACCOUNT_ADDRESS)


def get_exchange_client(settings: SettingsDep) -> ExchangeClient:
    return HyperliquidExecutionClient(timeout=settings.EXCHANGE_TIMEOUT_SECONDS)


def get_price_resolver(settings: SettingsDep) -> MarketPriceResolver:
    return MarketPriceResolver(settings.PRICE_GATEWAY_URL, timeout=settings.PRICE_GATEWAY_TIMEOUT_SECONDS)


def get_recorder(db: DbDep, settings: SettingsDep) -> ActionRecorder:
    return ActionRecorder(db, source=settings.ACTION_SOURCE)


WalletsDep = Annotated[WalletProvider, Depends(get_wallet_provider)]
ExchangeDep = Annotated[ExchangeClient, Depends(get_exchange_client)]
PricesDep = Annotated[MarketPriceResolver, Depends(get_price_resolver)]
RecorderDep = Annotated[ActionRecorder, Depends(get_recorder)]
