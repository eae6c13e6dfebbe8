from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Callable, Literal

from hyperliquid.exchange import Exchange
from hyperliquid.utils.error import ClientError, ServerError
from hyperliquid.utils.types import Cloid

from ..errors import ExchangeError
from .environment import Environment, api_url
from .hyperliquid_client import HyperliquidClient
from .market_price import base_asset
from .order_composer import OrderRequest
from .order_ref import rejected_errors
from .wallet import WalletContext

logger = logging.getLogger(__name__)

LeverageMode = Literal["cross", "isolated"]

# Sub-account transfers are denominated in raw units: 1 USD = 1_000_000.
USD_RAW_UNITS = Decimal(1_000_000)


class ExchangeClient(ABC):
    """
    Exchange operations the action handlers drive.

    Every method either returns the raw exchange response or raises
    `ExchangeError` carrying it.
    """

    @abstractmethod
    def place_orders(
        self, wallet: WalletContext, environment: Environment, orders: list[OrderRequest]
    ) -> dict[str, Any]:
        """Submit one batch of orders."""
        raise NotImplementedError

    @abstractmethod
    def cancel_order(
        self, wallet: WalletContext, environment: Environment, *, symbol: str, oid: int
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def cancel_order_by_cloid(
        self, wallet: WalletContext, environment: Environment, *, symbol: str, cloid: str
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def update_leverage(
        self,
        wallet: WalletContext,
        environment: Environment,
        *,
        symbol: str,
        leverage: int,
        leverage_mode: LeverageMode,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def create_sub_account(self, wallet: WalletContext, environment: Environment, *, name: str) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def transfer_sub_account(
        self,
        wallet: WalletContext,
        environment: Environment,
        *,
        sub_account_user: str,
        is_deposit: bool,
        usd: Decimal,
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def set_portfolio_margin(
        self, wallet: WalletContext, environment: Environment, *, user: str, enabled: bool
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def approve_builder_fee(
        self, wallet: WalletContext, environment: Environment, *, builder: str, max_fee_rate: str
    ) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def fetch_clearinghouse_state(self, environment: Environment, address: str) -> dict[str, Any]:
        raise NotImplementedError


def to_sdk_order(order: OrderRequest) -> dict[str, Any]:
    """Convert an `OrderRequest` into the SDK's `OrderRequest` dict."""
    if order.trigger is not None:
        order_type: dict[str, Any] = {
            "trigger": {
                "triggerPx": float(order.trigger.trigger_px),
                "isMarket": order.trigger.is_market,
                "tpsl": order.trigger.tpsl,
            }
        }
    else:
        order_type = {"limit": {"tif": order.tif}}

    return {
        "coin": base_asset(order.symbol),
        "is_buy": order.side == "buy",
        "sz": float(order.size),
        "limit_px": float(order.price),
        "order_type": order_type,
        "reduce_only": order.reduce_only,
    }


def check_response(operation: str, result: Any) -> dict[str, Any]:
    """
    Raise `ExchangeError` unless the exchange accepted the action.

    Batch actions (orders, cancels) can be accepted as a whole while
    individual entries fail; the first per-entry error is raised as well.
    """
    if not isinstance(result, dict) or result.get("status") != "ok":
        reason = result.get("response") if isinstance(result, dict) else result
        raise ExchangeError(f"Hyperliquid {operation} rejected: {reason}", response=result)

    errors = rejected_errors(result)
    if errors:
        raise ExchangeError(f"Hyperliquid {operation} rejected: {errors[0]}", response=result)
    return result


class HyperliquidExecutionClient(ExchangeClient):
    """
    Real trading against Hyperliquid through hyperliquid-python-sdk.

    An instance is request-scoped: SDK `Exchange` objects (which load exchange
    metadata on construction) are cached per wallet/environment for the
    lifetime of the instance only.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._exchanges: dict[tuple[str, str, Environment], Exchange] = {}
        self._readers: dict[Environment, HyperliquidClient] = {}
        # Status fans out over worker threads that share this instance.
        self._readers_lock = threading.Lock()

    def _exchange(self, wallet: WalletContext, environment: Environment) -> Exchange:
        environment = Environment(environment)
        key = (wallet.signer.address, wallet.address, environment)
        if key not in self._exchanges:
            account_address = wallet.address if wallet.address.lower() != wallet.signer.address.lower() else None
            self._exchanges[key] = Exchange(
                wallet.signer,
                base_url=api_url(environment),
                account_address=account_address,
                timeout=self.timeout,
            )
        return self._exchanges[key]

    def _reader(self, environment: Environment) -> HyperliquidClient:
        environment = Environment(environment)
        with self._readers_lock:
            if environment not in self._readers:
                self._readers[environment] = HyperliquidClient(environment, timeout=self.timeout)
            return self._readers[environment]

    def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            result = fn(*args, **kwargs)
        except ClientError as exc:
            logger.error("[HyperliquidExecutionClient] %s client error: %s", operation, exc.error_message)
            raise ExchangeError(
                f"Hyperliquid {operation} failed: {exc.error_message}",
                response=exc.error_data or exc.error_message,
            ) from exc
        except ServerError as exc:
            logger.error("[HyperliquidExecutionClient] %s server error: %s", operation, exc.message)
            raise ExchangeError(f"Hyperliquid {operation} failed: {exc.message}", response=exc.message) from exc

        logger.info("[HyperliquidExecutionClient] %s -> %s", operation, result)
        return check_response(operation, result)

    def place_orders(self, wallet, environment, orders):
        exchange = self._exchange(wallet, environment)
        return self._call("order", exchange.bulk_orders, [to_sdk_order(o) for o in orders])

    def cancel_order(self, wallet, environment, *, symbol, oid):
        exchange = self._exchange(wallet, environment)
        return self._call("cancel", exchange.cancel, base_asset(symbol), oid)

    def cancel_order_by_cloid(self, wallet, environment, *, symbol, cloid):
        exchange = self._exchange(wallet, environment)
        return self._call("cancelByCloid", exchange.cancel_by_cloid, base_asset(symbol), Cloid.from_str(cloid))

    def update_leverage(self, wallet, environment, *, symbol, leverage, leverage_mode):
        exchange = self._exchange(wallet, environment)
        return self._call(
            "updateLeverage",
            exchange.update_leverage,
            leverage,
            base_asset(symbol),
            is_cross=leverage_mode == "cross",
        )

    def create_sub_account(self, wallet, environment, *, name):
        exchange = self._exchange(wallet, environment)
        return self._call("createSubAccount", exchange.create_sub_account, name)

    def transfer_sub_account(self, wallet, environment, *, sub_account_user, is_deposit, usd):
        exchange = self._exchange(wallet, environment)
        raw_usd = int(Decimal(usd) * USD_RAW_UNITS)
        return self._call("subAccountTransfer", exchange.sub_account_transfer, sub_account_user, is_deposit, raw_usd)

    def set_portfolio_margin(self, wallet, environment, *, user, enabled):
        exchange = self._exchange(wallet, environment)
        abstraction = "portfolioMargin" if enabled else "disabled"
        return self._call("userSetAbstraction", exchange.user_set_abstraction, user, abstraction)

    def approve_builder_fee(self, wallet, environment, *, builder, max_fee_rate):
        exchange = self._exchange(wallet, environment)
        return self._call("approveBuilderFee", exchange.approve_builder_fee, builder, max_fee_rate)

    def fetch_clearinghouse_state(self, environment, address):
        return self._reader(environment).fetch_clearinghouse_state(address)
