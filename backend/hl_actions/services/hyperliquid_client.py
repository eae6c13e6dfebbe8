from __future__ import annotations

import logging
from typing import Any

from hyperliquid.info import Info
from hyperliquid.utils.error import ClientError, ServerError

from ..errors import ExchangeError
from .environment import Environment, api_url

logger = logging.getLogger(__name__)


class HyperliquidClient:
    """
    Thin read-only wrapper around the official hyperliquid-python-sdk Info client.

    Only account state (clearinghouse state) is needed here; order placement
    and other signed actions live in `HyperliquidExecutionClient`.
    """

    def __init__(self, environment: Environment, timeout: float | None = None) -> None:
        self.environment = Environment(environment)
        self.base_url = api_url(self.environment)
        # HTTP only, no websocket.
        self.info = Info(self.base_url, skip_ws=True, timeout=timeout)

    def fetch_clearinghouse_state(self, address: str) -> dict[str, Any]:
        """Positions, margin summary and withdrawable balance for one address."""
        try:
            state = self.info.user_state(address)
        except ClientError as exc:
            logger.error("[HyperliquidClient] user_state %s failed: %s", address, exc.error_message)
            raise ExchangeError(
                f"Failed to fetch clearinghouse state for {address}",
                response=exc.error_data or exc.error_message,
            ) from exc
        except ServerError as exc:
            logger.error("[HyperliquidClient] user_state %s server error: %s", address, exc.message)
            raise ExchangeError(
                f"Failed to fetch clearinghouse state for {address}",
                response=exc.message,
            ) from exc

        logger.info("[HyperliquidClient] fetched clearinghouse state for %s on %s", address, self.environment)
        return state
