import logging
import math
from decimal import Decimal

import requests

from ..errors import ConfigurationError, PriceUnavailableError
from .environment import Environment

logger = logging.getLogger(__name__)


def base_asset(symbol: str) -> str:
    """`BTC-USD` -> `BTC`. A symbol without a dash is its own base asset."""
    return symbol.split("-")[0] or symbol


def format_price(value: float | int) -> str:
    """
    Render a mark price as a plain decimal string.

    50000.0 -> "50000", 0.00012 -> "0.00012" (no exponent, no trailing zeros).
    """
    text = format(Decimal(str(value)).normalize(), "f")
    return text


class MarketPriceResolver:
    """
    Looks up the current mark price for market orders.

    Calls `GET {base}/v1/hyperliquid/market-stats?symbol=<asset>` on the price
    gateway and expects `{"markPrice": <number|null>}`.
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float | None = 10.0,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.http = http or requests.Session()

    def resolve(self, symbol: str, environment: Environment) -> str:
        if not self.base_url:
            raise ConfigurationError("PRICE_GATEWAY_URL is not configured for price lookup.")

        coin = base_asset(symbol)
        url = f"{self.base_url}/v1/hyperliquid/market-stats"

        try:
            resp = self.http.get(url, params={"symbol": coin}, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("price gateway request failed for %s: %s", coin, exc)
            raise PriceUnavailableError(f"Failed to fetch market price for {coin} from gateway") from exc

        if not resp.ok:
            logger.error("price gateway returned %s for %s: %s", resp.status_code, coin, resp.text)
            raise PriceUnavailableError(f"Failed to fetch market price ({resp.status_code}) from gateway")

        try:
            stats = resp.json()
        except ValueError:
            stats = None

        mark = stats.get("markPrice") if isinstance(stats, dict) else None
        # bool is an int subclass; a JSON `true` is not a price.
        if isinstance(mark, bool) or not isinstance(mark, (int, float)):
            mark = None
        if mark is None or not math.isfinite(mark) or mark <= 0:
            logger.error("price gateway returned no usable mark for %s (%s) on %s", coin, stats, environment)
            raise PriceUnavailableError("Gateway did not return a valid mark price.")

        price = format_price(mark)
        logger.info("resolved mark price %s=%s", coin, price)
        return price
