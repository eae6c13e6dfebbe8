"""
Order status parsing and order reference extraction.

Hyperliquid answers an order batch with
`{"status": "ok", "response": {"type": "order", "data": {"statuses": [...]}}}`
where each status is `{"resting": {...}}`, `{"filled": {...}}` or
`{"error": "..."}`. The parser turns that into a list of tagged variants so the
rest of the code never probes raw dicts.
"""

import time
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Resting:
    oid: int | None
    cloid: str | None = None

    @property
    def ref(self) -> str | None:
        return _pick_ref(self.cloid, self.oid)


@dataclass(frozen=True)
class Filled:
    oid: int | None
    cloid: str | None = None
    total_sz: str | None = None
    avg_px: str | None = None

    @property
    def ref(self) -> str | None:
        return _pick_ref(self.cloid, self.oid)


@dataclass(frozen=True)
class Rejected:
    error: str

    @property
    def ref(self) -> None:
        return None


OrderStatus = Union[Resting, Filled, Rejected]


def _pick_ref(cloid: str | None, oid: int | None) -> str | None:
    if cloid is not None:
        return str(cloid)
    if oid is not None:
        return str(oid)
    return None


def _statuses(response: Any) -> list[Any]:
    if not isinstance(response, dict):
        return []
    inner = response.get("response")
    if not isinstance(inner, dict):
        return []
    data = inner.get("data")
    if not isinstance(data, dict):
        return []
    statuses = data.get("statuses")
    return statuses if isinstance(statuses, list) else []


def _parse_status(entry: Any) -> OrderStatus | None:
    if not isinstance(entry, dict):
        return None

    resting = entry.get("resting")
    if isinstance(resting, dict):
        status = Resting(oid=resting.get("oid"), cloid=resting.get("cloid"))
        if status.ref is not None:
            return status

    filled = entry.get("filled")
    if isinstance(filled, dict):
        return Filled(
            oid=filled.get("oid"),
            cloid=filled.get("cloid"),
            total_sz=filled.get("totalSz"),
            avg_px=filled.get("avgPx"),
        )

    if isinstance(resting, dict):
        return Resting(oid=resting.get("oid"), cloid=resting.get("cloid"))

    if "error" in entry:
        return Rejected(error=str(entry["error"]))
    return None


def parse_statuses(response: Any) -> list[OrderStatus]:
    """Parse every recognizable status entry; unknown shapes are skipped, never raised."""
    parsed = (_parse_status(entry) for entry in _statuses(response))
    return [status for status in parsed if status is not None]


def rejected_errors(response: Any) -> list[str]:
    return [status.error for status in parse_statuses(response) if isinstance(status, Rejected)]


def extract_order_ref(response: Any) -> str | None:
    """First client order id (or else exchange order id) found, scanning statuses in order."""
    for status in parse_statuses(response):
        ref = status.ref
        if ref is not None:
            return ref
    return None


def fallback_order_ref(symbol: str, now_ms: int | None = None) -> str:
    """Synthetic reference used when the exchange response carries no id."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{symbol}-{now_ms}"
