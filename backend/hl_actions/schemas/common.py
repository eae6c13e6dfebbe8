from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
# Hyperliquid client order ids are 128-bit: 0x + 32 hex chars.
CLOID_PATTERN = r"^0x[a-fA-F0-9]{32}$"


def _to_decimal_str(value: Any) -> Any:
    """
    Accept a JSON string or number and keep it as a decimal string.

    Numbers are converted with `str()` so 50000 stays "50000" and 0.1 stays
    "0.1". Anything that is not a finite decimal is rejected.
    """
    if isinstance(value, bool):
        raise ValueError("must be a decimal string or number")
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError("must be a decimal string or number")
    value = value.strip()
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError("must be a decimal string or number") from exc
    if not parsed.is_finite():
        raise ValueError("must be a finite number")
    return value


DecimalStr = Annotated[str, BeforeValidator(_to_decimal_str)]
