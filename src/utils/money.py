from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


def to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    s = s.replace(",", "").replace("$", "")
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def to_float(value: Any) -> float:
    """Numeric coercion for ORM/JSON values; missing or unparseable values are 0.0."""
    d = to_decimal(value)
    if d is None or not d.is_finite():
        return 0.0
    return float(d)


def _quantize(d: Decimal, digits: int) -> Decimal:
    digits = max(0, int(digits))
    q = Decimal(1) if digits == 0 else Decimal("1").scaleb(-digits)
    return d.quantize(q, rounding=ROUND_HALF_UP)


def format_usd(value: Any, digits: int = 2, dash: str = "—") -> str:
    """
    USD formatter for tables and CLI output.

    - `None` -> em dash
    - numeric -> "$1,234.56" (or "$1,235" if digits=0)
    - non-numeric string -> returned as-is
    """
    d = to_decimal(value)
    if d is None:
        if value is None:
            return dash
        s = str(value).strip()
        return s if s else dash

    d = _quantize(d, digits)
    sign = "-" if d < 0 else ""
    d_abs = -d if d < 0 else d
    return f"{sign}${d_abs:,.{max(0, int(digits))}f}"


def format_percent(value: Any, digits: int = 2, dash: str = "—") -> str:
    d = to_decimal(value)
    if d is None:
        return dash
    return f"{_quantize(d, digits):.{max(0, int(digits))}f}%"
