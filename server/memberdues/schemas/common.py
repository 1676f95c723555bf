from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

MONTH_PATTERN = r"^\d{4}-\d{2}$"
_MONTH_RE = re.compile(MONTH_PATTERN)


def validate_month_key(value: str) -> str:
    if not _MONTH_RE.match(value or ""):
        raise ValueError("Month must use the YYYY-MM format")
    month_number = int(value[5:7])
    if not 1 <= month_number <= 12:
        raise ValueError("Month number must be between 01 and 12")
    return value


def money_to_float(value: Any) -> Any:
    """Money is stored as Decimal; API payloads carry plain numbers."""
    if isinstance(value, Decimal):
        return float(value)
    return value
