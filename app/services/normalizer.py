"""Data normalisation utilities: dates, comma-separated lists, lenient numbers."""

import math
from datetime import datetime
from typing import Any, List


def format_date(value: str | None) -> str:
    """Return *value* (an ISO date or datetime) formatted as ``DD/MM/YYYY``.

    Empty or unparseable values yield ``""``.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return ""
    return parsed.strftime("%d/%m/%Y")


def split_list(value: str | None) -> List[str]:
    """Split a comma-joined string, trimming entries and dropping empty ones.

    Order is preserved: ``" a, ,b "`` becomes ``["a", "b"]``.
    """
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def to_float(value: Any) -> float:
    """Lenient float conversion; anything non-numeric becomes ``0``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def to_int(value: Any) -> int:
    """Lenient integer conversion (``"3.7"`` → ``3``); anything non-numeric becomes ``0``."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def to_text(value: Any) -> str:
    """Render a scalar field as a string; ``None`` and ``""`` become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def to_list(value: Any) -> List[str]:
    """Coerce a multi-select (list) or comma-joined text field to a list of strings."""
    if isinstance(value, list):
        return [to_text(item) for item in value if item is not None]
    if isinstance(value, str):
        return split_list(value)
    if value is None:
        return []
    return [to_text(value)]
