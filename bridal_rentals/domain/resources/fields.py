"""Coercion helpers for the loosely typed values sent by the admin UI."""

import re
from datetime import datetime, timezone
from typing import Any

_TZ_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")
# "2025-06-12 10:00" is sent by some forms instead of the ISO "T"
_SPACE_SEPARATOR = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+(?=\d)")


def has_timezone(value: str) -> bool:
    _, _, time_part = value.partition("T")
    return bool(time_part) and bool(_TZ_SUFFIX.search(time_part))


def with_timezone(value: str) -> str:
    """Append a UTC designator to a date-time string that lacks one."""
    value = _SPACE_SEPARATOR.sub(r"\1T", value.strip())
    if "T" not in value:
        value = f"{value}T00:00"
    if has_timezone(value):
        return value
    return f"{value}Z"


def parse_datetime(value: Any) -> datetime | None:
    """Parse an API date value into a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(with_timezone(value))
    else:
        raise ValueError(f"Not a date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value).strip())
