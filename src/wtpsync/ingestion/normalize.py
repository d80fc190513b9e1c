"""Normalization helpers.

Centralizes defensive parsing of telemetry values. Every helper returns
``None`` when the value cannot be coerced, so callers can fall back to the
field default.
"""

from __future__ import annotations

import math
from typing import Any

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "n", "off"})


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value or value == "--":
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    return None


def safe_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text if text else None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def extract_record(payload: Any, readings_field: str) -> dict[str, Any] | None:
    """Return the first reading record of a telemetry envelope.

    The envelope is ``{"data": {<readings_field>: [<record>, ...]}}``. Only
    the first record is used; ``None`` means the shape is missing.
    """

    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    readings = data.get(readings_field)
    if not isinstance(readings, list) or not readings:
        return None
    record = readings[0]
    return record if isinstance(record, dict) else None
