from __future__ import annotations

import re
from typing import Any


# Largest amount accepted for any peso field
MAX_MONEY = 999_999_999
MAX_COUNT = 1_000_000

_HOUR_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ValidationError(ValueError):
    """400-level input problem."""


def json_object(payload: Any) -> dict:
    """Request body as a dict; a missing body reads as empty."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


def string(payload: dict, key: str) -> str:
    """Read an optional string field; missing reads as ''."""
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def coerce_int(key: str, value: Any) -> int:
    """
    Strict integer coercion for JSON input.

    Accepts ints and plain digit strings; rejects bools, floats, decimals and
    scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def non_negative_int(
    payload: dict,
    key: str,
    *,
    required: bool = False,
    default: int = 0,
    maximum: int = MAX_COUNT,
) -> int:
    """Read a non-negative integer field from a JSON payload."""
    value = payload.get(key)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{key} is required")
        return default

    number = coerce_int(key, value)
    if number < 0:
        raise ValidationError(f"{key} cannot be negative")
    if number > maximum:
        raise ValidationError(f"{key} cannot exceed {maximum}")
    return number


def money(payload: dict, key: str, *, required: bool = False, default: int = 0) -> int:
    return non_negative_int(payload, key, required=required, default=default, maximum=MAX_MONEY)


def boolean(payload: dict, key: str, default: bool = False) -> bool:
    value = payload.get(key, default)
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{key} must be true or false")


def is_hour_of_day(value: Any) -> bool:
    return isinstance(value, str) and _HOUR_RE.match(value.strip()) is not None


def hour_of_day(payload: dict, key: str, default: str) -> str:
    """Read an ``HH:MM`` time-of-day field."""
    value = payload.get(key)
    if value is None or value == "":
        return default
    if not is_hour_of_day(value):
        raise ValidationError(f"{key} must be formatted as HH:MM")
    return value.strip()


def text(payload: dict, key: str, *, max_length: int | None = None) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{key} must be at most {max_length} characters")
    return value
