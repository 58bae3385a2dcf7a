"""Input Sanitization — coerce untrusted record fields into safe primitives.

Invariants:
    - All functions are PURE: no IO, never raise
    - coerce_amount returns None for anything that is not a finite integral number
      with magnitude <= MAX_STORED_VALUE
    - parse_timestamp always returns an aware datetime (naive input is assumed UTC) or None

Design Decisions:
    - Fallback-returning helpers for record parsing: one corrupt field must not
      abort a full scan (ADR: audit pipeline is total)
    - coerce_amount is strict where the others are lenient: the ledger must reject
      what the scan would merely normalize
"""

import math
import sys
from datetime import datetime, timezone
from typing import Any

# users.coins / users.xp are 32-bit INTEGER columns
MAX_STORED_VALUE = 2**31 - 1


def sanitize_number(
    value: Any, fallback: float = 0,
    minimum: float | None = None, maximum: float | None = None,
) -> float:
    """Coerce to a finite number, falling back and clamping as requested."""
    try:
        number = float(value)
    except OverflowError:
        # ints beyond float range saturate instead of reading as the fallback
        number = sys.float_info.max if value > 0 else -sys.float_info.max
    except (TypeError, ValueError):
        number = fallback
    if value is None or isinstance(value, bool) or not math.isfinite(number):
        number = fallback
    if minimum is not None:
        number = max(minimum, number)
    if maximum is not None:
        number = min(maximum, number)
    return number


def sanitize_int(
    value: Any, fallback: int = 0, minimum: int | None = None,
) -> int:
    """Integer variant of sanitize_number (truncates toward zero)."""
    return int(sanitize_number(value, fallback, minimum))


def sanitize_string(value: Any, fallback: str = "") -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return fallback
    return str(value)


def coerce_amount(value: Any) -> int | None:
    """Ledger delta: int, integral float or numeric string within the stored range.

    Anything else, including magnitudes a balance column cannot hold, is None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return _within_storage(value)
    if isinstance(value, str):
        value = value.strip()
        try:
            return _within_storage(int(value))
        except ValueError:
            pass
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return _within_storage(int(number))


def _within_storage(amount: int) -> int | None:
    return amount if abs(amount) <= MAX_STORED_VALUE else None


def parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 string or datetime → aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
