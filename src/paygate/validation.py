"""Validation predicates shared by every gateway operation.

All predicates are pure: they never raise and never touch the store.
Callers decide which error to raise when a predicate fails.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

ONE_DAY = timedelta(days=1)

# Largest magnitude a double can hold; anything beyond is not a usable number.
MAX_MAGNITUDE = Decimal("1.7976931348623157e308")


def today_utc() -> date:
    """Return the current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a number or numeric string to a finite Decimal.

    Returns None for anything that is not a finite number, including
    booleans, None, NaN, the infinities and magnitudes beyond
    MAX_MAGNITUDE.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite() or abs(number) > MAX_MAGNITUDE:
        return None
    return number


def is_number(value: Any) -> bool:
    """True iff value coerces to a finite number strictly greater than 0."""
    number = to_decimal(value)
    return number is not None and number > 0


def is_empty(value: Any) -> bool:
    """True iff value is falsy, not a string, or only whitespace."""
    if not value or not isinstance(value, str):
        return True
    return len(value.strip()) == 0


def as_record_id(value: Any) -> Optional[int]:
    """Return value as a positive integral record id, or None."""
    number = to_decimal(value)
    if number is None or number <= 0:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def validate_payment_ids(payment_ids: Any, strict: bool = True) -> bool:
    """Check a caller-supplied list of payment ids.

    In strict mode the list is rejected as soon as one entry fails
    is_number(). With strict=False every list is accepted, matching the
    legacy gateway whose per-element check never reported a failure.
    """
    if not isinstance(payment_ids, (list, tuple)):
        return False
    if not strict:
        return True
    for payment_id in payment_ids:
        if not is_number(payment_id):
            return False
    return True


def validate_payout_date(
    last_payout: Optional[date],
    today: Optional[date] = None,
) -> bool:
    """True iff a full calendar day has passed since last_payout.

    None means the shop has never been paid out and always passes.
    """
    if last_payout is None:
        return True
    if today is None:
        today = today_utc()
    return today >= last_payout + ONE_DAY
