"""Input validation utilities."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

REFERRAL_CODE_PATTERN = re.compile(r"^[\w-]{4,64}$")


def validate_amount(
    value: Any,
    min_val: float = 0,
    max_val: float = 100_000_000,
) -> Optional[float]:
    """
    Validate and sanitize a monetary amount.

    Args:
        value: Number or numeric text
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Validated amount or None if invalid
    """
    if isinstance(value, bool):
        return None
    try:
        # Use Decimal for precision
        amount = Decimal(str(value).strip())

        if not amount.is_finite():
            return None
        if amount < Decimal(str(min_val)):
            return None
        if amount > Decimal(str(max_val)):
            return None

        return float(amount)

    except (InvalidOperation, ValueError):
        return None


def validate_percentage(value: Any, min_val: float = 0, max_val: float = 100) -> Optional[float]:
    """
    Validate percentage input.

    Args:
        value: Number or numeric text
        min_val: Minimum percentage
        max_val: Maximum percentage

    Returns:
        Validated percentage or None if invalid
    """
    return validate_amount(value, min_val=min_val, max_val=max_val)


def validate_referral_code(code: Optional[str]) -> Optional[str]:
    """
    Validate a referral code taken from a link.

    Returns:
        Stripped code or None if malformed
    """
    if not code:
        return None
    code = code.strip()
    if not REFERRAL_CODE_PATTERN.match(code):
        return None
    return code
