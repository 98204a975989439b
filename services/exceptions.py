"""Affiliate program errors raised to admin and checkout callers."""


class AffiliateError(Exception):
    """Base error for affiliate program operations."""


class AffiliateNotFoundError(AffiliateError):
    """No affiliate exists for the given id or referral code."""


class CommissionNotFoundError(AffiliateError):
    """No commission exists for the given id."""


class PayoutNotFoundError(AffiliateError):
    """No payout exists for the given id."""


class InvalidStatusTransitionError(AffiliateError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, kind: str, current: str, requested: str):
        self.kind = kind
        self.current = current
        self.requested = requested
        super().__init__(f"{kind} cannot move from '{current}' to '{requested}'")


class PayoutRequestError(AffiliateError):
    """Payout request rejected (below minimum or above available commission)."""
