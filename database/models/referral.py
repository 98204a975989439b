"""Referral model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Referral:
    """A visitor journey that started from an affiliate's link.

    Only the current status is stored: clicked -> registered -> ordered -> approved.
    """

    id: str
    referral_code: str
    referrer_id: str
    status: str
    visitor_id: Optional[str] = None
    referred_user_id: Optional[str] = None
    referred_user_email: Optional[str] = None
    referred_user_name: Optional[str] = None
    order_id: Optional[str] = None
    order_total: Optional[float] = None
    commission_amount: Optional[float] = None
    clicked_at: Optional[datetime] = None
    registered_at: Optional[datetime] = None
    ordered_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "Referral":
        """Create Referral from database row."""
        return cls(
            id=row["id"],
            referral_code=row["referral_code"],
            referrer_id=row["referrer_id"],
            status=row["status"],
            visitor_id=row["visitor_id"],
            referred_user_id=row["referred_user_id"],
            referred_user_email=row["referred_user_email"],
            referred_user_name=row["referred_user_name"],
            order_id=row["order_id"],
            order_total=float(row["order_total"]) if row["order_total"] is not None else None,
            commission_amount=float(row["commission_amount"]) if row["commission_amount"] is not None else None,
            clicked_at=row["clicked_at"],
            registered_at=row["registered_at"],
            ordered_at=row["ordered_at"],
            approved_at=row["approved_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass
class Follower:
    """Registered user brought in by an affiliate (derived from referrals)."""

    user_id: str
    name: Optional[str]
    email: Optional[str]
    registered_at: Optional[datetime]
    total_orders: int
