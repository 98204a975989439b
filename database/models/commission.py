"""Affiliate commission model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Commission:
    """Commission owed to an affiliate for a referred order."""

    id: str
    affiliate_id: str
    order_id: str
    commission_amount: float
    status: str  # pending | approved | paid | rejected
    referral_id: Optional[str] = None
    order_total: float = 0.0
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "Commission":
        """Create Commission from database row."""
        return cls(
            id=row["id"],
            affiliate_id=row["affiliate_id"],
            order_id=row["order_id"],
            commission_amount=float(row["commission_amount"]),
            status=row["status"],
            referral_id=row["referral_id"],
            order_total=float(row["order_total"] or 0),
            approved_by=row["approved_by"],
            approved_at=row["approved_at"],
            rejected_by=row["rejected_by"],
            rejected_at=row["rejected_at"],
            paid_at=row["paid_at"],
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
