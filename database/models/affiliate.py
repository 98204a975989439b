"""Affiliate model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import json


@dataclass
class Affiliate:
    """Affiliate program member.

    The stored counters and money totals are denormalized and may drift from
    the referral/commission log. They are advisory only.
    """

    id: str
    user_id: str
    email: str
    display_name: str
    referral_code: str
    total_clicks: int = 0
    total_referrals: int = 0
    total_commission: float = 0.0
    pending_commission: float = 0.0
    paid_commission: float = 0.0
    bank_info: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "Affiliate":
        """Create Affiliate from database row."""
        bank_info = row["bank_info"] if "bank_info" in row.keys() else None
        if isinstance(bank_info, str):
            bank_info = json.loads(bank_info)
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            email=row["email"],
            display_name=row["display_name"],
            referral_code=row["referral_code"],
            total_clicks=int(row["total_clicks"] or 0),
            total_referrals=int(row["total_referrals"] or 0),
            total_commission=float(row["total_commission"] or 0),
            pending_commission=float(row["pending_commission"] or 0),
            paid_commission=float(row["paid_commission"] or 0),
            bank_info=bank_info,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
