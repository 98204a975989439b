"""Affiliate payout model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import json


@dataclass
class Payout:
    """Payout request raised by an affiliate."""

    id: str
    affiliate_id: str
    amount: float
    method: str
    status: str  # pending | processing | completed | paid | rejected
    bank_info: Optional[dict] = None
    notes: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "Payout":
        """Create Payout from database row."""
        bank_info = row["bank_info"]
        if isinstance(bank_info, str):
            bank_info = json.loads(bank_info)
        return cls(
            id=row["id"],
            affiliate_id=row["affiliate_id"],
            amount=float(row["amount"]),
            method=row["method"],
            status=row["status"],
            bank_info=bank_info,
            notes=row["notes"],
            requested_at=row["requested_at"],
            processed_at=row["processed_at"],
            processed_by=row["processed_by"],
            completed_at=row["completed_at"],
            completed_by=row["completed_by"],
            paid_at=row["paid_at"],
            paid_by=row["paid_by"],
            rejected_at=row["rejected_at"],
            rejected_by=row["rejected_by"],
            updated_at=row["updated_at"],
        )
