"""Singleton settings models (COD surcharge and affiliate program)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import json

from config.constants import (
    DEFAULT_SETTINGS_ID,
    DEFAULT_COD_SURCHARGE,
    DEFAULT_COD_DESCRIPTION,
    DEFAULT_COMMISSION_RATE,
    DEFAULT_MIN_PAYOUT_AMOUNT,
    DEFAULT_PAYOUT_METHODS,
    DEFAULT_TERMS,
)


@dataclass
class CODSettings:
    """Cash-on-delivery surcharge configuration."""

    id: str = DEFAULT_SETTINGS_ID
    surcharge_amount: float = DEFAULT_COD_SURCHARGE
    is_enabled: bool = True
    description: str = DEFAULT_COD_DESCRIPTION
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "CODSettings":
        """Create CODSettings from database row."""
        return cls(
            id=row["id"],
            surcharge_amount=float(row["surcharge_amount"]),
            is_enabled=bool(row["is_enabled"]),
            description=row["description"] or "",
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    def default(cls) -> "CODSettings":
        """Default settings stamped with the current time."""
        now = datetime.utcnow()
        return cls(created_at=now, updated_at=now)


@dataclass
class AffiliateSettings:
    """Affiliate program configuration."""

    id: str = DEFAULT_SETTINGS_ID
    default_commission_rate: float = DEFAULT_COMMISSION_RATE
    min_payout_amount: float = DEFAULT_MIN_PAYOUT_AMOUNT
    payout_methods: List[str] = field(default_factory=lambda: list(DEFAULT_PAYOUT_METHODS))
    terms_and_conditions: str = DEFAULT_TERMS
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "AffiliateSettings":
        """Create AffiliateSettings from database row."""
        methods = row["payout_methods"]
        if isinstance(methods, str):
            methods = json.loads(methods)
        return cls(
            id=row["id"],
            default_commission_rate=float(row["default_commission_rate"]),
            min_payout_amount=float(row["min_payout_amount"]),
            payout_methods=list(methods or []),
            terms_and_conditions=row["terms_and_conditions"] or "",
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    def default(cls) -> "AffiliateSettings":
        """Default settings stamped with the current time."""
        now = datetime.utcnow()
        return cls(created_at=now, updated_at=now)
