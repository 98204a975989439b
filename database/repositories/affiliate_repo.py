"""Affiliate repository for database operations."""

from typing import Optional, List
from datetime import datetime
import json

from database.connection import Database
from database.models import Affiliate


class AffiliateRepository:
    """Repository for affiliate operations."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        user_id: str,
        email: str,
        display_name: str,
        referral_code: str,
    ) -> Affiliate:
        """Create a new affiliate keyed by the owning user id."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                """
                INSERT INTO affiliates (id, user_id, email, display_name, referral_code)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                user_id, user_id, email, display_name, referral_code,
            )
            return Affiliate.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def get_by_id(self, affiliate_id: str) -> Optional[Affiliate]:
        """Get affiliate by ID."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM affiliates WHERE id = $1",
                affiliate_id,
            )
            if row:
                return Affiliate.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_by_referral_code(self, referral_code: str) -> Optional[Affiliate]:
        """Get affiliate by referral code."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM affiliates WHERE referral_code = $1 LIMIT 1",
                referral_code,
            )
            if row:
                return Affiliate.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_all(self) -> List[Affiliate]:
        """Get all affiliates (admin)."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch("SELECT * FROM affiliates ORDER BY created_at DESC")
            return [Affiliate.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def update_profile(self, affiliate_id: str, email: str, display_name: str) -> None:
        """Update contact details."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliates
                SET email = $1, display_name = $2, updated_at = $3
                WHERE id = $4
                """,
                email, display_name, datetime.utcnow(), affiliate_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def update_bank_info(self, affiliate_id: str, bank_info: dict) -> None:
        """Store payout bank details."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliates
                SET bank_info = $1, updated_at = $2
                WHERE id = $3
                """,
                json.dumps(bank_info), datetime.utcnow(), affiliate_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def increment_counters(
        self,
        affiliate_id: str,
        clicks: int = 0,
        referrals: int = 0,
    ) -> None:
        """Bump the denormalized click/referral counters."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliates
                SET total_clicks = total_clicks + $1,
                    total_referrals = total_referrals + $2,
                    updated_at = $3
                WHERE id = $4
                """,
                clicks, referrals, datetime.utcnow(), affiliate_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def adjust_commission_totals(
        self,
        affiliate_id: str,
        total: float = 0,
        pending: float = 0,
        paid: float = 0,
    ) -> None:
        """Apply deltas to the denormalized commission totals."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliates
                SET total_commission = total_commission + $1,
                    pending_commission = pending_commission + $2,
                    paid_commission = paid_commission + $3,
                    updated_at = $4
                WHERE id = $5
                """,
                total, pending, paid, datetime.utcnow(), affiliate_id,
            )
        finally:
            await self.db.release_connection(conn)
