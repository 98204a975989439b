"""Commission repository for database operations."""

from typing import Optional, List
from datetime import datetime

from database.connection import Database, rows_affected
from database.models import Commission
from config.constants import (
    COMMISSION_PENDING,
    COMMISSION_APPROVED,
    COMMISSION_REJECTED,
    COMMISSION_PAID,
)
from utils.short_id import generate_document_id


class CommissionRepository:
    """Repository for affiliate commission operations."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        affiliate_id: str,
        order_id: str,
        order_total: float,
        commission_amount: float,
        referral_id: Optional[str] = None,
    ) -> Commission:
        """Create a pending commission record."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                """
                INSERT INTO affiliate_commissions
                (id, affiliate_id, referral_id, order_id, order_total,
                 commission_amount, status, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $8)
                RETURNING *
                """,
                generate_document_id(), affiliate_id, referral_id, order_id,
                order_total, commission_amount, COMMISSION_PENDING, now,
            )
            return Commission.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def get_by_id(self, commission_id: str) -> Optional[Commission]:
        """Get commission by ID."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM affiliate_commissions WHERE id = $1",
                commission_id,
            )
            if row:
                return Commission.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_by_affiliate(self, affiliate_id: str) -> List[Commission]:
        """Full commission snapshot for one affiliate, newest first."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch(
                """
                SELECT * FROM affiliate_commissions
                WHERE affiliate_id = $1
                ORDER BY created_at DESC
                """,
                affiliate_id,
            )
            return [Commission.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def get_by_status(self, status: str) -> List[Commission]:
        """All commissions in a status (admin review queues)."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch(
                """
                SELECT * FROM affiliate_commissions
                WHERE status = $1
                ORDER BY created_at ASC
                """,
                status,
            )
            return [Commission.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def link_referral(self, commission_id: str, referral_id: str) -> None:
        """Attach the referral that produced this commission."""
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                "UPDATE affiliate_commissions SET referral_id = $1, updated_at = $2 WHERE id = $3",
                referral_id, datetime.utcnow(), commission_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def approve(self, commission_id: str, admin_id: str) -> bool:
        """
        Mark a pending commission approved.

        Returns:
            False if the commission was no longer pending
        """
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            result = await conn.execute(
                """
                UPDATE affiliate_commissions
                SET status = $1, approved_by = $2, approved_at = $3, updated_at = $3
                WHERE id = $4 AND status = $5
                """,
                COMMISSION_APPROVED, admin_id, now, commission_id, COMMISSION_PENDING,
            )
            return rows_affected(result) > 0
        finally:
            await self.db.release_connection(conn)

    async def reject(self, commission_id: str, admin_id: str, reason: str) -> bool:
        """Mark a pending commission rejected with the admin's reason."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            result = await conn.execute(
                """
                UPDATE affiliate_commissions
                SET status = $1, rejected_by = $2, rejected_at = $3,
                    notes = $4, updated_at = $3
                WHERE id = $5 AND status = $6
                """,
                COMMISSION_REJECTED, admin_id, now, reason, commission_id, COMMISSION_PENDING,
            )
            return rows_affected(result) > 0
        finally:
            await self.db.release_connection(conn)

    async def mark_paid(self, commission_id: str) -> bool:
        """Mark an approved commission paid out."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            result = await conn.execute(
                """
                UPDATE affiliate_commissions
                SET status = $1, paid_at = $2, updated_at = $2
                WHERE id = $3 AND status = $4
                """,
                COMMISSION_PAID, now, commission_id, COMMISSION_APPROVED,
            )
            return rows_affected(result) > 0
        finally:
            await self.db.release_connection(conn)
