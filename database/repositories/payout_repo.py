"""Payout repository for database operations."""

from typing import Optional, List
from datetime import datetime
import json

from database.connection import Database, rows_affected
from database.models import Payout
from config.constants import (
    COMMISSION_APPROVED,
    PAYOUT_PENDING,
    PAYOUT_PROCESSING,
    PAYOUT_COMPLETED,
    PAYOUT_PAID,
    PAYOUT_REJECTED,
)
from utils.short_id import generate_document_id

# Status -> (timestamp column, admin column) stamped on transition
STATUS_STAMPS = {
    PAYOUT_PROCESSING: ("processed_at", "processed_by"),
    PAYOUT_COMPLETED: ("completed_at", "completed_by"),
    PAYOUT_PAID: ("paid_at", "paid_by"),
    PAYOUT_REJECTED: ("rejected_at", "rejected_by"),
}


class PayoutRepository:
    """Repository for affiliate payout operations."""

    def __init__(self, db: Database):
        self.db = db

    async def create_within_balance(
        self,
        affiliate_id: str,
        amount: float,
        method: str,
        bank_info: Optional[dict] = None,
        notes: Optional[str] = None,
    ) -> Optional[Payout]:
        """
        Create a pending payout if the approved balance still covers it.

        The balance (approved commissions minus every non-rejected payout)
        is rechecked and the payout inserted in one transaction holding a
        per-affiliate advisory lock, so concurrent requests are serialized.

        Returns:
            The payout, or None if the balance is too low
        """
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            async with conn.transaction():
                await conn.execute(
                    "SELECT pg_advisory_xact_lock(hashtext($1))",
                    affiliate_id,
                )
                approved = await conn.fetchval(
                    """
                    SELECT COALESCE(SUM(commission_amount), 0) FROM affiliate_commissions
                    WHERE affiliate_id = $1 AND status = $2
                    """,
                    affiliate_id, COMMISSION_APPROVED,
                )
                claimed = await conn.fetchval(
                    """
                    SELECT COALESCE(SUM(amount), 0) FROM affiliate_payouts
                    WHERE affiliate_id = $1 AND status <> $2
                    """,
                    affiliate_id, PAYOUT_REJECTED,
                )
                if float(approved) - float(claimed) < amount:
                    return None

                row = await conn.fetchrow(
                    """
                    INSERT INTO affiliate_payouts
                    (id, affiliate_id, amount, method, status, bank_info, notes,
                     requested_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $8)
                    RETURNING *
                    """,
                    generate_document_id(), affiliate_id, amount, method, PAYOUT_PENDING,
                    json.dumps(bank_info) if bank_info else None, notes, now,
                )
                return Payout.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def get_by_id(self, payout_id: str) -> Optional[Payout]:
        """Get payout by ID."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                "SELECT * FROM affiliate_payouts WHERE id = $1",
                payout_id,
            )
            if row:
                return Payout.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_by_affiliate(self, affiliate_id: str) -> List[Payout]:
        """Payout history for one affiliate, newest first."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch(
                """
                SELECT * FROM affiliate_payouts
                WHERE affiliate_id = $1
                ORDER BY requested_at DESC
                """,
                affiliate_id,
            )
            return [Payout.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def get_all(self) -> List[Payout]:
        """All payouts (admin), newest first."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch("SELECT * FROM affiliate_payouts ORDER BY requested_at DESC")
            return [Payout.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def update_status(
        self,
        payout_id: str,
        status: str,
        admin_id: str,
        expected_status: str,
        notes: Optional[str] = None,
    ) -> bool:
        """
        Move payout from expected_status to a new status, stamping who/when.

        Returns:
            False if the payout was no longer in expected_status
        """
        if status not in STATUS_STAMPS:
            raise ValueError(f"Unknown payout status: {status}")

        at_column, by_column = STATUS_STAMPS[status]
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            if status == PAYOUT_PAID:
                # A payout marked paid is also complete
                result = await conn.execute(
                    f"""
                    UPDATE affiliate_payouts
                    SET status = $1, notes = COALESCE($2, notes), {at_column} = $3, {by_column} = $4,
                        completed_at = COALESCE(completed_at, $3), updated_at = $3
                    WHERE id = $5 AND status = $6
                    """,
                    status, notes, now, admin_id, payout_id, expected_status,
                )
            else:
                result = await conn.execute(
                    f"""
                    UPDATE affiliate_payouts
                    SET status = $1, notes = COALESCE($2, notes), {at_column} = $3, {by_column} = $4,
                        updated_at = $3
                    WHERE id = $5 AND status = $6
                    """,
                    status, notes, now, admin_id, payout_id, expected_status,
                )
            return rows_affected(result) > 0
        finally:
            await self.db.release_connection(conn)
