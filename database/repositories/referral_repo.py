"""Referral repository for database operations."""

from typing import Optional, List
from datetime import datetime

from database.connection import Database
from database.models import Referral
from config.constants import (
    REFERRAL_CLICKED,
    REFERRAL_REGISTERED,
    REFERRAL_ORDERED,
    REFERRAL_APPROVED,
)
from utils.short_id import generate_document_id

# Status -> timestamp column stamped when a referral enters it
STATUS_TIMESTAMPS = {
    REFERRAL_CLICKED: "clicked_at",
    REFERRAL_REGISTERED: "registered_at",
    REFERRAL_ORDERED: "ordered_at",
    REFERRAL_APPROVED: "approved_at",
}


class ReferralRepository:
    """Repository for referral journey operations."""

    def __init__(self, db: Database):
        self.db = db

    async def create(
        self,
        referral_code: str,
        referrer_id: str,
        status: str,
        visitor_id: Optional[str] = None,
        referred_user_id: Optional[str] = None,
        referred_user_email: Optional[str] = None,
        referred_user_name: Optional[str] = None,
        order_id: Optional[str] = None,
        order_total: Optional[float] = None,
        commission_amount: Optional[float] = None,
    ) -> Referral:
        """Create a new referral record in the given status."""
        now = datetime.utcnow()
        stamps = {column: None for column in STATUS_TIMESTAMPS.values()}
        if status in STATUS_TIMESTAMPS:
            stamps[STATUS_TIMESTAMPS[status]] = now

        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                """
                INSERT INTO affiliate_referrals
                (id, referral_code, referrer_id, status, visitor_id,
                 referred_user_id, referred_user_email, referred_user_name,
                 order_id, order_total, commission_amount,
                 clicked_at, registered_at, ordered_at, approved_at,
                 created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $16)
                RETURNING *
                """,
                generate_document_id(), referral_code, referrer_id, status, visitor_id,
                referred_user_id, referred_user_email, referred_user_name,
                order_id, order_total, commission_amount,
                stamps["clicked_at"], stamps["registered_at"],
                stamps["ordered_at"], stamps["approved_at"],
                now,
            )
            return Referral.from_row(row)
        finally:
            await self.db.release_connection(conn)

    async def get_by_code_and_visitor(
        self,
        referral_code: str,
        visitor_id: str,
    ) -> Optional[Referral]:
        """Find an earlier click of this visitor on this referral code."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                """
                SELECT * FROM affiliate_referrals
                WHERE referral_code = $1 AND visitor_id = $2
                ORDER BY created_at DESC
                LIMIT 1
                """,
                referral_code, visitor_id,
            )
            if row:
                return Referral.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_latest_by_code(
        self,
        referral_code: str,
        status: Optional[str] = None,
        referred_user_id: Optional[str] = None,
    ) -> Optional[Referral]:
        """Most recent referral for a code, optionally narrowed by status or user."""
        query = "SELECT * FROM affiliate_referrals WHERE referral_code = $1"
        params = [referral_code]

        if status:
            params.append(status)
            query += f" AND status = ${len(params)}"
        if referred_user_id:
            params.append(referred_user_id)
            query += f" AND referred_user_id = ${len(params)}"

        query += " ORDER BY created_at DESC LIMIT 1"

        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(query, *params)
            if row:
                return Referral.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_latest_for_user(self, user_id: str) -> Optional[Referral]:
        """Most recent referral attributed to a registered user."""
        conn = await self.db.get_connection()
        try:
            row = await conn.fetchrow(
                """
                SELECT * FROM affiliate_referrals
                WHERE referred_user_id = $1
                ORDER BY created_at DESC
                LIMIT 1
                """,
                user_id,
            )
            if row:
                return Referral.from_row(row)
            return None
        finally:
            await self.db.release_connection(conn)

    async def get_by_affiliate(self, affiliate_id: str) -> List[Referral]:
        """Full referral snapshot for one affiliate, newest first."""
        conn = await self.db.get_connection()
        try:
            rows = await conn.fetch(
                """
                SELECT * FROM affiliate_referrals
                WHERE referrer_id = $1
                ORDER BY created_at DESC
                """,
                affiliate_id,
            )
            return [Referral.from_row(row) for row in rows]
        finally:
            await self.db.release_connection(conn)

    async def mark_registered(
        self,
        referral_id: str,
        user_id: str,
        email: str,
        name: str,
    ) -> None:
        """Attach a newly registered user to a clicked referral."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliate_referrals
                SET referred_user_id = $1,
                    referred_user_email = $2,
                    referred_user_name = $3,
                    status = $4,
                    registered_at = $5,
                    updated_at = $5
                WHERE id = $6
                """,
                user_id, email, name, REFERRAL_REGISTERED, now, referral_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def mark_ordered(
        self,
        referral_id: str,
        user_id: str,
        order_id: str,
        order_total: float,
        commission_amount: float,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        """Record the referred user's order on the referral."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            await conn.execute(
                """
                UPDATE affiliate_referrals
                SET order_id = $1,
                    order_total = $2,
                    commission_amount = $3,
                    status = $4,
                    referred_user_id = $5,
                    referred_user_email = COALESCE($6, referred_user_email),
                    referred_user_name = COALESCE($7, referred_user_name),
                    ordered_at = $8,
                    updated_at = $8
                WHERE id = $9
                """,
                order_id, order_total, commission_amount, REFERRAL_ORDERED,
                user_id, email, name, now, referral_id,
            )
        finally:
            await self.db.release_connection(conn)

    async def update_status(self, referral_id: str, status: str) -> None:
        """Move a referral to a new status (approval/rejection propagation)."""
        now = datetime.utcnow()
        conn = await self.db.get_connection()
        try:
            if status == REFERRAL_APPROVED:
                await conn.execute(
                    """
                    UPDATE affiliate_referrals
                    SET status = $1, approved_at = $2, updated_at = $2
                    WHERE id = $3
                    """,
                    status, now, referral_id,
                )
            else:
                await conn.execute(
                    "UPDATE affiliate_referrals SET status = $1, updated_at = $2 WHERE id = $3",
                    status, now, referral_id,
                )
        finally:
            await self.db.release_connection(conn)
