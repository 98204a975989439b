"""PostgreSQL database connection and initialization using asyncpg."""

import asyncpg
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class Database:
    """Async PostgreSQL database manager using connection pool."""

    def __init__(self, database_url: str, min_size: int = 2, max_size: int = 10):
        self.database_url = database_url
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    async def get_connection(self) -> asyncpg.Connection:
        """Get a connection from the pool."""
        if self._pool is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return await self._pool.acquire()

    async def release_connection(self, conn: asyncpg.Connection) -> None:
        """Release a connection back to the pool."""
        if self._pool:
            await self._pool.release(conn)

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def initialize(self) -> None:
        """Create connection pool and initialize database tables."""
        self._pool = await asyncpg.create_pool(
            self.database_url,
            min_size=self.min_size,
            max_size=self.max_size,
        )
        logger.info("Database connection pool created")

        await self._create_tables()
        logger.info("Database tables initialized")

    async def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        conn = await self.get_connection()
        try:
            # Affiliates (id is the owning user id)
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliates (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    email TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    referral_code TEXT UNIQUE NOT NULL,
                    total_clicks INTEGER DEFAULT 0,
                    total_referrals INTEGER DEFAULT 0,
                    total_commission NUMERIC DEFAULT 0,
                    pending_commission NUMERIC DEFAULT 0,
                    paid_commission NUMERIC DEFAULT 0,
                    bank_info TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Referral journeys
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_referrals (
                    id TEXT PRIMARY KEY,
                    referral_code TEXT NOT NULL,
                    referrer_id TEXT NOT NULL REFERENCES affiliates(id),
                    status TEXT NOT NULL,
                    visitor_id TEXT,
                    referred_user_id TEXT,
                    referred_user_email TEXT,
                    referred_user_name TEXT,
                    order_id TEXT,
                    order_total NUMERIC,
                    commission_amount NUMERIC,
                    clicked_at TIMESTAMP,
                    registered_at TIMESTAMP,
                    ordered_at TIMESTAMP,
                    approved_at TIMESTAMP,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Commissions
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_commissions (
                    id TEXT PRIMARY KEY,
                    affiliate_id TEXT NOT NULL REFERENCES affiliates(id),
                    referral_id TEXT,
                    order_id TEXT NOT NULL,
                    order_total NUMERIC DEFAULT 0,
                    commission_amount NUMERIC NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    approved_by TEXT,
                    approved_at TIMESTAMP,
                    rejected_by TEXT,
                    rejected_at TIMESTAMP,
                    paid_at TIMESTAMP,
                    notes TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Payout requests
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_payouts (
                    id TEXT PRIMARY KEY,
                    affiliate_id TEXT NOT NULL REFERENCES affiliates(id),
                    amount NUMERIC NOT NULL,
                    method TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    bank_info TEXT,
                    notes TEXT,
                    requested_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    processed_at TIMESTAMP,
                    processed_by TEXT,
                    completed_at TIMESTAMP,
                    completed_by TEXT,
                    paid_at TIMESTAMP,
                    paid_by TEXT,
                    rejected_at TIMESTAMP,
                    rejected_by TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Singleton settings documents
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS cod_settings (
                    id TEXT PRIMARY KEY,
                    surcharge_amount NUMERIC NOT NULL,
                    is_enabled BOOLEAN NOT NULL DEFAULT TRUE,
                    description TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            await conn.execute("""
                CREATE TABLE IF NOT EXISTS affiliate_settings (
                    id TEXT PRIMARY KEY,
                    default_commission_rate NUMERIC NOT NULL,
                    min_payout_amount NUMERIC NOT NULL,
                    payout_methods TEXT NOT NULL,
                    terms_and_conditions TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Create indexes
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_affiliates_referral_code ON affiliates(referral_code)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_referrals_referrer_id ON affiliate_referrals(referrer_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_referrals_code ON affiliate_referrals(referral_code)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_referrals_user ON affiliate_referrals(referred_user_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_commissions_affiliate_id ON affiliate_commissions(affiliate_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_commissions_status ON affiliate_commissions(status)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_payouts_affiliate_id ON affiliate_payouts(affiliate_id)")

        finally:
            await self.release_connection(conn)


def rows_affected(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 1'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0
