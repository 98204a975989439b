"""Shared pytest fixtures for storefront affiliate tests.

Services are exercised against a mocked Database; model fixtures build the
dataclasses directly so reconciliation tests need no live store.
"""

import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from database.models import Affiliate, Commission, Referral, Payout


@pytest.fixture
def mock_db() -> MagicMock:
    """Create a mock database."""
    return MagicMock()


@pytest.fixture
def make_affiliate():
    """Factory for Affiliate records with zeroed counters."""
    def _make(**overrides) -> Affiliate:
        data = {
            "id": "user_0001",
            "user_id": "user_0001",
            "email": "budi@example.com",
            "display_name": "Budi",
            "referral_code": "BUDX7Q0001",
        }
        data.update(overrides)
        return Affiliate(**data)
    return _make


@pytest.fixture
def make_referral():
    """Factory for Referral records."""
    def _make(status: str, **overrides) -> Referral:
        data = {
            "id": f"ref_{status}",
            "referral_code": "BUDX7Q0001",
            "referrer_id": "user_0001",
            "status": status,
            "created_at": datetime(2024, 1, 1, 12, 0, 0),
        }
        data.update(overrides)
        return Referral(**data)
    return _make


@pytest.fixture
def make_commission():
    """Factory for Commission records."""
    def _make(status: str, amount: float, **overrides) -> Commission:
        data = {
            "id": f"com_{status}_{amount}",
            "affiliate_id": "user_0001",
            "order_id": f"order_{amount}",
            "commission_amount": amount,
            "status": status,
        }
        data.update(overrides)
        return Commission(**data)
    return _make


@pytest.fixture
def make_payout():
    """Factory for Payout records."""
    def _make(status: str, amount: float, **overrides) -> Payout:
        data = {
            "id": f"pay_{status}_{amount}",
            "affiliate_id": "user_0001",
            "amount": amount,
            "method": "Bank Transfer",
            "status": status,
        }
        data.update(overrides)
        return Payout(**data)
    return _make
