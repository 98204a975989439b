"""Tests for the affiliate and settings models.

Rows are plain dicts standing in for asyncpg records.
"""

import json
from datetime import datetime

import pytest

from database.models import (
    Affiliate,
    AffiliateSettings,
    CODSettings,
    Commission,
    Payout,
    Referral,
)

NOW = datetime(2024, 3, 1, 9, 30, 0)


class TestAffiliateModel:
    """Tests for Affiliate.from_row."""

    @pytest.fixture
    def row(self):
        return {
            "id": "user_0001",
            "user_id": "user_0001",
            "email": "budi@example.com",
            "display_name": "Budi",
            "referral_code": "BUDX7Q0001",
            "total_clicks": None,
            "total_referrals": 3,
            "total_commission": "350",
            "pending_commission": 100,
            "paid_commission": None,
            "bank_info": json.dumps({"bank": "BCA", "account": "123"}),
            "created_at": NOW,
            "updated_at": NOW,
        }

    def test_counters_default_to_zero(self, row):
        """Test missing counters read as zero."""
        affiliate = Affiliate.from_row(row)

        assert affiliate.total_clicks == 0
        assert affiliate.total_referrals == 3
        assert affiliate.paid_commission == 0.0

    def test_numeric_text_is_converted(self, row):
        """Test NUMERIC columns become floats."""
        affiliate = Affiliate.from_row(row)

        assert affiliate.total_commission == 350.0

    def test_bank_info_parsed(self, row):
        """Test JSON bank details are decoded."""
        affiliate = Affiliate.from_row(row)

        assert affiliate.bank_info == {"bank": "BCA", "account": "123"}


class TestReferralModel:
    """Tests for Referral.from_row."""

    def test_optional_amounts(self):
        """Test amounts stay None until the referral orders."""
        row = {
            "id": "ref_1",
            "referral_code": "BUDX7Q0001",
            "referrer_id": "user_0001",
            "status": "clicked",
            "visitor_id": "visitor_1",
            "referred_user_id": None,
            "referred_user_email": None,
            "referred_user_name": None,
            "order_id": None,
            "order_total": None,
            "commission_amount": None,
            "clicked_at": NOW,
            "registered_at": None,
            "ordered_at": None,
            "approved_at": None,
            "created_at": NOW,
            "updated_at": NOW,
        }

        referral = Referral.from_row(row)

        assert referral.status == "clicked"
        assert referral.order_total is None
        assert referral.commission_amount is None
        assert referral.clicked_at == NOW


class TestCommissionModel:
    """Tests for Commission.from_row."""

    def test_amounts_are_floats(self):
        """Test NUMERIC amounts become floats."""
        row = {
            "id": "com_1",
            "affiliate_id": "user_0001",
            "order_id": "order_1",
            "commission_amount": "187",
            "status": "pending",
            "referral_id": "ref_1",
            "order_total": "3750",
            "approved_by": None,
            "approved_at": None,
            "rejected_by": None,
            "rejected_at": None,
            "paid_at": None,
            "notes": None,
            "created_at": NOW,
            "updated_at": NOW,
        }

        commission = Commission.from_row(row)

        assert commission.commission_amount == 187.0
        assert commission.order_total == 3750.0


class TestPayoutModel:
    """Tests for Payout.from_row."""

    def test_bank_info_parsed(self):
        """Test JSON bank details are decoded."""
        row = {
            "id": "pay_1",
            "affiliate_id": "user_0001",
            "amount": 6000,
            "method": "Bank Transfer",
            "status": "pending",
            "bank_info": '{"currency": "IDR"}',
            "notes": None,
            "requested_at": NOW,
            "processed_at": None,
            "processed_by": None,
            "completed_at": None,
            "completed_by": None,
            "paid_at": None,
            "paid_by": None,
            "rejected_at": None,
            "rejected_by": None,
            "updated_at": NOW,
        }

        payout = Payout.from_row(row)

        assert payout.amount == 6000.0
        assert payout.bank_info == {"currency": "IDR"}


class TestSettingsModels:
    """Tests for the settings singletons."""

    def test_cod_defaults(self):
        """Test the hardcoded COD defaults."""
        cod_settings = CODSettings.default()

        assert cod_settings.id == "default"
        assert cod_settings.surcharge_amount == 250
        assert cod_settings.is_enabled is True
        assert cod_settings.description == "Biaya tambahan untuk pembayaran COD (Cash on Delivery)"
        assert cod_settings.created_at == cod_settings.updated_at

    def test_affiliate_defaults(self):
        """Test the hardcoded affiliate program defaults."""
        program_settings = AffiliateSettings.default()

        assert program_settings.default_commission_rate == 5
        assert program_settings.min_payout_amount == 5000
        assert program_settings.payout_methods == ["Bank Transfer"]

    def test_default_payout_methods_not_shared(self):
        """Test each default gets its own payout method list."""
        first = AffiliateSettings.default()
        first.payout_methods.append("E-Wallet")

        assert AffiliateSettings.default().payout_methods == ["Bank Transfer"]

    def test_affiliate_settings_from_row(self):
        """Test stored payout methods are decoded from JSON."""
        row = {
            "id": "default",
            "default_commission_rate": "7.5",
            "min_payout_amount": 10000,
            "payout_methods": '["Bank Transfer", "E-Wallet"]',
            "terms_and_conditions": None,
            "created_at": NOW,
            "updated_at": NOW,
        }

        program_settings = AffiliateSettings.from_row(row)

        assert program_settings.default_commission_rate == 7.5
        assert program_settings.payout_methods == ["Bank Transfer", "E-Wallet"]
        assert program_settings.terms_and_conditions == ""

    def test_cod_settings_from_row(self):
        """Test COD rows map onto the model."""
        row = {
            "id": "default",
            "surcharge_amount": "300",
            "is_enabled": False,
            "description": "Biaya COD",
            "created_at": NOW,
            "updated_at": NOW,
        }

        cod_settings = CODSettings.from_row(row)

        assert cod_settings.surcharge_amount == 300.0
        assert cod_settings.is_enabled is False
