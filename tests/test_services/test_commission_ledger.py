"""Tests for the affiliate totals reconciliation."""

from datetime import datetime

import pytest

from services.commission_ledger import (
    DisplayTotals,
    compute_affiliate_totals,
    conversion_rate,
    derive_followers,
)


class TestCommissionTotals:
    """Tests for commission partitioning by status."""

    def test_totals_by_status(self, make_affiliate, make_commission):
        """Test pending, approved and paid amounts are summed separately."""
        commissions = [
            make_commission("pending", 100),
            make_commission("approved", 200),
            make_commission("paid", 50),
        ]

        totals = compute_affiliate_totals(make_affiliate(), [], commissions)

        assert totals.pending_total == 100
        assert totals.approved_total == 200
        assert totals.paid_total == 50
        assert totals.total_commission == 350

    def test_rejected_commissions_excluded(self, make_affiliate, make_commission):
        """Test rejected commissions count toward no bucket."""
        commissions = [
            make_commission("rejected", 999),
            make_commission("approved", 10),
        ]

        totals = compute_affiliate_totals(make_affiliate(), [], commissions)

        assert totals.total_commission == 10
        assert totals.pending_total == 0

    def test_empty_snapshot(self, make_affiliate):
        """Test an affiliate with no activity shows zeros."""
        totals = compute_affiliate_totals(make_affiliate(), [], [])

        assert totals == DisplayTotals(
            display_clicks=0,
            display_referrals=0,
            pending_total=0.0,
            approved_total=0.0,
            paid_total=0.0,
            total_commission=0.0,
        )

    def test_total_ignores_stored_money_totals(self, make_affiliate, make_commission):
        """Test stored commission totals do not leak into the display."""
        affiliate = make_affiliate(total_commission=5000, pending_commission=4000)

        totals = compute_affiliate_totals(affiliate, [], [make_commission("pending", 100)])

        assert totals.total_commission == 100
        assert totals.pending_total == 100

    def test_available_commission_is_approved_only(self, make_affiliate, make_commission):
        """Test only approved commissions are withdrawable."""
        commissions = [
            make_commission("pending", 100),
            make_commission("approved", 200),
            make_commission("paid", 50),
        ]

        totals = compute_affiliate_totals(make_affiliate(), [], commissions)

        assert totals.available_commission == 200


class TestReferralCounts:
    """Tests for click and referral counting."""

    def test_counts_from_statuses(self, make_affiliate, make_referral):
        """Test every status from click onward counts as a click."""
        referrals = [
            make_referral("clicked"),
            make_referral("registered"),
            make_referral("ordered"),
            make_referral("approved"),
        ]
        affiliate = make_affiliate(total_clicks=1, total_referrals=0)

        totals = compute_affiliate_totals(affiliate, referrals, [])

        assert totals.actual_clicks == 4
        assert totals.actual_referrals == 3
        assert totals.display_clicks == 4
        assert totals.display_referrals == 3

    def test_stored_counters_act_as_floor(self, make_affiliate, make_referral):
        """Test display never drops below the stored counters."""
        affiliate = make_affiliate(total_clicks=10, total_referrals=7)

        totals = compute_affiliate_totals(affiliate, [make_referral("clicked")], [])

        assert totals.actual_clicks == 1
        assert totals.display_clicks == 10
        assert totals.display_referrals == 7

    def test_rejected_and_purchased_not_counted(self, make_affiliate, make_referral):
        """Test rejected and purchased referrals are neither clicks nor referrals."""
        referrals = [make_referral("rejected"), make_referral("purchased")]

        totals = compute_affiliate_totals(make_affiliate(), referrals, [])

        assert totals.actual_clicks == 0
        assert totals.actual_referrals == 0

    def test_referrals_never_exceed_clicks(self, make_affiliate, make_referral):
        """Test event-derived referrals are bounded by event-derived clicks."""
        statuses = ["clicked", "registered", "ordered", "approved", "rejected", "registered"]
        referrals = [make_referral(s, id=f"r{i}") for i, s in enumerate(statuses)]

        totals = compute_affiliate_totals(make_affiliate(), referrals, [])

        assert totals.actual_referrals <= totals.actual_clicks

    def test_pure_and_repeatable(self, make_affiliate, make_referral, make_commission):
        """Test identical snapshots give identical totals without touching inputs."""
        affiliate = make_affiliate(total_clicks=2)
        referrals = [make_referral("clicked"), make_referral("ordered")]
        commissions = [make_commission("pending", 187)]

        first = compute_affiliate_totals(affiliate, referrals, commissions)
        second = compute_affiliate_totals(affiliate, referrals, commissions)

        assert first == second
        assert affiliate.total_clicks == 2
        assert referrals[0].status == "clicked"


class TestConversionRate:
    """Tests for conversion_rate."""

    def test_conversion_rate_one_decimal(self):
        """Test 1 of 3 clicks converting gives 33.3."""
        assert conversion_rate(3, 1) == 33.3

    def test_conversion_rate_without_clicks(self):
        """Test zero clicks gives 0.0 instead of dividing by zero."""
        assert conversion_rate(0, 0) == 0.0

    def test_conversion_rate_full(self):
        """Test every click converting gives 100.0."""
        assert conversion_rate(4, 4) == 100.0


class TestDeriveFollowers:
    """Tests for derive_followers."""

    def test_only_converted_users_with_ids(self, make_referral):
        """Test clicks and anonymous referrals are not followers."""
        referrals = [
            make_referral("clicked", visitor_id="v1"),
            make_referral("registered"),
            make_referral(
                "registered",
                referred_user_id="u2",
                referred_user_name="Sari",
                referred_user_email="sari@example.com",
                registered_at=datetime(2024, 2, 1),
            ),
        ]

        followers = derive_followers(referrals)

        assert len(followers) == 1
        assert followers[0].user_id == "u2"
        assert followers[0].name == "Sari"
        assert followers[0].registered_at == datetime(2024, 2, 1)
        assert followers[0].total_orders == 0

    def test_ordered_follower_has_one_order(self, make_referral):
        """Test ordered referrals show one order."""
        followers = derive_followers([make_referral("ordered", referred_user_id="u3")])

        assert followers[0].total_orders == 1

    def test_registered_at_falls_back_to_created_at(self, make_referral):
        """Test followers without a registration stamp use the creation time."""
        followers = derive_followers([make_referral("purchased", referred_user_id="u4")])

        assert followers[0].registered_at == datetime(2024, 1, 1, 12, 0, 0)
