"""Tests for the data freshness check."""

from datetime import date

import pytest

from return_maturity_audit.monitoring import assess_data_freshness


class TestAssessDataFreshness:
    """Test suite for assess_data_freshness."""

    def test_recent_data_is_not_settled(self):
        freshness = assess_data_freshness(date(2024, 3, 1), as_of=date(2024, 3, 11))
        assert freshness.days_since_latest == 10
        assert freshness.days_to_wait == 20
        assert not freshness.is_settled

    def test_days_to_wait_goes_negative(self):
        freshness = assess_data_freshness(date(2024, 3, 1), as_of=date(2024, 4, 10))
        assert freshness.days_since_latest == 40
        assert freshness.days_to_wait == -10
        assert freshness.is_settled

    def test_custom_settle_days(self):
        freshness = assess_data_freshness(
            date(2024, 3, 1), as_of=date(2024, 3, 8), settle_days=7
        )
        assert freshness.days_to_wait == 0
        assert freshness.is_settled

    def test_negative_settle_days_raises_error(self):
        with pytest.raises(ValueError, match="settle_days must be >= 0"):
            assess_data_freshness(date(2024, 3, 1), date(2024, 3, 2), settle_days=-1)
