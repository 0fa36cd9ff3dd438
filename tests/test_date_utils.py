"""
Tests for date utility functions.

This module tests month labels, the look-back window and the parsing of
the hidden pending-dates field.
"""

import pytest
from datetime import date

from nalanda_bot.date_utils import (
    MonthWindow,
    month_label,
    shift_month,
    months_to_review,
    parse_site_date,
    iso_to_site_date,
    site_month_label,
    dedupe,
    parse_pending_field,
    within_window,
)
from nalanda_bot.errors import PendingFieldParseError, DiscoveryReadFailure


class TestMonthHelpers:
    """Tests for month label and shifting."""

    def test_month_label_zero_padded(self):
        assert month_label(date(2025, 1, 17)) == "01/2025"
        assert month_label(date(2024, 12, 1)) == "12/2024"

    def test_shift_month_backwards_across_year(self):
        assert shift_month(2025, 1, -1) == (2024, 12)
        assert shift_month(2025, 2, -14) == (2023, 12)

    def test_shift_month_forwards_across_year(self):
        assert shift_month(2024, 12, 1) == (2025, 1)


class TestMonthsToReview:
    """Tests for months_to_review function."""

    def test_newest_first_with_mid_month_sample(self):
        """Test prior months are listed newest first, sampled on the 15th."""
        windows = months_to_review(2, date(2025, 2, 3))
        assert windows == [
            MonthWindow(label="01/2025", sample_date="15/01/2025"),
            MonthWindow(label="12/2024", sample_date="15/12/2024"),
        ]

    def test_excludes_current_month(self):
        windows = months_to_review(1, date(2025, 6, 30))
        assert [w.label for w in windows] == ["05/2025"]

    def test_count_matches_months_back(self):
        assert len(months_to_review(6, date(2025, 3, 10))) == 6

    def test_zero_months(self):
        assert months_to_review(0, date(2025, 3, 10)) == []

    def test_negative_months_rejected(self):
        with pytest.raises(ValueError):
            months_to_review(-1, date(2025, 3, 10))


class TestDateConversion:
    """Tests for DD/MM/YYYY and ISO conversions."""

    def test_iso_to_site_date(self):
        assert iso_to_site_date("2025-01-05") == "05/01/2025"

    def test_iso_to_site_date_invalid(self):
        with pytest.raises(ValueError):
            iso_to_site_date("2025-13-01")

    def test_parse_site_date(self):
        assert parse_site_date("17/01/2025") == date(2025, 1, 17)

    def test_site_month_label(self):
        assert site_month_label("17/01/2025") == "01/2025"

    def test_dedupe_keeps_first_seen_order(self):
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestParsePendingField:
    """Tests for parse_pending_field function."""

    def test_bracketed_list(self):
        """Test the usual bracket-delimited ISO list."""
        assert parse_pending_field("[2025-01-05, 2025-01-17]") == ["05/01/2025", "17/01/2025"]

    def test_quoted_tokens(self):
        """Test quoted tokens are accepted."""
        assert parse_pending_field('["2025-01-05","2025-01-17"]') == ["05/01/2025", "17/01/2025"]

    def test_duplicates_removed(self):
        assert parse_pending_field("[2025-01-05, 2025-01-05]") == ["05/01/2025"]

    def test_empty_values(self):
        """Test missing, blank and empty-list fields mean no pending days."""
        assert parse_pending_field(None) == []
        assert parse_pending_field("") == []
        assert parse_pending_field("[]") == []
        assert parse_pending_field("  [ ]  ") == []

    def test_trailing_comma_ignored(self):
        assert parse_pending_field("[2025-01-05,]") == ["05/01/2025"]

    def test_malformed_token(self):
        """Test a malformed token raises a discovery read failure."""
        with pytest.raises(PendingFieldParseError, match="05/01/2025"):
            parse_pending_field("[05/01/2025]")

    def test_parse_error_is_discovery_failure(self):
        with pytest.raises(DiscoveryReadFailure):
            parse_pending_field("[not-a-date]")


class TestWithinWindow:
    """Tests for within_window function."""

    def test_current_month_included(self):
        assert within_window("28/02/2025", 2, date(2025, 2, 3)) is True

    def test_oldest_month_included_from_first_day(self):
        assert within_window("01/12/2024", 2, date(2025, 2, 3)) is True

    def test_before_window_excluded(self):
        assert within_window("30/11/2024", 2, date(2025, 2, 3)) is False

    def test_future_month_excluded(self):
        assert within_window("01/03/2025", 2, date(2025, 2, 3)) is False
