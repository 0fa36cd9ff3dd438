"""
Tests for data models.
"""

import pytest
from datetime import datetime

from nalanda_bot.models import LogEntry, DaySummary, MonthReview, RunSummary


class TestLogEntry:
    """Tests for LogEntry."""

    def test_valid_levels(self):
        for level in ('info', 'success', 'warning', 'error'):
            assert LogEntry(level, "message").level == level

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            LogEntry('debug', "message")

    def test_to_dict(self):
        entry = LogEntry('success', "Login completed", datetime(2025, 1, 5, 9, 30))
        assert entry.to_dict() == {
            'level': 'success',
            'message': "Login completed",
            'timestamp': '2025-01-05T09:30:00',
        }

    def test_frozen(self):
        entry = LogEntry('info', "message")
        with pytest.raises(AttributeError):
            entry.message = "changed"


class TestDaySummary:
    """Tests for DaySummary."""

    def test_defaults(self):
        day = DaySummary("05/01/2025")
        assert day.workers_validated == 0
        assert day.obras == []
        assert day.failed is False

    def test_error_not_compared(self):
        """Test a failed day equals the plain zero-result summary."""
        assert DaySummary("05/01/2025", error="boom") == DaySummary("05/01/2025", 0, [])

    def test_to_dict_wire_names(self):
        day = DaySummary("05/01/2025", 3, ["Obra Norte"], error="ignored")
        assert day.to_dict() == {
            'date': "05/01/2025",
            'workersValidated': 3,
            'obras': ["Obra Norte"],
        }


class TestRunSummary:
    """Tests for RunSummary accounting."""

    def test_total_tracks_days(self):
        summary = RunSummary()
        summary.add_day(DaySummary("05/01/2025", 3, ["A"]))
        summary.add_day(DaySummary("17/01/2025", 4, ["B", "C"]))
        summary.add_day(DaySummary("20/01/2025"))

        assert summary.total_validated == 7
        assert summary.total_validated == sum(d.workers_validated for d in summary.days_by_date)

    def test_duplicate_date_rejected(self):
        summary = RunSummary()
        summary.add_day(DaySummary("05/01/2025", 3))

        with pytest.raises(ValueError, match="already processed"):
            summary.add_day(DaySummary("05/01/2025", 1))

        assert summary.total_validated == 3
        assert len(summary.days_by_date) == 1

    def test_failed_day_is_not_a_run_error(self):
        """Test a day that exhausted its retries stays on the day, not in run errors."""
        summary = RunSummary()
        summary.add_day(DaySummary("05/01/2025", error="Error processing 05/01/2025"))
        summary.add_day(DaySummary("06/01/2025", 2))

        assert summary.errors == []
        assert [d.date for d in summary.failed_days()] == ["05/01/2025"]
        assert summary.failed_days()[0].error == "Error processing 05/01/2025"

    def test_failed_day_listed_in_summary_text(self):
        summary = RunSummary()
        summary.add_day(DaySummary("05/01/2025", error="Error processing 05/01/2025"))

        text = summary.format_summary()
        assert "Failed days:" in text
        assert "Error processing 05/01/2025" in text
        assert "Errors:" not in text

    def test_days_with_work(self):
        summary = RunSummary()
        summary.add_day(DaySummary("05/01/2025", 3))
        summary.add_day(DaySummary("06/01/2025"))
        assert [d.date for d in summary.days_with_work()] == ["05/01/2025"]

    def test_to_dict_wire_names(self):
        summary = RunSummary()
        summary.add_month("02/2025", False)
        summary.add_day(DaySummary("05/01/2025", 3, ["A"]))
        summary.add_month("01/2025", True)

        assert summary.to_dict() == {
            'totalValidated': 3,
            'daysByDate': [{'date': "05/01/2025", 'workersValidated': 3, 'obras': ["A"]}],
            'monthsReviewed': [
                {'month': "02/2025", 'pendingFound': False},
                {'month': "01/2025", 'pendingFound': True},
            ],
            'errors': [],
        }

    def test_add_month(self):
        summary = RunSummary()
        summary.add_month("01/2025", True)
        assert summary.months_reviewed == [MonthReview("01/2025", True)]

    def test_format_summary(self):
        summary = RunSummary()
        summary.add_month("01/2025", True)
        summary.add_day(DaySummary("05/01/2025", 3, ["A"]))
        summary.add_day(DaySummary("06/01/2025", error="Error processing 06/01/2025"))

        text = summary.format_summary()
        assert "Total validated: 3" in text
        assert "01/2025: pending found" in text
        assert "06/01/2025: 0 validated in 0 obra(s) (failed)" in text
        assert "Error processing 06/01/2025" in text
