"""
Data models for the validation bot.

This module defines the data structures produced during one run:
log entries, per-day summaries, reviewed months and the run summary.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, List, Any


LOG_LEVELS = ('info', 'success', 'warning', 'error')


@dataclass(frozen=True)
class LogEntry:
    """
    One line of the run's audit log.

    Attributes:
        level: One of 'info', 'success', 'warning', 'error'
        message: Human-readable text
        timestamp: When the entry was emitted
    """
    level: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")

    def to_dict(self) -> Dict[str, str]:
        return {
            'level': self.level,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass
class DaySummary:
    """
    Result of processing one pending day.

    Attributes:
        date: Day in DD/MM/YYYY form
        workers_validated: Worker-day entries (or reports) validated that day
        obras: Display names of the job sites processed, in order
        error: Failure message when every attempt failed (not compared)
    """
    date: str
    workers_validated: int = 0
    obras: List[str] = field(default_factory=list)
    error: Optional[str] = field(default=None, compare=False)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'workersValidated': self.workers_validated,
            'obras': list(self.obras),
        }


@dataclass
class MonthReview:
    """A reviewed month (MM/YYYY) and whether pending days were found in it."""
    month: str
    pending_found: bool

    def to_dict(self) -> Dict[str, Any]:
        return {'month': self.month, 'pendingFound': self.pending_found}


@dataclass
class RunSummary:
    """
    Summary of a whole run.

    Built incrementally by the orchestrator so that progress made before a
    fatal abort is preserved.

    Attributes:
        total_validated: Sum of workers_validated over days_by_date
        days_by_date: Day summaries in processing order
        months_reviewed: Months reviewed in order
        errors: Unrecoverable (run-aborting) error messages; failed days
            keep their message on DaySummary.error
    """
    total_validated: int = 0
    days_by_date: List[DaySummary] = field(default_factory=list)
    months_reviewed: List[MonthReview] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def has_date(self, date: str) -> bool:
        return any(day.date == date for day in self.days_by_date)

    def add_day(self, day: DaySummary):
        """
        Add a day summary and update the validated total.

        Raises:
            ValueError: If the date was already added in this run
        """
        if self.has_date(day.date):
            raise ValueError(f"Day {day.date} already processed in this run")

        self.days_by_date.append(day)
        self.total_validated += day.workers_validated

    def add_month(self, month: str, pending_found: bool):
        """Record a reviewed month."""
        self.months_reviewed.append(MonthReview(month=month, pending_found=pending_found))

    def days_with_work(self) -> List[DaySummary]:
        """Days on which at least one entry was validated."""
        return [day for day in self.days_by_date if day.workers_validated > 0]

    def failed_days(self) -> List[DaySummary]:
        """Days that exhausted their retries. Recovered failures, not run errors."""
        return [day for day in self.days_by_date if day.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalValidated': self.total_validated,
            'daysByDate': [day.to_dict() for day in self.days_by_date],
            'monthsReviewed': [month.to_dict() for month in self.months_reviewed],
            'errors': list(self.errors),
        }

    def format_summary(self) -> str:
        """
        Format the summary as a human-readable string.

        Returns:
            Formatted summary text
        """
        lines = [
            "\n" + "=" * 60,
            "VALIDATION RUN SUMMARY",
            "=" * 60,
            f"\nTotal validated: {self.total_validated}",
            f"Days processed: {len(self.days_by_date)}",
            f"Days with validations: {len(self.days_with_work())}",
        ]

        if self.months_reviewed:
            lines.append("\nMonths reviewed:")
            for month in self.months_reviewed:
                status = "pending found" if month.pending_found else "nothing pending"
                lines.append(f"  {month.month}: {status}")

        if self.days_by_date:
            lines.append("\nDays:")
            for day in self.days_by_date:
                suffix = " (failed)" if day.failed else ""
                lines.append(
                    f"  {day.date}: {day.workers_validated} validated "
                    f"in {len(day.obras)} obra(s){suffix}"
                )

        failed = self.failed_days()
        if failed:
            lines.append("\nFailed days:")
            for day in failed:
                lines.append(f"  - {day.error}")

        if self.errors:
            lines.append("\nErrors:")
            for error in self.errors:
                lines.append(f"  - {error}")

        lines.append("=" * 60 + "\n")
        return "\n".join(lines)
