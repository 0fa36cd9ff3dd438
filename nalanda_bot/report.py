"""
Run summary reports.

This module writes a finished (or partial) RunSummary to disk: the whole
summary as JSON, and one CSV row per processed day.
"""

import csv
import json
from pathlib import Path

from .models import RunSummary


class ReportWriteError(Exception):
    """Raised when a report cannot be written."""
    pass


class ReportWriter:
    """
    Writes summary reports to one output path.
    """

    # CSV header columns in correct order
    CSV_HEADERS = [
        'date',
        'workers_validated',
        'obras',
        'error',
    ]

    def __init__(self, output_path: str, force: bool = False):
        """
        Initialize the report writer.

        Args:
            output_path: Path where the report will be saved
            force: Whether to overwrite an existing file

        Raises:
            ReportWriteError: If file exists and force is False
        """
        self.output_path = Path(output_path)
        self.force = force

        if self.output_path.exists() and not self.force:
            raise ReportWriteError(
                f"Output file already exists: {self.output_path}. Use --force to overwrite."
            )

    def write_json(self, summary: RunSummary) -> Path:
        """
        Write the summary as JSON using its wire field names.

        Returns:
            Absolute path of the written file

        Raises:
            ReportWriteError: If writing fails
        """
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, 'w', encoding='utf-8') as f:
                json.dump(summary.to_dict(), f, indent=2, ensure_ascii=False)
                f.write('\n')
            return self.output_path.absolute()

        except OSError as e:
            raise ReportWriteError(f"Failed to write JSON report: {e}")

    def write_days_csv(self, summary: RunSummary) -> Path:
        """
        Write one row per processed day. Job-site names are joined with "; ".

        Returns:
            Absolute path of the written file

        Raises:
            ReportWriteError: If writing fails
        """
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, 'w', encoding='utf-8', newline='') as f:
                writer = csv.DictWriter(f, fieldnames=self.CSV_HEADERS)
                writer.writeheader()
                for day in summary.days_by_date:
                    writer.writerow({
                        'date': day.date,
                        'workers_validated': day.workers_validated,
                        'obras': '; '.join(day.obras),
                        'error': day.error or '',
                    })
            return self.output_path.absolute()

        except OSError as e:
            raise ReportWriteError(f"Failed to write CSV report: {e}")


def write_summary_json(summary: RunSummary, output_path: str, force: bool = False) -> Path:
    """
    Convenience function to write the summary as JSON.

    Raises:
        ReportWriteError: If the file exists (without force) or writing fails
    """
    return ReportWriter(output_path, force=force).write_json(summary)


def write_days_csv(summary: RunSummary, output_path: str, force: bool = False) -> Path:
    """
    Convenience function to write the per-day CSV report.

    Raises:
        ReportWriteError: If the file exists (without force) or writing fails
    """
    return ReportWriter(output_path, force=force).write_days_csv(summary)
