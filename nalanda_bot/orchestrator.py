"""
Run orchestration.

One run: acquire a browser session, log in, discover pending days for the
current month and the look-back window, process each day once, then do an
advisory final discovery pass. The session is always released.
"""

from collections import OrderedDict
from datetime import date
from typing import Dict, List, Optional

from playwright.sync_api import Page

from .auth import Authenticator
from .browser import BrowserHandle, BrowserSessionManager
from .config import Config
from .date_utils import month_label, months_to_review, site_month_label, within_window
from .day_processor import DayProcessor
from .discovery import DiscoveryMode, PendingWorkDiscoverer
from .errors import FATAL_ERRORS, RunAborted
from .logging_utils import AutomationCallbacks, RunLogger
from .models import RunSummary


# Progress checkpoints (percent)
PROGRESS_LOGGED_IN = 5
PROGRESS_CURRENT_MONTH = 15
PROGRESS_PRIOR_MONTHS = 90
PROGRESS_DONE = 100


class RunOrchestrator:
    """
    Drives one validation run end to end.

    Collaborators are built by the _create_* factory methods so that tests
    can substitute fakes for the browser-facing parts.
    """

    def __init__(self, config: Config, today: Optional[date] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Application configuration
            today: Reference day for the month window (defaults to today)
        """
        self.config = config
        self.today = today

    def run(self, username: str, password: str, months_back: Optional[int] = None,
            callbacks: Optional[AutomationCallbacks] = None) -> RunSummary:
        """
        Validate every pending entry in the current month and the prior months.

        Args:
            username: Nalanda user name
            password: Nalanda password (never logged or stored)
            months_back: Prior months to review (defaults to config.months_back)
            callbacks: Receivers of log entries and progress

        Returns:
            Complete RunSummary

        Raises:
            ValueError: If months_back is below 1
            RunAborted: On a fatal error, carrying the partial summary
        """
        months_back = months_back if months_back is not None else self.config.months_back
        if months_back < 1:
            raise ValueError(f"months_back must be at least 1, got: {months_back}")

        log = RunLogger(callbacks)
        summary = RunSummary()
        session_manager = self._create_session_manager(log)
        handle: Optional[BrowserHandle] = None

        try:
            handle = session_manager.acquire()
            page = handle.page

            self._create_authenticator(log).login(page, username, password)
            log.progress(PROGRESS_LOGGED_IN)

            discoverer = self._create_discoverer(log)
            processor = self._create_day_processor(log)

            mode = discoverer.detect_mode(page)
            if mode == DiscoveryMode.FIELD:
                self._run_by_dates(page, discoverer, processor, summary, log, months_back)
            else:
                self._run_by_months(page, discoverer, processor, summary, log, months_back)

            self._verify(page, discoverer, mode, log, months_back)

            log.success(
                f"Run completed. Total: {summary.total_validated} entr(ies) validated "
                f"on {len(summary.days_with_work())} day(s)"
            )
            log.progress(PROGRESS_DONE)
            return summary

        except FATAL_ERRORS as e:
            raise self._abort(summary, log, str(e)) from e
        except Exception as e:
            raise self._abort(summary, log, f"Unexpected error: {e}") from e
        finally:
            session_manager.release(handle)

    def _abort(self, summary: RunSummary, log: RunLogger, message: str) -> RunAborted:
        summary.errors.append(message)
        log.error(f"Run aborted: {message}")
        return RunAborted(message, summary)

    def _reference_day(self) -> date:
        return self.today or date.today()

    def _run_by_months(self, page: Page, discoverer: PendingWorkDiscoverer, processor: DayProcessor,
                       summary: RunSummary, log: RunLogger, months_back: int):
        """Calendar discovery: one listing load and scan per month."""
        today = self._reference_day()

        current = month_label(today)
        log.info(f"Reviewing current month ({current})...")
        days = discoverer.discover(page, None, DiscoveryMode.CALENDAR, scope=current)
        self._process_month(page, processor, summary, log, current, days,
                            PROGRESS_LOGGED_IN, PROGRESS_CURRENT_MONTH)
        log.progress(PROGRESS_CURRENT_MONTH)

        span = PROGRESS_PRIOR_MONTHS - PROGRESS_CURRENT_MONTH
        for index, window in enumerate(months_to_review(months_back, today)):
            start = PROGRESS_CURRENT_MONTH + round(index / months_back * span)
            end = PROGRESS_CURRENT_MONTH + round((index + 1) / months_back * span)

            log.info(f"Reviewing {window.label}...")
            days = discoverer.discover(page, window.sample_date, DiscoveryMode.CALENDAR, scope=window.label)
            self._process_month(page, processor, summary, log, window.label, days, start, end)
            log.progress(end)

    def _run_by_dates(self, page: Page, discoverer: PendingWorkDiscoverer, processor: DayProcessor,
                      summary: RunSummary, log: RunLogger, months_back: int):
        """Hidden-field discovery: one read lists every pending day."""
        today = self._reference_day()

        log.info(f"Reviewing pending days of the last {months_back} month(s)...")
        days = discoverer.discover(page, None, DiscoveryMode.FIELD, scope="all months")

        by_month: Dict[str, List[str]] = OrderedDict()
        for day in days:
            if not within_window(day, months_back, today):
                log.info(f"Skipping {day}: outside the {months_back}-month window")
                continue
            by_month.setdefault(site_month_label(day), []).append(day)

        log.progress(PROGRESS_CURRENT_MONTH)

        if not by_month:
            label = month_label(today)
            log.success(f"{label}: no pending reports")
            summary.add_month(label, False)
            return

        total = sum(len(month_days) for month_days in by_month.values())
        span = PROGRESS_PRIOR_MONTHS - PROGRESS_CURRENT_MONTH
        done = 0
        for label, month_days in by_month.items():
            start = PROGRESS_CURRENT_MONTH + round(done / total * span)
            done += len(month_days)
            end = PROGRESS_CURRENT_MONTH + round(done / total * span)
            self._process_month(page, processor, summary, log, label, month_days, start, end)

        log.progress(PROGRESS_PRIOR_MONTHS)

    def _process_month(self, page: Page, processor: DayProcessor, summary: RunSummary, log: RunLogger,
                       label: str, days: List[str], start: int, end: int):
        if not days:
            log.success(f"{label}: no pending reports")
            summary.add_month(label, False)
            return

        log.info(f"{label}: {len(days)} pending day(s): {', '.join(days)}")
        for index, day in enumerate(days):
            if summary.has_date(day):
                log.debug(f"{day} already processed in this run, skipping")
                continue
            summary.add_day(processor.process_day(page, day))
            log.progress(start + round((index + 1) / len(days) * (end - start)))

        summary.add_month(label, True)

    def _verify(self, page: Page, discoverer: PendingWorkDiscoverer, mode: DiscoveryMode,
                log: RunLogger, months_back: int):
        """
        Advisory re-discovery of the current view; never fails the run.
        """
        log.info("Running final verification...")
        remaining = discoverer.discover(page, None, mode, scope="final verification")
        if mode == DiscoveryMode.FIELD:
            today = self._reference_day()
            remaining = [day for day in remaining if within_window(day, months_back, today)]

        if remaining:
            log.warning(
                f"Final verification: {len(remaining)} day(s) still pending "
                f"({', '.join(remaining)}). Manual review may be needed."
            )
        else:
            log.success("Final verification: no pending reports left")

    def _create_session_manager(self, log: RunLogger) -> BrowserSessionManager:
        return BrowserSessionManager(self.config, log)

    def _create_authenticator(self, log: RunLogger) -> Authenticator:
        return Authenticator(self.config, log)

    def _create_discoverer(self, log: RunLogger) -> PendingWorkDiscoverer:
        return PendingWorkDiscoverer(self.config, log)

    def _create_day_processor(self, log: RunLogger) -> DayProcessor:
        return DayProcessor(self.config, log)


def run_validation(config: Config, username: str, password: str,
                   callbacks: Optional[AutomationCallbacks] = None,
                   months_back: Optional[int] = None) -> RunSummary:
    """
    Run one validation pass with a fresh orchestrator.

    Raises:
        RunAborted: On a fatal error, carrying the partial summary
    """
    return RunOrchestrator(config).run(username, password, months_back, callbacks)
