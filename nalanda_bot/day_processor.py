"""
Processing of one pending day.

A day's listing shows one "Validate working days" action per job site.
Validating a site changes the listing, so the listing is reloaded and the
actions re-queried before every site instead of walking a stale list.
"""

import time
from typing import Iterator, List, Optional, Tuple

from playwright.sync_api import Page, Locator, TimeoutError as PlaywrightTimeoutError

from .config import Config
from .dom_utils import body_text, contains_marker, settle, site_label, visible_elements
from .logging_utils import RunLogger
from .models import DaySummary
from .selectors import NalandaSelectors, NalandaMarkers
from .validator import EntryValidator


class DayProcessor:
    """
    Validates every job site pending on one day, retrying the whole day on failure.
    """

    def __init__(self, config: Config, log: Optional[RunLogger] = None,
                 validator: Optional[EntryValidator] = None):
        """
        Initialize the day processor.

        Args:
            config: Application configuration
            log: Run event stream (a silent one is created if None)
            validator: Entry validator (created from config if None)
        """
        self.config = config
        self.log = log or RunLogger()
        self.validator = validator or EntryValidator(config, self.log)

    def process_day(self, page: Page, date: str, retries: Optional[int] = None) -> DaySummary:
        """
        Validate all pending entries of one day.

        A failing day never raises: after the last failed attempt an error
        is logged and a zero-result summary carrying the failure message is
        returned.

        Args:
            page: Playwright page of an authenticated session
            date: Day in DD/MM/YYYY form
            retries: Attempts before giving up (defaults to config.day_retries)

        Returns:
            DaySummary for the day

        Raises:
            ValueError: If retries is below 1
        """
        if retries is None:
            retries = self.config.day_retries
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got: {retries}")

        for attempt in range(1, retries + 1):
            try:
                return self._attempt(page, date)
            except Exception as e:
                message = str(e).strip() or e.__class__.__name__
                if attempt < retries:
                    self.log.warning(
                        f"Attempt {attempt}/{retries} failed for {date}: {message[:100]}. Retrying..."
                    )
                    time.sleep(self.config.retry_delay / 1000)
                else:
                    error = f"Error processing {date} after {retries} attempts: {message[:200]}"
                    self.log.error(error)
                    return DaySummary(date=date, error=error)

    def _attempt(self, page: Page, date: str) -> DaySummary:
        self.log.info(f"Processing day {date}...")
        self._load_listing(page, date)

        if self._is_empty(page):
            self.log.info(f"Day {date}: no pending reports")
            return DaySummary(date=date)

        site_count = len(self._site_buttons(page))
        if site_count == 0:
            self.log.warning(f"Day {date}: no pending job sites found")
            return DaySummary(date=date)

        self.log.info(f"Day {date}: {site_count} job site(s) with pending reports")

        obras: List[str] = []
        total = 0
        for index, label, button in self._pending_sites(page, date, site_count):
            self.log.info(f"  Site {index}/{site_count}: {label[:50]}...")
            self._open_site(page, button)

            validated = self.validator.validate_current_page(page)
            total += validated
            obras.append(label)
            self.log.success(f"  Site {index} processed: {validated} entr(ies) validated")

        self.log.success(f"Day {date}: {total} entr(ies) validated in {len(obras)} job site(s)")
        return DaySummary(date=date, workers_validated=total, obras=obras)

    def _pending_sites(self, page: Page, date: str, site_count: int) -> Iterator[Tuple[int, str, Locator]]:
        """
        Lazily yield the next site action, reloading the listing first.

        Sites are told apart by position in the fresh list, never by label:
        labels are display text and may repeat. A site whose action is gone
        after its visit was cleared, so the next site moves into its
        position; a site whose action survived is stepped over. Stops early
        when the position runs past the list: the remaining sites were
        cleared by earlier submissions.
        """
        position = 0
        previous_count = None
        for index in range(1, site_count + 1):
            self._load_listing(page, date)
            buttons = self._site_buttons(page)

            if previous_count is not None and len(buttons) >= previous_count:
                # The last opened site is still listed
                position += 1
            previous_count = len(buttons)

            if position >= len(buttons):
                self.log.info(f"Day {date}: all job sites processed")
                return

            button = buttons[position]
            yield index, site_label(button), button

    def _load_listing(self, page: Page, date: str):
        page.goto(
            self.config.pending_url(date),
            wait_until='domcontentloaded',
            timeout=self.config.day_load_timeout
        )
        settle(page, self.config.navigation_settle_delay)

    def _is_empty(self, page: Page) -> bool:
        return contains_marker(body_text(page), NalandaMarkers.NO_PENDING_SITES)

    def _site_buttons(self, page: Page) -> List[Locator]:
        return visible_elements(page, NalandaSelectors.SITE_VALIDATE_BUTTON)

    def _open_site(self, page: Page, button: Locator):
        """Click a site's action and wait for its validation subpage."""
        button.click()

        fragment = self.config.validation_url_fragment
        try:
            page.wait_for_url(
                lambda url: fragment in url,
                timeout=self.config.site_page_timeout
            )
        except PlaywrightTimeoutError:
            # Some sites render the validation view in place
            self.log.debug(f"URL did not reach {fragment}, continuing on the current page")
            settle(page, self.config.site_fallback_delay)
