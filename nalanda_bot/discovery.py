"""
Pending-day discovery.

Two interchangeable strategies read the days that still have unapproved
entries from the pending-works listing:

- CALENDAR: open the date picker and collect the days painted in one of the
  known "flagged" colors. One page load per month.
- FIELD: read the hidden input that lists every pending day as ISO dates.
  One page load for all months; preferred whenever the field is present.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from playwright.sync_api import Page

from .config import Config
from .date_utils import dedupe, format_site_date, parse_pending_field
from .dom_utils import settle
from .errors import DiscoveryReadFailure
from .logging_utils import RunLogger
from .selectors import NalandaSelectors, NalandaMarkers


class DiscoveryMode(Enum):
    CALENDAR = 'calendar'
    FIELD = 'field'


_FLAGGED_CELLS_JS = """
(args) => {
    const calendar = document.querySelector(args.calendar);
    if (!calendar) return [];
    const cells = [];
    calendar.querySelectorAll(args.cell).forEach((td) => {
        const link = td.querySelector('a');
        if (!link) return;
        const background = window.getComputedStyle(link).backgroundColor;
        if (!args.colors.includes(background)) return;
        cells.push({
            day: (link.textContent || '').trim(),
            month: td.getAttribute('data-month'),
            year: td.getAttribute('data-year'),
        });
    });
    return cells;
}
"""


def cell_to_site_date(cell: Dict[str, Optional[str]]) -> str:
    """
    Convert a date-picker cell to DD/MM/YYYY.

    The picker stores a zero-based month in data-month.

    Raises:
        ValueError: If the cell attributes do not form a valid date

    Examples:
        >>> cell_to_site_date({'day': '5', 'month': '0', 'year': '2025'})
        '05/01/2025'
    """
    return format_site_date(date(
        int(cell['year']),
        int(cell['month']) + 1,
        int(cell['day']),
    ))


class CalendarScanStrategy:
    """Reads flagged days from the jQuery UI date picker."""

    def __init__(self, config: Config, log: RunLogger):
        self.config = config
        self.log = log

    def read(self, page: Page) -> List[str]:
        """
        Flagged days of the month the picker opens on.

        Raises:
            DiscoveryReadFailure: If the picker cannot be opened or read
        """
        page.click(NalandaSelectors.DATE_INPUT)
        page.wait_for_selector(
            NalandaSelectors.DATEPICKER_CALENDAR,
            timeout=self.config.calendar_timeout
        )
        settle(page, self.config.select_settle_delay)

        cells = page.evaluate(_FLAGGED_CELLS_JS, {
            'calendar': NalandaSelectors.DATEPICKER_CALENDAR,
            'cell': NalandaSelectors.DATEPICKER_DAY_CELL,
            'colors': list(NalandaMarkers.FLAGGED_DAY_COLORS),
        })

        page.keyboard.press('Escape')
        settle(page, self.config.calendar_close_delay)

        days = []
        for cell in cells:
            try:
                days.append(cell_to_site_date(cell))
            except (TypeError, ValueError):
                self.log.debug(f"Skipping unreadable calendar cell: {cell}")
        return dedupe(days)


class HiddenFieldStrategy:
    """Reads every pending day from the hidden pending-dates input."""

    def __init__(self, config: Config, log: RunLogger):
        self.config = config
        self.log = log

    def is_available(self, page: Page) -> bool:
        return page.locator(NalandaSelectors.PENDING_DATES_FIELD).count() > 0

    def read(self, page: Page) -> List[str]:
        """
        All pending days listed in the hidden field.

        Raises:
            DiscoveryReadFailure: If the field is missing or malformed
        """
        field = page.locator(NalandaSelectors.PENDING_DATES_FIELD)
        if field.count() == 0:
            raise DiscoveryReadFailure("Pending-dates field not found")

        value = field.first.get_attribute('value')
        self.log.debug(f"Pending-dates field: {value!r}")
        return parse_pending_field(value)


class PendingWorkDiscoverer:
    """
    Finds pending days on the listing page with the configured strategy.
    """

    def __init__(self, config: Config, log: Optional[RunLogger] = None):
        self.config = config
        self.log = log or RunLogger()
        self.calendar = CalendarScanStrategy(config, self.log)
        self.field = HiddenFieldStrategy(config, self.log)

    def open_listing(self, page: Page, day: Optional[str] = None):
        """
        Load the pending-works listing, optionally scoped to one day.

        Args:
            page: Playwright page
            day: DD/MM/YYYY day whose month the listing should show
        """
        page.goto(
            self.config.pending_url(day),
            wait_until='domcontentloaded',
            timeout=self.config.listing_load_timeout
        )
        settle(page, self.config.navigation_settle_delay)

    def resolve_mode(self, page: Page) -> DiscoveryMode:
        """
        Pick the strategy for this run.

        With discovery='auto' the hidden field wins whenever the loaded
        listing page carries it.
        """
        if self.config.discovery == 'calendar':
            return DiscoveryMode.CALENDAR
        if self.config.discovery == 'field':
            return DiscoveryMode.FIELD
        if self.field.is_available(page):
            return DiscoveryMode.FIELD
        return DiscoveryMode.CALENDAR

    def detect_mode(self, page: Page) -> DiscoveryMode:
        """
        Load the listing and resolve the strategy, falling back to CALENDAR.
        """
        try:
            self.open_listing(page)
            mode = self.resolve_mode(page)
        except Exception as e:
            self.log.warning(f"Could not probe the listing page, using calendar scan: {e}")
            return DiscoveryMode.CALENDAR

        self.log.info(f"Discovery strategy: {mode.value}")
        return mode

    def discover(self, page: Page, sample_date: Optional[str] = None,
                 mode: Optional[DiscoveryMode] = None, scope: Optional[str] = None) -> List[str]:
        """
        Pending days for one scope.

        A failure to read the calendar or the field is logged as a warning
        and reported as "no pending days" for that scope.

        Args:
            page: Playwright page
            sample_date: Day selecting the month to inspect (None = current)
            mode: Strategy to use (resolved from the page if None)
            scope: Label used in log lines

        Returns:
            Unique pending days in DD/MM/YYYY form
        """
        scope = scope or sample_date or "the current month"
        try:
            self.open_listing(page, sample_date)
            if mode is None:
                mode = self.resolve_mode(page)
            strategy = self.field if mode == DiscoveryMode.FIELD else self.calendar
            return strategy.read(page)
        except Exception as e:
            self.log.warning(f"Could not read pending days for {scope}: {e}")
            return []
