"""
Validation of one job site's pending entries.

A site's validation subpage comes in two shapes, resolved once per visit:

- ITEMIZED: a table of worker rows with checkboxes and one
  "Validate selected days" submit, followed by up to two confirmations.
- BATCH_REPORT: standalone "Validate report" buttons, one per monthly
  report, each followed by one confirmation; a confirmed report disappears.
"""

from enum import Enum
from typing import Optional

from playwright.sync_api import Page

from .config import Config
from .dom_utils import body_text, contains_marker, settle, visible_elements, wait_for_optional
from .errors import SubmitButtonMissing, ValidationElementNotFound
from .logging_utils import RunLogger
from .selectors import NalandaSelectors, NalandaMarkers


class ValidationPageKind(Enum):
    EMPTY = 'empty'
    BATCH_REPORT = 'batch_report'
    ITEMIZED = 'itemized'
    UNKNOWN = 'unknown'


class EntryValidator:
    """
    Selects and submits the pending entries of the current validation page.
    """

    def __init__(self, config: Config, log: Optional[RunLogger] = None):
        self.config = config
        self.log = log or RunLogger()

    def detect_page_kind(self, page: Page) -> ValidationPageKind:
        """Probe the page for each variant's distinguishing control."""
        if contains_marker(body_text(page), NalandaMarkers.NO_PENDING_REPORTS):
            return ValidationPageKind.EMPTY

        if visible_elements(page, NalandaSelectors.REPORT_VALIDATE_BUTTON):
            return ValidationPageKind.BATCH_REPORT

        has_header = page.locator(NalandaSelectors.HEADER_CHECKBOX).count() > 0
        has_rows = page.locator(NalandaSelectors.ROW_CHECKBOX).count() > 0
        if has_header or has_rows:
            return ValidationPageKind.ITEMIZED

        return ValidationPageKind.UNKNOWN

    def validate_current_page(self, page: Page) -> int:
        """
        Validate everything pending on the current site's validation page.

        Args:
            page: Playwright page already on the validation subpage

        Returns:
            Number of entries (worker-days or reports) validated

        Raises:
            SubmitButtonMissing: If rows were selected but there is no submit control
        """
        settle(page, self.config.navigation_settle_delay)

        kind = self.detect_page_kind(page)
        self.log.debug(f"Validation page kind: {kind.value}")

        try:
            if kind == ValidationPageKind.EMPTY:
                self.log.info("  Nothing pending on this page")
                return 0
            if kind == ValidationPageKind.BATCH_REPORT:
                return self._validate_reports(page)
            if kind == ValidationPageKind.ITEMIZED:
                return self._validate_itemized(page)
            raise ValidationElementNotFound("No validation controls found on the page")
        except ValidationElementNotFound as e:
            # Possibly completed by an earlier attempt
            self.log.warning(f"  {e}")
            return 0

    def _validate_itemized(self, page: Page) -> int:
        self.log.info("  Worker checkboxes found")
        self._select_all_rows(page)

        checked = page.locator(NalandaSelectors.ROW_CHECKBOX_CHECKED).count()
        self.log.info(f"  → {checked} worker(s) selected")
        if checked == 0:
            raise ValidationElementNotFound("No worker rows could be selected")

        # Looked up after selection: the control may only render once rows are checked
        submit = visible_elements(page, NalandaSelectors.SUBMIT_SELECTED_BUTTON)
        if not submit:
            raise SubmitButtonMissing("'Validate selected days' button not found")

        submit[0].click()
        settle(page, self.config.click_settle_delay)

        self._confirm(page, NalandaSelectors.FIRST_CONFIRM_BUTTON, self.config.dialog_timeout)
        self._confirm(page, NalandaSelectors.SECOND_CONFIRM_BUTTON, self.config.dialog_timeout)

        self.log.success(f"  {checked} working day(s) validated")
        return checked

    def _select_all_rows(self, page: Page):
        header = page.locator(NalandaSelectors.HEADER_CHECKBOX)
        if header.count() > 0:
            header.first.check()
            settle(page, self.config.select_settle_delay)

        # Check leftovers one by one: the header may be absent or only select a page
        rows = page.locator(NalandaSelectors.ROW_CHECKBOX)
        for index in range(rows.count()):
            row = rows.nth(index)
            if row.is_enabled() and not row.is_checked():
                row.check()

    def _validate_reports(self, page: Page) -> int:
        remaining = visible_elements(page, NalandaSelectors.REPORT_VALIDATE_BUTTON)
        self.log.info(f"  {len(remaining)} monthly report(s) to validate")

        validated = 0
        for _ in range(self.config.max_report_iterations):
            if not remaining:
                break

            before = len(remaining)
            self.log.info(f"  Validating report {validated + 1}...")
            remaining[0].click()
            settle(page, self.config.click_settle_delay)

            self._confirm(page, NalandaSelectors.REPORT_CONFIRM_BUTTON, self.config.report_dialog_timeout)
            settle(page, self.config.navigation_settle_delay)

            # Indices are stale after a confirmation: always re-query
            remaining = visible_elements(page, NalandaSelectors.REPORT_VALIDATE_BUTTON)
            if len(remaining) < before:
                validated += 1
                self.log.success(f"  Report {validated} validated")
            else:
                self.log.warning("  Report list did not shrink after confirmation")
        else:
            if remaining:
                self.log.warning(
                    f"  Stopped after {self.config.max_report_iterations} attempts "
                    f"with {len(remaining)} report(s) left"
                )

        return validated

    def _confirm(self, page: Page, selector: str, timeout: int) -> bool:
        """Accept a confirmation dialog if one appears in time."""
        button = wait_for_optional(page, selector, timeout)
        if button is None:
            self.log.debug(f"No confirmation dialog appeared for {selector}")
            return False

        button.click()
        settle(page, self.config.dialog_settle_delay)
        return True
