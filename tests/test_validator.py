"""
Tests for the Entry Validator's page-kind dispatch.

The two validation page variants are exercised against real HTML in
test_dom_mapping.py; here the page is mocked per selector.
"""

import pytest
from unittest.mock import MagicMock, patch

from nalanda_bot.config import Config
from nalanda_bot.errors import SubmitButtonMissing, DayProcessingFailure
from nalanda_bot.logging_utils import AutomationCallbacks, RunLogger
from nalanda_bot.selectors import NalandaSelectors
from nalanda_bot.validator import EntryValidator, ValidationPageKind


def make_page(counts):
    """Page whose locator(selector).count() follows the given mapping."""
    page = MagicMock()
    locators = {}

    def locator(selector):
        if selector not in locators:
            mock = MagicMock()
            mock.count.return_value = counts.get(selector, 0)
            locators[selector] = mock
        return locators[selector]

    page.locator.side_effect = locator
    return page


@pytest.fixture
def entries():
    return []


@pytest.fixture
def validator(entries):
    log = RunLogger(AutomationCallbacks(on_log=entries.append))
    config = Config(
        navigation_settle_delay=0,
        click_settle_delay=0,
        dialog_settle_delay=0,
        select_settle_delay=0,
    )
    return EntryValidator(config, log)


@pytest.fixture(autouse=True)
def page_text():
    with patch('nalanda_bot.validator.body_text', return_value="Pending reports") as mock_text, \
            patch('nalanda_bot.validator.visible_elements', return_value=[]):
        yield mock_text


class TestDetectPageKind:
    """Tests for detect_page_kind."""

    def test_empty_marker(self, validator, page_text):
        page_text.return_value = "There are no reports pending validation for this work"
        assert validator.detect_page_kind(make_page({})) == ValidationPageKind.EMPTY

    def test_spanish_empty_marker(self, validator, page_text):
        page_text.return_value = "Actualmente no hay partes pendientes de validar"
        assert validator.detect_page_kind(make_page({})) == ValidationPageKind.EMPTY

    def test_report_buttons(self, validator):
        with patch('nalanda_bot.validator.visible_elements', return_value=[MagicMock()]):
            assert validator.detect_page_kind(make_page({})) == ValidationPageKind.BATCH_REPORT

    def test_checkboxes(self, validator):
        page = make_page({NalandaSelectors.ROW_CHECKBOX: 3})
        assert validator.detect_page_kind(page) == ValidationPageKind.ITEMIZED

    def test_unknown(self, validator):
        assert validator.detect_page_kind(make_page({})) == ValidationPageKind.UNKNOWN


class TestValidateCurrentPage:
    """Tests for validate_current_page dispatch."""

    def test_unknown_page_is_nothing_to_do(self, validator, entries):
        assert validator.validate_current_page(make_page({})) == 0
        assert [e.level for e in entries] == ['warning']

    def test_empty_page(self, validator, entries, page_text):
        page_text.return_value = "no reports pending"
        assert validator.validate_current_page(make_page({})) == 0
        assert all(e.level != 'warning' for e in entries)

    def test_no_selectable_rows(self, validator, entries):
        page = make_page({
            NalandaSelectors.HEADER_CHECKBOX: 1,
            NalandaSelectors.ROW_CHECKBOX: 0,
            NalandaSelectors.ROW_CHECKBOX_CHECKED: 0,
        })

        assert validator.validate_current_page(page) == 0
        assert entries[-1].level == 'warning'

    def test_missing_submit_escalates(self, validator):
        """Test a missing submit control is not treated as nothing to do."""
        page = make_page({
            NalandaSelectors.ROW_CHECKBOX: 2,
            NalandaSelectors.ROW_CHECKBOX_CHECKED: 2,
            NalandaSelectors.SUBMIT_SELECTED_BUTTON: 0,
        })

        with pytest.raises(SubmitButtonMissing):
            validator.validate_current_page(page)

    def test_submit_missing_is_day_failure(self):
        assert issubclass(SubmitButtonMissing, DayProcessingFailure)

    def test_only_stale_submit_copies(self, validator):
        """Test submit controls that are present but not laid out count as missing."""
        page = make_page({
            NalandaSelectors.ROW_CHECKBOX: 2,
            NalandaSelectors.ROW_CHECKBOX_CHECKED: 2,
            NalandaSelectors.SUBMIT_SELECTED_BUTTON: 1,
        })

        with pytest.raises(SubmitButtonMissing):
            validator.validate_current_page(page)

    def test_first_laid_out_submit_clicked(self, validator):
        page = make_page({
            NalandaSelectors.ROW_CHECKBOX: 2,
            NalandaSelectors.ROW_CHECKBOX_CHECKED: 2,
        })
        submit = MagicMock()
        other = MagicMock()

        def laid_out(page, selector):
            if selector == NalandaSelectors.SUBMIT_SELECTED_BUTTON:
                return [submit, other]
            return []

        with patch('nalanda_bot.validator.visible_elements', side_effect=laid_out), \
                patch('nalanda_bot.validator.wait_for_optional', return_value=None):
            assert validator.validate_current_page(page) == 2

        submit.click.assert_called_once_with()
        other.click.assert_not_called()
