"""
DOM selectors and text markers for the Nalanda web application.

This module defines every selector and literal the automation matches
against. The site mixes English and Spanish labels, so text-based selectors
list both.

IMPORTANT: The site is a server-rendered legacy application with jQuery UI
widgets. If its templates change, this module is the one to update.
"""

from typing import Tuple


class NalandaSelectors:
    """
    Centralized selectors for Nalanda DOM elements.

    All selectors use Playwright selector syntax.
    """

    # Identity provider login form
    USERNAME_INPUT = '#username'
    PASSWORD_INPUT = '#password'
    LOGIN_BUTTON = '#kc-login'
    LOGIN_ERROR_BANNER = '.alert-error, .kc-feedback-text'

    # Date picker on the pending-works listing
    DATE_INPUT = '#fecha'
    DATEPICKER_CALENDAR = '.ui-datepicker-calendar'
    DATEPICKER_DAY_CELL = 'td[data-handler="selectDay"]'

    # Hidden field listing every pending day as ISO dates
    PENDING_DATES_FIELD = (
        'input[type="hidden"]#fechasPendientes, '
        'input[type="hidden"][name="fechasPendientes"], '
        'input[type="hidden"][name="fechasConJornadasPendientes"]'
    )

    # One button per job site with pending working days
    SITE_VALIDATE_BUTTON = (
        'button.js-validar-jornadas, '
        'a:has-text("Validate working days"), '
        'button:has-text("Validate working days"), '
        'a:has-text("Validar jornadas"), '
        'button:has-text("Validar jornadas")'
    )

    # Itemized validation page: worker rows with checkboxes
    HEADER_CHECKBOX = 'thead input[type="checkbox"]'
    ROW_CHECKBOX = 'tbody input[type="checkbox"]'
    ROW_CHECKBOX_CHECKED = 'tbody input[type="checkbox"]:checked'
    SUBMIT_SELECTED_BUTTON = (
        '.js-validar-total-jornadas, '
        '#js-validar-seleccionadas, '
        'button:has-text("Validate selected days"), '
        'a:has-text("Validate selected days"), '
        'button:has-text("Validar días seleccionados"), '
        'a:has-text("Validar días seleccionados")'
    )

    # Batch validation page: one button per monthly report
    REPORT_VALIDATE_BUTTON = '.js-validar-parte'

    # Confirmation dialogs. The first dialog uses OK wording, the second
    # Accept/Aceptar; a batch report raises a single dialog with either.
    FIRST_CONFIRM_BUTTON = (
        '#btnConfirmacion, '
        'button:text-is("OK"), '
        'button:text-is("Ok")'
    )
    SECOND_CONFIRM_BUTTON = (
        'button:text-is("Aceptar"), '
        'button:text-is("Accept")'
    )
    REPORT_CONFIRM_BUTTON = (
        '#btnConfirmacion, '
        'button:text-is("Aceptar"), '
        'button:text-is("Accept"), '
        'button:text-is("OK"), '
        'button:text-is("Ok")'
    )


class NalandaMarkers:
    """
    Literal text markers and colors the automation recognizes.
    """

    # Listing page for a day without pending work
    NO_PENDING_SITES: Tuple[str, ...] = (
        'There are no works with pending days',
        'There are no reports pending validation for this day',
        'no hay obras',
    )

    # Validation subpage with nothing left to validate
    NO_PENDING_REPORTS: Tuple[str, ...] = (
        'There are no reports pending validation',
        'no reports pending',
        'no hay partes pendientes',
    )

    # Computed background colors of flagged (pending) calendar days
    FLAGGED_DAY_COLORS: Tuple[str, ...] = (
        'rgb(255, 0, 0)',
        'rgb(220, 53, 69)',
        'rgb(255, 68, 68)',
    )

    # Fallback display name when no surrounding text can be read
    DEFAULT_SITE_LABEL = 'Obra'
