"""
Exception taxonomy for the validation bot.

Fatal errors abort the whole run; the others are caught at the narrowest
scope and turned into a log line plus a degraded result.
"""


class AutomationError(Exception):
    """Base class for all automation errors."""
    pass


class BrowserUnavailable(AutomationError):
    """Raised when no usable browser can be started or attached to."""
    pass


class LoginError(AutomationError):
    """Base class for login failures. Always fatal."""
    pass


class LoginFormNotFound(LoginError):
    """Raised when the credential form never appears."""
    pass


class InvalidCredentials(LoginError):
    """Raised when the site shows its own error banner after submission."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LoginTimeout(LoginError):
    """Raised when neither the success redirect nor an error banner appears."""
    pass


class DiscoveryReadFailure(AutomationError):
    """Raised when the calendar or the pending-dates field cannot be read."""
    pass


class PendingFieldParseError(DiscoveryReadFailure):
    """Raised when the hidden pending-dates field holds a malformed value."""
    pass


class DayProcessingFailure(AutomationError):
    """Raised inside one attempt at processing a day."""
    pass


class ValidationElementNotFound(AutomationError):
    """Raised when a validation page exposes no known validation controls."""
    pass


class SubmitButtonMissing(DayProcessingFailure):
    """Raised when the "validate selected days" control is missing."""
    pass


class RunAborted(AutomationError):
    """
    Raised once per run when a fatal error stops it.

    Attributes:
        summary: Partial run summary accumulated before the abort
    """

    def __init__(self, message: str, summary=None):
        super().__init__(message)
        self.summary = summary


FATAL_ERRORS = (BrowserUnavailable, LoginError)
