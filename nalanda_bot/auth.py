"""
Login against Nalanda's identity provider.
"""

from typing import Optional

from playwright.sync_api import Page, TimeoutError as PlaywrightTimeoutError

from .config import Config
from .dom_utils import settle
from .errors import InvalidCredentials, LoginFormNotFound, LoginTimeout
from .logging_utils import RunLogger
from .selectors import NalandaSelectors


class Authenticator:
    """
    Drives the login form, or skips it when the session is already warm.
    """

    def __init__(self, config: Config, log: Optional[RunLogger] = None):
        self.config = config
        self.log = log or RunLogger()

    def login(self, page: Page, username: str, password: str):
        """
        Log into the application.

        A page that lands inside the application (not on the identity
        provider) already has a valid session and is left untouched.

        Args:
            page: Playwright page of the run's context
            username: Nalanda user name
            password: Nalanda password (never logged)

        Raises:
            LoginFormNotFound: If the credential form never appears
            InvalidCredentials: If the site shows its error banner
            LoginTimeout: If neither redirect nor banner appears in time
        """
        self.log.info("Navigating to Nalanda...")
        page.goto(
            self.config.base_url,
            wait_until='domcontentloaded',
            timeout=self.config.login_navigation_timeout
        )
        settle(page, self.config.login_settle_delay)

        if self.config.is_authenticated_url(page.url):
            self.log.success("Session already active, continuing...")
            return

        try:
            page.wait_for_selector(
                NalandaSelectors.USERNAME_INPUT,
                timeout=self.config.login_form_timeout
            )
        except PlaywrightTimeoutError:
            raise LoginFormNotFound("Nalanda login form not found")

        self.log.info(f"Logging in as {username}...")

        # Clear first: the shared browser may have autofilled stale values
        page.fill(NalandaSelectors.USERNAME_INPUT, "")
        page.fill(NalandaSelectors.USERNAME_INPUT, username)
        page.fill(NalandaSelectors.PASSWORD_INPUT, "")
        page.fill(NalandaSelectors.PASSWORD_INPUT, password)
        page.click(NalandaSelectors.LOGIN_BUTTON)

        identity_host = self.config.identity_host
        try:
            page.wait_for_url(
                lambda url: identity_host not in url,
                timeout=self.config.login_redirect_timeout
            )
        except PlaywrightTimeoutError:
            self._raise_login_failure(page)

        self.log.success("Login completed")

    def _raise_login_failure(self, page: Page):
        banner = page.query_selector(NalandaSelectors.LOGIN_ERROR_BANNER)
        if banner is not None:
            text = (banner.text_content() or "").strip()
            raise InvalidCredentials(f"Login error: {text or 'Invalid credentials'}")
        raise LoginTimeout("Timed out waiting for the redirect after login")
