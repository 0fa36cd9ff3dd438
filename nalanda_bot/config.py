"""
Configuration for the Nalanda validation bot.

This module centralizes configuration values including the target site
URLs, browser acquisition strategy, timeouts, settle delays and run options.
"""

from dataclasses import dataclass
from typing import Optional


BROWSER_MODES = ('launch', 'attach', 'auto')
DISCOVERY_MODES = ('auto', 'calendar', 'field')


@dataclass
class Config:
    """
    Application configuration.

    Attributes:
        base_url: Entry URL of the Nalanda application
        identity_host: Host of the identity provider (login pages)
        pending_path: Path of the "works with pending days" listing
        date_query_param: Query parameter selecting a day on the listing
        validation_url_fragment: URL fragment of a site's validation subpage
        browser_mode: How to obtain a browser ('launch', 'attach' or 'auto')
        cdp_url: Remote-debugging endpoint used by 'attach' and 'auto'
        spawn_shared_browser: Start a shared system Chromium when the
            remote-debugging endpoint is down ('attach' only)
        headless: Whether a launched browser runs headless
        months_back: Number of prior months reviewed after the current one
        day_retries: Attempts per pending day before giving up on it
        discovery: Pending-day discovery strategy ('auto', 'calendar', 'field')
        verbose: Whether to enable verbose logging
    """
    # Target site
    base_url: str = "https://app.nalandaglobal.com"
    identity_host: str = "identity.nalandaglobal.com"
    pending_path: str = "/obra-guiada/verObrasConJornadasPendientes.action"
    date_query_param: str = "fechaStr"
    validation_url_fragment: str = "mostrarJornadasValidables"

    # Browser acquisition
    browser_mode: str = "launch"
    cdp_url: str = "http://127.0.0.1:9222"
    spawn_shared_browser: bool = True
    shared_user_data_dir: str = "/tmp/nalanda-chrome-data"
    executable_path: Optional[str] = None
    headless: bool = True
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36"
    )
    viewport_width: int = 1280
    viewport_height: int = 800

    # Timeouts (milliseconds)
    launch_timeout: int = 30000
    cdp_startup_timeout: int = 10000
    element_timeout: int = 10000
    login_navigation_timeout: int = 30000
    login_form_timeout: int = 15000
    login_redirect_timeout: int = 20000
    listing_load_timeout: int = 20000
    day_load_timeout: int = 25000
    calendar_timeout: int = 8000
    site_page_timeout: int = 12000
    dialog_timeout: int = 5000
    report_dialog_timeout: int = 8000

    # Settle delays (milliseconds) after UI-mutating actions
    login_settle_delay: int = 2000
    navigation_settle_delay: int = 1500
    click_settle_delay: int = 1000
    dialog_settle_delay: int = 800
    select_settle_delay: int = 500
    calendar_close_delay: int = 300
    site_fallback_delay: int = 2000

    # Run options
    months_back: int = 6
    day_retries: int = 3
    retry_delay: int = 3000
    max_report_iterations: int = 20
    discovery: str = "auto"

    # Output options
    summary_json: Optional[str] = None
    summary_csv: Optional[str] = None
    force: bool = False
    verbose: bool = False

    def pending_url(self, date: Optional[str] = None) -> str:
        """
        Build the pending-works listing URL, optionally scoped to one day.

        Args:
            date: Day in DD/MM/YYYY form, or None for the default (today's) view

        Returns:
            Absolute listing URL
        """
        url = f"{self.base_url.rstrip('/')}{self.pending_path}"
        if date:
            url = f"{url}?{self.date_query_param}={date}"
        return url

    def is_authenticated_url(self, url: str) -> bool:
        """Whether a URL is inside the application and not on the identity provider."""
        app_host = self.base_url.split('://', 1)[-1].split('/', 1)[0]
        return app_host in url and self.identity_host not in url

    def validate(self):
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.base_url.startswith(('http://', 'https://')):
            raise ValueError(f"base_url must be an http(s) URL, got: {self.base_url}")

        if self.browser_mode not in BROWSER_MODES:
            raise ValueError(
                f"browser_mode must be one of {', '.join(BROWSER_MODES)}, got: {self.browser_mode}"
            )

        if self.discovery not in DISCOVERY_MODES:
            raise ValueError(
                f"discovery must be one of {', '.join(DISCOVERY_MODES)}, got: {self.discovery}"
            )

        if self.browser_mode in ('attach', 'auto') and not self.cdp_url.startswith(('http://', 'ws://')):
            raise ValueError(f"cdp_url must be an http:// or ws:// endpoint, got: {self.cdp_url}")

        if self.months_back < 1:
            raise ValueError(f"months_back must be at least 1, got: {self.months_back}")

        if self.day_retries < 1:
            raise ValueError(f"day_retries must be at least 1, got: {self.day_retries}")

        if self.max_report_iterations < 1:
            raise ValueError(
                f"max_report_iterations must be at least 1, got: {self.max_report_iterations}"
            )

        for name in ('launch_timeout', 'element_timeout', 'login_form_timeout',
                     'login_redirect_timeout', 'day_load_timeout', 'dialog_timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got: {getattr(self, name)}")

        if self.summary_json and self.summary_json == self.summary_csv:
            raise ValueError("summary_json and summary_csv must be different paths")


# Default configuration instance
DEFAULT_CONFIG = Config()
