"""
Browser session management.

A session is one isolated browsing context (own cookies and storage) opened
inside either a browser this manager launched itself or a shared browser it
attached to over the remote-debugging protocol. Only a launched browser is
ever closed here: a shared browser belongs to whoever started it.
"""

import os
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional

from playwright.sync_api import (
    sync_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PlaywrightError,
)

from .config import Config
from .errors import BrowserUnavailable
from .logging_utils import RunLogger
from .network_utils import is_cdp_available


# Flags required to run Chromium inside containers and headless hosts
CHROMIUM_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-gpu',
    '--no-first-run',
    '--no-default-browser-check',
    '--disable-extensions',
    '--disable-background-networking',
    '--disable-default-apps',
    '--mute-audio',
]

SYSTEM_CHROMIUM_PATHS = [
    '/usr/bin/chromium-browser',
    '/usr/lib/chromium-browser/chromium-browser',
    '/usr/bin/chromium',
    '/usr/bin/google-chrome',
    '/usr/bin/google-chrome-stable',
    '/usr/local/bin/chromium',
]


def find_chromium_executable(candidates: Optional[List[str]] = None) -> Optional[str]:
    """
    Find a system Chromium binary.

    Args:
        candidates: Paths to probe (defaults to SYSTEM_CHROMIUM_PATHS)

    Returns:
        First executable path found, or None to use Playwright's bundled build
    """
    for path in candidates or SYSTEM_CHROMIUM_PATHS:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path
    return None


def cdp_port(cdp_url: str) -> int:
    """
    Port of a remote-debugging URL.

    Examples:
        >>> cdp_port("http://127.0.0.1:9222")
        9222
    """
    host_part = cdp_url.split('://', 1)[-1].split('/', 1)[0]
    if ':' in host_part:
        return int(host_part.rsplit(':', 1)[1])
    return 9222


@dataclass
class BrowserHandle:
    """
    Everything one run holds on to while its session is open.

    Attributes:
        playwright: Running Playwright driver
        browser: Launched or attached browser
        context: The run's own isolated context
        page: The page the run drives
        owns_browser: Whether release() must close the browser
        strategy: 'launch' or 'attach'
    """
    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page
    owns_browser: bool
    strategy: str
    released: bool = False


class BrowserSessionManager:
    """
    Acquires and releases browser sessions according to Config.browser_mode.
    """

    def __init__(self, config: Config, log: Optional[RunLogger] = None):
        """
        Initialize the session manager.

        Args:
            config: Application configuration
            log: Run event stream (a silent one is created if None)
        """
        self.config = config
        self.log = log or RunLogger()

    def acquire(self) -> BrowserHandle:
        """
        Start or attach to a browser and open an isolated context in it.

        Returns:
            Handle of the new session

        Raises:
            BrowserUnavailable: If no usable browser can be obtained
        """
        self.log.info("Starting browser...")

        try:
            playwright = sync_playwright().start()
        except PlaywrightError as e:
            raise BrowserUnavailable(f"Could not start Playwright: {e}")

        try:
            strategy = self._choose_strategy()
            if strategy == 'attach':
                browser = self._attach(playwright)
                owns_browser = False
            else:
                browser = self._launch(playwright)
                owns_browser = True

            context = browser.new_context(
                user_agent=self.config.user_agent,
                viewport={
                    'width': self.config.viewport_width,
                    'height': self.config.viewport_height,
                },
            )
            context.set_default_timeout(self.config.element_timeout)
            context.set_default_navigation_timeout(self.config.day_load_timeout)
            page = context.new_page()

        except BrowserUnavailable:
            playwright.stop()
            raise
        except PlaywrightError as e:
            playwright.stop()
            raise BrowserUnavailable(f"Could not open a browser session: {e}")

        self.log.debug(f"Browser session opened (strategy={strategy}, owns_browser={owns_browser})")
        return BrowserHandle(
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
            owns_browser=owns_browser,
            strategy=strategy,
        )

    def release(self, handle: Optional[BrowserHandle]):
        """
        Close the session's context and, if owned, its browser.

        Idempotent and best-effort: cleanup failures are logged, never raised.
        """
        if handle is None or handle.released:
            return
        handle.released = True

        try:
            handle.context.close()
        except Exception as e:
            self.log.debug(f"Ignoring error while closing context: {e}")

        if handle.owns_browser:
            try:
                handle.browser.close()
            except Exception as e:
                self.log.debug(f"Ignoring error while closing browser: {e}")

        try:
            handle.playwright.stop()
        except Exception as e:
            self.log.debug(f"Ignoring error while stopping Playwright: {e}")

        self.log.debug("Browser session released")

    def _choose_strategy(self) -> str:
        mode = self.config.browser_mode
        if mode == 'auto':
            if is_cdp_available(self.config.cdp_url):
                return 'attach'
            self.log.debug(f"No browser on {self.config.cdp_url}, launching a private one")
            return 'launch'
        return mode

    def _launch(self, playwright: Playwright) -> Browser:
        executable_path = self.config.executable_path or find_chromium_executable()
        if executable_path:
            self.log.info(f"Using Chromium: {executable_path}")
        else:
            self.log.debug("No system Chromium found, using Playwright's bundled build")

        try:
            browser = playwright.chromium.launch(
                executable_path=executable_path,
                headless=self.config.headless,
                args=CHROMIUM_ARGS,
                timeout=self.config.launch_timeout,
            )
        except PlaywrightError as e:
            raise BrowserUnavailable(f"Could not launch Chromium: {e}")

        self.log.success("Browser launched")
        return browser

    def _attach(self, playwright: Playwright) -> Browser:
        cdp_url = self.config.cdp_url

        if is_cdp_available(cdp_url):
            self.log.info(f"Remote-debugging endpoint {cdp_url} available")
        elif self.config.spawn_shared_browser:
            self.log.warning(f"Remote-debugging endpoint {cdp_url} not available. Starting shared Chromium...")
            self._spawn_shared_browser()
        else:
            raise BrowserUnavailable(f"No browser answers on {cdp_url}")

        try:
            browser = playwright.chromium.connect_over_cdp(
                cdp_url,
                timeout=self.config.launch_timeout,
            )
        except PlaywrightError as e:
            raise BrowserUnavailable(f"Could not attach to {cdp_url}: {e}")

        self.log.success(f"Attached to shared browser on {cdp_url}")
        return browser

    def _spawn_shared_browser(self):
        """
        Start a detached system Chromium with a remote-debugging port.

        The process outlives this run; later runs attach to it.
        """
        executable_path = self.config.executable_path or find_chromium_executable()
        if not executable_path:
            raise BrowserUnavailable("No system Chromium found to start a shared browser")

        command = [
            executable_path,
            '--headless=new',
            f'--remote-debugging-port={cdp_port(self.config.cdp_url)}',
            '--remote-debugging-address=127.0.0.1',
            f'--user-data-dir={self.config.shared_user_data_dir}',
            *CHROMIUM_ARGS,
            'about:blank',
        ]

        try:
            subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise BrowserUnavailable(f"Could not start shared Chromium: {e}")

        deadline = time.monotonic() + self.config.cdp_startup_timeout / 1000
        while time.monotonic() < deadline:
            time.sleep(0.5)
            if is_cdp_available(self.config.cdp_url):
                self.log.success(f"Shared Chromium started on {self.config.cdp_url}")
                return

        raise BrowserUnavailable(
            f"Shared Chromium did not open {self.config.cdp_url} "
            f"within {self.config.cdp_startup_timeout // 1000}s"
        )
