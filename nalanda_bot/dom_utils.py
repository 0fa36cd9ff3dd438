"""
DOM helpers shared by the discovery, day-processing and validation steps.

Some site templates leave zero-size or off-screen duplicates of action
elements in the DOM, so "present" is never enough: action elements are
filtered on their rendered geometry.
"""

from typing import Iterable, List, Optional

from playwright.sync_api import Page, Locator, TimeoutError as PlaywrightTimeoutError

from .selectors import NalandaMarkers


# Rendered boxes in document coordinates
_GEOMETRY_JS = """
(els) => els.map((el) => {
    const rect = el.getBoundingClientRect();
    return {
        width: rect.width,
        height: rect.height,
        top: rect.top + window.scrollY,
        left: rect.left + window.scrollX,
    };
})
"""

# Text of the nearest row (or block) around an action element
_CONTEXT_TEXT_JS = """
(el) => {
    const row = el.closest('tr') || el.closest('div') || el.parentElement;
    return row ? (row.textContent || '') : '';
}
"""


def settle(page: Page, delay: int):
    """
    Give the site's client-side script time to react after a UI mutation.

    Args:
        page: Playwright page
        delay: Milliseconds to wait (0 disables the pause)
    """
    if delay > 0:
        page.wait_for_timeout(delay)


def body_text(page: Page) -> str:
    """Full text content of the page body."""
    return page.evaluate("() => document.body ? (document.body.textContent || '') : ''")


def contains_marker(text: str, markers: Iterable[str]) -> bool:
    """Whether any known marker occurs in the text."""
    return any(marker in text for marker in markers)


def is_laid_out(geometry: Optional[dict]) -> bool:
    """
    Whether a rendered box belongs to a real, clickable element.

    Zero-size boxes and boxes pushed above or left of the document origin
    are stale template copies.
    """
    if not geometry:
        return False
    return (
        geometry.get('width', 0) > 0
        and geometry.get('height', 0) > 0
        and geometry.get('top', -1) >= 0
        and geometry.get('left', -1) >= 0
    )


def visible_elements(page: Page, selector: str) -> List[Locator]:
    """
    Elements matching a selector that are actually laid out on the page.

    Args:
        page: Playwright page
        selector: Selector of candidate action elements

    Returns:
        Locators of laid-out elements, in document order
    """
    candidates = page.locator(selector)
    geometries = candidates.evaluate_all(_GEOMETRY_JS)
    return [
        candidates.nth(index)
        for index, geometry in enumerate(geometries)
        if is_laid_out(geometry)
    ]


def collapse_label(text: Optional[str], limit: int = 80) -> str:
    """
    Collapse whitespace and cap the length of a display label.

    Examples:
        >>> collapse_label("  Obra  Norte\\n  Fase 2 ")
        'Obra Norte Fase 2'
    """
    collapsed = " ".join((text or "").split())
    return collapsed[:limit] or NalandaMarkers.DEFAULT_SITE_LABEL


def site_label(element: Locator, limit: int = 80) -> str:
    """
    Human-readable job-site name read from the row around an action element.

    Used for the audit log and the day summary only.
    """
    return collapse_label(element.evaluate(_CONTEXT_TEXT_JS), limit)


def wait_for_optional(page: Page, selector: str, timeout: int) -> Optional[Locator]:
    """
    Wait a bounded time for an element that may legitimately never appear.

    Only Playwright's timeout means "absent"; any other failure propagates.

    Args:
        page: Playwright page
        selector: Selector to wait for (visible state)
        timeout: Milliseconds to wait

    Returns:
        Locator of the first visible match, or None if none appeared in time
    """
    locator = page.locator(selector).locator('visible=true').first
    try:
        locator.wait_for(state='visible', timeout=timeout)
    except PlaywrightTimeoutError:
        return None
    return locator
