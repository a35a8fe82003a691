# /// script
# requires-python = ">=3.12"
# dependencies = ["playwright>=1.40"]
# ///
"""Browser adapter for the live stringer application.

Attaches to the running Chromium-based stringer app over the Chrome
DevTools Protocol with Playwright's sync API, picks the page whose URL
contains the configured fragment, and implements the ``DrivenSurface``
primitives on top of it.  Logical locators are mapped to CSS selectors
(see ``config.DEFAULT_SELECTORS``, overridable with a JSON file).

Playwright's sync API is bound to the thread that started it, so the
automation must run on that same thread (``start_run(background=False)``).

Every Playwright error is re-raised as ``AdapterFailure``; elements that
are not on the page raise ``ElementNotFound``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from config import DEFAULT_SELECTORS
from surface import AdapterFailure, ElementNotFound, Locator, Script

logger = logging.getLogger(__name__)

DEFAULT_ACTION_TIMEOUT = 5.0

# Page scripts for the pre-game setup.  Each receives one argument object
# carrying the configured selectors (by locator name) next to its own fields.
_OPEN_DROPDOWN = (
    "document.querySelector("
    "`.selectize-dropdown.single.${kind}:not([style*=\"display: none\"])`)"
)

PAGE_SCRIPTS: dict[Script, str] = {
    Script.ROSTER: """({selectors}) =>
        Array.from(document.querySelectorAll(selectors.roster_rows)).map(row => {
            const cell = (n) => row.querySelector(`td:nth-child(${n})`);
            return {
                id: row.getAttribute('data-id') || '',
                status: row.getAttribute('data-status') || '',
                position: cell(1) ? cell(1).textContent.trim() : '',
                name: cell(3) ? cell(3).textContent.trim() : 'Unknown',
            };
        })""",
    Script.DH_ENABLED: """({selectors}) => {
        const box = document.querySelector(selectors.dh_option);
        return Boolean(box && box.checked);
    }""",
    Script.OPEN_LINEUP_CELL: """({selectors, row, column}) => {
        const cell = column === 'player' ? 3 : 4;
        const tr = document.querySelectorAll(selectors.lineup_rows)[row - 1];
        const input = tr && tr.querySelector(
            `td:nth-child(${cell}) > div > div.selectize-input.items`);
        if (!input) return false;
        input.click();
        return true;
    }""",
    Script.DROPDOWN_OPTIONS: """({kind}) => {
        const dropdown = %s;
        if (!dropdown) return null;
        return Array.from(
            dropdown.querySelectorAll('.selectize-dropdown-content > div[data-value]')
        ).map(option => option.getAttribute('data-value'));
    }""" % _OPEN_DROPDOWN,
    Script.CHOOSE_OPTION: """({kind, value, index}) => {
        const dropdown = %s;
        const content = dropdown && dropdown.querySelector('.selectize-dropdown-content');
        if (!content) return false;
        const option = value !== null && value !== undefined
            ? Array.from(content.querySelectorAll('div[data-value]'))
                .find(o => o.getAttribute('data-value') === value)
            : content.children[index];
        if (!option) return false;
        option.dispatchEvent(new MouseEvent('mousedown', {bubbles: true}));
        return true;
    }""" % _OPEN_DROPDOWN,
}


@contextmanager
def _playwright_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightError as e:
        raise AdapterFailure(f"{action} failed: {e}") from e


class PlaywrightSurface:
    """``DrivenSurface`` backed by a Playwright ``Page``."""

    def __init__(self, page, selectors: dict[Locator, str] | None = None,
                 action_timeout: float = DEFAULT_ACTION_TIMEOUT):
        self.page = page
        self.selectors = dict(selectors or DEFAULT_SELECTORS)
        self.action_timeout = action_timeout
        self._playwright = None
        self._browser = None

    @classmethod
    def connect(cls, cdp_url: str, url_fragment: str,
                selectors: dict[Locator, str] | None = None) -> PlaywrightSurface:
        """Attach to the app at *cdp_url* and select the stringer page.

        Raises:
            AdapterFailure: The endpoint is unreachable or no page matches.
        """
        playwright = sync_playwright().start()
        try:
            with _playwright_errors(f"connect to {cdp_url}"):
                browser = playwright.chromium.connect_over_cdp(cdp_url)
            pages = [page for context in browser.contexts for page in context.pages]
            matching = [page for page in pages if url_fragment in page.url]
            if not matching:
                urls = ", ".join(page.url for page in pages) or "none"
                raise AdapterFailure(
                    f"No page with {url_fragment!r} in its URL (open pages: {urls})")
        except AdapterFailure:
            playwright.stop()
            raise

        page = matching[0]
        logger.info("Attached to %s", page.url)
        surface = cls(page, selectors)
        surface._playwright = playwright
        surface._browser = browser
        return surface

    def close(self) -> None:
        """Detach from the browser (the app itself keeps running)."""
        if self._browser is not None:
            with _playwright_errors("disconnect"):
                self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------

    def selector(self, locator: Locator) -> str:
        try:
            return self.selectors[locator]
        except KeyError:
            raise AdapterFailure(f"No selector configured for {locator.value}") from None

    def _element(self, locator: Locator):
        with _playwright_errors(f"query {locator.value}"):
            handle = self.page.query_selector(self.selector(locator))
        if handle is None:
            raise ElementNotFound(locator)
        return handle

    def _box(self, locator: Locator) -> dict[str, float]:
        handle = self._element(locator)
        with _playwright_errors(f"measure {locator.value}"):
            box = handle.bounding_box()
        if box is None:
            raise ElementNotFound(locator, f"{locator.value} is not visible")
        return box

    # -------------------------------------------------------------------
    # DrivenSurface
    # -------------------------------------------------------------------

    def exists(self, locator: Locator) -> bool:
        with _playwright_errors(f"query {locator.value}"):
            return self.page.query_selector(self.selector(locator)) is not None

    def click(self, locator: Locator) -> None:
        handle = self._element(locator)
        with _playwright_errors(f"click {locator.value}"):
            handle.click(timeout=self.action_timeout * 1000)

    def click_center(self, locator: Locator) -> None:
        box = self._box(locator)
        self.click_at_point(box["x"] + box["width"] / 2, box["y"] + box["height"] / 2)

    def click_at_point(self, x: float, y: float) -> None:
        with _playwright_errors(f"click at ({x:.0f}, {y:.0f})"):
            self.page.mouse.click(x, y)

    def click_relative(self, locator: Locator, dx: float, dy: float) -> None:
        box = self._box(locator)
        self.click_at_point(box["x"] + dx, box["y"] + dy)

    def send_key(self, key: str) -> None:
        with _playwright_errors(f"press {key!r}"):
            self.page.keyboard.press(key)

    def type_text(self, locator: Locator, text: str) -> None:
        handle = self._element(locator)
        with _playwright_errors(f"type into {locator.value}"):
            handle.fill(text, timeout=self.action_timeout * 1000)

    def get_text(self, locator: Locator) -> str:
        with _playwright_errors(f"read {locator.value}"):
            handle = self.page.query_selector(self.selector(locator))
            if handle is None:
                return ""
            return handle.inner_text()

    def wait_for(self, locator: Locator, timeout: float) -> bool:
        try:
            self.page.wait_for_selector(self.selector(locator), state="attached",
                                        timeout=timeout * 1000)
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            raise AdapterFailure(f"wait for {locator.value} failed: {e}") from e
        return True

    def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run *script* in the page.

        A ``Script`` name runs the matching page script with the selector
        map added to *arg*; anything else is evaluated as given.
        """
        if isinstance(script, Script):
            payload = {"selectors": {loc.value: css for loc, css in self.selectors.items()},
                       **(arg or {})}
            with _playwright_errors(f"evaluate {script.value}"):
                return self.page.evaluate(PAGE_SCRIPTS[script], payload)
        with _playwright_errors("evaluate"):
            if arg is None:
                return self.page.evaluate(script)
            return self.page.evaluate(script, arg)
