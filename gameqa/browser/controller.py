"""
Browser Controller - Playwright adapter behind a narrow session protocol
"""
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from playwright.async_api import async_playwright, Browser, Page, BrowserContext
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import settings, parse_resolution
from ..models.evidence import UIDetectionResult, UIElement
from ..utils.errors import ErrorKind, GameQAError
from ..utils.helpers import timestamp_now

logger = logging.getLogger(__name__)


class BrowserSession(Protocol):
    """
    What the orchestrator needs from a browser.
    One instance owns exactly one remote browser session.
    """

    async def load(self, url: str, timeout_ms: int) -> None: ...

    async def detect_ui(self) -> UIDetectionResult: ...

    async def run_script(self, source: str) -> Any: ...

    async def screenshot(self, path: str) -> str: ...

    async def close(self) -> None: ...


UI_DETECTION_SCRIPT = """
() => {
    const visible = (el) => el.offsetWidth > 0 && el.offsetHeight > 0;
    const results = { buttons: [], canvas: [], menus: [] };

    document.querySelectorAll('button, [role="button"], .btn, .button').forEach((el, i) => {
        if (!visible(el)) return;
        results.buttons.push({
            selector: el.id ? `#${el.id}` : `button:nth-of-type(${i + 1})`,
            text: (el.textContent || '').trim().slice(0, 100),
            attributes: { tagName: el.tagName.toLowerCase(), className: String(el.className || ''), id: el.id || '' }
        });
    });

    document.querySelectorAll('canvas').forEach((el, i) => {
        if (!visible(el)) return;
        results.canvas.push({
            selector: el.id ? `#${el.id}` : `canvas:nth-of-type(${i + 1})`,
            attributes: { width: String(el.width), height: String(el.height), id: el.id || '' }
        });
    });

    document.querySelectorAll('nav, [role="menu"], [class*="menu"]').forEach((el, i) => {
        if (!visible(el)) return;
        results.menus.push({
            selector: el.id ? `#${el.id}` : `nav:nth-of-type(${i + 1})`,
            text: (el.textContent || '').trim().slice(0, 100),
            attributes: { className: String(el.className || ''), id: el.id || '' }
        });
    });

    return results;
}
"""


class PlaywrightBrowser:
    """
    Playwright-based browser session for game testing.
    Starts lazily on the first load() and is released by close().
    """

    def __init__(self, headless: bool = None, resolution: str = None):
        """
        Args:
            headless: Run in headless mode. Defaults to settings.BROWSER_HEADLESS
            resolution: Viewport as "WIDTHxHEIGHT". Defaults to settings.SCREENSHOT_RESOLUTION
        """
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self.viewport = parse_resolution(resolution or settings.SCREENSHOT_RESOLUTION)
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._closed = False

    async def _start(self):
        if self.playwright is not None:
            await self._shutdown()
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(headless=self.headless)
            self.context = await self.browser.new_context(viewport=self.viewport)
            self.page = await self.context.new_page()
            self.page.set_default_timeout(settings.BROWSER_TIMEOUT)
        except BaseException:
            # Half-started driver must not outlive a failed start
            await self._shutdown()
            raise

    async def load(self, url: str, timeout_ms: int) -> None:
        """
        Navigate to the game, starting the browser if needed.

        Args:
            url: Game URL
            timeout_ms: Navigation timeout in milliseconds
        """
        if self._closed:
            raise GameQAError(ErrorKind.BROWSER_CRASH, "Browser session already closed")

        if self.page is None or self.page.is_closed():
            await self._start()

        try:
            await self.page.goto(url, wait_until="load", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise GameQAError(ErrorKind.TIMEOUT, f"Page load timeout after {timeout_ms}ms", {"url": url}) from e
        except Exception as e:
            # Navigation failed on a broken session: the next load starts a fresh one
            logger.warning(f"Navigation to {url} failed, discarding browser session: {e}")
            await self._shutdown()
            raise GameQAError(ErrorKind.BROWSER_CRASH, f"Page load failed: {e}", {"url": url}) from e

    async def detect_ui(self) -> UIDetectionResult:
        """Find buttons, canvas elements and menus on the page."""
        raw = await self.run_script(UI_DETECTION_SCRIPT) or {}

        return UIDetectionResult(
            buttons=tuple(UIElement(type="button", **b) for b in raw.get("buttons", [])),
            canvas=tuple(UIElement(type="canvas", **c) for c in raw.get("canvas", [])),
            menus=tuple(UIElement(type="menu", **m) for m in raw.get("menus", [])),
            detected_at=timestamp_now()
        )

    async def run_script(self, source: str) -> Any:
        """
        Execute JavaScript in the page context.

        Args:
            source: JavaScript expression or function source

        Returns:
            Result of the script execution
        """
        page = self._require_page()
        return await page.evaluate(source)

    async def screenshot(self, path: str) -> str:
        """
        Capture the viewport.

        Args:
            path: Path to save the screenshot

        Returns:
            Path to the saved screenshot
        """
        page = self._require_page()
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=path)
        return path

    async def close(self) -> None:
        """Stop the browser and clean up resources. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._shutdown()

    async def _shutdown(self):
        for resource in (self.context, self.browser):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.warning(f"Error while closing browser resource: {e}")
        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"Error while stopping playwright: {e}")
        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

    def _require_page(self) -> Page:
        if self.page is None or self._closed:
            raise GameQAError(ErrorKind.BROWSER_CRASH, "No active browser session")
        return self.page
