from __future__ import annotations

from typing import Any, Protocol

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from shop_scraper.errors import ElementWaitTimeout, SessionError

# Element handles are opaque to the engine; it only passes them back to the session.
ElementRef = Any


class BrowserSession(Protocol):
    async def navigate(self, url: str) -> None: ...

    async def wait_for_element(self, selector: str, timeout_ms: int) -> ElementRef: ...

    async def find_all(self, selector: str) -> list[ElementRef]: ...

    async def find(self, selector: str) -> ElementRef | None: ...

    async def execute_script(self, script: str, arg: Any = None) -> Any: ...

    async def fragment_html(self, element: ElementRef) -> str: ...

    async def click(self, element: ElementRef) -> None: ...

    async def fullscreen(self) -> None: ...


class PlaywrightSession:
    """BrowserSession backed by a Playwright page. Never closes the page it wraps."""

    def __init__(self, page: Page, navigation_timeout_ms: int = 60000) -> None:
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms

    async def navigate(self, url: str) -> None:
        try:
            response = await self.page.goto(
                url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms
            )
        except PlaywrightError as exc:
            raise SessionError(f"Navigation to {url} failed: {exc}") from exc
        if response is not None and response.status >= 400:
            raise SessionError(f"Navigation to {url} returned status {response.status}")

    async def wait_for_element(self, selector: str, timeout_ms: int) -> ElementHandle:
        try:
            element = await self.page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementWaitTimeout(f"Timed out after {timeout_ms}ms waiting for {selector}") from exc
        except PlaywrightError as exc:
            raise SessionError(f"Waiting for {selector} failed: {exc}") from exc
        if element is None:
            raise ElementWaitTimeout(f"Element {selector} did not appear")
        return element

    async def find_all(self, selector: str) -> list[ElementHandle]:
        try:
            return await self.page.query_selector_all(selector)
        except PlaywrightError as exc:
            raise SessionError(f"Finding {selector} failed: {exc}") from exc

    async def find(self, selector: str) -> ElementHandle | None:
        try:
            return await self.page.query_selector(selector)
        except PlaywrightError as exc:
            raise SessionError(f"Finding {selector} failed: {exc}") from exc

    async def execute_script(self, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise SessionError(f"Script execution failed: {exc}") from exc

    async def fragment_html(self, element: ElementHandle) -> str:
        try:
            return await element.evaluate("e => e.outerHTML")
        except PlaywrightError as exc:
            raise SessionError(f"Reading element HTML failed: {exc}") from exc

    async def click(self, element: ElementHandle) -> None:
        try:
            await element.click(timeout=30000)
        except PlaywrightError as exc:
            raise SessionError(f"Click failed: {exc}") from exc

    async def fullscreen(self) -> None:
        # Headless browsers have no window to maximise; size the viewport to the screen instead.
        screen = await self.execute_script("() => ({width: screen.width, height: screen.height})")
        width = int(screen.get("width") or 1920) if isinstance(screen, dict) else 1920
        height = int(screen.get("height") or 1080) if isinstance(screen, dict) else 1080
        try:
            await self.page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as exc:
            raise SessionError(f"Resizing viewport failed: {exc}") from exc
