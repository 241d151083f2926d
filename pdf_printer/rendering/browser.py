"""Browser pooling for PDF and screenshot rendering."""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright

from ..constants import BROWSER_CLOSE_TIMEOUT
from ..core.config import PrinterSettings, get_settings
from ..core.exceptions import BrowserLaunchError
from ..utils.logging import PrinterLogger, ensure_safe
from .resolver import ChromiumResolver, LaunchConfig

Launcher = Callable[[LaunchConfig], Awaitable[Browser]]


@dataclass(frozen=True)
class PoolStats:
    """Snapshot of pool occupancy."""

    capacity: int
    idle: int
    checked_out: int
    temporary: int
    launching: int


class BrowserPool:
    """Pool of Chromium browsers reused across renders.

    Browsers are created lazily up to ``capacity``. When every pooled slot is
    checked out, ``acquire`` launches a temporary browser instead of waiting;
    temporary browsers are closed on release rather than pooled.
    """

    def __init__(
        self,
        settings: Optional[PrinterSettings] = None,
        resolver: Optional[ChromiumResolver] = None,
        launcher: Optional[Launcher] = None,
        logger: Optional[PrinterLogger] = None,
        capacity: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = ensure_safe(logger)
        self.resolver = resolver or ChromiumResolver(self.settings, self.logger)
        self.capacity = self.settings.POOL_SIZE if capacity is None else capacity
        if self.capacity < 0:
            raise ValueError("capacity must not be negative")

        self._launcher = launcher or self._launch_chromium
        self._playwright: Optional[Playwright] = None
        self._playwright_lock = asyncio.Lock()

        self._idle: list[Browser] = []
        self._checked_out: set[Browser] = set()
        self._temporary: set[Browser] = set()
        self._launching = 0
        self._closing: set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    def stats(self) -> PoolStats:
        return PoolStats(
            capacity=self.capacity,
            idle=len(self._idle),
            checked_out=len(self._checked_out),
            temporary=len(self._temporary),
            launching=self._launching,
        )

    async def acquire(self) -> Browser:
        """Acquire a connected browser, launching one if needed."""
        async with self._lock:
            while self._idle:
                browser = self._idle.pop()
                if self._is_connected(browser):
                    self._checked_out.add(browser)
                    return browser
                self.logger.debug("Discarding disconnected browser")
                self._schedule_close(browser)

            pooled = len(self._checked_out) + self._launching < self.capacity
            self._launching += 1

        if not pooled:
            self.logger.warn(
                "Browser pool exhausted, creating temporary browser",
                capacity=self.capacity,
                checked_out=len(self._checked_out),
            )

        try:
            browser = await self._launch()
        except BaseException:
            async with self._lock:
                self._launching -= 1
            raise

        async with self._lock:
            self._launching -= 1
            (self._checked_out if pooled else self._temporary).add(browser)
        return browser

    def release(self, browser: Browser) -> None:
        """Return a browser to the pool or close it. Never raises."""
        temporary = browser in self._temporary
        self._temporary.discard(browser)
        self._checked_out.discard(browser)

        connected = self._is_connected(browser)
        if not temporary and connected and len(self._idle) < self.capacity:
            self._idle.append(browser)
            return

        self._schedule_close(browser)

    @asynccontextmanager
    async def lease(self) -> AsyncGenerator[Browser, None]:
        """Acquire a browser for the duration of the block."""
        browser = await self.acquire()
        try:
            yield browser
        finally:
            self.release(browser)

    async def close_all(self) -> None:
        """Close every idle browser and stop the Playwright driver."""
        async with self._lock:
            browsers, self._idle = self._idle, []

        if browsers:
            self.logger.log("Closing browser pool", browsers=len(browsers))
        await asyncio.gather(*(self._close_quietly(browser) for browser in browsers))

        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

        async with self._playwright_lock:
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except Exception as e:  # pylint: disable=broad-exception-caught
                    self.logger.warn("Error stopping Playwright", error=str(e))
                self._playwright = None

    @staticmethod
    def _is_connected(browser: Browser) -> bool:
        try:
            return browser.is_connected()
        except Exception:  # pylint: disable=broad-exception-caught
            return False

    def _schedule_close(self, browser: Browser) -> None:
        """Close a browser in the background, logging failures."""
        try:
            task = asyncio.get_running_loop().create_task(self._close_quietly(browser))
        except RuntimeError:
            self.logger.warn("No running event loop, browser left for process exit")
            return
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_quietly(self, browser: Browser) -> None:
        try:
            await asyncio.wait_for(browser.close(), BROWSER_CLOSE_TIMEOUT)
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.error("Error closing browser", e)

    async def _launch(self) -> Browser:
        launch_config: Optional[LaunchConfig] = None
        try:
            launch_config = await self.resolver.resolve()
            return await self._launcher(launch_config)
        except BrowserLaunchError:
            raise
        except Exception as e:
            source = launch_config.source.value if launch_config else None
            self.logger.error("Browser launch failed", e, source=source)
            raise BrowserLaunchError("Failed to launch Chromium", e) from e

    async def _launch_chromium(self, launch_config: LaunchConfig) -> Browser:
        async with self._playwright_lock:
            if self._playwright is None:
                self.logger.debug("Starting Playwright driver")
                self._playwright = await async_playwright().start()
            playwright = self._playwright

        return await playwright.chromium.launch(
            **launch_config.to_launch_options(headless=self.settings.HEADLESS)
        )
