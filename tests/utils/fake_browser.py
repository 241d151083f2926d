"""Fake Playwright objects for exercising the pool and renderer without Chromium.

The fakes follow the same pattern as the rest of the suite: small classes
with a ``behavior_mode`` switch instead of AsyncMock configuration, and a
shared ``events`` list so tests can assert stage ordering.
"""

import asyncio
import io
from typing import Any, Optional

from PIL import Image
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

FAKE_PDF_BYTES = b"%PDF-1.7\n% fake document\n%%EOF"

# Leading bytes of each output format
PDF_MAGIC = b"%PDF-"
PNG_MAGIC = b"\x89PNG"
JPEG_MAGIC = b"\xff\xd8\xff"


def make_png(size: tuple[int, int] = (80, 60), color=(255, 0, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_jpeg(size: tuple[int, int] = (80, 60), color=(0, 0, 255)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


class FakePage:
    """Fake page recording every call into the shared event log."""

    def __init__(self, events: list, behavior_mode: str = "normal"):
        self.events = events
        self.behavior_mode = behavior_mode
        self.closed = False
        self.html_classes: set[str] = set()
        self.body_classes: set[str] = set()
        self.media: Optional[str] = None
        self.pdf_kwargs: Optional[dict[str, Any]] = None
        self.screenshot_kwargs: Optional[dict[str, Any]] = None
        self.content: Optional[str] = None
        self.url: Optional[str] = None

    async def set_content(self, html: str, **kwargs):
        self.events.append(("set_content", kwargs))
        if self.behavior_mode == "load_timeout":
            raise PlaywrightTimeout("Timeout 30000ms exceeded.")
        self.content = html

    async def goto(self, url: str, **kwargs):
        self.events.append(("goto", kwargs))
        if self.behavior_mode == "load_timeout":
            raise PlaywrightTimeout("Timeout 30000ms exceeded.")
        if self.behavior_mode == "navigation_failure":
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
        self.url = url

    async def wait_for_load_state(self, state: str = "load", **kwargs):
        self.events.append(("wait_for_load_state", state))

    async def evaluate(self, script: str, arg: Any = None):
        self.events.append(("evaluate", arg))
        if self.behavior_mode == "evaluate_failure":
            raise PlaywrightError("Execution context was destroyed")
        self.html_classes.add(arg)
        self.body_classes.add(arg)

    async def emulate_media(self, **kwargs):
        self.events.append(("emulate_media", kwargs))
        self.media = kwargs.get("media")

    async def pdf(self, **kwargs) -> bytes:
        self.events.append(("pdf", kwargs))
        if self.behavior_mode == "capture_failure":
            raise PlaywrightError("Printing failed")
        self.pdf_kwargs = kwargs
        return FAKE_PDF_BYTES

    async def screenshot(self, **kwargs) -> bytes:
        self.events.append(("screenshot", kwargs))
        if self.behavior_mode == "capture_failure":
            raise PlaywrightError("Screenshot failed")
        if self.behavior_mode == "corrupt_screenshot":
            return b"not an image"
        self.screenshot_kwargs = kwargs
        if kwargs.get("type") == "jpeg":
            return make_jpeg()
        return make_png()

    async def close(self):
        self.events.append(("page.close", None))
        self.closed = True
        if self.behavior_mode == "close_failure":
            raise PlaywrightError("Target closed")


class FakeContext:
    """Fake browser context."""

    def __init__(self, events: list, options: dict[str, Any], behavior_mode: str = "normal"):
        self.events = events
        self.options = options
        self.behavior_mode = behavior_mode
        self.closed = False
        self.pages: list[FakePage] = []

    async def new_page(self) -> FakePage:
        self.events.append(("new_page", None))
        if self.behavior_mode == "page_failure":
            raise PlaywrightError("Failed to create new page")
        page = FakePage(self.events, self.behavior_mode)
        self.pages.append(page)
        return page

    async def close(self):
        self.events.append(("context.close", None))
        self.closed = True
        if self.behavior_mode == "close_failure":
            raise PlaywrightError("Context already closed")


class FakeBrowser:
    """Fake browser handle with togglable connectivity."""

    def __init__(self, ident: int, behavior_mode: str = "normal", events: Optional[list] = None):
        self.ident = ident
        self.behavior_mode = behavior_mode
        self.events = events if events is not None else []
        self.connected = True
        self.closed = False
        self.contexts: list[FakeContext] = []

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **kwargs) -> FakeContext:
        self.events.append(("new_context", kwargs))
        if self.behavior_mode == "context_failure":
            raise PlaywrightError("Failed to create browser context")
        context = FakeContext(self.events, kwargs, self.behavior_mode)
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True
        self.connected = False
        if self.behavior_mode == "browser_close_hang":
            await asyncio.Event().wait()
        if self.behavior_mode == "browser_close_failure":
            raise PlaywrightError("Browser has been closed")

    def __repr__(self) -> str:
        return f"FakeBrowser({self.ident})"


class FakeLauncher:
    """Launch callable handed to BrowserPool in place of Playwright."""

    def __init__(self, behavior_mode: str = "normal", fail: bool = False):
        self.behavior_mode = behavior_mode
        self.fail = fail
        self.launched: list[FakeBrowser] = []
        self.launch_configs: list = []
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, launch_config) -> FakeBrowser:
        self.launch_configs.append(launch_config)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise PlaywrightError("Executable doesn't exist")
        browser = FakeBrowser(len(self.launched), self.behavior_mode)
        self.launched.append(browser)
        return browser
