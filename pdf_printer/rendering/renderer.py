"""Render orchestration: HTML or URL in, PDF or image bytes out."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal, Optional

from playwright.async_api import Browser, BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import BaseModel, ConfigDict, model_validator

from ..constants import DARK_MODE_CLASS, LOAD_WAIT_UNTIL
from ..core.config import PrinterSettings, get_settings
from ..core.exceptions import (
    CaptureError,
    NavigationError,
    NavigationTimeoutError,
    PrinterError,
    RenderError,
)
from ..utils.logging import PrinterLogger, ensure_safe
from .browser import BrowserPool
from .imaging import resize_image
from .options import (
    ContextOptions,
    PdfOptions,
    ResizeOptions,
    ScreenshotOptions,
    merge_context_options,
    merge_pdf_options,
    merge_screenshot_options,
)

OutputType = Literal["pdf", "screenshot"]

DARK_MODE_SCRIPT = """(cls) => {
    document.documentElement.classList.add(cls);
    if (document.body) document.body.classList.add(cls);
}"""


class RenderRequest(BaseModel):
    """A single render call: one content source plus presentation options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    html: Optional[str] = None
    url: Optional[str] = None
    output_type: OutputType = "pdf"
    dark_mode: bool = False
    context_options: Optional[ContextOptions] = None
    pdf_options: Optional[PdfOptions] = None
    screenshot_options: Optional[ScreenshotOptions] = None
    resize_options: Optional[ResizeOptions] = None

    @model_validator(mode="after")
    def check_content_source(self):
        if self.html is None and not self.url:
            raise ValueError("Either html or url must be provided")
        return self

    @property
    def source(self) -> str:
        """Which content source is loaded; HTML wins over URL."""
        return "html" if self.html is not None else "url"


@contextmanager
def _stage(name: str) -> Iterator[None]:
    """Translate failures inside a render stage into PrinterErrors."""
    try:
        yield
    except PrinterError:
        raise
    except PlaywrightTimeoutError as e:
        if name == "load":
            raise NavigationTimeoutError("Content did not load in time", e) from e
        raise _stage_error(name, e) from e
    except Exception as e:
        raise _stage_error(name, e) from e


def _stage_error(name: str, cause: Exception) -> PrinterError:
    if name == "load":
        return NavigationError("Failed to load content", cause)
    if name == "capture":
        return CaptureError("Failed to capture output", cause)
    return RenderError(f"Render stage '{name}' failed", stage=name, cause=cause)


class Renderer:
    """Drives one page through the render stages on a given browser."""

    def __init__(
        self,
        settings: Optional[PrinterSettings] = None,
        logger: Optional[PrinterLogger] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = ensure_safe(logger)

    async def render(self, browser: Browser, request: RenderRequest) -> bytes:
        """Render ``request`` in a fresh context; page and context are always closed."""
        context: Optional[BrowserContext] = None
        page: Optional[Page] = None

        try:
            with _stage("context"):
                context_options = merge_context_options(
                    request.context_options, dark_mode=request.dark_mode
                )
                context = await browser.new_context(**context_options)
                page = await context.new_page()

            with _stage("load"):
                await self.load_content(page, request)

            with _stage("dark_mode"):
                if request.dark_mode:
                    await self.apply_dark_mode(page)

            with _stage("emulate"):
                if request.output_type == "pdf":
                    await page.emulate_media(media="print")

            with _stage("capture"):
                if request.output_type == "pdf":
                    return await self.render_pdf(page, request.pdf_options)
                return await self.render_screenshot(
                    page, request.screenshot_options, request.resize_options
                )
        except PrinterError as e:
            self.logger.error(
                "Render failed",
                e,
                stage=e.stage,
                output_type=request.output_type,
                source=request.source,
            )
            raise
        finally:
            await self._teardown(page, context)

    async def load_content(self, page: Page, request: RenderRequest) -> None:
        """Load HTML directly, or navigate and wait for the load event."""
        timeout = self.settings.navigation_timeout_ms

        if request.html is not None:
            if request.url:
                self.logger.debug("Both html and url given, rendering html", url=request.url)
            await page.set_content(request.html, wait_until=LOAD_WAIT_UNTIL, timeout=timeout)
            return

        self.logger.debug("Navigating", url=request.url)
        await page.goto(request.url, wait_until=LOAD_WAIT_UNTIL, timeout=timeout)
        # DOMContentLoaded can fire before script-driven layout settles
        await page.wait_for_load_state("load", timeout=timeout)

    async def apply_dark_mode(self, page: Page) -> None:
        """Add the dark class to <html> and <body>. Safe to repeat."""
        await page.evaluate(DARK_MODE_SCRIPT, DARK_MODE_CLASS)

    async def render_pdf(self, page: Page, pdf_options: Optional[PdfOptions] = None) -> bytes:
        return await page.pdf(**merge_pdf_options(pdf_options))

    async def render_screenshot(
        self,
        page: Page,
        screenshot_options: Optional[ScreenshotOptions] = None,
        resize_options: Optional[ResizeOptions] = None,
    ) -> bytes:
        data = await page.screenshot(**merge_screenshot_options(screenshot_options))
        if resize_options is not None:
            data = await resize_image(data, resize_options)
        return data

    async def _teardown(self, page: Optional[Page], context: Optional[BrowserContext]) -> None:
        if page is not None:
            try:
                await page.close()
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.debug("Error closing page", error=str(e))
        if context is not None:
            try:
                await context.close()
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.debug("Error closing browser context", error=str(e))


class PrinterService:
    """Pooled rendering service.

    Example:
        ```python
        async with PrinterService() as printer:
            pdf = await printer.render_document(html="<h1>Hi</h1>")
        ```
    """

    def __init__(
        self,
        settings: Optional[PrinterSettings] = None,
        logger: Optional[PrinterLogger] = None,
        pool: Optional[BrowserPool] = None,
        renderer: Optional[Renderer] = None,
        pool_size: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = ensure_safe(logger)
        self.pool = pool or BrowserPool(self.settings, logger=self.logger, capacity=pool_size)
        self.renderer = renderer or Renderer(self.settings, self.logger)

    async def render_document(
        self, request: Optional[RenderRequest] = None, **fields: Any
    ) -> bytes:
        """Render a request (or the keyword fields of one) to bytes."""
        if request is None:
            request = RenderRequest(**fields)
        elif fields:
            request = RenderRequest(**{**dict(request), **fields})

        start_time = time.perf_counter()
        browser = await self.pool.acquire()
        try:
            data = await self.renderer.render(browser, request)
        finally:
            self.pool.release(browser)

        self.logger.log(
            "Rendered document",
            output_type=request.output_type,
            source=request.source,
            size_bytes=len(data),
            render_time=round(time.perf_counter() - start_time, 3),
        )
        return data

    async def shutdown(self) -> None:
        """Close all pooled browsers. Safe to call more than once."""
        await self.pool.close_all()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()


_default_service: Optional[PrinterService] = None


def get_printer_service() -> PrinterService:
    """Get the lazily created process-wide service."""
    global _default_service  # pylint: disable=global-statement
    if _default_service is None:
        _default_service = PrinterService()
    return _default_service


async def render_document(request: Optional[RenderRequest] = None, **fields: Any) -> bytes:
    """Render with the process-wide service."""
    return await get_printer_service().render_document(request, **fields)


async def shutdown() -> None:
    """Close the process-wide service's browsers, if it was ever created."""
    if _default_service is not None:
        await _default_service.shutdown()
