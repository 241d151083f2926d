"""Headless Chromium rendering of HTML to PDF and screenshots.

Key Components:
    - ChromiumResolver: Picks the Chromium executable and launch flags once
    - BrowserPool: Reuses browsers across renders, overflowing to temporary ones
    - Renderer: Runs the context, load, dark mode, print and capture stages
    - PrinterService: Pool plus renderer behind ``render_document``

Example Usage:
    ```python
    from pdf_printer.rendering import render_document, shutdown

    pdf_bytes = await render_document(html="<h1>Hi</h1>", output_type="pdf")
    await shutdown()
    ```
"""

from pdf_printer.rendering.browser import BrowserPool, PoolStats
from pdf_printer.rendering.imaging import resize_image
from pdf_printer.rendering.options import (
    ContextOptions,
    PdfOptions,
    ResizeOptions,
    ScreenshotOptions,
    merge_context_options,
    merge_pdf_options,
    merge_screenshot_options,
)
from pdf_printer.rendering.renderer import (
    PrinterService,
    Renderer,
    RenderRequest,
    get_printer_service,
    render_document,
    shutdown,
)
from pdf_printer.rendering.resolver import ChromiumResolver, LaunchConfig, LaunchSource

__all__ = [
    # Browser management
    "ChromiumResolver",
    "LaunchConfig",
    "LaunchSource",
    "BrowserPool",
    "PoolStats",
    # Options
    "ContextOptions",
    "PdfOptions",
    "ScreenshotOptions",
    "ResizeOptions",
    "merge_context_options",
    "merge_pdf_options",
    "merge_screenshot_options",
    "resize_image",
    # Rendering
    "RenderRequest",
    "Renderer",
    "PrinterService",
    "get_printer_service",
    "render_document",
    "shutdown",
]
