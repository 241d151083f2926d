"""Test utilities: fake Playwright objects shared across the suite."""

from .fake_browser import (
    FAKE_PDF_BYTES,
    JPEG_MAGIC,
    PDF_MAGIC,
    PNG_MAGIC,
    FakeBrowser,
    FakeContext,
    FakeLauncher,
    FakePage,
    make_jpeg,
    make_png,
)

__all__ = [
    "FAKE_PDF_BYTES",
    "JPEG_MAGIC",
    "PDF_MAGIC",
    "PNG_MAGIC",
    "FakeBrowser",
    "FakeContext",
    "FakeLauncher",
    "FakePage",
    "make_jpeg",
    "make_png",
]
