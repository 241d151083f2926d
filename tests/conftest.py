"""Shared fixtures and test configuration for pytest."""

import os
from pathlib import Path

import pytest
import structlog

from pdf_printer.core.config import PrinterSettings, get_settings
from pdf_printer.rendering.browser import BrowserPool
from pdf_printer.rendering.renderer import PrinterService, Renderer
from pdf_printer.rendering.resolver import ChromiumResolver
from tests.utils.fake_browser import FakeLauncher

# Configure structlog before any module caches a logger
structlog.reset_defaults()
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    context_class=dict,
    cache_logger_on_first_use=False,
)


class RecordingLogger:
    """PrinterLogger that keeps every call for assertions."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def debug(self, message, **fields):
        self.records.append(("debug", message, fields))

    def log(self, message, **fields):
        self.records.append(("log", message, fields))

    def warn(self, message, **fields):
        self.records.append(("warn", message, fields))

    def error(self, message, error=None, **fields):
        self.records.append(("error", message, {"error": error, **fields}))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message, _ in self.records if lvl == level]


PRINTER_ENV_VARS = (
    "CHROMIUM_EXECUTABLE_PATH",
    "USE_SERVERLESS_CHROMIUM",
    "AWS_LAMBDA_FUNCTION_NAME",
    "SERVERLESS_CHROMIUM_PROVIDER",
    "SERVERLESS_CHROMIUM_PATH",
    "SERVERLESS_CHROMIUM_DISABLE_WEBGL",
    "POOL_SIZE",
    "NAVIGATION_TIMEOUT",
    "HEADLESS",
)


@pytest.fixture(autouse=True)
def clean_printer_env(request, monkeypatch):
    """Keep host environment variables out of PrinterSettings in unit tests."""
    if "browser" not in request.keywords:
        for name in PRINTER_ENV_VARS:
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def printer_settings():
    """Settings that never touch a real Chromium or provider."""
    return PrinterSettings(
        CHROMIUM_EXECUTABLE_PATH="/opt/fake/chromium",
        POOL_SIZE=2,
        NAVIGATION_TIMEOUT=5.0,
    )


@pytest.fixture
def fake_launcher():
    return FakeLauncher()


@pytest.fixture
def browser_pool(printer_settings, fake_launcher, recording_logger):
    resolver = ChromiumResolver(printer_settings, recording_logger)
    return BrowserPool(
        printer_settings, resolver=resolver, launcher=fake_launcher, logger=recording_logger
    )


@pytest.fixture
def renderer(printer_settings, recording_logger):
    return Renderer(printer_settings, recording_logger)


@pytest.fixture
def printer_service(printer_settings, browser_pool, renderer, recording_logger):
    return PrinterService(
        printer_settings, logger=recording_logger, pool=browser_pool, renderer=renderer
    )


@pytest.fixture
def sample_html():
    """Sample document with print styles and local assets."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Invoice</title>
        <style>
            @font-face { font-family: Inter; src: url('/fonts/inter.woff2'); }
            @page { size: A4; margin: 0; }
            @media print { .no-print { display: none; } }
            .dark body { background: #111; }
        </style>
    </head>
    <body>
        <h1>Invoice #42</h1>
        <img src="/images/logo.png" alt="Logo">
        <img src="https://cdn.example.com/remote.png" alt="Remote">
        <a href="#totals">Totals</a>
        <p class="no-print">Screen only</p>
    </body>
    </html>
    """


def _chromium_installed() -> bool:
    if os.environ.get("CHROMIUM_EXECUTABLE_PATH"):
        return Path(os.environ["CHROMIUM_EXECUTABLE_PATH"]).exists()
    browsers_path = Path(
        os.environ.get("PLAYWRIGHT_BROWSERS_PATH", Path.home() / ".cache" / "ms-playwright")
    )
    return browsers_path.is_dir() and any(browsers_path.glob("chromium*"))


def pytest_collection_modifyitems(config, items):
    """Skip real-browser tests when Playwright's Chromium is not installed."""
    if _chromium_installed():
        return

    skip_browser = pytest.mark.skip(reason="Playwright Chromium not installed")
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)
