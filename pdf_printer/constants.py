"""Centralized constants for the PDF printer.

Rendering defaults, browser launch flags and timeouts live here so the
pool, resolver and renderer never hardcode them.
"""

from os import environ

# A4 at 96 dpi, in CSS pixels
A4_WIDTH: int = 794
A4_HEIGHT: int = 1123

# Browser pool
DEFAULT_POOL_SIZE: int = int(environ.get("POOL_SIZE", "3"))

# Timeouts (seconds)
NAVIGATION_TIMEOUT: float = float(environ.get("NAVIGATION_TIMEOUT", "30.0"))
BROWSER_CLOSE_TIMEOUT: float = 10.0

# Chromium flags applied to every launch
DEFAULT_CHROMIUM_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-extensions",
    "--disable-background-timer-throttling",
    "--disable-renderer-backgrounding",
    "--disable-backgrounding-occluded-windows",
)

# Platforms where the serverless Chromium build is tried first
SERVERLESS_PLATFORMS: frozenset[str] = frozenset(["linux"])

# Wait condition for both set_content and goto
LOAD_WAIT_UNTIL: str = "domcontentloaded"

# Class toggled on <html> and <body> for dark mode
DARK_MODE_CLASS: str = "dark"

# Context defaults
DEFAULT_LOCALE: str = "en-US"
DEFAULT_REDUCED_MOTION: str = "reduce"
DEFAULT_DEVICE_SCALE_FACTOR: float = 2

# PDF defaults
DEFAULT_PDF_FORMAT: str = "A4"
DEFAULT_PDF_MARGIN: str = "0px"

# MIME types for embedded assets
ASSET_MIME_TYPES: dict[str, str] = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".otf": "font/otf",
    ".ttf": "font/ttf",
    ".eot": "application/vnd.ms-fontobject",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
DEFAULT_ASSET_MIME_TYPE: str = "application/octet-stream"

# URL prefixes never rewritten by asset embedding
ASSET_SKIP_PREFIXES: tuple[str, ...] = ("data:", "http://", "https://", "#", "mailto:", "tel:")

# Output file extensions
OUTPUT_EXTENSIONS: dict[str, str] = {
    "pdf": ".pdf",
    "png": ".png",
    "jpeg": ".jpg",
}

# CLI
EXIT_CODE_RENDER_FAILED: int = 1
EXIT_CODE_KEYBOARD_INTERRUPT: int = 130
DEFAULT_EXPORT_CONCURRENCY: int = 3
