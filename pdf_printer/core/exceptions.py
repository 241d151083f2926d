"""Custom exceptions for the PDF printer."""


class PrinterError(Exception):
    """Base exception for rendering errors."""

    retryable: bool = False

    def __init__(self, message: str, stage: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        msg = super().__str__()
        if self.stage:
            msg = f"{msg} (Stage: {self.stage})"
        if self.cause:
            msg = f"{msg} (Caused by: {self.cause})"
        return msg


class ResolutionError(PrinterError):
    """Raised when a Chromium provider cannot be resolved.

    Never leaves the resolver: it falls back to the bundled browser.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="resolve", cause=cause)


class BrowserLaunchError(PrinterError):
    """Exception raised when the browser process fails to start."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="launch", cause=cause)


class NavigationError(PrinterError):
    """Exception raised when content fails to load."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="load", cause=cause)


class NavigationTimeoutError(NavigationError):
    """Exception raised when content does not load within the timeout."""

    retryable = True


class CaptureError(PrinterError):
    """Exception raised when PDF, screenshot or resize generation fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, stage="capture", cause=cause)


class RenderError(PrinterError):
    """Exception raised for any other render stage failure."""

    pass


class ConfigurationError(PrinterError):
    """Exception raised for configuration-related errors."""

    pass
