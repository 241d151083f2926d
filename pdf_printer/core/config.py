"""Environment-backed settings for the PDF printer."""

import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import DEFAULT_POOL_SIZE, NAVIGATION_TIMEOUT, SERVERLESS_PLATFORMS


class PrinterSettings(BaseSettings):
    """Printer configuration with environment variable support."""

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    # Chromium executable override (highest priority)
    CHROMIUM_EXECUTABLE_PATH: str | None = None

    # Serverless Chromium provider
    USE_SERVERLESS_CHROMIUM: bool = False
    AWS_LAMBDA_FUNCTION_NAME: str | None = None
    SERVERLESS_CHROMIUM_PROVIDER: str | None = None
    SERVERLESS_CHROMIUM_PATH: str | None = None
    SERVERLESS_CHROMIUM_DISABLE_WEBGL: bool = False

    # Pool and page behaviour
    POOL_SIZE: int = DEFAULT_POOL_SIZE
    NAVIGATION_TIMEOUT: float = NAVIGATION_TIMEOUT
    HEADLESS: bool = True

    @field_validator("POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 0:
            raise ValueError("POOL_SIZE must not be negative")
        return v

    @field_validator("NAVIGATION_TIMEOUT")
    @classmethod
    def validate_navigation_timeout(cls, v):
        if v <= 0:
            raise ValueError("NAVIGATION_TIMEOUT must be positive")
        return v

    @property
    def navigation_timeout_ms(self) -> float:
        """Navigation timeout in milliseconds, as Playwright expects."""
        return self.NAVIGATION_TIMEOUT * 1000

    @property
    def is_constrained_platform(self) -> bool:
        """True where sandboxing is commonly restricted."""
        return sys.platform in SERVERLESS_PLATFORMS

    @property
    def force_serverless_chromium(self) -> bool:
        """True when the serverless Chromium build was explicitly requested."""
        return self.USE_SERVERLESS_CHROMIUM or bool(self.AWS_LAMBDA_FUNCTION_NAME)


@lru_cache
def get_settings() -> PrinterSettings:
    """Get the process-wide settings instance."""
    return PrinterSettings()
