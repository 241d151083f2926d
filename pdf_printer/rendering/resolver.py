"""Chromium executable and launch flag resolution.

Decides once per process which Chromium binary Playwright should launch:

1. an explicit ``CHROMIUM_EXECUTABLE_PATH`` override,
2. a serverless Chromium provider module on Linux or when forced,
3. Playwright's bundled Chromium.

Resolution never raises; provider failures fall back to the bundled browser.
"""

import asyncio
import importlib
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..constants import DEFAULT_CHROMIUM_ARGS
from ..core.config import PrinterSettings, get_settings
from ..core.exceptions import ResolutionError
from ..utils.logging import PrinterLogger, ensure_safe


class LaunchSource(Enum):
    """Where a launch configuration came from."""

    OVERRIDE = "override"
    SERVERLESS = "serverless"
    BUNDLED = "bundled"


@dataclass(frozen=True)
class LaunchConfig:
    """Immutable Chromium launch configuration."""

    args: tuple[str, ...] = DEFAULT_CHROMIUM_ARGS
    executable_path: Optional[str] = None
    source: LaunchSource = LaunchSource.BUNDLED

    def to_launch_options(self, headless: bool = True) -> dict[str, Any]:
        """Keyword arguments for ``BrowserType.launch``."""
        options: dict[str, Any] = {"headless": headless, "args": list(self.args)}
        if self.executable_path:
            options["executable_path"] = self.executable_path
        return options


class ChromiumResolver:
    """Resolves and memoizes the Chromium launch configuration."""

    def __init__(
        self,
        settings: Optional[PrinterSettings] = None,
        logger: Optional[PrinterLogger] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = ensure_safe(logger)
        self._resolved: Optional[LaunchConfig] = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> Optional[LaunchConfig]:
        """The cached configuration, if resolution already happened."""
        return self._resolved

    async def resolve(self) -> LaunchConfig:
        """Resolve the launch configuration, computing it at most once."""
        if self._resolved is not None:
            return self._resolved

        async with self._lock:
            if self._resolved is None:
                self._resolved = await self._resolve()
                self.logger.debug(
                    "Resolved Chromium launch configuration",
                    source=self._resolved.source.value,
                    executable_path=self._resolved.executable_path,
                    arg_count=len(self._resolved.args),
                )
        return self._resolved

    async def _resolve(self) -> LaunchConfig:
        settings = self.settings

        if settings.CHROMIUM_EXECUTABLE_PATH:
            return LaunchConfig(
                executable_path=settings.CHROMIUM_EXECUTABLE_PATH,
                source=LaunchSource.OVERRIDE,
            )

        if settings.is_constrained_platform or settings.force_serverless_chromium:
            try:
                return await self._resolve_serverless()
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.warn(
                    "Serverless Chromium unavailable, falling back to Playwright's default Chromium",
                    reason=str(e),
                )
        else:
            self.logger.log("Using Playwright's default Chromium")

        return LaunchConfig(source=LaunchSource.BUNDLED)

    async def _resolve_serverless(self) -> LaunchConfig:
        provider = self._load_provider()

        try:
            path_arg = self.settings.SERVERLESS_CHROMIUM_PATH
            result = (
                provider.executable_path(path_arg) if path_arg else provider.executable_path()
            )
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ResolutionError("Serverless Chromium executable resolution failed", e) from e

        if not result:
            raise ResolutionError("Serverless Chromium provider returned no executable path")

        provider_args = getattr(provider, "args", None)
        if not isinstance(provider_args, (list, tuple)):
            provider_args = []

        if self.settings.SERVERLESS_CHROMIUM_DISABLE_WEBGL:
            try:
                provider.set_graphics_mode = False
            except Exception as e:  # pylint: disable=broad-exception-caught
                raise ResolutionError("Provider does not allow disabling WebGL", e) from e

        self.logger.log("Using serverless Chromium", executable_path=str(result))

        return LaunchConfig(
            args=(*[str(a) for a in provider_args], *DEFAULT_CHROMIUM_ARGS),
            executable_path=str(result),
            source=LaunchSource.SERVERLESS,
        )

    def _load_provider(self) -> Any:
        """Import the configured serverless Chromium provider module."""
        module_name = self.settings.SERVERLESS_CHROMIUM_PROVIDER
        if not module_name:
            raise ResolutionError("No serverless Chromium provider configured")

        module_name, _, attr = module_name.partition(":")
        try:
            module = importlib.import_module(module_name)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise ResolutionError(f"Cannot import provider {module_name}", e) from e

        try:
            provider = getattr(module, attr) if attr else getattr(module, "default", module)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise ResolutionError(f"Provider {module_name} has no attribute {attr}", e) from e

        if not hasattr(provider, "executable_path"):
            raise ResolutionError(f"Provider {module_name} has no executable_path")
        return provider
