"""Render option profiles loaded from YAML or JSON files."""

import json
from pathlib import Path
from typing import Any, Optional, Union

import structlog
import yaml
from pydantic import ValidationError

from ..core.exceptions import ConfigurationError
from ..rendering.options import ContextOptions, PdfOptions, ResizeOptions, ScreenshotOptions

logger = structlog.get_logger(__name__)

# profile section -> RenderRequest field and option model
PROFILE_SECTIONS: dict[str, tuple[str, type]] = {
    "context": ("context_options", ContextOptions),
    "pdf": ("pdf_options", PdfOptions),
    "screenshot": ("screenshot_options", ScreenshotOptions),
    "resize": ("resize_options", ResizeOptions),
}
PROFILE_SCALARS: dict[str, str] = {
    "output_type": "output_type",
    "dark_mode": "dark_mode",
}


class OptionsLoader:
    """Load render option profiles."""

    @staticmethod
    def load_config(
        config_path: Union[str, Path], config_type: Optional[str] = None
    ) -> dict[str, Any]:
        """Load a profile file.

        Args:
            config_path: Path to configuration file
            config_type: Optional type override ('yaml', 'json')

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If the file is missing, malformed or of unknown type
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        file_type = (config_type or config_path.suffix.lstrip(".")).lower()

        if file_type in ("yaml", "yml"):
            config = OptionsLoader._load_yaml(config_path)
        elif file_type == "json":
            config = OptionsLoader._load_json(config_path)
        else:
            raise ConfigurationError(f"Unsupported config format: {file_type}")

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
        return config

    @staticmethod
    def _load_yaml(config_path: Path) -> Any:
        try:
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}", cause=e) from e
        logger.info("Loaded YAML config", path=str(config_path))
        return config

    @staticmethod
    def _load_json(config_path: Path) -> Any:
        try:
            with open(config_path, encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}", cause=e) from e
        logger.info("Loaded JSON config", path=str(config_path))
        return config

    @staticmethod
    def create_request_fields(config_dict: dict[str, Any]) -> dict[str, Any]:
        """Turn a profile dictionary into ``RenderRequest`` keyword fields."""
        unknown = set(config_dict) - set(PROFILE_SECTIONS) - set(PROFILE_SCALARS)
        if unknown:
            raise ConfigurationError(f"Unknown profile sections: {', '.join(sorted(unknown))}")

        fields: dict[str, Any] = {}
        for section, (field_name, model) in PROFILE_SECTIONS.items():
            value = config_dict.get(section)
            if value is None:
                continue
            try:
                fields[field_name] = model.model_validate(value)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid '{section}' options", cause=e) from e

        for key, field_name in PROFILE_SCALARS.items():
            if key in config_dict:
                fields[field_name] = config_dict[key]

        logger.debug("Created render fields", fields=list(fields))
        return fields

    @staticmethod
    def save_example_config(output_path: Union[str, Path], format: str = "yaml") -> None:
        """Save an example profile.

        Args:
            output_path: Path to save example config
            format: Format to save ('yaml' or 'json')
        """
        output_path = Path(output_path)

        example_config = {
            "output_type": "pdf",
            "dark_mode": False,
            "context": {"viewport": {"width": 794, "height": 1123}, "locale": "en-US"},
            "pdf": {
                "format": "A4",
                "printBackground": True,
                "margin": {"top": "10mm", "bottom": "10mm"},
            },
            "screenshot": {"fullPage": True, "type": "png"},
            "resize": {"width": 1588, "fit": "inside"},
        }

        if format.lower() == "yaml":
            with open(output_path, "w", encoding="utf-8") as f:
                yaml.dump(example_config, f, default_flow_style=False, sort_keys=False, indent=2)
        elif format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(example_config, f, indent=2)
        else:
            raise ConfigurationError(f"Unsupported format: {format}")

        logger.info("Saved example config", path=str(output_path), format=format)


def load_request_fields(config_path: Union[str, Path]) -> dict[str, Any]:
    """Load a profile file straight into ``RenderRequest`` keyword fields."""
    return OptionsLoader.create_request_fields(OptionsLoader.load_config(config_path))
