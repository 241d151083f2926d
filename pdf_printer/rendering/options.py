"""Render option models, defaults and merging.

Each option category is a partial pydantic model merged over a fixed default
dict. Merging is shallow (caller values replace defaults whole) except for
``viewport`` in context options and ``margin`` in PDF options, which merge
key by key. ``clip`` and everything else is replaced as a unit.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..constants import (
    A4_HEIGHT,
    A4_WIDTH,
    DEFAULT_DEVICE_SCALE_FACTOR,
    DEFAULT_LOCALE,
    DEFAULT_PDF_FORMAT,
    DEFAULT_PDF_MARGIN,
    DEFAULT_REDUCED_MOTION,
)

CONTEXT_DEEP_KEYS: frozenset[str] = frozenset(["viewport"])
PDF_DEEP_KEYS: frozenset[str] = frozenset(["margin"])


class OptionsModel(BaseModel):
    """Base for partial option bags; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True
    )

    def partial(self) -> dict[str, Any]:
        """Only the values the caller actually supplied."""
        return self.model_dump(exclude_none=True)


class Viewport(OptionsModel):
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class Margin(OptionsModel):
    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None


class Clip(OptionsModel):
    x: float
    y: float
    width: float
    height: float


class ContextOptions(OptionsModel):
    """Browser context options."""

    viewport: Optional[Viewport] = None
    color_scheme: Optional[Literal["light", "dark", "no-preference"]] = None
    locale: Optional[str] = None
    reduced_motion: Optional[Literal["reduce", "no-preference"]] = None
    is_mobile: Optional[bool] = None
    has_touch: Optional[bool] = None
    device_scale_factor: Optional[float] = Field(default=None, gt=0)
    bypass_csp: Optional[bool] = None


class PdfOptions(OptionsModel):
    """Options for ``page.pdf``."""

    format: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    print_background: Optional[bool] = None
    prefer_css_page_size: Optional[bool] = Field(default=None, alias="preferCSSPageSize")
    display_header_footer: Optional[bool] = None
    header_template: Optional[str] = None
    footer_template: Optional[str] = None
    outline: Optional[bool] = None
    tagged: Optional[bool] = None
    landscape: Optional[bool] = None
    page_ranges: Optional[str] = None
    scale: Optional[float] = Field(default=None, ge=0.1, le=2)
    margin: Optional[Margin] = None


class ScreenshotOptions(OptionsModel):
    """Options for ``page.screenshot``."""

    full_page: Optional[bool] = None
    type: Optional[Literal["png", "jpeg"]] = None
    quality: Optional[int] = Field(default=None, ge=0, le=100)
    scale: Optional[Literal["css", "device"]] = None
    animations: Optional[Literal["disabled", "allow"]] = None
    caret: Optional[Literal["hide", "show", "initial"]] = None
    omit_background: Optional[bool] = None
    clip: Optional[Clip] = None


class ResizeOptions(OptionsModel):
    """Raster resize parameters applied after a screenshot."""

    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    fit: Literal["cover", "contain", "fill", "inside", "outside"] = "cover"
    kernel: Literal["nearest", "linear", "cubic", "lanczos3"] = "lanczos3"
    without_enlargement: bool = False
    background: tuple[int, int, int, int] = (0, 0, 0, 0)


OptionsT = TypeVar("OptionsT", bound=OptionsModel)
OptionsInput = Union[OptionsModel, Mapping[str, Any], None]


def coerce_options(model: type[OptionsT], value: OptionsInput) -> Optional[OptionsT]:
    """Validate a dict (or pass through a model instance) as ``model``."""
    if value is None or isinstance(value, model):
        return value
    if isinstance(value, OptionsModel):
        return model.model_validate(value.partial())
    return model.model_validate(dict(value))


def default_context_options(dark_mode: bool = False) -> dict[str, Any]:
    return {
        "color_scheme": "dark" if dark_mode else "light",
        "locale": DEFAULT_LOCALE,
        "reduced_motion": DEFAULT_REDUCED_MOTION,
        "viewport": {"width": A4_WIDTH, "height": A4_HEIGHT},
        "is_mobile": False,
        "has_touch": False,
        "device_scale_factor": DEFAULT_DEVICE_SCALE_FACTOR,
        "bypass_csp": True,
    }


def default_pdf_options() -> dict[str, Any]:
    return {
        "format": DEFAULT_PDF_FORMAT,
        "print_background": True,
        "prefer_css_page_size": True,
        "display_header_footer": False,
        "outline": False,
        "scale": 1,
        "margin": {
            "top": DEFAULT_PDF_MARGIN,
            "right": DEFAULT_PDF_MARGIN,
            "bottom": DEFAULT_PDF_MARGIN,
            "left": DEFAULT_PDF_MARGIN,
        },
    }


def default_screenshot_options() -> dict[str, Any]:
    return {
        "full_page": True,
        "type": "png",
        "scale": "css",
        "animations": "disabled",
        "caret": "hide",
        "omit_background": True,
    }


def deep_merge_keys(
    defaults: Mapping[str, Any],
    partial: Mapping[str, Any],
    deep_keys: Iterable[str] = (),
) -> dict[str, Any]:
    """Shallow merge ``partial`` over ``defaults``, merging ``deep_keys`` per sub-key.

    ``None`` values in ``partial`` count as absent.
    """
    merged = dict(defaults)
    deep = set(deep_keys)

    for key, value in partial.items():
        if value is None:
            continue
        if key in deep and isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = {
                **merged[key],
                **{k: v for k, v in value.items() if v is not None},
            }
        else:
            merged[key] = value

    return merged


def _drop_none(options: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in options.items() if v is not None}


def merge_context_options(
    partial: OptionsInput = None, dark_mode: bool = False
) -> dict[str, Any]:
    """Build ``browser.new_context`` keyword arguments."""
    options = coerce_options(ContextOptions, partial)
    supplied = options.partial() if options else {}
    return _drop_none(
        deep_merge_keys(default_context_options(dark_mode), supplied, CONTEXT_DEEP_KEYS)
    )


def merge_pdf_options(partial: OptionsInput = None) -> dict[str, Any]:
    """Build ``page.pdf`` keyword arguments."""
    options = coerce_options(PdfOptions, partial)
    supplied = options.partial() if options else {}
    return _drop_none(deep_merge_keys(default_pdf_options(), supplied, PDF_DEEP_KEYS))


def merge_screenshot_options(partial: OptionsInput = None) -> dict[str, Any]:
    """Build ``page.screenshot`` keyword arguments."""
    options = coerce_options(ScreenshotOptions, partial)
    supplied = options.partial() if options else {}
    merged = _drop_none(deep_merge_keys(default_screenshot_options(), supplied))

    # Playwright spells the visible caret "initial"
    if merged.get("caret") == "show":
        merged["caret"] = "initial"
    return merged
