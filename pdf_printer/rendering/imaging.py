"""Raster resizing for captured screenshots, backed by Pillow."""

import asyncio
import io

import structlog
from PIL import Image, ImageOps

from ..core.exceptions import CaptureError
from .options import ResizeOptions

logger = structlog.get_logger(__name__)

RESAMPLING_KERNELS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "linear": Image.Resampling.BILINEAR,
    "cubic": Image.Resampling.BICUBIC,
    "lanczos3": Image.Resampling.LANCZOS,
}


def _target_size(image: Image.Image, options: ResizeOptions) -> tuple[int, int]:
    """Fill in a missing dimension from the source aspect ratio."""
    src_width, src_height = image.size
    width, height = options.width, options.height

    if width and not height:
        height = max(1, round(src_height * width / src_width))
    elif height and not width:
        width = max(1, round(src_width * height / src_height))
    return width, height


def _background(image: Image.Image, options: ResizeOptions):
    if image.mode == "RGBA":
        return options.background
    if image.mode == "RGB":
        return options.background[:3]
    return options.background[0]


def _resize(image: Image.Image, options: ResizeOptions) -> Image.Image:
    width, height = _target_size(image, options)
    src_width, src_height = image.size
    kernel = RESAMPLING_KERNELS[options.kernel]

    if options.without_enlargement and src_width <= width and src_height <= height:
        return image

    # a single dimension keeps the aspect ratio whatever the fit
    if options.width is None or options.height is None or options.fit == "fill":
        return image.resize((width, height), kernel)

    if options.fit == "cover":
        return ImageOps.fit(image, (width, height), method=kernel)
    if options.fit == "contain":
        return ImageOps.pad(image, (width, height), method=kernel, color=_background(image, options))
    if options.fit == "inside":
        return ImageOps.contain(image, (width, height), method=kernel)

    # outside: smallest size covering both dimensions
    ratio = max(width / src_width, height / src_height)
    return image.resize(
        (max(1, round(src_width * ratio)), max(1, round(src_height * ratio))), kernel
    )


def resize_image_sync(data: bytes, options: ResizeOptions) -> bytes:
    """Resize encoded image bytes, keeping the input format."""
    if not options.width and not options.height:
        return data

    with Image.open(io.BytesIO(data)) as image:
        image_format = image.format or "PNG"
        image.load()
        resized = _resize(image, options)

        if image_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        buffer = io.BytesIO()
        resized.save(buffer, format=image_format)

    logger.debug(
        "Resized screenshot",
        source_size=image.size,
        target_size=resized.size,
        fit=options.fit,
        kernel=options.kernel,
    )
    return buffer.getvalue()


async def resize_image(data: bytes, options: ResizeOptions) -> bytes:
    """Resize image bytes in a worker thread.

    Raises:
        CaptureError: If the bytes cannot be decoded or re-encoded
    """
    try:
        return await asyncio.to_thread(resize_image_sync, data, options)
    except (OSError, ValueError) as e:
        raise CaptureError("Screenshot resize failed", e) from e
