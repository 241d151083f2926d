"""Tests for screenshot resizing."""

import io

import pytest
from PIL import Image

from pdf_printer.core.exceptions import CaptureError
from pdf_printer.rendering.imaging import resize_image, resize_image_sync
from pdf_printer.rendering.options import ResizeOptions
from tests.utils.fake_browser import make_jpeg, make_png


def size_of(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as image:
        return image.size


def format_of(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as image:
        return image.format


class TestResizeFits:
    """Output geometry for each fit mode on an 80x60 source."""

    @pytest.mark.parametrize(
        ("fit", "expected"),
        [
            ("fill", (40, 40)),
            ("cover", (40, 40)),
            ("contain", (40, 40)),
            ("inside", (40, 30)),
            ("outside", (53, 40)),
        ],
    )
    def test_fit_modes(self, fit, expected):
        data = resize_image_sync(make_png(), ResizeOptions(width=40, height=40, fit=fit))
        assert size_of(data) == expected

    def test_width_only_keeps_aspect(self):
        assert size_of(resize_image_sync(make_png(), ResizeOptions(width=40))) == (40, 30)

    def test_height_only_keeps_aspect(self):
        assert size_of(resize_image_sync(make_png(), ResizeOptions(height=30))) == (40, 30)

    def test_contain_pads_with_background(self):
        options = ResizeOptions(width=40, height=40, fit="contain", background=(0, 255, 0, 255))

        with Image.open(io.BytesIO(resize_image_sync(make_png(), options))) as image:
            assert image.getpixel((0, 0)) == (0, 255, 0, 255)
            assert image.getpixel((20, 20)) == (255, 0, 0, 255)

    def test_without_enlargement(self):
        options = ResizeOptions(width=200, height=200, without_enlargement=True)
        assert size_of(resize_image_sync(make_png(), options)) == (80, 60)

    def test_enlargement_allowed_by_default(self):
        assert size_of(resize_image_sync(make_png(), ResizeOptions(width=160))) == (160, 120)

    @pytest.mark.parametrize("kernel", ["nearest", "linear", "cubic", "lanczos3"])
    def test_kernels(self, kernel):
        data = resize_image_sync(make_png(), ResizeOptions(width=20, kernel=kernel))
        assert size_of(data) == (20, 15)


class TestResizeFormats:
    """Encoding is preserved."""

    def test_png_stays_png(self):
        assert format_of(resize_image_sync(make_png(), ResizeOptions(width=10))) == "PNG"

    def test_jpeg_stays_jpeg(self):
        data = resize_image_sync(make_jpeg(), ResizeOptions(width=10, height=10, fit="contain"))
        assert format_of(data) == "JPEG"

    def test_no_dimensions_returns_input(self):
        source = make_png()
        assert resize_image_sync(source, ResizeOptions()) is source


@pytest.mark.asyncio
class TestAsyncResize:
    """The threaded wrapper."""

    async def test_resize(self):
        data = await resize_image(make_png(), ResizeOptions(width=8, height=8))
        assert size_of(data) == (8, 8)

    async def test_undecodable_bytes(self):
        with pytest.raises(CaptureError) as exc_info:
            await resize_image(b"garbage", ResizeOptions(width=8))

        assert exc_info.value.stage == "capture"
