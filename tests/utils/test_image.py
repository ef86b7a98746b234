import base64

from PIL import Image

from wojak_compositor.utils.image import (
    clear_surface,
    clip_columns,
    composite_clipped,
    fit_to_canvas,
    to_data_url,
)
from tests.test_utils import BLUE, CLEAR, RED, solid_image


def test_fit_to_canvas_converts_and_resizes() -> None:
    image = Image.new("RGB", (4, 4), (255, 0, 0))
    fitted = fit_to_canvas(image, 8)
    assert fitted.mode == "RGBA"
    assert fitted.size == (8, 8)
    assert fitted.getpixel((3, 3)) == RED


def test_fit_to_canvas_keeps_matching_image() -> None:
    image = solid_image(RED)
    assert fit_to_canvas(image, 8) is image


def test_clip_columns_leaves_source_untouched() -> None:
    image = solid_image(RED)
    clipped = clip_columns(image, 2, 8)
    assert clipped.getpixel((1, 0))[3] == 0
    assert clipped.getpixel((2, 0)) == RED
    assert image.getpixel((1, 0)) == RED


def test_clip_columns_clamps_range() -> None:
    clipped = clip_columns(solid_image(RED), -3, 100)
    assert clipped.getpixel((0, 0)) == RED
    assert clipped.getpixel((7, 7)) == RED


def test_composite_clipped() -> None:
    surface = solid_image(BLUE)
    composite_clipped(surface, solid_image(RED), (4, 8))
    assert surface.getpixel((3, 0)) == BLUE
    assert surface.getpixel((4, 0)) == RED

    composite_clipped(surface, solid_image(RED))
    assert surface.getpixel((0, 0)) == RED


def test_clear_surface() -> None:
    surface = solid_image(RED)
    clear_surface(surface)
    assert surface.getpixel((5, 5)) == CLEAR


def test_to_data_url() -> None:
    url = to_data_url(b"\x89PNG", "image/png")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]) == b"\x89PNG"
