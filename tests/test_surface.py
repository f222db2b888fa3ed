import io

import pytest
from PIL import Image

from qrpainter.geometry import Rect
from qrpainter.painter import QrPainter
from qrpainter.surface import ImageFormat, Picture, PillowSurface, encode_image, to_rgba

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def test_to_rgba():
    assert to_rgba((1, 2, 3)) == (1, 2, 3, 255)
    assert to_rgba((1, 2, 3, 4)) == (1, 2, 3, 4)
    assert to_rgba("#ff0000") == (255, 0, 0, 255)
    assert to_rgba("white") == WHITE
    with pytest.raises(ValueError):
        to_rgba((1, 2))


def test_pillow_surface_primitives():
    img = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    surface = PillowSurface(img)
    surface.fill_background("white")
    surface.draw_filled_circle((50, 50), 10, "black")
    surface.draw_ring(Rect(10, 10, 80, 80), 6, "black")

    assert img.getpixel((50, 50)) == BLACK
    assert img.getpixel((50, 30)) == WHITE   # between dot and ring
    assert img.getpixel((50, 10)) == BLACK   # on the ring path
    assert img.getpixel((1, 1)) == WHITE


def test_pillow_surface_scale():
    img = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
    PillowSurface(img, scale=2.0).draw_filled_circle((10, 10), 3, "black")
    assert img.getpixel((20, 20)) == BLACK
    assert img.getpixel((10, 10)) == (0, 0, 0, 0)


def test_exact_pixels_without_supersampling(hello_grid):
    img = QrPainter("HELLO", version=1, empty_color="white").to_image(210, supersample=1)
    assert img.size == (210, 210)

    assert img.getpixel((30, 30)) == BLACK   # top-left eye dot
    assert img.getpixel((30, 10)) == WHITE   # gap between dot and ring
    assert img.getpixel((2, 30)) == BLACK    # ring
    assert img.getpixel((170, 30)) == BLACK   # top-right eye dot
    assert img.getpixel((30, 170)) == BLACK   # bottom-left eye dot

    assert hello_grid.is_dark(6, 8)          # timing pattern module
    assert img.getpixel((80, 60)) == BLACK
    assert img.getpixel((105, 105)) == WHITE  # module centres are never inked


def test_supersampled_edges_blend():
    img = QrPainter("HELLO", version=1, empty_color="white").to_image(210)
    r, g, b, a = img.getpixel((30, 30))
    assert max(r, g, b) < 20 and a == 255
    r, g, b, _ = img.getpixel((30, 10))
    assert min(r, g, b) > 230


def test_transparent_without_background():
    img = QrPainter("HELLO", version=1).to_image(210, supersample=1)
    assert img.getpixel((105, 105)) == (0, 0, 0, 0)


def test_picture_rejects_empty_raster():
    picture = Picture(ops=(), width=10, height=10)
    with pytest.raises(ValueError):
        picture.to_image(0)


def test_picture_scales_to_requested_pixels():
    picture = QrPainter("HELLO", version=1, empty_color="white").to_picture(21)
    img = picture.to_image(210, supersample=1)
    assert img.getpixel((30, 30)) == BLACK


def test_encode_image_formats():
    img = Image.new("RGB", (3, 2), (255, 0, 0))
    raw = encode_image(img, ImageFormat.RAW_RGBA)
    assert raw == bytes([255, 0, 0, 255]) * 6
    png = encode_image(img)
    assert Image.open(io.BytesIO(png)).size == (3, 2)


def test_fixed_scale_clips_instead_of_fitting():
    picture = QrPainter("HELLO", version=1, empty_color="white").to_picture(210)
    img = picture.to_image(100, supersample=1, scale=1.0)
    assert img.size == (100, 100)
    assert img.getpixel((30, 30)) == BLACK   # eye dot drawn at its logical position
    assert img.getpixel((95, 25)) == WHITE   # between dot centres; no eye this side of the clip

    fitted = picture.to_image(100, supersample=1)
    assert fitted.getpixel((30, 30)) == WHITE  # fitted: the dot centre moves to ~14 px
