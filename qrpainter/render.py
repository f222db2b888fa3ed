"""Module and finder-eye renderers. Both only issue primitives on a ``RenderSurface``."""

from PIL import Image, ImageDraw

from qrpainter.encoder import ModuleGrid
from qrpainter.finder import FINDER_CORNERS, finder_zone, is_finder_module
from qrpainter.geometry import finder_eyes, iter_module_circles
from qrpainter.logging import audit, get_logger, trace
from qrpainter.surface import RenderSurface

log = get_logger("render")


def paint_modules(surface: RenderSurface, grid: ModuleGrid, module_size: float, color) -> int:
    """Draw one dot per dark module outside the finder zones. Returns the dot count."""
    count = 0
    for center, radius in iter_module_circles(grid, module_size):
        surface.draw_filled_circle(center, radius, color)
        count += 1
    return count


def paint_finder_eyes(surface: RenderSurface, module_count: int, module_size: float, color) -> None:
    """Draw the three ring-and-dot eyes over the empty finder zones.

    Must run after ``paint_modules`` so the eyes sit on top.
    """
    for eye in finder_eyes(module_count, module_size):
        surface.draw_ring(eye.outer, eye.stroke_width, color)
        (cx, cy) = eye.inner.center
        surface.draw_filled_circle((cx, cy), eye.inner.width / 2.0, color)


ZONE_COLORS = {
    "finder": ((220, 50, 50), (255, 180, 180)),
    "data": ((0, 0, 0), (255, 255, 255)),
}
ZONE_OUTLINE = (150, 0, 0)


@trace
def render_zone_map(grid: ModuleGrid, scale: int = 20, output_path: str | None = None) -> Image.Image:
    """Colour-coded bitmap of the grid: red = finder zone, black/white = drawn as dots.

    Dark/light shades follow each module's value. Debug aid for checking
    which modules the dot renderer skips.
    """
    n = grid.size
    img = Image.new("RGB", (n * scale, n * scale), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    dark_mask = grid.as_array()
    finder_count = 0

    for y in range(n):
        for x in range(n):
            zone = "finder" if is_finder_module(x, y, n) else "data"
            finder_count += zone == "finder"
            dark, light = ZONE_COLORS[zone]
            x0, y0 = x * scale, y * scale
            x1, y1 = x0 + scale - 1, y0 + scale - 1
            draw.rectangle([x0, y0, x1, y1], fill=dark if dark_mask[y, x] else light)
            draw.rectangle([x0, y0, x1, y1], outline=(230, 230, 230))

    # Zone borders, so overlapping zones on tiny grids stay visible.
    for corner in FINDER_CORNERS:
        zx0, zy0, zx1, zy1 = finder_zone(corner, n)
        draw.rectangle([zx0 * scale, zy0 * scale, (zx1 + 1) * scale - 1, (zy1 + 1) * scale - 1],
                       outline=ZONE_OUTLINE, width=max(1, scale // 10))

    if output_path:
        img.save(output_path)
        audit("zones.saved", logger=log, path=output_path, size=f"{n}x{n}", finder=finder_count)
    return img
