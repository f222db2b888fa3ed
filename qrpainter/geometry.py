"""Size/scale math mapping an N x N module grid onto a pixel canvas, plus eye geometry."""

from dataclasses import dataclass

from qrpainter.finder import FINDER_CORNERS, FINDER_SIZE, FinderCorner, finder_origin, is_finder_module

EYE_DIAMETER = FINDER_SIZE - 1
EYE_INNER_DIAMETER = EYE_DIAMETER / 2.0
EYE_INNER_OFFSET = 1.5
MODULE_RADIUS_RATIO = 1 / 3.0


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @classmethod
    def from_ltwh(cls, left, top, width, height) -> "Rect":
        return cls(float(left), float(top), float(width), float(height))

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.left + self.width / 2.0, self.top + self.height / 2.0

    def as_box(self) -> tuple[float, float, float, float]:
        """(x0, y0, x1, y1), the form Pillow takes."""
        return self.left, self.top, self.right, self.bottom


@dataclass(frozen=True)
class EyeGeometry:
    """Pixel-space geometry of one finder eye."""
    corner: FinderCorner
    outer: Rect
    inner: Rect
    stroke_width: float


def shortest_side(size) -> float:
    """Shortest side of a ``(width, height)`` pair or a single square dimension."""
    if isinstance(size, (int, float)):
        return float(size)
    width, height = size
    return float(min(width, height))


def module_size(target: float, module_count: int, gapless: bool = False) -> float:
    """Pixel size of one module when ``module_count`` modules span ``target`` pixels.

    Gapless mode adds one pixel so neighbouring modules overlap and no
    anti-aliasing seam shows between them.
    """
    return target / float(module_count) + (1 if gapless else 0)


def module_circle(x: int, y: int, size: float) -> tuple[tuple[float, float], float]:
    """Centre and radius of the dot drawn for module (x, y).

    The centre sits on the module's top-left corner, not its middle.
    """
    return (x * size, y * size), size * MODULE_RADIUS_RATIO


def iter_module_circles(grid, size: float):
    """Yield ``(center, radius)`` for every dark module outside the finder zones."""
    count = grid.size
    for x in range(count):
        for y in range(count):
            if is_finder_module(x, y, count):
                continue
            if grid.is_dark(y, x):
                yield module_circle(x, y, size)


def eye_geometry(corner: FinderCorner, module_count: int, size: float) -> EyeGeometry:
    ox, oy = finder_origin(corner, module_count)
    outer = Rect.from_ltwh(ox * size, oy * size, EYE_DIAMETER * size, EYE_DIAMETER * size)
    offset = EYE_INNER_OFFSET * size
    inner = Rect.from_ltwh(
        outer.left + offset,
        outer.top + offset,
        EYE_INNER_DIAMETER * size,
        EYE_INNER_DIAMETER * size,
    )
    return EyeGeometry(corner=corner, outer=outer, inner=inner, stroke_width=size)


def finder_eyes(module_count: int, size: float) -> list[EyeGeometry]:
    """Eye geometry for all three corners, in top-left, top-right, bottom-left order."""
    return [eye_geometry(corner, module_count, size) for corner in FINDER_CORNERS]
