"""Finder-zone classification: which modules belong to the three 7x7 corner eyes.

Coordinates are module-space, ``x`` is the column and ``y`` the row. Only the
top-left, top-right and bottom-left corners carry finder patterns.
"""

from enum import Enum

FINDER_SIZE = 7


class FinderCorner(Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"


FINDER_CORNERS = (FinderCorner.TOP_LEFT, FinderCorner.TOP_RIGHT, FinderCorner.BOTTOM_LEFT)


def is_top_left_finder(x: int, y: int) -> bool:
    return x < FINDER_SIZE and y < FINDER_SIZE


def is_top_right_finder(x: int, y: int, size: int) -> bool:
    return x > size - FINDER_SIZE - 1 and y < FINDER_SIZE


def is_bottom_left_finder(x: int, y: int, size: int) -> bool:
    return x < FINDER_SIZE and y > size - FINDER_SIZE - 1


def is_finder_module(x: int, y: int, size: int) -> bool:
    """True if module (x, y) of a ``size`` x ``size`` grid lies in any finder zone.

    For grids smaller than 15 modules the zones overlap; a module matching
    several corners is still just a finder module.
    """
    return (
        is_top_left_finder(x, y)
        or is_top_right_finder(x, y, size)
        or is_bottom_left_finder(x, y, size)
    )


def finder_corners_for(x: int, y: int, size: int) -> list[FinderCorner]:
    """Every corner whose zone contains (x, y). Empty for data modules."""
    checks = {
        FinderCorner.TOP_LEFT: is_top_left_finder(x, y),
        FinderCorner.TOP_RIGHT: is_top_right_finder(x, y, size),
        FinderCorner.BOTTOM_LEFT: is_bottom_left_finder(x, y, size),
    }
    return [corner for corner in FINDER_CORNERS if checks[corner]]


def finder_origin(corner: FinderCorner, size: int) -> tuple[int, int]:
    """Module-space (x, y) of the zone's top-left module."""
    far = size - FINDER_SIZE
    return {
        FinderCorner.TOP_LEFT: (0, 0),
        FinderCorner.TOP_RIGHT: (far, 0),
        FinderCorner.BOTTOM_LEFT: (0, far),
    }[corner]


def finder_zone(corner: FinderCorner, size: int) -> tuple[int, int, int, int]:
    """Inclusive module rectangle (x0, y0, x1, y1) covered by ``corner``'s zone."""
    x0, y0 = finder_origin(corner, size)
    return x0, y0, x0 + FINDER_SIZE - 1, y0 + FINDER_SIZE - 1
