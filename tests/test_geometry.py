import pytest

from qrpainter.encoder import ModuleGrid
from qrpainter.finder import FinderCorner
from qrpainter.geometry import (
    Rect,
    finder_eyes,
    iter_module_circles,
    module_circle,
    module_size,
    shortest_side,
)


@pytest.mark.parametrize("target,n", [(210, 21), (400, 25), (333.3, 29), (1, 177)])
def test_module_size_spans_target(target, n):
    assert module_size(target, n) * n == pytest.approx(target)


def test_gapless_adds_one():
    assert module_size(210, 21, gapless=True) == pytest.approx(11.0)
    assert module_size(100, 21, gapless=True) == pytest.approx(100 / 21 + 1)


def test_shortest_side():
    assert shortest_side((300, 200)) == 200
    assert shortest_side(150) == 150.0
    assert shortest_side((0, 50)) == 0


def test_module_circle_is_corner_anchored():
    center, radius = module_circle(3, 5, 10.0)
    assert center == (30.0, 50.0)
    assert radius == pytest.approx(10 / 3)


def test_iter_module_circles_skips_finders():
    grid = ModuleGrid.from_matrix([[True] * 21 for _ in range(21)])
    circles = list(iter_module_circles(grid, 10.0))
    assert len(circles) == 21 * 21 - 3 * 49
    centers = {c for c, _ in circles}
    assert (0.0, 0.0) not in centers
    assert (70.0, 0.0) in centers


def test_eye_geometry_version1():
    eyes = finder_eyes(21, 10.0)
    assert [e.corner for e in eyes] == [FinderCorner.TOP_LEFT, FinderCorner.TOP_RIGHT, FinderCorner.BOTTOM_LEFT]

    tl, tr, bl = eyes
    assert tl.outer == Rect(0.0, 0.0, 60.0, 60.0)
    assert tl.inner == Rect(15.0, 15.0, 30.0, 30.0)
    assert tl.stroke_width == 10.0

    assert tr.outer.as_box() == (140.0, 0.0, 200.0, 60.0)
    assert tr.inner.as_box() == (155.0, 15.0, 185.0, 45.0)
    assert bl.outer.as_box() == (0.0, 140.0, 60.0, 200.0)
    assert bl.inner.as_box() == (15.0, 155.0, 45.0, 185.0)


def test_inner_dot_is_centred_in_ring():
    for eye in finder_eyes(33, 7.5):
        assert eye.inner.center == pytest.approx(eye.outer.center)
