import pytest

from qrpainter.finder import (
    FINDER_SIZE,
    FinderCorner,
    finder_corners_for,
    finder_origin,
    finder_zone,
    is_finder_module,
)


def _in_zone(x, y, zone):
    x0, y0, x1, y1 = zone
    return x0 <= x <= x1 and y0 <= y <= y1


def test_version1_zones_exact():
    n = 21
    finder = {(x, y) for x in range(n) for y in range(n) if is_finder_module(x, y, n)}
    expected = set()
    for xs, ys in [(range(0, 7), range(0, 7)), (range(14, 21), range(0, 7)), (range(0, 7), range(14, 21))]:
        expected |= {(x, y) for x in xs for y in ys}
    assert finder == expected


def test_bottom_right_is_never_finder():
    n = 25
    for x in range(n - 7, n):
        for y in range(n - 7, n):
            assert not is_finder_module(x, y, n)


@pytest.mark.parametrize("n", [21, 25, 57, 177])
def test_classifier_matches_exactly_one_zone(n):
    zones = [finder_zone(c, n) for c in FinderCorner]
    for x in range(n):
        for y in range(n):
            hits = sum(_in_zone(x, y, z) for z in zones)
            assert hits <= 1
            assert is_finder_module(x, y, n) == (hits == 1)


def test_zones_disjoint_from_15():
    for n in range(15, 30):
        for x in range(n):
            for y in range(n):
                assert len(finder_corners_for(x, y, n)) <= 1


def test_small_grid_overlap_still_excluded():
    # 10x10: every column 3..6 of the top rows belongs to both top zones.
    assert finder_corners_for(4, 2, 10) == [FinderCorner.TOP_LEFT, FinderCorner.TOP_RIGHT]
    assert is_finder_module(4, 2, 10)
    assert not is_finder_module(8, 8, 10)


def test_origins():
    assert finder_origin(FinderCorner.TOP_LEFT, 21) == (0, 0)
    assert finder_origin(FinderCorner.TOP_RIGHT, 21) == (14, 0)
    assert finder_origin(FinderCorner.BOTTOM_LEFT, 21) == (0, 14)
    assert finder_zone(FinderCorner.TOP_RIGHT, 21) == (14, 0, 20, FINDER_SIZE - 1)
