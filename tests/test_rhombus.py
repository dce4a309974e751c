import math
from dataclasses import replace

import pytest
from structlog.testing import capture_logs

from pentatile.geometry import distance, polygon_signed_area, segment_intersection
from pentatile.intersections import find_intersections
from pentatile.models import Intersection, RhombType, TileState
from pentatile.pentagrid import generate_pentagrid
from pentatile.rhombus import (
    FAMILY_OFFSETS,
    build_tile,
    build_tiles,
    check_perpendicular,
    rhombus_vertices,
)

GAMMAS = [0.17, 0.21, 0.28, 0.3, 0.04]
SCALE = 40.0


@pytest.fixture()
def star_intersections():
    return find_intersections(generate_pentagrid(GAMMAS, 80.0, 0, 600.0))


def test_star_builds_ten_rhombi(star_intersections):
    tiles = build_tiles(star_intersections, SCALE)
    assert len(tiles) == 10
    for tile in tiles:
        assert len(tile.vertices) == 4
        for a, b in tile.edges():
            assert distance(a, b) == pytest.approx(SCALE)
        # simple quadrilateral: the diagonals cross
        v = tile.vertices
        assert segment_intersection(v[0], v[2], v[1], v[3]) is not None


def test_tile_is_centred_on_intersection(star_intersections):
    for found in star_intersections:
        tile = build_tile(found, SCALE)
        assert tile.centroid() == pytest.approx(found.point)


def test_new_tiles_start_unaligned_with_snapshot(star_intersections):
    tile = build_tile(star_intersections[0], SCALE)
    assert tile.state is TileState.UNALIGNED
    assert not tile.aligned and not tile.locked
    assert tile.original == tuple(tile.vertices)


def test_perpendicularity_holds_for_every_family_difference():
    intersections = find_intersections(generate_pentagrid(GAMMAS, 80.0, 1, 600.0))
    seen = set()
    with capture_logs() as logs:
        for found in intersections:
            vertices = rhombus_vertices(found, SCALE)
            assert check_perpendicular(vertices, found)
            seen.add(found.family_delta)
    assert seen == set(FAMILY_OFFSETS)
    assert not [e for e in logs if e["log_level"] == "warning"]


def test_rhombus_shapes_by_family_difference(star_intersections):
    tiles = build_tiles(star_intersections, SCALE)
    kinds = [tile.kind for tile in tiles]
    assert kinds.count(RhombType.THICK) == 5
    assert kinds.count(RhombType.THIN) == 5
    for tile in tiles:
        area = polygon_signed_area(tile.vertices)
        acute = math.radians(72 if tile.kind is RhombType.THICK else 36)
        # counter-clockwise winding for every tile
        assert area == pytest.approx(SCALE * SCALE * math.sin(acute))


def test_swapped_lines_are_normalised(star_intersections):
    found = star_intersections[0]
    swapped = Intersection(found.x, found.y, found.line2, found.line1)
    assert build_tile(swapped, SCALE).vertices == build_tile(found, SCALE).vertices


def test_missing_line_is_skipped(star_intersections):
    found = star_intersections[0]
    broken = Intersection(found.x, found.y, None, found.line2)
    with capture_logs() as logs:
        tiles = build_tiles([broken, found], SCALE)
    assert len(tiles) == 1
    assert any(e["event"] == "Skipping malformed intersection" for e in logs)


def test_out_of_range_family_is_skipped(star_intersections):
    found = star_intersections[0]
    broken = Intersection(found.x, found.y, found.line1, replace(found.line2, family=7))
    with capture_logs() as logs:
        assert build_tile(broken, SCALE) is None
    assert logs[0]["reason"] == "family 7 out of range"


def test_failed_perpendicularity_is_logged_only(star_intersections):
    found = star_intersections[0]
    vertices = [(0.0, 0.0), (1.0, 0.2), (2.0, 1.0), (1.0, 0.8)]
    with capture_logs() as logs:
        assert check_perpendicular(vertices, found) is False
    assert logs[0]["event"] == "Rhombus sides not perpendicular to grid lines"


def test_non_positive_scale_raises(star_intersections):
    with pytest.raises(ValueError):
        build_tiles(star_intersections, 0.0)
