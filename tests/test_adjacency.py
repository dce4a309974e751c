import pytest

from pentatile.algorithms import (
    build_tile_adjacency,
    connected_component,
    degree_histogram,
    find_neighbor,
    tiles_by_line,
)
from pentatile.config import DEFAULT_TILING
from pentatile.models import Direction
from pentatile.world import TilingWorld


def _assert_symmetric(world):
    for index, record in world.graph.edges():
        back = find_neighbor(world.graph, record.index, index)
        assert back is not None
        assert back.line.key == record.line.key
        assert back.direction is record.direction.opposite()


def test_adjacency_symmetry_star(star_world):
    _assert_symmetric(star_world)


def test_adjacency_symmetry_default():
    world = TilingWorld.from_config(DEFAULT_TILING)
    _assert_symmetric(world)
    assert max(world.graph.degree(i) for i in range(len(world.tiles))) <= 4


def test_neighbours_share_the_recorded_line(small_world):
    for index, record in small_world.graph.edges():
        keys = {line.key for line in small_world.tiles[record.index].intersection.lines()}
        assert record.line.key in keys
        own = {line.key for line in small_world.tiles[index].intersection.lines()}
        assert record.line.key in own


def test_at_most_one_neighbour_each_way_per_line(small_world):
    for index in range(len(small_world.tiles)):
        seen = [(r.line.key, r.direction) for r in small_world.graph.neighbors_of(index)]
        assert len(seen) == len(set(seen))


def test_forward_neighbour_lies_along_tangent(star_world):
    for index, record in star_world.graph.edges():
        px, py = star_world.tiles[index].intersection.point
        qx, qy = star_world.tiles[record.index].intersection.point
        tx, ty = record.line.tangent
        projection = (qx - px) * tx + (qy - py) * ty
        if record.direction is Direction.FORWARD:
            assert projection > 0
        else:
            assert projection < 0


def test_star_neighbours_are_consecutive_along_lines(star_world):
    # 5 lines with 4 crossings each: 3 links per line, stored both ways
    assert sum(star_world.graph.degree(i) for i in range(10)) == 30
    assert all(len(v) == 4 for v in tiles_by_line(star_world.tiles).values())


def test_small_patch_edge_count(small_world):
    # 15 lines, 12 crossings each: 11 links per line, stored both ways
    assert sum(small_world.graph.degree(i) for i in range(len(small_world.tiles))) == 330


def test_degree_histogram_counts_every_tile(small_world):
    histogram = degree_histogram(small_world.graph)
    assert sum(histogram.values()) == len(small_world.tiles)
    assert set(histogram) <= {0, 1, 2, 3, 4}


def test_connected_component(star_world):
    assert connected_component(star_world.graph, 0) == set(range(10))
    with pytest.raises(ValueError):
        connected_component(star_world.graph, 10)


def test_single_tile_is_isolated(star_world):
    graph = build_tile_adjacency(star_world.tiles[:1])
    assert graph.degree(0) == 0
    assert degree_histogram(graph) == {0: 1}
