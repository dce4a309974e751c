from collections import deque

import pytest
from structlog.testing import capture_logs

from pentatile.algorithms import build_tile_adjacency, connected_component
from pentatile.alignment import (
    AlignmentMode,
    reference_edge,
    reset_tiles,
    run_alignment,
    start_alignment,
    step_alignment,
)
from pentatile.config import PRESETS, SMALL_PATCH
from pentatile.diagnostics import alignment_coverage, edge_mismatch, has_tile_overlaps
from pentatile.geometry import distance
from pentatile.models import Direction, Tile, TileGraph, TileState
from pentatile.world import TilingWorld, set_locked


def _coincide(edge_a, edge_b, tol=1e-6):
    return all(min(distance(p, q) for q in edge_b) < tol for p in edge_a)


def test_alignment_covers_component_of_seed(small_world):
    run_alignment(small_world.tiles, small_world.graph, [0])
    assert small_world.aligned_indices() == connected_component(small_world.graph, 0)


def test_default_seed_is_tile_zero(star_world):
    original = list(star_world.tiles[0].vertices)
    session = run_alignment(star_world.tiles, star_world.graph)
    assert session.done
    assert star_world.tiles[0].vertices == original
    assert all(tile.state is TileState.ALIGNED for tile in star_world.tiles)


def test_shared_edges_coincide_after_alignment(star_world):
    record = star_world.graph.neighbors_of(0)[0]
    star_world.tiles[record.index].translate(37.0, -12.0)
    run_alignment(star_world.tiles, star_world.graph, [0])

    ours = reference_edge(star_world.tiles[0], record.line, record.direction)
    theirs = reference_edge(star_world.tiles[record.index], record.line, record.direction.opposite())
    assert _coincide(ours, theirs)
    assert _coincide(theirs, ours)


def test_every_shared_edge_matches(small_world):
    run_alignment(small_world.tiles, small_world.graph)
    assert edge_mismatch(small_world) < 1e-6


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_preset_aligns_without_overlaps(name):
    world = TilingWorld.from_config(PRESETS[name])
    world.align()
    assert alignment_coverage(world.tiles) == 1.0
    assert edge_mismatch(world) < 1e-6
    assert not has_tile_overlaps(world.tiles)


def test_reset_restores_exact_positions(small_world):
    before = [list(tile.vertices) for tile in small_world.tiles]
    session = run_alignment(small_world.tiles, small_world.graph)
    assert any(tile.vertices != b for tile, b in zip(small_world.tiles, before))

    reset_tiles(small_world.tiles, session)
    assert [tile.vertices for tile in small_world.tiles] == before
    assert all(tile.state is TileState.UNALIGNED for tile in small_world.tiles)
    assert session.done


def test_batch_and_single_step_agree():
    batch_world = TilingWorld.from_config(SMALL_PATCH)
    step_world = TilingWorld.from_config(SMALL_PATCH)

    batch = run_alignment(batch_world.tiles, batch_world.graph, [3])
    session = start_alignment(step_world.tiles, step_world.graph, [3], AlignmentMode.SINGLE_STEP)
    while step_alignment(session):
        pass

    assert [t.vertices for t in step_world.tiles] == [t.vertices for t in batch_world.tiles]
    assert step_world.aligned_indices() == batch_world.aligned_indices()
    assert session.steps > batch.steps


def test_single_step_places_one_tile_per_call(star_world):
    session = start_alignment(star_world.tiles, star_world.graph, mode=AlignmentMode.SINGLE_STEP)
    assert session.queue == deque([0])
    assert step_alignment(session)
    assert sum(1 for tile in star_world.tiles if tile.aligned) == 2
    assert session.current == 0


def test_locked_tiles_anchor_and_stay_put(small_world):
    anchor = small_world.tiles[5]
    set_locked(anchor, True)
    pinned = list(anchor.vertices)

    session = run_alignment(small_world.tiles, small_world.graph)
    assert anchor.vertices == pinned
    assert anchor.state is TileState.LOCKED
    assert list(session.queue) == []
    # tile 0 is not a seed when an anchor exists, so it was moved into place
    assert small_world.tiles[0].state is TileState.ALIGNED
    assert edge_mismatch(small_world) < 1e-6


def test_tile_locked_mid_run_is_not_moved(star_world):
    session = start_alignment(star_world.tiles, star_world.graph, mode=AlignmentMode.SINGLE_STEP)
    step_alignment(session)
    assert session.pending
    target = star_world.tiles[session.pending[0].index]
    set_locked(target, True)
    held = list(target.vertices)

    step_alignment(session)
    assert target.vertices == held
    assert target.state is TileState.LOCKED
    assert session.queue[-1] == star_world.tiles.index(target)


def test_disconnected_tile_stays_unaligned(star_world, small_world):
    stray = next(
        tile for tile in small_world.tiles
        if all(line.n != 0 for line in tile.intersection.lines())
    )
    tiles = list(star_world.tiles) + [stray]
    graph = build_tile_adjacency(tiles)
    before = list(stray.vertices)

    run_alignment(tiles, graph, [0])
    assert stray.state is TileState.UNALIGNED
    assert stray.vertices == before
    assert all(tile.aligned for tile in tiles[:-1])


def test_out_of_range_seed_is_ignored(star_world):
    with capture_logs() as logs:
        session = start_alignment(star_world.tiles, star_world.graph, [99])
    assert list(session.queue) == [0]
    assert any(e["event"] == "Ignoring out-of-range seed tile" for e in logs)


def test_empty_tiling_finishes_immediately():
    session = start_alignment([], TileGraph())
    assert session.done
    assert step_alignment(session) is False


def test_graph_size_mismatch_raises(star_world):
    with pytest.raises(ValueError):
        start_alignment(star_world.tiles, TileGraph())


def test_step_after_completion_returns_false(star_world):
    session = run_alignment(star_world.tiles, star_world.graph)
    assert step_alignment(session) is False


def test_reference_edge_fallback_on_wrong_edge_count(star_world):
    source = star_world.tiles[0]
    line = source.intersection.line1
    # family 0 lines are vertical; only the first side is horizontal
    odd = Tile([(0.0, 0.0), (1.0, 0.0), (1.5, 1.0), (0.2, 2.0)], source.intersection)
    with capture_logs() as logs:
        edge = reference_edge(odd, line, Direction.FORWARD)
    assert edge == ((0.0, 0.0), (1.0, 0.0))
    assert logs[0]["event"] == "Unexpected perpendicular edge count"

    diamond = Tile([(0.0, 0.0), (1.0, 1.0), (0.0, 2.0), (-1.0, 1.0)], source.intersection)
    assert reference_edge(diamond, line, Direction.FORWARD) is None