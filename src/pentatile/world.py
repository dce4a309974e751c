from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

import structlog

from .algorithms import build_tile_adjacency, find_neighbor
from .alignment import (
    AlignmentMode,
    AlignmentSession,
    reset_tiles,
    run_alignment,
    start_alignment,
)
from .config import TilingConfig
from .geometry import point_in_polygon, segment_distance, shift_vector, vectors_antiparallel
from .intersections import find_intersections
from .models import GridLine, Intersection, Point, Tile, TileGraph
from .pentagrid import generate_pentagrid
from .rhombus import build_tiles

logger = structlog.get_logger(__name__)


class TilingWorld:
    """Caller-owned container for one tiling session.

    Holds the pentagrid *lines* (indexed by family), the *intersections*,
    the *tiles* built from them and the read-only adjacency *graph*.
    Tiles are addressed by their index in :attr:`tiles` everywhere.
    """

    def __init__(
        self,
        lines: Sequence[Sequence[GridLine]],
        intersections: Iterable[Intersection],
        tiles: Iterable[Tile],
        graph: Optional[TileGraph] = None,
        config: Optional[TilingConfig] = None,
    ) -> None:
        self.lines: List[List[GridLine]] = [list(family) for family in lines]
        self.intersections: List[Intersection] = list(intersections)
        self.tiles: List[Tile] = list(tiles)
        self.graph: TileGraph = graph if graph is not None else build_tile_adjacency(self.tiles)
        self.config = config
        self.session: Optional[AlignmentSession] = None

    @classmethod
    def from_config(cls, config: TilingConfig) -> "TilingWorld":
        return generate_tiling(
            config.gammas,
            config.spacing,
            config.num_lines,
            config.bounds,
            scale=config.scale,
            margin=config.margin,
        )

    # ── Validation ──────────────────────────────────────────────────

    def validate(self) -> list[str]:
        errors: list[str] = []
        if len(self.graph) != len(self.tiles):
            errors.append(f"Graph has {len(self.graph)} entries for {len(self.tiles)} tiles")
            return errors
        for index, tile in enumerate(self.tiles):
            if len(tile.vertices) != 4:
                errors.append(f"Tile {index} has {len(tile.vertices)} vertices")
            if self.graph.degree(index) > 4:
                errors.append(f"Tile {index} has {self.graph.degree(index)} neighbours")
        for index, record in self.graph.edges():
            if not 0 <= record.index < len(self.tiles):
                errors.append(f"Tile {index} references missing tile {record.index}")
                continue
            back = find_neighbor(self.graph, record.index, index)
            if (
                back is None
                or back.line.key != record.line.key
                or back.direction is not record.direction.opposite()
            ):
                errors.append(
                    f"Tile {index} → {record.index} on line {record.line.key} has no opposite record"
                )
        return errors

    # ── Alignment ───────────────────────────────────────────────────

    def start_alignment(
        self,
        seed_indices: Optional[Iterable[int]] = None,
        mode: AlignmentMode = AlignmentMode.SINGLE_STEP,
    ) -> AlignmentSession:
        self.session = start_alignment(self.tiles, self.graph, seed_indices, mode)
        return self.session

    def step_alignment(self) -> bool:
        if self.session is None:
            return False
        return self.session.step()

    def align(self, seed_indices: Optional[Iterable[int]] = None) -> AlignmentSession:
        self.session = run_alignment(self.tiles, self.graph, seed_indices)
        return self.session

    @property
    def aligning(self) -> bool:
        return self.session is not None and not self.session.done

    def reset(self) -> None:
        reset_tiles(self.tiles, self.session)
        self.session = None

    def aligned_indices(self) -> set[int]:
        return {index for index, tile in enumerate(self.tiles) if tile.aligned}

    def __repr__(self) -> str:
        return (
            f"TilingWorld(lines={sum(len(f) for f in self.lines)}, "
            f"intersections={len(self.intersections)}, tiles={len(self.tiles)})"
        )


# ═══════════════════════════════════════════════════════════════════
# Construction
# ═══════════════════════════════════════════════════════════════════


def generate_tiling(
    gammas: Sequence[float],
    spacing: float,
    num_lines: int,
    bounds: float,
    scale: float = 40.0,
    margin: Optional[float] = None,
) -> TilingWorld:
    """Run the full construction pipeline: lines → crossings → tiles → graph."""
    lines = generate_pentagrid(gammas, spacing, num_lines, bounds)
    intersections = find_intersections(lines, bounds=bounds, margin=margin)
    tiles = build_tiles(intersections, scale)
    graph = build_tile_adjacency(tiles)
    config = TilingConfig(
        gammas=tuple(float(g) for g in gammas),
        spacing=spacing,
        num_lines=num_lines,
        bounds=bounds,
        scale=scale,
        margin=margin,
    )
    return TilingWorld(lines, intersections, tiles, graph, config)


# ═══════════════════════════════════════════════════════════════════
# Manual editing
# ═══════════════════════════════════════════════════════════════════


def hit_test(tiles: Sequence[Tile], point: Point) -> Optional[int]:
    """Index of the topmost tile containing *point*.

    Later tiles draw over earlier ones, so the search runs backwards.
    """
    for index in range(len(tiles) - 1, -1, -1):
        if point_in_polygon(point, tiles[index].vertices):
            return index
    return None


def translate_tile(tile: Tile, dx: float, dy: float) -> None:
    tile.translate(dx, dy)


def set_locked(tile: Tile, locked: bool) -> None:
    """Pin or release *tile*.

    Releasing puts the tile back in the state it had when it was pinned,
    so an already aligned tile is not moved again by the next pass.
    """
    if locked:
        tile.lock()
    else:
        tile.unlock()


def snap_tile(tiles: Sequence[Tile], index: int, tolerance: float) -> Optional[int]:
    """Snap a dropped tile onto the closest matching side of another tile.

    A side matches when it runs antiparallel to one of the dropped tile's
    sides (neighbouring rhombs share sides in opposite winding) and lies
    within *tolerance*.  Of the matches, the one needing the shortest move
    wins; the dropped tile is translated so the two sides' midpoints
    coincide.  Returns the index of the tile snapped to.
    """
    moving = tiles[index]
    best: Optional[tuple[float, int, Point]] = None
    for other_index, other in enumerate(tiles):
        if other_index == index:
            continue
        for a1, a2 in moving.edges():
            for b1, b2 in other.edges():
                if not vectors_antiparallel((a2[0] - a1[0], a2[1] - a1[1]), (b2[0] - b1[0], b2[1] - b1[1])):
                    continue
                if segment_distance(a1, a2, b1, b2) > tolerance:
                    continue
                shift = shift_vector(a1, a2, b1, b2)
                move = math.hypot(*shift)
                if best is None or move < best[0]:
                    best = (move, other_index, shift)

    if best is None:
        return None
    move, target, (dx, dy) = best
    moving.translate(dx, dy)
    logger.debug("Tile snapped", tile=index, target=target, move=move)
    return target
