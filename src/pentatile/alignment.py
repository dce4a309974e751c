"""Alignment engine — breadth-first edge matching across the tile graph.

Starting from anchor tiles, each newly reached tile is translated so that
the side it shares with its already-placed neighbour coincides with that
neighbour's side.  The work is held in an :class:`AlignmentSession` so a
host frame loop can drive it one call at a time.

Usage
-----
>>> session = start_alignment(world.tiles, world.graph, mode=AlignmentMode.SINGLE_STEP)
>>> while step_alignment(session):
...     redraw()

or, synchronously:

>>> run_alignment(world.tiles, world.graph)
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Iterable, List, Optional, Sequence

import structlog

from .geometry import dot, is_perpendicular, midpoint
from .models import Direction, GridLine, Neighbor, Point, Tile, TileGraph, TileState

logger = structlog.get_logger(__name__)

Edge = tuple[Point, Point]


# ═══════════════════════════════════════════════════════════════════
# Edge correspondence
# ═══════════════════════════════════════════════════════════════════


def perpendicular_edges(tile: Tile, line: GridLine) -> List[Edge]:
    """Sides of *tile* perpendicular to *line*, in vertex order."""
    p1, p2 = line.endpoints
    return [(a, b) for a, b in tile.edges() if is_perpendicular(a, b, p1, p2)]


def reference_edge(tile: Tile, line: GridLine, direction: Direction) -> Optional[Edge]:
    """The side of *tile* facing *direction* along *line*.

    A rhombus exposes two sides perpendicular to each of its lines; the one
    whose midpoint lies on the *direction* side of the tile centre is
    returned.  When the count is not two, or no side faces the requested
    way, the first perpendicular side is used instead.
    """
    candidates = perpendicular_edges(tile, line)
    if not candidates:
        return None
    if len(candidates) != 2:
        logger.warning(
            "Unexpected perpendicular edge count",
            count=len(candidates),
            family=line.family,
            n=line.n,
        )
        return candidates[0]

    cx, cy = tile.centroid()
    tangent = line.tangent
    for a, b in candidates:
        mx, my = midpoint(a, b)
        if dot((mx - cx, my - cy), tangent) * direction.sign > 0:
            return (a, b)

    logger.warning(
        "No perpendicular edge on requested side",
        family=line.family,
        n=line.n,
        direction=direction.value,
    )
    return candidates[0]


def edge_offset(target: Edge, source: Edge) -> Point:
    """Mean per-vertex difference ``target - source``."""
    dx = ((target[0][0] - source[0][0]) + (target[1][0] - source[1][0])) / 2.0
    dy = ((target[0][1] - source[0][1]) + (target[1][1] - source[1][1])) / 2.0
    return (dx, dy)


def neighbor_offset(parent: Tile, child: Tile, record: Neighbor) -> Optional[Point]:
    """Translation that makes *child*'s shared side meet *parent*'s."""
    target = reference_edge(parent, record.line, record.direction)
    source = reference_edge(child, record.line, record.direction.opposite())
    if target is None or source is None:
        return None
    return edge_offset(target, source)


# ═══════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════


class AlignmentMode(Enum):
    BATCH = "batch"
    """Each step expands every unaligned neighbour of one tile."""

    SINGLE_STEP = "single_step"
    """Each step places a single neighbour."""


@dataclass
class AlignmentSession:
    """Resumable alignment state.

    Attributes
    ----------
    queue : deque[int]
        Aligned tiles waiting to have their neighbours expanded.
    current : int | None
        Tile whose neighbours are being expanded.
    pending : deque[Neighbor]
        Neighbours of *current* still to place.
    steps : int
        Calls to :meth:`step` that did work.
    placed : int
        Tiles aligned by this session (seeds excluded).
    """

    tiles: Sequence[Tile]
    graph: TileGraph
    mode: AlignmentMode = AlignmentMode.BATCH
    queue: Deque[int] = field(default_factory=deque)
    current: Optional[int] = None
    pending: Deque[Neighbor] = field(default_factory=deque)
    steps: int = 0
    placed: int = 0

    @property
    def done(self) -> bool:
        return self.current is None and not self.queue

    def step(self) -> bool:
        """Advance by one unit of work; return whether work remains."""
        if self.current is None:
            if not self.queue:
                return False
            self._expand(self.queue.popleft())

        if self.mode is AlignmentMode.BATCH:
            while self.pending:
                self._place(self.pending.popleft())
        elif self.pending:
            self._place(self.pending.popleft())

        if not self.pending:
            self.current = None
        self.steps += 1

        if self.done:
            logger.info(
                "Alignment finished",
                steps=self.steps,
                placed=self.placed,
                aligned=sum(1 for tile in self.tiles if tile.aligned),
                total=len(self.tiles),
            )
        return not self.done

    def run(self) -> "AlignmentSession":
        while self.step():
            pass
        return self

    def clear(self) -> None:
        self.queue.clear()
        self.pending.clear()
        self.current = None

    def _expand(self, index: int) -> None:
        self.current = index
        self.pending = deque(
            record
            for record in self.graph.neighbors_of(index)
            if self.tiles[record.index].state is TileState.UNALIGNED
        )

    def _place(self, record: Neighbor) -> None:
        parent = self.tiles[self.current]
        child = self.tiles[record.index]
        if child.state is TileState.ALIGNED:
            return

        offset = neighbor_offset(parent, child, record)
        if offset is None:
            logger.warning(
                "No shared edge found, tile left in place",
                parent=self.current,
                tile=record.index,
                family=record.line.family,
            )
        elif child.locked:
            # anchored by the user after this expansion began
            logger.debug("Locked tile kept in place", tile=record.index, offset=offset)
        else:
            child.translate(*offset)
            logger.debug("Tile aligned", parent=self.current, tile=record.index, offset=offset)

        if not child.locked:
            child.state = TileState.ALIGNED
            self.placed += 1
        self.queue.append(record.index)


# ═══════════════════════════════════════════════════════════════════
# Public operations
# ═══════════════════════════════════════════════════════════════════


def _seed_indices(tiles: Sequence[Tile], seed_indices: Optional[Iterable[int]]) -> List[int]:
    seeds = [index for index, tile in enumerate(tiles) if tile.locked]
    for index in seed_indices or ():
        if not 0 <= index < len(tiles):
            logger.warning("Ignoring out-of-range seed tile", seed=index, tiles=len(tiles))
            continue
        if index not in seeds:
            seeds.append(index)
    if not seeds and tiles:
        seeds.append(0)
    return seeds


def start_alignment(
    tiles: Sequence[Tile],
    graph: TileGraph,
    seed_indices: Optional[Iterable[int]] = None,
    mode: AlignmentMode = AlignmentMode.BATCH,
) -> AlignmentSession:
    """Seed a new session.

    Locked tiles are always anchors; *seed_indices* adds more.  With no
    anchors at all, tile 0 is used.
    """
    if len(graph) != len(tiles):
        raise ValueError(f"graph has {len(graph)} entries for {len(tiles)} tiles")

    session = AlignmentSession(tiles, graph, mode)
    seeds = _seed_indices(tiles, seed_indices)
    for index in seeds:
        if tiles[index].state is TileState.UNALIGNED:
            tiles[index].state = TileState.ALIGNED
        session.queue.append(index)

    logger.info("Alignment started", seeds=seeds, mode=mode.value)
    return session


def step_alignment(session: AlignmentSession) -> bool:
    return session.step()


def run_alignment(
    tiles: Sequence[Tile],
    graph: TileGraph,
    seed_indices: Optional[Iterable[int]] = None,
) -> AlignmentSession:
    return start_alignment(tiles, graph, seed_indices, AlignmentMode.BATCH).run()


def reset_tiles(tiles: Iterable[Tile], session: Optional[AlignmentSession] = None) -> None:
    """Restore original positions, clear alignment and locks, cancel *session*."""
    for tile in tiles:
        tile.restore()
    if session is not None:
        session.clear()
