from __future__ import annotations

import math
from collections import Counter, defaultdict, deque
from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from .models import Direction, GridLine, Neighbor, Tile, TileGraph

logger = structlog.get_logger(__name__)

# Projections closer to zero than this belong to the tile itself.
PROJECTION_EPS = 1e-6


def tiles_by_line(tiles: Sequence[Tile]) -> Dict[tuple[int, int], List[int]]:
    """Map each line ``(family, n)`` to the indices of tiles built on it."""
    on_line: dict[tuple[int, int], list[int]] = defaultdict(list)
    for index, tile in enumerate(tiles):
        for line in tile.intersection.lines():
            on_line[line.key].append(index)
    return on_line


def _nearest_along(
    tiles: Sequence[Tile],
    index: int,
    line: GridLine,
    candidates: Iterable[int],
) -> List[Neighbor]:
    px, py = tiles[index].intersection.point
    tx, ty = line.tangent
    best: dict[Direction, tuple[float, int]] = {}
    for other in candidates:
        if other == index:
            continue
        qx, qy = tiles[other].intersection.point
        projection = (qx - px) * tx + (qy - py) * ty
        if abs(projection) <= PROJECTION_EPS:
            continue
        direction = Direction.FORWARD if projection > 0 else Direction.BACKWARD
        dist = math.hypot(qx - px, qy - py)
        if direction not in best or dist < best[direction][0]:
            best[direction] = (dist, other)

    return [
        Neighbor(best[direction][1], line, direction)
        for direction in (Direction.FORWARD, Direction.BACKWARD)
        if direction in best
    ]


def build_tile_adjacency(tiles: Sequence[Tile]) -> TileGraph:
    """Return the tile graph: nearest tile either way along both lines.

    Each tile gets at most one forward and one backward neighbour per
    defining line, so at most four in total.
    """
    on_line = tiles_by_line(tiles)
    neighbors: list[tuple[Neighbor, ...]] = []
    for index, tile in enumerate(tiles):
        records: list[Neighbor] = []
        for line in tile.intersection.lines():
            records.extend(_nearest_along(tiles, index, line, on_line[line.key]))
        neighbors.append(tuple(records))

    graph = TileGraph(tuple(neighbors))
    logger.info(
        "Tile adjacency built",
        tiles=len(graph),
        degrees=degree_histogram(graph),
    )
    return graph


def degree_histogram(graph: TileGraph) -> Dict[int, int]:
    counts = Counter(len(records) for records in graph.neighbors)
    return {degree: counts[degree] for degree in sorted(counts)}


def connected_component(graph: TileGraph, start: int) -> set[int]:
    """Indices reachable from *start* through the adjacency graph."""
    if not 0 <= start < len(graph):
        raise ValueError(f"start index {start} out of range")

    visited = {start}
    frontier = deque([start])
    while frontier:
        index = frontier.popleft()
        for record in graph.neighbors_of(index):
            if record.index in visited:
                continue
            visited.add(record.index)
            frontier.append(record.index)
    return visited


def find_neighbor(graph: TileGraph, index: int, other: int) -> Optional[Neighbor]:
    """Adjacency record of *other* in *index*'s list, if present."""
    for record in graph.neighbors_of(index):
        if record.index == other:
            return record
    return None
