from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, List, Sequence

from .algorithms import degree_histogram
from .alignment import reference_edge
from .geometry import distance, polygon_signed_area, segment_intersection
from .models import Tile
from .rhombus import check_perpendicular
from .world import TilingWorld


def max_side_error(tiles: Sequence[Tile], scale: float) -> float:
    """Largest deviation of any tile side from *scale*."""
    worst = 0.0
    for tile in tiles:
        for a, b in tile.edges():
            worst = max(worst, abs(distance(a, b) - scale))
    return worst


def min_tile_signed_area(tiles: Sequence[Tile]) -> float:
    areas = [polygon_signed_area(tile.vertices) for tile in tiles]
    return min(areas) if areas else 0.0


def perpendicularity_failures(tiles: Sequence[Tile]) -> List[int]:
    """Indices of tiles whose sides are not perpendicular to their lines."""
    return [
        index
        for index, tile in enumerate(tiles)
        if not check_perpendicular(tile.vertices, tile.intersection)
    ]


def alignment_coverage(tiles: Sequence[Tile]) -> float:
    if not tiles:
        return 0.0
    return sum(1 for tile in tiles if tile.aligned) / len(tiles)


def edge_mismatch(world: TilingWorld) -> float:
    """Worst gap between shared sides of aligned neighbouring tiles.

    Each corner of one reference side is matched to the nearer corner of
    the other; 0 means every aligned pair meets exactly.
    """
    worst = 0.0
    for index, record in world.graph.edges():
        tile = world.tiles[index]
        other = world.tiles[record.index]
        if not (tile.aligned and other.aligned):
            continue
        ours = reference_edge(tile, record.line, record.direction)
        theirs = reference_edge(other, record.line, record.direction.opposite())
        if ours is None or theirs is None:
            continue
        for corner in ours:
            worst = max(worst, min(distance(corner, c) for c in theirs))
    return worst


def has_tile_overlaps(tiles: Sequence[Tile], tol: float = 1e-6) -> bool:
    """True if sides of two different tiles cross away from their corners."""
    if not tiles:
        return False
    reach = max(
        distance(tile.centroid(), vertex) for tile in tiles for vertex in tile.vertices
    )
    cell = 2.0 * reach or 1.0
    buckets: Dict[tuple[int, int], list[int]] = defaultdict(list)
    for index, tile in enumerate(tiles):
        cx, cy = tile.centroid()
        buckets[(math.floor(cx / cell), math.floor(cy / cell))].append(index)

    for (gx, gy), members in buckets.items():
        for index in members:
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    for other in buckets.get((gx + dx, gy + dy), ()):
                        if other <= index:
                            continue
                        if _tiles_cross(tiles[index], tiles[other], tol):
                            return True
    return False


def _tiles_cross(first: Tile, second: Tile, tol: float) -> bool:
    for a1, a2 in first.edges():
        for b1, b2 in second.edges():
            va = (a2[0] - a1[0], a2[1] - a1[1])
            vb = (b2[0] - b1[0], b2[1] - b1[1])
            cross = va[0] * vb[1] - va[1] * vb[0]
            if abs(cross) <= tol * math.hypot(*va) * math.hypot(*vb):
                continue
            point = segment_intersection(a1, a2, b1, b2)
            if point is None:
                continue
            if min(distance(point, corner) for corner in (a1, a2, b1, b2)) > tol:
                return True
    return False


def diagnostics_report(world: TilingWorld) -> dict:
    """JSON-serialisable summary of tiling and alignment quality."""
    scale = world.config.scale if world.config else 0.0
    kinds: Dict[str, int] = defaultdict(int)
    for tile in world.tiles:
        kinds[tile.kind.value] += 1
    return {
        "lines": sum(len(family) for family in world.lines),
        "intersections": len(world.intersections),
        "tiles": len(world.tiles),
        "tile_kinds": dict(kinds),
        "max_side_error": max_side_error(world.tiles, scale) if scale else None,
        "min_tile_signed_area": min_tile_signed_area(world.tiles),
        "perpendicularity_failures": perpendicularity_failures(world.tiles),
        "degree_distribution": {str(k): v for k, v in degree_histogram(world.graph).items()},
        "alignment_coverage": alignment_coverage(world.tiles),
        "edge_mismatch": edge_mismatch(world),
        "tile_overlaps": has_tile_overlaps([t for t in world.tiles if t.aligned]),
    }
