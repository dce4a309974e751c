"""Rhombus construction: one tile per pentagrid intersection.

The tile for the crossing of ``line1`` (family r) and ``line2`` (family s,
s > r) has one pair of sides along the normal of ``line2`` and the other
pair along the normal of ``line1``.  Its acute angle therefore depends only
on the family difference ``s - r``: differences 1 and 4 give thick rhombs
(72°), 2 and 3 give thin rhombs (36°).
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

import structlog

from .geometry import angle_between_lines, is_perpendicular
from .models import Intersection, Point, Tile
from .pentagrid import FAMILY_COUNT

logger = structlog.get_logger(__name__)

# Angle from the first side to the second, keyed by family difference.
FAMILY_OFFSETS = {
    1: 3 * math.pi / 5,
    2: 1 * math.pi / 5,
    3: 4 * math.pi / 5,
    4: 2 * math.pi / 5,
}


def rhombus_vertices(intersection: Intersection, scale: float) -> List[Point]:
    """Four corners of the tile centred on *intersection*, in boundary order."""
    angle1 = intersection.line2.angle
    angle2 = angle1 + FAMILY_OFFSETS[intersection.family_delta]

    px, py = intersection.x, intersection.y
    u1 = (math.cos(angle1), math.sin(angle1))
    u2 = (math.cos(angle2), math.sin(angle2))
    shift_x = (u1[0] + u2[0]) * scale / 2.0
    shift_y = (u1[1] + u2[1]) * scale / 2.0

    start = (px - shift_x, py - shift_y)
    dir1 = (px + scale * u1[0] - shift_x, py + scale * u1[1] - shift_y)
    dir2 = (px + scale * u2[0] - shift_x, py + scale * u2[1] - shift_y)
    dir3 = (dir1[0] + dir2[0] - px + shift_x, dir1[1] + dir2[1] - py + shift_y)
    return [start, dir1, dir3, dir2]


def check_perpendicular(vertices: Sequence[Point], intersection: Intersection) -> bool:
    """Side 0→1 must be perpendicular to ``line2`` and side 1→2 to ``line1``."""
    line1, line2 = intersection.line1, intersection.line2
    first = is_perpendicular(vertices[0], vertices[1], *line2.endpoints)
    second = is_perpendicular(vertices[1], vertices[2], *line1.endpoints)
    if not (first and second):
        logger.warning(
            "Rhombus sides not perpendicular to grid lines",
            family1=line1.family,
            family2=line2.family,
            angle_side0=angle_between_lines(vertices[0], vertices[1], *line2.endpoints),
            angle_side1=angle_between_lines(vertices[1], vertices[2], *line1.endpoints),
        )
        return False
    return True


def _malformed_reason(intersection: Intersection) -> Optional[str]:
    if intersection.line1 is None or intersection.line2 is None:
        return "missing line reference"
    for line in (intersection.line1, intersection.line2):
        if not 0 <= line.family < FAMILY_COUNT:
            return f"family {line.family} out of range"
    if intersection.line1.family == intersection.line2.family:
        return "lines from the same family"
    return None


def build_tile(intersection: Intersection, scale: float) -> Optional[Tile]:
    """Build the tile for *intersection*; malformed input yields ``None``."""
    reason = _malformed_reason(intersection)
    if reason is not None:
        logger.warning("Skipping malformed intersection", reason=reason, x=intersection.x, y=intersection.y)
        return None

    if intersection.line1.family > intersection.line2.family:
        intersection = Intersection(intersection.x, intersection.y, intersection.line2, intersection.line1)

    vertices = rhombus_vertices(intersection, scale)
    check_perpendicular(vertices, intersection)
    return Tile(vertices, intersection)


def build_tiles(intersections: Sequence[Intersection], scale: float) -> List[Tile]:
    if scale <= 0:
        raise ValueError("scale must be > 0")
    tiles: List[Tile] = []
    for intersection in intersections:
        tile = build_tile(intersection, scale)
        if tile is not None:
            tiles.append(tile)
    logger.info("Tiles built", count=len(tiles), skipped=len(intersections) - len(tiles))
    return tiles
