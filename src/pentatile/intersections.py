"""Pairwise crossings between lines of different families."""

from __future__ import annotations

from typing import List, Optional, Sequence

import structlog

from .geometry import segment_intersection
from .models import GridLine, Intersection

logger = structlog.get_logger(__name__)


def intersect_lines(line1: GridLine, line2: GridLine) -> Optional[Intersection]:
    """Crossing of the bounded segments of *line1* and *line2*, if any.

    The returned intersection always carries the lower family as ``line1``.
    """
    if line1.family > line2.family:
        line1, line2 = line2, line1
    point = segment_intersection(
        (line1.x1, line1.y1), (line1.x2, line1.y2),
        (line2.x1, line2.y1), (line2.x2, line2.y2),
    )
    if point is None:
        return None
    return Intersection(point[0], point[1], line1, line2)


def within_bounds(intersection: Intersection, bounds: float, margin: float) -> bool:
    limit = bounds - margin
    return abs(intersection.x) < limit and abs(intersection.y) < limit


def find_intersections(
    families: Sequence[Sequence[GridLine]],
    bounds: Optional[float] = None,
    margin: Optional[float] = None,
) -> List[Intersection]:
    """All crossings between lines drawn from different families.

    When both *bounds* and *margin* are given, crossings closer than
    *margin* to the square canvas edge are dropped.
    """
    intersections: List[Intersection] = []
    clipped = 0
    for i in range(len(families)):
        for j in range(i + 1, len(families)):
            for line1 in families[i]:
                for line2 in families[j]:
                    found = intersect_lines(line1, line2)
                    if found is None:
                        continue
                    if margin is not None and bounds is not None and not within_bounds(found, bounds, margin):
                        clipped += 1
                        continue
                    intersections.append(found)

    logger.info("Intersections found", count=len(intersections), clipped=clipped)
    return intersections
