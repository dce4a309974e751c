"""Geometry helper functions used across the package.

All functions are pure and work on plain ``(x, y)`` tuples.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from .models import Point

# Two lines count as perpendicular when their angle is within this many
# degrees of 90.
ANGLE_TOLERANCE_DEG = 0.001


def segment_intersection(p1: Point, p2: Point, p3: Point, p4: Point) -> Point | None:
    """Intersection point of segments p1–p2 and p3–p4, or ``None``.

    Zero-length and parallel segments never intersect.
    """
    x1, y1 = p1
    x2, y2 = p2
    x3, y3 = p3
    x4, y4 = p4
    if (x1 == x2 and y1 == y2) or (x3 == x4 and y3 == y4):
        return None

    denominator = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
    if denominator == 0:
        return None

    ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denominator
    ub = ((x2 - x1) * (y1 - y3) - (y2 - y1) * (x1 - x3)) / denominator
    if ua < 0 or ua > 1 or ub < 0 or ub > 1:
        return None

    return (x1 + ua * (x2 - x1), y1 + ua * (y2 - y1))


def angle_between_lines(p1: Point, p2: Point, p3: Point, p4: Point) -> float:
    """Acute angle in degrees (0–90) between lines p1–p2 and p3–p4.

    Degenerate (zero-length) input yields 0.
    """
    v1x, v1y = p2[0] - p1[0], p2[1] - p1[1]
    v2x, v2y = p4[0] - p3[0], p4[1] - p3[1]
    denom = math.hypot(v1x, v1y) * math.hypot(v2x, v2y)
    if denom == 0:
        return 0.0
    cos_a = max(-1.0, min(1.0, (v1x * v2x + v1y * v2y) / denom))
    angle = math.degrees(math.acos(cos_a))
    return 180.0 - angle if angle > 90.0 else angle


def is_perpendicular(
    p1: Point,
    p2: Point,
    p3: Point,
    p4: Point,
    tolerance_deg: float = ANGLE_TOLERANCE_DEG,
) -> bool:
    return abs(angle_between_lines(p1, p2, p3, p4) - 90.0) < tolerance_deg


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray-casting containment test."""
    x, y = point
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from *p* to the closest point of segment a–b."""
    dx, dy = b[0] - a[0], b[1] - a[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(p[0] - a[0], p[1] - a[1])
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + t * dx), p[1] - (a[1] + t * dy))


def segment_distance(a1: Point, a2: Point, b1: Point, b2: Point) -> float:
    """Minimum distance between segments a1–a2 and b1–b2 (0 if they cross)."""
    if segment_intersection(a1, a2, b1, b2) is not None:
        return 0.0
    return min(
        point_segment_distance(a1, b1, b2),
        point_segment_distance(a2, b1, b2),
        point_segment_distance(b1, a1, a2),
        point_segment_distance(b2, a1, a2),
    )


def vectors_antiparallel(v1: Point, v2: Point, eps: float = 1e-6) -> bool:
    """True if *v1* and *v2* point in exactly opposite directions."""
    n1 = math.hypot(*v1)
    n2 = math.hypot(*v2)
    if n1 == 0 or n2 == 0:
        return False
    u1 = (v1[0] / n1, v1[1] / n1)
    u2 = (v2[0] / n2, v2[1] / n2)
    cross = u1[0] * u2[1] - u1[1] * u2[0]
    dot = u1[0] * u2[0] + u1[1] * u2[1]
    return abs(cross) < eps and dot < 0


def midpoint(a: Point, b: Point) -> Point:
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def shift_vector(a1: Point, a2: Point, b1: Point, b2: Point) -> Point:
    """Translation taking the midpoint of a1–a2 onto the midpoint of b1–b2."""
    ma = midpoint(a1, a2)
    mb = midpoint(b1, b2)
    return (mb[0] - ma[0], mb[1] - ma[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def centroid(points: Iterable[Point]) -> Point:
    pts = list(points)
    if not pts:
        return (0.0, 0.0)
    return (sum(p[0] for p in pts) / len(pts), sum(p[1] for p in pts) / len(pts))


def polygon_signed_area(points: Sequence[Point]) -> float:
    """Shoelace area; positive for counter-clockwise winding."""
    area = 0.0
    for i in range(len(points)):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % len(points)]
        area += x1 * y2 - x2 * y1
    return area / 2.0
