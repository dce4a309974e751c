"""Pentagrid generation: five families of equally spaced parallel lines."""

from __future__ import annotations

import math
import random
from typing import List, Optional, Sequence

import structlog

from .models import GridLine

logger = structlog.get_logger(__name__)

FAMILY_COUNT = 5


def family_angle(family: int) -> float:
    """Orientation angle (radians) of *family*: ``family * 72°``."""
    return family * 2.0 * math.pi / FAMILY_COUNT


def check_gammas(gammas: Sequence[float]) -> list[float]:
    """Return *gammas* as floats, raising on the wrong count.

    A sum other than 1 breaks the genericity assumption but not the
    construction itself, so it is only logged.
    """
    values = [float(g) for g in gammas]
    if len(values) != FAMILY_COUNT:
        raise ValueError(f"Expected {FAMILY_COUNT} gammas, got {len(values)}")
    total = sum(values)
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        logger.warning("Gammas do not sum to 1", gammas=values, total=total)
    return values


def random_gammas(rng: Optional[random.Random] = None) -> list[float]:
    """Draw five uniform offsets normalised to sum to 1."""
    rng = rng or random.Random()
    raw = [rng.random() + 1e-6 for _ in range(FAMILY_COUNT)]
    total = sum(raw)
    gammas = [g / total for g in raw]
    # absorb rounding in the last entry so the sum is exactly 1
    gammas[-1] = 1.0 - sum(gammas[:-1])
    return gammas


def generate_family(
    family: int,
    gamma: float,
    spacing: float,
    num_lines: int,
    bounds: float,
) -> List[GridLine]:
    """Lines ``n = -num_lines … num_lines`` of one family.

    Line *n* sits at perpendicular distance ``(n + gamma) * spacing`` from
    the origin; its segment runs *bounds* either way along the tangent from
    the point closest to the origin.
    """
    angle = family_angle(family)
    c = math.cos(angle)
    s = math.sin(angle)

    lines: List[GridLine] = []
    for n in range(-num_lines, num_lines + 1):
        d = n * spacing + gamma * spacing
        lines.append(GridLine(
            family=family,
            n=n,
            angle=angle,
            a=c,
            b=s,
            c=d,
            x1=c * d - bounds * s,
            y1=s * d + bounds * c,
            x2=c * d + bounds * s,
            y2=s * d - bounds * c,
        ))
    return lines


def generate_pentagrid(
    gammas: Sequence[float],
    spacing: float,
    num_lines: int,
    bounds: float,
) -> List[List[GridLine]]:
    """Return the five line families, indexed by family."""
    if spacing <= 0:
        raise ValueError("spacing must be > 0")
    if num_lines < 0:
        raise ValueError("num_lines must be >= 0")
    values = check_gammas(gammas)

    families = [
        generate_family(k, values[k], spacing, num_lines, bounds)
        for k in range(FAMILY_COUNT)
    ]
    logger.info(
        "Pentagrid generated",
        families=len(families),
        lines_per_family=2 * num_lines + 1,
        spacing=spacing,
    )
    return families
