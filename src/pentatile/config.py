"""Tiling configuration and named presets.

Usage
-----
>>> from pentatile.config import DEFAULT_TILING
>>> config = DEFAULT_TILING.with_gammas([0.1, 0.2, 0.3, 0.25, 0.15])
>>> world = TilingWorld.from_config(config)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class TilingConfig:
    """All tuneable parameters of the pentagrid construction.

    Attributes
    ----------
    gammas : tuple[float, ...]
        One phase offset per family.  Must have 5 entries summing to 1.
    spacing : float
        Perpendicular distance between neighbouring lines of a family.
    num_lines : int
        Lines on each side of the origin; each family gets
        ``2 * num_lines + 1`` lines.
    bounds : float
        Canvas half-extent; line segments reach this far from the point
        of the line closest to the origin.
    scale : float
        Rhombus side length.
    margin : float | None
        If set, intersections closer than *margin* to the canvas edge
        are discarded.
    """

    gammas: Tuple[float, ...] = (0.17, 0.21, 0.28, 0.3, 0.04)
    spacing: float = 80.0
    num_lines: int = 8
    bounds: float = 600.0
    scale: float = 40.0
    margin: Optional[float] = None

    def validate(self) -> list[str]:
        errors: list[str] = []
        if len(self.gammas) != 5:
            errors.append(f"Expected 5 gammas, got {len(self.gammas)}")
        elif not math.isclose(sum(self.gammas), 1.0, abs_tol=1e-9):
            errors.append(f"Gammas sum to {sum(self.gammas):.6f}, expected 1")
        if self.spacing <= 0:
            errors.append("spacing must be > 0")
        if self.num_lines < 0:
            errors.append("num_lines must be >= 0")
        if self.bounds <= 0:
            errors.append("bounds must be > 0")
        if self.scale <= 0:
            errors.append("scale must be > 0")
        if self.margin is not None and not 0 <= self.margin < self.bounds:
            errors.append("margin must lie in [0, bounds)")
        return errors

    def with_gammas(self, gammas: Sequence[float]) -> "TilingConfig":
        return replace(self, gammas=tuple(float(g) for g in gammas))


# ═══════════════════════════════════════════════════════════════════
# Presets
# ═══════════════════════════════════════════════════════════════════

# Every segment reaches at least *bounds* from the origin; crossings outside
# that circle may be missing. The margin keeps only the square inside it (margin of at
# least bounds·(1 − 1/√2) ≈ 176), where every crossing is present.
DEFAULT_TILING = TilingConfig(margin=200.0)

# One line per family: every family pair crosses exactly once → 10 tiles.
SINGLE_STAR = TilingConfig(num_lines=0)

# Outer lines sit at most ~105 from the origin, so every pair of lines
# crosses well inside the segments and no margin is needed.
SMALL_PATCH = TilingConfig(num_lines=1)

PRESETS = {
    "default": DEFAULT_TILING,
    "star": SINGLE_STAR,
    "small": SMALL_PATCH,
}
