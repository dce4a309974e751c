"""pentatile — de Bruijn pentagrid rhombus tilings.

Public API is organised into layers:

- **Core** — models, geometry, configuration
- **Building** — pentagrid lines, intersections, rhombi, adjacency graph
- **Alignment** — breadth-first edge matching, batch or stepwise
- **World** — caller-owned tiling container and manual editing
- **Rendering** — PNG output (requires matplotlib)
- **Diagnostics** — quality checks and reports
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import (
    Direction,
    GridLine,
    Intersection,
    Neighbor,
    RhombType,
    Tile,
    TileGraph,
    TileState,
)
from .config import DEFAULT_TILING, SINGLE_STAR, SMALL_PATCH, TilingConfig

# ── Building ────────────────────────────────────────────────────────
from .pentagrid import generate_family, generate_pentagrid, random_gammas
from .intersections import find_intersections, intersect_lines
from .rhombus import build_tile, build_tiles, rhombus_vertices
from .algorithms import build_tile_adjacency, connected_component, degree_histogram

# ── Alignment ───────────────────────────────────────────────────────
from .alignment import (
    AlignmentMode,
    AlignmentSession,
    reference_edge,
    reset_tiles,
    run_alignment,
    start_alignment,
    step_alignment,
)

# ── World ───────────────────────────────────────────────────────────
from .world import (
    TilingWorld,
    generate_tiling,
    hit_test,
    set_locked,
    snap_tile,
    translate_tile,
)

# ── Rendering (requires matplotlib) ────────────────────────────────
from .render import render_png

# ── Diagnostics ─────────────────────────────────────────────────────
from .diagnostics import (
    alignment_coverage,
    diagnostics_report,
    edge_mismatch,
    has_tile_overlaps,
    max_side_error,
    perpendicularity_failures,
)

__all__ = [
    # Core
    "Direction",
    "GridLine",
    "Intersection",
    "Neighbor",
    "RhombType",
    "Tile",
    "TileGraph",
    "TileState",
    "TilingConfig",
    "DEFAULT_TILING",
    "SINGLE_STAR",
    "SMALL_PATCH",
    # Building
    "generate_family",
    "generate_pentagrid",
    "random_gammas",
    "find_intersections",
    "intersect_lines",
    "build_tile",
    "build_tiles",
    "rhombus_vertices",
    "build_tile_adjacency",
    "connected_component",
    "degree_histogram",
    # Alignment
    "AlignmentMode",
    "AlignmentSession",
    "reference_edge",
    "reset_tiles",
    "run_alignment",
    "start_alignment",
    "step_alignment",
    # World
    "TilingWorld",
    "generate_tiling",
    "hit_test",
    "set_locked",
    "snap_tile",
    "translate_tile",
    # Rendering
    "render_png",
    # Diagnostics
    "alignment_coverage",
    "diagnostics_report",
    "edge_mismatch",
    "has_tile_overlaps",
    "max_side_error",
    "perpendicularity_failures",
]
