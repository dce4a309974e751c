from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .models import RhombType, Tile
from .world import TilingWorld

FAMILY_COLORS = ("#ff6464", "#64c864", "#6464ff", "#e6c832", "#ff64ff")
KIND_COLORS = {
    RhombType.THICK: "#c89664",
    RhombType.THIN: "#6496c8",
}


def render_png(
    world: TilingWorld,
    output_path: str | Path,
    show_lines: bool = False,
    aligned_only: bool = False,
    face_alpha: float = 0.85,
    edge_color: str = "#2b2b2b",
    line_alpha: float = 0.35,
    padding: float = 10.0,
    dpi: int = 150,
    title: Optional[str] = None,
) -> None:
    """Render the tiles (and optionally the pentagrid) to PNG.

    Requires matplotlib; imported lazily to keep core package lightweight.
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Polygon
    except ImportError as exc:  # pragma: no cover - requires optional dep
        raise RuntimeError(
            "matplotlib is required for rendering. Install with `pip install matplotlib`."
        ) from exc

    tiles = [t for t in world.tiles if t.aligned] if aligned_only else list(world.tiles)

    fig, ax = plt.subplots(figsize=(8, 8))

    if show_lines:
        for family in world.lines:
            for line in family:
                ax.plot(
                    [line.x1, line.x2],
                    [line.y1, line.y2],
                    color=FAMILY_COLORS[line.family],
                    alpha=line_alpha,
                    linewidth=0.8,
                )

    for tile in tiles:
        patch = Polygon(
            tile.vertices,
            closed=True,
            facecolor=KIND_COLORS[tile.kind],
            edgecolor=edge_color,
            alpha=face_alpha,
            linewidth=0.8 if not tile.locked else 2.0,
        )
        ax.add_patch(patch)

    min_x, max_x, min_y, max_y = _extent(world, tiles, show_lines)
    ax.set_aspect("equal", "box")
    ax.set_xlim(min_x - padding, max_x + padding)
    ax.set_ylim(min_y - padding, max_y + padding)
    ax.axis("off")
    if title:
        ax.set_title(title)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight", pad_inches=0)
    plt.close(fig)


def _extent(
    world: TilingWorld, tiles: Sequence[Tile], show_lines: bool
) -> tuple[float, float, float, float]:
    xs = [x for tile in tiles for x, _ in tile.vertices]
    ys = [y for tile in tiles for _, y in tile.vertices]
    if show_lines:
        for family in world.lines:
            for line in family:
                xs.extend((line.x1, line.x2))
                ys.extend((line.y1, line.y2))
    if not xs:
        return (-1.0, 1.0, -1.0, 1.0)
    return (min(xs), max(xs), min(ys), max(ys))
