import sys
from pathlib import Path

ROOT = Path(__file__).parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pentatile.alignment import AlignmentMode
from pentatile.config import DEFAULT_TILING
from pentatile.world import TilingWorld


def main() -> None:
    world = TilingWorld.from_config(DEFAULT_TILING)
    errors = world.validate()
    if errors:
        raise SystemExit("\n".join(errors))

    print("Lines:", sum(len(family) for family in world.lines))
    print("Intersections:", len(world.intersections))
    print("Tiles:", len(world.tiles))

    session = world.start_alignment(mode=AlignmentMode.SINGLE_STEP)
    frames = 0
    while world.step_alignment():
        frames += 1
    print(f"Aligned {len(world.aligned_indices())} tiles over {frames + 1} frames "
          f"({session.placed} placed)")

    from pentatile.render import render_png

    out = ROOT / "exports" / "tiling.png"
    try:
        render_png(world, out, aligned_only=True)
    except RuntimeError as exc:
        print(exc)
        return
    print("Saved", out)


if __name__ == "__main__":
    main()
