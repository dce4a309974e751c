"""pentatile command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

import structlog

from .config import PRESETS, TilingConfig


def configure_logging(level: str = "WARNING", json_logs: bool = False) -> None:
    """Route structlog through stdlib logging on stderr."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level.upper(), force=True)
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _add_tiling_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preset", choices=sorted(PRESETS), default="default")
    parser.add_argument("--gammas", type=float, nargs=5, metavar="G")
    parser.add_argument("--random-gammas", action="store_true")
    parser.add_argument("--seed", type=int, help="Seed for --random-gammas")
    parser.add_argument("--spacing", type=float)
    parser.add_argument("--num-lines", type=int)
    parser.add_argument("--bounds", type=float)
    parser.add_argument("--scale", type=float)
    parser.add_argument("--margin", type=float)
    parser.add_argument("--seed-tile", type=int, action="append", dest="seed_tiles")
    parser.add_argument("--stepwise", action="store_true", help="Align one neighbour per step")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="pentatile CLI")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--json-logs", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Build a tiling and optionally render it")
    _add_tiling_args(generate)
    generate.add_argument("--align", action="store_true")
    generate.add_argument("--render-out", dest="render_path")
    generate.add_argument("--show-lines", action="store_true")
    generate.add_argument("--diagnose", action="store_true")
    generate.add_argument("--diagnose-json", dest="diagnose_json")

    diagnose = sub.add_parser("diagnose", help="Build, align and report tiling quality")
    _add_tiling_args(diagnose)
    diagnose.add_argument("--out", dest="output_path")

    return parser


def config_from_args(args: argparse.Namespace) -> TilingConfig:
    config = PRESETS[args.preset]
    if args.random_gammas:
        from .pentagrid import random_gammas
        config = config.with_gammas(random_gammas(random.Random(args.seed)))
    elif args.gammas:
        config = config.with_gammas(args.gammas)

    overrides = {
        "spacing": args.spacing,
        "num_lines": args.num_lines,
        "bounds": args.bounds,
        "scale": args.scale,
        "margin": args.margin,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.json_logs)

    config = config_from_args(args)
    errors = config.validate()
    if errors:
        for error in errors:
            print(error)
        raise SystemExit(1)

    if args.command == "generate":
        _cmd_generate(args, config)

    elif args.command == "diagnose":
        _cmd_diagnose(args, config)


def _align(world, args) -> None:
    from .alignment import AlignmentMode

    if args.stepwise:
        session = world.start_alignment(args.seed_tiles, mode=AlignmentMode.SINGLE_STEP)
        while world.step_alignment():
            pass
    else:
        session = world.align(args.seed_tiles)
    print(f"Aligned {len(world.aligned_indices())}/{len(world.tiles)} tiles in {session.steps} steps")


def _cmd_generate(args, config: TilingConfig) -> None:
    from .world import TilingWorld

    world = TilingWorld.from_config(config)
    print(
        f"Gammas: {', '.join(f'{g:.4f}' for g in config.gammas)}\n"
        f"Lines: {sum(len(f) for f in world.lines)}, "
        f"intersections: {len(world.intersections)}, tiles: {len(world.tiles)}"
    )

    if args.align:
        _align(world, args)
    if args.render_path:
        from .render import render_png
        render_png(world, args.render_path, show_lines=args.show_lines)
        print(f"Saved {args.render_path}")
    if args.diagnose or args.diagnose_json:
        from .diagnostics import diagnostics_report
        report = diagnostics_report(world)
        if args.diagnose:
            _print_report(report)
        if args.diagnose_json:
            Path(args.diagnose_json).write_text(json.dumps(report, indent=2), encoding="utf-8")


def _cmd_diagnose(args, config: TilingConfig) -> None:
    from .diagnostics import diagnostics_report
    from .world import TilingWorld

    world = TilingWorld.from_config(config)
    _align(world, args)
    report = diagnostics_report(world)
    _print_report(report)
    if args.output_path:
        Path(args.output_path).write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Saved {args.output_path}")


def _print_report(report: dict) -> None:
    for key, value in report.items():
        if isinstance(value, float):
            print(f"  {key}: {value:.6f}")
        else:
            print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
