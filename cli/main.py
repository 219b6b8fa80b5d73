"""CLI entry point for terraced terrain generation."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import logging
from pathlib import Path
import platform
import shutil
import tempfile
import time

import numpy as np
from terracegen.config import DEFAULT_HEIGHT, DEFAULT_PROFILE, DEFAULT_SEED, DEFAULT_WIDTH, PROFILES, ConfigError, profile
from terracegen.io import (
    PngSink,
    clear_output_dir,
    move_tree_contents,
    resolve_output_dir,
    write_json,
)
from terracegen.rivers import generate_river_network, write_rivers
from terracegen.tiles import run_variants


logger = logging.getLogger("terracegen.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deterministic terraced terrain raster generator")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Integer seed for the noise field set")
    parser.add_argument("--profile", choices=sorted(PROFILES), default=DEFAULT_PROFILE, help="Constant profile")
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--w", type=int, default=DEFAULT_WIDTH, help="Output width in pixels")
    parser.add_argument("--h", type=int, default=DEFAULT_HEIGHT, help="Output height in pixels")
    parser.add_argument("--variants", type=int, default=None, help="Number of variants (profile default if omitted)")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes rendering variants")
    parser.add_argument(
        "--rivers",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write the river site network raster",
    )
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    overrides = {"width": args.w, "height": args.h, "seed": args.seed}
    if args.variants is not None:
        overrides["variant_count"] = args.variants
    try:
        config = profile(args.profile, **overrides)
    except ConfigError as exc:
        parser.error(str(exc))
    if args.workers < 1:
        parser.error("--workers must be >= 1")

    out_dir = resolve_output_dir(args.out, args.seed, args.w, args.h, overwrite=args.overwrite)
    stage_dir = Path(tempfile.mkdtemp(prefix=".staging-", dir=str(out_dir.parent)))
    try:
        generation_start = time.perf_counter()
        metrics = run_variants(config, stage_dir, workers=args.workers)
        generation_seconds = time.perf_counter() - generation_start

        river_sites = 0
        if args.rivers:
            network = generate_river_network(config.river, config.width, config.height)
            with PngSink(stage_dir / "rivers.png", config.width, config.height) as sink:
                write_rivers(network, sink)
            river_sites = len(network.nodes)

        if args.json:
            deterministic_meta = {
                "profile": args.profile,
                "seed": args.seed,
                "width": args.w,
                "height": args.h,
                "config": config.to_dict(),
                "variants": [m.to_dict() for m in metrics],
                "river_sites": river_sites,
            }
            meta = {
                **deterministic_meta,
                "generated_at_utc": datetime.now(timezone.utc).isoformat(),
                "generation_seconds": generation_seconds,
                "workers": args.workers,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(stage_dir / "deterministic_meta.json", deterministic_meta)
            write_json(stage_dir / "meta.json", meta)

        clear_output_dir(out_dir, out_root=Path(args.out))
        move_tree_contents(stage_dir, out_dir)
    finally:
        shutil.rmtree(stage_dir, ignore_errors=True)

    logger.info("Wrote %d variant(s) to %s", len(metrics), out_dir)
    print(f"Generated terraces: {out_dir}")
    for m in metrics:
        print(
            f"Variant {m.variant:02d}: "
            f"water={m.water_fraction * 100.0:.1f}%, "
            f"ramps={m.ramp_fraction * 100.0:.1f}%, "
            f"cliffs={m.cliff_fraction * 100.0:.1f}%"
        )
    print(f"Generation time: {generation_seconds:.3f} s ({args.w}x{args.h}, {len(metrics)} variants)")
    file_count = sum(1 for child in out_dir.iterdir() if child.is_file())
    print(f"Output files: {file_count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
