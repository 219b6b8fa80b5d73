"""Variant rendering and parallel dispatch to per-variant raster sinks."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
import logging
from multiprocessing import Pool
from pathlib import Path
from typing import Mapping

import numpy as np

from terracegen.bands import BandResult, compose_bands, to_u8
from terracegen.config import TerrainConfig
from terracegen.heightfield import grid_axes, ground_height
from terracegen.io import PngSink, write_png_u8
from terracegen.metrics import SampleDiagnostics, VariantMetrics, variant_metrics
from terracegen.noise import NoiseFieldSet
from terracegen.octaves import sample_pass
from terracegen.rng import RngStream
from terracegen.terrace import TerraceResult, classify_terraces, mark_bridges


logger = logging.getLogger(__name__)

CHANNELS = ("ground", "terrace", "water", "ramp")


@dataclass(frozen=True)
class VariantRaster:
    """Everything rendered for one variant, before any IO."""

    variant: int
    ground: np.ndarray
    water_level: np.ndarray
    terrace: TerraceResult
    bridges: np.ndarray
    bands: BandResult
    metrics: VariantMetrics


def build_field_set(cfg: TerrainConfig) -> NoiseFieldSet:
    return NoiseFieldSet.seeded(RngStream(cfg.seed).field_seeds(cfg.field_count))


def channel_filename(variant: int, channel: str) -> str:
    return f"variant_{variant:02d}_{channel}.png"


def render_variant(
    field_set: NoiseFieldSet,
    cfg: TerrainConfig,
    variant: int,
    *,
    diagnostics: SampleDiagnostics | None = None,
) -> VariantRaster:
    """Compute the four channel rasters of ``variant``; pure and IO-free."""

    diagnostics = diagnostics if diagnostics is not None else SampleDiagnostics()
    xs, ys = grid_axes(cfg.width, cfg.height)
    z = cfg.variant_z(variant)

    ground = ground_height(field_set, cfg, xs, ys, z=z, diagnostics=diagnostics)
    second = sample_pass(field_set, cfg.terrace_pass, xs, ys, z=z, diagnostics=diagnostics)
    terrace = classify_terraces(ground, second, cfg.terrace)
    bridge_rng = RngStream(cfg.seed).fork("bridges").variant(variant).generator()
    bridges = mark_bridges(terrace.level, cfg.bridges, bridge_rng)

    water_raw = sample_pass(field_set, cfg.water, xs, ys, z=z, diagnostics=diagnostics)
    water_level = cfg.water_shading.base_level + cfg.water_shading.amplitude * water_raw
    ramp_texture = sample_pass(field_set, cfg.ramp_texture, xs, ys, z=z, diagnostics=diagnostics)

    bands = compose_bands(
        ground,
        terrace,
        water_level,
        ramp_texture,
        water_cfg=cfg.water_shading,
        ramp_cfg=cfg.ramp,
        bridges=bridges,
    )
    metrics = variant_metrics(
        variant,
        terrace.level,
        cfg.terrace.terraces,
        bands.wet,
        bands.ramp_mask,
        bands.cliff_mask,
        diagnostics,
        bridges=bridges,
    )
    return VariantRaster(variant, ground, water_level, terrace, bridges, bands, metrics)


def write_variant(raster: VariantRaster, sinks: Mapping[str, PngSink]) -> None:
    """Stream each channel into its sink row by row, then flush every sink."""

    channels = raster.bands.channels()
    missing = set(CHANNELS) - set(sinks)
    if missing:
        raise ValueError(f"missing sinks for channels: {sorted(missing)}")

    for name in CHANNELS:
        sink = sinks[name]
        for row in channels[name]:
            sink.write_pixels(row)
        sink.flush()


def render_variant_to_dir(cfg: TerrainConfig, variant: int, out_dir: str | Path) -> VariantMetrics:
    """Render one variant and write its rasters into ``out_dir``."""

    out_dir = Path(out_dir)
    field_set = build_field_set(cfg)
    logger.debug("Rendering variant %d (%dx%d)", variant, cfg.width, cfg.height)
    raster = render_variant(field_set, cfg, variant)

    with ExitStack() as stack:
        sinks = {
            name: stack.enter_context(PngSink(out_dir / channel_filename(variant, name), cfg.width, cfg.height))
            for name in CHANNELS
        }
        write_variant(raster, sinks)
    write_png_u8(out_dir / channel_filename(variant, "height"), to_u8(raster.ground * 255.0))

    logger.debug("Variant %d done: water=%.3f", variant, raster.metrics.water_fraction)
    return raster.metrics


def _variant_job(payload: tuple[TerrainConfig, int, str]) -> VariantMetrics:
    cfg, variant, out_dir = payload
    return render_variant_to_dir(cfg, variant, out_dir)


def run_variants(cfg: TerrainConfig, out_dir: str | Path, *, workers: int = 1) -> list[VariantMetrics]:
    """Render every variant of ``cfg`` into ``out_dir``.

    Variants share no state; each job rebuilds the field set from the
    config seed and owns its sinks. The first failing job aborts the run.
    """

    cfg.validate()
    if workers < 1:
        raise ValueError("workers must be >= 1")

    payloads = [(cfg, variant, str(out_dir)) for variant in range(cfg.variant_count)]
    workers = min(workers, len(payloads))
    logger.info("Rendering %d variant(s) with %d worker(s)", len(payloads), workers)

    if workers == 1:
        return [_variant_job(payload) for payload in payloads]
    with Pool(processes=workers) as pool:
        return pool.map(_variant_job, payloads)
