"""Ground, terrace, water and ramp channel rasters."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from terracegen.config import RampConfig, WaterConfig
from terracegen.terrace import TerraceResult


@dataclass(frozen=True)
class BandResult:
    """Four RGBA channel rasters of shape (H, W, 4) plus the masks behind them."""

    ground: np.ndarray
    terrace: np.ndarray
    water: np.ndarray
    ramp: np.ndarray
    wet: np.ndarray
    ramp_mask: np.ndarray
    cliff_mask: np.ndarray

    def channels(self) -> dict[str, np.ndarray]:
        return {
            "ground": self.ground,
            "terrace": self.terrace,
            "water": self.water,
            "ramp": self.ramp,
        }


def to_u8(values: np.ndarray) -> np.ndarray:
    """Round to bytes, clamping to [0, 255]; NaN becomes 0."""

    values = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    return np.round(np.clip(values, 0.0, 255.0)).astype(np.uint8)


def rgba(red: np.ndarray, green: np.ndarray, blue: np.ndarray) -> np.ndarray:
    """Stack float channels into an opaque uint8 RGBA raster."""

    r = to_u8(red)
    alpha = np.full(r.shape, 255, dtype=np.uint8)
    return np.stack((r, to_u8(green), to_u8(blue), alpha), axis=-1)


def gray_rgba(values01: np.ndarray) -> np.ndarray:
    """Encode values in [0, 1] as opaque grayscale RGBA."""

    level = np.asarray(values01, dtype=np.float64) * 255.0
    return rgba(level, level, level)


def water_shade(depth: np.ndarray, cfg: WaterConfig) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(brightness, red_green)`` for water ``depth`` >= 0.

    Darkness grows linearly with depth up to ``darkness_cap`` and dims the
    brightness quadratically.
    """

    darkness = np.minimum(np.asarray(depth, dtype=np.float64) * cfg.darkness_gain, cfg.darkness_cap)
    brightness = cfg.brightness * (1.0 - darkness * darkness)
    return brightness, brightness * cfg.red_green_ratio


def compose_bands(
    ground: np.ndarray,
    terrace: TerraceResult,
    water_level: np.ndarray,
    ramp_texture: np.ndarray,
    *,
    water_cfg: WaterConfig,
    ramp_cfg: RampConfig,
    bridges: np.ndarray | None = None,
) -> BandResult:
    """Derive the four output channels for every pixel.

    Pixels set in ``bridges`` render white on the terrace channel.
    """

    ground = np.asarray(ground, dtype=np.float64)
    if not ground.shape == water_level.shape == ramp_texture.shape == terrace.level.shape:
        raise ValueError("band inputs must share one shape")

    # Equality renders as dry land.
    wet = ground < water_level
    depth = np.where(wet, water_level - ground, 0.0)
    brightness, red_green = water_shade(depth, water_cfg)
    zero = np.zeros_like(ground)

    water = np.where(
        wet[..., None],
        rgba(red_green, red_green, brightness),
        rgba(zero, zero, zero),
    )

    dry_ramp = ~wet & terrace.is_ramp
    navigable = dry_ramp & (ramp_texture > ramp_cfg.threshold)
    cliff = dry_ramp & ~navigable

    ground_level = ground * 255.0
    dry_value = np.where(
        navigable,
        ground_level,
        np.where(cliff, ground_level * ramp_cfg.cliff_brightness, terrace.terrace_height * 255.0),
    )
    ramp = np.where(wet[..., None], water, rgba(dry_value, dry_value, dry_value))

    terrace_values = terrace.terrace_height
    if bridges is not None:
        terrace_values = np.where(bridges, 1.0, terrace_values)

    return BandResult(
        ground=gray_rgba(ground),
        terrace=gray_rgba(terrace_values),
        water=water.astype(np.uint8),
        ramp=ramp.astype(np.uint8),
        wet=wet,
        ramp_mask=navigable,
        cliff_mask=cliff,
    )
