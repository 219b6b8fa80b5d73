"""Terrace quantization with ramp and promotion decisions."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from terracegen.config import BridgeConfig, TerraceConfig


@dataclass(frozen=True)
class TerraceResult:
    """Per-pixel terrace classification."""

    level: np.ndarray
    is_ramp: np.ndarray
    terrace_height: np.ndarray


def classify_terraces(ground: np.ndarray, second_sample: np.ndarray, cfg: TerraceConfig) -> TerraceResult:
    """Quantize ``ground`` into terrace levels.

    A pixel starts as a ramp when its height sits in the top
    ``ramp_proportion`` of its band. ``second_sample`` is negated on even
    levels, then promotes the pixel one level when above ``inc_when_over``,
    or marks it as a ramp when above ``close_when_over`` only.
    """

    terraces = cfg.terraces
    ground = np.asarray(ground, dtype=np.float64)
    second = np.asarray(second_sample, dtype=np.float64)
    if ground.shape != second.shape:
        raise ValueError("ground and second_sample shape mismatch")

    assert np.all((ground >= 0.0) & (ground <= 1.0)), "ground height outside [0, 1]"
    ground = np.clip(ground, 0.0, 1.0)

    approx_level = ground * terraces
    level = np.floor(approx_level).astype(np.int64)
    is_ramp = (approx_level - level) > (1.0 - cfg.ramp_proportion)

    biased = np.where(level % 2 == 0, -second, second)
    promote = biased > cfg.inc_when_over
    transition = (biased > cfg.close_when_over) & ~promote

    level = np.minimum(level + promote.astype(np.int64), terraces)
    is_ramp = np.where(promote, False, is_ramp | transition)

    return TerraceResult(
        level=level,
        is_ramp=is_ramp,
        terrace_height=level.astype(np.float64) / float(terraces),
    )


def mark_bridges(level: np.ndarray, cfg: BridgeConfig, rng: np.random.Generator) -> np.ndarray:
    """Boolean mask of bridge pixels over a terrace ``level`` raster.

    A pixel whose previous-row and previous-column neighbours sit at most
    one level away, and whose neighbour mean differs from its own level,
    becomes a bridge with probability ``cfg.probability``. The first row
    and column never qualify. One draw is taken per interior pixel, so the
    mask depends only on ``rng``'s seed and the raster shape.
    """

    level = np.asarray(level, dtype=np.int64)
    mask = np.zeros(level.shape, dtype=bool)
    if not cfg.enabled or level.ndim != 2 or min(level.shape) < 2:
        return mask

    me = level[1:, 1:]
    above = level[:-1, 1:]
    left = level[1:, :-1]
    near = (np.abs(me - above) <= 1) & (np.abs(me - left) <= 1)
    uneven = (above + left) / 2.0 != me
    drawn = rng.random(me.shape) < cfg.probability
    mask[1:, 1:] = near & uneven & drawn
    return mask
