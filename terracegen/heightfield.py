"""Ground height synthesis from the configured octave passes."""

from __future__ import annotations

import numpy as np
from scipy.ndimage import map_coordinates

from terracegen.config import TerrainConfig
from terracegen.metrics import SampleDiagnostics
from terracegen.noise import NoiseFieldSet, normalized
from terracegen.octaves import sample_pass


BLEND_BUCKETS = 5


def grid_axes(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Normalized sample coordinates ``xi / width`` and ``yi / height``, all in [0, 1)."""

    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")
    xs = np.arange(width, dtype=np.float64) / float(width)
    ys = np.arange(height, dtype=np.float64) / float(height)
    return xs, ys


def ground_height(
    field_set: NoiseFieldSet,
    cfg: TerrainConfig,
    xs: np.ndarray,
    ys: np.ndarray,
    *,
    z: float = 0.0,
    diagnostics: SampleDiagnostics | None = None,
) -> np.ndarray:
    """Ground height in [0, 1] for every grid point."""

    raw = sample_pass(field_set, cfg.ground, xs, ys, z=z, diagnostics=diagnostics)
    base = np.clip(normalized(raw), 0.0, 1.0)
    if not cfg.blend.enabled:
        return base
    return blended_ground_height(field_set, cfg, xs, ys, base, z=z)


def blended_ground_height(
    field_set: NoiseFieldSet,
    cfg: TerrainConfig,
    xs: np.ndarray,
    ys: np.ndarray,
    base: np.ndarray,
    *,
    z: float = 0.0,
) -> np.ndarray:
    """Blend sorted single-octave samples drawn at a base-dependent scalar.

    Every ``blend.stride``-th pixel draws ``blend.samples`` values at
    ``point * s`` where ``s = blend.base_scalar * (1 + base)`` and sorts
    them; the sorted layers are bilinearly upsampled to the full grid and
    each pixel interpolates between the pair picked by its base value's
    bucket. The feedback scalar differs per pixel, so these samples go
    through elementwise ``sample`` calls rather than the grid fast path.
    """

    blend = cfg.blend
    stride = blend.stride
    coarse_x, coarse_y = np.meshgrid(xs[::stride], ys[::stride])
    scalar = blend.base_scalar * (1.0 + base[::stride, ::stride])
    samples = np.stack(
        [
            normalized(field_set[field_set.index(i, blend.offset)].sample(coarse_x * scalar, coarse_y * scalar, z))
            for i in range(blend.samples)
        ]
    )
    samples.sort(axis=0)
    if stride > 1:
        samples = _upsample_layers(samples, base.shape, stride)
    return bucket_blend(base, samples)


def _upsample_layers(layers: np.ndarray, shape: tuple[int, int], stride: int) -> np.ndarray:
    rows = np.arange(shape[0], dtype=np.float64) / stride
    cols = np.arange(shape[1], dtype=np.float64) / stride
    coords = np.array(np.meshgrid(rows, cols, indexing="ij"))
    return np.stack([map_coordinates(layer, coords, order=1, mode="nearest") for layer in layers])


def bucket_blend(raw: np.ndarray, sorted_samples: np.ndarray) -> np.ndarray:
    """Interpolate ``sorted_samples[k]`` to ``sorted_samples[k + 1]`` by ``raw``'s bucket.

    ``raw`` in [0, 1] falls into one of five equal-width buckets ``k``; the
    fractional position inside the bucket is the interpolation weight.
    """

    raw = np.asarray(raw, dtype=np.float64)
    if sorted_samples.shape[0] < BLEND_BUCKETS + 1:
        raise ValueError(f"need at least {BLEND_BUCKETS + 1} sorted samples")

    scaled = np.clip(raw, 0.0, 1.0) * BLEND_BUCKETS
    bucket = np.clip(np.floor(scaled), 0, BLEND_BUCKETS - 1).astype(np.int64)
    weight = scaled - bucket
    assert np.all((weight >= 0.0) & (weight <= 1.0)), "blend weight outside [0, 1]"
    weight = np.clip(weight, 0.0, 1.0)

    lower = np.take_along_axis(sorted_samples, bucket[None, ...], axis=0)[0]
    upper = np.take_along_axis(sorted_samples, bucket[None, ...] + 1, axis=0)[0]
    return np.clip(lower + (upper - lower) * weight, 0.0, 1.0)
