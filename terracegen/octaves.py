"""Frequency-weighted multi-octave sampling over a slice of noise fields."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from terracegen.config import OctaveConfig
from terracegen.metrics import SampleDiagnostics
from terracegen.noise import NoiseField, NoiseFieldSet


_HULL_TOLERANCE = 1e-9


def sample_octaves(
    fields: Sequence[NoiseField],
    xs: np.ndarray,
    ys: np.ndarray,
    base_scalar: float,
    *,
    factor: float = 2.0,
    z: float = 0.0,
    normalization: float | None = None,
    diagnostics: SampleDiagnostics | None = None,
) -> np.ndarray:
    """Combine ``fields`` on the grid ``xs`` x ``ys`` into one value per point.

    Field ``i`` is evaluated at ``point * scalar_i`` with ``scalar_i =
    base_scalar * factor**i`` and weighted by ``1 / scalar_i``. The result
    is the weighted average, so it stays inside the range of the field
    outputs. A negative ``base_scalar`` flips every weight's sign together
    and leaves the average well-defined.
    """

    if len(fields) == 0:
        raise ValueError("at least one field is required")
    if base_scalar == 0.0:
        raise ValueError("base_scalar must be non-zero")
    if factor <= 0.0:
        raise ValueError("factor must be positive")

    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    total = np.zeros((ys.size, xs.size), dtype=np.float64)
    lo = np.full_like(total, np.inf)
    hi = np.full_like(total, -np.inf)
    weight = 0.0
    scalar = float(base_scalar)
    reciprocal = 1.0 / scalar

    for noise_field in fields:
        value = noise_field.sample_grid(xs * scalar, ys * scalar, z)
        total += value * reciprocal
        weight += reciprocal
        np.minimum(lo, value, out=lo)
        np.maximum(hi, value, out=hi)
        scalar *= factor
        reciprocal /= factor

    result = total / weight
    assert np.all(result >= lo - _HULL_TOLERANCE) and np.all(result <= hi + _HULL_TOLERANCE), (
        "octave average left the range of its inputs"
    )
    result = np.clip(result, lo, hi)

    if normalization is not None:
        result = np.clip(result * (2.0 / normalization), -1.0, 1.0)
    if diagnostics is not None:
        diagnostics.observe(result)
    return result


def sample_pass(
    field_set: NoiseFieldSet,
    octaves: OctaveConfig,
    xs: np.ndarray,
    ys: np.ndarray,
    *,
    z: float = 0.0,
    diagnostics: SampleDiagnostics | None = None,
) -> np.ndarray:
    """Run one configured pass over the cyclic window it names."""

    fields = field_set.window(octaves.offset, octaves.count, reverse=octaves.reverse)
    return sample_octaves(
        fields,
        xs,
        ys,
        octaves.base_scalar,
        factor=octaves.factor,
        z=z,
        normalization=octaves.normalization,
        diagnostics=diagnostics,
    )


def sample_point(
    fields: Sequence[NoiseField],
    point: tuple[float, float],
    base_scalar: float,
    **kwargs,
) -> float:
    x, y = point
    grid = sample_octaves(fields, np.array([x]), np.array([y]), base_scalar, **kwargs)
    return float(grid[0, 0])
