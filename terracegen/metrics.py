"""Sampler diagnostics and per-variant raster metrics."""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np


@dataclass
class SampleDiagnostics:
    """Running extremes of sampler outputs.

    Instances are owned by one caller and passed explicitly into sampler
    calls; they are never shared between concurrently rendered variants.
    """

    minimum: float = math.inf
    maximum: float = -math.inf
    count: int = 0

    def observe(self, values) -> None:
        arr = np.asarray(values, dtype=np.float64)
        if arr.size == 0:
            return
        self.minimum = min(self.minimum, float(np.min(arr)))
        self.maximum = max(self.maximum, float(np.max(arr)))
        self.count += int(arr.size)

    @property
    def max_abs(self) -> float:
        if self.count == 0:
            return 0.0
        return max(abs(self.minimum), abs(self.maximum))


@dataclass(frozen=True)
class VariantMetrics:
    """Coverage summary for one rendered variant."""

    variant: int
    terrace_histogram: tuple[int, ...]
    water_fraction: float
    ramp_fraction: float
    cliff_fraction: float
    bridge_fraction: float
    sample_min: float
    sample_max: float

    def to_dict(self) -> dict[str, object]:
        return {
            "variant": self.variant,
            "terrace_histogram": list(self.terrace_histogram),
            "water_fraction": self.water_fraction,
            "ramp_fraction": self.ramp_fraction,
            "cliff_fraction": self.cliff_fraction,
            "bridge_fraction": self.bridge_fraction,
            "sample_min": self.sample_min,
            "sample_max": self.sample_max,
        }


def variant_metrics(
    variant: int,
    level: np.ndarray,
    terraces: int,
    wet: np.ndarray,
    ramp_mask: np.ndarray,
    cliff_mask: np.ndarray,
    diagnostics: SampleDiagnostics,
    *,
    bridges: np.ndarray | None = None,
) -> VariantMetrics:
    """Summarize terrace occupancy and band coverage of one variant."""

    total = max(int(level.size), 1)
    histogram = np.bincount(level.ravel().astype(np.int64), minlength=terraces + 1)
    return VariantMetrics(
        variant=variant,
        terrace_histogram=tuple(int(v) for v in histogram[: terraces + 1]),
        water_fraction=float(np.count_nonzero(wet) / total),
        ramp_fraction=float(np.count_nonzero(ramp_mask) / total),
        cliff_fraction=float(np.count_nonzero(cliff_mask) / total),
        bridge_fraction=float(np.count_nonzero(bridges) / total) if bridges is not None else 0.0,
        sample_min=diagnostics.minimum if diagnostics.count else 0.0,
        sample_max=diagnostics.maximum if diagnostics.count else 0.0,
    )
