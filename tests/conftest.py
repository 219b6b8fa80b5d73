from __future__ import annotations

import numpy as np
import pytest


class ConstantField:
    """Field returning one value everywhere; records the grids and point shapes it was asked for."""

    def __init__(self, value: float) -> None:
        self.value = float(value)
        self.grid_calls: list[tuple[np.ndarray, np.ndarray, float]] = []
        self.point_shapes: list[tuple[int, ...]] = []

    def sample(self, x, y, z=0.0):
        shape = np.broadcast(np.asarray(x), np.asarray(y), np.asarray(z)).shape
        self.point_shapes.append(shape)
        if shape == ():
            return self.value
        return np.full(shape, self.value, dtype=np.float64)

    def sample_grid(self, xs, ys, z=0.0):
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        self.grid_calls.append((xs, ys, z))
        return np.full((ys.size, xs.size), self.value, dtype=np.float64)


@pytest.fixture
def constant_field():
    return ConstantField
