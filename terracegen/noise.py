"""Seeded noise fields and the cyclic field set shared by every sampler pass."""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from opensimplex import OpenSimplex


class NoiseField(Protocol):
    """Deterministic scalar noise in [-1, 1], a pure function of seed and point."""

    def sample(self, x, y, z=0.0):
        ...

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, z: float = 0.0) -> np.ndarray:
        ...


def normalized(value):
    """Map a raw field value from [-1, 1] into [0, 1]."""

    return value * 0.5 + 0.5


class SimplexField:
    """OpenSimplex noise bound to one seed."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._simplex = OpenSimplex(seed=self.seed)

    def __repr__(self) -> str:
        return f"SimplexField(seed={self.seed})"

    def sample(self, x, y, z=0.0):
        """Sample elementwise at broadcast ``(x, y, z)``; scalars give a float.

        Arrays are walked one ``noise3`` call per element from Python, which
        is far slower than ``sample_grid``; keep it to sparse or coarse points.
        """

        if np.ndim(x) == 0 and np.ndim(y) == 0 and np.ndim(z) == 0:
            return float(self._simplex.noise3(float(x), float(y), float(z)))

        bx, by, bz = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )
        noise3 = self._simplex.noise3
        flat = [noise3(float(a), float(b), float(c)) for a, b, c in zip(bx.ravel(), by.ravel(), bz.ravel())]
        return np.asarray(flat, dtype=np.float64).reshape(bx.shape)

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray, z: float = 0.0) -> np.ndarray:
        """Sample the outer product of ``xs`` and ``ys``; result is ``(len(ys), len(xs))``."""

        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        zs = np.asarray([z], dtype=np.float64)
        return np.asarray(self._simplex.noise3array(xs, ys, zs)[0], dtype=np.float64)


class NoiseFieldSet:
    """Ordered, read-only set of fields addressed cyclically.

    Index ``i`` of a window starting at ``offset`` resolves to field
    ``(offset + i) % len(self)``, so passes may request more octaves than
    there are fields.
    """

    def __init__(self, fields: Sequence[NoiseField]) -> None:
        if len(fields) == 0:
            raise ValueError("a noise field set needs at least one field")
        self._fields = tuple(fields)

    @classmethod
    def seeded(cls, seeds: Sequence[int]) -> "NoiseFieldSet":
        return cls([SimplexField(seed) for seed in seeds])

    def __len__(self) -> int:
        return len(self._fields)

    def __getitem__(self, index: int) -> NoiseField:
        return self._fields[index % len(self._fields)]

    def index(self, i: int, offset: int = 0) -> int:
        return (offset + i) % len(self._fields)

    def window(self, offset: int, count: int, *, reverse: bool = False) -> list[NoiseField]:
        """Return ``count`` fields starting at ``offset``, optionally high-to-low."""

        if count < 1:
            raise ValueError("count must be >= 1")
        picked = [self._fields[self.index(i, offset)] for i in range(count)]
        if reverse:
            picked.reverse()
        return picked
