"""Seed streams for the noise field set, bridges and river sites."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib

import numpy as np


_U64 = (1 << 64) - 1
# OpenSimplex folds seeds through signed 64-bit arithmetic.
_I63 = (1 << 63) - 1


def _child_seed(seed: int, label: str) -> int:
    payload = f"terracegen:{int(seed) & _U64}:{label}".encode("utf-8")
    return int.from_bytes(hashlib.blake2b(payload, digest_size=8).digest(), byteorder="big")


@dataclass(frozen=True)
class RngStream:
    """Seed labelled by the pipeline stage that consumes it."""

    seed: int

    def fork(self, key: str) -> "RngStream":
        if not key:
            raise ValueError("fork key must be non-empty")
        return RngStream(_child_seed(self.seed, key))

    def variant(self, variant: int) -> "RngStream":
        return self.fork(f"variant-{int(variant)}")

    def generator(self) -> np.random.Generator:
        return np.random.Generator(np.random.PCG64(int(self.seed) & _U64))

    def field_seeds(self, count: int) -> list[int]:
        """Ordered seeds for a noise field set of ``count`` members."""

        if count < 1:
            raise ValueError("count must be >= 1")
        fields = self.fork("fields")
        return [_child_seed(fields.seed, f"field-{i}") & _I63 for i in range(count)]
