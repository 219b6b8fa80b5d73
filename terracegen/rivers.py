"""Voronoi river-site network rendered as a sparse pixel overlay."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence

import numpy as np
from scipy.spatial import Voronoi

from terracegen.config import RiverConfig
from terracegen.io import PngSink
from terracegen.rng import RngStream


@dataclass(frozen=True)
class RiverNode:
    """A river site in [0, 1)^3.

    ``coord[2]`` and ``parent`` are not read by the rasterizer; they are
    kept for elevation-aware routing between sites.
    """

    coord: tuple[float, float, float]
    parent: int | None = None


@dataclass(frozen=True)
class RiverNetwork:
    """Sites, their Voronoi vertices, and the pixel overlay built from both."""

    nodes: tuple[RiverNode, ...]
    vertices: np.ndarray
    overlay: dict[tuple[int, int], tuple[int, int, int]]
    width: int
    height: int


def discrete_coord(x: float, y: float, width: int, height: int) -> tuple[int, int]:
    """Pixel ``(xi, yi)`` containing the normalized point ``(x, y)``."""

    return int(math.floor(x * width)), int(math.floor(y * height))


def sample_river_nodes(rng: RngStream, count: int) -> tuple[RiverNode, ...]:
    coords = rng.generator().uniform(0.0, 1.0, size=(count, 3))
    return tuple(RiverNode(coord=(float(x), float(y), float(z))) for x, y, z in coords)


def generate_river_network(
    cfg: RiverConfig,
    width: int,
    height: int,
    rng: RngStream | None = None,
) -> RiverNetwork:
    """Seed the river sites, build their Voronoi diagram, and mark the overlay.

    Vertex pixels are marked first and site pixels second, so a site wins a
    shared pixel. Vertices that land outside the grid are not drawn.
    """

    if cfg.site_count < 3:
        raise ValueError("site_count must be >= 3")
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")

    stream = rng if rng is not None else RngStream(cfg.seed).fork("rivers")
    nodes = sample_river_nodes(stream, cfg.site_count)
    points = np.array([node.coord[:2] for node in nodes], dtype=np.float64)
    vertices = Voronoi(points).vertices

    overlay: dict[tuple[int, int], tuple[int, int, int]] = {}
    for vx, vy in vertices:
        key = discrete_coord(vx, vy, width, height)
        if 0 <= key[0] < width and 0 <= key[1] < height:
            overlay[key] = tuple(cfg.vertex_color)
    for node in nodes:
        overlay[discrete_coord(node.coord[0], node.coord[1], width, height)] = tuple(cfg.site_color)

    return RiverNetwork(nodes, vertices, overlay, width, height)


def closest_3_river_indices(nodes: Sequence[RiverNode], point: tuple[float, float]) -> tuple[int, int, int]:
    """Indices of the three sites nearest ``point``, returned in ascending index order.

    Ranking is by Euclidean distance; equal distances keep index order.
    """

    if len(nodes) < 3:
        raise ValueError("need at least 3 river nodes")
    px, py = point
    distances = [math.hypot(node.coord[0] - px, node.coord[1] - py) for node in nodes]
    ranked = sorted(range(len(nodes)), key=lambda i: distances[i])
    a, b, c = sorted(ranked[:3])
    return a, b, c


def render_rivers(network: RiverNetwork) -> np.ndarray:
    """Dense opaque RGBA raster: overlay colors on black."""

    out = np.zeros((network.height, network.width, 4), dtype=np.uint8)
    out[..., 3] = 255
    for (xi, yi), (r, g, b) in network.overlay.items():
        out[yi, xi, :3] = (r, g, b)
    return out


def write_rivers(network: RiverNetwork, sink: PngSink) -> None:
    for row in render_rivers(network):
        sink.write_pixels(row)
    sink.flush()
