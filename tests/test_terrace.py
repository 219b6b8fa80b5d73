from __future__ import annotations

import numpy as np

from terracegen.config import BridgeConfig, TerraceConfig
from terracegen.terrace import classify_terraces, mark_bridges


CFG = TerraceConfig(terraces=10, ramp_proportion=0.25, close_when_over=0.15, inc_when_over=0.35)


def _classify(ground: float, second: float, cfg: TerraceConfig = CFG):
    result = classify_terraces(np.array([ground]), np.array([second]), cfg)
    return int(result.level[0]), bool(result.is_ramp[0]), float(result.terrace_height[0])


def test_levels_stay_in_range_for_random_inputs() -> None:
    prng = np.random.default_rng(3)
    ground = prng.uniform(0.0, 1.0, size=(64, 64))
    ground[0, :4] = [0.0, 1.0, 0.999999, 0.5]
    second = prng.uniform(-1.0, 1.0, size=(64, 64))

    result = classify_terraces(ground, second, CFG)

    assert result.level.dtype.kind == "i"
    assert result.level.min() >= 0
    assert result.level.max() <= CFG.terraces
    assert np.allclose(result.terrace_height * CFG.terraces, result.level)
    assert np.all((result.terrace_height >= 0.0) & (result.terrace_height <= 1.0))


def test_top_level_promotion_is_clamped() -> None:
    level, is_ramp, height = _classify(1.0, -1.0)

    assert level == 10
    assert not is_ramp
    assert height == 1.0


def test_sample_at_close_threshold_leaves_pixel_flat() -> None:
    assert _classify(0.55, 0.15) == (5, False, 0.5)


def test_sample_at_increment_threshold_marks_ramp_without_promotion() -> None:
    assert _classify(0.55, 0.35) == (5, True, 0.5)


def test_sample_above_increment_threshold_promotes() -> None:
    level, is_ramp, height = _classify(0.55, 0.36)

    assert level == 6
    assert not is_ramp
    assert height == 0.6


def test_even_levels_negate_second_sample() -> None:
    # level 4 is even: -0.5 becomes 0.5 and promotes
    assert _classify(0.45, -0.5)[0] == 5
    assert _classify(0.45, 0.5) == (4, False, 0.4)


def test_near_rounding_up_starts_as_ramp() -> None:
    assert _classify(0.58, 0.0) == (5, True, 0.5)
    assert _classify(0.52, 0.0) == (5, False, 0.5)

    flat = TerraceConfig(terraces=10, ramp_proportion=0.0, close_when_over=0.15, inc_when_over=0.35)
    assert _classify(0.58, 0.0, flat)[1] is False


def test_zero_second_sample_never_promotes() -> None:
    ground = np.linspace(0.0, 0.999, 50)
    result = classify_terraces(ground, np.zeros_like(ground), CFG)

    assert np.array_equal(result.level, np.floor(ground * 10).astype(np.int64))


LEVELS = np.array(
    [
        [0, 0, 0, 0],
        [0, 0, 1, 3],
        [0, 0, 1, 1],
    ]
)


def test_bridges_disabled_marks_nothing() -> None:
    mask = mark_bridges(LEVELS, BridgeConfig(enabled=False, probability=1.0), np.random.default_rng(0))

    assert mask.shape == LEVELS.shape
    assert not mask.any()


def test_bridges_mark_only_uneven_close_neighbours() -> None:
    mask = mark_bridges(LEVELS, BridgeConfig(enabled=True, probability=1.0), np.random.default_rng(0))

    # (1, 3) and (2, 3) sit two levels from a neighbour; (1, 1) and (2, 1) are flat
    assert np.argwhere(mask).tolist() == [[1, 2], [2, 2]]
    assert not mask[0].any()
    assert not mask[:, 0].any()


def test_bridges_with_zero_probability_mark_nothing() -> None:
    mask = mark_bridges(LEVELS, BridgeConfig(enabled=True, probability=0.0), np.random.default_rng(0))

    assert not mask.any()


def test_bridges_follow_the_generator_seed() -> None:
    levels = np.random.default_rng(9).integers(0, 3, size=(64, 64))
    cfg = BridgeConfig(enabled=True, probability=0.5)

    first = mark_bridges(levels, cfg, np.random.default_rng(1))
    again = mark_bridges(levels, cfg, np.random.default_rng(1))
    other = mark_bridges(levels, cfg, np.random.default_rng(2))

    assert first.any()
    assert np.array_equal(first, again)
    assert not np.array_equal(first, other)


def test_bridges_skip_degenerate_rasters() -> None:
    cfg = BridgeConfig(enabled=True, probability=1.0)

    assert not mark_bridges(np.array([[0, 1, 0]]), cfg, np.random.default_rng(0)).any()
    assert not mark_bridges(np.array([0, 1, 0]), cfg, np.random.default_rng(0)).any()


def test_sixteen_flat_terraces_match_byte_masking() -> None:
    ground = np.random.default_rng(4).uniform(0.0, 0.999, size=(32, 32))
    cfg = TerraceConfig(terraces=16, ramp_proportion=0.0, close_when_over=0.5, inc_when_over=1.0)

    result = classify_terraces(ground, np.zeros_like(ground), cfg)

    masked = (np.floor(ground * 256.0).astype(np.uint8) & 0b11110000) >> 4
    assert np.array_equal(result.level, masked)
    assert not result.is_ramp.any()
