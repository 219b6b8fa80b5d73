"""Configuration models for terrace generation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any


DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_SEED = 0
DEFAULT_PROFILE = "classic"


class ConfigError(ValueError):
    """Raised when a configuration cannot produce a valid run."""


@dataclass(frozen=True)
class OctaveConfig:
    """One sampler pass over a cyclic window of the noise field set.

    ``normalization`` rescales the weighted average by ``2.0 / normalization``
    and is left unset for passes that must stay inside the field range.
    """

    offset: int = 0
    count: int = 8
    base_scalar: float = 2.0
    factor: float = 2.03
    reverse: bool = False
    normalization: float | None = None


@dataclass(frozen=True)
class TerraceConfig:
    """Terrace quantization and ramp promotion thresholds."""

    terraces: int = 10
    ramp_proportion: float = 0.25
    close_when_over: float = 0.15
    inc_when_over: float = 0.35


@dataclass(frozen=True)
class WaterConfig:
    """Water level placement and depth shading."""

    base_level: float = 0.36
    amplitude: float = 0.14
    darkness_gain: float = 7.0
    darkness_cap: float = 0.6
    brightness: float = 255.0
    red_green_ratio: float = 0.35


@dataclass(frozen=True)
class RampConfig:
    """Ramp versus cliff rendering on terrace boundaries."""

    threshold: float = 0.1
    cliff_brightness: float = 0.5


@dataclass(frozen=True)
class BlendConfig:
    """Secondary sorted-sample blend applied on top of the ground octaves.

    The blend samples are drawn every ``stride`` pixels and bilinearly
    upsampled; ``stride=1`` samples every pixel.
    """

    enabled: bool = False
    samples: int = 6
    base_scalar: float = 5.0
    offset: int = 6
    stride: int = 4


@dataclass(frozen=True)
class BridgeConfig:
    """Seeded post-pass that lights single terrace pixels as bridges."""

    enabled: bool = False
    probability: float = 0.03


@dataclass(frozen=True)
class RiverConfig:
    """Voronoi site network rendered to a single raster."""

    site_count: int = 9
    seed: int = 1
    vertex_color: tuple[int, int, int] = (255, 100, 100)
    site_color: tuple[int, int, int] = (100, 100, 255)


@dataclass(frozen=True)
class TerrainConfig:
    """Primary generation configuration."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    seed: int = DEFAULT_SEED
    field_count: int = 12
    ground: OctaveConfig = field(default_factory=OctaveConfig)
    terrace_pass: OctaveConfig = field(
        default_factory=lambda: OctaveConfig(offset=0, count=6, base_scalar=-3.0, factor=2.1, reverse=True)
    )
    water: OctaveConfig = field(
        default_factory=lambda: OctaveConfig(offset=8, count=2, base_scalar=0.75, factor=2.0)
    )
    ramp_texture: OctaveConfig = field(
        default_factory=lambda: OctaveConfig(offset=10, count=1, base_scalar=48.0, factor=2.0)
    )
    terrace: TerraceConfig = field(default_factory=TerraceConfig)
    water_shading: WaterConfig = field(default_factory=WaterConfig)
    ramp: RampConfig = field(default_factory=RampConfig)
    blend: BlendConfig = field(default_factory=BlendConfig)
    bridges: BridgeConfig = field(default_factory=BridgeConfig)
    river: RiverConfig = field(default_factory=RiverConfig)
    variant_count: int = 4
    variant_phase: float = 31.7

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def variant_z(self, variant: int) -> float:
        """Third noise coordinate that separates one variant from the others."""

        return float(variant) * self.variant_phase

    def validate(self) -> "TerrainConfig":
        """Reject configurations that cannot render; returns self for chaining."""

        if self.width <= 0 or self.height <= 0:
            raise ConfigError("width and height must be positive")
        if self.field_count < 1:
            raise ConfigError("field_count must be >= 1")
        if self.variant_count < 1:
            raise ConfigError("variant_count must be >= 1")

        for name in ("ground", "terrace_pass", "water", "ramp_texture"):
            _validate_octaves(name, getattr(self, name))

        tcfg = self.terrace
        if tcfg.terraces < 1:
            raise ConfigError("terrace.terraces must be >= 1")
        if not 0.0 <= tcfg.ramp_proportion <= 1.0:
            raise ConfigError("terrace.ramp_proportion must lie in [0, 1]")
        if tcfg.close_when_over >= tcfg.inc_when_over:
            raise ConfigError("terrace.close_when_over must be below terrace.inc_when_over")

        wcfg = self.water_shading
        if wcfg.darkness_gain < 0.0 or not 0.0 <= wcfg.darkness_cap <= 1.0:
            raise ConfigError("water darkness gain must be >= 0 and cap must lie in [0, 1]")
        if not 0.0 <= self.ramp.cliff_brightness <= 1.0:
            raise ConfigError("ramp.cliff_brightness must lie in [0, 1]")

        if self.blend.enabled:
            if self.blend.samples < 6:
                raise ConfigError("blend.samples must be >= 6 to cover five buckets")
            if self.blend.base_scalar == 0.0:
                raise ConfigError("blend.base_scalar must be non-zero")
            if self.blend.stride < 1:
                raise ConfigError("blend.stride must be >= 1")

        if not 0.0 <= self.bridges.probability <= 1.0:
            raise ConfigError("bridges.probability must lie in [0, 1]")

        if self.river.site_count < 3:
            raise ConfigError("river.site_count must be >= 3")
        return self


def _validate_octaves(name: str, octaves: OctaveConfig) -> None:
    if octaves.count < 1:
        raise ConfigError(f"{name}.count must be >= 1")
    if octaves.base_scalar == 0.0:
        raise ConfigError(f"{name}.base_scalar must be non-zero")
    if octaves.factor <= 0.0:
        raise ConfigError(f"{name}.factor must be positive")
    if octaves.normalization is not None and octaves.normalization <= 0.0:
        raise ConfigError(f"{name}.normalization must be positive when set")


PROFILES: dict[str, TerrainConfig] = {
    "classic": TerrainConfig(),
    "blended": TerrainConfig(
        ground=OctaveConfig(offset=0, count=6, base_scalar=1.5, factor=2.0, normalization=1.9),
        terrace_pass=OctaveConfig(offset=0, count=6, base_scalar=-2.5, factor=2.0, reverse=True),
        blend=BlendConfig(enabled=True, samples=6, base_scalar=5.0, offset=6),
        bridges=BridgeConfig(enabled=True, probability=0.03),
        terrace=TerraceConfig(terraces=8, ramp_proportion=0.2, close_when_over=0.2, inc_when_over=0.4),
    ),
}


def profile(name: str, **overrides: Any) -> TerrainConfig:
    """Return a named profile, optionally with top-level fields replaced."""

    try:
        base = PROFILES[name]
    except KeyError:
        options = ", ".join(sorted(PROFILES))
        raise ConfigError(f"Unknown profile {name!r}. Options: {options}") from None
    cfg = replace(base, **overrides) if overrides else base
    return cfg.validate()
