"""Terraced terrain raster generation package."""

from .config import DEFAULT_HEIGHT, DEFAULT_WIDTH, PROFILES, ConfigError, TerrainConfig, profile

__all__ = ["DEFAULT_WIDTH", "DEFAULT_HEIGHT", "PROFILES", "ConfigError", "TerrainConfig", "profile"]
