"""Raster sinks and output directory handling."""

from __future__ import annotations

import json
from pathlib import Path
import shutil
from typing import Any

import numpy as np
from PIL import Image


class SinkError(IOError):
    """Raised when a raster stream does not match its declared size."""


class PngSink:
    """Append-only RGBA pixel stream encoded to PNG on ``flush``.

    The target file is created (or truncated) on construction. Pixels are
    accepted left to right, top to bottom, and exactly ``width * height``
    of them must arrive before ``flush``.
    """

    def __init__(self, path: str | Path, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive")
        self.path = Path(path)
        self.width = int(width)
        self.height = int(height)
        self._buffer = bytearray()
        self._expected = self.width * self.height * 4
        self._handle = open(self.path, "wb")

    def __enter__(self) -> "PngSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def pixels_written(self) -> int:
        return len(self._buffer) // 4

    def write_pixel(self, pixel) -> None:
        data = bytes(pixel)
        if len(data) != 4:
            raise ValueError("pixel must be 4 RGBA bytes")
        if len(self._buffer) + 4 > self._expected:
            raise SinkError(f"{self.path}: more than {self.width * self.height} pixels written")
        self._buffer += data

    def write_pixels(self, pixels: np.ndarray) -> None:
        """Append a block of RGBA pixels already in raster order."""

        data = np.ascontiguousarray(pixels, dtype=np.uint8)
        if data.shape[-1] != 4:
            raise ValueError("pixels must have a trailing RGBA axis")
        payload = data.tobytes()
        if len(self._buffer) + len(payload) > self._expected:
            raise SinkError(f"{self.path}: more than {self.width * self.height} pixels written")
        self._buffer += payload

    def flush(self) -> None:
        if self._handle is None:
            raise SinkError(f"{self.path}: sink already flushed")
        if len(self._buffer) != self._expected:
            raise SinkError(
                f"{self.path}: expected {self.width * self.height} pixels, got {self.pixels_written}"
            )
        image = Image.frombytes("RGBA", (self.width, self.height), bytes(self._buffer))
        image.save(self._handle, format="PNG")
        self._handle.flush()
        self.close()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


def resolve_output_dir(
    out_root: str | Path,
    seed: int,
    width: int,
    height: int,
    *,
    overwrite: bool,
) -> Path:
    """Create and return the output directory for one generation run."""

    target = Path(out_root) / f"seed_{seed}" / f"{width}x{height}"
    if target.exists() and any(target.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists and is not empty: {target}. Use --overwrite to replace files."
        )
    target.mkdir(parents=True, exist_ok=True)
    return target


def clear_output_dir(target: Path, *, out_root: Path) -> None:
    """Delete all children of ``target``, which must live under ``out_root``."""

    target_r = target.resolve()
    target_r.relative_to(out_root.resolve())

    if not target_r.exists():
        target_r.mkdir(parents=True, exist_ok=True)
        return

    for child in target_r.iterdir():
        if child.is_symlink() or child.is_file():
            child.unlink()
        elif child.is_dir():
            shutil.rmtree(child)


def move_tree_contents(src_dir: Path, dst_dir: Path) -> None:
    """Move all files from src_dir into dst_dir."""

    for child in src_dir.iterdir():
        shutil.move(str(child), str(dst_dir / child.name))


def write_png_u8(path: str | Path, raster_u8: np.ndarray) -> None:
    image = Image.fromarray(raster_u8.astype(np.uint8))
    image.save(Path(path))


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    Path(path).write_text(text + "\n", encoding="utf-8")
