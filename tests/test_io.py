from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from terracegen.io import PngSink, SinkError, resolve_output_dir


def test_sink_round_trips_pixels_in_raster_order(tmp_path) -> None:
    path = tmp_path / "out.png"
    with PngSink(path, 3, 2) as sink:
        for i in range(6):
            sink.write_pixel((i * 10, i, 255 - i, 255))
        sink.flush()

    with Image.open(path) as image:
        assert image.mode == "RGBA"
        assert image.size == (3, 2)
        data = np.asarray(image)
    assert data[1, 0].tolist() == [30, 3, 252, 255]
    assert data[0, 2].tolist() == [20, 2, 253, 255]


def test_sink_truncates_existing_file(tmp_path) -> None:
    path = tmp_path / "stale.png"
    path.write_bytes(b"not a png")

    sink = PngSink(path, 2, 2)
    sink.close()

    assert path.read_bytes() == b""


def test_short_stream_cannot_flush(tmp_path) -> None:
    with PngSink(tmp_path / "short.png", 2, 2) as sink:
        sink.write_pixels(np.zeros((3, 4), dtype=np.uint8))
        with pytest.raises(SinkError):
            sink.flush()


def test_overlong_stream_is_rejected(tmp_path) -> None:
    with PngSink(tmp_path / "long.png", 1, 1) as sink:
        sink.write_pixel(b"\x00\x00\x00\xff")
        with pytest.raises(SinkError):
            sink.write_pixel(b"\x00\x00\x00\xff")


def test_pixel_must_be_rgba(tmp_path) -> None:
    with PngSink(tmp_path / "bad.png", 1, 1) as sink:
        with pytest.raises(ValueError):
            sink.write_pixel((1, 2, 3))


def test_resolve_output_dir_refuses_non_empty_without_overwrite(tmp_path) -> None:
    target = resolve_output_dir(tmp_path, 3, 8, 4, overwrite=False)
    (target / "keep.png").write_bytes(b"x")

    with pytest.raises(FileExistsError):
        resolve_output_dir(tmp_path, 3, 8, 4, overwrite=False)
    assert resolve_output_dir(tmp_path, 3, 8, 4, overwrite=True) == target
