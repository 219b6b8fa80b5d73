from __future__ import annotations

import json

import pytest

from cli.main import main


def _args(out_dir) -> list[str]:
    return [
        "--seed",
        "7",
        "--out",
        str(out_dir),
        "--w",
        "16",
        "--h",
        "12",
        "--variants",
        "2",
        "--overwrite",
    ]


def test_runtime_fields_only_in_meta_json(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out_dir = tmp_path / "out"
    assert main(_args(out_dir)) == 0

    base = out_dir / "seed_7" / "16x12"
    meta = json.loads((base / "meta.json").read_text(encoding="utf-8"))
    deterministic_meta = json.loads((base / "deterministic_meta.json").read_text(encoding="utf-8"))

    assert meta["generation_seconds"] >= 0.0
    assert "generated_at_utc" in meta
    assert "generation_seconds" not in deterministic_meta
    assert "generated_at_utc" not in deterministic_meta

    assert deterministic_meta["config"]["width"] == 16
    assert deterministic_meta["river_sites"] == 9
    assert len(deterministic_meta["variants"]) == 2
    assert sum(deterministic_meta["variants"][0]["terrace_histogram"]) == 16 * 12

    for variant in (0, 1):
        for channel in ("ground", "terrace", "water", "ramp", "height"):
            assert (base / f"variant_{variant:02d}_{channel}.png").exists()
    assert (base / "rivers.png").exists()
    assert not any(child.name.startswith(".staging-") for child in (out_dir / "seed_7").iterdir())


def test_deterministic_meta_is_reproducible(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out_dir = tmp_path / "out"
    base = out_dir / "seed_7" / "16x12"

    assert main(_args(out_dir)) == 0
    first = (base / "deterministic_meta.json").read_bytes()
    ramp_first = (base / "variant_01_ramp.png").read_bytes()
    assert main(_args(out_dir)) == 0

    assert (base / "deterministic_meta.json").read_bytes() == first
    assert (base / "variant_01_ramp.png").read_bytes() == ramp_first


def test_overwrite_cleans_stale_outputs(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    out_dir = tmp_path / "out"
    args = _args(out_dir)

    assert main(args) == 0
    base = out_dir / "seed_7" / "16x12"
    assert (base / "rivers.png").exists()

    assert main(args + ["--no-rivers", "--variants", "1"]) == 0
    assert not (base / "rivers.png").exists()
    assert not (base / "variant_01_ground.png").exists()


def test_invalid_variant_count_exits(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit):
        main(_args(tmp_path / "out") + ["--variants", "0"])
