"""Presets, config edits, live rebuilds, illustration loading and the bake script."""

import json
import logging
import math

import pytest
import torch
from PIL import Image

from banitsa.bake import main as bake_main
from banitsa.config import DEFAULT_FORTUNES, FILLER_FORTUNE, SliceConfig, get_preset
from banitsa.materials import SIDE_FALLBACK_COLOR, make_side_material, make_top_material
from banitsa.rebuild import AssemblyRebuilder
from banitsa.textures import (
    SurfaceOptions,
    build_filling_texture,
    build_top_texture_set,
    load_illustration,
)


def test_presets():
    classic = get_preset("classic")
    assert classic.slice_count == 8
    assert classic.gap_radians == pytest.approx(math.radians(1.0))
    assert get_preset("party").slice_count == 12
    assert get_preset("thin").gap_radians == 0.0
    with pytest.raises(KeyError):
        get_preset("nope")


def test_default_labels_and_filler():
    assert SliceConfig(slice_count=3).fortune_labels == DEFAULT_FORTUNES[:3]
    labels = SliceConfig().replace(slice_count=12).replace(slice_count=14).fortune_labels
    assert labels[:12] == DEFAULT_FORTUNES
    assert labels[12:] == (FILLER_FORTUNE, FILLER_FORTUNE)


def test_replace_keeps_custom_labels_when_growing():
    base = SliceConfig(slice_count=2, fortune_labels=("a", "b"))
    grown = base.replace(slice_count=4)
    assert grown.fortune_labels == ("a", "b") + DEFAULT_FORTUNES[2:4]
    assert base.slice_count == 2


def test_from_degrees_and_to_dict():
    config = SliceConfig.from_degrees(2.0, slice_count=5)
    assert config.gap_radians == pytest.approx(math.radians(2.0))
    data = config.to_dict()
    assert data["slice_count"] == 5
    assert len(data["fortune_labels"]) == 5


def test_rebuilder_disposes_previous_and_notifies():
    rebuilder = AssemblyRebuilder("top", "side")
    seen = []
    rebuilder.subscribe(seen.append)

    first = rebuilder.apply(SliceConfig(slice_count=4, curve_segments=3, radial_segments=2))
    second = rebuilder.update(slice_count=6)

    assert first.disposed
    assert not second.disposed
    assert len(second) == 6
    assert seen == [first, second]
    assert rebuilder.rebuilds == 2
    assert rebuilder.config.curve_segments == 3


def test_marker_wraps_after_slice_count_shrinks():
    rebuilder = AssemblyRebuilder("top", "side")
    rebuilder.apply(SliceConfig(slice_count=8, marked_slice_index=6))
    assembly = rebuilder.update(slice_count=4)
    assert assembly.marked_slice.index == 2


def test_missing_illustration_returns_none(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        assert load_illustration(tmp_path / "missing.png") is None
    assert "unavailable" in caplog.text


def test_unreadable_illustration_returns_none(tmp_path):
    path = tmp_path / "junk.png"
    path.write_bytes(b"not an image")
    assert load_illustration(path) is None


def test_illustration_loads_and_resizes(tmp_path):
    path = tmp_path / "top.png"
    Image.new("RGB", (20, 10), (10, 200, 30)).save(path)
    buf = load_illustration(path, size=32)
    assert (buf.width, buf.height) == (32, 32)
    assert buf.color_space == "srgb"
    assert torch.equal(buf.data[16, 16], torch.tensor([10, 200, 30, 255], dtype=torch.uint8))


def test_top_texture_set_falls_back_without_illustration(tmp_path):
    opts = SurfaceOptions(size=32, seed=0)
    synthetic = build_top_texture_set(opts, illustration_path=tmp_path / "missing.png")
    assert not synthetic.from_illustration
    assert synthetic.color.width == 32

    path = tmp_path / "top.png"
    Image.new("RGBA", (32, 32), (1, 2, 3, 255)).save(path)
    baked = build_top_texture_set(opts, illustration_path=path)
    assert baked.from_illustration
    assert int(baked.color.data[0, 0, 2]) == 3
    assert torch.equal(baked.height.data, synthetic.height.data)


def test_materials():
    top = make_top_material(build_top_texture_set(SurfaceOptions(size=32, seed=1)))
    assert top.map is not None and top.normal_map is not None
    assert top.roughness == pytest.approx(0.6)

    plain = make_side_material()
    assert plain.color == SIDE_FALLBACK_COLOR
    assert plain.map is None

    filling = build_filling_texture(size=32, seed=1)
    textured = make_side_material(filling)
    assert textured.map is filling.map
    assert textured.bump_map is filling.bump


def test_bake_writes_textures_and_manifest(tmp_path):
    root = logging.getLogger()
    handlers = list(root.handlers)
    try:
        bake_main([
            "--out", str(tmp_path),
            "--size", "32",
            "--seed", "3",
            "--preset", "thin",
            "--marked", "5",
            "--particles", "10",
            "--ticks", "5",
            "--quiet",
        ])
    finally:
        for handler in root.handlers[len(handlers):]:
            root.removeHandler(handler)
            handler.close()

    (run_dir,) = list(tmp_path.iterdir())
    for name in ("top_color", "top_height", "top_roughness", "top_ao", "top_normal",
                 "filling_map", "filling_bump", "checker", "sprite"):
        assert (run_dir / f"{name}.png").exists()
    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["preset"] == "thin"
    assert len(manifest["slices"]) == 4
    assert [row["has_marker"] for row in manifest["slices"]] == [False, True, False, False]
    assert (run_dir / "bake.log").exists()
