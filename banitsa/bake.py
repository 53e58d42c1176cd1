#!/usr/bin/env python3
"""Bake every procedural raster to PNG and summarise the slice assembly.

Writes into ``<out>/<timestamp>_bake/``:

* ``top_color.png``, ``top_height.png``, ``top_roughness.png``,
  ``top_ao.png``, ``top_normal.png``
* ``filling_map.png``, ``filling_bump.png``, ``checker.png``, ``sprite.png``
* ``manifest.json`` with the slice config and per-slice stats

Usage:
    python -m banitsa.bake --out out_local --size 512 --seed 7 --preset classic
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import PRESETS, get_preset
from .effects.steam import create_ambient_particles
from .geometry.assembly import SliceAssembly, build_slice_assembly
from .geometry.wedge import TOP
from .materials import make_side_material, make_top_material
from .textures.checker import build_checker_texture
from .textures.filling import build_filling_texture
from .textures.loader import build_top_texture_set
from .textures.pixel_buffer import PixelBuffer
from .textures.sprite import build_soft_sprite
from .textures.surface import SurfaceOptions
from .utils.logging_utils import configure_logging, create_run_directory


def save_buffer(buf: PixelBuffer, path: Path) -> None:
    buf.save(path)
    logging.info("Wrote %s (%dx%d)", path.name, buf.width, buf.height)


def summarise_assembly(assembly: SliceAssembly) -> List[Dict[str, Any]]:
    rows = []
    for s in assembly:
        top_z = s.mesh.positions[s.mesh.mask(TOP), 2]
        rows.append({
            "index": s.index,
            "name": s.name,
            "fortune": s.fortune_label,
            "has_marker": s.has_marker,
            "angular_midpoint": s.angular_midpoint,
            "span": s.span,
            "vertices": s.mesh.vertex_count,
            "triangles": s.mesh.triangle_count,
            "top_z_min": float(top_z.min()),
            "top_z_max": float(top_z.max()),
        })
    return rows


def bake(args: argparse.Namespace) -> Path:
    run_dir = create_run_directory(Path(args.out))
    configure_logging(run_dir, verbose=not args.quiet)

    config = get_preset(args.preset)
    if args.marked is not None:
        config = config.replace(marked_slice_index=args.marked)

    opts = SurfaceOptions(size=args.size, seed=args.seed)
    top = build_top_texture_set(opts, illustration_path=args.illustration)
    save_buffer(top.color, run_dir / "top_color.png")
    save_buffer(top.height, run_dir / "top_height.png")
    save_buffer(top.roughness, run_dir / "top_roughness.png")
    save_buffer(top.ao, run_dir / "top_ao.png")
    save_buffer(top.normal, run_dir / "top_normal.png")

    filling = build_filling_texture(seed=args.seed)
    save_buffer(filling.map, run_dir / "filling_map.png")
    save_buffer(filling.bump, run_dir / "filling_bump.png")

    checker = build_checker_texture(tiles_per_axis=args.checker_tiles, seed=args.seed)
    save_buffer(checker, run_dir / "checker.png")
    sprite = build_soft_sprite()
    save_buffer(sprite, run_dir / "sprite.png")

    assembly = build_slice_assembly(config, make_top_material(top), make_side_material(filling))

    vapor = create_ambient_particles(args.particles, sprite, seed=args.seed)
    respawned = sum(vapor.update(1.0 / 60.0) for _ in range(args.ticks))
    logging.info("Vapor: %d particles, %d respawns over %d ticks", len(vapor), respawned, args.ticks)

    manifest = {
        "preset": args.preset,
        "config": config.to_dict(),
        "texture_size": args.size,
        "seed": args.seed,
        "illustration": top.from_illustration,
        "total_span": assembly.total_span,
        "slices": summarise_assembly(assembly),
    }
    with (run_dir / "manifest.json").open("w", encoding="utf-8") as fh:
        json.dump(manifest, fh, indent=2)
    logging.info("Bake complete: %s", run_dir)
    return run_dir


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bake procedural pie textures and geometry stats")
    parser.add_argument("--out", type=str, default="out_local/bake", help="Base output directory")
    parser.add_argument("--preset", type=str, default="classic", choices=sorted(PRESETS), help="Slice preset")
    parser.add_argument("--size", type=int, default=1024, help="Top texture size in pixels")
    parser.add_argument("--seed", type=int, default=None, help="Noise seed (random when omitted)")
    parser.add_argument("--marked", type=int, default=None, help="Override the marked slice index")
    parser.add_argument("--illustration", type=str, default=None, help="Optional baked top image")
    parser.add_argument("--checker_tiles", type=int, default=8, help="Checker cells per axis")
    parser.add_argument("--particles", type=int, default=200, help="Vapor pool size")
    parser.add_argument("--ticks", type=int, default=120, help="Vapor ticks to simulate")
    parser.add_argument("--quiet", action="store_true", help="Only log to file")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    bake(args)


if __name__ == "__main__":
    main()
