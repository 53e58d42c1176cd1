"""Public entry points for the procedural pie toolkit."""

from .config import SliceConfig, SliceConfigError, get_preset
from .geometry import Slice, SliceAssembly, build_slice_assembly
from .textures import (
    PixelBuffer,
    SurfaceMapSet,
    SurfaceOptions,
    build_checker_texture,
    build_filling_texture,
    build_normal_map_from_height,
    build_soft_sprite,
    build_surface_maps,
    build_top_texture_set,
    load_illustration,
)
from .effects import AmbientParticles, create_ambient_particles
from .materials import MaterialSpec, make_side_material, make_top_material
from .rebuild import AssemblyRebuilder

__all__ = [
    "SliceConfig",
    "SliceConfigError",
    "get_preset",
    "Slice",
    "SliceAssembly",
    "build_slice_assembly",
    "PixelBuffer",
    "SurfaceMapSet",
    "SurfaceOptions",
    "build_surface_maps",
    "build_normal_map_from_height",
    "build_checker_texture",
    "build_filling_texture",
    "build_soft_sprite",
    "build_top_texture_set",
    "load_illustration",
    "AmbientParticles",
    "create_ambient_particles",
    "MaterialSpec",
    "make_top_material",
    "make_side_material",
    "AssemblyRebuilder",
]
