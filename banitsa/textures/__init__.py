"""Procedural rasters: crust maps, normal maps, checker cloth, filling, sprites."""

from .pixel_buffer import PixelBuffer
from .surface import SurfaceMapSet, SurfaceOptions, build_surface_maps
from .normal_map import build_normal_map_from_height
from .checker import build_checker_texture, parse_color
from .filling import FillingTextureSet, build_filling_texture
from .sprite import build_soft_sprite
from .loader import TopTextureSet, build_top_texture_set, load_illustration

__all__ = [
    'PixelBuffer',
    'SurfaceMapSet',
    'SurfaceOptions',
    'build_surface_maps',
    'build_normal_map_from_height',
    'build_checker_texture',
    'parse_color',
    'FillingTextureSet',
    'build_filling_texture',
    'build_soft_sprite',
    'TopTextureSet',
    'build_top_texture_set',
    'load_illustration',
]
