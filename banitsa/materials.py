"""
Material descriptors handed to the renderer.

The geometry builder never looks inside these; it only stores them on each
mesh as the (top, side) pair. The scene side maps them onto whatever
standard material its engine offers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .textures.filling import FillingTextureSet
from .textures.loader import TopTextureSet
from .textures.pixel_buffer import PixelBuffer

SIDE_FALLBACK_COLOR = 0xB67636


@dataclass(frozen=True, eq=False)
class MaterialSpec:
    name: str
    color: int = 0xFFFFFF
    roughness: float = 1.0
    metalness: float = 0.0
    map: Optional[PixelBuffer] = None
    normal_map: Optional[PixelBuffer] = None
    roughness_map: Optional[PixelBuffer] = None
    ao_map: Optional[PixelBuffer] = None
    bump_map: Optional[PixelBuffer] = None
    bump_scale: float = 0.0
    double_sided: bool = True


def make_top_material(textures: TopTextureSet) -> MaterialSpec:
    return MaterialSpec(
        name="top",
        map=textures.color,
        normal_map=textures.normal,
        roughness_map=textures.roughness,
        ao_map=textures.ao,
        roughness=0.6,
        bump_scale=0.05,
    )


def make_side_material(filling: Optional[FillingTextureSet] = None) -> MaterialSpec:
    if filling is None:
        return MaterialSpec(name="side", color=SIDE_FALLBACK_COLOR, roughness=0.85)
    return MaterialSpec(
        name="side",
        map=filling.map,
        bump_map=filling.bump,
        bump_scale=0.05,
        roughness=0.7,
    )
