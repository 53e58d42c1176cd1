"""Optional baked illustration for the top, with a synthetic fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .normal_map import build_normal_map_from_height
from .pixel_buffer import PixelBuffer
from .surface import SurfaceMapSet, SurfaceOptions, build_surface_maps

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TopTextureSet:
    """Everything the top material samples; ``color`` is the illustration when one loaded."""

    color: PixelBuffer
    normal: PixelBuffer
    roughness: PixelBuffer
    ao: PixelBuffer
    height: PixelBuffer
    from_illustration: bool = False


def load_illustration(path: str | Path, size: Optional[int] = None) -> Optional[PixelBuffer]:
    """
    Load an image as an sRGB RGBA buffer.

    Returns None (and logs a warning) when the file is missing or unreadable.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img = img.convert("RGBA")
            if size is not None and img.size != (size, size):
                img = img.resize((size, size), Image.BILINEAR)
            return PixelBuffer.from_image(img, color_space="srgb")
    except (OSError, UnidentifiedImageError) as exc:
        logger.warning("Illustration %s unavailable (%s); using synthetic textures", path, exc)
        return None


def build_top_texture_set(
    options: Optional[SurfaceOptions] = None,
    illustration_path: str | Path | None = None,
) -> TopTextureSet:
    opts = options or SurfaceOptions()
    maps: SurfaceMapSet = build_surface_maps(opts)
    normal = build_normal_map_from_height(maps.height)

    color = maps.color
    from_illustration = False
    if illustration_path is not None:
        baked = load_illustration(illustration_path, size=opts.size)
        if baked is not None:
            color = baked
            from_illustration = True

    return TopTextureSet(
        color=color,
        normal=normal,
        roughness=maps.roughness,
        ao=maps.ao,
        height=maps.height,
        from_illustration=from_illustration,
    )
