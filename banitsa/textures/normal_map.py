"""Tangent-space normal maps from height rasters (central differences)."""

from __future__ import annotations

import torch
import torch.nn.functional as F

from .pixel_buffer import PixelBuffer


def height_gradients(height: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """
    Central differences of a (H, W) field with edge replication.

    dx = h(x+1) - h(x-1), dy = h(y+1) - h(y-1); border pixels reuse the
    nearest in-bounds neighbour.
    """
    padded = F.pad(height[None, None], (1, 1, 1, 1), mode="replicate")[0, 0]
    dx = padded[1:-1, 2:] - padded[1:-1, :-2]
    dy = padded[2:, 1:-1] - padded[:-2, 1:-1]
    return dx, dy


def encode_normals(normals: torch.Tensor) -> torch.Tensor:
    """(H, W, 3) unit vectors in [-1, 1] -> (H, W, 4) uint8 RGBA."""
    rgb = ((normals * 0.5 + 0.5) * 255.0).round().clamp(0.0, 255.0).to(torch.uint8)
    alpha = torch.full(rgb.shape[:2] + (1,), 255, dtype=torch.uint8)
    return torch.cat([rgb, alpha], dim=-1)


def build_normal_map_from_height(
    height: PixelBuffer,
    strength: float = 2.0,
    depth: float = 255.0,
    channel: int = 0,
) -> PixelBuffer:
    """
    Derive a normal map from one channel of a height raster.

    Args:
        height: source raster, elevation stored in ``channel``
        strength: gradient multiplier (k)
        depth: constant z component before normalisation
        channel: which RGBA channel carries the height

    Returns:
        PixelBuffer of identical size; flat regions encode to (128, 128, 255)
    """
    h = height.channel(channel)
    dx, dy = height_gradients(h)
    vec = torch.stack([dx * strength, dy * strength, torch.full_like(dx, depth)], dim=-1)
    normals = vec / torch.linalg.norm(vec, dim=-1, keepdim=True)
    return PixelBuffer(
        width=height.width,
        height=height.height,
        data=encode_normals(normals),
        wrap=height.wrap,
        repeat=height.repeat,
    )
