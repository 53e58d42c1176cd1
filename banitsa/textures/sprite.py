"""Soft round point sprite used when no vapor texture is supplied."""

from __future__ import annotations

import torch

from .pixel_buffer import PixelBuffer


def build_soft_sprite(size: int = 32) -> PixelBuffer:
    """White disc whose alpha falls linearly from 1 at the centre to 0 at the rim."""
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    centre = size / 2.0
    coords = torch.arange(size, dtype=torch.float32) + 0.5
    dist = torch.sqrt((coords[None, :] - centre) ** 2 + (coords[:, None] - centre) ** 2)
    alpha = (1.0 - dist / centre).clamp(0.0, 1.0) * 255.0

    data = torch.full((size, size, 4), 255, dtype=torch.uint8)
    data[..., 3] = alpha.round().to(torch.uint8)
    return PixelBuffer(width=size, height=size, data=data, color_space="srgb")
