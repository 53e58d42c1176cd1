"""Cut-face texture: wavy dough layers with cheese and egg flecks."""

from __future__ import annotations

from dataclasses import dataclass

import torch

from .pixel_buffer import PixelBuffer, buffer_from_gray, buffer_from_rgb, make_generator

BASE = (253.0, 245.0, 230.0)  # old lace
LAYER = (210.0, 160.0, 100.0)
CHEESE = (255.0, 255.0, 255.0)
EGG = (255.0, 220.0, 100.0)


@dataclass(frozen=True, eq=False)
class FillingTextureSet:
    map: PixelBuffer
    bump: PixelBuffer


def build_filling_texture(size: int = 512, seed: int | None = None) -> FillingTextureSet:
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    gen = make_generator(seed)

    ys = torch.arange(size, dtype=torch.float32)[:, None]
    xs = torch.arange(size, dtype=torch.float32)[None, :]
    wave = torch.sin(ys * 0.1 + torch.sin(xs * 0.05) * 5.0) * 0.5 + 0.5

    fleck = torch.rand((size, size), generator=gen)
    rgb = torch.tensor(BASE).expand(size, size, 3)
    rgb = torch.where((wave < 0.3).unsqueeze(-1), torch.tensor(LAYER), rgb)
    rgb = torch.where((fleck > 0.8).unsqueeze(-1), torch.tensor(CHEESE), rgb)
    rgb = torch.where((fleck < 0.1).unsqueeze(-1), torch.tensor(EGG), rgb)

    jitter = (torch.rand((size, size), generator=gen) - 0.5) * 20.0
    rgb = (rgb + jitter.unsqueeze(-1)).clamp(0.0, 255.0)

    # bump is the luminance average of the final color
    gray = rgb.round().mean(dim=-1)

    sampling = dict(wrap="repeat", repeat=(2.0, 1.0))
    return FillingTextureSet(
        map=buffer_from_rgb(rgb, color_space="srgb", **sampling),
        bump=buffer_from_gray(gray, **sampling),
    )
