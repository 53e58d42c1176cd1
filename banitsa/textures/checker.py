"""Noisy two-color checker cloth for the backing plane."""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Union

import torch
from PIL import ImageColor

from .pixel_buffer import PixelBuffer, make_generator, rgb_to_rgba

logger = logging.getLogger(__name__)

ColorLike = Union[str, Sequence[int]]


def parse_color(color: ColorLike) -> Tuple[int, int, int]:
    """Accept '#rrggbb' / CSS names (via Pillow) or an RGB triple."""
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
        return int(rgb[0]), int(rgb[1]), int(rgb[2])
    if len(color) < 3:
        raise ValueError(f"Expected an RGB triple, got {color!r}")
    return int(color[0]), int(color[1]), int(color[2])


def build_checker_texture(
    color_a: ColorLike = "#f0f0f0",
    color_b: ColorLike = "#c0392b",
    tiles_per_axis: int = 8,
    size: int = 512,
    noise: int = 10,
    seed: int | None = None,
) -> PixelBuffer:
    """
    Tileable checker: even cells (x + y) get ``color_b``, odd cells ``color_a``.

    Every pixel receives one uniform offset in [-noise, noise] shared by its
    three channels (fabric grain). The result repeats 4x4 across a plane;
    the wrap seam only alternates when ``tiles_per_axis`` is even.
    """
    if tiles_per_axis < 1:
        raise ValueError(f"tiles_per_axis must be >= 1, got {tiles_per_axis}")
    if size < 1:
        raise ValueError(f"size must be >= 1, got {size}")
    if noise < 0:
        raise ValueError(f"noise must be >= 0, got {noise}")
    if tiles_per_axis % 2:
        logger.warning("Checker with %d tiles per axis will not tile seamlessly", tiles_per_axis)

    a = torch.tensor(parse_color(color_a), dtype=torch.float32)
    b = torch.tensor(parse_color(color_b), dtype=torch.float32)

    cell = torch.arange(size) * tiles_per_axis // size
    parity = (cell[:, None] + cell[None, :]) % 2
    rgb = torch.where((parity == 0).unsqueeze(-1), b, a)

    gen = make_generator(seed)
    grain = torch.randint(-noise, noise + 1, (size, size), generator=gen).to(torch.float32)
    rgb = rgb + grain.unsqueeze(-1)

    return PixelBuffer(
        width=size,
        height=size,
        data=rgb_to_rgba(rgb),
        wrap="repeat",
        repeat=(4.0, 4.0),
        color_space="srgb",
    )
