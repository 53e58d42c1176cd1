"""RGBA pixel buffers shared by every texture generator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np
import torch
from PIL import Image


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Square-or-rectangular RGBA raster plus the sampling hints a renderer needs.

    ``data`` is a ``(height, width, 4)`` uint8 tensor. Buffers are treated as
    immutable once produced; generators always write a fresh tensor.
    """

    width: int
    height: int
    data: torch.Tensor
    wrap: str = "clamp"
    repeat: Tuple[float, float] = (1.0, 1.0)
    color_space: str = "linear"

    def __post_init__(self) -> None:
        if self.data.dtype != torch.uint8:
            raise ValueError(f"PixelBuffer expects uint8 data, got {self.data.dtype}")
        if tuple(self.data.shape) != (self.height, self.width, 4):
            raise ValueError(
                f"PixelBuffer data shape {tuple(self.data.shape)} does not match "
                f"({self.height}, {self.width}, 4)"
            )
        if self.wrap not in ("clamp", "repeat"):
            raise ValueError(f"Unknown wrap mode '{self.wrap}'")

    @property
    def size(self) -> int:
        return self.width

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    def channel(self, index: int) -> torch.Tensor:
        """(H, W) float32 view of one channel in [0, 255]."""
        return self.data[..., index].to(torch.float32)

    def with_sampling(self, **changes) -> "PixelBuffer":
        return replace(self, **changes)

    def tobytes(self) -> bytes:
        return self.data.contiguous().numpy().tobytes()

    def to_image(self) -> Image.Image:
        arr = self.data.detach().cpu().contiguous().numpy()
        return Image.fromarray(arr)

    def save(self, path) -> None:
        self.to_image().save(path)

    @classmethod
    def from_image(cls, img: Image.Image, **sampling) -> "PixelBuffer":
        rgba = img.convert("RGBA")
        w, h = rgba.size
        arr = np.asarray(rgba, dtype=np.uint8).copy()
        return cls(width=w, height=h, data=torch.from_numpy(arr), **sampling)


def gray_to_rgba(gray: torch.Tensor) -> torch.Tensor:
    """Replicate a (H, W) float field in [0, 255] into opaque uint8 RGBA."""
    g = gray.round().clamp(0.0, 255.0).to(torch.uint8)
    alpha = torch.full_like(g, 255)
    return torch.stack([g, g, g, alpha], dim=-1)


def rgb_to_rgba(rgb: torch.Tensor) -> torch.Tensor:
    """(H, W, 3) float in [0, 255] -> opaque uint8 RGBA."""
    c = rgb.round().clamp(0.0, 255.0).to(torch.uint8)
    alpha = torch.full(c.shape[:2] + (1,), 255, dtype=torch.uint8)
    return torch.cat([c, alpha], dim=-1)


def buffer_from_gray(gray: torch.Tensor, **sampling) -> PixelBuffer:
    h, w = gray.shape
    return PixelBuffer(width=w, height=h, data=gray_to_rgba(gray), **sampling)


def buffer_from_rgb(rgb: torch.Tensor, **sampling) -> PixelBuffer:
    h, w, _ = rgb.shape
    return PixelBuffer(width=w, height=h, data=rgb_to_rgba(rgb), **sampling)


def gray_to_image(gray: torch.Tensor) -> Image.Image:
    arr = gray.round().clamp(0.0, 255.0).to(torch.uint8).cpu().numpy()
    return Image.fromarray(arr)


def image_to_gray(img: Image.Image) -> torch.Tensor:
    arr = np.asarray(img.convert("L"), dtype=np.float32).copy()
    return torch.from_numpy(arr)


def make_generator(seed: int | None) -> torch.Generator:
    """Seeded generator, or a freshly seeded one so every call differs."""
    gen = torch.Generator()
    if seed is None:
        gen.seed()
    else:
        gen.manual_seed(int(seed))
    return gen
