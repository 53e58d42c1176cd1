"""
Procedural crust maps for the top of the pie.

One grayscale field is synthesized (mid-gray base, blurred spiral of rolled
pastry, per-pixel jitter with a tearing tone curve) and every output map is
derived from that same field so color, height, roughness and AO line up
pixel for pixel:

    gray ──┬── height     (the field itself)
           ├── color      (three warm luminance bands + speckles)
           ├── roughness  (inverted, compressed)
           └── ao         (blurred copy)

The spiral is deterministic; only the jitter and speckles use the random
generator, so two calls share crease layout but differ in fine grain unless
``seed`` is fixed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

import torch
from PIL import Image, ImageDraw, ImageFilter

from .pixel_buffer import (
    PixelBuffer,
    buffer_from_gray,
    buffer_from_rgb,
    gray_to_image,
    image_to_gray,
    make_generator,
)

logger = logging.getLogger(__name__)

# Pixel constants below were tuned on a 1024 canvas and scale with size.
REFERENCE_SIZE = 1024

# (low, high) RGB endpoints per luminance band: crust, gold, highlight
CRUST_BAND = ((139.0, 69.0, 19.0), (184.0, 115.0, 51.0))
GOLD_BAND = ((184.0, 115.0, 51.0), (240.0, 180.0, 60.0))
HIGHLIGHT_BAND = ((240.0, 180.0, 60.0), (255.0, 245.0, 220.0))
FLAKE_TIP = (255.0, 250.0, 240.0)
DUSTING = (252.0, 249.0, 243.0)
BURNT_SCALE = (0.5, 0.5, 0.4)


@dataclass(frozen=True)
class SurfaceOptions:
    size: int = 1024
    coils: int = 5
    stroke_points: int = 400
    angle_step: float = 0.1
    stroke_width_frac: float = 0.08
    max_radius_frac: float = 0.48
    stroke_blur: float = 4.0
    noise_amplitude: float = 80.0
    burnt_probability: float = 0.01
    dusting_probability: float = 0.002
    color_jitter: float = 6.0
    ao_blur: float = 10.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")
        if self.coils < 1 or self.stroke_points < 2:
            raise ValueError("spiral needs at least one coil and two points")

    @property
    def scale(self) -> float:
        return self.size / REFERENCE_SIZE


@dataclass(frozen=True, eq=False)
class SurfaceMapSet:
    color: PixelBuffer
    height: PixelBuffer
    roughness: PixelBuffer
    ao: PixelBuffer

    def as_dict(self) -> dict:
        return {
            "color": self.color,
            "height": self.height,
            "roughness": self.roughness,
            "ao": self.ao,
        }


# ----------------------------------------------------------------------
# Grayscale field
# ----------------------------------------------------------------------


def spiral_points(opts: SurfaceOptions) -> List[Tuple[float, float]]:
    """Distorted Archimedean spiral centred on the canvas, in pixel coords."""
    cx = cy = opts.size / 2.0
    max_radius = opts.size * opts.max_radius_frac
    turns = opts.coils * 2.0 * math.pi
    pts: List[Tuple[float, float]] = []
    for i in range(opts.stroke_points):
        angle = i * opts.angle_step
        r_base = (angle / turns) * max_radius
        distort = (math.sin(angle * 10.0) * 10.0 + math.cos(angle * 23.0) * 5.0) * opts.scale
        r = r_base + distort
        pts.append((cx + math.cos(angle) * r, cy + math.sin(angle) * r))
    return pts


def draw_crease_field(opts: SurfaceOptions) -> torch.Tensor:
    """Mid-gray base with the blurred spiral stroke; (S, S) float32 in [0, 255]."""
    img = Image.new("L", (opts.size, opts.size), 128)
    draw = ImageDraw.Draw(img)
    width = max(1, int(round(opts.size * opts.stroke_width_frac)))
    pts = spiral_points(opts)
    draw.line(pts, fill=255, width=width, joint="curve")
    # round caps
    half = width / 2.0
    for x, y in (pts[0], pts[-1]):
        draw.ellipse((x - half, y - half, x + half, y + half), fill=255)
    blur = opts.stroke_blur * opts.scale
    if blur > 0:
        img = img.filter(ImageFilter.GaussianBlur(radius=blur))
    return image_to_gray(img)


def tear_tone_curve(values: torch.Tensor) -> torch.Tensor:
    """Pull the upper-mid band down and push highlights up, then clamp."""
    out = values.clone()
    out = torch.where((values > 150.0) & (values < 200.0), out - 20.0, out)
    out = torch.where(values > 200.0, out + 10.0, out)
    return out.clamp(0.0, 255.0)


def synthesize_gray_field(opts: SurfaceOptions, gen: torch.Generator) -> torch.Tensor:
    base = draw_crease_field(opts)
    noise = (torch.rand(base.shape, generator=gen) - 0.5) * opts.noise_amplitude
    return tear_tone_curve(base + noise)


# ----------------------------------------------------------------------
# Derived maps
# ----------------------------------------------------------------------


def _band(h: torch.Tensor, lo: float, span: float, band) -> torch.Tensor:
    t = ((h - lo) / span).clamp(0.0, 1.0).unsqueeze(-1)
    start = torch.tensor(band[0], dtype=torch.float32)
    end = torch.tensor(band[1], dtype=torch.float32)
    return start + (end - start) * t


def colorize(gray: torch.Tensor, opts: SurfaceOptions, gen: torch.Generator) -> torch.Tensor:
    """(S, S) gray -> (S, S, 3) float warm crust color."""
    h = gray
    crust = _band(h, 0.0, 80.0, CRUST_BAND)
    gold = _band(h, 80.0, 100.0, GOLD_BAND)
    high = _band(h, 180.0, 75.0, HIGHLIGHT_BAND)

    rgb = torch.where((h < 80.0).unsqueeze(-1), crust, torch.where((h < 180.0).unsqueeze(-1), gold, high))
    rgb = torch.where((h > 240.0).unsqueeze(-1), torch.tensor(FLAKE_TIP), rgb)

    roll = torch.rand(h.shape, generator=gen)
    burnt = (roll > 1.0 - opts.burnt_probability).unsqueeze(-1)
    rgb = torch.where(burnt, rgb * torch.tensor(BURNT_SCALE), rgb)
    dusting = (roll < opts.dusting_probability).unsqueeze(-1)
    rgb = torch.where(dusting, torch.tensor(DUSTING), rgb)

    jitter = (torch.rand(h.shape, generator=gen) - 0.5) * 2.0 * opts.color_jitter
    return (rgb + jitter.unsqueeze(-1)).clamp(0.0, 255.0)


def roughness_from_gray(gray: torch.Tensor) -> torch.Tensor:
    # peaks are glazed (0.4), valleys stay dry (0.9)
    return (0.9 - (gray / 255.0) * 0.5) * 255.0


def ao_from_gray(gray: torch.Tensor, opts: SurfaceOptions) -> torch.Tensor:
    blur = opts.ao_blur * opts.scale
    if blur <= 0:
        return gray.clone()
    img = gray_to_image(gray).filter(ImageFilter.GaussianBlur(radius=blur))
    return image_to_gray(img)


def build_surface_maps(options: Optional[SurfaceOptions] = None, **overrides) -> SurfaceMapSet:
    """
    Synthesize the color/height/roughness/ao set for the crust.

    Args:
        options: SurfaceOptions, defaults used when omitted
        **overrides: field overrides applied on top of ``options``

    Returns:
        SurfaceMapSet with four square rasters of ``options.size``
    """
    opts = options or SurfaceOptions()
    if overrides:
        opts = replace(opts, **overrides)
    gen = make_generator(opts.seed)

    gray = synthesize_gray_field(opts, gen)
    color = colorize(gray, opts, gen)

    maps = SurfaceMapSet(
        color=buffer_from_rgb(color, color_space="srgb"),
        height=buffer_from_gray(gray),
        roughness=buffer_from_gray(roughness_from_gray(gray)),
        ao=buffer_from_gray(ao_from_gray(gray, opts)),
    )
    logger.debug("Synthesized %dx%d surface maps (seed=%s)", opts.size, opts.size, opts.seed)
    return maps
