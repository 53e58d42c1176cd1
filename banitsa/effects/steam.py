"""
Rising-vapor particle pool.

Struct-of-arrays layout, allocated once:

    positions  (N, 3)   velocities (N, 3)
    ages       (N,)     sizes      (N,)

Each tick every slot ages, drifts and sways; a slot whose age passes 1 or
that rises above the ceiling is respawned in place. All per-tick math runs
through preallocated scratch tensors with in-place ops.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import torch

from ..textures.pixel_buffer import PixelBuffer, make_generator
from ..textures.sprite import build_soft_sprite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SteamSettings:
    emitter_radius: float = 4.0
    spawn_height: float = 0.5
    spawn_height_jitter: float = 0.5
    drift: float = 0.5  # full width of the horizontal velocity range
    rise_min: float = 1.0
    rise_jitter: float = 1.0
    size_min: float = 0.5
    size_jitter: float = 1.0
    aging_rate: float = 0.3
    sway_frequency: float = 10.0
    sway_amplitude: float = 0.01
    ceiling: float = 5.0


@dataclass(eq=False)
class PointCloud:
    """What the renderer draws: live views into the pool plus sprite settings."""

    positions: torch.Tensor
    sizes: torch.Tensor
    sprite: PixelBuffer
    color: int = 0xFFFFFF
    opacity: float = 0.3
    base_size: float = 1.0
    transparent: bool = True
    depth_write: bool = False
    version: int = field(default=0)


class AmbientParticles:
    """Fixed-size vapor pool; call ``update(dt)`` once per frame."""

    def __init__(
        self,
        count: int = 200,
        sprite: Optional[PixelBuffer] = None,
        settings: Optional[SteamSettings] = None,
        seed: Optional[int] = None,
    ) -> None:
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        self.count = int(count)
        self.settings = settings or SteamSettings()
        self._gen = make_generator(seed)

        n = self.count
        self.positions = torch.zeros((n, 3), dtype=torch.float32)
        self.velocities = torch.zeros((n, 3), dtype=torch.float32)
        self.ages = torch.zeros((n,), dtype=torch.float32)
        self.sizes = torch.zeros((n,), dtype=torch.float32)
        self._phase = torch.arange(n, dtype=torch.float32)

        # scratch, reused every tick
        self._step = torch.zeros((n, 3), dtype=torch.float32)
        self._fresh_pos = torch.zeros((n, 3), dtype=torch.float32)
        self._fresh_vel = torch.zeros((n, 3), dtype=torch.float32)
        self._fresh_size = torch.zeros((n,), dtype=torch.float32)
        self._radius = torch.zeros((n,), dtype=torch.float32)
        self._theta = torch.zeros((n,), dtype=torch.float32)
        self._sway = torch.zeros((n,), dtype=torch.float32)
        self._expired = torch.zeros((n,), dtype=torch.bool)
        self._too_high = torch.zeros((n,), dtype=torch.bool)
        self._weight = torch.zeros((n,), dtype=torch.float32)
        self._respawned = torch.zeros((), dtype=torch.int64)

        self._expired.fill_(True)
        self._respawn(self._expired)
        # scatter ages so the column does not pulse
        self.ages.uniform_(0.0, 1.0, generator=self._gen)

        self.drawable = PointCloud(
            positions=self.positions,
            sizes=self.sizes,
            sprite=sprite if sprite is not None else build_soft_sprite(),
        )
        logger.debug("Vapor pool ready with %d particles", n)

    def __len__(self) -> int:
        return self.count

    # ------------------------------------------------------------------
    def _draw_spawn_state(self) -> None:
        """Fill the fresh_* scratch with a spawn candidate for every slot."""
        s = self.settings
        g = self._gen

        self._radius.uniform_(0.0, s.emitter_radius, generator=g)
        self._theta.uniform_(0.0, 2.0 * math.pi, generator=g)
        self._fresh_pos[:, 0].copy_(self._theta).cos_().mul_(self._radius)
        self._fresh_pos[:, 2].copy_(self._theta).sin_().mul_(self._radius)
        self._fresh_pos[:, 1].uniform_(s.spawn_height, s.spawn_height + s.spawn_height_jitter, generator=g)

        half = s.drift / 2.0
        self._fresh_vel[:, 0].uniform_(-half, half, generator=g)
        self._fresh_vel[:, 1].uniform_(s.rise_min, s.rise_min + s.rise_jitter, generator=g)
        self._fresh_vel[:, 2].uniform_(-half, half, generator=g)

        self._fresh_size.uniform_(s.size_min, s.size_min + s.size_jitter, generator=g)

    def _respawn(self, mask: torch.Tensor) -> None:
        """Overwrite masked slots with fresh spawn state, age 0."""
        self._draw_spawn_state()
        self._weight.copy_(mask)

        torch.sub(self._fresh_pos, self.positions, out=self._step)
        self._step.mul_(self._weight[:, None])
        self.positions.add_(self._step)

        torch.sub(self._fresh_vel, self.velocities, out=self._step)
        self._step.mul_(self._weight[:, None])
        self.velocities.add_(self._step)

        self.sizes.masked_fill_(mask, 0.0)
        self.sizes.addcmul_(self._fresh_size, self._weight)
        self.ages.masked_fill_(mask, 0.0)

    def update(self, dt: float) -> int:
        """
        Advance the pool by ``dt`` seconds.

        Returns the number of slots respawned this tick.
        """
        s = self.settings
        self.ages.add_(dt * s.aging_rate)

        torch.mul(self.velocities, dt, out=self._step)
        self.positions.add_(self._step)

        # sway = sin(age * k + i) * amplitude on x and z
        torch.mul(self.ages, s.sway_frequency, out=self._sway)
        self._sway.add_(self._phase).sin_().mul_(s.sway_amplitude)
        self.positions[:, 0].add_(self._sway)
        self.positions[:, 2].add_(self._sway)

        torch.gt(self.ages, 1.0, out=self._expired)
        torch.gt(self.positions[:, 1], s.ceiling, out=self._too_high)
        self._expired.logical_or_(self._too_high)

        torch.sum(self._expired, dim=0, out=self._respawned)
        respawned = int(self._respawned)
        if respawned:
            self._respawn(self._expired)
        self.drawable.version += 1
        return respawned


def create_ambient_particles(
    count: int = 200,
    sprite: Optional[PixelBuffer] = None,
    *,
    settings: Optional[SteamSettings] = None,
    seed: Optional[int] = None,
) -> AmbientParticles:
    return AmbientParticles(count=count, sprite=sprite, settings=settings, seed=seed)
