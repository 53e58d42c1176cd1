"""
Single-wedge mesh construction.

A wedge is built in its own local frame: z up, the two straight edges at
angles 0 and m (the slice span), arc at ``radius``, extruded from z = 0 to
z = height. Layout of the vertex buffer:

    [top cap grid][bottom cap grid][start wall][arc wall][end wall]

Caps are polar grids (centre + rings x arc steps). Each wall owns its
vertices so the cut edges stay sharp. Only the top cap and the upper row of
every wall are deformed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import torch

from ..config import SliceConfig

# Per-vertex face kinds
TOP = 0
BOTTOM = 1
SIDE = 2

WOBBLE_FREQUENCY = 3.0
UV_MAP_SCALE = 1.1  # map the rim slightly inside the texture to keep clear of its edge
TOP_EPS = 1e-3


@dataclass(eq=False)
class WedgeMesh:
    """Triangle mesh of one slice plus the (top, side) material pair."""

    positions: torch.Tensor
    indices: torch.Tensor
    normals: torch.Tensor
    uvs: torch.Tensor
    face_kinds: torch.Tensor
    groups: List[Tuple[int, int, int]]
    materials: Tuple[object, object]
    rotation: float = 0.0
    disposed: bool = field(default=False, init=False)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0])

    def mask(self, kind: int) -> torch.Tensor:
        return self.face_kinds == kind

    def world_positions(self) -> torch.Tensor:
        """Positions rotated about z into the slice's slot."""
        return rotate_z(self.positions, self.rotation)

    def world_normals(self) -> torch.Tensor:
        return rotate_z(self.normals, self.rotation)

    def dispose(self) -> None:
        """Drop vertex buffers; the mesh must not be drawn afterwards."""
        empty3 = torch.zeros((0, 3), dtype=torch.float32)
        self.positions = empty3
        self.normals = empty3
        self.uvs = torch.zeros((0, 2), dtype=torch.float32)
        self.indices = torch.zeros((0, 3), dtype=torch.int64)
        self.face_kinds = torch.zeros((0,), dtype=torch.int8)
        self.groups = []
        self.disposed = True


def rotate_z(points: torch.Tensor, angle: float) -> torch.Tensor:
    c, s = math.cos(angle), math.sin(angle)
    out = points.clone()
    out[:, 0] = points[:, 0] * c - points[:, 1] * s
    out[:, 1] = points[:, 0] * s + points[:, 1] * c
    return out


# ----------------------------------------------------------------------
# Deformation
# ----------------------------------------------------------------------


def edge_falloff(t: torch.Tensor) -> torch.Tensor:
    """Symmetric cubic: 1 at both straight edges (t=0, t=1), 0 mid-wedge."""
    t = t.clamp(0.0, 1.0)
    dist_to_edge = torch.minimum(t, 1.0 - t)
    return (1.0 - dist_to_edge * 2.0) ** 3


def deform_positions(
    positions: torch.Tensor,
    upper: torch.Tensor,
    angular_midpoint: float,
    config: SliceConfig,
) -> torch.Tensor:
    """
    Apply edge dip and wobble to the ``upper`` rows of a local-frame wedge.

    Dip is driven by the local angle inside the wedge; wobble is evaluated in
    assembly coordinates so it runs continuously across neighbouring slices.
    Resulting z never exceeds ``config.height``.
    """
    span = config.slice_span
    rotation = angular_midpoint - span / 2.0
    out = positions.clone()
    if not bool(upper.any()):
        return out

    p = positions[upper]
    angle = torch.atan2(p[:, 1], p[:, 0])
    z = p[:, 2] - edge_falloff(angle / span) * config.edge_dip

    world = rotate_z(p, rotation)
    wobble = torch.sin(world[:, 0] * WOBBLE_FREQUENCY) * torch.cos(world[:, 1] * WOBBLE_FREQUENCY)
    z = z + wobble * config.wobble_amplitude

    out[upper, 2] = torch.clamp(z, max=config.height)
    return out


def deform_vertex(
    vertex: Sequence[float],
    angular_midpoint: float,
    config: SliceConfig,
) -> Tuple[float, float, float]:
    """Deform one local-frame vertex; vertices below the top are returned as-is."""
    p = torch.tensor([list(vertex)], dtype=torch.float32)
    upper = (p[:, 2] - config.height).abs() < TOP_EPS
    x, y, z = deform_positions(p, upper, angular_midpoint, config)[0].tolist()
    return x, y, z


# ----------------------------------------------------------------------
# UV projection
# ----------------------------------------------------------------------


def outline_perimeter(config: SliceConfig) -> float:
    return 2.0 * config.radius + config.radius * config.slice_span


def project_uvs(
    positions: torch.Tensor,
    face_kinds: torch.Tensor,
    arc_lengths: torch.Tensor,
    angular_midpoint: float,
    config: SliceConfig,
) -> torch.Tensor:
    """
    Caps: polar projection of the slot-rotated angle/radius onto a disc
    centred in UV space, shared by all slices. Sides: outline arc-length to
    u, normalised height to v.
    """
    rotation = angular_midpoint - config.slice_span / 2.0
    uvs = torch.zeros((positions.shape[0], 2), dtype=torch.float32)

    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]
    theta = torch.atan2(y, x) + rotation
    rho = torch.sqrt(x * x + y * y) / (UV_MAP_SCALE * config.radius)
    cap_u = 0.5 + 0.5 * rho * torch.cos(theta)
    cap_v = 0.5 + 0.5 * rho * torch.sin(theta)

    side_u = arc_lengths / outline_perimeter(config)
    side_v = (z / config.height).clamp(0.0, 1.0)

    is_side = face_kinds == SIDE
    uvs[:, 0] = torch.where(is_side, side_u, cap_u)
    uvs[:, 1] = torch.where(is_side, side_v, cap_v)
    return uvs


def project_uv(
    vertex: Sequence[float],
    face_kind: int,
    angular_midpoint: float,
    config: SliceConfig,
    arc_length: float = 0.0,
) -> Tuple[float, float]:
    p = torch.tensor([list(vertex)], dtype=torch.float32)
    kinds = torch.tensor([face_kind], dtype=torch.int8)
    s = torch.tensor([arc_length], dtype=torch.float32)
    u, v = project_uvs(p, kinds, s, angular_midpoint, config)[0].tolist()
    return u, v


# ----------------------------------------------------------------------
# Normals
# ----------------------------------------------------------------------


def compute_vertex_normals(positions: torch.Tensor, indices: torch.Tensor) -> torch.Tensor:
    """Area-weighted average of adjacent face normals, normalised."""
    v0 = positions[indices[:, 0]]
    v1 = positions[indices[:, 1]]
    v2 = positions[indices[:, 2]]
    face_n = torch.linalg.cross(v1 - v0, v2 - v0)

    normals = torch.zeros_like(positions)
    for corner in range(3):
        normals.index_add_(0, indices[:, corner], face_n)
    length = torch.linalg.norm(normals, dim=1, keepdim=True).clamp(min=1e-12)
    return normals / length


# ----------------------------------------------------------------------
# Construction
# ----------------------------------------------------------------------


def _cap_grid(config: SliceConfig, z: float) -> Tuple[torch.Tensor, torch.Tensor]:
    """Polar grid at height z and its triangle list (wound for +z)."""
    span = config.slice_span
    rings, steps = config.radial_segments, config.curve_segments

    r = torch.arange(1, rings + 1, dtype=torch.float32) * (config.radius / rings)
    phi = torch.arange(0, steps + 1, dtype=torch.float32) * (span / steps)
    rr, pp = torch.meshgrid(r, phi, indexing="ij")
    ring_pts = torch.stack([rr * torch.cos(pp), rr * torch.sin(pp), torch.full_like(rr, z)], dim=-1)
    verts = torch.cat([torch.tensor([[0.0, 0.0, z]]), ring_pts.reshape(-1, 3)], dim=0)

    def vid(j: int, k: int) -> int:
        return 1 + (j - 1) * (steps + 1) + k

    tris: List[Tuple[int, int, int]] = []
    for k in range(steps):
        tris.append((0, vid(1, k), vid(1, k + 1)))
    for j in range(1, rings):
        for k in range(steps):
            a, b, c, d = vid(j, k), vid(j + 1, k), vid(j + 1, k + 1), vid(j, k + 1)
            tris.append((a, b, c))
            tris.append((a, c, d))
    return verts, torch.tensor(tris, dtype=torch.int64)


def _outline(config: SliceConfig) -> List[Tuple[torch.Tensor, torch.Tensor]]:
    """
    The three wall polylines in CCW outline order with their arc-lengths:
    origin -> rim along angle 0, rim arc 0 -> m, rim -> origin along angle m.
    """
    span = config.slice_span
    radius = config.radius
    rings, steps = config.radial_segments, config.curve_segments

    r = torch.arange(0, rings + 1, dtype=torch.float32) * (radius / rings)
    start = torch.stack([r, torch.zeros_like(r)], dim=-1)
    start_s = r.clone()

    phi = torch.arange(0, steps + 1, dtype=torch.float32) * (span / steps)
    arc = torch.stack([radius * torch.cos(phi), radius * torch.sin(phi)], dim=-1)
    arc_s = radius + radius * phi

    r_back = torch.flip(r, dims=[0])
    end = torch.stack([r_back * math.cos(span), r_back * math.sin(span)], dim=-1)
    end_s = radius + radius * span + (radius - r_back)

    return [(start, start_s), (arc, arc_s), (end, end_s)]


def _wall(points: torch.Tensor, arc_s: torch.Tensor, height: float):
    """Vertical strip: bottom row then top row, quads wound to face outward."""
    n = points.shape[0]
    bottom = torch.cat([points, torch.zeros((n, 1))], dim=1)
    top = torch.cat([points, torch.full((n, 1), height)], dim=1)
    verts = torch.cat([bottom, top], dim=0)
    tris: List[Tuple[int, int, int]] = []
    for i in range(n - 1):
        b0, b1, t0, t1 = i, i + 1, n + i, n + i + 1
        tris.append((b0, b1, t1))
        tris.append((b0, t1, t0))
    upper = torch.cat([torch.zeros(n, dtype=torch.bool), torch.ones(n, dtype=torch.bool)])
    return verts, torch.tensor(tris, dtype=torch.int64), torch.cat([arc_s, arc_s]), upper


def build_wedge_mesh(
    config: SliceConfig,
    angular_midpoint: float,
    top_material: object,
    side_material: object,
) -> WedgeMesh:
    """
    Build, deform, shade and UV-map one wedge.

    Args:
        config: validated SliceConfig
        angular_midpoint: global angle of the wedge centre (rotation + m/2)
        top_material, side_material: opaque handles stored on the mesh

    Returns:
        WedgeMesh in local coordinates with ``rotation`` set to its slot angle
    """
    positions: List[torch.Tensor] = []
    triangles: List[torch.Tensor] = []
    kinds: List[torch.Tensor] = []
    arc: List[torch.Tensor] = []
    upper: List[torch.Tensor] = []
    offset = 0

    def emit(verts, tris, kind, s, up):
        nonlocal offset
        positions.append(verts)
        triangles.append(tris + offset)
        kinds.append(torch.full((verts.shape[0],), kind, dtype=torch.int8))
        arc.append(s)
        upper.append(up)
        offset += verts.shape[0]

    top_v, top_t = _cap_grid(config, config.height)
    emit(top_v, top_t, TOP, torch.zeros(top_v.shape[0]), torch.ones(top_v.shape[0], dtype=torch.bool))

    bot_v, bot_t = _cap_grid(config, 0.0)
    bot_t = bot_t[:, [0, 2, 1]]  # facing -z
    emit(bot_v, bot_t, BOTTOM, torch.zeros(bot_v.shape[0]), torch.zeros(bot_v.shape[0], dtype=torch.bool))
    cap_triangles = top_t.shape[0] + bot_t.shape[0]

    side_triangles = 0
    for pts, s in _outline(config):
        wall_v, wall_t, wall_s, wall_up = _wall(pts, s, config.height)
        emit(wall_v, wall_t, SIDE, wall_s, wall_up)
        side_triangles += wall_t.shape[0]

    pos = torch.cat(positions, dim=0)
    idx = torch.cat(triangles, dim=0)
    face_kinds = torch.cat(kinds, dim=0)
    arc_lengths = torch.cat(arc, dim=0)

    pos = deform_positions(pos, torch.cat(upper, dim=0), angular_midpoint, config)
    normals = compute_vertex_normals(pos, idx)
    uvs = project_uvs(pos, face_kinds, arc_lengths, angular_midpoint, config)

    return WedgeMesh(
        positions=pos,
        indices=idx,
        normals=normals,
        uvs=uvs,
        face_kinds=face_kinds,
        groups=[(0, cap_triangles, 0), (cap_triangles, side_triangles, 1)],
        materials=(top_material, side_material),
        rotation=angular_midpoint - config.slice_span / 2.0,
    )
