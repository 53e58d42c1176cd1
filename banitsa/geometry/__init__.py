"""Radially sliced solid: wedge meshes with edge dip, wobble and custom UVs."""

from .wedge import (
    BOTTOM,
    SIDE,
    TOP,
    WedgeMesh,
    build_wedge_mesh,
    compute_vertex_normals,
    deform_positions,
    deform_vertex,
    edge_falloff,
    project_uv,
    project_uvs,
    rotate_z,
)
from .assembly import Slice, SliceAssembly, build_slice_assembly

__all__ = [
    'TOP',
    'BOTTOM',
    'SIDE',
    'WedgeMesh',
    'build_wedge_mesh',
    'compute_vertex_normals',
    'deform_positions',
    'deform_vertex',
    'edge_falloff',
    'project_uv',
    'project_uvs',
    'rotate_z',
    'Slice',
    'SliceAssembly',
    'build_slice_assembly',
]
