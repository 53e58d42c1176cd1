"""Slice assembly: spans, deformation bounds, markers, adjacency, determinism."""

import math

import pytest
import torch

from banitsa.config import SliceConfig, SliceConfigError
from banitsa.geometry import (
    BOTTOM,
    SIDE,
    TOP,
    build_slice_assembly,
    deform_vertex,
    edge_falloff,
    project_uv,
)

TOP_MAT = object()
SIDE_MAT = object()


def build(**kwargs):
    return build_slice_assembly(SliceConfig(**kwargs), TOP_MAT, SIDE_MAT)


@pytest.mark.parametrize("n", [2, 3, 5, 8, 12])
@pytest.mark.parametrize("gap", [0.0, 0.01, 0.1])
def test_slice_count_and_span_sum(n, gap):
    assembly = build(slice_count=n, gap_radians=gap, curve_segments=4, radial_segments=2)
    assert len(assembly) == n
    assert assembly.total_span == pytest.approx(2.0 * math.pi - n * gap)
    for s in assembly:
        assert s.span == pytest.approx((2.0 * math.pi - n * gap) / n)


def test_geometric_span_matches_reported_span():
    assembly = build(slice_count=6, gap_radians=0.05, wobble_amplitude=0.0)
    for s in assembly:
        top = s.mesh.positions[s.mesh.mask(TOP)]
        angles = torch.atan2(top[:, 1], top[:, 0])
        assert float(angles.min()) == pytest.approx(0.0, abs=1e-5)
        assert float(angles.max()) == pytest.approx(s.span, abs=1e-5)


@pytest.mark.parametrize("wobble", [0.0, 0.02, 0.5])
def test_top_vertices_never_rise_above_height(wobble):
    config = SliceConfig(slice_count=7, height=0.8, edge_dip=0.05, wobble_amplitude=wobble)
    assembly = build_slice_assembly(config, TOP_MAT, SIDE_MAT)
    for s in assembly:
        z = s.mesh.positions[s.mesh.mask(TOP), 2]
        assert float(z.max()) <= config.height + 1e-6


def test_marker_on_exactly_one_slice():
    assembly = build(slice_count=8, marked_slice_index=3)
    flags = [s.has_marker for s in assembly]
    assert flags == [i == 3 for i in range(8)]
    assert assembly.marked_slice.index == 3


def test_out_of_range_marker_wraps():
    assembly = build(slice_count=5, marked_slice_index=7)
    assert [s.index for s in assembly if s.has_marker] == [2]


def test_zero_gap_wedges_are_edge_adjacent():
    config = SliceConfig(slice_count=6, gap_radians=0.0, curve_segments=5, radial_segments=3)
    assembly = build_slice_assembly(config, TOP_MAT, SIDE_MAT)
    assert assembly.total_span == pytest.approx(2.0 * math.pi)

    rings, steps = config.radial_segments, config.curve_segments
    for i in range(len(assembly)):
        cur = assembly[i].mesh
        nxt = assembly[(i + 1) % len(assembly)].mesh
        cur_bottom = cur.world_positions()[cur.mask(BOTTOM)][1:].reshape(rings, steps + 1, 3)
        nxt_bottom = nxt.world_positions()[nxt.mask(BOTTOM)][1:].reshape(rings, steps + 1, 3)
        assert torch.allclose(cur_bottom[:, -1], nxt_bottom[:, 0], atol=1e-4)


def test_identical_configs_give_congruent_assemblies():
    config = SliceConfig(slice_count=9, gap_radians=0.02, edge_dip=0.04, wobble_amplitude=0.03)
    a = build_slice_assembly(config, TOP_MAT, SIDE_MAT)
    b = build_slice_assembly(config, TOP_MAT, SIDE_MAT)
    for sa, sb in zip(a, b):
        assert sa.angular_midpoint == sb.angular_midpoint
        assert torch.equal(sa.mesh.positions, sb.mesh.positions)
        assert torch.equal(sa.mesh.indices, sb.mesh.indices)
        assert torch.equal(sa.mesh.uvs, sb.mesh.uvs)


def test_slices_carry_labels_names_and_materials():
    labels = tuple(f"f{i}" for i in range(4))
    assembly = build(slice_count=4, fortune_labels=labels)
    assert [s.fortune_label for s in assembly] == list(labels)
    assert [s.name for s in assembly] == ["slice-0", "slice-1", "slice-2", "slice-3"]
    assert assembly.find("slice-2").index == 2
    for s in assembly:
        assert s.mesh.materials == (TOP_MAT, SIDE_MAT)


def test_slot_rotation_and_midpoint():
    config = SliceConfig(slice_count=4, gap_radians=0.1)
    assembly = build_slice_assembly(config, TOP_MAT, SIDE_MAT)
    m = config.slice_span
    for s in assembly:
        assert s.rotation == pytest.approx(s.index * (m + 0.1))
        assert s.angular_midpoint == pytest.approx(s.rotation + m / 2.0)


def test_groups_cover_every_triangle():
    mesh = build(slice_count=3)[0].mesh
    (s0, c0, m0), (s1, c1, m1) = mesh.groups
    assert (s0, m0, m1) == (0, 0, 1)
    assert s1 == c0
    assert c0 + c1 == mesh.triangle_count
    assert int(mesh.indices.max()) < mesh.vertex_count


def test_normals_are_unit_and_flat_top_points_up():
    mesh = build(slice_count=5, edge_dip=0.0, wobble_amplitude=0.0)[0].mesh
    lengths = torch.linalg.norm(mesh.normals, dim=1)
    assert torch.allclose(lengths, torch.ones_like(lengths), atol=1e-5)
    top_n = mesh.normals[mesh.mask(TOP)]
    assert bool((top_n[:, 2] > 0.999).all())
    bottom_n = mesh.normals[mesh.mask(BOTTOM)]
    assert bool((bottom_n[:, 2] < -0.999).all())


def test_dip_lowers_edges_and_spares_the_middle():
    config = SliceConfig(slice_count=4, height=1.0, edge_dip=0.1, wobble_amplitude=0.0)
    m = config.slice_span
    midpoint = m / 2.0
    _, _, z_edge = deform_vertex((2.0, 0.0, 1.0), midpoint, config)
    assert z_edge == pytest.approx(0.9)
    mid = (2.0 * math.cos(m / 2.0), 2.0 * math.sin(m / 2.0), 1.0)
    assert deform_vertex(mid, midpoint, config)[2] == pytest.approx(1.0, abs=1e-6)
    assert deform_vertex((2.0, 0.5, 0.0), midpoint, config) == pytest.approx((2.0, 0.5, 0.0))


def test_edge_falloff_shape():
    t = torch.tensor([0.0, 0.25, 0.5, 0.75, 1.0])
    f = edge_falloff(t).tolist()
    assert f[0] == pytest.approx(1.0)
    assert f[2] == pytest.approx(0.0)
    assert f[1] == pytest.approx(f[3])
    assert f[1] == pytest.approx(0.125)


def test_project_uv_top_and_side():
    config = SliceConfig(slice_count=4, radius=5.0, height=1.0, gap_radians=0.0)
    m = config.slice_span
    assert project_uv((0.0, 0.0, 1.0), TOP, m / 2.0, config) == pytest.approx((0.5, 0.5))
    u, v = project_uv((5.0, 0.0, 1.0), TOP, m / 2.0, config)
    assert u == pytest.approx(0.5 + 0.5 / 1.1)
    assert v == pytest.approx(0.5)
    # second slot: same local point lands a quarter turn further round
    u, v = project_uv((5.0, 0.0, 1.0), TOP, m + m / 2.0, config)
    assert u == pytest.approx(0.5, abs=1e-6)
    assert v == pytest.approx(0.5 + 0.5 / 1.1)

    assert project_uv((5.0, 0.0, 1.0), SIDE, m / 2.0, config, arc_length=0.0) == pytest.approx((0.0, 1.0))
    assert project_uv((5.0, 0.0, 0.0), SIDE, m / 2.0, config, arc_length=5.0)[1] == pytest.approx(0.0)


def test_side_uvs_stay_in_unit_square():
    mesh = build(slice_count=8, edge_dip=0.05)[0].mesh
    side = mesh.uvs[mesh.mask(SIDE)]
    assert float(side.min()) >= 0.0
    assert float(side.max()) <= 1.0 + 1e-6


@pytest.mark.parametrize(
    "kwargs",
    [
        {"slice_count": 1},
        {"slice_count": 4, "gap_radians": math.pi / 2},
        {"slice_count": 8, "gap_radians": 1.0},
        {"radius": 0.0},
        {"height": -1.0},
        {"edge_dip": -0.1},
        {"slice_count": 3, "fortune_labels": ("a", "b")},
    ],
)
def test_degenerate_configs_raise(kwargs):
    with pytest.raises(SliceConfigError):
        SliceConfig(**kwargs)


def test_dispose_releases_buffers():
    assembly = build(slice_count=3)
    assembly.dispose()
    assert assembly.disposed
    for s in assembly:
        assert s.mesh.vertex_count == 0
        assert s.mesh.groups == []
