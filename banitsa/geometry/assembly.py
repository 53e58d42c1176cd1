"""Slice assembly: one deformed wedge per slot around the circle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ..config import SliceConfig
from .wedge import WedgeMesh, build_wedge_mesh

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Slice:
    index: int
    angular_midpoint: float
    span: float
    fortune_label: str
    has_marker: bool
    mesh: WedgeMesh

    @property
    def name(self) -> str:
        return f"slice-{self.index}"

    @property
    def rotation(self) -> float:
        return self.mesh.rotation

    @property
    def angular_range(self) -> Tuple[float, float]:
        return self.rotation, self.rotation + self.span


class SliceAssembly:
    """Ordered container of slices built from one SliceConfig."""

    def __init__(self, config: SliceConfig, slices: List[Slice]) -> None:
        self.config = config
        self._slices = list(slices)

    def __len__(self) -> int:
        return len(self._slices)

    def __iter__(self) -> Iterator[Slice]:
        return iter(self._slices)

    def __getitem__(self, index: int) -> Slice:
        return self._slices[index]

    @property
    def slices(self) -> Tuple[Slice, ...]:
        return tuple(self._slices)

    @property
    def total_span(self) -> float:
        return sum(s.span for s in self._slices)

    @property
    def marked_slice(self) -> Optional[Slice]:
        for s in self._slices:
            if s.has_marker:
                return s
        return None

    @property
    def disposed(self) -> bool:
        return all(s.mesh.disposed for s in self._slices)

    def find(self, name: str) -> Optional[Slice]:
        for s in self._slices:
            if s.name == name:
                return s
        return None

    def dispose(self) -> None:
        for s in self._slices:
            s.mesh.dispose()


def build_slice_assembly(
    config: SliceConfig,
    top_material: object,
    side_material: object,
) -> SliceAssembly:
    """
    Build ``config.slice_count`` wedges, slice i rotated to i * (m + gap).

    The materials are opaque handles; every mesh gets the same pair.
    """
    span = config.slice_span
    marked = config.marked_index
    if marked != config.marked_slice_index:
        logger.debug(
            "Marked slice %d out of range for %d slices; wrapped to %d",
            config.marked_slice_index, config.slice_count, marked,
        )

    slices: List[Slice] = []
    for i in range(config.slice_count):
        rotation = i * (span + config.gap_radians)
        midpoint = rotation + span / 2.0
        mesh = build_wedge_mesh(config, midpoint, top_material, side_material)
        slices.append(
            Slice(
                index=i,
                angular_midpoint=midpoint,
                span=span,
                fortune_label=config.fortune_labels[i],
                has_marker=(i == marked),
                mesh=mesh,
            )
        )

    logger.info(
        "Built %d slices (span=%.4f rad, gap=%.4f rad, %d verts each)",
        len(slices), span, config.gap_radians, slices[0].mesh.vertex_count,
    )
    return SliceAssembly(config, slices)
