"""
Slice configuration and presets.

A SliceConfig is an immutable value: the parameter panel (external) emits a
new one per edit via ``config.replace(...)`` and the builders consume it.
Classic is the default eight-slice pie; party and thin are handy extremes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace as _dc_replace
from typing import Any, Dict, Tuple

MAX_SLICES = 12

DEFAULT_FORTUNES: Tuple[str, ...] = (
    "Health",
    "Love",
    "Travel",
    "New Car",
    "New House",
    "Baby",
    "Promotion",
    "Wedding",
    "Lottery Win",
    "Good Friends",
    "Wisdom",
    "Lazy Year",
)
FILLER_FORTUNE = "Luck"


class SliceConfigError(ValueError):
    """Raised for slice parameters that cannot produce a valid assembly."""


def fortunes_for(count: int, fortunes: Tuple[str, ...] = DEFAULT_FORTUNES) -> Tuple[str, ...]:
    """First ``count`` fortunes, padded with the filler when the list runs short."""
    labels = list(fortunes[:count])
    while len(labels) < count:
        labels.append(FILLER_FORTUNE)
    return tuple(labels)


@dataclass(frozen=True)
class SliceConfig:
    slice_count: int = 8
    radius: float = 5.0
    height: float = 0.8
    gap_radians: float = math.radians(1.0)
    edge_dip: float = 0.02
    wobble_amplitude: float = 0.02
    marked_slice_index: int = 0
    fortune_labels: Tuple[str, ...] = field(default_factory=tuple)
    curve_segments: int = 12
    radial_segments: int = 6

    def __post_init__(self) -> None:
        if not self.fortune_labels:
            object.__setattr__(self, "fortune_labels", fortunes_for(self.slice_count))
        else:
            object.__setattr__(self, "fortune_labels", tuple(self.fortune_labels))
        self.validate()

    def validate(self) -> None:
        if self.slice_count < 2:
            raise SliceConfigError(f"slice_count must be >= 2, got {self.slice_count}")
        if self.radius <= 0 or self.height <= 0:
            raise SliceConfigError(f"radius and height must be positive (radius={self.radius}, height={self.height})")
        if self.gap_radians < 0 or self.edge_dip < 0 or self.wobble_amplitude < 0:
            raise SliceConfigError("gap_radians, edge_dip and wobble_amplitude must be >= 0")
        if self.curve_segments < 1 or self.radial_segments < 1:
            raise SliceConfigError("curve_segments and radial_segments must be >= 1")
        if len(self.fortune_labels) != self.slice_count:
            raise SliceConfigError(
                f"Expected {self.slice_count} fortune labels, got {len(self.fortune_labels)}"
            )
        if self.slice_span <= 0:
            raise SliceConfigError(
                f"Gap of {self.gap_radians:.4f} rad leaves no room for {self.slice_count} slices"
            )

    @property
    def slice_span(self) -> float:
        """Angular width m of one wedge: (2*pi - n*gap) / n."""
        return (2.0 * math.pi - self.slice_count * self.gap_radians) / self.slice_count

    @property
    def marked_index(self) -> int:
        """Marked slice index wrapped into [0, slice_count)."""
        return self.marked_slice_index % self.slice_count

    def replace(self, **changes: Any) -> "SliceConfig":
        """
        Return an edited copy. Changing ``slice_count`` without new labels
        re-derives the fortune list from the current one.
        """
        if "slice_count" in changes and "fortune_labels" not in changes:
            known = self.fortune_labels + DEFAULT_FORTUNES[len(self.fortune_labels):]
            changes["fortune_labels"] = fortunes_for(changes["slice_count"], known)
        return _dc_replace(self, **changes)

    @classmethod
    def from_degrees(cls, gap_degrees: float = 1.0, **kwargs: Any) -> "SliceConfig":
        return cls(gap_radians=math.radians(gap_degrees), **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slice_count": self.slice_count,
            "radius": self.radius,
            "height": self.height,
            "gap_radians": self.gap_radians,
            "edge_dip": self.edge_dip,
            "wobble_amplitude": self.wobble_amplitude,
            "marked_slice_index": self.marked_slice_index,
            "fortune_labels": list(self.fortune_labels),
            "curve_segments": self.curve_segments,
            "radial_segments": self.radial_segments,
        }


def preset_classic() -> Dict[str, Any]:
    return {
        "slice_count": 8,
        "radius": 5.0,
        "height": 0.8,
        "gap_radians": math.radians(1.0),
        "edge_dip": 0.02,
        "wobble_amplitude": 0.02,
        "marked_slice_index": 0,
    }


def preset_party() -> Dict[str, Any]:
    return {
        "slice_count": MAX_SLICES,
        "radius": 6.0,
        "height": 1.0,
        "gap_radians": math.radians(1.5),
        "edge_dip": 0.05,
        "wobble_amplitude": 0.03,
        "marked_slice_index": 0,
    }


def preset_thin() -> Dict[str, Any]:
    return {
        "slice_count": 4,
        "radius": 4.0,
        "height": 0.3,
        "gap_radians": 0.0,
        "edge_dip": 0.01,
        "wobble_amplitude": 0.0,
        "marked_slice_index": 0,
        # coarse tessellation for quick previews
        "curve_segments": 6,
        "radial_segments": 2,
    }


PRESETS = {
    "classic": preset_classic,
    "party": preset_party,
    "thin": preset_thin,
}


def get_preset(name: str) -> SliceConfig:
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Valid: {list(PRESETS)}")
    return SliceConfig(**PRESETS[name]())
