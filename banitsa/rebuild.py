"""Keeps one live slice assembly and swaps it whenever the config changes."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .config import SliceConfig
from .geometry.assembly import SliceAssembly, build_slice_assembly

logger = logging.getLogger(__name__)

Listener = Callable[[SliceAssembly], None]


class AssemblyRebuilder:
    """
    Event sink for a parameter panel: each new SliceConfig disposes the
    current assembly and synchronously builds its replacement.
    """

    def __init__(self, top_material: object, side_material: object) -> None:
        self.top_material = top_material
        self.side_material = side_material
        self.config: Optional[SliceConfig] = None
        self.assembly: Optional[SliceAssembly] = None
        self.rebuilds = 0
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def apply(self, config: SliceConfig) -> SliceAssembly:
        if self.assembly is not None:
            self.assembly.dispose()
        self.config = config
        self.assembly = build_slice_assembly(config, self.top_material, self.side_material)
        self.rebuilds += 1
        logger.debug("Rebuild #%d with %d slices", self.rebuilds, config.slice_count)
        for listener in self._listeners:
            listener(self.assembly)
        return self.assembly

    def update(self, **changes: Any) -> SliceAssembly:
        """Apply an edit on top of the current config (defaults when none yet)."""
        base = self.config or SliceConfig()
        return self.apply(base.replace(**changes))
