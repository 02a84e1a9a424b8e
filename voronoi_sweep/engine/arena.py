"""Index-addressed arc storage with generation-checked handles."""

from __future__ import annotations

from typing import List, Optional

from ..geometry import Site
from .model import Arc, ArcHandle, StaleHandleError


class ArcArena:
    """Owns every :class:`Arc`; handles stay safe after the arc is released.

    Released slots are reused, and reuse bumps the slot generation so that
    older handles (for instance the one kept by a stale circle event) no
    longer resolve.
    """

    def __init__(self) -> None:
        self._slots: List[Optional[Arc]] = []
        self._generations: List[int] = []
        self._free: List[int] = []
        self._live = 0

    def __len__(self) -> int:
        return self._live

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, ArcHandle) and self.resolve(handle) is not None

    def allocate(self, site: Site) -> Arc:
        if self._free:
            index = self._free.pop()
            generation = self._generations[index]
        else:
            index = len(self._slots)
            self._slots.append(None)
            self._generations.append(0)
            generation = 0
        arc = Arc(site=site, handle=ArcHandle(index, generation))
        self._slots[index] = arc
        self._live += 1
        return arc

    def release(self, handle: ArcHandle) -> None:
        arc = self.get(handle)
        arc.invalidate_prediction()
        arc.prev = None
        arc.next = None
        self._slots[handle.index] = None
        self._generations[handle.index] += 1
        self._free.append(handle.index)
        self._live -= 1

    def resolve(self, handle: Optional[ArcHandle]) -> Optional[Arc]:
        if handle is None:
            return None
        if not 0 <= handle.index < len(self._slots):
            return None
        if self._generations[handle.index] != handle.generation:
            return None
        return self._slots[handle.index]

    def get(self, handle: ArcHandle) -> Arc:
        arc = self.resolve(handle)
        if arc is None:
            raise StaleHandleError(f"{handle!r} does not refer to a live arc")
        return arc
