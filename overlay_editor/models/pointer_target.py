from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional

from .overlay_enums import TargetKind


@dataclass(frozen=True)
class PointerTarget:
    """
    What a pointer event hit, with its containing element as ``parent``.
    Hosts build the chain from their widget tree (e.g. Tk canvas tags).
    """
    kind: TargetKind
    overlay_id: Optional[int] = None
    parent: Optional["PointerTarget"] = None

    def ancestry(self) -> Iterator["PointerTarget"]:
        """Yields self and its parents up to, but excluding, the surface boundary."""
        node: Optional[PointerTarget] = self
        while node is not None and node.kind != TargetKind.SURFACE:
            yield node
            node = node.parent


SURFACE_TARGET = PointerTarget(TargetKind.SURFACE)
