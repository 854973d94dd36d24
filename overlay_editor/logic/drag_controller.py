"""
DragController – pointer events -> overlay positions.

States:
  Idle
  Dragging(active_id, pointer_offset, element_size)

The grab offset and the element size are cached on pointer-down; moves only
subtract and clamp. Only one overlay can be dragged at a time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from ..exceptions.errors import CallerContractViolation
from ..models.overlay_enums import TargetKind
from ..models.pointer_target import PointerTarget
from ..models.render_surface import RenderSurface
from ..models.text_overlay import TextOverlay
from .overlay_model import OverlayModel

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Size = Tuple[float, float]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    active_id: int
    pointer_offset: Point
    element_size: Size


DragState = Union[Idle, Dragging]


def clamp_position(x: float, y: float, element_size: Size, surface: RenderSurface) -> Point:
    """Keep the element box inside the surface; an oversized element pins to 0."""
    w, h = element_size
    max_x = max(0.0, surface.display_width - w)
    max_y = max(0.0, surface.display_height - h)
    return (max(0.0, min(x, max_x)), max(0.0, min(y, max_y)))


def originates_from_overlay(target: Optional[PointerTarget]) -> bool:
    """True if the target or any ancestor below the surface is an overlay or its remove control."""
    if target is None:
        return False
    return any(node.kind in (TargetKind.OVERLAY, TargetKind.REMOVE_CONTROL) for node in target.ancestry())


class DragController:
    def __init__(
        self,
        model: OverlayModel,
        surface_provider: Callable[[], Optional[RenderSurface]],
        add_at: Optional[Callable[[float, float], TextOverlay]] = None,
    ) -> None:
        self._model = model
        self._surface_provider = surface_provider
        self._add_at = add_at
        self._state: DragState = Idle()

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return isinstance(self._state, Dragging)

    def _surface(self) -> RenderSurface:
        surface = self._surface_provider()
        if surface is None:
            raise CallerContractViolation("drag interaction requires a loaded render surface")
        return surface

    # ---------------- Events
    def pointer_down(self, overlay_id: int, pointer: Point, element_size: Size) -> bool:
        """Idle -> Dragging. Returns False when ignored (drag already active, unknown overlay)."""
        self._surface()
        if self.is_dragging:
            return False
        overlay = self._model.get(overlay_id)
        if overlay is None:
            return False
        px, py = pointer
        offset = (px - overlay.x, py - overlay.y)
        self._state = Dragging(overlay_id, offset, (float(element_size[0]), float(element_size[1])))
        logger.debug(f"Drag start on overlay {overlay_id}, offset {offset}")
        return True

    def pointer_move(self, pointer: Point) -> Optional[Point]:
        state = self._state
        if not isinstance(state, Dragging):
            return None
        surface = self._surface()
        px, py = pointer
        ox, oy = state.pointer_offset
        x, y = clamp_position(px - ox, py - oy, state.element_size, surface)
        self._model.update_position(state.active_id, x, y)
        return (x, y)

    def pointer_up(self) -> None:
        if self.is_dragging:
            logger.debug(f"Drag end on overlay {self._state.active_id}")  # type: ignore[union-attr]
        self._state = Idle()

    def pointer_capture_lost(self) -> None:
        self.pointer_up()

    def surface_click(self, pointer: Point, target: Optional[PointerTarget] = None) -> Optional[TextOverlay]:
        """Click on the bare surface adds an overlay at the click point."""
        if self.is_dragging or originates_from_overlay(target):
            return None
        if self._add_at is None:
            return None
        x, y = pointer
        return self._add_at(x, y)
