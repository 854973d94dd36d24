"""
OverlayModel – ordered collection of text overlays
-------------------------------------------------------------------------------
- Ids start at 1 and only grow; they are never handed out twice, not even
  after clear().
- update_position/remove ignore unknown ids (a drag may race a removal).
- list() returns an insertion-ordered, immutable snapshot.
"""
from __future__ import annotations
import logging
from threading import RLock
from typing import Dict, Iterator, Optional, Tuple

from ..models.text_overlay import OverlayStyle, TextOverlay

logger = logging.getLogger(__name__)


class OverlayModel:
    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, TextOverlay] = {}  # dict keeps insertion order
        self._next_id = 1

    def add(self, style: OverlayStyle) -> TextOverlay:
        with self._lock:
            overlay = TextOverlay.from_style(self._next_id, style)
            self._next_id += 1
            self._items[overlay.id] = overlay
        logger.debug(f"Overlay {overlay.id} added at ({overlay.x:.1f}, {overlay.y:.1f})")
        return overlay

    def update_position(self, overlay_id: int, x: float, y: float) -> None:
        with self._lock:
            current = self._items.get(overlay_id)
            if current is None:
                return
            self._items[overlay_id] = current.moved_to(x, y)

    def remove(self, overlay_id: int) -> None:
        with self._lock:
            if self._items.pop(overlay_id, None) is not None:
                logger.debug(f"Overlay {overlay_id} removed")

    def get(self, overlay_id: int) -> Optional[TextOverlay]:
        with self._lock:
            return self._items.get(overlay_id)

    def list(self) -> Tuple[TextOverlay, ...]:
        with self._lock:
            return tuple(self._items.values())

    def clear(self) -> None:
        """Drop all overlays (new document). The id counter keeps running."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[TextOverlay]:
        return iter(self.list())
