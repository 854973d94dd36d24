from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple

from .overlay_enums import FontWeight, TextDecoration


@dataclass(frozen=True)
class OverlayStyle:
    """
    Everything needed to create an overlay. Styling is fixed once the overlay
    exists; only the position changes afterwards (drag).
    x/y are display-space pixels, top-left origin.
    """
    content: str = "New Text"
    font_family: str = "Inter"
    font_size: float = 16.0
    color: str = "#000000"         # Hex (#000 / #000000)
    font_weight: FontWeight = FontWeight.NORMAL
    text_decoration: TextDecoration = TextDecoration.NONE
    x: float = 0.0
    y: float = 0.0

    def at(self, x: float, y: float) -> "OverlayStyle":
        return replace(self, x=float(x), y=float(y))


@dataclass(frozen=True)
class TextOverlay:
    """One user-placed text annotation on the page preview."""
    id: int
    content: str
    x: float
    y: float
    font_family: str
    font_size: float
    color: str
    font_weight: FontWeight = FontWeight.NORMAL
    text_decoration: TextDecoration = TextDecoration.NONE

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def underlined(self) -> bool:
        return self.text_decoration == TextDecoration.UNDERLINE

    def moved_to(self, x: float, y: float) -> "TextOverlay":
        return replace(self, x=float(x), y=float(y))

    @classmethod
    def from_style(cls, overlay_id: int, style: OverlayStyle) -> "TextOverlay":
        return cls(
            id=overlay_id,
            content=style.content,
            x=float(style.x),
            y=float(style.y),
            font_family=style.font_family,
            font_size=float(style.font_size),
            color=style.color,
            font_weight=FontWeight.parse(style.font_weight),
            text_decoration=TextDecoration.parse(style.text_decoration),
        )
