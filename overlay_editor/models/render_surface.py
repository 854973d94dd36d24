from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RenderSurface:
    """
    Rasterized preview of page 1.

    native_*  : page size in PDF points (1 pt = 1/72 inch), origin bottom-left
    display_* : on-screen size in CSS pixels, origin top-left
    bitmap_scale : render scale of the backing bitmap (display scale x oversampling)

    Coordinate mapping always uses the display size, never the bitmap size.
    """
    native_width: float
    native_height: float
    display_width: float
    display_height: float
    bitmap_scale: float = 1.0
    generation: int = 0

    @property
    def native_size(self) -> Tuple[float, float]:
        return (self.native_width, self.native_height)

    @property
    def display_size(self) -> Tuple[float, float]:
        return (self.display_width, self.display_height)

    @property
    def scale_factor(self) -> float:
        """display / native"""
        return self.display_width / self.native_width

    @property
    def scale_x(self) -> float:
        """PDF points per display pixel, horizontally."""
        return self.native_width / self.display_width

    @property
    def scale_y(self) -> float:
        return self.native_height / self.display_height

    @property
    def is_valid(self) -> bool:
        return min(self.native_width, self.native_height, self.display_width, self.display_height) > 0
