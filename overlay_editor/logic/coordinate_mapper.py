"""
Display space <-> document space.

Display space: CSS pixels of the preview, origin top-left, y down.
Document space: PDF points of page 1 as displayed (crop box, rotation
applied), origin at the lower-left corner of that box, y up.

The font-size term moves a top-left anchored overlay down to the text
baseline, so the exported glyphs land where the on-screen box was dropped.
"""
from __future__ import annotations
from typing import Optional, Tuple

from ..exceptions.errors import CallerContractViolation, RenderError
from ..models.render_surface import RenderSurface

Point = Tuple[float, float]


def require_surface(surface: Optional[RenderSurface]) -> RenderSurface:
    """The surface itself, once it is known to be usable for mapping."""
    if surface is None:
        raise CallerContractViolation("coordinate mapping requires a loaded render surface")
    if not surface.is_valid:
        raise RenderError(f"render surface has no usable size: {surface}")
    return surface


def to_document_space(point: Point, surface: Optional[RenderSurface], font_size: float = 0.0) -> Point:
    s = require_surface(surface)
    x, y = point
    sx, sy = s.scale_x, s.scale_y
    doc_x = x * sx
    doc_y = s.native_height - y * sy - float(font_size) * sy
    return doc_x, doc_y


def to_display_space(point: Point, surface: Optional[RenderSurface], font_size: float = 0.0) -> Point:
    s = require_surface(surface)
    doc_x, doc_y = point
    sx, sy = s.scale_x, s.scale_y
    x = doc_x / sx
    y = (s.native_height - doc_y) / sy - float(font_size)
    return x, y
