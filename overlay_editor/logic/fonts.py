from __future__ import annotations
from typing import Tuple

from reportlab.pdfbase.pdfmetrics import stringWidth

from ..models.overlay_enums import FontWeight, StandardFont
from ..models.text_overlay import TextOverlay


def select_font(font_weight: object, font_family: str) -> StandardFont:
    """
    Map an overlay's weight/family onto one of the standard export fonts.

    Bold always wins (bold sans); otherwise the family name is matched by
    substring. Anything unrecognised ends up as regular Helvetica.
    """
    if FontWeight.parse(font_weight) == FontWeight.BOLD:
        return StandardFont.HELVETICA_BOLD
    family = font_family or ""
    if "Times" in family:
        return StandardFont.TIMES_ROMAN
    if "Courier" in family:
        return StandardFont.COURIER
    return StandardFont.HELVETICA


def text_width(text: str, font: StandardFont, size: float) -> float:
    """Advance width of *text* in points."""
    return stringWidth(text, font.value, float(size))


def measure_overlay(overlay: TextOverlay, padding: float = 4.0) -> Tuple[float, float]:
    """
    Approximate on-screen box of an overlay in display pixels, for hosts
    that cannot measure their rendered element.
    """
    font = select_font(overlay.font_weight, overlay.font_family)
    w = text_width(overlay.content, font, overlay.font_size) + 2 * padding
    h = overlay.font_size * 1.2 + 2 * padding
    return (w, h)
