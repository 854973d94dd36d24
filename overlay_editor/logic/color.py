from __future__ import annotations
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

_BLACK = (0, 0, 0)


def hex_to_rgb(hexstr: str) -> Tuple[int, int, int]:
    """
    Convert hex color (#RRGGBB or #RGB) into an RGB tuple (0-255).
    Raises ValueError for anything else.
    """
    s = (hexstr or "#000000").strip()
    if not s.startswith("#"):
        s = "#" + s
    if len(s) == 4:
        r = int(s[1] * 2, 16); g = int(s[2] * 2, 16); b = int(s[3] * 2, 16)
    elif len(s) == 7:
        r = int(s[1:3], 16); g = int(s[3:5], 16); b = int(s[5:7], 16)
    else:
        raise ValueError(f"not a hex color: {hexstr!r}")
    return (r, g, b)


def normalized_rgb(hexstr: str) -> Tuple[float, float, float]:
    """Channels in [0, 1]; malformed colors fall back to black."""
    try:
        r, g, b = hex_to_rgb(hexstr)
    except ValueError:
        logger.warning(f"Invalid color {hexstr!r}, falling back to black")
        r, g, b = _BLACK
    return (r / 255.0, g / 255.0, b / 255.0)


def display_color(hexstr: str) -> str:
    """#rrggbb for on-screen drawing; malformed colors fall back to black like the export."""
    try:
        r, g, b = hex_to_rgb(hexstr)
    except ValueError:
        r, g, b = _BLACK
    return f"#{r:02x}{g:02x}{b:02x}"
