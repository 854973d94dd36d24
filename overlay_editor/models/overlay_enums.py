# overlay_editor/models/overlay_enums.py
from __future__ import annotations
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"

    @classmethod
    def parse(cls, value: object) -> "FontWeight":
        """Unknown weights degrade to NORMAL instead of failing."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug(f"Unknown font weight {value!r}, using normal")
            return cls.NORMAL


class TextDecoration(str, Enum):
    NONE = "none"
    UNDERLINE = "underline"

    @classmethod
    def parse(cls, value: object) -> "TextDecoration":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug(f"Unknown text decoration {value!r}, using none")
            return cls.NONE


class StandardFont(str, Enum):
    """The reportlab standard Type-1 fonts used for export."""
    HELVETICA = "Helvetica"
    HELVETICA_BOLD = "Helvetica-Bold"
    TIMES_ROMAN = "Times-Roman"
    COURIER = "Courier"


class TargetKind(str, Enum):
    """What a pointer event landed on inside the preview."""
    SURFACE = "surface"
    OVERLAY = "overlay"
    REMOVE_CONTROL = "remove_control"
    OTHER = "other"
