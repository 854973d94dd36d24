"""Overlay editor exceptions."""
from __future__ import annotations


class OverlayEditorError(Exception):
    """Base exception for the overlay editor."""


class DecodeError(OverlayEditorError):
    """Raised when source bytes are not a readable PDF."""


class RenderError(OverlayEditorError):
    """Raised when no usable render surface or viewport is available."""


class ExportError(OverlayEditorError):
    """Raised when drawing overlays or serializing the output fails."""


class PersistError(OverlayEditorError):
    """Raised when the persist collaborator rejects or fails an upload."""


class CallerContractViolation(OverlayEditorError):
    """Raised when an operation is invoked without its preconditions, e.g. no loaded document."""
