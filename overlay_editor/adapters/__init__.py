"""Adapters for external collaborators.

Provides abstraction layers for:
- Persisting exported documents (filesystem/cloud-agnostic)
"""

from overlay_editor.adapters.persist_adapter import PersistAdapter, PersistResult
from overlay_editor.adapters.filesystem_persist_adapter import FilesystemPersistAdapter

__all__ = [
    "PersistAdapter",
    "PersistResult",
    "FilesystemPersistAdapter",
]
