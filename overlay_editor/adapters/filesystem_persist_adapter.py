"""Filesystem implementation of PersistAdapter.

Stores uploads as <root>/<owner_id>/<epoch_ms>-<filename>.
"""

from __future__ import annotations
import re
import time
from pathlib import Path

from overlay_editor.adapters.persist_adapter import PersistAdapter, PersistResult
from overlay_editor.exceptions.errors import PersistError

_UNSAFE = re.compile(r"[^A-Za-z0-9._ -]+")


def safe_filename(name: str) -> str:
    stem = _UNSAFE.sub("_", Path(name or "").name).strip(" .")
    if not stem:
        stem = "edited.pdf"
    if not stem.lower().endswith(".pdf"):
        stem += ".pdf"
    return stem


class FilesystemPersistAdapter(PersistAdapter):
    """Local filesystem implementation of PersistAdapter."""

    def __init__(self, root_path: str | Path):
        """
        Initialize filesystem storage.

        Args:
            root_path: Root directory for uploads (created lazily)
        """
        self._root = Path(root_path)

    @property
    def root(self) -> Path:
        return self._root

    def upload(self, data: bytes, filename: str, owner_id: str) -> PersistResult:
        """Write bytes under the owner's directory with a unique, time-prefixed name."""
        owner = _UNSAFE.sub("_", str(owner_id or "")).strip(" .")
        if not owner:
            raise PersistError("owner id is required for upload")

        owner_dir = self._root / owner
        key = f"{int(time.time() * 1000)}-{safe_filename(filename)}"
        dest_path = owner_dir / key
        try:
            owner_dir.mkdir(parents=True, exist_ok=True)
            # same-millisecond uploads of the same name must not overwrite each other
            n = 1
            while dest_path.exists():
                dest_path = owner_dir / f"{key[:-4]}-{n}.pdf"
                n += 1
            dest_path.write_bytes(data)
        except OSError as ex:
            raise PersistError(f"writing {dest_path} failed: {ex}") from ex

        return PersistResult(
            url=dest_path.resolve().as_uri(),
            filename=safe_filename(filename),
            owner_id=owner,
            size=len(data),
        )
