"""FilesystemPersistAdapter writes uploads below the owner's directory."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from urllib.parse import unquote, urlparse

from overlay_editor.adapters import FilesystemPersistAdapter
from overlay_editor.adapters.filesystem_persist_adapter import safe_filename
from overlay_editor.exceptions.errors import PersistError


class TestFilesystemPersistAdapter(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.adapter = FilesystemPersistAdapter(self.root / "uploads")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_upload_writes_file_and_returns_url(self) -> None:
        result = self.adapter.upload(b"%PDF-1.7 data", "signed contract.pdf", "u42")
        path = Path(unquote(urlparse(result.url).path))
        self.assertTrue(path.is_file())
        self.assertEqual(path.read_bytes(), b"%PDF-1.7 data")
        self.assertEqual(path.parent.name, "u42")
        self.assertTrue(path.name.endswith("-signed contract.pdf"))
        self.assertEqual(result.size, 13)
        self.assertEqual(result.owner_id, "u42")

    def test_same_name_twice_keeps_both(self) -> None:
        a = self.adapter.upload(b"a", "x.pdf", "u1")
        b = self.adapter.upload(b"b", "x.pdf", "u1")
        self.assertNotEqual(a.url, b.url)
        self.assertEqual(len(list((self.root / "uploads" / "u1").iterdir())), 2)

    def test_owner_required(self) -> None:
        with self.assertRaises(PersistError):
            self.adapter.upload(b"a", "x.pdf", "")

    def test_unwritable_root(self) -> None:
        blocker = self.root / "file"
        blocker.write_text("not a dir")
        with self.assertRaises(PersistError):
            FilesystemPersistAdapter(blocker).upload(b"a", "x.pdf", "u1")


def test_safe_filename() -> None:
    assert safe_filename("../../etc/passwd") == "passwd.pdf"
    assert safe_filename("") == "edited.pdf"
    assert safe_filename("report.PDF") == "report.PDF"
    assert safe_filename("a:b*c.pdf") == "a_b_c.pdf"


if __name__ == "__main__":
    unittest.main()
