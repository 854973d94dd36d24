"""Shared helpers for the overlay editor tests."""
from __future__ import annotations

from concurrent.futures import Executor, Future
from io import BytesIO
from typing import Any, Callable, List, Optional, Sequence, Tuple

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject
from reportlab.pdfgen import canvas

from overlay_editor.logic.render_surface_controller import RenderedPage
from overlay_editor.models.render_surface import RenderSurface

LETTER = (612.0, 792.0)


def make_pdf(pages: int = 1, size: Tuple[float, float] = LETTER, labels: Optional[Sequence[str]] = None) -> bytes:
    """Small real PDF; page i carries labels[i] (default "Page <i+1>") near the bottom-left."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=size)
    for i in range(pages):
        c.setFont("Helvetica", 10)
        c.drawString(36, 36, labels[i] if labels else f"Page {i + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def reshape_first_page(data: bytes, *, cropbox: Optional[Sequence[float]] = None, rotate: int = 0) -> bytes:
    """Copy of *data* whose first page gets a crop box and/or a /Rotate entry."""
    reader = PdfReader(BytesIO(data))
    writer = PdfWriter()
    for i, page in enumerate(reader.pages):
        if i == 0:
            if cropbox is not None:
                page.cropbox = RectangleObject(cropbox)
            if rotate:
                page.rotate(rotate)
        writer.add_page(page)
    out = BytesIO()
    writer.write(out)
    return out.getvalue()


def letter_surface(display: Tuple[float, float] = (600.0, 777.0)) -> RenderSurface:
    return RenderSurface(LETTER[0], LETTER[1], display[0], display[1], bitmap_scale=2 * display[0] / LETTER[0])


class DeferredExecutor(Executor):
    """Queues submitted work; tests decide when and in which order it runs."""

    def __init__(self) -> None:
        self.jobs: List[Tuple[Future, Callable[..., Any], tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        fut: Future = Future()
        self.jobs.append((fut, fn, args, kwargs))
        return fut

    def run(self, index: int) -> None:
        fut, fn, args, kwargs = self.jobs[index]
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(fn(*args, **kwargs))
        except BaseException as ex:
            fut.set_exception(ex)

    def run_all(self) -> None:
        for i, (fut, *_rest) in enumerate(list(self.jobs)):
            if not fut.done():
                self.run(i)


class FakeRenderer:
    """PageRenderer that never touches PDF bytes; b"bad" raises DecodeError."""

    def __init__(self, native: Tuple[float, float] = LETTER) -> None:
        self.native = native
        self.calls: List[Tuple[bytes, float]] = []

    def render_first_page(self, document_bytes: bytes, *, target_width_px: float) -> RenderedPage:
        from overlay_editor.exceptions.errors import DecodeError

        self.calls.append((document_bytes, target_width_px))
        if document_bytes == b"bad":
            raise DecodeError("not a pdf")
        scale = target_width_px / self.native[0]
        img = Image.new("RGB", (max(1, int(target_width_px)), max(1, int(self.native[1] * scale))), "white")
        return RenderedPage(self.native[0], self.native[1], scale, img)


class RecordingSurface:
    def __init__(self) -> None:
        self.draws: List[RenderSurface] = []

    def draw(self, image, surface: RenderSurface) -> None:
        self.draws.append(surface)
