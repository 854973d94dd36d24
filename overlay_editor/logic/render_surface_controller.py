"""
===============================================================================
RenderSurfaceController – rasterize page 1 into a preview surface
-------------------------------------------------------------------------------
Behavior
- Decoding/rendering runs on an executor; load_page() returns a Future and
  never blocks the UI thread.
- The bitmap is rendered with oversampling (viewport width x oversample)
  while the RenderSurface reports the *display* size used for mapping.
- Every load gets a new generation number. Only the newest generation may
  draw onto the surface; superseded loads resolve to None.
- Failures (DecodeError/RenderError) arrive through the Future and leave the
  previously committed surface untouched.

The rendering library is injected (PageRenderer); the default uses pypdfium2.
===============================================================================
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, List, Optional, Protocol, Tuple

import pypdfium2 as pdfium
from PIL import Image

from core.config.config_service import config_service
from ..exceptions.errors import CallerContractViolation, DecodeError, RenderError
from ..models.render_surface import RenderSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    native_width: float
    native_height: float
    scale: float
    image: Image.Image


class PageRenderer(Protocol):
    def render_first_page(self, document_bytes: bytes, *, target_width_px: float) -> RenderedPage: ...


class DrawableSurface(Protocol):
    def draw(self, image: Image.Image, surface: RenderSurface) -> None: ...


class PdfiumPageRenderer:
    """Renders page 1 with pypdfium2."""

    def render_first_page(self, document_bytes: bytes, *, target_width_px: float) -> RenderedPage:
        try:
            pdf = pdfium.PdfDocument(document_bytes)
        except Exception as ex:
            raise DecodeError(f"cannot open PDF: {ex}") from ex
        try:
            if len(pdf) == 0:
                raise DecodeError("PDF has no pages")
            page = pdf[0]
            try:
                native_w, native_h = page.get_size()
                if native_w <= 0 or native_h <= 0:
                    raise DecodeError(f"page 1 has invalid size {native_w}x{native_h}")
                scale = float(target_width_px) / float(native_w)
                try:
                    image = page.render(scale=scale).to_pil()
                except Exception as ex:
                    raise RenderError(f"rendering page 1 failed: {ex}") from ex
            finally:
                page.close()
        finally:
            pdf.close()
        return RenderedPage(float(native_w), float(native_h), scale, image)


class ImageSurface:
    """Headless drawable: keeps the last bitmap and its surface in memory."""

    def __init__(self) -> None:
        self.image: Optional[Image.Image] = None
        self.surface: Optional[RenderSurface] = None

    def draw(self, image: Image.Image, surface: RenderSurface) -> None:
        self.image = image
        self.surface = surface


class RenderSurfaceController:
    def __init__(
        self,
        drawable: DrawableSurface,
        *,
        renderer: Optional[PageRenderer] = None,
        executor: Optional[Executor] = None,
        oversample: Optional[float] = None,
    ) -> None:
        self._drawable = drawable
        self._renderer = renderer or PdfiumPageRenderer()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="page-render")
        self._oversample = float(oversample if oversample is not None else config_service.render.oversample)
        if self._oversample <= 0:
            raise ValueError(f"oversample must be positive, got {self._oversample}")

        self._lock = RLock()
        self._generation = 0
        self._in_flight = 0
        self._surface: Optional[RenderSurface] = None
        self._document_bytes: Optional[bytes] = None
        self._tag: Any = None
        # bytes and tag of the newest requested load; resize() re-issues these
        self._requested: Tuple[Optional[bytes], Any] = (None, None)
        self._commit_listeners: List[Callable[[RenderSurface, bytes, Any], None]] = []

    # ---------- state --------------------------------------------------------
    @property
    def current_surface(self) -> Optional[RenderSurface]:
        with self._lock:
            return self._surface

    @property
    def document_bytes(self) -> Optional[bytes]:
        with self._lock:
            return self._document_bytes

    def snapshot(self) -> Tuple[Optional[RenderSurface], Optional[bytes]]:
        """Surface and the bytes it was rendered from, read together."""
        with self._lock:
            return self._surface, self._document_bytes

    def locked(self) -> RLock:
        """
        The commit lock. Holding it keeps commits (and their listeners) out,
        so state derived from a commit can be read together with snapshot().
        """
        return self._lock

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._in_flight > 0

    def add_commit_listener(self, listener: Callable[[RenderSurface, bytes, Any], None]) -> None:
        """Called (under the controller lock) whenever a newest-generation load commits."""
        self._commit_listeners.append(listener)

    # ---------- public -------------------------------------------------------
    def load_page(
        self, document_bytes: bytes, viewport_width: float, *, tag: Any = None
    ) -> "Future[Optional[RenderSurface]]":
        """*tag* is handed to commit listeners; resize() reuses the tag of the newest request."""
        with self._lock:
            self._generation += 1
            gen = self._generation
            self._in_flight += 1
            self._requested = (bytes(document_bytes or b""), tag)
        logger.info(f"Loading page 1 (generation {gen}, viewport {viewport_width}px)")
        fut = self._executor.submit(self._load, gen, bytes(document_bytes or b""), float(viewport_width), tag)
        fut.add_done_callback(self._finished)
        return fut

    def resize(self, viewport_width: float) -> "Future[Optional[RenderSurface]]":
        """Re-render the newest requested document (loaded or still loading) for a new viewport width."""
        with self._lock:
            data, tag = self._requested
        if data is None:
            raise CallerContractViolation("resize() called before any document was loaded")
        return self.load_page(data, viewport_width, tag=tag)

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # ---------- helpers ------------------------------------------------------
    def _finished(self, _fut: Future) -> None:
        with self._lock:
            self._in_flight -= 1

    def _load(self, gen: int, document_bytes: bytes, viewport_width: float, tag: Any) -> Optional[RenderSurface]:
        try:
            rendered, surface = self._render_page(gen, document_bytes, viewport_width)
        except Exception:
            with self._lock:
                if gen == self._generation:
                    # a failed newest load leaves the committed document in charge
                    self._requested = (self._document_bytes, self._tag)
            raise

        with self._lock:
            if gen != self._generation:
                logger.warning(f"Discarding stale render (generation {gen}, newest {self._generation})")
                return None
            self._drawable.draw(rendered.image, surface)
            self._surface = surface
            self._document_bytes = document_bytes
            self._tag = tag
            for listener in self._commit_listeners:
                listener(surface, document_bytes, tag)
        logger.info(
            f"Page 1 rendered: {surface.native_width:.0f}x{surface.native_height:.0f}pt -> "
            f"{surface.display_width:.0f}x{surface.display_height:.0f}px (generation {gen})"
        )
        return surface

    def _render_page(
        self, gen: int, document_bytes: bytes, viewport_width: float
    ) -> Tuple[RenderedPage, RenderSurface]:
        if viewport_width <= 0:
            raise RenderError(f"viewport width must be positive, got {viewport_width}")
        if not document_bytes:
            raise DecodeError("empty document")

        rendered = self._renderer.render_first_page(
            document_bytes, target_width_px=viewport_width * self._oversample
        )
        display_h = rendered.native_height * viewport_width / rendered.native_width
        surface = RenderSurface(
            native_width=rendered.native_width,
            native_height=rendered.native_height,
            display_width=viewport_width,
            display_height=display_h,
            bitmap_scale=rendered.scale,
            generation=gen,
        )
        return rendered, surface
