"""
EditorSession – non-UI facade of the overlay editor.

Owns the overlay model, the render surface controller, the drag controller,
the export engine and the persist adapter, and wires them together the way a
host view needs them:

- loading a new document clears the overlays once it has been rendered;
  a viewport change (resize) keeps them and rescales their positions
- exports read one snapshot (bytes, surface, overlays) taken at call time
- load/export/upload run on executors and report through Futures
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from threading import RLock
from typing import Any, Optional, Sequence, Tuple

from core.config.config_service import ConfigService, config_service
from ..adapters.filesystem_persist_adapter import FilesystemPersistAdapter
from ..adapters.persist_adapter import PersistAdapter, PersistResult
from ..exceptions.errors import CallerContractViolation, PersistError
from ..models.overlay_enums import FontWeight, TextDecoration
from ..models.render_surface import RenderSurface
from ..models.text_overlay import OverlayStyle, TextOverlay
from .drag_controller import DragController
from .export_engine import ExportEngine
from .overlay_model import OverlayModel
from .render_surface_controller import (
    DrawableSurface,
    ImageSurface,
    PageRenderer,
    RenderSurfaceController,
)

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "edited.pdf"


@dataclass(frozen=True, eq=False)
class _DocumentToken:
    """Identity of one loaded document; compared by identity, not by value."""
    filename: str


def _failed(ex: BaseException) -> Future:
    fut: Future = Future()
    fut.set_exception(ex)
    return fut


class EditorSession:
    def __init__(
        self,
        *,
        drawable: Optional[DrawableSurface] = None,
        renderer: Optional[PageRenderer] = None,
        executor: Optional[Executor] = None,
        persist: Optional[PersistAdapter] = None,
        export_engine: Optional[ExportEngine] = None,
        config: Optional[ConfigService] = None,
    ) -> None:
        self._cfg = config or config_service
        self._model = OverlayModel()
        self._render = RenderSurfaceController(
            drawable or ImageSurface(),
            renderer=renderer,
            executor=executor,
            oversample=self._cfg.render.oversample,
        )
        self._export = export_engine or ExportEngine(
            underline_offset_ratio=self._cfg.export.underline_offset_ratio,
            underline_thickness=self._cfg.export.underline_thickness,
        )
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-export")
        self._persist = persist or FilesystemPersistAdapter(self._cfg.storage.upload_dir)
        self._drag = DragController(
            self._model, lambda: self._render.current_surface, add_at=self.add_overlay_at
        )

        self._lock = RLock()
        self._exports_in_flight = 0
        self._document: Optional[_DocumentToken] = None
        self._committed: Optional[RenderSurface] = None
        self._style = self.new_style()
        self._render.add_commit_listener(self._on_commit)

    # ---------- accessors ----------------------------------------------------
    @property
    def model(self) -> OverlayModel:
        return self._model

    @property
    def render(self) -> RenderSurfaceController:
        return self._render

    @property
    def drag(self) -> DragController:
        return self._drag

    @property
    def surface(self) -> Optional[RenderSurface]:
        return self._render.current_surface

    @property
    def filename(self) -> Optional[str]:
        doc = self._document
        return doc.filename if doc else None

    @property
    def is_busy(self) -> bool:
        """True while a load or an export is in flight."""
        with self._lock:
            exporting = self._exports_in_flight > 0
        return exporting or self._render.is_loading

    # ---------- style --------------------------------------------------------
    def new_style(self, **overrides: Any) -> OverlayStyle:
        """OverlayStyle built from the configured defaults plus *overrides*."""
        c = self._cfg.overlay
        style = OverlayStyle(
            content=c.default_text,
            font_family=c.default_font_family,
            font_size=float(c.default_font_size),
            color=c.default_color,
            font_weight=FontWeight.parse(c.default_font_weight),
            text_decoration=TextDecoration.parse(c.default_text_decoration),
        )
        return replace(style, **overrides) if overrides else style

    @property
    def current_style(self) -> OverlayStyle:
        """Style used for adds that do not pass one (the host's style inputs)."""
        return self._style

    @current_style.setter
    def current_style(self, style: OverlayStyle) -> None:
        self._style = style

    # ---------- documents ----------------------------------------------------
    def load_document(
        self, document_bytes: bytes, viewport_width: Optional[float] = None, filename: Optional[str] = None
    ) -> "Future[Optional[RenderSurface]]":
        width = viewport_width if viewport_width is not None else self._cfg.render.default_viewport_width
        token = _DocumentToken(filename or DEFAULT_FILENAME)
        return self._render.load_page(document_bytes, width, tag=token)

    def resize(self, viewport_width: float) -> "Future[Optional[RenderSurface]]":
        return self._render.resize(viewport_width)

    def _on_commit(self, surface: RenderSurface, _data: bytes, tag: Any) -> None:
        previous = self._committed
        if tag is not self._document:
            self._model.clear()
            self._document = tag
            logger.info(f"Document {getattr(tag, 'filename', '?')!r} loaded, overlays cleared")
        elif previous is not None and previous.display_size != surface.display_size:
            self._rescale(previous, surface)
        self._committed = surface

    def _rescale(self, old: RenderSurface, new: RenderSurface) -> None:
        fx = new.display_width / old.display_width
        fy = new.display_height / old.display_height
        for el in self._model.list():
            self._model.update_position(el.id, el.x * fx, el.y * fy)

    # ---------- overlays -----------------------------------------------------
    def _require_surface(self) -> RenderSurface:
        surface = self._render.current_surface
        if surface is None:
            raise CallerContractViolation("load a PDF before adding text")
        return surface

    def add_overlay_centered(self, style: Optional[OverlayStyle] = None) -> TextOverlay:
        """Default placement: slightly up-left of the preview centre."""
        surface = self._require_surface()
        c = self._cfg.overlay
        x = max(0.0, surface.display_width / 2 - c.center_offset_x)
        y = max(0.0, surface.display_height / 2 - c.center_offset_y)
        return self._model.add((style or self._style).at(x, y))

    def add_overlay_at(self, x: float, y: float, style: Optional[OverlayStyle] = None) -> TextOverlay:
        self._require_surface()
        return self._model.add((style or self._style).at(x, y))

    def update_position(self, overlay_id: int, x: float, y: float) -> None:
        self._model.update_position(overlay_id, x, y)

    def remove_overlay(self, overlay_id: int) -> None:
        self._model.remove(overlay_id)

    def overlays(self) -> Tuple[TextOverlay, ...]:
        return self._model.list()

    # ---------- export -------------------------------------------------------
    def _snapshot(self) -> Tuple[bytes, Sequence[TextOverlay], RenderSurface]:
        # commits clear or rescale the model under this lock
        with self._render.locked():
            surface, data = self._render.snapshot()
            overlays = self._model.list()
        if surface is None or data is None:
            raise CallerContractViolation("no document loaded to export")
        return data, overlays, surface

    def _submit(self, fn: Any, *args: Any) -> Future:
        with self._lock:
            self._exports_in_flight += 1
        fut = self._executor.submit(fn, *args)
        fut.add_done_callback(self._export_done)
        return fut

    def _export_done(self, _fut: Future) -> None:
        with self._lock:
            self._exports_in_flight -= 1

    def export_document(self) -> "Future[bytes]":
        try:
            data, overlays, surface = self._snapshot()
        except CallerContractViolation as ex:
            return _failed(ex)
        return self._submit(self._export.export, data, overlays, surface)

    def export_and_upload(self, owner_id: str, filename: Optional[str] = None) -> "Future[PersistResult]":
        """Export, then hand the bytes to the persist adapter. No retries."""
        try:
            data, overlays, surface = self._snapshot()
        except CallerContractViolation as ex:
            return _failed(ex)
        name = filename or self.filename or DEFAULT_FILENAME
        return self._submit(self._export_and_upload, data, overlays, surface, name, owner_id)

    def _export_and_upload(
        self, data: bytes, overlays: Sequence[TextOverlay], surface: RenderSurface, filename: str, owner_id: str
    ) -> PersistResult:
        pdf = self._export.export(data, overlays, surface)
        try:
            result = self._persist.upload(pdf, filename, owner_id)
        except PersistError:
            raise
        except Exception as ex:
            raise PersistError(f"upload of {filename!r} failed: {ex}") from ex
        logger.info(f"Uploaded {filename!r} for {owner_id}: {result.url}")
        return result

    def close(self) -> None:
        self._render.shutdown()
        if self._owns_executor:
            self._executor.shutdown(wait=False)
