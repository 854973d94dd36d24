from __future__ import annotations
import logging
import os
import tkinter as tk
from concurrent.futures import Future
from threading import Lock
from tkinter import ttk, filedialog, messagebox
from typing import Callable, Dict, Optional, Tuple

from PIL import Image, ImageTk

from core.config.config_service import config_service
from ..exceptions.errors import OverlayEditorError
from ..logic.color import display_color
from ..logic.editor_session import EditorSession
from ..models.overlay_enums import FontWeight, TargetKind, TextDecoration
from ..models.pointer_target import SURFACE_TARGET, PointerTarget
from ..models.render_surface import RenderSurface
from ..models.text_overlay import TextOverlay

logger = logging.getLogger(__name__)

FONT_FAMILIES = ("Inter", "Arial", "Times New Roman", "Courier New", "Georgia")


class TkCanvasSurface:
    """
    DrawableSurface for a Tk canvas. draw() is called from the render worker,
    so it only parks the bitmap; the view flushes it on the Tk thread.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._pending: Optional[Tuple[Image.Image, RenderSurface]] = None

    def draw(self, image: Image.Image, surface: RenderSurface) -> None:
        with self._lock:
            self._pending = (image, surface)

    def take(self) -> Optional[Tuple[Image.Image, RenderSurface]]:
        with self._lock:
            pending, self._pending = self._pending, None
        return pending


class EditorView(ttk.Frame):
    """
    Main editor view:
      • choose a PDF (page 1 preview)
      • add text via the button (centered) or by clicking the page
      • drag text around, remove it with its "X"
      • export & save
    """

    POLL_MS = 50
    PAD = 4

    def __init__(self, parent, **kwargs):
        super().__init__(parent, **kwargs)
        self._surface_sink = TkCanvasSurface()
        self._session = EditorSession(drawable=self._surface_sink)
        self._page_tk: Optional[ImageTk.PhotoImage] = None
        self._pending: Dict[Future, Callable[[Future], None]] = {}
        self._press_target: Optional[PointerTarget] = None
        cfg = config_service.overlay

        self._text = tk.StringVar(value=cfg.default_text)
        self._family = tk.StringVar(value=cfg.default_font_family)
        self._size = tk.IntVar(value=int(cfg.default_font_size))
        self._color = tk.StringVar(value=cfg.default_color)
        self._weight = tk.StringVar(value=FontWeight.parse(cfg.default_font_weight).value)
        self._decoration = tk.StringVar(value=TextDecoration.parse(cfg.default_text_decoration).value)
        self._owner = tk.StringVar(value=os.environ.get("USER", "local"))
        self._status = tk.StringVar(value="Please select a PDF file to view and edit.")

        self._make_ui()
        self.after(self.POLL_MS, self._poll)

    # ------------------------------------------------------------------ UI
    def _make_ui(self) -> None:
        ctrl = ttk.Frame(self)
        ctrl.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 6))

        self._buttons = [
            ttk.Button(ctrl, text="Choose PDF…", command=self._browse),
            ttk.Button(ctrl, text="Add text", command=self._add_centered),
            ttk.Button(ctrl, text="Export & Save", command=self._export),
        ]
        self._buttons[0].grid(row=0, column=0, sticky="w")
        ttk.Entry(ctrl, textvariable=self._text, width=24).grid(row=0, column=1, padx=6)
        self._buttons[1].grid(row=0, column=2)
        ttk.Label(ctrl, text="Owner").grid(row=0, column=3, padx=(12, 4))
        ttk.Entry(ctrl, textvariable=self._owner, width=12).grid(row=0, column=4)
        self._buttons[2].grid(row=0, column=5, padx=(6, 0))

        ttk.Combobox(ctrl, textvariable=self._family, values=FONT_FAMILIES, width=16).grid(
            row=1, column=0, pady=(6, 0), sticky="w")
        ttk.Spinbox(ctrl, from_=6, to=96, textvariable=self._size, width=4).grid(row=1, column=1, sticky="w", padx=6)
        ttk.Entry(ctrl, textvariable=self._color, width=8).grid(row=1, column=2, sticky="w")
        ttk.Combobox(ctrl, textvariable=self._weight, values=[v.value for v in FontWeight],
                     state="readonly", width=8).grid(row=1, column=3, sticky="w", padx=(12, 4))
        ttk.Combobox(ctrl, textvariable=self._decoration, values=[v.value for v in TextDecoration],
                     state="readonly", width=10).grid(row=1, column=4, sticky="w")

        width = int(config_service.render.default_viewport_width)
        self._canvas = tk.Canvas(self, width=width, height=int(width * 1.3), bg="#f8f8f8",
                                 highlightthickness=1, highlightbackground="#888")
        self._canvas.grid(row=1, column=0, padx=10)
        self._canvas.bind("<ButtonPress-1>", self._on_press)
        self._canvas.bind("<B1-Motion>", self._on_motion)
        self._canvas.bind("<ButtonRelease-1>", self._on_release)

        ttk.Label(self, textvariable=self._status, anchor="w").grid(row=2, column=0, sticky="ew", padx=10, pady=6)

    def _style_from_inputs(self):
        try:
            size = max(1, int(self._size.get()))
        except (tk.TclError, ValueError):
            size = int(config_service.overlay.default_font_size)
        return self._session.new_style(
            content=self._text.get(),
            font_family=self._family.get(),
            font_size=float(size),
            color=self._color.get(),
            font_weight=FontWeight.parse(self._weight.get()),
            text_decoration=TextDecoration.parse(self._decoration.get()),
        )

    # ------------------------------------------------------------------ Actions
    def _browse(self) -> None:
        p = filedialog.askopenfilename(parent=self, filetypes=[("PDF", "*.pdf")], title="Choose PDF")
        if not p:
            return
        try:
            with open(p, "rb") as fh:
                data = fh.read()
        except OSError as ex:
            messagebox.showerror("Open PDF", str(ex), parent=self)
            return
        width = self._canvas.winfo_width() - 2  # minus highlight border
        if width <= 0:
            width = int(config_service.render.default_viewport_width)
        fut = self._session.load_document(data, viewport_width=width, filename=os.path.basename(p))
        self._track(fut, self._on_loaded)

    def _add_centered(self) -> None:
        try:
            self._session.add_overlay_centered(self._style_from_inputs())
        except OverlayEditorError as ex:
            self._status.set(str(ex))
            return
        self._text.set(config_service.overlay.default_text)
        self._redraw_overlays()

    def _export(self) -> None:
        fut = self._session.export_and_upload(self._owner.get().strip())
        self._track(fut, self._on_exported)

    # ------------------------------------------------------------------ Futures
    def _track(self, fut: Future, done: Callable[[Future], None]) -> None:
        self._pending[fut] = done
        self._update_busy()

    def _poll(self) -> None:
        pending = self._surface_sink.take()
        if pending:
            self._show_page(*pending)
        for fut in [f for f in self._pending if f.done()]:
            self._pending.pop(fut)(fut)
        self._update_busy()
        self.after(self.POLL_MS, self._poll)

    def _update_busy(self) -> None:
        busy = self._session.is_busy or bool(self._pending)
        for b in self._buttons:
            b.state(["disabled"] if busy else ["!disabled"])
        self.configure(cursor="watch" if busy else "")

    def _on_loaded(self, fut: Future) -> None:
        ex = fut.exception()
        if ex is not None:
            logger.warning(f"Loading PDF failed: {ex}")
            messagebox.showerror("Open PDF", str(ex), parent=self)
            return
        if fut.result() is not None:
            self._status.set(f"PDF loaded: {self._session.filename}")
            self._redraw_overlays()

    def _on_exported(self, fut: Future) -> None:
        ex = fut.exception()
        if ex is not None:
            logger.warning(f"Export failed: {ex}")
            messagebox.showerror("Export", f"Failed to export/save PDF:\n{ex}", parent=self)
            return
        self._status.set(f"Saved: {fut.result().url}")

    # ------------------------------------------------------------------ Render
    def _show_page(self, image: Image.Image, surface: RenderSurface) -> None:
        size = (max(1, round(surface.display_width)), max(1, round(surface.display_height)))
        self._page_tk = ImageTk.PhotoImage(image.resize(size, Image.LANCZOS))
        self._canvas.configure(width=size[0], height=size[1])
        self._canvas.delete("page")
        self._canvas.create_image(0, 0, image=self._page_tk, anchor="nw", tags=("page",))
        self._canvas.tag_lower("page")
        self._redraw_overlays()

    def _redraw_overlays(self) -> None:
        self._canvas.delete("overlay", "remove")
        for el in self._session.overlays():
            self._draw_overlay(el)

    def _draw_overlay(self, el: TextOverlay) -> None:
        font = [el.font_family, -int(el.font_size)]  # negative size = pixels
        if el.font_weight == FontWeight.BOLD:
            font.append("bold")
        if el.underlined:
            font.append("underline")
        tags = ("overlay", f"ov{el.id}")
        text_id = self._canvas.create_text(el.x + self.PAD, el.y + self.PAD, text=el.content, anchor="nw",
                                           fill=display_color(el.color), font=tuple(font), tags=tags)
        x0, y0, x1, y1 = self._canvas.bbox(text_id)
        box = self._canvas.create_rectangle(x0 - self.PAD, y0 - self.PAD, x1 + self.PAD, y1 + self.PAD,
                                            fill="white", outline="", stipple="gray75", tags=tags)
        self._canvas.tag_raise(text_id, box)
        self._canvas.create_text(x1 + self.PAD, y0 - self.PAD, text="X", fill="#d33", anchor="center",
                                 font=("TkDefaultFont", 9, "bold"), tags=("remove", f"rm{el.id}"))

    def _element_size(self, overlay_id: int) -> Tuple[float, float]:
        bbox = self._canvas.bbox(f"ov{overlay_id}")
        if not bbox:
            return (0.0, 0.0)
        return (float(bbox[2] - bbox[0]), float(bbox[3] - bbox[1]))

    # ------------------------------------------------------------------ Events
    def _target_at(self) -> PointerTarget:
        items = self._canvas.find_withtag("current")
        if not items:
            return SURFACE_TARGET
        tags = self._canvas.gettags(items[0])
        for tag in tags:
            if tag.startswith("rm"):
                ov = PointerTarget(TargetKind.OVERLAY, int(tag[2:]), SURFACE_TARGET)
                return PointerTarget(TargetKind.REMOVE_CONTROL, ov.overlay_id, ov)
            if tag.startswith("ov"):
                return PointerTarget(TargetKind.OVERLAY, int(tag[2:]), SURFACE_TARGET)
        return SURFACE_TARGET

    def _on_press(self, e) -> None:
        if self._session.surface is None:
            return
        target = self._target_at()
        self._press_target = target
        if target.kind == TargetKind.REMOVE_CONTROL:
            self._session.remove_overlay(target.overlay_id)
            self._redraw_overlays()
        elif target.kind == TargetKind.OVERLAY:
            self._session.drag.pointer_down(target.overlay_id, (e.x, e.y), self._element_size(target.overlay_id))

    def _on_motion(self, e) -> None:
        if self._session.drag.pointer_move((e.x, e.y)) is not None:
            self._redraw_overlays()

    def _on_release(self, e) -> None:
        target, self._press_target = self._press_target, None
        if self._session.drag.is_dragging:
            self._session.drag.pointer_up()
            return
        if target is None or self._session.surface is None:
            return
        self._session.current_style = self._style_from_inputs()
        if self._session.drag.surface_click((e.x, e.y), target) is not None:
            self._redraw_overlays()

    def close(self) -> None:
        self._session.close()
