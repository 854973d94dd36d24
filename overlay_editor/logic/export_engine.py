"""
===============================================================================
ExportEngine – burn text overlays into page 1
-------------------------------------------------------------------------------
Implementation
    - reportlab renders a single overlay page the size of page 1's crop box
      (the box the preview shows) containing every overlay's text and
      underline.
    - A rotated page 1 gets its rotation moved into the content first, so
      the overlay is drawn in the same upright space as the preview.
    - pypdf merges the overlay at the crop box origin and writes all pages
      to new bytes.
Either the whole document is produced or an exception is raised; no partial
output is ever returned.
===============================================================================
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional, Sequence

from pypdf import PdfReader, PdfWriter, Transformation
from reportlab.pdfgen import canvas

from core.config.config_service import config_service
from ..exceptions.errors import DecodeError, ExportError, OverlayEditorError
from ..models.render_surface import RenderSurface
from ..models.text_overlay import TextOverlay
from .color import normalized_rgb
from .coordinate_mapper import require_surface, to_document_space
from .fonts import select_font, text_width

logger = logging.getLogger(__name__)


class ExportEngine:
    def __init__(
        self,
        *,
        underline_offset_ratio: Optional[float] = None,
        underline_thickness: Optional[float] = None,
    ) -> None:
        cfg = config_service.export
        self._underline_ratio = float(
            underline_offset_ratio if underline_offset_ratio is not None else cfg.underline_offset_ratio
        )
        self._underline_thickness = float(
            underline_thickness if underline_thickness is not None else cfg.underline_thickness
        )

    # ---------- public -------------------------------------------------------
    def export(
        self,
        document_bytes: bytes,
        overlays: Sequence[TextOverlay],
        surface: Optional[RenderSurface],
    ) -> bytes:
        """
        Returns new PDF bytes with *overlays* drawn onto page 1. Pages other
        than the first are copied unchanged.
        """
        overlays = tuple(overlays)
        reader = self._open(document_bytes)

        writer = PdfWriter()
        try:
            for i, page in enumerate(reader.pages):
                if i == 0 and overlays:
                    if page.rotation % 360:
                        # the preview shows the page upright; draw into that same space
                        page.transfer_rotation_to_content()
                    box = page.cropbox
                    overlay_pdf = self._make_overlay(float(box.width), float(box.height), overlays, surface)
                    page.merge_transformed_page(
                        PdfReader(BytesIO(overlay_pdf)).pages[0],
                        Transformation().translate(float(box.left), float(box.bottom)),
                    )
                writer.add_page(page)

            out = BytesIO()
            writer.write(out)
        except OverlayEditorError:
            raise
        except Exception as ex:
            raise ExportError(f"writing exported PDF failed: {ex}") from ex

        logger.info(f"Exported {len(overlays)} overlay(s) onto page 1 of {len(reader.pages)} page(s)")
        return out.getvalue()

    # ---------- helpers ------------------------------------------------------
    @staticmethod
    def _open(document_bytes: bytes) -> PdfReader:
        if not document_bytes:
            raise DecodeError("empty document")
        try:
            reader = PdfReader(BytesIO(document_bytes))
            page_count = len(reader.pages)
        except Exception as ex:
            raise DecodeError(f"cannot parse PDF: {ex}") from ex
        if page_count == 0:
            raise DecodeError("PDF has no pages")
        return reader

    def _make_overlay(
        self,
        page_w: float,
        page_h: float,
        overlays: Sequence[TextOverlay],
        surface: Optional[RenderSurface],
    ) -> bytes:
        """
        Overlay page the size of the visible page box with one text run per
        overlay, positioned via the coordinate mapper. Mapper errors
        (no surface) propagate unchanged.
        """
        surface = require_surface(surface)
        placed = [
            (el, to_document_space(el.position, surface, font_size=el.font_size))
            for el in overlays
        ]

        try:
            buf = BytesIO()
            c = canvas.Canvas(buf, pagesize=(page_w, page_h))
            for el, (x, y) in placed:
                font = select_font(el.font_weight, el.font_family)
                r, g, b = normalized_rgb(el.color)

                c.setFillColorRGB(r, g, b)
                c.setFont(font.value, el.font_size)
                c.drawString(x, y, el.content)

                if el.underlined:
                    width = text_width(el.content, font, el.font_size)
                    offset = el.font_size * self._underline_ratio * surface.scale_y
                    c.setStrokeColorRGB(r, g, b)
                    c.setLineWidth(self._underline_thickness)
                    c.line(x, y - offset, x + width, y - offset)
            c.showPage()
            c.save()
        except Exception as ex:
            raise ExportError(f"drawing overlays failed: {ex}") from ex
        return buf.getvalue()
