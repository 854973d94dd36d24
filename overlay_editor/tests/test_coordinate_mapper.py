"""Display <-> document space mapping."""
from __future__ import annotations

import unittest

from overlay_editor.exceptions.errors import CallerContractViolation, RenderError
from overlay_editor.logic.coordinate_mapper import to_display_space, to_document_space
from overlay_editor.models.render_surface import RenderSurface
from overlay_editor.tests.support import letter_surface


class TestCoordinateMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.surface = letter_surface((600.0, 777.0))

    def test_letter_page_scenario(self) -> None:
        x, y = to_document_space((50, 50), self.surface, font_size=20)
        self.assertAlmostEqual(x, 51.0, delta=1.0)
        self.assertAlmostEqual(y, 721.6, delta=1.0)

    def test_top_left_maps_to_top_of_page(self) -> None:
        self.assertEqual(to_document_space((0, 0), self.surface), (0.0, 792.0))

    def test_bottom_right_maps_to_page_width_and_zero(self) -> None:
        x, y = to_document_space((600, 777), self.surface)
        self.assertAlmostEqual(x, 612.0)
        self.assertAlmostEqual(y, 0.0)

    def test_round_trip(self) -> None:
        for p in [(0.0, 0.0), (12.5, 700.25), (599.0, 1.0), (300.0, 388.5)]:
            for font_size in (0.0, 16.0):
                back = to_display_space(to_document_space(p, self.surface, font_size), self.surface, font_size)
                self.assertAlmostEqual(back[0], p[0], places=9)
                self.assertAlmostEqual(back[1], p[1], places=9)

    def test_font_size_moves_baseline_down(self) -> None:
        _, y0 = to_document_space((10, 10), self.surface, font_size=0)
        _, y1 = to_document_space((10, 10), self.surface, font_size=20)
        self.assertAlmostEqual(y0 - y1, 20 * self.surface.scale_y)

    def test_missing_surface_fails_fast(self) -> None:
        with self.assertRaises(CallerContractViolation):
            to_document_space((1, 1), None)
        with self.assertRaises(CallerContractViolation):
            to_display_space((1, 1), None)

    def test_degenerate_surface(self) -> None:
        with self.assertRaises(RenderError):
            to_document_space((1, 1), RenderSurface(612, 792, 0, 0))


if __name__ == "__main__":
    unittest.main()
