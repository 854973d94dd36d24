"""Drag state machine, clamping and click routing."""
from __future__ import annotations

import unittest
from typing import Optional

from overlay_editor.exceptions.errors import CallerContractViolation
from overlay_editor.logic.drag_controller import (
    DragController,
    Dragging,
    Idle,
    clamp_position,
    originates_from_overlay,
)
from overlay_editor.logic.overlay_model import OverlayModel
from overlay_editor.models.overlay_enums import TargetKind
from overlay_editor.models.pointer_target import SURFACE_TARGET, PointerTarget
from overlay_editor.models.render_surface import RenderSurface
from overlay_editor.models.text_overlay import OverlayStyle
from overlay_editor.tests.support import letter_surface

ELEMENT = (80.0, 24.0)


class TestDragController(unittest.TestCase):
    def setUp(self) -> None:
        self.model = OverlayModel()
        self.surface: Optional[RenderSurface] = letter_surface((600.0, 777.0))
        self.drag = DragController(
            self.model,
            lambda: self.surface,
            add_at=lambda x, y: self.model.add(OverlayStyle().at(x, y)),
        )
        self.a = self.model.add(OverlayStyle(content="A").at(100, 100))
        self.b = self.model.add(OverlayStyle(content="B").at(300, 300))

    def test_grab_point_is_preserved(self) -> None:
        self.assertTrue(self.drag.pointer_down(self.a.id, (110, 105), ELEMENT))
        self.assertEqual(self.drag.state, Dragging(self.a.id, (10.0, 5.0), ELEMENT))
        self.assertEqual(self.drag.pointer_move((210, 305)), (200.0, 300.0))
        self.assertEqual(self.model.get(self.a.id).position, (200.0, 300.0))

    def test_clamps_outside_bounds(self) -> None:
        self.drag.pointer_down(self.a.id, (100, 100), ELEMENT)
        self.assertEqual(self.drag.pointer_move((5000, 5000)), (600 - 80.0, 777 - 24.0))
        self.assertEqual(self.drag.pointer_move((-50, -70)), (0.0, 0.0))
        x, y = self.drag.pointer_move((590, -3))
        self.assertTrue(0 <= x <= 600 - ELEMENT[0])
        self.assertTrue(0 <= y <= 777 - ELEMENT[1])

    def test_oversized_element_pins_to_origin(self) -> None:
        self.assertEqual(clamp_position(40, 40, (700, 800), self.surface), (0.0, 0.0))

    def test_single_active_drag(self) -> None:
        self.assertTrue(self.drag.pointer_down(self.a.id, (100, 100), ELEMENT))
        self.assertFalse(self.drag.pointer_down(self.b.id, (300, 300), ELEMENT))
        self.drag.pointer_move((150, 150))
        self.assertEqual(self.model.get(self.b.id).position, (300.0, 300.0))
        self.assertEqual(self.model.get(self.a.id).position, (150.0, 150.0))

    def test_pointer_up_returns_to_idle(self) -> None:
        self.drag.pointer_down(self.a.id, (100, 100), ELEMENT)
        self.drag.pointer_up()
        self.assertEqual(self.drag.state, Idle())
        self.assertIsNone(self.drag.pointer_move((200, 200)))
        self.assertEqual(self.model.get(self.a.id).position, (100.0, 100.0))
        self.assertTrue(self.drag.pointer_down(self.b.id, (300, 300), ELEMENT))
        self.drag.pointer_capture_lost()
        self.assertFalse(self.drag.is_dragging)

    def test_moves_apply_in_order(self) -> None:
        self.drag.pointer_down(self.a.id, (100, 100), ELEMENT)
        for step in range(1, 6):
            self.drag.pointer_move((100 + step * 10, 100))
        self.assertEqual(self.model.get(self.a.id).position, (150.0, 100.0))

    def test_removed_while_dragging_is_harmless(self) -> None:
        self.drag.pointer_down(self.a.id, (100, 100), ELEMENT)
        self.model.remove(self.a.id)
        self.drag.pointer_move((120, 120))
        self.assertEqual([el.id for el in self.model.list()], [self.b.id])

    def test_pointer_down_on_unknown_overlay(self) -> None:
        self.assertFalse(self.drag.pointer_down(42, (0, 0), ELEMENT))
        self.assertFalse(self.drag.is_dragging)

    def test_requires_surface(self) -> None:
        self.surface = None
        with self.assertRaises(CallerContractViolation):
            self.drag.pointer_down(self.a.id, (100, 100), ELEMENT)


class TestSurfaceClick(unittest.TestCase):
    def setUp(self) -> None:
        self.model = OverlayModel()
        self.drag = DragController(
            self.model,
            lambda: letter_surface(),
            add_at=lambda x, y: self.model.add(OverlayStyle().at(x, y)),
        )

    def test_click_on_surface_adds_overlay_at_point(self) -> None:
        el = self.drag.surface_click((42, 84), SURFACE_TARGET)
        self.assertIsNotNone(el)
        self.assertEqual(self.model.list()[0].position, (42.0, 84.0))

    def test_click_on_overlay_or_remove_control_is_ignored(self) -> None:
        overlay = PointerTarget(TargetKind.OVERLAY, 1, SURFACE_TARGET)
        remove = PointerTarget(TargetKind.REMOVE_CONTROL, 1, overlay)
        inner = PointerTarget(TargetKind.OTHER, None, overlay)
        for target in (overlay, remove, inner):
            self.assertIsNone(self.drag.surface_click((10, 10), target))
        self.assertEqual(len(self.model), 0)

    def test_ancestry_stops_at_surface(self) -> None:
        outside = PointerTarget(TargetKind.OVERLAY, 9)
        surface_below = PointerTarget(TargetKind.SURFACE, parent=outside)
        child = PointerTarget(TargetKind.OTHER, parent=surface_below)
        self.assertFalse(originates_from_overlay(child))
        self.assertFalse(originates_from_overlay(None))

    def test_click_while_dragging_is_ignored(self) -> None:
        el = self.model.add(OverlayStyle().at(0, 0))
        self.drag.pointer_down(el.id, (1, 1), ELEMENT)
        self.assertIsNone(self.drag.surface_click((300, 300), SURFACE_TARGET))
        self.assertEqual(len(self.model), 1)


if __name__ == "__main__":
    unittest.main()
