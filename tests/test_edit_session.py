"""
Tests for the erase-mode pointer state machine.
"""

import unittest

from PV_Libs.ChromaKeyLib.edit_session import EditState, EraseSession


class RecordingPainter:
    """Paint callback that accepts points with x >= 0."""

    def __init__(self):
        self.calls = []

    def __call__(self, x, y):
        self.calls.append((x, y))
        return x >= 0


class TestEraseSession(unittest.TestCase):
    def setUp(self):
        self.painter = RecordingPainter()
        self.session = EraseSession(self.painter)

    def test_starts_idle(self):
        self.assertEqual(self.session.state, EditState.IDLE)
        self.assertFalse(self.session.is_painting)

    def test_press_inside_starts_painting(self):
        self.assertTrue(self.session.pointer_down(5, 5))
        self.assertEqual(self.session.state, EditState.PAINTING)
        self.assertEqual(self.painter.calls, [(5, 5)])

    def test_press_outside_stays_idle(self):
        self.assertFalse(self.session.pointer_down(-1, 5))
        self.assertEqual(self.session.state, EditState.IDLE)

    def test_move_without_press_does_nothing(self):
        self.assertFalse(self.session.pointer_move(5, 5))
        self.assertEqual(self.painter.calls, [])

    def test_drag_paints_each_move(self):
        self.session.pointer_down(0, 0)
        self.session.pointer_move(10, 0)
        self.session.pointer_move(40, 0)

        # discrete dabs only, nothing interpolated in between
        self.assertEqual(self.painter.calls, [(0, 0), (10, 0), (40, 0)])
        self.assertEqual(self.session.dab_count, 3)

    def test_move_outside_image_keeps_painting(self):
        self.session.pointer_down(0, 0)
        self.assertFalse(self.session.pointer_move(-3, 0))
        self.assertTrue(self.session.is_painting)
        self.assertTrue(self.session.pointer_move(3, 0))

    def test_pointer_up_returns_to_idle(self):
        self.session.pointer_down(0, 0)
        self.session.pointer_up()
        self.assertEqual(self.session.state, EditState.IDLE)
        self.assertFalse(self.session.pointer_move(1, 1))

    def test_pointer_leave_returns_to_idle(self):
        self.session.pointer_down(0, 0)
        self.session.pointer_leave()
        self.assertEqual(self.session.state, EditState.IDLE)

    def test_requires_callable(self):
        with self.assertRaises(ValueError):
            EraseSession("not callable")
