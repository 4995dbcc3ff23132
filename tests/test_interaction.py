"""
Tests for the drag/resize state machine and pointer-move coalescing.
"""

import random

import pytest

from certificate_designer.core.geometry import Point, Rect, field_pixel_rect
from certificate_designer.core.interaction import (
    DRAGGING,
    IDLE,
    IDLE_SESSION,
    RESIZING,
    EditorSession,
    InteractionController,
    PointerCancel,
    PointerDown,
    PointerMove,
    PointerUp,
    SelectField,
    UpdateField,
    transition,
)
from certificate_designer.core.models import QR_CODE, STUDENT_NAME, TemplateField
from certificate_designer.core.store import FieldStore

PAGE = Rect(0.0, 0.0, 1000.0, 800.0)


class FakeFrames:
    """Collects frame callbacks; ``run()`` plays one frame."""

    def __init__(self):
        self.pending = []

    def __call__(self, callback):
        self.pending.append(callback)

    def run(self):
        callbacks, self.pending = self.pending, []
        for cb in callbacks:
            cb()


def _controller(frames=None, page=PAGE):
    store = FieldStore()
    ctl = InteractionController(store, lambda: page, frames)
    return store, ctl


def _center(store, field_id):
    r = field_pixel_rect(store.get(field_id), PAGE)
    return Point(r.left + r.width / 2, r.top + r.height / 2)


def _handle(store, field_id):
    r = field_pixel_rect(store.get(field_id), PAGE)
    return Point(r.right - 2, r.bottom - 2)


class TestTransition:
    """The pure transition function."""

    def test_down_on_body_starts_drag(self):
        f = TemplateField(id="a", type=STUDENT_NAME)
        session, effects = transition(IDLE_SESSION, PointerDown("a", Point(510, 410)), f, PAGE)
        assert session.mode == DRAGGING
        assert session.active_field_id == "a"
        # 10 px on a 1000 x 800 page
        assert (session.drag_offset.x, session.drag_offset.y) == pytest.approx((1.0, 1.25))
        assert effects == (SelectField("a"),)

    def test_down_on_handle_starts_resize(self):
        f = TemplateField(id="a", type=STUDENT_NAME)
        session, effects = transition(IDLE_SESSION, PointerDown("a", Point(0, 0), on_handle=True), f, PAGE)
        assert session == EditorSession(RESIZING, "a", None)
        assert effects == (SelectField("a"),)

    def test_move_while_idle_does_nothing(self):
        f = TemplateField(id="a", type=STUDENT_NAME)
        assert transition(IDLE_SESSION, PointerMove(Point(1, 1)), f, PAGE) == (IDLE_SESSION, ())

    def test_drag_move_emits_position(self):
        f = TemplateField(id="a", type=STUDENT_NAME)
        session = EditorSession(DRAGGING, "a", Point(0, 0))
        _, effects = transition(session, PointerMove(Point(100, 80)), f, PAGE)
        assert effects == (UpdateField("a", {"x": 10.0, "y": 10.0}),)

    def test_resize_move_emits_size(self):
        f = TemplateField(id="a", type=STUDENT_NAME, x=10, y=10)
        session = EditorSession(RESIZING, "a", None)
        _, effects = transition(session, PointerMove(Point(400, 240)), f, PAGE)
        assert effects == (UpdateField("a", {"width": 30.0, "height": 20.0}),)

    @pytest.mark.parametrize("event", [PointerUp(), PointerCancel()])
    def test_up_and_cancel_end_interaction(self, event):
        session = EditorSession(DRAGGING, "a", Point(0, 0))
        assert transition(session, event, None, None) == (IDLE_SESSION, ())

    def test_move_on_deleted_field_returns_to_idle(self):
        session = EditorSession(DRAGGING, "gone", Point(0, 0))
        assert transition(session, PointerMove(Point(5, 5)), None, PAGE) == (IDLE_SESSION, ())

    def test_down_on_deleted_field_ignored(self):
        assert transition(IDLE_SESSION, PointerDown("gone", Point(5, 5)), None, PAGE) == (IDLE_SESSION, ())

    def test_down_without_page_only_selects(self):
        f = TemplateField(id="a", type=STUDENT_NAME)
        assert transition(IDLE_SESSION, PointerDown("a", Point(5, 5)), f, None) == (IDLE_SESSION, (SelectField("a"),))

    def test_second_down_while_active_ignored(self):
        f = TemplateField(id="b", type=STUDENT_NAME)
        session = EditorSession(DRAGGING, "a", Point(0, 0))
        assert transition(session, PointerDown("b", Point(5, 5)), f, PAGE) == (session, ())


class TestScenarios:
    def test_drag_student_name(self):
        """Add studentName, drag by (+10%, -5%) -> (60, 45)."""
        store, ctl = _controller()
        fid = store.add(STUDENT_NAME)
        start = _center(store, fid)

        ctl.pointer_down(fid, start)
        ctl.pointer_move(start + Point(0.10 * PAGE.width, -0.05 * PAGE.height))
        ctl.pointer_up()

        f = store.get(fid)
        assert (f.x, f.y) == pytest.approx((60.0, 45.0))
        assert (f.width, f.height) == (35.0, 12.0)
        assert ctl.mode == IDLE

    def test_resize_qr_to_floor(self):
        """Add qrCode, resize to width 2% -> clamped to 5."""
        store, ctl = _controller()
        fid = store.add(QR_CODE)
        r = field_pixel_rect(store.get(fid), PAGE)

        ctl.pointer_down(fid, _handle(store, fid), on_handle=True)
        assert ctl.mode == RESIZING
        ctl.pointer_move(Point(r.left + 0.02 * PAGE.width, r.bottom))
        ctl.pointer_up()

        f = store.get(fid)
        assert f.width == 5.0
        assert f.height == pytest.approx(20.0)

    def test_selection_survives_release(self):
        store, ctl = _controller()
        a = store.add(STUDENT_NAME)
        b = store.add(QR_CODE)
        assert store.selected_id == b

        ctl.pointer_down(a, _center(store, a))
        ctl.pointer_up()
        assert store.selected_id == a

    def test_release_far_outside_still_terminates(self):
        store, ctl = _controller()
        fid = store.add(STUDENT_NAME)
        ctl.pointer_down(fid, _center(store, fid))
        ctl.pointer_move(Point(-9000, 12000))
        ctl.pointer_up()
        f = store.get(fid)
        assert ctl.mode == IDLE
        assert (f.x, f.y) == (0.0, 100.0)

    def test_field_deleted_mid_drag(self):
        store, ctl = _controller()
        fid = store.add(STUDENT_NAME)
        ctl.pointer_down(fid, _center(store, fid))
        store.remove(fid)
        ctl.pointer_move(Point(10, 10))
        assert ctl.mode == IDLE
        ctl.pointer_up()
        assert len(store) == 0

    def test_zoom_mid_drag_keeps_grab_point(self):
        """The display scale doubles between two moves; the field must not jump."""
        store = FieldStore()
        pages = [PAGE]
        ctl = InteractionController(store, lambda: pages[0])
        fid = store.add(STUDENT_NAME)
        ctl.pointer_down(fid, _center(store, fid))

        pages[0] = Rect(0.0, 0.0, 2000.0, 1600.0)
        r = field_pixel_rect(store.get(fid), pages[0])
        ctl.pointer_move(Point(r.left + r.width / 2, r.top + r.height / 2))
        ctl.pointer_up()

        f = store.get(fid)
        assert (f.x, f.y) == pytest.approx((50.0, 50.0))


class TestInvariants:
    @pytest.mark.parametrize("seed", range(8))
    def test_random_sequences_keep_bounds_and_terminate(self, seed):
        rng = random.Random(seed)
        store, ctl = _controller()
        ids = [store.add(STUDENT_NAME), store.add(QR_CODE)]

        for _ in range(30):
            fid = rng.choice(ids)
            r = field_pixel_rect(store.get(fid), PAGE)
            on_handle = rng.random() < 0.5
            start = Point(r.right - 1, r.bottom - 1) if on_handle else Point(r.left + 1, r.top + 1)
            ctl.pointer_down(fid, start, on_handle=on_handle)
            for _ in range(rng.randint(0, 6)):
                ctl.pointer_move(Point(rng.uniform(-2000, 3000), rng.uniform(-2000, 3000)))
            if rng.random() < 0.2:
                ctl.pointer_cancel()
            else:
                ctl.pointer_up()

            assert ctl.mode == IDLE
            for f in store.fields:
                assert 0.0 <= f.x <= 100.0
                assert 0.0 <= f.y <= 100.0
                assert f.width >= 5.0
                assert f.height >= 5.0


class TestCoalescing:
    def test_burst_applies_only_latest(self):
        frames = FakeFrames()
        store, ctl = _controller(frames)
        fid = store.add(STUDENT_NAME)
        start = _center(store, fid)
        ctl.pointer_down(fid, start)

        writes = []
        store.add_listener(lambda: writes.append(store.get(fid).x))
        for dx in (10, 20, 30, 40, 50):
            ctl.pointer_move(start + Point(dx, 0))

        assert len(frames.pending) == 1
        assert ctl.has_pending_move
        frames.run()
        assert writes == [pytest.approx(55.0)]

    def test_pointer_up_flushes_pending_move(self):
        frames = FakeFrames()
        store, ctl = _controller(frames)
        fid = store.add(STUDENT_NAME)
        start = _center(store, fid)
        ctl.pointer_down(fid, start)
        ctl.pointer_move(start + Point(100, 0))
        ctl.pointer_up()
        assert store.get(fid).x == pytest.approx(60.0)
        # the frame that was already requested finds nothing to do
        frames.run()
        assert store.get(fid).x == pytest.approx(60.0)

    def test_cancel_drops_pending_move(self):
        frames = FakeFrames()
        store, ctl = _controller(frames)
        fid = store.add(STUDENT_NAME)
        start = _center(store, fid)
        ctl.pointer_down(fid, start)
        ctl.pointer_move(start + Point(100, 0))
        ctl.pointer_cancel()
        frames.run()
        assert store.get(fid).x == 50.0

    def test_session_listener(self):
        store, ctl = _controller()
        fid = store.add(STUDENT_NAME)
        modes = []
        ctl.add_listener(lambda s: modes.append(s.mode))
        ctl.pointer_down(fid, _center(store, fid))
        ctl.pointer_up()
        assert modes == [DRAGGING, IDLE]
