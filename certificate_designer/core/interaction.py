"""
core/interaction.py - Pointer-driven drag/resize state machine.

The machine itself is the pure function ``transition(session, event, ...)``
which returns the next EditorSession plus the store effects to apply. The
InteractionController wraps it with the mutable bits a host needs: the
current session, a link to the FieldStore, and coalescing of pointer-move
bursts so only the latest position is applied per frame.

States:
    idle      -> dragging   pointer-down on a field body (captures drag offset)
    idle      -> resizing   pointer-down on a field's resize handle
    dragging  -> dragging   pointer-move (writes x/y)
    resizing  -> resizing   pointer-move (writes width/height)
    dragging/resizing -> idle   pointer-up or pointer-cancel

The selection is left alone when returning to idle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .geometry import (
    Point,
    Rect,
    capture_drag_offset,
    drag_position,
    field_pixel_rect,
    resize_dimensions,
    to_percent,
    to_pixels,
)
from .models import TemplateField

logger = logging.getLogger(__name__)

IDLE = "idle"
DRAGGING = "dragging"
RESIZING = "resizing"

MODES = (IDLE, DRAGGING, RESIZING)


@dataclass(frozen=True)
class EditorSession:
    mode: str = IDLE
    active_field_id: Optional[str] = None
    drag_offset: Optional[Point] = None   # grab point, percent of the page

    @property
    def is_active(self) -> bool:
        return self.mode != IDLE


IDLE_SESSION = EditorSession()


# ---------- events ----------

@dataclass(frozen=True)
class PointerDown:
    field_id: str
    position: Point
    on_handle: bool = False


@dataclass(frozen=True)
class PointerMove:
    position: Point


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class PointerCancel:
    pass


Event = Union[PointerDown, PointerMove, PointerUp, PointerCancel]


# ---------- effects ----------

@dataclass(frozen=True)
class SelectField:
    field_id: str


@dataclass(frozen=True)
class UpdateField:
    field_id: str
    patch: Dict[str, Any]


Effect = Union[SelectField, UpdateField]
Transition = Tuple[EditorSession, Tuple[Effect, ...]]


def transition(
    session: EditorSession,
    event: Event,
    field: Optional[TemplateField],
    page_rect: Optional[Rect],
) -> Transition:
    """
    Compute the next session and store effects for *event*.

    *field* is the store's current record for the field the event concerns
    (the pressed field for PointerDown, the active field otherwise) or None
    if it no longer exists. *page_rect* is the rendered page in the same
    pixel space as the pointer, or None while no page is displayed.
    """
    if isinstance(event, (PointerUp, PointerCancel)):
        return IDLE_SESSION, ()

    if isinstance(event, PointerDown):
        if session.is_active:
            return session, ()
        if field is None:
            logger.warning("pointer-down on missing field %r", event.field_id)
            return session, ()

        select = (SelectField(field.id),)
        if page_rect is None or page_rect.width <= 0 or page_rect.height <= 0:
            logger.warning("pointer-down before the page is displayed; selecting only")
            return session, select

        if event.on_handle:
            return EditorSession(RESIZING, field.id, None), select

        offset = capture_drag_offset(event.position, field, page_rect)
        # page percent, independent of the display scale
        offset = Point(to_percent(offset.x, page_rect.width), to_percent(offset.y, page_rect.height))
        return EditorSession(DRAGGING, field.id, offset), select

    if isinstance(event, PointerMove):
        if not session.is_active:
            return session, ()
        if field is None:
            logger.warning("active field %r disappeared mid-%s", session.active_field_id, session.mode)
            return IDLE_SESSION, ()
        if page_rect is None or page_rect.width <= 0 or page_rect.height <= 0:
            logger.warning("pointer-move without a displayed page; ignored")
            return session, ()

        if session.mode == DRAGGING:
            pct = session.drag_offset or Point(0.0, 0.0)
            offset = Point(to_pixels(pct.x, page_rect.width), to_pixels(pct.y, page_rect.height))
            x, y = drag_position(event.position, offset, page_rect)
            return session, (UpdateField(field.id, {"x": x, "y": y}),)

        width, height = resize_dimensions(
            event.position, field_pixel_rect(field, page_rect), page_rect
        )
        return session, (UpdateField(field.id, {"width": width, "height": height}),)

    raise TypeError(f"Unknown pointer event: {event!r}")


# ---------- stateful wrapper ----------

FrameScheduler = Callable[[Callable[[], None]], None]
SessionListener = Callable[[EditorSession], None]


class InteractionController:
    """
    Feeds pointer events through ``transition`` and applies the effects.

    With a *frame_scheduler* (e.g. a Qt single-shot timer) pointer moves
    are coalesced: a burst between two frames collapses to its last
    position. Without one, every move is applied immediately.
    """

    def __init__(
        self,
        store,
        page_rect: Callable[[], Optional[Rect]],
        frame_scheduler: Optional[FrameScheduler] = None,
    ):
        self.store = store
        self._page_rect = page_rect
        self._frame_scheduler = frame_scheduler
        self.session: EditorSession = IDLE_SESSION
        self._pending_move: Optional[Point] = None
        self._frame_requested = False
        self._listeners: List[SessionListener] = []

    # ---------- published state ----------
    @property
    def mode(self) -> str:
        return self.session.mode

    @property
    def active_field_id(self) -> Optional[str]:
        return self.session.active_field_id

    @property
    def has_pending_move(self) -> bool:
        return self._pending_move is not None

    def add_listener(self, callback: SessionListener) -> None:
        self._listeners.append(callback)

    # ---------- core dispatch ----------
    def dispatch(self, event: Event) -> Tuple[Effect, ...]:
        if isinstance(event, PointerDown):
            target = self.store.get(event.field_id)
        else:
            target = self.store.get(self.session.active_field_id)

        new_session, effects = transition(self.session, event, target, self._page_rect())
        self._apply(effects)

        if new_session != self.session:
            old_mode = self.session.mode
            self.session = new_session
            if new_session.mode != old_mode:
                logger.debug("interaction %s -> %s (%s)", old_mode, new_session.mode, new_session.active_field_id)
            for callback in list(self._listeners):
                callback(new_session)
        return effects

    def _apply(self, effects: Tuple[Effect, ...]) -> None:
        for effect in effects:
            if isinstance(effect, SelectField):
                self.store.select(effect.field_id)
            elif isinstance(effect, UpdateField):
                self.store.update(effect.field_id, effect.patch)

    # ---------- pointer API ----------
    def pointer_down(self, field_id: str, position: Point, on_handle: bool = False) -> None:
        self._pending_move = None
        self.dispatch(PointerDown(field_id, position, on_handle))

    def pointer_move(self, position: Point) -> None:
        if not self.session.is_active:
            return
        self._pending_move = position
        if self._frame_scheduler is None:
            self.flush()
        elif not self._frame_requested:
            self._frame_requested = True
            self._frame_scheduler(self.flush)

    def flush(self) -> bool:
        """Apply the latest pending move, if any. Returns True if applied."""
        self._frame_requested = False
        position, self._pending_move = self._pending_move, None
        if position is None or not self.session.is_active:
            return False
        self.dispatch(PointerMove(position))
        return True

    def pointer_up(self) -> None:
        if not self.session.is_active:
            return
        # the last position the operator saw must not be lost
        self.flush()
        self.dispatch(PointerUp())

    def pointer_cancel(self) -> None:
        self._pending_move = None
        if self.session.is_active:
            self.dispatch(PointerCancel())
