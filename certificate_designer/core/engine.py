"""
core/engine.py - The template editor facade.

CertificateTemplateEditor wires the FieldStore, ZoomController,
InteractionController and PreviewRenderer together and is the only object
the Qt host talks to. It owns no I/O: the document surface reports page
sizes and render errors to it, and the persistence layer reads
``get_fields()`` and calls ``initialize()``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import EditorConfig
from .exceptions import RenderError, friendly_render_message
from .geometry import Point, Rect, Size, field_pixel_rect, hits_handle, page_rect_for
from .interaction import FrameScheduler, InteractionController
from .models import STUDENT_NAME, TemplateField
from .preview import PreviewBlock, PreviewRenderer
from .store import FieldStore
from .zoom import ZoomController

logger = logging.getLogger(__name__)

# render status
STATUS_IDLE = "idle"
STATUS_LOADING = "loading"
STATUS_LOADED = "loaded"
STATUS_RETRYING = "retrying"
STATUS_FAILED = "failed"

Scheduler = Callable[[int, Callable[[], None]], None]
Listener = Callable[[], None]


@dataclass(frozen=True)
class RenderStatus:
    state: str = STATUS_IDLE
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.state in (STATUS_RETRYING, STATUS_FAILED)


def _call_now(delay_ms: int, callback: Callable[[], None]) -> None:
    callback()


class CertificateTemplateEditor:
    """
    Editor state for one template session.

    *scheduler(delay_ms, callback)* is used for the render retry and
    *frame_scheduler(callback)* for pointer-move coalescing; the Qt host
    passes QTimer.singleShot based callables, tests pass fakes.
    """

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        scheduler: Optional[Scheduler] = None,
        frame_scheduler: Optional[FrameScheduler] = None,
        preview_renderer: Optional[PreviewRenderer] = None,
    ):
        self.config = config or EditorConfig()
        self.store = FieldStore(default_font_family=self.config.default_font_family)
        self.zoom = ZoomController(self.config)
        self.interaction = InteractionController(self.store, self.page_rect, frame_scheduler)
        self.previewer = preview_renderer or PreviewRenderer(self.config)

        self._scheduler: Scheduler = scheduler or _call_now
        self._reload: Optional[Callable[[], None]] = None
        self._listeners: List[Listener] = []

        self.page_origin = Point(0.0, 0.0)
        self.render_status = RenderStatus()
        self._retries = 0
        self._seed_pending = False

    # ---------- observation ----------
    def add_listener(self, callback: Listener) -> None:
        """Called when the scale, page or render status changes."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def set_reload_handler(self, callback: Optional[Callable[[], None]]) -> None:
        """Host hook that asks the document surface to render the page again."""
        self._reload = callback

    # ---------- derived state ----------
    @property
    def scale(self) -> float:
        return self.zoom.scale

    @property
    def page_size(self) -> Optional[Size]:
        return self.zoom.page_size

    @property
    def selected_field(self) -> Optional[TemplateField]:
        return self.store.selected_field

    def set_page_origin(self, origin: Point) -> None:
        """Top-left of the rendered page in the host's pointer coordinates."""
        self.page_origin = origin

    def page_rect(self) -> Optional[Rect]:
        size = self.zoom.page_size
        if size is None or not size.is_valid:
            return None
        return page_rect_for(size, self.zoom.scale, self.page_origin)

    def field_rect(self, field_id: str) -> Optional[Rect]:
        page = self.page_rect()
        f = self.store.get(field_id)
        if page is None or f is None:
            return None
        return field_pixel_rect(f, page)

    def field_at(self, position: Point) -> Optional[Tuple[str, bool]]:
        """
        (field id, on resize handle) under *position*, or None.

        The selected field wins, then later fields over earlier ones.
        """
        page = self.page_rect()
        if page is None:
            return None

        selected = self.store.selected_field
        ordered = list(reversed(self.store.fields))
        if selected is not None:
            ordered.remove(selected)
            ordered.insert(0, selected)

        for f in ordered:
            rect = field_pixel_rect(f, page)
            if rect.contains(position):
                return f.id, hits_handle(position, rect, self.config.handle_size_px)
        return None

    # ---------- load / save ----------
    def initialize(self, fields: Iterable[TemplateField]) -> None:
        """
        Start a session with *fields*. An empty list seeds one studentName
        field, immediately if the page is already displayed, otherwise once
        its size is first reported.
        """
        fields = list(fields or [])
        self.interaction.pointer_cancel()
        self.store.replace_all(fields)
        if fields:
            self._seed_pending = False
            return

        if self.zoom.page_loaded:
            self._seed_default_field()
        else:
            self._seed_pending = True

    def _seed_default_field(self) -> None:
        self._seed_pending = False
        field_id = self.store.add(STUDENT_NAME)
        logger.debug("Seeded default field %s", field_id)

    def get_fields(self) -> List[TemplateField]:
        return self.store.snapshot()

    # ---------- page lifecycle ----------
    def set_viewport(self, container_width: float, container_height: float) -> None:
        """Container size of the editor view; the configured padding is removed here."""
        pad = self.config.viewport_padding
        self.zoom.set_viewport(container_width - pad, container_height - pad)

    def begin_document_load(self) -> None:
        """A new document is about to be rendered; the next page size fits again."""
        self.interaction.pointer_cancel()
        self.zoom.reset_document()
        self._retries = 0
        self.render_status = RenderStatus(STATUS_LOADING)
        self._notify()

    def on_page_size_known(self, width: float, height: float) -> float:
        scale = self.zoom.on_page_size_known(width, height)
        if self.zoom.page_size is None:
            return scale

        # the retry count is per document: a page size does not prove the page painted
        self.render_status = RenderStatus(STATUS_LOADED)
        if self._seed_pending and len(self.store) == 0:
            self._seed_default_field()
        self._seed_pending = False
        self._notify()
        return scale

    def on_render_error(self, message: str) -> None:
        """
        Surface a render failure. The first failures within the retry allowance
        schedule a reload; after that the error state persists until the next
        document load. Fields are untouched either way.
        """
        friendly = friendly_render_message(message)
        if self._retries < self.config.render_max_retries:
            self._retries += 1
            logger.warning("Page render failed (%s); retry %d in %d ms", message, self._retries, self.config.render_retry_delay_ms)
            self.render_status = RenderStatus(STATUS_RETRYING, friendly)
            self._notify()
            self._scheduler(self.config.render_retry_delay_ms, self._retry_render)
        else:
            logger.error("Page render failed after %d retr%s: %s", self._retries, "y" if self._retries == 1 else "ies", message)
            self.render_status = RenderStatus(STATUS_FAILED, friendly)
            self._notify()

    def _retry_render(self) -> None:
        if self.render_status.state != STATUS_RETRYING:
            return
        logger.info("Retrying page render")
        self.render_status = RenderStatus(STATUS_LOADING)
        self._notify()
        if self._reload is not None:
            self._reload()

    # ---------- field actions ----------
    def add_field(self, field_type: str) -> str:
        return self.store.add(field_type)

    def update_field(self, field_id: str, patch: Dict[str, Any]) -> bool:
        return self.store.update(field_id, patch)

    def delete_field(self, field_id: str) -> bool:
        return self.store.remove(field_id)

    def select_field(self, field_id: Optional[str]) -> Optional[str]:
        return self.store.select(field_id)

    def set_field_image(self, field_id: str, url: Optional[str]) -> bool:
        return self.store.update(field_id, {"image_url": url})

    # ---------- pointer ----------
    def pointer_down(self, position: Point) -> Optional[str]:
        """Hit-test *position* and start a drag or resize. Returns the field id hit."""
        hit = self.field_at(position)
        if hit is None:
            return None
        field_id, on_handle = hit
        self.interaction.pointer_down(field_id, position, on_handle)
        return field_id

    def pointer_move(self, position: Point) -> None:
        self.interaction.pointer_move(position)

    def pointer_up(self) -> None:
        self.interaction.pointer_up()

    def pointer_cancel(self) -> None:
        self.interaction.pointer_cancel()

    # ---------- zoom ----------
    def zoom_in(self) -> float:
        scale = self.zoom.zoom_in()
        self._notify()
        return scale

    def zoom_out(self) -> float:
        scale = self.zoom.zoom_out()
        self._notify()
        return scale

    def reset_zoom(self) -> float:
        scale = self.zoom.reset_zoom()
        self._notify()
        return scale

    # ---------- preview ----------
    def _require_page(self) -> Size:
        size = self.zoom.page_size
        if size is None:
            raise RenderError("The page has not been displayed yet")
        return size

    def preview_layout(self, scale: float = 1.0, data: Optional[Mapping[str, Any]] = None) -> List[PreviewBlock]:
        return self.previewer.layout(self.store.fields, self._require_page(), scale, data)

    def render_preview(self, scale: float = 1.0, data: Optional[Mapping[str, Any]] = None, background=None):
        """Pillow image of the certificate with sample (or *data*) content."""
        return self.previewer.render(self.store.fields, self._require_page(), scale, data, background)
