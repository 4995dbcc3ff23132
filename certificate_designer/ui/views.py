from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..core.engine import STATUS_LOADING, CertificateTemplateEditor
from ..core.geometry import Point
from ..core.interaction import IDLE
from .items import FieldItem
from .page_surface import DocumentSurface

logger = logging.getLogger(__name__)


class PageView(QtWidgets.QGraphicsView):
    """
    Editable page: the rendered document plus one FieldItem per field.

    The page is drawn already scaled, so scene coordinates are the editor's
    pixel space with the page's top-left at (0, 0). Left-button input is
    routed through the editor's interaction state machine; middle button
    or Space+Left pans.
    """

    def __init__(self, editor: CertificateTemplateEditor, surface: DocumentSurface, parent=None):
        super().__init__(parent)
        self.editor = editor
        self.surface = surface

        self.setScene(QtWidgets.QGraphicsScene(self))
        self.setRenderHints(
            QtGui.QPainter.Antialiasing
            | QtGui.QPainter.TextAntialiasing
            | QtGui.QPainter.SmoothPixmapTransform
        )
        self.setViewportUpdateMode(QtWidgets.QGraphicsView.FullViewportUpdate)
        self.setAlignment(QtCore.Qt.AlignCenter)
        self.setMouseTracking(True)
        self.setFocusPolicy(QtCore.Qt.StrongFocus)

        self._page_item = QtWidgets.QGraphicsPixmapItem()
        self._page_item.setTransformationMode(QtCore.Qt.SmoothTransformation)
        self.scene().addItem(self._page_item)
        self._page_key = None

        self._items: Dict[str, FieldItem] = {}
        self._grab_filter_installed = False

        self._panning = False
        self._pan_last_pos = QtCore.QPoint()
        self._space_held = False

        editor.add_listener(self.refresh)
        editor.store.add_listener(self._sync_items)
        editor.interaction.add_listener(self._on_session_changed)

    # ------------ editor -> view ------------
    def refresh(self) -> None:
        self._refresh_page()
        self._sync_items()
        self.viewport().update()

    def _refresh_page(self) -> None:
        size = self.editor.page_size
        if size is None:
            self._page_item.setPixmap(QtGui.QPixmap())
            self._page_key = None
            self.scene().setSceneRect(QtCore.QRectF())
            return

        key = (self.surface.generation, self.editor.scale)
        if key != self._page_key:
            # set first: a failed render notifies the editor, which refreshes this view
            self._page_key = key
            img = self.surface.page_image(self.editor.scale)
            self._page_item.setPixmap(QtGui.QPixmap.fromImage(img) if not img.isNull() else QtGui.QPixmap())

        w, h = size.width * self.editor.scale, size.height * self.editor.scale
        self.scene().setSceneRect(QtCore.QRectF(0, 0, w, h))

    def _sync_items(self) -> None:
        store = self.editor.store
        page = self.editor.page_rect()
        session = self.editor.interaction.session

        live = set()
        for f in store.fields:
            live.add(f.id)
            item = self._items.get(f.id)
            if item is None:
                item = FieldItem(f, self.editor.config.handle_size_px)
                self.scene().addItem(item)
                self._items[f.id] = item
            if page is None:
                item.setVisible(False)
                continue
            item.setVisible(True)
            rect = self.editor.field_rect(f.id)
            mode = session.mode if session.active_field_id == f.id else IDLE
            item.sync(f, rect, f.id == store.selected_id, mode)

        for field_id in list(self._items):
            if field_id not in live:
                self.scene().removeItem(self._items.pop(field_id))

    def _on_session_changed(self, session) -> None:
        if session.is_active and not self._grab_filter_installed:
            QtWidgets.QApplication.instance().installEventFilter(self)
            self._grab_filter_installed = True
        elif not session.is_active and self._grab_filter_installed:
            QtWidgets.QApplication.instance().removeEventFilter(self)
            self._grab_filter_installed = False
        self._sync_items()

    # ------------ pointer helpers ------------
    def _scene_point(self, pos: QtCore.QPoint) -> Point:
        p = self.mapToScene(pos)
        return Point(p.x(), p.y())

    def _update_hover_cursor(self, pos: QtCore.QPoint) -> None:
        if self._panning or self._space_held:
            return
        hit = self.editor.field_at(self._scene_point(pos))
        if hit is None:
            self.viewport().unsetCursor()
            return
        field_id, on_handle = hit
        item = self._items.get(field_id)
        if item is not None:
            self.viewport().setCursor(item.cursor_for(on_handle))

    # ------------ global release while dragging/resizing ------------
    def eventFilter(self, watched: QtCore.QObject, event: QtCore.QEvent) -> bool:
        etype = event.type()
        if etype == QtCore.QEvent.MouseButtonRelease and event.button() == QtCore.Qt.LeftButton:
            # release may land on any widget, or outside the window
            self.editor.pointer_up()
        elif etype == QtCore.QEvent.ApplicationDeactivate:
            self.editor.pointer_cancel()
        return False

    # ------------ mouse ------------
    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        # Middle button OR Space+Left = pan
        if event.button() == QtCore.Qt.MiddleButton or (
            event.button() == QtCore.Qt.LeftButton and self._space_held
        ):
            self._panning = True
            self._pan_last_pos = event.pos()
            self.viewport().setCursor(QtCore.Qt.ClosedHandCursor)
            event.accept()
            return

        if event.button() == QtCore.Qt.LeftButton:
            if self.editor.pointer_down(self._scene_point(event.pos())) is not None:
                self._update_hover_cursor(event.pos())
                event.accept()
                return

        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._panning:
            delta = event.pos() - self._pan_last_pos
            self._pan_last_pos = event.pos()
            hbar = self.horizontalScrollBar()
            vbar = self.verticalScrollBar()
            hbar.setValue(hbar.value() - delta.x())
            vbar.setValue(vbar.value() - delta.y())
            event.accept()
            return

        if self.editor.interaction.session.is_active:
            self.editor.pointer_move(self._scene_point(event.pos()))
            event.accept()
            return

        self._update_hover_cursor(event.pos())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._panning and event.button() in (QtCore.Qt.MiddleButton, QtCore.Qt.LeftButton):
            self._panning = False
            self.viewport().setCursor(QtCore.Qt.OpenHandCursor if self._space_held else QtCore.Qt.ArrowCursor)
            event.accept()
            return

        if event.button() == QtCore.Qt.LeftButton and self.editor.interaction.session.is_active:
            self.editor.pointer_up()
            self._update_hover_cursor(event.pos())
            event.accept()
            return

        super().mouseReleaseEvent(event)

    # ------------ keys ------------
    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:
        if event.key() == QtCore.Qt.Key_Escape and self.editor.interaction.session.is_active:
            self.editor.pointer_cancel()
            event.accept()
            return

        if event.key() == QtCore.Qt.Key_Space:
            if not self._space_held:
                self._space_held = True
                if not self._panning:
                    self.viewport().setCursor(QtCore.Qt.OpenHandCursor)
            event.accept()
            return

        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QtGui.QKeyEvent) -> None:
        if event.key() == QtCore.Qt.Key_Space and not event.isAutoRepeat():
            self._space_held = False
            if not self._panning:
                self.viewport().setCursor(QtCore.Qt.ArrowCursor)
            event.accept()
            return

        super().keyReleaseEvent(event)

    # ------------ zoom ------------
    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:
        """Ctrl + wheel steps the editor zoom; plain wheel scrolls."""
        if event.modifiers() & QtCore.Qt.ControlModifier:
            angle = event.angleDelta().y()
            if angle > 0:
                self.editor.zoom_in()
            elif angle < 0:
                self.editor.zoom_out()
            event.accept()
            return
        super().wheelEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self.editor.set_viewport(self.viewport().width(), self.viewport().height())

    # ------------ painting ------------
    def drawBackground(self, painter: QtGui.QPainter, rect: QtCore.QRectF) -> None:
        painter.fillRect(rect, QtGui.QColor("#2b2b2b"))

        if self.editor.page_size is None:
            return
        # subtle gray border around the page
        pen = QtGui.QPen(QtGui.QColor("#999999"))
        pen.setWidth(1)
        painter.setPen(pen)
        painter.setBrush(QtCore.Qt.NoBrush)
        painter.drawRect(self.sceneRect())

    def drawForeground(self, painter: QtGui.QPainter, rect: QtCore.QRectF) -> None:
        super().drawForeground(painter, rect)

        status = self.editor.render_status
        if status.is_error:
            text = status.message
        elif status.state == STATUS_LOADING:
            text = "Loading document..."
        elif self.editor.page_size is None:
            text = "Open a certificate background to start placing fields."
        else:
            return

        # view coordinates, so the message stays centered
        painter.save()
        painter.resetTransform()
        painter.setPen(QtGui.QColor("#ff7b72") if status.is_error else QtGui.QColor("#dddddd"))
        painter.drawText(
            self.viewport().rect().adjusted(20, 20, -20, -20),
            QtCore.Qt.AlignCenter | QtCore.Qt.TextWordWrap,
            text,
        )
        painter.restore()

    def release_grab(self) -> None:
        if self._grab_filter_installed:
            QtWidgets.QApplication.instance().removeEventFilter(self)
            self._grab_filter_installed = False

    def item_for(self, field_id: str) -> Optional[FieldItem]:
        return self._items.get(field_id)
