from __future__ import annotations

import os
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..core.geometry import Rect
from ..core.interaction import DRAGGING, IDLE, RESIZING
from ..core.models import IMAGE, TemplateField, type_color, type_label

SELECTION_COLOR = "#0078d7"


class FieldItem(QtWidgets.QGraphicsRectItem):
    """
    Rectangle for one template field.

    Purely a view: position, size and selection come from the editor via
    ``sync``; mouse handling lives in PageView so the interaction state
    machine sees every event.
    """

    def __init__(self, field: TemplateField, handle_size: float = 16.0, parent=None):
        super().__init__(parent)
        self.field = field
        self.handle_size = float(handle_size)
        self._selected = False
        self._mode = IDLE
        self.setAcceptHoverEvents(False)
        self.setZValue(10)

    @property
    def field_id(self) -> str:
        return self.field.id

    def sync(self, field: TemplateField, rect: Rect, selected: bool, mode: str = IDLE) -> None:
        self.field = field
        self._selected = bool(selected)
        self._mode = mode if selected else IDLE
        self.setRect(QtCore.QRectF(rect.left, rect.top, rect.width, rect.height))
        self.setZValue(20 if selected else 10)
        self.setToolTip(type_label(field.type))
        self.update()

    def _handle_rect(self) -> QtCore.QRectF:
        r = self.rect()
        s = self.handle_size
        return QtCore.QRectF(r.right() - s, r.bottom() - s, s, s)

    def _caption(self) -> str:
        label = type_label(self.field.type)
        if self.field.type == IMAGE and self.field.image_url:
            name = os.path.basename(self.field.image_url.rstrip("/")) or self.field.image_url
            return f"{label}\n{name}"
        return label

    def paint(
        self,
        painter: QtGui.QPainter,
        option: QtWidgets.QStyleOptionGraphicsItem,
        widget=None,
    ) -> None:
        r = self.rect()
        color = QtGui.QColor(type_color(self.field.type))

        fill = QtGui.QColor(color)
        fill.setAlpha(70 if self._mode != IDLE else 40)
        painter.fillRect(r, fill)

        pen = QtGui.QPen(QtGui.QColor(SELECTION_COLOR) if self._selected else color)
        pen.setWidth(2 if self._selected else 1)
        if self._mode != IDLE:
            pen.setStyle(QtCore.Qt.DashLine)
        painter.setPen(pen)
        painter.setBrush(QtCore.Qt.NoBrush)
        painter.drawRect(r)

        font = painter.font()
        font.setPointSizeF(max(6.0, min(11.0, r.height() / 3.0)))
        font.setBold(self._selected)
        painter.setFont(font)
        painter.setPen(color.darker(130))
        painter.drawText(r, QtCore.Qt.AlignCenter | QtCore.Qt.TextWordWrap, self._caption())

        if self._selected:
            painter.fillRect(self._handle_rect(), QtGui.QColor(SELECTION_COLOR))

    def cursor_for(self, on_handle: bool) -> Optional[QtCore.Qt.CursorShape]:
        if self._mode == RESIZING or on_handle:
            return QtCore.Qt.SizeFDiagCursor
        if self._mode == DRAGGING:
            return QtCore.Qt.ClosedHandCursor
        return QtCore.Qt.OpenHandCursor
