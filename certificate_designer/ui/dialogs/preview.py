# certificate_designer/ui/dialogs/preview.py
"""
Certificate preview dialog.

Every zoom step renders the certificate again through the editor's
PreviewRenderer at that scale, so text and QR codes stay sharp. The data
panel fills real values per field type; empty entries show sample content.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, Optional

from PIL import Image
from PySide6 import QtCore, QtGui, QtWidgets

from ...core.engine import CertificateTemplateEditor
from ...core.exceptions import RenderError
from ...core.models import COMPLETION_DATE, FIELD_TYPES, IMAGE, QR_CODE, type_label
from ...core.preview import SAMPLE_VALUES
from ..imaging import pil_to_qimage

logger = logging.getLogger(__name__)

BackgroundProvider = Callable[[float], Optional[Image.Image]]

# field types a value can be typed in for
DATA_TYPES = tuple(t for t in FIELD_TYPES if t != IMAGE)

_PRECISION = 6


class CertificatePreviewDialog(QtWidgets.QDialog):
    def __init__(
        self,
        editor: CertificateTemplateEditor,
        background_for: Optional[BackgroundProvider] = None,
        data: Optional[Mapping[str, str]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Certificate Preview")
        self.editor = editor
        self._background_for = background_for
        self.scale = 1.0
        self.current_image = QtGui.QImage()
        self.edits: Dict[str, QtWidgets.QLineEdit] = {}

        self._build_ui(data or {})
        self.resize(1100, 760)
        self.refresh()

    def _build_ui(self, data: Mapping[str, str]) -> None:
        layout = QtWidgets.QVBoxLayout(self)

        bar = QtWidgets.QHBoxLayout()
        self.lbl_info = QtWidgets.QLabel()
        bar.addWidget(self.lbl_info)
        bar.addStretch()

        for text, slot in (("Zoom Out", self.zoom_out), ("Zoom In", self.zoom_in), ("Fit", self.zoom_fit)):
            btn = QtWidgets.QToolButton()
            btn.setText(text)
            btn.clicked.connect(slot)
            bar.addWidget(btn)
        self.lbl_zoom = QtWidgets.QLabel()
        self.lbl_zoom.setMinimumWidth(50)
        self.lbl_zoom.setAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
        bar.addWidget(self.lbl_zoom)
        layout.addLayout(bar)

        body = QtWidgets.QHBoxLayout()

        self.lbl_image = QtWidgets.QLabel()
        self.lbl_image.setAlignment(QtCore.Qt.AlignCenter)
        self.scroll = QtWidgets.QScrollArea()
        self.scroll.setWidget(self.lbl_image)
        self.scroll.setAlignment(QtCore.Qt.AlignCenter)
        body.addWidget(self.scroll, 1)

        grp_data = QtWidgets.QGroupBox("Certificate Data")
        form = QtWidgets.QFormLayout(grp_data)
        for field_type in DATA_TYPES:
            edit = QtWidgets.QLineEdit(str(data.get(field_type, "")))
            if field_type == COMPLETION_DATE:
                edit.setPlaceholderText("Today")
            elif field_type == QR_CODE:
                edit.setPlaceholderText("Placeholder")
            else:
                edit.setPlaceholderText(SAMPLE_VALUES.get(field_type, ""))
            edit.setClearButtonEnabled(True)
            edit.editingFinished.connect(self.refresh)
            form.addRow(f"{type_label(field_type)}:", edit)
            self.edits[field_type] = edit
        grp_data.setMaximumWidth(320)
        body.addWidget(grp_data)

        layout.addLayout(body, 1)

        btn_box = QtWidgets.QDialogButtonBox(QtWidgets.QDialogButtonBox.Close)
        btn_box.rejected.connect(self.reject)
        layout.addWidget(btn_box)

    # ---------- data ----------
    def data(self) -> Dict[str, str]:
        """Typed values by field type; blank entries are left out."""
        return {t: e.text().strip() for t, e in self.edits.items() if e.text().strip()}

    # ---------- rendering ----------
    def refresh(self) -> None:
        data = self.data()
        background = self._background_for(self.scale) if self._background_for else None
        try:
            img = self.editor.render_preview(self.scale, data=data, background=background)
        except RenderError as e:
            logger.warning("Preview failed: %s", e)
            self.current_image = QtGui.QImage()
            self.lbl_image.setPixmap(QtGui.QPixmap())
            self.lbl_image.setText(str(e))
            self.lbl_image.adjustSize()
            return

        self.current_image = pil_to_qimage(img)
        self.lbl_image.setPixmap(QtGui.QPixmap.fromImage(self.current_image))
        self.lbl_image.resize(self.current_image.size())
        self.lbl_zoom.setText(f"{round(self.scale * 100)}%")
        kind = "certificate data" if data else "sample data"
        self.lbl_info.setText(f"{self.current_image.width()} × {self.current_image.height()} px, {kind}")

    # ---------- zoom ----------
    def _set_scale(self, scale: float) -> None:
        cfg = self.editor.config
        self.scale = round(max(cfg.min_scale, min(cfg.max_scale, scale)), _PRECISION)
        self.refresh()

    def zoom_in(self) -> None:
        self._set_scale(self.scale + self.editor.config.zoom_step)

    def zoom_out(self) -> None:
        self._set_scale(self.scale - self.editor.config.zoom_step)

    def zoom_fit(self) -> None:
        page = self.editor.page_size
        if page is None or not page.is_valid:
            return
        vp = self.scroll.viewport().size()
        fit = min(vp.width() / page.width, vp.height() / page.height) * self.editor.config.fit_margin
        if fit > 0:
            self.scale = round(fit, _PRECISION)
            self.refresh()
