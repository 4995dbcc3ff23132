from __future__ import annotations

import logging
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..core.engine import CertificateTemplateEditor
from ..core.models import (
    ALIGNMENTS,
    FONT_WEIGHTS,
    IMAGE,
    MAX_POSITION,
    MIN_FIELD_SIZE,
    MIN_FONT_SIZE,
    MIN_POSITION,
    QR_CODE,
    SCRIPT_FONTS,
    SIGNATURE,
    STANDARD_FONTS,
    TemplateField,
    type_label,
)
from ..core.utils import path_to_url
from . import settings

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.svg)"


class PropertiesPanel(QtWidgets.QWidget):
    """
    Right-side properties panel for the selected field.

    Groups shown per type:
      - geometry:   every field
      - font:       every type except qrCode and image
      - style:      text types (weight, color, alignment)
      - image:      image fields

    Every edit goes through the editor's update path, which clamps numbers
    instead of rejecting them; the panel then re-reads the clamped value.
    """

    def __init__(self, editor: CertificateTemplateEditor, parent=None):
        super().__init__(parent)
        self.editor = editor
        self._updating_ui = False
        self._field_id: Optional[str] = None

        self._build_ui()
        editor.store.add_listener(self.refresh)
        self.refresh()

    # --------------------- sizing hints ---------------------
    def sizeHint(self) -> QtCore.QSize:  # type: ignore[override]
        base = super().sizeHint()
        return QtCore.QSize(280, base.height())

    def minimumSizeHint(self) -> QtCore.QSize:  # type: ignore[override]
        return QtCore.QSize(220, 0)

    # --------------------- UI construction ---------------------
    def _line_separator(self) -> QtWidgets.QFrame:
        line = QtWidgets.QFrame()
        line.setFrameShape(QtWidgets.QFrame.HLine)
        line.setFrameShadow(QtWidgets.QFrame.Sunken)
        return line

    def _percent_spin(self, minimum: float, maximum: float) -> QtWidgets.QDoubleSpinBox:
        spin = QtWidgets.QDoubleSpinBox()
        spin.setRange(minimum, maximum)
        spin.setDecimals(2)
        spin.setSingleStep(0.5)
        spin.setSuffix(" %")
        spin.setKeyboardTracking(False)
        return spin

    def _build_ui(self):
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(8)

        # --- Field picker ---
        self.combo_field = QtWidgets.QComboBox()
        self.combo_field.activated.connect(self._on_field_picked)
        layout.addWidget(self.combo_field)

        self.lbl_target = QtWidgets.QLabel("")
        font_bold = self.lbl_target.font()
        font_bold.setBold(True)
        self.lbl_target.setFont(font_bold)
        layout.addWidget(self.lbl_target)

        layout.addSpacing(4)
        layout.addWidget(self._line_separator())

        # --- Geometry ---
        self.grp_geom = QtWidgets.QGroupBox("Position / Size")
        geom_layout = QtWidgets.QFormLayout(self.grp_geom)

        self.spin_x = self._percent_spin(MIN_POSITION, MAX_POSITION)
        self.spin_x.valueChanged.connect(lambda v: self._patch(x=v))
        geom_layout.addRow("X:", self.spin_x)

        self.spin_y = self._percent_spin(MIN_POSITION, MAX_POSITION)
        self.spin_y.valueChanged.connect(lambda v: self._patch(y=v))
        geom_layout.addRow("Y:", self.spin_y)

        # no ceiling on size; a field may run past the page edge
        self.spin_w = self._percent_spin(MIN_FIELD_SIZE, 1000.0)
        self.spin_w.valueChanged.connect(lambda v: self._patch(width=v))
        geom_layout.addRow("Width:", self.spin_w)

        self.spin_h = self._percent_spin(MIN_FIELD_SIZE, 1000.0)
        self.spin_h.valueChanged.connect(lambda v: self._patch(height=v))
        geom_layout.addRow("Height:", self.spin_h)

        layout.addWidget(self.grp_geom)

        # --- Font ---
        self.grp_font = QtWidgets.QGroupBox("Font")
        font_layout = QtWidgets.QFormLayout(self.grp_font)

        self.combo_font = QtWidgets.QComboBox()
        self.combo_font.setEditable(True)
        self.combo_font.addItems(STANDARD_FONTS)
        self.combo_font.insertSeparator(self.combo_font.count())
        self.combo_font.addItems(SCRIPT_FONTS)
        self.combo_font.setInsertPolicy(QtWidgets.QComboBox.NoInsert)
        self.combo_font.lineEdit().editingFinished.connect(self._on_font_family_edited)
        self.combo_font.activated.connect(lambda _i: self._on_font_family_edited())
        font_layout.addRow("Family:", self.combo_font)

        self.spin_font_size = QtWidgets.QDoubleSpinBox()
        self.spin_font_size.setRange(MIN_FONT_SIZE, 400.0)
        self.spin_font_size.setDecimals(1)
        self.spin_font_size.setSuffix(" px")
        self.spin_font_size.setKeyboardTracking(False)
        self.spin_font_size.valueChanged.connect(lambda v: self._patch(font_size=v))
        font_layout.addRow("Size:", self.spin_font_size)

        layout.addWidget(self.grp_font)

        # --- Style ---
        self.grp_style = QtWidgets.QGroupBox("Style")
        style_layout = QtWidgets.QFormLayout(self.grp_style)

        self.combo_weight = QtWidgets.QComboBox()
        self.combo_weight.addItems(FONT_WEIGHTS)
        self.combo_weight.currentTextChanged.connect(lambda t: self._patch(font_weight=t))
        style_layout.addRow("Weight:", self.combo_weight)

        self.btn_color = QtWidgets.QPushButton()
        self.btn_color.clicked.connect(self._on_pick_color)
        style_layout.addRow("Color:", self.btn_color)

        self.combo_align = QtWidgets.QComboBox()
        for value in ALIGNMENTS:
            self.combo_align.addItem(value.capitalize(), value)
        self.combo_align.currentIndexChanged.connect(
            lambda i: self._patch(alignment=self.combo_align.itemData(i))
        )
        style_layout.addRow("Alignment:", self.combo_align)

        layout.addWidget(self.grp_style)

        # --- Image ---
        self.grp_image = QtWidgets.QGroupBox("Image")
        image_layout = QtWidgets.QVBoxLayout(self.grp_image)

        self.lbl_image = QtWidgets.QLabel("No image selected")
        self.lbl_image.setWordWrap(True)
        image_layout.addWidget(self.lbl_image)

        image_buttons = QtWidgets.QHBoxLayout()
        self.btn_pick_image = QtWidgets.QPushButton("Choose...")
        self.btn_pick_image.clicked.connect(self._on_pick_image)
        self.btn_remove_image = QtWidgets.QPushButton("Remove")
        self.btn_remove_image.clicked.connect(self._on_remove_image)
        image_buttons.addWidget(self.btn_pick_image)
        image_buttons.addWidget(self.btn_remove_image)
        image_layout.addLayout(image_buttons)

        layout.addWidget(self.grp_image)

        # --- Delete ---
        self.btn_delete = QtWidgets.QPushButton("Delete Field")
        self.btn_delete.clicked.connect(self._on_delete)
        layout.addWidget(self.btn_delete)

        layout.addStretch(1)

    # --------------------- store -> UI ---------------------
    def refresh(self) -> None:
        f = self.editor.store.selected_field
        self._updating_ui = True
        try:
            self._refresh_field_list()
            self._field_id = f.id if f is not None else None
            self._set_active(f)
            if f is not None:
                self._load_field(f)
        finally:
            self._updating_ui = False

    def _refresh_field_list(self) -> None:
        self.combo_field.clear()
        fields = self.editor.store.fields
        if not fields:
            self.combo_field.addItem("No fields", None)
            self.combo_field.setEnabled(False)
            return

        self.combo_field.setEnabled(True)
        self.combo_field.addItem("Select a field...", None)
        for index, f in enumerate(fields, start=1):
            self.combo_field.addItem(f"{index}. {type_label(f.type)}", f.id)
        selected = self.editor.store.selected_id
        pos = self.combo_field.findData(selected) if selected else 0
        self.combo_field.setCurrentIndex(max(0, pos))

    def _set_active(self, f: Optional[TemplateField]) -> None:
        has = f is not None
        self.grp_geom.setVisible(has)
        self.btn_delete.setVisible(has)
        self.grp_font.setVisible(has and f.type not in (QR_CODE, IMAGE))
        self.grp_style.setVisible(has and f.is_text)
        self.grp_image.setVisible(has and f.type == IMAGE)
        self.lbl_target.setText(type_label(f.type) if has else "No field selected")

    def _load_field(self, f: TemplateField) -> None:
        self.spin_x.setValue(f.x)
        self.spin_y.setValue(f.y)
        self.spin_w.setValue(f.width)
        self.spin_h.setValue(f.height)

        self.combo_font.setEditText(f.font_family)
        self.spin_font_size.setValue(f.font_size)
        self.combo_weight.setCurrentText(f.font_weight)
        self.combo_align.setCurrentIndex(max(0, self.combo_align.findData(f.alignment)))
        self._show_color(f.font_color)

        self.lbl_image.setText(f.image_url or "No image selected")
        self.btn_remove_image.setEnabled(bool(f.image_url))

        # signatures take only a family and size
        if f.type == SIGNATURE:
            self.grp_font.setTitle("Signature Font")
        else:
            self.grp_font.setTitle("Font")

    def _show_color(self, color: str) -> None:
        self.btn_color.setText(color)
        qc = QtGui.QColor(color)
        text = "#ffffff" if qc.isValid() and qc.lightness() < 128 else "#000000"
        self.btn_color.setStyleSheet(f"QPushButton {{ background: {color}; color: {text}; }}")

    # --------------------- UI -> store ---------------------
    def _patch(self, **patch) -> None:
        if self._updating_ui or self._field_id is None:
            return
        self.editor.update_field(self._field_id, patch)

    def _on_field_picked(self, index: int) -> None:
        if self._updating_ui:
            return
        field_id = self.combo_field.itemData(index)
        if field_id is None:
            self.editor.store.clear_selection()
        else:
            self.editor.select_field(field_id)

    def _on_font_family_edited(self) -> None:
        family = self.combo_font.currentText().strip()
        if family:
            self._patch(font_family=family)

    def _on_pick_color(self) -> None:
        f = self.editor.store.get(self._field_id)
        if f is None:
            return
        color = QtWidgets.QColorDialog.getColor(QtGui.QColor(f.font_color), self, "Font Color")
        if color.isValid():
            self._patch(font_color=color.name())

    def _on_pick_image(self) -> None:
        if self._field_id is None:
            return
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Choose Image", settings.last_directory(), IMAGE_FILTER
        )
        if not path:
            return
        settings.remember_directory(path)
        self.editor.set_field_image(self._field_id, path_to_url(path))

    def _on_remove_image(self) -> None:
        if self._field_id is not None:
            self.editor.set_field_image(self._field_id, None)

    def _on_delete(self) -> None:
        if self._field_id is not None:
            self.editor.delete_field(self._field_id)
