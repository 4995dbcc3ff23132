# certificate_designer/ui/toolbox.py

from __future__ import annotations
from PySide6 import QtCore, QtWidgets

from ..core.models import (
    CERTIFICATE_ID,
    COMPLETION_DATE,
    COURSE_NAME,
    IMAGE,
    ISSUER_NAME,
    ISSUER_TITLE,
    QR_CODE,
    SIGNATURE,
    STUDENT_NAME,
    type_color,
    type_label,
)

# (group title, field types)
TOOL_GROUPS = (
    ("Recipient", (STUDENT_NAME, COURSE_NAME, COMPLETION_DATE)),
    ("Issuer", (ISSUER_NAME, ISSUER_TITLE, SIGNATURE)),
    ("Verification / Media", (CERTIFICATE_ID, QR_CODE, IMAGE)),
)


class Toolbox(QtWidgets.QWidget):
    add_field = QtCore.Signal(str)   # field type

    def __init__(self, parent=None):
        super().__init__(parent)
        self.buttons: dict[str, QtWidgets.QPushButton] = {}
        self._build_ui()

    def _make_button(self, field_type: str) -> QtWidgets.QPushButton:
        btn = QtWidgets.QPushButton(type_label(field_type))
        btn.clicked.connect(lambda _checked=False, t=field_type: self.add_field.emit(t))
        btn.setMinimumHeight(32)
        btn.setSizePolicy(
            QtWidgets.QSizePolicy.Expanding,
            QtWidgets.QSizePolicy.Fixed,
        )
        btn.setStyleSheet(f"QPushButton {{ border-left: 4px solid {type_color(field_type)}; text-align: left; padding-left: 8px; }}")
        btn.setToolTip(f"Add a {type_label(field_type)} field")
        return btn

    def _build_ui(self):
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(10)

        for title, field_types in TOOL_GROUPS:
            grp = QtWidgets.QGroupBox(title)
            grp_layout = QtWidgets.QVBoxLayout(grp)
            for field_type in field_types:
                btn = self._make_button(field_type)
                self.buttons[field_type] = btn
                grp_layout.addWidget(btn)
            layout.addWidget(grp)

        layout.addStretch(1)
