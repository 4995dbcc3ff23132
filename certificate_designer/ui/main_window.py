from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..core.engine import STATUS_FAILED, STATUS_RETRYING, CertificateTemplateEditor
from ..core.models import type_label
from . import persistence, settings
from .actions import build_toolbars_and_menus
from .dialogs import CertificatePreviewDialog
from .docks import build_docks
from .imaging import qimage_to_pil
from .page_surface import DocumentSurface
from .views import PageView

logger = logging.getLogger(__name__)

APP_NAME = "Certificate Designer"


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config=None):
        super().__init__()

        self.setWindowTitle(APP_NAME)
        self.resize(1300, 900)

        self.config = config or settings.load_editor_config()
        self.editor = CertificateTemplateEditor(
            self.config,
            scheduler=lambda delay_ms, cb: QtCore.QTimer.singleShot(delay_ms, self, cb),
            frame_scheduler=lambda cb: QtCore.QTimer.singleShot(self.config.frame_interval_ms, self, cb),
        )
        self._current_file_path: Optional[str] = None
        self._preview_data: Dict[str, str] = {}

        self.surface = DocumentSurface(self)
        self.surface.page_loaded.connect(self._on_page_loaded)
        self.surface.render_error.connect(self.editor.on_render_error)
        self.editor.set_reload_handler(self.surface.reload)

        self._build_view()
        build_toolbars_and_menus(self)
        build_docks(self)

        self.editor.add_listener(self._on_editor_changed)
        self.editor.initialize([])
        self._on_editor_changed()
        self.statusBar().showMessage("Ready. Open a certificate background to begin.")

    # -------------------------
    # UI construction
    # -------------------------
    def _build_view(self):
        self.view = PageView(self.editor, self.surface, self)
        central = QtWidgets.QWidget(self)
        lay = QtWidgets.QVBoxLayout(central)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.view)
        self.setCentralWidget(central)

    # -------------------------
    # Editor / surface events
    # -------------------------
    def _on_page_loaded(self, width: float, height: float) -> None:
        self.editor.set_viewport(self.view.viewport().width(), self.view.viewport().height())
        self.editor.on_page_size_known(width, height)
        self.statusBar().showMessage(f"Page {width:g} × {height:g}", 3000)

    def _on_editor_changed(self) -> None:
        self.lbl_zoom.setText(f"{round(self.editor.scale * 100)}%")
        status = self.editor.render_status
        if status.state == STATUS_RETRYING:
            self.statusBar().showMessage(f"{status.message} Retrying...")
        elif status.state == STATUS_FAILED:
            self.statusBar().showMessage(status.message)

    # -------------------------
    # Field actions
    # -------------------------
    def add_field(self, field_type: str) -> None:
        field_id = self.editor.add_field(field_type)
        self.statusBar().showMessage(f"Added {type_label(field_type)} field", 2000)
        self.view.setFocus()
        logger.debug("Toolbox added %s", field_id)

    def delete_selected_field(self) -> None:
        f = self.editor.selected_field
        if f is not None:
            self.editor.delete_field(f.id)

    # -------------------------
    # File actions
    # -------------------------
    def open_document(self) -> None:
        persistence.open_document(self)

    def load_template(self) -> None:
        persistence.load_template(self)

    def save_template(self) -> None:
        persistence.save_template(self)

    def save_template_as(self) -> None:
        persistence.save_template(self, save_as=True)

    # -------------------------
    # Preview
    # -------------------------
    def _preview_background(self, scale: float):
        if not self.surface.is_loaded:
            return None
        page = self.surface.page_image(scale)
        return None if page.isNull() else qimage_to_pil(page)

    def show_preview(self) -> None:
        if self.editor.page_size is None:
            QtWidgets.QMessageBox.information(
                self, "Preview", "Nothing to preview yet.\n\nOpen a certificate background first."
            )
            return

        dlg = CertificatePreviewDialog(self.editor, self._preview_background, self._preview_data, self)
        dlg.exec()
        self._preview_data = dlg.data()

    # -------------------------
    # Shutdown
    # -------------------------
    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self.view.release_grab()
        settings.save_editor_config(self.config)
        super().closeEvent(event)


def create_window() -> MainWindow:
    """Convenience factory used by launchers/tests."""
    return MainWindow()
