# certificate_designer/ui/actions.py
"""
Builder for QActions, menus and the main toolbar.

The builder receives the MainWindow instance; this module must NOT import
main_window to avoid circular imports.
"""
from __future__ import annotations

from PySide6 import QtCore, QtGui, QtWidgets


def _action(mw, text: str, slot, shortcut=None, tip: str = "") -> QtGui.QAction:
    act = QtGui.QAction(text, mw)
    if shortcut is not None:
        act.setShortcut(shortcut)
    if tip:
        act.setToolTip(tip)
    act.triggered.connect(slot)
    return act


def build_toolbars_and_menus(mw) -> None:
    """
    Create the main toolbar and the File / View menus.

    Sets ``mw.lbl_zoom`` (toolbar zoom read-out) and ``mw.act_delete``.
    """
    act_open_doc = _action(mw, "Open Background", mw.open_document, QtGui.QKeySequence("Ctrl+Shift+O"),
                           "Open the certificate background (PDF or image)")
    act_load = _action(mw, "Open Template", mw.load_template, QtGui.QKeySequence.Open,
                       "Open a saved field layout (Ctrl+O)")
    act_save = _action(mw, "Save", mw.save_template, QtGui.QKeySequence.Save,
                       "Save the field layout (Ctrl+S)")
    act_save_as = _action(mw, "Save As...", mw.save_template_as, QtGui.QKeySequence.SaveAs)
    act_preview = _action(mw, "Preview", mw.show_preview, QtGui.QKeySequence("Ctrl+Shift+P"),
                          "Preview the certificate with sample data")
    act_quit = _action(mw, "Quit", mw.close, QtGui.QKeySequence.Quit)

    act_zoom_in = _action(mw, "Zoom In", mw.editor.zoom_in, QtGui.QKeySequence.ZoomIn)
    act_zoom_out = _action(mw, "Zoom Out", mw.editor.zoom_out, QtGui.QKeySequence.ZoomOut)
    act_zoom_reset = _action(mw, "Fit", mw.editor.reset_zoom, QtGui.QKeySequence("Ctrl+0"),
                             "Fit the page into the window (Ctrl+0)")

    mw.act_delete = _action(mw, "Delete Field", mw.delete_selected_field, QtGui.QKeySequence.Delete)
    mw.act_delete.setShortcutContext(QtCore.Qt.WidgetWithChildrenShortcut)
    mw.view.addAction(mw.act_delete)

    # =============================
    # Main toolbar
    # =============================
    tb_main = QtWidgets.QToolBar("Main")
    tb_main.setObjectName("MainToolbar")
    tb_main.setIconSize(QtCore.QSize(16, 16))
    mw.addToolBar(tb_main)

    tb_main.addAction(act_open_doc)
    tb_main.addAction(act_load)
    tb_main.addAction(act_save)
    tb_main.addSeparator()
    tb_main.addAction(act_preview)
    tb_main.addSeparator()
    tb_main.addAction(act_zoom_out)

    mw.lbl_zoom = QtWidgets.QLabel("100%")
    mw.lbl_zoom.setMinimumWidth(50)
    mw.lbl_zoom.setAlignment(QtCore.Qt.AlignCenter)
    tb_main.addWidget(mw.lbl_zoom)

    tb_main.addAction(act_zoom_in)
    tb_main.addAction(act_zoom_reset)

    # =============================
    # Menus
    # =============================
    m_file = mw.menuBar().addMenu("&File")
    m_file.addAction(act_open_doc)
    m_file.addAction(act_load)
    m_file.addSeparator()
    m_file.addAction(act_save)
    m_file.addAction(act_save_as)
    m_file.addSeparator()
    m_file.addAction(act_preview)
    m_file.addSeparator()
    m_file.addAction(act_quit)

    m_edit = mw.menuBar().addMenu("&Edit")
    m_edit.addAction(mw.act_delete)

    m_view = mw.menuBar().addMenu("&View")
    m_view.addAction(act_zoom_in)
    m_view.addAction(act_zoom_out)
    m_view.addAction(act_zoom_reset)
