# certificate_designer/ui/docks/__init__.py
"""
Dock widget orchestration.

This module must NOT import main_window to avoid circular imports.
"""
from __future__ import annotations

from PySide6 import QtCore, QtWidgets

from ..toolbox import Toolbox
from .properties_dock import build_properties_dock


def build_docks(mw) -> None:
    """
    Create the toolbox (left) and properties (right) docks on *mw*.

    Sets attributes on *mw*: toolbox, props, dock_toolbox, dock_props.
    """
    mw.toolbox = Toolbox(mw)
    mw.toolbox.add_field.connect(mw.add_field)

    dock_left = QtWidgets.QDockWidget("Fields", mw)
    dock_left.setObjectName("ToolboxDock")
    dock_left.setWidget(mw.toolbox)
    mw.addDockWidget(QtCore.Qt.LeftDockWidgetArea, dock_left)
    mw.dock_toolbox = dock_left

    mw.dock_props = build_properties_dock(mw)


__all__ = ["build_docks"]
