# certificate_designer/ui/persistence.py
"""
Template save / load and background-document selection.

All public functions accept *mw* (the MainWindow instance); this module
must NOT import main_window to avoid circular imports.
"""
from __future__ import annotations

import json
import logging
import os

from PySide6 import QtWidgets

from ..core.exceptions import TemplateError
from ..core.template_file import TemplateDocument, read_template, write_template
from . import settings

logger = logging.getLogger(__name__)

TEMPLATE_FILTER = "Certificate Template (*.json)"
DOCUMENT_FILTER = "Certificate backgrounds (*.pdf *.png *.jpg *.jpeg *.bmp *.webp);;All files (*)"


# ---------------------------------------------------------------------------
# Save / Load
# ---------------------------------------------------------------------------

def save_template(mw, save_as: bool = False) -> bool:
    """Save the editor's fields plus the background path. Returns True on success."""
    path = mw._current_file_path
    if save_as or not path:
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            mw, "Save Template", path or settings.last_directory(), TEMPLATE_FILTER
        )
        if not path:
            return False
        if not path.lower().endswith(".json"):
            path += ".json"

    doc = TemplateDocument(document=mw.surface.path, fields=mw.editor.get_fields())
    try:
        write_template(path, doc)
    except PermissionError:
        QtWidgets.QMessageBox.critical(
            mw,
            "Permission Denied",
            f"You don't have permission to write to:\n{path}\n\n"
            "Try saving to a different location or check folder permissions."
        )
        return False
    except OSError as e:
        logger.error("Saving %s failed: %s", path, e)
        QtWidgets.QMessageBox.critical(
            mw,
            "Save Error",
            f"Could not save file:\n{path}\n\n"
            f"Error: {e}"
        )
        return False

    settings.remember_directory(path)
    mw._current_file_path = path
    mw.statusBar().showMessage(f"Saved: {path}", 3000)
    return True


def load_template(mw) -> None:
    path, _ = QtWidgets.QFileDialog.getOpenFileName(
        mw, "Open Template", settings.last_directory(), TEMPLATE_FILTER
    )
    if path:
        load_template_path(mw, path)


def load_template_path(mw, path: str) -> bool:
    """Load a template file: background first, then its fields."""
    try:
        doc = read_template(path)
    except FileNotFoundError:
        QtWidgets.QMessageBox.critical(
            mw,
            "File Not Found",
            f"The file could not be found:\n{path}"
        )
        return False
    except PermissionError:
        QtWidgets.QMessageBox.critical(
            mw,
            "Permission Denied",
            f"You don't have permission to read this file:\n{path}"
        )
        return False
    except json.JSONDecodeError as e:
        QtWidgets.QMessageBox.critical(
            mw,
            "Invalid Template File",
            f"The file is not a valid JSON template:\n{path}\n\n"
            f"Error at line {e.lineno}, column {e.colno}:\n{e.msg}"
        )
        return False
    except UnicodeDecodeError:
        QtWidgets.QMessageBox.critical(
            mw,
            "Invalid File Encoding",
            f"The file encoding is not supported:\n{path}\n\n"
            "Template files must be saved as UTF-8."
        )
        return False
    except (TemplateError, OSError) as e:
        QtWidgets.QMessageBox.critical(
            mw,
            "Invalid Template Data",
            f"The template file could not be read:\n{path}\n\n{e}"
        )
        return False

    settings.remember_directory(path)
    mw._current_file_path = path
    if doc.document:
        open_document_path(mw, doc.document)
    mw.editor.initialize(doc.fields)
    mw.statusBar().showMessage(f"Loaded: {path} ({len(doc.fields)} field(s))", 3000)
    return True


# ---------------------------------------------------------------------------
# Background document
# ---------------------------------------------------------------------------

def open_document(mw) -> None:
    path, _ = QtWidgets.QFileDialog.getOpenFileName(
        mw, "Open Certificate Background", settings.last_directory(), DOCUMENT_FILTER
    )
    if path:
        settings.remember_directory(path)
        open_document_path(mw, path)


def open_document_path(mw, path: str) -> None:
    """Hand *path* to the surface; the editor hears back through its signals."""
    mw.editor.begin_document_load()
    mw.setWindowTitle(f"{os.path.basename(path)} - Certificate Designer")
    mw.surface.load(path)
