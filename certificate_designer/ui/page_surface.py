# certificate_designer/ui/page_surface.py
"""
Document rendering surface.

Decodes the certificate background (a raster image, or the first page of a
PDF through QtPdf) and reports only two things to the editor: the page's
intrinsic size once known, and render errors.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from PySide6 import QtCore, QtGui
from PySide6.QtPdf import QPdfDocument

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = (".pdf",)


class DocumentSurface(QtCore.QObject):
    page_loaded = QtCore.Signal(float, float)   # intrinsic width, height
    render_error = QtCore.Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._path: str = ""
        self._image: Optional[QtGui.QImage] = None
        self._pdf: Optional[QPdfDocument] = None
        self._page_size = QtCore.QSizeF()
        self._cache_key = None
        self._cache_image: Optional[QtGui.QImage] = None
        self._failed_key = None
        self._generation = 0

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_loaded(self) -> bool:
        return self._page_size.isValid() and not self._page_size.isEmpty()

    @property
    def generation(self) -> int:
        """Bumped on every (re)load; a cached rendering from an older load is stale."""
        return self._generation

    def load(self, path: str) -> None:
        self._path = path or ""
        self.reload()

    def clear(self) -> None:
        self._path = ""
        self._reset()

    def _reset(self) -> None:
        self._image = None
        if self._pdf is not None:
            self._pdf.close()
        self._page_size = QtCore.QSizeF()
        self._cache_key = None
        self._cache_image = None
        self._failed_key = None

    def reload(self) -> None:
        """(Re)decode the current document and report the outcome."""
        self._reset()
        self._generation += 1
        if not self._path:
            return

        if not os.path.exists(self._path):
            self.render_error.emit(f"File not found: {self._path}")
            return

        if self._path.lower().endswith(PDF_EXTENSIONS):
            ok = self._load_pdf()
        else:
            ok = self._load_image()
        if not ok:
            return

        logger.debug("Page %s is %gx%g", self._path, self._page_size.width(), self._page_size.height())
        self.page_loaded.emit(self._page_size.width(), self._page_size.height())

    def _load_image(self) -> bool:
        reader = QtGui.QImageReader(self._path)
        reader.setAutoTransform(True)
        img = reader.read()
        if img.isNull():
            self.render_error.emit(reader.errorString() or "Unsupported image format")
            return False
        self._image = img
        self._page_size = QtCore.QSizeF(img.width(), img.height())
        return True

    def _load_pdf(self) -> bool:
        if self._pdf is None:
            self._pdf = QPdfDocument(self)
        err = self._pdf.load(self._path)
        if err != QPdfDocument.Error.None_:
            self.render_error.emit(f"Could not open PDF ({err.name})")
            return False
        if self._pdf.pageCount() < 1:
            self.render_error.emit("The PDF has no pages")
            return False
        # PDF points are treated as pixels at scale 1
        self._page_size = self._pdf.pagePointSize(0)
        return True

    # ---------- drawing ----------
    def page_image(self, scale: float) -> QtGui.QImage:
        """The page at *scale*; a null image if nothing is loaded."""
        if not self.is_loaded:
            return QtGui.QImage()

        size = QtCore.QSize(
            max(1, round(self._page_size.width() * scale)),
            max(1, round(self._page_size.height() * scale)),
        )
        key = (size.width(), size.height())
        if key == self._cache_key and self._cache_image is not None:
            return self._cache_image
        if key == self._failed_key:
            return QtGui.QImage()

        if self._pdf is not None and self._image is None:
            img = self._pdf.render(0, size)
            if img.isNull():
                # reported once per size; the editor decides whether to reload
                self._failed_key = key
                self.render_error.emit("Could not render the PDF page")
                return img
        else:
            img = self._image.scaled(size, QtCore.Qt.IgnoreAspectRatio, QtCore.Qt.SmoothTransformation)

        self._cache_key = key
        self._cache_image = img
        return img
