"""
Pillow <-> Qt image bridges for the preview.
"""
from __future__ import annotations

from PIL import Image
from PySide6 import QtGui


def pil_to_qimage(img: Image.Image) -> QtGui.QImage:
    img = img.convert("RGBA")
    w, h = img.size
    data = img.tobytes("raw", "RGBA")
    qimg = QtGui.QImage(data, w, h, 4 * w, QtGui.QImage.Format.Format_RGBA8888)
    return qimg.copy()  # detach from the Python buffer


def qimage_to_pil(qimg: QtGui.QImage) -> Image.Image:
    """
    RGBA Pillow copy of *qimg*. PySide6 exposes bits() as a memoryview, so
    the row stride is passed through to frombuffer.
    """
    if qimg.isNull():
        raise ValueError("Cannot convert a null QImage")

    qimg = qimg.convertToFormat(QtGui.QImage.Format.Format_RGBA8888)
    stride = qimg.bytesPerLine()
    raw = bytes(qimg.constBits()[: stride * qimg.height()])
    return Image.frombuffer("RGBA", (qimg.width(), qimg.height()), raw, "raw", "RGBA", stride, 1).copy()
