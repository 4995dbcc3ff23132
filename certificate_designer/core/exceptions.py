# certificate_designer/core/exceptions.py
"""
Error types for the template engine.

No Qt dependencies: this module is pure Python so it can be used
from tests and from the Qt host alike.
"""
from __future__ import annotations


class TemplateError(Exception):
    """Base exception for all template engine errors."""


class FieldDataError(TemplateError, ValueError):
    """A persisted field record could not be turned into a TemplateField."""


class GeometryError(TemplateError, ValueError):
    """A coordinate conversion was asked to use a non-positive page dimension."""


class RenderError(TemplateError):
    """The document surface could not decode or display the page."""


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------

_CROSS_ORIGIN_MARKERS = ("cors", "cross-origin")
_PERMISSION_MARKERS = ("401", "403", "unauthorized", "permission denied")


def friendly_render_message(message: str) -> str:
    """Return a short, UI-safe description of a render failure."""
    text = (message or "").strip()
    lowered = text.lower()

    if any(m in lowered for m in _CROSS_ORIGIN_MARKERS):
        return "Cross-origin error loading document. The server might not allow cross-origin requests."
    if any(m in lowered for m in _PERMISSION_MARKERS):
        return "Permission error loading document. Please make sure you have access to this file."
    if not text:
        return "Error loading document."
    return f"Error loading document: {text}"
