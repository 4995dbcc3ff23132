"""
core/utils.py - Asset location helpers.

Image fields carry a URL (http(s)://, file://) or, for templates authored on
this machine, a plain file path. Template files may also reference their
background document relative to the template's own directory.
"""
from __future__ import annotations

import io
import os
import pathlib
import re
import urllib.parse
import urllib.request
from typing import Optional

from PIL import Image

_URL_TIMEOUT_S = 10.0


def _is_windows_absolute(path: str) -> bool:
    """Drive-letter or UNC path, recognized on any platform."""
    if not path:
        return False
    return bool(re.match(r"^[a-zA-Z]:[\\/]", path) or re.match(r"^[\\/]{2}[^\\/]+[\\/]+[^\\/]+", path))


def is_remote_url(source: str) -> bool:
    scheme = urllib.parse.urlparse(source or "").scheme.lower()
    return scheme in ("http", "https")


def local_path_for(source: str) -> Optional[str]:
    """
    File-system path for a file:// URL or a bare path; None for remote URLs.
    """
    if not source:
        return None
    if _is_windows_absolute(source):
        return source
    parsed = urllib.parse.urlparse(source)
    if parsed.scheme.lower() == "file":
        return urllib.request.url2pathname(parsed.path)
    if parsed.scheme:
        return None
    return source


def path_to_url(path: str) -> str:
    """Absolute file:// URL for a local path chosen from the asset picker."""
    return pathlib.Path(os.path.abspath(path)).as_uri()


def open_image_source(source: str) -> Image.Image:
    """
    Load an image from a URL or path.

    Raises OSError (including urllib.error.URLError) or ValueError when the
    source cannot be read; callers decide how to degrade.
    """
    if is_remote_url(source):
        with urllib.request.urlopen(source, timeout=_URL_TIMEOUT_S) as resp:
            payload = resp.read()
        img = Image.open(io.BytesIO(payload))
    else:
        path = local_path_for(source)
        if path is None:
            raise ValueError(f"Unsupported image source: {source!r}")
        img = Image.open(path)
    img.load()
    return img


def relative_to_template(document_path: str, template_path: str) -> str:
    """
    Store *document_path* relative to the template when it lives beside or
    below it; otherwise keep it unchanged.
    """
    if not document_path or not template_path or not os.path.isabs(document_path):
        return document_path

    template_dir = os.path.dirname(os.path.abspath(template_path))
    try:
        common = os.path.commonpath([
            os.path.normcase(template_dir),
            os.path.normcase(os.path.abspath(document_path)),
        ])
    except ValueError:
        # different drives on Windows
        return document_path

    if common != os.path.normcase(template_dir):
        return document_path
    return os.path.relpath(document_path, template_dir)


def resolve_from_template(document_path: str, template_path: str) -> str:
    """Inverse of relative_to_template: absolute path for a stored reference."""
    if not document_path or not template_path:
        return document_path
    if os.path.isabs(document_path) or _is_windows_absolute(document_path):
        return document_path
    template_dir = os.path.dirname(os.path.abspath(template_path))
    return os.path.normpath(os.path.join(template_dir, document_path))
