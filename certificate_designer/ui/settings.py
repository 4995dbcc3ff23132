from __future__ import annotations

import json
import os
import logging

from PySide6.QtCore import QSettings

from ..core.config import EditorConfig

logger = logging.getLogger(__name__)


def _settings() -> QSettings:
    return QSettings("CertificateDesigner", "CertificateDesigner")


def load_editor_config() -> EditorConfig:
    """
    Editor tuning values from QSettings, stored as a JSON string.

    A missing or unreadable entry gives the defaults.
    """
    raw = _settings().value("editor_config", "", type=str)
    if not raw:
        return EditorConfig()
    try:
        return EditorConfig.from_dict(json.loads(raw))
    except (ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable editor_config setting: %s", exc)
        return EditorConfig()


def save_editor_config(config: EditorConfig) -> None:
    _settings().setValue("editor_config", json.dumps(config.to_dict(), indent=2))


def last_directory() -> str:
    return _settings().value("last_directory", "", type=str) or ""


def remember_directory(path: str) -> None:
    folder = path if os.path.isdir(path) else os.path.dirname(path)
    if folder:
        _settings().setValue("last_directory", folder)
