# certificate_designer/core/config.py
"""
Editor tuning values.

No Qt dependencies. The Qt host stores these in QSettings (see
ui/settings.py) and hands an EditorConfig to the engine.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict


@dataclass(frozen=True)
class EditorConfig:
    # zoom
    zoom_step: float = 0.2
    min_scale: float = 0.5
    max_scale: float = 5.0
    fit_margin: float = 0.9          # fraction of the viewport the page may fill
    fit_cap: float = 1.0             # never magnify small pages past 1:1
    viewport_padding: int = 100      # px the host subtracts from its container

    # page render retry
    render_retry_delay_ms: int = 2000
    render_max_retries: int = 1

    # interaction
    handle_size_px: int = 16
    frame_interval_ms: int = 16

    # presentation defaults
    default_font_family: str = "Helvetica"
    signature_scale: float = 1.5

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})
