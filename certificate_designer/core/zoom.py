"""
core/zoom.py - Display scale ownership and the one-time fit computation.
"""
from __future__ import annotations

import logging
from typing import Optional

from .config import EditorConfig
from .geometry import Size

logger = logging.getLogger(__name__)

_PRECISION = 6


class ZoomController:
    """
    Owns the editor's display scale.

    The fit scale is applied only for the first page-size report of a
    document load; later reports (e.g. after a render retry) keep whatever
    scale the operator has chosen since.
    """

    def __init__(self, config: Optional[EditorConfig] = None):
        self.config = config or EditorConfig()
        self.scale: float = 1.0
        self.page_size: Optional[Size] = None
        self.viewport: Size = Size(0.0, 0.0)
        self._page_loaded = False

    @property
    def page_loaded(self) -> bool:
        return self._page_loaded

    def set_viewport(self, width: float, height: float) -> None:
        """Available display area, already reduced by any host padding."""
        self.viewport = Size(float(width), float(height))

    def fit_scale(self) -> Optional[float]:
        """Scale that fits the known page into the viewport, or None."""
        if self.page_size is None or not self.page_size.is_valid:
            return None

        candidates = [self.config.fit_cap]
        if self.viewport.width > 0:
            candidates.append(self.viewport.width / self.page_size.width)
        if self.viewport.height > 0:
            candidates.append(self.viewport.height / self.page_size.height)
        return round(min(candidates) * self.config.fit_margin, _PRECISION)

    def on_page_size_known(self, width: float, height: float) -> float:
        size = Size(float(width), float(height))
        if not size.is_valid:
            logger.warning("Ignoring invalid page size %sx%s", width, height)
            return self.scale

        self.page_size = size
        if not self._page_loaded:
            self._page_loaded = True
            fit = self.fit_scale()
            if fit is not None and fit > 0:
                self.scale = fit
                logger.info("Initial fit scale %.3f for page %gx%g", fit, size.width, size.height)
        return self.scale

    def reset_document(self) -> None:
        """Forget the current page so the next load fits again."""
        self.page_size = None
        self._page_loaded = False

    # ---------- operator commands ----------
    def _clamp(self, value: float) -> float:
        return round(max(self.config.min_scale, min(self.config.max_scale, value)), _PRECISION)

    def zoom_in(self) -> float:
        self.scale = self._clamp(self.scale + self.config.zoom_step)
        return self.scale

    def zoom_out(self) -> float:
        self.scale = self._clamp(self.scale - self.config.zoom_step)
        return self.scale

    def reset_zoom(self) -> float:
        fit = self.fit_scale()
        self.scale = fit if fit is not None and fit > 0 else 1.0
        return self.scale
