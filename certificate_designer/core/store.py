"""
core/store.py - Ordered in-memory field collection with single selection.

Every mutation replaces a field record as a whole, so observers never see
a half-applied update. Operations addressed to an unknown id are no-ops
that log a warning; pointer events routinely race with deletions.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .models import (
    ALIGNMENTS,
    DEFAULT_FONT_FAMILY,
    TemplateField,
    ATTRS_BY_KEY,
    clamp_font_size,
    clamp_position,
    clamp_size,
    make_field,
    new_field_id,
    normalize_field,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

_POSITION_ATTRS = ("x", "y")
_SIZE_ATTRS = ("width", "height")
_IMMUTABLE_ATTRS = ("id", "type")
_TEXT_ATTRS = ("font_family", "font_weight", "font_color")


def normalize_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Clean a partial update before it touches a field.

    Accepts python attribute names or persisted (camelCase) keys. Numbers
    are clamped to their valid range rather than rejected; values that
    cannot be used at all are dropped with a warning.
    """
    clean: Dict[str, Any] = {}
    for key, value in (patch or {}).items():
        attr = ATTRS_BY_KEY.get(key, key)

        if attr in _IMMUTABLE_ATTRS:
            logger.warning("Ignoring attempt to change immutable field attribute %r", attr)
            continue

        if attr in _POSITION_ATTRS or attr in _SIZE_ATTRS or attr == "font_size":
            number = _as_number(value)
            if number is None:
                logger.warning("Ignoring non-numeric value %r for %s", value, attr)
                continue
            if attr in _POSITION_ATTRS:
                clean[attr] = clamp_position(number)
            elif attr in _SIZE_ATTRS:
                clean[attr] = clamp_size(number)
            else:
                clean[attr] = clamp_font_size(number)

        elif attr == "alignment":
            if value not in ALIGNMENTS:
                logger.warning("Ignoring unknown alignment %r", value)
                continue
            clean[attr] = value

        elif attr in _TEXT_ATTRS:
            if not isinstance(value, str) or not value.strip():
                logger.warning("Ignoring empty value for %s", attr)
                continue
            clean[attr] = value.strip()

        elif attr == "image_url":
            clean[attr] = value or None

        else:
            logger.warning("Ignoring unknown field attribute %r", key)
    return clean


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class FieldStore:
    def __init__(self, default_font_family: str = DEFAULT_FONT_FAMILY):
        self._fields: List[TemplateField] = []
        self._selected_id: Optional[str] = None
        self._listeners: List[Listener] = []
        self._default_font_family = default_font_family

    # ---------- observation ----------
    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ---------- queries ----------
    @property
    def fields(self) -> Tuple[TemplateField, ...]:
        return tuple(self._fields)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_field(self) -> Optional[TemplateField]:
        return self.get(self._selected_id) if self._selected_id else None

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return self._index_of(field_id) is not None

    def get(self, field_id: Optional[str]) -> Optional[TemplateField]:
        idx = self._index_of(field_id)
        return self._fields[idx] if idx is not None else None

    def snapshot(self) -> List[TemplateField]:
        """Independent copies, safe to hand to the persistence collaborator."""
        return [f.copy() for f in self._fields]

    def _index_of(self, field_id: object) -> Optional[int]:
        for i, f in enumerate(self._fields):
            if f.id == field_id:
                return i
        return None

    # ---------- mutations ----------
    def add(self, field_type: str) -> str:
        """Create a field with type defaults, select it and return its id."""
        new = make_field(field_type, font_family=self._default_font_family)
        while new.id in self:
            new = replace(new, id=new_field_id())
        self._fields.append(new)
        self._selected_id = new.id
        logger.debug("Added %s field %s", field_type, new.id)
        self._notify()
        return new.id

    def update(self, field_id: str, patch: Dict[str, Any]) -> bool:
        idx = self._index_of(field_id)
        if idx is None:
            logger.warning("update: no field with id %r", field_id)
            return False

        clean = normalize_patch(patch)
        if not clean:
            return False

        current = self._fields[idx]
        updated = replace(current, **clean)
        if updated == current:
            return False
        self._fields[idx] = updated
        self._notify()
        return True

    def remove(self, field_id: str) -> bool:
        idx = self._index_of(field_id)
        if idx is None:
            logger.warning("remove: no field with id %r", field_id)
            return False

        del self._fields[idx]
        if self._selected_id == field_id:
            self._selected_id = None
        logger.debug("Removed field %s", field_id)
        self._notify()
        return True

    def select(self, field_id: Optional[str]) -> Optional[str]:
        """
        Select *field_id*. An unknown id falls back to the first field (or
        none), so the selection never points at a missing field.
        """
        if field_id is not None and field_id in self:
            new_id: Optional[str] = field_id
        else:
            if field_id is not None:
                logger.warning("select: no field with id %r, falling back", field_id)
            new_id = self._fields[0].id if self._fields else None

        if new_id != self._selected_id:
            self._selected_id = new_id
            self._notify()
        return new_id

    def clear_selection(self) -> None:
        if self._selected_id is not None:
            self._selected_id = None
            self._notify()

    def replace_all(self, fields: Iterable[TemplateField]) -> None:
        """Bulk-load fields (e.g. a saved template) and select the first."""
        loaded: List[TemplateField] = []
        seen = set()
        for f in fields:
            f = normalize_field(f)
            if f.id in seen:
                fresh = new_field_id()
                logger.warning("Duplicate field id %r on load, reassigned to %r", f.id, fresh)
                f = replace(f, id=fresh)
            seen.add(f.id)
            loaded.append(f)

        self._fields = loaded
        self._selected_id = loaded[0].id if loaded else None
        logger.debug("Loaded %d field(s)", len(loaded))
        self._notify()
