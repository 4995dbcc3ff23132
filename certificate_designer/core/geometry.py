"""
core/geometry.py - Conversions between pointer pixels and page percentages.

Pointer positions and page rectangles are in the same pixel space (the
host's view coordinates). Persisted field geometry is always a percentage
of the page's width or height, so the same numbers lay out identically at
any zoom level.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .exceptions import GeometryError
from .models import TemplateField, clamp_position, clamp_size


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def scaled(self, factor: float) -> "Size":
        return Size(self.width * factor, self.height * factor)


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def contains(self, p: Point) -> bool:
        return self.left <= p.x <= self.right and self.top <= p.y <= self.bottom


# ---------- scalar conversions ----------

def to_percent(pixel_offset: float, page_dimension: float) -> float:
    if page_dimension <= 0:
        raise GeometryError(f"Page dimension must be positive, got {page_dimension}")
    return 100.0 * pixel_offset / page_dimension


def to_pixels(percent: float, page_dimension: float) -> float:
    if page_dimension <= 0:
        raise GeometryError(f"Page dimension must be positive, got {page_dimension}")
    return percent * page_dimension / 100.0


# ---------- rectangles ----------

def page_rect_for(page_size: Size, scale: float, origin: Point = Point(0.0, 0.0)) -> Rect:
    """Rendered page rectangle: intrinsic size times the display scale."""
    return Rect(origin.x, origin.y, page_size.width * scale, page_size.height * scale)


def field_pixel_rect(field: TemplateField, page_rect: Rect) -> Rect:
    """Where *field* is drawn inside *page_rect*."""
    return Rect(
        page_rect.left + to_pixels(field.x, page_rect.width),
        page_rect.top + to_pixels(field.y, page_rect.height),
        to_pixels(field.width, page_rect.width),
        to_pixels(field.height, page_rect.height),
    )


def handle_rect(field_rect: Rect, handle_size: float) -> Rect:
    """Bottom-right resize handle; fixed pixel size regardless of zoom."""
    return Rect(
        field_rect.right - handle_size,
        field_rect.bottom - handle_size,
        handle_size,
        handle_size,
    )


def hits_handle(pointer: Point, field_rect: Rect, handle_size: float) -> bool:
    return handle_rect(field_rect, handle_size).contains(pointer)


# ---------- drag / resize ----------

def capture_drag_offset(pointer: Point, field: TemplateField, page_rect: Rect) -> Point:
    """
    Vector from the field's top-left corner to the grab point.

    Re-applied on every move so the grabbed point stays under the cursor.
    """
    return pointer - field_pixel_rect(field, page_rect).top_left


def drag_position(pointer: Point, offset: Point, page_rect: Rect) -> Tuple[float, float]:
    """New clamped (x, y) percentages for a field being dragged."""
    corner = pointer - offset - page_rect.top_left
    return (
        clamp_position(to_percent(corner.x, page_rect.width)),
        clamp_position(to_percent(corner.y, page_rect.height)),
    )


def resize_dimensions(pointer: Point, field_rect: Rect, page_rect: Rect) -> Tuple[float, float]:
    """
    New (width, height) percentages while dragging the resize handle.

    Measured from the field's own top-left but normalized by the page, since
    persisted sizes are percent-of-page.
    """
    extent = pointer - field_rect.top_left
    return (
        clamp_size(to_percent(extent.x, page_rect.width)),
        clamp_size(to_percent(extent.y, page_rect.height)),
    )
