"""
Tests for percent <-> pixel conversion, drag offsets and resize sizing.
"""

import pytest

from certificate_designer.core.exceptions import GeometryError
from certificate_designer.core.geometry import (
    Point,
    Rect,
    Size,
    capture_drag_offset,
    drag_position,
    field_pixel_rect,
    handle_rect,
    hits_handle,
    page_rect_for,
    resize_dimensions,
    to_percent,
    to_pixels,
)
from certificate_designer.core.models import TemplateField

PAGE = Size(800.0, 600.0)


def _field(x=50.0, y=50.0, w=35.0, h=12.0):
    return TemplateField(id="f", type="studentName", x=x, y=y, width=w, height=h)


class TestConversions:
    def test_to_percent(self):
        assert to_percent(200, 800) == 25.0

    def test_to_pixels(self):
        assert to_pixels(25, 800) == 200.0

    @pytest.mark.parametrize("dim", [0, -10])
    def test_non_positive_dimension(self, dim):
        with pytest.raises(GeometryError):
            to_percent(10, dim)
        with pytest.raises(GeometryError):
            to_pixels(10, dim)

    @pytest.mark.parametrize("values", [(0, 0, 5, 5), (12.5, 33.3, 20, 7.25), (100, 100, 150, 60)])
    @pytest.mark.parametrize("s1,s2", [(0.5, 1.0), (0.9, 3.7), (5.0, 0.25)])
    def test_round_trip_is_scale_independent(self, values, s1, s2):
        """pixels at s1 -> percent -> pixels at s2 -> percent gives the same numbers."""
        r1 = page_rect_for(PAGE, s1)
        r2 = page_rect_for(PAGE, s2)
        dims = (r1.width, r1.height, r1.width, r1.height)
        first = [to_percent(to_pixels(v, d), d) for v, d in zip(values, dims)]
        dims2 = (r2.width, r2.height, r2.width, r2.height)
        second = [to_percent(to_pixels(v, d), d) for v, d in zip(first, dims2)]
        assert second == pytest.approx(list(values))


class TestRects:
    def test_page_rect_scales_with_origin(self):
        r = page_rect_for(PAGE, 0.5, Point(10, 20))
        assert r == Rect(10, 20, 400, 300)

    def test_field_pixel_rect(self):
        page = page_rect_for(PAGE, 1.0)
        assert field_pixel_rect(_field(), page) == Rect(400, 300, 280, 72)

    def test_field_pixel_rect_keeps_proportions_across_scales(self):
        f = _field()
        small = field_pixel_rect(f, page_rect_for(PAGE, 0.5))
        big = field_pixel_rect(f, page_rect_for(PAGE, 2.0))
        assert big.width == pytest.approx(small.width * 4)
        assert big.left == pytest.approx(small.left * 4)

    def test_handle_is_bottom_right(self):
        h = handle_rect(Rect(100, 100, 50, 40), 16)
        assert h == Rect(134, 124, 16, 16)
        assert hits_handle(Point(149, 139), Rect(100, 100, 50, 40), 16)
        assert not hits_handle(Point(110, 110), Rect(100, 100, 50, 40), 16)


class TestDrag:
    @pytest.mark.parametrize("grab", [(0.0, 0.0), (10.0, 5.0), (279.0, 71.0), (140.0, 36.0)])
    def test_offset_stability(self, grab):
        """Moving by a pixel delta moves the field by the same percentage delta wherever it was grabbed."""
        page = page_rect_for(PAGE, 1.0)
        f = _field(x=20, y=30)
        rect = field_pixel_rect(f, page)
        start = Point(rect.left + grab[0], rect.top + grab[1])

        offset = capture_drag_offset(start, f, page)
        x, y = drag_position(start + Point(80, -30), offset, page)

        assert x == pytest.approx(30.0)
        assert y == pytest.approx(25.0)

    def test_no_jump_on_grab(self):
        page = page_rect_for(PAGE, 1.3, Point(7, 9))
        f = _field(x=12, y=44)
        start = Point(page.left + 200, page.top + 350)
        offset = capture_drag_offset(start, f, page)
        assert drag_position(start, offset, page) == pytest.approx((12.0, 44.0))

    def test_clamped_to_page(self):
        page = page_rect_for(PAGE, 1.0)
        f = _field(x=90, y=5)
        start = Point(730, 40)
        offset = capture_drag_offset(start, f, page)
        assert drag_position(Point(5000, -5000), offset, page) == (100.0, 0.0)
        assert drag_position(Point(-5000, 5000), offset, page) == (0.0, 100.0)


class TestResize:
    def test_from_field_top_left(self):
        page = page_rect_for(PAGE, 1.0)
        rect = field_pixel_rect(_field(x=10, y=10), page)   # top-left at (80, 60)
        w, h = resize_dimensions(Point(480, 180), rect, page)
        assert (w, h) == pytest.approx((50.0, 20.0))

    def test_floor(self):
        page = page_rect_for(PAGE, 1.0)
        rect = field_pixel_rect(_field(x=10, y=10), page)
        assert resize_dimensions(Point(0, 0), rect, page) == (5.0, 5.0)

    def test_no_ceiling(self):
        page = page_rect_for(PAGE, 1.0)
        rect = field_pixel_rect(_field(x=90, y=90), page)
        w, h = resize_dimensions(Point(1600, 1200), rect, page)
        assert w > 100 and h > 100
