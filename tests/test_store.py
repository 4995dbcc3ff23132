"""
Tests for FieldStore mutations, selection integrity and patch cleaning.
"""

import logging

import pytest

from certificate_designer.core.models import QR_CODE, STUDENT_NAME, TemplateField
from certificate_designer.core.store import FieldStore, normalize_patch


@pytest.fixture
def store():
    return FieldStore()


def _loaded(*ids):
    s = FieldStore()
    s.replace_all([TemplateField(id=i, type=STUDENT_NAME) for i in ids])
    return s


class TestAdd:
    def test_add_selects_new_field(self, store):
        fid = store.add(STUDENT_NAME)
        assert store.selected_id == fid
        assert len(store) == 1

    def test_add_uses_store_default_font(self):
        s = FieldStore(default_font_family="Georgia")
        fid = s.add(STUDENT_NAME)
        assert s.get(fid).font_family == "Georgia"

    def test_add_notifies(self, store):
        calls = []
        store.add_listener(lambda: calls.append(1))
        store.add(QR_CODE)
        assert calls == [1]


class TestUpdate:
    def test_merges_patch(self, store):
        fid = store.add(STUDENT_NAME)
        assert store.update(fid, {"x": 10, "fontSize": 24})
        f = store.get(fid)
        assert f.x == 10.0
        assert f.font_size == 24.0
        assert f.y == 50.0

    def test_replaces_record_atomically(self, store):
        fid = store.add(STUDENT_NAME)
        before = store.get(fid)
        store.update(fid, {"x": 10, "y": 20})
        after = store.get(fid)
        assert after is not before
        assert (before.x, before.y) == (50.0, 50.0)
        assert (after.x, after.y) == (10.0, 20.0)

    def test_unknown_id_is_noop(self, store, caplog):
        store.add(STUDENT_NAME)
        snapshot = store.snapshot()
        with caplog.at_level(logging.WARNING):
            assert store.update("missing", {"x": 1}) is False
        assert store.snapshot() == snapshot
        assert "missing" in caplog.text

    def test_negative_size_clamped(self, store):
        fid = store.add(QR_CODE)
        store.update(fid, {"width": -20, "height": 2})
        f = store.get(fid)
        assert (f.width, f.height) == (5.0, 5.0)

    def test_position_clamped(self, store):
        fid = store.add(QR_CODE)
        store.update(fid, {"x": 140, "y": -3})
        f = store.get(fid)
        assert (f.x, f.y) == (100.0, 0.0)

    def test_type_and_id_immutable(self, store):
        fid = store.add(QR_CODE)
        store.update(fid, {"type": "image", "id": "other"})
        f = store.get(fid)
        assert f.type == QR_CODE
        assert f.id == fid

    def test_no_change_does_not_notify(self, store):
        fid = store.add(QR_CODE)
        calls = []
        store.add_listener(lambda: calls.append(1))
        store.update(fid, {"x": 50})
        assert calls == []


class TestRemoveAndSelect:
    def test_remove_selected_clears_selection(self):
        s = _loaded("a", "b")
        s.select("b")
        s.remove("b")
        assert s.selected_id is None

    def test_remove_other_keeps_selection(self):
        s = _loaded("a", "b", "c")
        s.select("b")
        s.remove("c")
        assert s.selected_id == "b"

    def test_remove_unknown(self):
        s = _loaded("a")
        assert s.remove("zzz") is False
        assert len(s) == 1

    def test_select_unknown_falls_back_to_first(self):
        s = _loaded("a", "b")
        s.select("b")
        assert s.select("ghost") == "a"
        assert s.selected_id == "a"

    def test_select_unknown_on_empty_store(self, store):
        assert store.select("ghost") is None
        assert store.selected_id is None

    def test_selected_field_is_derived(self):
        s = _loaded("a", "b")
        s.select("b")
        assert s.selected_field.id == "b"

    def test_clear_selection(self):
        s = _loaded("a")
        s.clear_selection()
        assert s.selected_field is None


class TestReplaceAll:
    def test_selects_first(self):
        s = _loaded("a", "b")
        assert s.selected_id == "a"
        assert [f.id for f in s.fields] == ["a", "b"]

    def test_duplicate_ids_reassigned(self):
        s = _loaded("a", "a")
        ids = [f.id for f in s.fields]
        assert ids[0] == "a"
        assert ids[1] != "a"

    def test_empty(self):
        s = _loaded()
        assert len(s) == 0
        assert s.selected_id is None

    def test_snapshot_is_independent(self):
        s = _loaded("a")
        snap = s.snapshot()
        snap[0].x = 1.0
        assert s.get("a").x == 50.0


class TestNormalizePatch:
    def test_snake_and_camel_keys(self):
        assert normalize_patch({"font_size": 20, "fontColor": "#ff0000"}) == {
            "font_size": 20.0,
            "font_color": "#ff0000",
        }

    def test_drops_unusable_values(self):
        assert normalize_patch({"x": "abc", "alignment": "justify", "fontFamily": "  ", "y": True}) == {}

    def test_empty_image_url_clears(self):
        assert normalize_patch({"imageUrl": ""}) == {"image_url": None}

    def test_font_size_floor(self):
        assert normalize_patch({"fontSize": 0}) == {"font_size": 1.0}
