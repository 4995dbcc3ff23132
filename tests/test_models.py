"""
Tests for TemplateField defaults, clamping and persisted records.
"""

import pytest

from certificate_designer.core.exceptions import FieldDataError
from certificate_designer.core.models import (
    FIELD_TYPES,
    IMAGE,
    QR_CODE,
    SIGNATURE,
    STUDENT_NAME,
    TemplateField,
    default_geometry,
    fields_from_records,
    fields_to_records,
    make_field,
    type_color,
    type_label,
)


class TestDefaults:
    """Per-type defaults for newly added fields."""

    def test_text_field_is_wide_rectangle(self):
        f = make_field(STUDENT_NAME)
        assert (f.x, f.y, f.width, f.height) == (50.0, 50.0, 35.0, 12.0)

    @pytest.mark.parametrize("field_type", [QR_CODE, IMAGE])
    def test_square_footprint(self, field_type):
        assert default_geometry(field_type) == {"x": 50.0, "y": 50.0, "width": 20.0, "height": 20.0}

    def test_signature_is_narrow_but_text_height(self):
        assert default_geometry(SIGNATURE) == {"x": 50.0, "y": 50.0, "width": 20.0, "height": 12.0}

    def test_text_presentation_defaults(self):
        f = make_field(STUDENT_NAME)
        assert f.font_size == 16.0
        assert f.font_family == "Helvetica"
        assert f.font_weight == "normal"
        assert f.font_color == "#000000"
        assert f.alignment == "center"
        assert f.image_url is None

    def test_font_family_override(self):
        f = make_field(SIGNATURE, font_family="Great Vibes")
        assert f.font_family == "Great Vibes"

    def test_unknown_type_rejected(self):
        with pytest.raises(FieldDataError):
            make_field("logo")

    def test_ids_are_unique(self):
        ids = {make_field(STUDENT_NAME).id for _ in range(200)}
        assert len(ids) == 200

    def test_every_type_has_label_and_color(self):
        for field_type in FIELD_TYPES:
            assert type_label(field_type) != field_type
            assert type_color(field_type).startswith("#")

    def test_is_text(self):
        assert make_field(STUDENT_NAME).is_text
        assert not make_field(QR_CODE).is_text
        assert not make_field(SIGNATURE).is_text
        assert not make_field(IMAGE).is_text


class TestFromDict:
    """Reading persisted field records."""

    def test_camel_case_keys(self):
        f = TemplateField.from_dict({
            "id": "a", "type": "courseName", "x": 10, "y": 20, "width": 30, "height": 8,
            "fontSize": 22, "fontFamily": "Georgia", "fontWeight": "bold",
            "fontColor": "#112233", "alignment": "left",
        })
        assert f.id == "a"
        assert f.type == "courseName"
        assert (f.x, f.y, f.width, f.height) == (10.0, 20.0, 30.0, 8.0)
        assert f.font_size == 22.0
        assert f.font_family == "Georgia"
        assert f.font_weight == "bold"
        assert f.font_color == "#112233"
        assert f.alignment == "left"

    def test_missing_presentation_takes_defaults(self):
        f = TemplateField.from_dict({"id": "a", "type": "studentName", "x": 1, "y": 2, "width": 10, "height": 10})
        assert f.font_size == 16.0
        assert f.alignment == "center"

    def test_out_of_range_geometry_is_clamped(self):
        f = TemplateField.from_dict({"id": "a", "type": "qrCode", "x": -5, "y": 140, "width": 2, "height": 0})
        assert (f.x, f.y, f.width, f.height) == (0.0, 100.0, 5.0, 5.0)

    def test_width_has_no_ceiling(self):
        f = TemplateField.from_dict({"id": "a", "type": "image", "x": 90, "y": 90, "width": 150, "height": 40})
        assert f.width == 150.0

    def test_unknown_type(self):
        with pytest.raises(FieldDataError):
            TemplateField.from_dict({"id": "a", "type": "stamp"})

    def test_non_numeric_geometry(self):
        with pytest.raises(FieldDataError):
            TemplateField.from_dict({"id": "a", "type": "studentName", "x": "left"})

    def test_nan_geometry(self):
        with pytest.raises(FieldDataError):
            TemplateField.from_dict({"id": "a", "type": "studentName", "x": float("nan")})

    def test_unknown_alignment_dropped(self):
        f = TemplateField.from_dict({"id": "a", "type": "studentName", "alignment": "justify"})
        assert f.alignment == "center"

    def test_unknown_keys_ignored(self):
        f = TemplateField.from_dict({"id": "a", "type": "studentName", "rotation": 45})
        assert not hasattr(f, "rotation")

    def test_missing_id_generated(self):
        f = TemplateField.from_dict({"type": "studentName"})
        assert f.id.startswith("field-")


class TestRecords:
    """Bulk conversion used by template files."""

    def test_to_dict_omits_empty_image_url(self):
        data = make_field(STUDENT_NAME).to_dict()
        assert "imageUrl" not in data
        assert data["fontSize"] == 16.0

    def test_to_dict_keeps_image_url(self):
        f = make_field(IMAGE)
        f.image_url = "https://example.com/logo.png"
        assert f.to_dict()["imageUrl"] == "https://example.com/logo.png"

    def test_bad_records_are_skipped(self):
        records = [
            {"id": "a", "type": "studentName"},
            {"id": "b", "type": "bogus"},
            "not a record",
            {"id": "c", "type": "qrCode", "x": 5},
        ]
        fields = fields_from_records(records)
        assert [f.id for f in fields] == ["a", "c"]

    def test_records_roundtrip_values(self):
        original = [make_field(STUDENT_NAME), make_field(QR_CODE)]
        loaded = fields_from_records(fields_to_records(original))
        assert loaded == original
