"""
Tests for the saved template format and asset path helpers.
"""

import json
import os

import pytest

from certificate_designer.core.exceptions import TemplateError
from certificate_designer.core.models import STUDENT_NAME, TemplateField
from certificate_designer.core.template_file import (
    FORMAT_VERSION,
    TemplateDocument,
    read_template,
    write_template,
)
from certificate_designer.core.utils import (
    is_remote_url,
    local_path_for,
    path_to_url,
    relative_to_template,
    resolve_from_template,
)


class TestTemplateFile:
    def test_write_then_read(self, tmp_path):
        background = tmp_path / "assets" / "background.pdf"
        background.parent.mkdir()
        background.write_bytes(b"%PDF-1.4")
        path = tmp_path / "diploma.json"

        fields = [TemplateField(id="a", type=STUDENT_NAME, x=12.5, font_family="Great Vibes")]
        write_template(str(path), TemplateDocument(document=str(background), fields=fields))

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["version"] == FORMAT_VERSION
        assert raw["document"] == os.path.join("assets", "background.pdf")
        assert raw["fields"][0]["fontFamily"] == "Great Vibes"

        doc = read_template(str(path))
        assert os.path.normcase(doc.document) == os.path.normcase(str(background))
        assert doc.fields == fields

    def test_bad_fields_are_skipped(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text(json.dumps({"fields": [{"id": "a", "type": "studentName"}, {"type": "nope"}]}), encoding="utf-8")
        doc = read_template(str(path))
        assert [f.id for f in doc.fields] == ["a"]
        assert doc.document == ""

    def test_fields_must_be_a_list(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text(json.dumps({"fields": {"a": 1}}), encoding="utf-8")
        with pytest.raises(TemplateError):
            read_template(str(path))

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(TemplateError):
            read_template(str(path))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "t.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            read_template(str(path))


class TestPathHelpers:
    def test_outside_template_dir_stays_absolute(self, tmp_path):
        template = tmp_path / "templates" / "t.json"
        other = tmp_path / "elsewhere" / "bg.png"
        assert relative_to_template(str(other), str(template)) == str(other)

    def test_resolve_relative(self, tmp_path):
        template = tmp_path / "t.json"
        assert resolve_from_template("bg.png", str(template)) == os.path.normpath(str(tmp_path / "bg.png"))

    def test_resolve_keeps_absolute(self, tmp_path):
        absolute = str(tmp_path / "bg.png")
        assert resolve_from_template(absolute, str(tmp_path / "t.json")) == absolute

    def test_url_kinds(self, tmp_path):
        assert is_remote_url("https://example.com/a.png")
        assert not is_remote_url("file:///tmp/a.png")
        assert local_path_for("https://example.com/a.png") is None
        assert local_path_for("relative/a.png") == "relative/a.png"

    def test_file_url_round_trip(self, tmp_path):
        p = tmp_path / "logo.png"
        assert os.path.normcase(local_path_for(path_to_url(str(p)))) == os.path.normcase(str(p))
