"""
core/template_file.py - Saved template format.

    {
      "version": 1,
      "document": "background.pdf",      # relative to the template when possible
      "fields": [ { persisted field record }, ... ]
    }

Reading is lenient: bad field records are skipped (see
models.fields_from_records), a missing "document" means no background.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .exceptions import TemplateError
from .models import TemplateField, fields_from_records, fields_to_records
from .utils import relative_to_template, resolve_from_template

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


@dataclass
class TemplateDocument:
    document: str = ""
    fields: List[TemplateField] = field(default_factory=list)

    def to_dict(self, template_path: str = "") -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "document": relative_to_template(self.document, template_path) if template_path else self.document,
            "fields": fields_to_records(self.fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], template_path: str = "") -> "TemplateDocument":
        if not isinstance(data, dict):
            raise TemplateError("Template file must contain a JSON object")

        version = data.get("version", FORMAT_VERSION)
        if isinstance(version, int) and version > FORMAT_VERSION:
            logger.warning("Template format version %s is newer than %s; reading what is understood", version, FORMAT_VERSION)

        records = data.get("fields", [])
        if not isinstance(records, list):
            raise TemplateError("'fields' must be a list")

        document = data.get("document") or ""
        if not isinstance(document, str):
            raise TemplateError("'document' must be a path string")
        if template_path:
            document = resolve_from_template(document, template_path)

        return cls(document=document, fields=fields_from_records(records))


def write_template(path: str, doc: TemplateDocument) -> None:
    """Raises OSError on write failure."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc.to_dict(path), f, indent=2)
    logger.debug("Wrote %d field(s) to %s", len(doc.fields), path)


def read_template(path: str) -> TemplateDocument:
    """
    Raises OSError when the file cannot be read, json.JSONDecodeError /
    UnicodeDecodeError for malformed content and TemplateError for a
    structurally wrong template.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return TemplateDocument.from_dict(data, path)
