from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import FieldDataError

logger = logging.getLogger(__name__)


# ---------- Closed enumerations ----------

STUDENT_NAME = "studentName"
COURSE_NAME = "courseName"
COMPLETION_DATE = "completionDate"
CERTIFICATE_ID = "certificateId"
SIGNATURE = "signature"
QR_CODE = "qrCode"
ISSUER_NAME = "issuerName"
ISSUER_TITLE = "issuerTitle"
IMAGE = "image"

FIELD_TYPES = (
    STUDENT_NAME,
    COURSE_NAME,
    COMPLETION_DATE,
    CERTIFICATE_ID,
    SIGNATURE,
    QR_CODE,
    ISSUER_NAME,
    ISSUER_TITLE,
    IMAGE,
)

# Types whose text presentation attributes are not shown in the properties panel
NON_TEXT_TYPES = (QR_CODE, SIGNATURE)

ALIGNMENTS = ("left", "center", "right")

FONT_WEIGHTS = (
    "normal", "bold", "lighter", "bolder",
    "100", "200", "300", "400", "500", "600", "700", "800", "900",
)

# label + highlight color per type (toolbox buttons, field rectangles)
FIELD_TYPE_INFO: Dict[str, Dict[str, str]] = {
    STUDENT_NAME: {"label": "Student Name", "color": "#4f46e5"},
    COURSE_NAME: {"label": "Course Name", "color": "#0891b2"},
    COMPLETION_DATE: {"label": "Completion Date", "color": "#059669"},
    CERTIFICATE_ID: {"label": "Certificate ID", "color": "#7c3aed"},
    SIGNATURE: {"label": "Signature", "color": "#b91c1c"},
    QR_CODE: {"label": "QR Code", "color": "#0f172a"},
    ISSUER_NAME: {"label": "Issuer Name", "color": "#c2410c"},
    ISSUER_TITLE: {"label": "Issuer Title", "color": "#a16207"},
    IMAGE: {"label": "Image", "color": "#6366f1"},
}

STANDARD_FONTS = (
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Arial",
    "Verdana",
    "Georgia",
    "Trebuchet MS",
)

SCRIPT_FONTS = (
    "Great Vibes",
    "Dancing Script",
    "Alex Brush",
    "Pinyon Script",
    "Allura",
    "Tangerine",
    "Edwardian Script ITC",
    "Snell Roundhand",
    "Monotype Corsiva",
    "Brush Script MT",
    "Lucida Handwriting",
    "Segoe Script",
)

# ---------- Geometry limits ----------

MIN_FIELD_SIZE = 5.0
MIN_POSITION = 0.0
MAX_POSITION = 100.0
MIN_FONT_SIZE = 1.0

DEFAULT_FONT_SIZE = 16.0
DEFAULT_FONT_FAMILY = "Helvetica"
DEFAULT_FONT_WEIGHT = "normal"
DEFAULT_FONT_COLOR = "#000000"
DEFAULT_ALIGNMENT = "center"

# python attribute -> persisted key
PERSISTED_KEYS = {
    "id": "id",
    "type": "type",
    "x": "x",
    "y": "y",
    "width": "width",
    "height": "height",
    "font_size": "fontSize",
    "font_family": "fontFamily",
    "font_weight": "fontWeight",
    "font_color": "fontColor",
    "alignment": "alignment",
    "image_url": "imageUrl",
}
ATTRS_BY_KEY = {v: k for k, v in PERSISTED_KEYS.items()}


def new_field_id() -> str:
    return f"field-{uuid.uuid4().hex[:12]}"


def clamp_position(value: float) -> float:
    return max(MIN_POSITION, min(MAX_POSITION, float(value)))


def clamp_size(value: float) -> float:
    # floor only; a field may extend past the page edge
    return max(MIN_FIELD_SIZE, float(value))


def clamp_font_size(value: float) -> float:
    return max(MIN_FONT_SIZE, float(value))


def type_label(field_type: str) -> str:
    info = FIELD_TYPE_INFO.get(field_type)
    return info["label"] if info else field_type


def type_color(field_type: str) -> str:
    info = FIELD_TYPE_INFO.get(field_type)
    return info["color"] if info else "#3b82f6"


# ---------- Core field model ----------

@dataclass
class TemplateField:
    # identity
    id: str
    type: str                        # one of FIELD_TYPES, immutable

    # geometry, percent of page width/height
    x: float = 50.0
    y: float = 50.0
    width: float = 35.0
    height: float = 12.0

    # text props
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    font_weight: str = DEFAULT_FONT_WEIGHT
    font_color: str = DEFAULT_FONT_COLOR
    alignment: str = DEFAULT_ALIGNMENT   # left|center|right

    # image props
    image_url: Optional[str] = None

    @property
    def is_text(self) -> bool:
        return self.type not in NON_TEXT_TYPES and self.type != IMAGE

    def copy(self) -> "TemplateField":
        return replace(self)

    # ---- persisted representation ----
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for attr, key in PERSISTED_KEYS.items():
            value = getattr(self, attr)
            if attr == "image_url" and not value:
                continue
            out[key] = value
        return out

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TemplateField":
        """
        Build a field from a persisted record.

        Missing presentation attributes take their defaults, unknown keys are
        ignored and out-of-range geometry is clamped. Raises FieldDataError for
        an unknown type or unusable geometry.
        """
        if not isinstance(d, dict):
            raise FieldDataError(f"Field record must be a mapping, got {type(d).__name__}")

        field_type = d.get("type")
        if field_type not in FIELD_TYPES:
            raise FieldDataError(f"Unknown field type: {field_type!r}")

        kwargs: Dict[str, Any] = {}
        for key, value in d.items():
            attr = ATTRS_BY_KEY.get(key)
            if attr is None or value is None:
                continue
            kwargs[attr] = value

        try:
            for attr in ("x", "y", "width", "height", "font_size"):
                if attr in kwargs:
                    kwargs[attr] = _to_float(kwargs[attr])
        except (TypeError, ValueError) as exc:
            raise FieldDataError(f"Invalid geometry in field record: {exc}") from exc

        kwargs["id"] = str(kwargs.get("id") or new_field_id())
        if kwargs.get("alignment") not in ALIGNMENTS:
            kwargs.pop("alignment", None)

        return normalize_field(TemplateField(**kwargs))


def _to_float(value: Any) -> float:
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number


def normalize_field(f: TemplateField) -> TemplateField:
    """Return *f* with every geometry invariant enforced."""
    return replace(
        f,
        x=clamp_position(f.x),
        y=clamp_position(f.y),
        width=clamp_size(f.width),
        height=clamp_size(f.height),
        font_size=clamp_font_size(f.font_size),
    )


def default_geometry(field_type: str) -> Dict[str, float]:
    """Starting geometry for a newly added field of *field_type*."""
    square_w = field_type in (QR_CODE, SIGNATURE, IMAGE)
    square_h = field_type in (QR_CODE, IMAGE)
    return {
        "x": 50.0,
        "y": 50.0,
        "width": 20.0 if square_w else 35.0,
        "height": 20.0 if square_h else 12.0,
    }


def make_field(field_type: str, font_family: str = DEFAULT_FONT_FAMILY) -> TemplateField:
    if field_type not in FIELD_TYPES:
        raise FieldDataError(f"Unknown field type: {field_type!r}")
    return TemplateField(
        id=new_field_id(),
        type=field_type,
        font_family=font_family,
        **default_geometry(field_type),
    )


def fields_from_records(records: Iterable[Dict[str, Any]]) -> List[TemplateField]:
    """
    Bulk-convert persisted records, skipping the ones that cannot be read.

    Used when loading a saved template: one bad record should not cost the
    operator the rest of the layout.
    """
    out: List[TemplateField] = []
    for index, record in enumerate(records or []):
        try:
            out.append(TemplateField.from_dict(record))
        except FieldDataError as exc:
            logger.warning("Skipping field record %d: %s", index, exc)
    return out


def fields_to_records(fields: Iterable[TemplateField]) -> List[Dict[str, Any]]:
    return [f.to_dict() for f in fields]
