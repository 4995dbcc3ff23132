"""
core/preview.py - Certificate preview rendering.

Fields are laid out with the same percentage -> pixel mapping the editor
uses (geometry.field_pixel_rect), so the preview matches the editable view
at any scale. ``layout`` produces plain PreviewBlock records; ``render``
paints them onto a Pillow image.

Without overrides every type shows representative sample content. Pass a
``data`` mapping keyed by field type to produce a final certificate with
real values; a ``qrCode`` value is then encoded as a real QR code.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

import qrcode

from .config import EditorConfig
from .exceptions import RenderError
from .geometry import Point, Rect, Size, field_pixel_rect, page_rect_for
from .models import (
    CERTIFICATE_ID,
    COMPLETION_DATE,
    COURSE_NAME,
    IMAGE,
    ISSUER_NAME,
    ISSUER_TITLE,
    QR_CODE,
    SIGNATURE,
    STUDENT_NAME,
    TemplateField,
)
from .utils import open_image_source

logger = logging.getLogger(__name__)

SAMPLE_VALUES: Dict[str, str] = {
    STUDENT_NAME: "John Doe",
    COURSE_NAME: "LIPS Sales System",
    CERTIFICATE_ID: "CERT-12345-6789",
    ISSUER_NAME: "Closer College",
    ISSUER_TITLE: "CEO",
    SIGNATURE: "John Smith",
}

_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)

KIND_TEXT = "text"
KIND_SIGNATURE = "signature"
KIND_QR = "qr"
KIND_IMAGE = "image"

# placeholder palette
_PLACEHOLDER_FILL = "#f5f5f5"
_PLACEHOLDER_BORDER = "#d4d4d4"
_PLACEHOLDER_ICON = "#a3a3a3"

_BOLD_WEIGHTS = ("bold", "bolder", "600", "700", "800", "900")

ImageLoader = Callable[[str], Image.Image]


def format_long_date(value: _dt.date) -> str:
    """'October 19, 2026' regardless of the process locale."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


@dataclass(frozen=True)
class PreviewBlock:
    field_id: str
    field_type: str
    kind: str
    rect: Rect
    text: str = ""
    font_family: str = ""
    font_weight: str = "normal"
    font_size: float = 0.0           # already multiplied by scale
    color: str = "#000000"
    alignment: str = "center"
    image_url: Optional[str] = None
    qr_data: Optional[str] = None    # None -> placeholder glyph


class PreviewRenderer:
    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        today: Callable[[], _dt.date] = _dt.date.today,
        image_loader: ImageLoader = open_image_source,
    ):
        self.config = config or EditorConfig()
        self._today = today
        self._load_image = image_loader

    # ---------- content ----------
    def _text_for(self, field_type: str, data: Mapping[str, Any]) -> str:
        value = data.get(field_type)
        if field_type == COMPLETION_DATE:
            if value is None:
                value = self._today()
            if isinstance(value, (_dt.date, _dt.datetime)):
                return format_long_date(value)
            return str(value)
        if value is None:
            return SAMPLE_VALUES.get(field_type, field_type)
        return str(value)

    def layout(
        self,
        fields: Iterable[TemplateField],
        page_size: Size,
        scale: float = 1.0,
        data: Optional[Mapping[str, Any]] = None,
    ) -> List[PreviewBlock]:
        """
        Compute one PreviewBlock per field, in store order.

        Font sizes are in output pixels: fontSize * scale, and for signatures
        additionally the signature multiplier.
        """
        if not page_size.is_valid:
            raise RenderError(f"Cannot lay out a preview for page size {page_size.width}x{page_size.height}")
        if scale <= 0:
            raise RenderError(f"Preview scale must be positive, got {scale}")

        data = data or {}
        page = page_rect_for(page_size, scale, Point(0.0, 0.0))
        blocks: List[PreviewBlock] = []

        for f in fields:
            rect = field_pixel_rect(f, page)
            common = dict(
                field_id=f.id,
                field_type=f.type,
                rect=rect,
                font_family=f.font_family,
                font_weight=f.font_weight,
                color=f.font_color,
                alignment=f.alignment,
            )
            if f.type == QR_CODE:
                value = data.get(QR_CODE)
                blocks.append(PreviewBlock(
                    kind=KIND_QR,
                    qr_data=str(value) if value else None,
                    **common,
                ))
            elif f.type == IMAGE:
                blocks.append(PreviewBlock(kind=KIND_IMAGE, image_url=f.image_url, **common))
            elif f.type == SIGNATURE:
                blocks.append(PreviewBlock(
                    kind=KIND_SIGNATURE,
                    text=self._text_for(SIGNATURE, data),
                    font_size=f.font_size * self.config.signature_scale * scale,
                    **common,
                ))
            else:
                blocks.append(PreviewBlock(
                    kind=KIND_TEXT,
                    text=self._text_for(f.type, data),
                    font_size=f.font_size * scale,
                    **common,
                ))
        return blocks

    # ---------- painting ----------
    def render(
        self,
        fields: Iterable[TemplateField],
        page_size: Size,
        scale: float = 1.0,
        data: Optional[Mapping[str, Any]] = None,
        background: Optional[Image.Image] = None,
    ) -> Image.Image:
        """Paint the preview; the background (if any) is stretched to the page."""
        blocks = self.layout(fields, page_size, scale, data)
        out_size = (max(1, round(page_size.width * scale)), max(1, round(page_size.height * scale)))

        if background is not None:
            canvas = background.convert("RGBA").resize(out_size, Image.LANCZOS)
        else:
            canvas = Image.new("RGBA", out_size, "white")

        draw = ImageDraw.Draw(canvas)
        for block in blocks:
            if block.kind == KIND_TEXT:
                self._draw_text(draw, block)
            elif block.kind == KIND_SIGNATURE:
                self._draw_signature(draw, block)
            elif block.kind == KIND_QR:
                self._draw_qr(canvas, draw, block)
            elif block.kind == KIND_IMAGE:
                self._draw_image(canvas, draw, block)
        return canvas

    def _draw_text(self, draw: ImageDraw.ImageDraw, block: PreviewBlock) -> None:
        font = load_font(block.font_family, _is_bold(block.font_weight), _px(block.font_size))
        left, top, right, bottom = draw.textbbox((0, 0), block.text, font=font)
        text_w, text_h = right - left, bottom - top

        r = block.rect
        if block.alignment == "left":
            x = r.left
        elif block.alignment == "right":
            x = r.right - text_w
        else:
            x = r.left + (r.width - text_w) / 2.0
        y = r.top + (r.height - text_h) / 2.0

        draw.text((x - left, y - top), block.text, font=font, fill=_color(block.color))

    def _draw_signature(self, draw: ImageDraw.ImageDraw, block: PreviewBlock) -> None:
        font = load_font(block.font_family, _is_bold(block.font_weight), _px(block.font_size))
        left, top, right, bottom = draw.textbbox((0, 0), block.text, font=font)
        text_w, text_h = right - left, bottom - top

        r = block.rect
        rule_w = max(1, round(block.font_size / 16.0))
        gap = max(2.0, block.font_size * 0.1)
        rule_y = r.bottom - rule_w
        x = r.left + (r.width - text_w) / 2.0
        y = rule_y - gap - text_h

        fill = _color(block.color)
        draw.text((x - left, y - top), block.text, font=font, fill=fill)
        draw.line([(x, rule_y), (x + text_w, rule_y)], fill="black", width=rule_w)

    def _draw_qr(self, canvas: Image.Image, draw: ImageDraw.ImageDraw, block: PreviewBlock) -> None:
        r = block.rect
        if block.qr_data:
            side = _px(min(r.width, r.height))
            qr_img = render_qr_image(block.qr_data).resize((side, side), Image.NEAREST)
            canvas.paste(qr_img, (round(r.left + (r.width - side) / 2.0), round(r.top + (r.height - side) / 2.0)))
            return

        _draw_placeholder_box(draw, r)
        side = min(r.width, r.height) * 0.75
        ox = r.left + (r.width - side) / 2.0
        oy = r.top + (r.height - side) / 2.0

        def pt(vx: float, vy: float) -> Tuple[float, float]:
            # 0..100 glyph space
            return (ox + vx * side / 100.0, oy + vy * side / 100.0)

        heavy = max(1, round(side * 0.05))
        light = max(1, round(side * 0.02))
        draw.rectangle([pt(30, 30), pt(70, 70)], outline="black", width=heavy)
        draw.rectangle([pt(40, 40), pt(60, 60)], outline="black", width=heavy)
        draw.line([pt(50, 20), pt(50, 80)], fill="black", width=light)
        draw.line([pt(20, 50), pt(80, 50)], fill="black", width=light)

    def _draw_image(self, canvas: Image.Image, draw: ImageDraw.ImageDraw, block: PreviewBlock) -> None:
        r = block.rect
        if block.image_url:
            try:
                img = self._load_image(block.image_url)
            except (OSError, ValueError) as exc:
                logger.warning("Preview image %r unavailable: %s", block.image_url, exc)
            else:
                img = img.convert("RGBA")
                img.thumbnail((_px(r.width), _px(r.height)), Image.LANCZOS)
                pos = (round(r.left + (r.width - img.width) / 2.0), round(r.top + (r.height - img.height) / 2.0))
                canvas.alpha_composite(img, dest=(max(0, pos[0]), max(0, pos[1])))
                return

        _draw_placeholder_box(draw, r)
        side = min(r.width, r.height) * 0.75
        ox = r.left + (r.width - side) / 2.0
        oy = r.top + (r.height - side) / 2.0
        frame = [ox + side * 0.1, oy + side * 0.15, ox + side * 0.9, oy + side * 0.85]
        stroke = max(1, round(side * 0.03))
        draw.rectangle(frame, outline=_PLACEHOLDER_ICON, width=stroke)
        # mountains + sun
        draw.line(
            [
                (frame[0], oy + side * 0.7),
                (ox + side * 0.35, oy + side * 0.45),
                (ox + side * 0.6, oy + side * 0.7),
                (ox + side * 0.7, oy + side * 0.6),
                (frame[2], oy + side * 0.75),
            ],
            fill=_PLACEHOLDER_ICON,
            width=stroke,
        )
        sun = side * 0.06
        cx, cy = ox + side * 0.68, oy + side * 0.33
        draw.ellipse([cx - sun, cy - sun, cx + sun, cy + sun], outline=_PLACEHOLDER_ICON, width=stroke)


# ---------- helpers ----------

def render_qr_image(data: str) -> Image.Image:
    """Real QR code for *data* as an RGBA Pillow image."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGBA")


def _draw_placeholder_box(draw: ImageDraw.ImageDraw, r: Rect) -> None:
    draw.rectangle([r.left, r.top, r.right, r.bottom], fill=_PLACEHOLDER_FILL, outline=_PLACEHOLDER_BORDER)


def _px(value: float) -> int:
    return max(1, int(round(value)))


def _is_bold(weight: str) -> bool:
    return str(weight).lower() in _BOLD_WEIGHTS


def _color(value: str) -> Tuple[int, ...]:
    try:
        return ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unknown font color %r, using black", value)
        return (0, 0, 0)


def _font_candidates(family: str, bold: bool) -> List[str]:
    base = (family or "").strip()
    compact = base.replace(" ", "")
    names: List[str] = []
    if bold:
        names += [f"{compact}-Bold.ttf", f"{compact}bd.ttf", f"{base} Bold.ttf"]
    names += [f"{compact}.ttf", f"{base}.ttf", f"{compact.lower()}.ttf"]
    names.append("DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf")
    return names


@lru_cache(maxsize=128)
def load_font(family: str, bold: bool, size_px: int) -> ImageFont.FreeTypeFont:
    """
    Best available font for *family*. Falls back to DejaVu, then to Pillow's
    built-in scalable default.
    """
    for name in _font_candidates(family, bold):
        try:
            return ImageFont.truetype(name, size_px)
        except OSError:
            continue
    logger.debug("No TrueType font found for %r, using Pillow default", family)
    return ImageFont.load_default(size=size_px)
