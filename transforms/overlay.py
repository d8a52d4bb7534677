"""Visual overlays drawn on top of existing page content.

Positions are given with a bottom-left origin and colours as 0-255 channels;
both are converted to PyMuPDF conventions here. Nothing in this module
removes or rewrites existing content: ``redact`` and ``sign`` are
presentation-only and provide no security guarantee.
"""
from __future__ import annotations

import datetime
from typing import Iterable, List, Optional

import fitz  # PyMuPDF

from config.settings import settings
from document.adapter import Document, clone
from document.errors import InputMissing, InvalidParameter
from document.models import Rect
from utils.colors import ColorInput, parse_color
from utils.coordinates import to_fitz_point, to_fitz_rect
from utils.logging import logger
from utils.validation import distinct_sorted, validate_page_index, validate_page_indices

_FONT = "helv"
_BOLD_FONT = "hebo"

PAGE_NUMBER_POSITIONS = ("top", "bottom")
ALIGNMENTS = ("left", "center", "right")
ANNOTATION_KINDS = ("note", "highlight", "freetext")
SHAPES = ("rectangle", "ellipse", "line")


def _fitz_rect(page: fitz.Page, rect: Rect) -> fitz.Rect:
    return fitz.Rect(to_fitz_rect(rect, page.rect.height))


def _fitz_point(page: fitz.Page, x: float, y: float) -> fitz.Point:
    return fitz.Point(*to_fitz_point(x, y, page.rect.height))


def _aligned_x(page_width: float, text_width: float, alignment: str) -> float:
    if alignment == "left":
        return settings.side_margin
    if alignment == "right":
        return max(0.0, page_width - settings.side_margin - text_width)
    return (page_width - text_width) / 2


def _check_choice(value: str, allowed: Iterable[str], what: str) -> str:
    allowed = tuple(allowed)
    if value not in allowed:
        raise InvalidParameter(f"Unknown {what} {value!r}; expected one of {', '.join(allowed)}")
    return value


def add_text(
    document: Document,
    text: str,
    page_index: int = 0,
    x: float = 50,
    y: float = 50,
    font_size: float = 12,
    color: ColorInput | None = "0,0,0",
) -> Document:
    """Write a line of text with its baseline starting at (x, y) on one page."""
    if not text:
        raise InputMissing("Text is required")
    validate_page_index(page_index, document.page_count)
    rgb = parse_color(color)
    result = clone(document)
    page = result.handle[page_index]
    page.insert_text(_fitz_point(page, x, y), text, fontsize=font_size, fontname=_FONT, color=rgb)
    return result


def add_watermark(
    document: Document,
    text: str,
    font_size: Optional[float] = None,
    opacity: Optional[float] = None,
    rotation_angle: Optional[float] = None,
    color: ColorInput | None = None,
) -> Document:
    """
    Draw semi-transparent rotated text around the centre of every page.

    The start point is shifted left by ``len(text) * font_size / 4`` so that the
    text is roughly centred horizontally.
    """
    if not text:
        raise InputMissing("Watermark text is required")
    font_size = font_size or settings.watermark_font_size
    opacity = settings.watermark_opacity if opacity is None else opacity
    rotation_angle = settings.watermark_rotation if rotation_angle is None else rotation_angle
    if not 0.0 <= opacity <= 1.0:
        raise InvalidParameter(f"Opacity must be within 0-1, got {opacity}")
    rgb = parse_color(color if color is not None else settings.watermark_color)

    result = clone(document)
    for page in result.handle:
        width, height = page.rect.width, page.rect.height
        origin = _fitz_point(page, width / 2 - (len(text) * font_size) / 4, height / 2)
        # PyMuPDF's y axis points down, so a counter-clockwise angle is negated
        page.insert_text(
            origin,
            text,
            fontsize=font_size,
            fontname=_FONT,
            color=rgb,
            fill_opacity=opacity,
            morph=(origin, fitz.Matrix(-rotation_angle)),
        )
    logger.info("Watermarked %d page(s)", result.page_count)
    return result


def add_page_numbers(
    document: Document,
    position: str = "bottom",
    alignment: str = "center",
    font_size: Optional[float] = None,
) -> Document:
    """Label every page with its 1-based number."""
    _check_choice(position, PAGE_NUMBER_POSITIONS, "position")
    _check_choice(alignment, ALIGNMENTS, "alignment")
    font_size = font_size or settings.page_number_font_size
    margin = settings.page_number_margin

    result = clone(document)
    for index, page in enumerate(result.handle):
        label = str(index + 1)
        width, height = page.rect.width, page.rect.height
        if alignment == "center":
            x = width / 2 - (len(label) * font_size) / 4
        elif alignment == "left":
            x = settings.side_margin
        else:
            x = width - settings.side_margin
        y = margin if position == "bottom" else height - margin
        page.insert_text(_fitz_point(page, x, y), label, fontsize=font_size, fontname=_FONT, color=(0, 0, 0))
    return result


def redact(
    document: Document,
    page_index: int,
    rect: Rect,
    color: ColorInput | None = "0,0,0",
) -> Document:
    """
    Cover a region with an opaque rectangle.

    This is a visual cover only: the text and images underneath stay in the
    file and remain extractable. Do not rely on it to remove sensitive data.
    """
    validate_page_index(page_index, document.page_count)
    rgb = parse_color(color)
    result = clone(document)
    page = result.handle[page_index]
    page.draw_rect(_fitz_rect(page, rect), color=rgb, fill=rgb, width=0, overlay=True)
    logger.info("Drew visual redaction box on page %d (underlying content is not removed)", page_index)
    return result


def annotate(
    document: Document,
    page_index: int,
    rect: Rect,
    content: str,
    kind: str = "note",
    color: ColorInput | None = None,
) -> Document:
    """Attach a PDF annotation (sticky note, highlight or free text) to a page region."""
    _check_choice(kind, ANNOTATION_KINDS, "annotation kind")
    validate_page_index(page_index, document.page_count)
    rgb = parse_color(color, default=(1.0, 0.84, 0.0))
    result = clone(document)
    page = result.handle[page_index]
    target = _fitz_rect(page, rect)

    if kind == "note":
        annot = page.add_text_annot(target.tl, content)
        annot.set_colors(stroke=rgb)
    elif kind == "highlight":
        annot = page.add_highlight_annot(target)
        annot.set_colors(stroke=rgb)
        annot.set_info(content=content)
        annot.set_opacity(0.3)
    else:
        annot = page.add_freetext_annot(target, content, fontsize=11, text_color=parse_color(color))
    annot.update()
    return result


def draw_shape(
    document: Document,
    page_index: int,
    shape: str,
    rect: Rect,
    color: ColorInput | None = "0,0,0",
    fill: ColorInput | None = None,
    line_width: float = 1.0,
    opacity: float = 1.0,
) -> Document:
    """Draw a rectangle, ellipse, or a line from the lower-left to the upper-right corner of ``rect``."""
    _check_choice(shape, SHAPES, "shape")
    validate_page_index(page_index, document.page_count)
    if not 0.0 <= opacity <= 1.0:
        raise InvalidParameter(f"Opacity must be within 0-1, got {opacity}")
    stroke = parse_color(color)
    fill_rgb = parse_color(fill) if fill is not None else None

    result = clone(document)
    page = result.handle[page_index]
    target = _fitz_rect(page, rect)
    if shape == "rectangle":
        page.draw_rect(target, color=stroke, fill=fill_rgb, width=line_width,
                       stroke_opacity=opacity, fill_opacity=opacity)
    elif shape == "ellipse":
        page.draw_oval(target, color=stroke, fill=fill_rgb, width=line_width,
                       stroke_opacity=opacity, fill_opacity=opacity)
    else:
        page.draw_line(target.bl, target.tr, color=stroke, width=line_width, stroke_opacity=opacity)
    return result


def add_stamp(
    document: Document,
    text: str = "APPROVED",
    page_indices: Optional[List[int]] = None,
    color: ColorInput | None = "200,0,0",
    font_size: float = 24,
    rotation_angle: float = 0,
) -> Document:
    """Draw a bordered label in the top-right corner of the selected pages (default: all)."""
    if not text:
        raise InputMissing("Stamp text is required")
    if page_indices is None:
        targets = list(range(document.page_count))
    else:
        targets = distinct_sorted(validate_page_indices(page_indices, document.page_count))
    rgb = parse_color(color)
    padding = font_size / 3

    result = clone(document)
    for index in targets:
        page = result.handle[index]
        text_width = fitz.get_text_length(text, fontname=_BOLD_FONT, fontsize=font_size)
        box_w = text_width + 2 * padding
        box_h = font_size + 2 * padding
        x0 = max(0.0, page.rect.width - settings.side_margin - box_w)
        y0 = settings.side_margin
        box = fitz.Rect(x0, y0, x0 + box_w, y0 + box_h)
        morph = (box.tl, fitz.Matrix(-rotation_angle)) if rotation_angle else None
        page.draw_rect(box, color=rgb, width=2, morph=morph)
        baseline = fitz.Point(x0 + padding, y0 + padding + font_size * 0.8)
        page.insert_text(baseline, text, fontsize=font_size, fontname=_BOLD_FONT, color=rgb, morph=morph)
    return result


def add_header_footer(
    document: Document,
    header: Optional[str] = None,
    footer: Optional[str] = None,
    font_size: float = 10,
    alignment: str = "center",
) -> Document:
    """Write header and/or footer text on every page; ``{page}`` and ``{total}`` are substituted."""
    if not header and not footer:
        raise InputMissing("A header or a footer text is required")
    _check_choice(alignment, ALIGNMENTS, "alignment")
    margin = settings.page_number_margin

    result = clone(document)
    total = str(result.page_count)
    for index, page in enumerate(result.handle):
        width, height = page.rect.width, page.rect.height
        for template, y in ((header, height - margin), (footer, margin - font_size / 2)):
            if not template:
                continue
            label = template.replace("{page}", str(index + 1)).replace("{total}", total)
            text_width = fitz.get_text_length(label, fontname=_FONT, fontsize=font_size)
            x = _aligned_x(width, text_width, alignment)
            page.insert_text(_fitz_point(page, x, y), label, fontsize=font_size, fontname=_FONT, color=(0, 0, 0))
    return result


def add_hyperlink(document: Document, page_index: int, rect: Rect, uri: str) -> Document:
    """Make a page region a clickable link to ``uri``. Nothing is drawn."""
    if not uri:
        raise InputMissing("Link target URI is required")
    validate_page_index(page_index, document.page_count)
    result = clone(document)
    page = result.handle[page_index]
    page.insert_link({"kind": fitz.LINK_URI, "from": _fitz_rect(page, rect), "uri": uri})
    return result


def sign(
    document: Document,
    signer_name: str,
    title: Optional[str] = None,
    date: Optional[str] = None,
) -> Document:
    """
    Draw a signature block (name, title, date) in the bottom-right of the last page.

    Visual only: no certificate, digest or signature dictionary is written.
    """
    if not signer_name:
        raise InputMissing("Signer name is required")
    if document.page_count == 0:
        raise InputMissing("Cannot sign a document without pages")
    date = date or datetime.date.today().isoformat()
    lines = [f"Signed: {signer_name}"]
    if title:
        lines.append(title)
    lines.append(f"Date: {date}")

    result = clone(document)
    page = result.handle[result.page_count - 1]
    font_size = 10
    line_height = font_size * 1.4
    box_w = max(fitz.get_text_length(line, fontname=_FONT, fontsize=font_size) for line in lines) + 20
    box_h = line_height * (len(lines) + 1) + 10
    x = max(0.0, page.rect.width - settings.side_margin - box_w)
    box = _fitz_rect(page, Rect(x=x, y=settings.side_margin, width=box_w, height=box_h))

    page.draw_rect(box, color=(0, 0, 0.5), width=1)
    baseline = box.y0 + 5 + font_size
    for line in lines:
        page.insert_text(fitz.Point(box.x0 + 10, baseline), line, fontsize=font_size, fontname=_FONT, color=(0, 0, 0.5))
        baseline += line_height
    page.insert_text(
        fitz.Point(box.x0 + 10, baseline),
        "Visual signature - not cryptographically signed",
        fontsize=6,
        fontname=_FONT,
        color=(0.4, 0.4, 0.4),
    )
    logger.info("Added visual signature block for %s", signer_name)
    return result
