"""Conversions into and out of PDF."""
from __future__ import annotations

import io
import re
from typing import List, NamedTuple, Sequence

import fitz  # PyMuPDF
from bs4 import BeautifulSoup, Comment, Doctype, NavigableString
from PIL import Image, UnidentifiedImageError

from document.adapter import Document, load, new_document
from document.errors import InputMissing, InvalidParameter
from utils.logging import logger

IMAGE_FORMATS = ("png", "jpeg")
TEXT_MARGIN = 50.0
TEXT_FONT = "helv"
TEXT_BOLD_FONT = "hebo"
HEADING_SIZES = {"h1": 20, "h2": 16, "h3": 14}
BLOCK_TAGS = frozenset({
    "p", "div", "ul", "ol", "table", "tr", "section", "article", "header", "footer",
    "blockquote", "pre", "body", "html",
})


def images_to_pdf(images: Sequence[bytes]) -> Document:
    """One page per image, each page sized to the image in pixels (1 px = 1 pt)."""
    if not images:
        raise InputMissing("At least one image is required")
    result = new_document()
    try:
        for position, data in enumerate(images):
            try:
                with Image.open(io.BytesIO(data)) as img:
                    width, height = img.size
            except (UnidentifiedImageError, OSError) as exc:
                raise InvalidParameter(f"Image {position} is not a readable image: {exc}") from exc
            page = result.handle.new_page(width=width, height=height)
            page.insert_image(page.rect, stream=data)
    except Exception:
        result.close()
        raise
    logger.info("Converted %d image(s) to PDF", len(images))
    return result


class _TextRun(NamedTuple):
    text: str
    font_size: float
    font: str = TEXT_FONT
    center: bool = False
    space_after: float = 0.0


def _wrap(line: str, max_width: float, font_size: float, font: str = TEXT_FONT) -> List[str]:
    words = line.split(" ")
    rows: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and fitz.get_text_length(candidate, fontname=font, fontsize=font_size) > max_width:
            rows.append(current)
            current = word
        else:
            current = candidate
    rows.append(current)
    return rows


def _layout(runs: Sequence[_TextRun]) -> Document:
    """Flow runs of text onto A4 pages inside ``TEXT_MARGIN``, wrapping each run to the text width."""
    width, height = fitz.paper_size("a4")
    max_width = width - 2 * TEXT_MARGIN

    result = new_document()
    page = None
    y = 0.0
    for run in runs:
        line_height = run.font_size * 1.4
        for row in _wrap(run.text, max_width, run.font_size, run.font):
            if page is None or y + line_height > height - TEXT_MARGIN:
                page = result.handle.new_page(width=width, height=height)
                y = TEXT_MARGIN
            y += line_height
            if not row:
                continue
            x = TEXT_MARGIN
            if run.center:
                row_width = fitz.get_text_length(row, fontname=run.font, fontsize=run.font_size)
                x = max(TEXT_MARGIN, (width - row_width) / 2)
            page.insert_text(fitz.Point(x, y), row, fontsize=run.font_size, fontname=run.font)
        y += run.space_after
    return result


def text_to_pdf(text: str, font_size: float = 12) -> Document:
    """Lay plain text out on A4 pages with word wrapping and 50 pt margins."""
    if not text:
        raise InputMissing("Text is required")
    result = _layout([_TextRun(line, font_size) for line in text.splitlines()])
    logger.info("Laid out %d line(s) of text on %d page(s)", len(text.splitlines()), result.page_count)
    return result


def _html_runs(html: str) -> List[_TextRun]:
    """
    Reduce HTML to title, heading, list-item and paragraph runs.

    Scripts, styles and the rest of ``<head>`` are dropped; inline markup
    (bold, links, spans) is flattened into the surrounding paragraph.
    """
    soup = BeautifulSoup(html, "html.parser")
    runs: List[_TextRun] = []
    if soup.title and soup.title.get_text(strip=True):
        runs.append(_TextRun(soup.title.get_text(strip=True), 24, TEXT_BOLD_FONT, center=True, space_after=24))
    for tag in soup(["script", "style", "head", "title"]):
        tag.decompose()

    buffer: List[str] = []

    def flush() -> None:
        text = " ".join("".join(buffer).split())
        buffer.clear()
        if text:
            runs.append(_TextRun(text, 12, space_after=6))

    def walk(node) -> None:
        for child in node.children:
            if isinstance(child, (Comment, Doctype)):
                continue
            if isinstance(child, NavigableString):
                buffer.append(str(child))
                continue
            name = child.name
            if name in HEADING_SIZES:
                flush()
                text = child.get_text(" ", strip=True)
                if text:
                    size = HEADING_SIZES[name]
                    runs.append(_TextRun(text, size, TEXT_BOLD_FONT, space_after=size / 3))
            elif name == "br":
                flush()
            elif name == "li":
                flush()
                buffer.append("- ")
                walk(child)
                flush()
            elif name in BLOCK_TAGS:
                flush()
                walk(child)
                flush()
            else:
                walk(child)

    walk(soup)
    flush()
    return runs


def html_to_pdf(html: str) -> Document:
    """Render the title, h1-h3 headings, list items and paragraphs of an HTML page onto A4 pages."""
    if not html or not html.strip():
        raise InputMissing("HTML is required")
    runs = _html_runs(html)
    if not runs:
        raise InputMissing("HTML contains no text")
    result = _layout(runs)
    logger.info("Laid out %d HTML block(s) on %d page(s)", len(runs), result.page_count)
    return result


def pdf_to_images(data: bytes, dpi: int = 150, fmt: str = "png", rasterizer=None) -> List[bytes]:
    """Render every page; ``fmt`` is ``png`` or ``jpeg``."""
    fmt = fmt.lower().replace("jpg", "jpeg")
    if fmt not in IMAGE_FORMATS:
        raise InvalidParameter(f"Unsupported image format {fmt!r}; expected one of {', '.join(IMAGE_FORMATS)}")
    if dpi <= 0:
        raise InvalidParameter(f"DPI must be positive, got {dpi}")
    if rasterizer is None:
        from extraction.rasterizer import PyMuPDFRasterizer
        rasterizer = PyMuPDFRasterizer()

    with load(data) as document:
        page_count = document.page_count
    images = []
    for page_number in range(1, page_count + 1):
        image = rasterizer.rasterize(data, page_number, dpi)
        if fmt == "jpeg":
            with Image.open(io.BytesIO(image)) as img:
                out = io.BytesIO()
                img.convert("RGB").save(out, format="JPEG", quality=90)
                image = out.getvalue()
        images.append(image)
    return images


def pdf_to_text(data: bytes, extractor=None) -> str:
    if extractor is None:
        from extraction.text_extractor import PyMuPDFTextExtractor
        extractor = PyMuPDFTextExtractor()
    return extractor.extract(data).text


_HTML_SHELL = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<meta content="width=device-width, initial-scale=1.0" name="viewport"/>
<title></title>
<style>
body { font-family: Helvetica, Arial, sans-serif; line-height: 1.6; max-width: 800px; margin: 0 auto; padding: 40px 20px; color: #333; }
p { margin-bottom: 16px; text-align: justify; }
.meta { color: #666; font-size: 14px; margin-bottom: 30px; border-bottom: 1px solid #eee; padding-bottom: 20px; }
</style>
</head>
<body><div class="meta"></div></body>
</html>
"""


def pdf_to_html(data: bytes, extractor=None) -> str:
    """
    Wrap the extracted text in a standalone HTML page.

    Blank-line separated blocks become paragraphs and single line breaks
    become ``<br>``. A header line reports page count, character count and
    the author when the metadata has one.
    """
    if extractor is None:
        from extraction.text_extractor import PyMuPDFTextExtractor
        extractor = PyMuPDFTextExtractor()
    extracted = extractor.extract(data)

    soup = BeautifulSoup(_HTML_SHELL, "html.parser")
    soup.title.string = f"Converted PDF - {extracted.metadata.title or 'Document'}"

    meta = soup.find("div", class_="meta")
    facts = [("Pages", str(extracted.page_count)), ("Characters", f"{len(extracted.text):,}")]
    if extracted.metadata.author:
        facts.append(("Author", extracted.metadata.author))
    for position, (label, value) in enumerate(facts):
        if position:
            meta.append(" | ")
        strong = soup.new_tag("strong")
        strong.string = f"{label}:"
        meta.append(strong)
        meta.append(f" {value}")

    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", extracted.text) if p.strip()]
    for text in paragraphs:
        paragraph = soup.new_tag("p")
        for index, line in enumerate(text.split("\n")):
            if index:
                paragraph.append(soup.new_tag("br"))
            paragraph.append(line)
        soup.body.append(paragraph)
    logger.info("Converted %d page(s) to HTML with %d paragraph(s)", extracted.page_count, len(paragraphs))
    return str(soup)


def office_to_pdf(data: bytes, suffix: str, converter=None) -> Document:
    """Convert an office document through LibreOffice and load the PDF it produces."""
    if converter is None:
        from tools.office import LibreOfficeConverter
        converter = LibreOfficeConverter()
    return load(converter.convert_to_pdf(data, suffix))
