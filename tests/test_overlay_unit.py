"""Unit tests for transforms/overlay.py.

Positions are given with a bottom-left origin; assertions read text and
drawings back through PyMuPDF (top-left origin) to check placement.
"""
from __future__ import annotations

import pytest

from document.adapter import load
from document.errors import InputMissing, InvalidParameter, PageIndexOutOfRange
from document.models import Rect
from transforms import overlay

PAGE_H = 842.0


@pytest.fixture
def doc(make_pdf):
    with load(make_pdf(["First page body", "Second page body", "Third page body"])) as document:
        yield document


def _words(document, index):
    return document.handle[index].get_text("words")


def _word(document, index, text):
    matches = [w for w in _words(document, index) if w[4] == text]
    assert matches, f"{text!r} not found on page {index}"
    return matches[0]


# =============================================================================
# add_text
# =============================================================================

class TestAddText:

    def test_text_is_placed_from_bottom_left(self, doc):
        result = overlay.add_text(doc, "Marker", page_index=1, x=50, y=50, font_size=12)
        x0, _, _, y1, *_ = _word(result, 1, "Marker")
        assert x0 == pytest.approx(50, abs=2)
        assert y1 == pytest.approx(PAGE_H - 50, abs=6)

    def test_only_target_page_changes(self, doc):
        result = overlay.add_text(doc, "Marker", page_index=1)
        assert "Marker" not in result.handle[0].get_text()
        assert "Marker" not in doc.handle[1].get_text()

    def test_empty_text_rejected(self, doc):
        with pytest.raises(InputMissing):
            overlay.add_text(doc, "")

    def test_bad_page(self, doc):
        with pytest.raises(PageIndexOutOfRange):
            overlay.add_text(doc, "x", page_index=3)

    def test_bad_color(self, doc):
        with pytest.raises(InvalidParameter):
            overlay.add_text(doc, "x", color="300,0,0")


# =============================================================================
# Watermark / page numbers / header-footer
# =============================================================================

class TestWatermark:

    def test_on_every_page(self, doc):
        result = overlay.add_watermark(doc, "CONFIDENTIAL")
        for page in result.handle:
            assert "CONFIDENTIAL" in page.get_text()

    def test_opacity_bounds(self, doc):
        with pytest.raises(InvalidParameter):
            overlay.add_watermark(doc, "DRAFT", opacity=1.5)

    def test_requires_text(self, doc):
        with pytest.raises(InputMissing):
            overlay.add_watermark(doc, "")


class TestPageNumbers:

    def test_numbers_bottom_center(self, doc):
        result = overlay.add_page_numbers(doc)
        for index in range(result.page_count):
            label = str(index + 1)
            x0, _, _, y1, *_ = _word(result, index, label)
            assert y1 == pytest.approx(PAGE_H - 30, abs=6)
            assert x0 == pytest.approx(595 / 2 - 12 / 4, abs=2)

    def test_numbers_top_right(self, doc):
        result = overlay.add_page_numbers(doc, position="top", alignment="right")
        x0, _, _, y1, *_ = _word(result, 2, "3")
        assert y1 == pytest.approx(30, abs=6)
        assert x0 == pytest.approx(595 - 50, abs=2)

    @pytest.mark.parametrize("kwargs", [{"position": "middle"}, {"alignment": "justify"}])
    def test_unknown_placement(self, doc, kwargs):
        with pytest.raises(InvalidParameter):
            overlay.add_page_numbers(doc, **kwargs)


class TestHeaderFooter:

    def test_placeholders(self, doc):
        result = overlay.add_header_footer(doc, header="Quarterly report", footer="Page {page} of {total}")
        assert "Page 2 of 3" in result.handle[1].get_text()
        assert "Quarterly report" in result.handle[2].get_text()

    def test_requires_header_or_footer(self, doc):
        with pytest.raises(InputMissing):
            overlay.add_header_footer(doc)


# =============================================================================
# Redact / annotate / draw / stamp / link / sign
# =============================================================================

class TestRedact:

    def test_visual_cover_only(self, doc):
        result = overlay.redact(doc, 0, Rect(60, PAGE_H - 90, 200, 30))
        page = result.handle[0]
        assert any(d.get("fill") == pytest.approx((0.0, 0.0, 0.0)) for d in page.get_drawings())
        # the covered text is still in the content stream
        assert "First page body" in page.get_text()

    def test_bad_page(self, doc):
        with pytest.raises(PageIndexOutOfRange):
            overlay.redact(doc, 5, Rect(0, 0, 10, 10))


class TestAnnotate:

    @pytest.mark.parametrize("kind,expected", [("note", "Text"), ("highlight", "Highlight"), ("freetext", "FreeText")])
    def test_annotation_kinds(self, doc, kind, expected):
        result = overlay.annotate(doc, 0, Rect(60, 700, 150, 40), "Check this", kind=kind)
        annots = list(result.handle[0].annots())
        assert [a.type[1] for a in annots] == [expected]

    def test_unknown_kind(self, doc):
        with pytest.raises(InvalidParameter):
            overlay.annotate(doc, 0, Rect(0, 0, 10, 10), "x", kind="sticker")


class TestDrawShape:

    @pytest.mark.parametrize("shape", ["rectangle", "ellipse", "line"])
    def test_shapes_drawn(self, doc, shape):
        result = overlay.draw_shape(doc, 0, shape, Rect(100, 100, 200, 100), color="0,0,255", fill="255,255,0")
        assert len(result.handle[0].get_drawings()) >= 1
        assert doc.handle[0].get_drawings() == []

    def test_unknown_shape(self, doc):
        with pytest.raises(InvalidParameter):
            overlay.draw_shape(doc, 0, "star", Rect(0, 0, 10, 10))


class TestStamp:

    def test_selected_pages_only(self, doc):
        result = overlay.add_stamp(doc, "APPROVED", page_indices=[2])
        assert "APPROVED" in result.handle[2].get_text()
        assert "APPROVED" not in result.handle[0].get_text()

    def test_defaults_to_all_pages(self, doc):
        result = overlay.add_stamp(doc)
        assert all("APPROVED" in page.get_text() for page in result.handle)


class TestHyperlink:

    def test_link_added(self, doc):
        result = overlay.add_hyperlink(doc, 1, Rect(50, 50, 100, 20), "https://example.com/")
        links = result.handle[1].get_links()
        assert [link["uri"] for link in links] == ["https://example.com/"]
        assert result.handle[0].get_links() == []


class TestSign:

    def test_block_on_last_page(self, doc):
        result = overlay.sign(doc, "Jane Doe", title="Director", date="2024-01-31")
        text = result.handle[2].get_text()
        assert "Signed: Jane Doe" in text
        assert "Director" in text
        assert "Date: 2024-01-31" in text
        assert "not cryptographically signed" in text
        assert "Jane Doe" not in result.handle[0].get_text()

    def test_requires_signer(self, doc):
        with pytest.raises(InputMissing):
            overlay.sign(doc, "")
