"""Unit tests for diagnostics/report.py and diagnostics/forms.py."""
from __future__ import annotations

import fitz
import pytest

from config.settings import settings
from diagnostics.forms import extract_form_fields, fill_form_fields
from diagnostics.report import (
    ISSUE_ENCRYPTED,
    ISSUE_NO_TITLE,
    ISSUE_PAGE_SIZES,
    validate_document,
)
from document.adapter import load, save
from document.errors import InputMissing, InvalidParameter, UnparsableDocument


def _form_pdf() -> bytes:
    doc = fitz.open()
    page = doc.new_page()

    name = fitz.Widget()
    name.field_type = fitz.PDF_WIDGET_TYPE_TEXT
    name.field_name = "full_name"
    name.rect = fitz.Rect(72, 72, 300, 92)
    name.field_value = "Alice"
    page.add_widget(name)

    agree = fitz.Widget()
    agree.field_type = fitz.PDF_WIDGET_TYPE_CHECKBOX
    agree.field_name = "agree"
    agree.rect = fitz.Rect(72, 110, 90, 128)
    agree.field_value = False
    page.add_widget(agree)

    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def restore_settings():
    snapshot = settings.validation_max_file_size
    yield
    settings.validation_max_file_size = snapshot


# =============================================================================
# validate_document
# =============================================================================

class TestValidateDocument:

    def test_clean_document(self, make_pdf):
        data = make_pdf(["one", "two"], title="Annual report")
        report = validate_document(data)
        assert report.valid
        assert report.page_count == 2
        assert report.file_size == len(data)
        assert report.issues == []
        assert report.metadata.title == "Annual report"
        assert [(p.width, p.height, p.rotation) for p in report.pages] == [(595.0, 842.0, 0)] * 2
        assert not report.has_form

    def test_missing_title(self, make_pdf):
        report = validate_document(make_pdf(["one"]))
        assert report.valid
        assert ISSUE_NO_TITLE in report.issues

    def test_inconsistent_page_sizes(self, make_pdf):
        data = make_pdf(["one", "two"], sizes=[(595, 842), (612, 792)], title="t")
        assert ISSUE_PAGE_SIZES in validate_document(data).issues

    def test_sizes_within_tolerance_are_consistent(self, make_pdf):
        data = make_pdf(["one", "two"], sizes=[(595, 842), (595.5, 842)], title="t")
        assert ISSUE_PAGE_SIZES not in validate_document(data).issues

    def test_oversized_file_reported_not_raised(self, make_pdf, restore_settings):
        settings.validation_max_file_size = 10
        report = validate_document(make_pdf(["one"], title="t"))
        assert any("exceeds" in issue for issue in report.issues)

    def test_encrypted_is_reported(self):
        doc = fitz.open()
        doc.new_page().insert_text((72, 72), "locked")
        data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw="u", owner_pw="o")
        doc.close()

        report = validate_document(data)
        assert report.is_encrypted
        assert ISSUE_ENCRYPTED in report.issues

    def test_unparsable_raises(self):
        with pytest.raises(UnparsableDocument):
            validate_document(b"this is definitely not a pdf")

    def test_empty_input(self):
        with pytest.raises(InputMissing):
            validate_document(b"")

    def test_form_presence(self):
        report = validate_document(_form_pdf())
        assert report.has_form
        assert report.form_field_count == 2


# =============================================================================
# Forms
# =============================================================================

class TestForms:

    def test_extract_fields(self):
        with load(_form_pdf()) as document:
            fields = extract_form_fields(document)
        assert [(f.name, f.kind, f.value, f.page_index) for f in fields] == [
            ("full_name", "text", "Alice", 0),
            ("agree", "checkbox", False, 0),
        ]

    def test_fill_fields(self):
        with load(_form_pdf()) as document:
            filled = fill_form_fields(document, {"full_name": "Bob", "agree": True})
            out = save(filled)
            # input untouched
            assert extract_form_fields(document)[0].value == "Alice"
        with load(out) as reloaded:
            values = {f.name: f.value for f in extract_form_fields(reloaded)}
        assert values == {"full_name": "Bob", "agree": True}

    def test_unknown_field(self):
        with load(_form_pdf()) as document:
            with pytest.raises(InvalidParameter):
                fill_form_fields(document, {"nickname": "x"})

    def test_no_form(self, make_pdf):
        with load(make_pdf(["plain"])) as document:
            assert extract_form_fields(document) == []
