"""Unit tests for document/adapter.py.

Tests cover:
- load: empty input, garbage input, encrypted input (with/without password, permissive)
- save: deterministic output, zero-page rejection
- clone independence
- copy_pages validation
- page_info / metadata accessors
"""
from __future__ import annotations

import fitz
import pytest

from document.adapter import clone, copy_pages, load, new_document, save
from document.errors import (
    EncryptedDocument,
    InputMissing,
    InvalidParameter,
    PageIndexOutOfRange,
    UnparsableDocument,
)
from document.models import DocumentMetadata, Rect


def _encrypted_pdf(user_pw: str = "user", owner_pw: str = "owner") -> bytes:
    doc = fitz.open()
    doc.new_page().insert_text((72, 72), "Secret page")
    data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw=user_pw, owner_pw=owner_pw)
    doc.close()
    return data


# =============================================================================
# load
# =============================================================================

class TestLoad:

    def test_empty_bytes_rejected(self):
        with pytest.raises(InputMissing):
            load(b"")

    def test_garbage_is_unparsable(self):
        with pytest.raises(UnparsableDocument):
            load(b"this is definitely not a pdf")

    def test_loads_pages_in_order(self, five_page_pdf):
        with load(five_page_pdf) as document:
            assert document.page_count == 5
            assert len(document) == 5
            assert not document.is_encrypted
            assert document.handle[1].get_text().strip() == "Page B"

    def test_encrypted_without_password_raises(self):
        with pytest.raises(EncryptedDocument):
            load(_encrypted_pdf())

    def test_encrypted_with_wrong_password_raises(self):
        with pytest.raises(EncryptedDocument):
            load(_encrypted_pdf(), password="nope")

    def test_encrypted_with_password_is_readable(self):
        with load(_encrypted_pdf(), password="user") as document:
            assert document.is_encrypted
            assert not document.is_locked
            assert "Secret page" in document.handle[0].get_text()

    def test_encrypted_permissive_returns_locked_document(self):
        with load(_encrypted_pdf(), allow_encrypted=True) as document:
            assert document.is_encrypted
            assert document.is_locked

    def test_encrypted_document_is_distinct_from_unparsable(self):
        assert not issubclass(EncryptedDocument, UnparsableDocument)


# =============================================================================
# save / clone
# =============================================================================

class TestSave:

    def test_roundtrip_preserves_order(self, five_page_pdf, texts):
        with load(five_page_pdf) as document:
            out = save(document)
        assert texts(out) == ["Page A", "Page B", "Page C", "Page D", "Page E"]

    def test_output_is_deterministic(self, five_page_pdf):
        with load(five_page_pdf) as first, load(five_page_pdf) as second:
            assert save(first) == save(second)

    def test_zero_pages_rejected(self):
        with new_document() as document:
            with pytest.raises(InvalidParameter):
                save(document)

    def test_locked_document_cannot_be_saved(self):
        with load(_encrypted_pdf(), allow_encrypted=True) as document:
            with pytest.raises(EncryptedDocument):
                save(document)

    def test_compress_output_still_loads(self, five_page_pdf, texts):
        with load(five_page_pdf) as document:
            out = save(document, compress=True)
        assert len(texts(out)) == 5


class TestClone:

    def test_clone_is_independent(self, five_page_pdf):
        with load(five_page_pdf) as original:
            copy = clone(original)
            copy.handle[0].set_rotation(90)
            assert original.handle[0].rotation == 0
            assert copy.handle[0].rotation == 90
            copy.close()


# =============================================================================
# copy_pages
# =============================================================================

class TestCopyPages:

    def test_copies_in_listed_order(self, five_page_pdf, texts):
        with load(five_page_pdf) as source:
            result = copy_pages(source, [4, 0, 2])
            assert texts(save(result)) == ["Page E", "Page A", "Page C"]
            result.close()

    @pytest.mark.parametrize("index", [5, -1, 100])
    def test_out_of_range_index(self, five_page_pdf, index):
        with load(five_page_pdf) as source:
            with pytest.raises(PageIndexOutOfRange) as exc_info:
                copy_pages(source, [0, index])
        assert exc_info.value.index == index
        assert exc_info.value.page_count == 5

    def test_bad_index_leaves_target_untouched(self, five_page_pdf):
        with load(five_page_pdf) as source, new_document() as target:
            with pytest.raises(PageIndexOutOfRange):
                copy_pages(source, [0, 1, 9], target=target)
            assert target.page_count == 0

    def test_empty_index_list(self, five_page_pdf):
        with load(five_page_pdf) as source:
            with pytest.raises(InputMissing):
                copy_pages(source, [])


# =============================================================================
# Accessors
# =============================================================================

class TestAccessors:

    def test_page_info_defaults(self, make_pdf):
        with load(make_pdf(["x"], sizes=[(300, 400)], rotations=[90])) as document:
            info = document.page_info(0)
        assert info.width == pytest.approx(300)
        assert info.height == pytest.approx(400)
        assert info.rotation == 90
        assert info.crop_box == Rect(0, 0, 300, 400)

    def test_metadata_roundtrip(self, five_page_pdf):
        with load(five_page_pdf) as document:
            document.set_metadata(DocumentMetadata(title="Report", author="QA"))
            out = save(document)
        with load(out) as reloaded:
            meta = reloaded.metadata
        assert meta.title == "Report"
        assert meta.author == "QA"
        assert meta.subject is None

    def test_page_index_validated(self, five_page_pdf):
        with load(five_page_pdf) as document:
            with pytest.raises(PageIndexOutOfRange):
                document.page(5)
