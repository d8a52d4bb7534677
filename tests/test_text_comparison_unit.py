"""Unit tests for comparison/text_comparison.py and comparison/review.py.

Covers:
- word-set similarity, only-in lists, caps and first-occurrence order
- document diff through the extraction collaborator (fake and PyMuPDF)
- review document interleaving with blank fillers
"""
from __future__ import annotations

import pytest

from comparison.review import build_review_document
from comparison.text_comparison import diff_documents, diff_texts, tokenize
from document.adapter import load
from document.models import ExtractedText


# =============================================================================
# Word-set diff
# =============================================================================

class TestDiffTexts:

    def test_one_word_changed(self):
        result = diff_texts("the cat sat", "the cat ran")
        assert result.similarity_score == 66.67
        assert result.only_in_first == ["sat"]
        assert result.only_in_second == ["ran"]
        assert result.common_word_count == 2

    def test_identical_texts(self):
        result = diff_texts("alpha beta gamma", "gamma beta alpha")
        assert result.similarity_score == 100.0
        assert result.only_in_first == []
        assert result.only_in_second == []

    def test_both_empty_are_identical(self):
        result = diff_texts("", "   \n")
        assert result.similarity_score == 100.0
        assert result.first.word_count == 0

    def test_one_side_empty(self):
        result = diff_texts("", "something here")
        assert result.similarity_score == 0.0
        assert result.only_in_second == ["something", "here"]

    def test_similarity_uses_distinct_words(self):
        # {a, b} vs {a, b, c}: 2 / 3
        result = diff_texts("a a a b", "a b c")
        assert result.similarity_score == 66.67
        assert result.first.word_count == 4

    def test_counts(self):
        result = diff_texts("one two", "three", first_page_count=2, second_page_count=1)
        assert (result.first.page_count, result.first.word_count, result.first.char_count) == (2, 2, 7)
        assert (result.second.page_count, result.second.word_count, result.second.char_count) == (1, 1, 5)

    def test_case_and_punctuation_are_significant(self):
        result = diff_texts("Hello, world", "hello world")
        assert result.only_in_first == ["Hello,"]
        assert result.only_in_second == ["hello"]

    def test_cap_keeps_first_occurrence_order(self):
        first = " ".join(f"w{i}" for i in range(10)) + " w3 w1"
        result = diff_texts(first, "unrelated", cap=4)
        assert result.only_in_first == ["w0", "w1", "w2", "w3"]

    def test_default_cap(self):
        first = " ".join(f"w{i}" for i in range(250))
        assert len(diff_texts(first, "").only_in_first) == 100


def test_tokenize_splits_any_whitespace():
    assert tokenize(" a\tb\n\nc  ") == ["a", "b", "c"]


# =============================================================================
# Document diff
# =============================================================================

class FakeExtractor:
    def __init__(self, texts):
        self.texts = texts

    def extract(self, data: bytes) -> ExtractedText:
        text = self.texts[data]
        return ExtractedText(text=text, page_count=text.count("|") + 1)


def test_diff_documents_uses_extractor():
    extractor = FakeExtractor({b"one": "red green | blue", b"two": "red blue"})
    result = diff_documents(b"one", b"two", extractor=extractor)
    assert result.first.page_count == 2
    assert result.second.page_count == 1
    assert result.only_in_first == ["green", "|"]
    assert result.common_word_count == 2


def test_diff_documents_with_pymupdf(make_pdf):
    a = make_pdf(["Invoice number 42", "Total due"])
    b = make_pdf(["Invoice number 43"])
    same = diff_documents(a, a)
    assert same.similarity_score == 100.0
    assert same.first.page_count == 2

    changed = diff_documents(a, b)
    assert "42" in changed.only_in_first
    assert "43" in changed.only_in_second
    assert changed.similarity_score < 100.0


# =============================================================================
# Review document
# =============================================================================

class TestReviewDocument:

    def test_equal_lengths_alternate(self, make_pdf, texts):
        first = load(make_pdf(["A1", "A2"]))
        second = load(make_pdf(["B1", "B2"]))
        with build_review_document(first, second) as review:
            assert texts(review.handle.tobytes()) == ["A1", "B1", "A2", "B2"]

    def test_shorter_side_padded_with_blank_pages(self, make_pdf, texts):
        first = load(make_pdf(["A1"]))
        second = load(make_pdf(["B1", "B2", "B3"], sizes=[(595, 842), (300, 400), (500, 200)]))
        with build_review_document(first, second) as review:
            assert texts(review.handle.tobytes()) == ["A1", "B1", "", "B2", "", "B3"]
            assert tuple(review.handle[2].rect)[2:] == (300, 400)
            assert tuple(review.handle[4].rect)[2:] == (500, 200)

    def test_first_document_metadata_kept(self, make_pdf):
        first = load(make_pdf(["A"], title="Left"))
        second = load(make_pdf(["B"], title="Right"))
        with build_review_document(first, second) as review:
            assert review.metadata.title == "Left"

    def test_both_empty(self):
        from document.adapter import new_document
        from document.errors import InputMissing

        with pytest.raises(InputMissing):
            build_review_document(new_document(), new_document())
