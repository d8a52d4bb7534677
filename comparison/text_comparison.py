"""Word-level set comparison between two documents."""
from __future__ import annotations

from typing import List, Optional, Protocol

from config.settings import settings
from document.models import DiffResult, DiffSide, ExtractedText
from utils.logging import logger


class TextExtractor(Protocol):
    def extract(self, data: bytes) -> ExtractedText: ...


def tokenize(text: str) -> List[str]:
    """Split on any whitespace; case and punctuation are kept."""
    return text.split()


def _only_in(words: List[str], other: set, cap: int) -> List[str]:
    # dict.fromkeys keeps first-occurrence order while deduplicating
    return [w for w in dict.fromkeys(words) if w not in other][:cap]


def diff_texts(
    first_text: str,
    second_text: str,
    first_page_count: int = 0,
    second_page_count: int = 0,
    cap: Optional[int] = None,
) -> DiffResult:
    """
    Compare the distinct-word sets of two texts.

    ``similarity_score`` is ``|common| / max(|first|, |second|) * 100`` rounded to
    two decimals; two empty texts are considered identical (100.0).
    """
    cap = settings.diff_report_cap if cap is None else cap
    first_words = tokenize(first_text)
    second_words = tokenize(second_text)
    first_set, second_set = set(first_words), set(second_words)
    common = first_set & second_set

    largest = max(len(first_set), len(second_set))
    similarity = 100.0 if largest == 0 else round(len(common) / largest * 100, 2)

    return DiffResult(
        first=DiffSide(page_count=first_page_count, word_count=len(first_words), char_count=len(first_text)),
        second=DiffSide(page_count=second_page_count, word_count=len(second_words), char_count=len(second_text)),
        only_in_first=_only_in(first_words, second_set, cap),
        only_in_second=_only_in(second_words, first_set, cap),
        common_word_count=len(common),
        similarity_score=similarity,
    )


def diff_documents(first: bytes, second: bytes, extractor: Optional[TextExtractor] = None) -> DiffResult:
    """Extract text from both documents and compare it with :func:`diff_texts`."""
    if extractor is None:
        from extraction.text_extractor import PyMuPDFTextExtractor
        extractor = PyMuPDFTextExtractor()

    first_text = extractor.extract(first)
    second_text = extractor.extract(second)
    result = diff_texts(
        first_text.text,
        second_text.text,
        first_page_count=first_text.page_count,
        second_page_count=second_text.page_count,
    )
    logger.info(
        "Diff: %d vs %d page(s), similarity %.2f%%",
        first_text.page_count,
        second_text.page_count,
        result.similarity_score,
    )
    return result
