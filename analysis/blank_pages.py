"""Blank-page detection from extracted text density."""
from __future__ import annotations

from typing import List, Optional, Protocol

from config.settings import settings
from document.adapter import Document, copy_pages, save
from document.errors import DocumentEngineError, PerPageRecoverableFailure
from document.models import ExtractedText
from utils.logging import logger


class TextExtractor(Protocol):
    def extract(self, data: bytes) -> ExtractedText: ...


def is_blank_text(text: Optional[str], min_chars: Optional[int] = None) -> bool:
    min_chars = settings.blank_page_min_chars if min_chars is None else min_chars
    return len((text or "").strip()) < min_chars


def _page_text(document: Document, index: int, extractor: TextExtractor) -> str:
    try:
        isolated = copy_pages(document, [index])
        try:
            return extractor.extract(save(isolated)).text
        finally:
            isolated.close()
    except (DocumentEngineError, RuntimeError, ValueError) as exc:
        raise PerPageRecoverableFailure(index + 1, f"text extraction failed: {exc}") from exc


def _default_extractor() -> TextExtractor:
    from extraction.text_extractor import PyMuPDFTextExtractor
    return PyMuPDFTextExtractor()


def find_blank_pages(document: Document, extractor: Optional[TextExtractor] = None) -> List[int]:
    """
    Indices of pages whose trimmed text is shorter than the blank threshold.

    A page whose text cannot be extracted is not reported as blank.
    """
    extractor = extractor or _default_extractor()
    blank: List[int] = []
    for index in range(document.page_count):
        try:
            text = _page_text(document, index, extractor)
        except PerPageRecoverableFailure as exc:
            logger.warning("Keeping page %d: %s", index, exc.reason)
            continue
        if is_blank_text(text):
            blank.append(index)
    return blank


def remove_blank_pages(document: Document, extractor: Optional[TextExtractor] = None) -> Document:
    """Drop blank pages. If every page is blank, the first page is kept."""
    blank = set(find_blank_pages(document, extractor))
    keep = [i for i in range(document.page_count) if i not in blank]
    if not keep:
        logger.info("All %d page(s) are blank; keeping the first", document.page_count)
        keep = [0]
    result = copy_pages(document, keep)
    result.set_metadata(document.metadata)
    logger.info("Removed %d blank page(s); %d remain", document.page_count - len(keep), len(keep))
    return result
