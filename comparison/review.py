"""Side-by-side review document: pages of two documents interleaved."""
from __future__ import annotations

from document.adapter import Document, copy_pages, new_document
from document.errors import InputMissing
from utils.logging import logger


def build_review_document(first: Document, second: Document) -> Document:
    """
    Alternate pages: first[0], second[0], first[1], second[1], ...

    When one document runs out, each missing page is replaced by a blank page
    sized like its counterpart at the same index, so strict alternation holds.
    """
    total = max(first.page_count, second.page_count)
    if total == 0:
        raise InputMissing("Both documents are empty")

    result = new_document()
    try:
        for index in range(total):
            for source, other in ((first, second), (second, first)):
                if index < source.page_count:
                    copy_pages(source, [index], target=result)
                else:
                    size = other.page(index).rect
                    result.handle.new_page(width=size.width, height=size.height)
        result.set_metadata(first.metadata)
    except Exception:
        result.close()
        raise
    logger.info("Built review document with %d page(s) from %d + %d", result.page_count,
                first.page_count, second.page_count)
    return result
