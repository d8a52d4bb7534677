"""Duplicate-page detection by hashing each page's isolated serialization.

Two pages are duplicates only when their single-page serializations are
byte-identical. Pages that look the same but are encoded differently are
treated as distinct; rendered-pixel comparison is not attempted.
"""
from __future__ import annotations

import hashlib
from typing import Dict, List

from document.adapter import Document, copy_pages
from document.errors import DocumentEngineError, PerPageRecoverableFailure
from utils.logging import logger


def page_content_hash(document: Document, index: int) -> str:
    """SHA-256 of page ``index`` saved alone into a fresh document."""
    try:
        isolated = copy_pages(document, [index])
        try:
            data = isolated.handle.tobytes(garbage=4, deflate=True, no_new_id=True)
        finally:
            isolated.close()
    except (DocumentEngineError, RuntimeError, ValueError) as exc:
        raise PerPageRecoverableFailure(index + 1, f"cannot isolate page: {exc}") from exc
    return hashlib.sha256(data).hexdigest()


def find_duplicate_pages(document: Document) -> List[int]:
    """Indices of pages whose content hash was already seen on an earlier page."""
    seen: Dict[str, int] = {}
    duplicates: List[int] = []
    for index in range(document.page_count):
        try:
            digest = page_content_hash(document, index)
        except PerPageRecoverableFailure as exc:
            logger.warning("Keeping page %d: %s", index, exc.reason)
            continue
        if digest in seen:
            logger.debug("Page %d duplicates page %d", index, seen[digest])
            duplicates.append(index)
        else:
            seen[digest] = index
    return duplicates


def remove_duplicate_pages(document: Document) -> Document:
    """Keep the first page of every distinct hash, in original order."""
    drop = set(find_duplicate_pages(document))
    keep = [i for i in range(document.page_count) if i not in drop]
    result = copy_pages(document, keep)
    result.set_metadata(document.metadata)
    logger.info("Removed %d duplicate page(s); %d remain", len(drop), result.page_count)
    return result
