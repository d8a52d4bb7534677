"""Page-level transforms: merge, split, page selection and ordering, rotation, crop, resize, compress.

Every operation is copy-on-write. Parameters are validated against the input
before any output is built, and the result is assembled completely in memory,
so a failure never leaves a partial document behind.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

import fitz  # PyMuPDF

from document.adapter import Document, clone, copy_pages, new_document, save
from document.errors import InputMissing, InvalidParameter
from document.models import Rect
from utils.coordinates import rect_within, to_fitz_rect
from utils.logging import logger
from utils.validation import (
    distinct_sorted,
    validate_page_indices,
    validate_permutation,
    validate_rotation,
)


def _select(source: Document, indices: Sequence[int]) -> Document:
    """New document holding ``indices`` of ``source`` in order, with the source metadata."""
    result = copy_pages(source, indices)
    result.set_metadata(source.metadata)
    return result


def merge(documents: Sequence[Document]) -> Document:
    """Concatenate the pages of every document, in the order given."""
    if not documents:
        raise InputMissing("At least one document is required to merge")

    result = new_document()
    try:
        for document in documents:
            if document.page_count:
                copy_pages(document, range(document.page_count), target=result)
        result.set_metadata(documents[0].metadata)
    except Exception:
        result.close()
        raise
    logger.info("Merged %d document(s) into %d page(s)", len(documents), result.page_count)
    return result


def split(document: Document, ranges: Sequence[Sequence[int]]) -> List[Document]:
    """
    Produce one document per range, each holding exactly the listed pages in listed order.

    All ranges are validated up front; one bad index fails the whole call
    before any output exists.
    """
    if not ranges:
        raise InputMissing("At least one page range is required to split")
    checked = [validate_page_indices(r, document.page_count) for r in ranges]
    parts = [_select(document, r) for r in checked]
    logger.info("Split %d page(s) into %d part(s)", document.page_count, len(parts))
    return parts


def remove_pages(document: Document, indices: Sequence[int]) -> Document:
    """Drop the given pages; remaining pages keep their relative order."""
    drop = set(validate_page_indices(indices, document.page_count))
    keep = [i for i in range(document.page_count) if i not in drop]
    if not keep:
        raise InvalidParameter("Cannot remove every page of a document")
    logger.info("Removing %d of %d page(s)", len(drop), document.page_count)
    return _select(document, keep)


def extract_pages(document: Document, indices: Sequence[int]) -> Document:
    """Keep only the given pages, in their original relative order."""
    selected = distinct_sorted(validate_page_indices(indices, document.page_count))
    return _select(document, selected)


def organize(document: Document, order: Sequence[int]) -> Document:
    """Reorder pages so that result page ``i`` is input page ``order[i]``."""
    checked = validate_permutation(order, document.page_count)
    return _select(document, checked)


def reverse(document: Document) -> Document:
    return organize(document, list(range(document.page_count - 1, -1, -1)))


def duplicate(document: Document, indices: Sequence[int]) -> Document:
    """Follow each selected page immediately with a copy of itself."""
    chosen = set(validate_page_indices(indices, document.page_count))
    sequence: List[int] = []
    for index in range(document.page_count):
        sequence.append(index)
        if index in chosen:
            sequence.append(index)
    return _select(document, sequence)


def rotate(document: Document, degrees: int) -> Document:
    """Add ``degrees`` (a multiple of 90, may be negative) to every page's rotation."""
    validate_rotation(degrees)
    result = clone(document)
    for page in result.handle:
        page.set_rotation((page.rotation + degrees) % 360)
    return result


def crop(document: Document, rect: Rect) -> Document:
    """Set the same crop box on every page; ``rect`` must fit inside each media box."""
    for info in document.pages:
        if not rect_within(rect, info.width, info.height):
            raise InvalidParameter(
                f"Crop rectangle {rect} exceeds page {info.index} ({info.width}x{info.height})"
            )
    result = clone(document)
    for page in result.handle:
        media = page.mediabox
        page.set_cropbox(fitz.Rect(to_fitz_rect(rect, media.height)))
    return result


def resize(document: Document, width: float, height: float) -> Document:
    """Give every page the media box (0, 0, width, height). Page content is not scaled."""
    if width <= 0 or height <= 0:
        raise InvalidParameter(f"Page size must be positive, got {width}x{height}")
    result = clone(document)
    for page in result.handle:
        page.set_mediabox(fitz.Rect(0, 0, width, height))
    return result


def compress(document: Document, quality: Optional[int] = None) -> bytes:
    """
    Re-serialize with object deduplication and object streams.

    Embedded images are not recompressed; ``quality`` is accepted as an
    advisory hint and only logged.
    """
    if quality is not None:
        logger.info("Compression quality hint %s is advisory; raster content is kept as-is", quality)
    data = save(document, compress=True)
    logger.info("Compressed document to %d bytes", len(data))
    return data
