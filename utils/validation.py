"""Input validation helpers for page-selecting operations."""
from __future__ import annotations

from typing import Iterable, List, Sequence

from document.errors import InputMissing, InvalidParameter, PageIndexOutOfRange


def validate_page_index(index: int, page_count: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidParameter(f"Page index must be an integer, got {index!r}")
    if index < 0 or index >= page_count:
        raise PageIndexOutOfRange(index, page_count)
    return index


def validate_page_indices(indices: Iterable[int], page_count: int) -> List[int]:
    """Check every index against the page count; returns the indices as a list, order kept."""
    checked = [validate_page_index(i, page_count) for i in indices]
    if not checked:
        raise InputMissing("At least one page index is required")
    return checked


def distinct_sorted(indices: Iterable[int]) -> List[int]:
    """Deduplicate and return indices in ascending (original document) order."""
    return sorted(set(indices))


def validate_permutation(order: Sequence[int], page_count: int) -> List[int]:
    """
    Validate that ``order`` is a permutation of 0..page_count-1.

    Raises:
        InvalidParameter: wrong length or repeated index
        PageIndexOutOfRange: index outside the document
    """
    checked = [validate_page_index(i, page_count) for i in order]
    if len(checked) != page_count:
        raise InvalidParameter(
            f"Page order must list all {page_count} page(s), got {len(checked)} entries"
        )
    if len(set(checked)) != page_count:
        raise InvalidParameter("Page order contains duplicate indices")
    return checked


def validate_rotation(degrees: int) -> int:
    if isinstance(degrees, bool) or not isinstance(degrees, int) or degrees % 90 != 0:
        raise InvalidParameter(f"Rotation must be a multiple of 90 degrees, got {degrees!r}")
    return degrees
