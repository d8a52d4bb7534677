"""Per-page content analysis: duplicates, blank pages, orientation."""
from analysis.blank_pages import find_blank_pages, is_blank_text, remove_blank_pages
from analysis.duplicates import find_duplicate_pages, page_content_hash, remove_duplicate_pages
from analysis.orientation import normalize_orientation

__all__ = [
    "find_blank_pages",
    "is_blank_text",
    "remove_blank_pages",
    "find_duplicate_pages",
    "page_content_hash",
    "remove_duplicate_pages",
    "normalize_orientation",
]
