"""Structural validation report for a PDF byte stream."""
from __future__ import annotations

from typing import List

from config.settings import settings
from diagnostics.forms import extract_form_fields
from document.adapter import Document, load
from document.errors import EncryptedDocument, InputMissing, UnparsableDocument
from document.models import PageInfo, ValidationReport
from utils.logging import logger

ISSUE_NO_PAGES = "document has no pages"
ISSUE_NO_TITLE = "missing title metadata"
ISSUE_ENCRYPTED = "document is encrypted"
ISSUE_REPAIRED = "document required structural repair"
ISSUE_PAGE_SIZES = "inconsistent page sizes"


def _sizes_consistent(pages: List[PageInfo], tolerance: float) -> bool:
    if not pages:
        return True
    first = pages[0]
    return all(
        abs(p.width - first.width) <= tolerance and abs(p.height - first.height) <= tolerance
        for p in pages[1:]
    )


def _page_count(document: Document) -> int:
    try:
        return document.page_count
    except (RuntimeError, ValueError) as exc:
        logger.warning("Validation: page count unavailable: %s", exc)
        return 0


def _open_for_validation(data: bytes):
    """Strict load first; encryption and repairable damage fall back to a permissive load."""
    issues: List[str] = []
    try:
        return load(data, strict=True), issues
    except EncryptedDocument:
        logger.info("Validation: document is encrypted, retrying in permissive mode")
        return load(data, allow_encrypted=True), issues
    except UnparsableDocument as exc:
        logger.info("Validation: strict load failed (%s), retrying in permissive mode", exc)
        document = load(data, allow_encrypted=True)
        issues.append(ISSUE_REPAIRED)
        return document, issues


def validate_document(data: bytes) -> ValidationReport:
    """
    Inspect ``data`` and report problems instead of raising for them.

    Only input that cannot be parsed even permissively raises
    ``UnparsableDocument``. ``valid`` is False only when the document has no
    readable pages; the other issues are advisory.
    """
    if not data:
        raise InputMissing("Document bytes are empty")

    document, issues = _open_for_validation(data)
    with document:
        report = _build_report(document, len(data))
    report.issues = issues + report.issues
    logger.info("Validation: %d page(s), %d issue(s)", report.page_count, len(report.issues))
    return report


def _build_report(document: Document, file_size: int) -> ValidationReport:
    issues: List[str] = []
    locked = document.is_locked
    page_count = _page_count(document)
    pages = [] if locked else document.pages
    metadata = document.metadata
    fields = extract_form_fields(document)

    if page_count == 0:
        issues.append(ISSUE_NO_PAGES)
    if not metadata.title:
        issues.append(ISSUE_NO_TITLE)
    if file_size > settings.validation_max_file_size:
        issues.append(
            f"file size {file_size} bytes exceeds limit of {settings.validation_max_file_size} bytes"
        )
    if not _sizes_consistent(pages, settings.page_size_tolerance):
        issues.append(ISSUE_PAGE_SIZES)
    if document.is_encrypted:
        issues.append(ISSUE_ENCRYPTED)

    return ValidationReport(
        valid=page_count > 0,
        page_count=page_count,
        file_size=file_size,
        metadata=metadata,
        pages=pages,
        is_encrypted=document.is_encrypted,
        has_form=bool(fields),
        form_field_count=len(fields),
        issues=issues,
    )
