"""Text-extraction collaborator backed by PyMuPDF."""
from __future__ import annotations

import fitz  # PyMuPDF

from document.adapter import load
from document.models import ExtractedText
from utils.logging import logger


class PyMuPDFTextExtractor:
    """Plain-text extraction of a whole document, page by page, in reading order."""

    def extract(self, data: bytes) -> ExtractedText:
        with load(data) as document:
            pages = [
                page.get_text("text", flags=fitz.TEXT_PRESERVE_LIGATURES, sort=True)
                for page in document.handle
            ]
            metadata = document.metadata
        logger.debug("Extracted text from %d page(s)", len(pages))
        return ExtractedText(
            text="\n".join(pages),
            page_count=len(pages),
            metadata=metadata,
            pages=pages,
        )
