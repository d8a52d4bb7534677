"""Rasterization collaborator: renders one page of a PDF to PNG bytes."""
from __future__ import annotations

from document.adapter import load


class PyMuPDFRasterizer:

    def rasterize(self, data: bytes, page_number: int, dpi: int) -> bytes:
        """
        Render a page to PNG.

        Args:
            data: Complete document bytes
            page_number: 1-based page number
            dpi: Output resolution

        Returns:
            PNG-encoded image bytes
        """
        with load(data) as document:
            page = document.page(page_number - 1)
            pix = page.get_pixmap(dpi=dpi)
            return pix.tobytes("png")
