"""Shared fixtures: small PDFs built in memory with PyMuPDF.

Every page carries its own label so page order can be asserted through text
extraction.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import fitz
import pytest

A4 = (595.0, 842.0)


def build_pdf(
    labels: Sequence[str],
    sizes: Optional[Sequence[Tuple[float, float]]] = None,
    rotations: Optional[Sequence[int]] = None,
    title: Optional[str] = None,
) -> bytes:
    doc = fitz.open()
    for i, label in enumerate(labels):
        width, height = sizes[i] if sizes else A4
        page = doc.new_page(width=width, height=height)
        if label:
            page.insert_text((72, 72), label, fontsize=12)
        if rotations:
            page.set_rotation(rotations[i])
    if title:
        doc.set_metadata({"title": title})
    data = doc.tobytes()
    doc.close()
    return data


def page_texts(data: bytes) -> List[str]:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def texts():
    return page_texts


@pytest.fixture
def five_page_pdf() -> bytes:
    """Pages labelled A..E."""
    return build_pdf([f"Page {c}" for c in "ABCDE"])
