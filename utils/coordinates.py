"""Coordinate conversion between the engine's bottom-left origin and PyMuPDF's top-left origin."""
from __future__ import annotations

from typing import Tuple

from document.models import Rect


def to_fitz_point(x: float, y: float, page_height: float) -> Tuple[float, float]:
    """
    Convert a bottom-left origin point to PyMuPDF page coordinates.

    Args:
        x: Horizontal offset from the left edge
        y: Vertical offset from the bottom edge
        page_height: Height of the visible page area

    Returns:
        (x, y) with y measured from the top edge
    """
    return (x, page_height - y)


def to_fitz_rect(rect: Rect, page_height: float) -> Tuple[float, float, float, float]:
    """
    Convert a bottom-left origin rectangle to a PyMuPDF (x0, y0, x1, y1) tuple.

    Args:
        rect: Rectangle with (x, y) at its lower-left corner
        page_height: Height of the reference box (visible page or media box)

    Returns:
        Rectangle as (x0, y0, x1, y1) with y measured from the top edge
    """
    x0 = rect.x
    x1 = rect.x + rect.width
    y0 = page_height - (rect.y + rect.height)
    y1 = page_height - rect.y
    return (x0, y0, x1, y1)


def from_fitz_rect(bbox: Tuple[float, float, float, float], page_height: float) -> Rect:
    """Inverse of :func:`to_fitz_rect`."""
    x0, y0, x1, y1 = bbox
    return Rect(x=x0, y=page_height - y1, width=x1 - x0, height=y1 - y0)


def rect_within(inner: Rect, width: float, height: float, tolerance: float = 1e-6) -> bool:
    """Return True if ``inner`` lies inside the box (0, 0, width, height)."""
    return (
        inner.x >= -tolerance
        and inner.y >= -tolerance
        and inner.x + inner.width <= width + tolerance
        and inner.y + inner.height <= height + tolerance
    )
