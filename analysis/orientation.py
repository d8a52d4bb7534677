"""Orientation normalization from page shape and rotation.

This is a shape heuristic: page content is never inspected, so a scanned
page that is upside down or skewed inside a correctly shaped box is left
alone.
"""
from __future__ import annotations

from document.adapter import Document, clone
from utils.logging import logger


def _normalized_rotation(width: float, height: float, rotation: int) -> int:
    if width > height:
        return 0 if rotation in (90, 270) else rotation
    return 0


def normalize_orientation(document: Document) -> Document:
    """
    Reset page rotation based on the unrotated media box shape.

    Landscape pages rotated by 90 or 270 degrees are reset to 0; any other
    rotation on a landscape page is kept. Portrait (and square) pages always
    end up at 0.
    """
    result = clone(document)
    changed = 0
    for page in result.handle:
        media = page.mediabox
        rotation = page.rotation % 360
        target = _normalized_rotation(media.width, media.height, rotation)
        if target != rotation:
            page.set_rotation(target)
            changed += 1
    logger.info("Normalized orientation of %d of %d page(s)", changed, result.page_count)
    return result
