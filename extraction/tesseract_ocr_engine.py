"""Tesseract recognition collaborator: image bytes in, text plus confidence out."""
from __future__ import annotations

import io
from typing import Dict, List, Optional, Tuple

from config.settings import settings
from document.errors import CollaboratorUnavailable, PerPageRecoverableFailure
from document.models import RecognitionResult
from utils.logging import logger

_INSTALL_HINT = (
    "pytesseract is required (`pip install pytesseract`) and the Tesseract binary must be "
    "installed (apt install tesseract-ocr / brew install tesseract) or set DOCENGINE_TESSERACT_CMD"
)


class TesseractRecognizer:
    """Runs ``pytesseract.image_to_data`` and aggregates word-level confidences."""

    def __init__(self, tesseract_cmd: Optional[str] = None):
        try:
            import pytesseract
        except ImportError as exc:
            raise CollaboratorUnavailable("Tesseract", _INSTALL_HINT) from exc
        self._pytesseract = pytesseract
        cmd = tesseract_cmd or settings.tesseract_cmd
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd

    def available_languages(self) -> List[str]:
        try:
            return list(self._pytesseract.get_languages(config=""))
        except self._pytesseract.TesseractNotFoundError as exc:
            raise CollaboratorUnavailable("Tesseract", _INSTALL_HINT) from exc

    def recognize(
        self,
        image: bytes,
        language: str,
        timeout: Optional[float] = None,
        page_number: int = 0,
    ) -> RecognitionResult:
        """
        Recognize text in a PNG/JPEG image.

        Raises:
            CollaboratorUnavailable: the tesseract binary cannot be found
            PerPageRecoverableFailure: the image is unreadable or tesseract timed out
        """
        from PIL import Image, UnidentifiedImageError

        pytesseract = self._pytesseract
        try:
            img = Image.open(io.BytesIO(image))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise PerPageRecoverableFailure(page_number, f"unreadable image: {exc}") from exc

        try:
            data = pytesseract.image_to_data(
                img,
                lang=language,
                output_type=pytesseract.Output.DICT,
                timeout=timeout or 0,
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise CollaboratorUnavailable("Tesseract", _INSTALL_HINT) from exc
        except pytesseract.TesseractError as exc:
            raise PerPageRecoverableFailure(page_number, exc.message or str(exc)) from exc
        except RuntimeError as exc:
            # a timed-out tesseract process is killed and reported as a plain RuntimeError
            raise PerPageRecoverableFailure(page_number, str(exc)) from exc

        return _summarize(data)


def _summarize(ocr_data: Dict[str, list]) -> RecognitionResult:
    """
    Collapse Tesseract's word rows into text and counts.

    Rows with ``conf == -1`` are layout rows (page, block, paragraph, line) and
    carry no text.
    """
    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confidences: List[float] = []

    for i, raw_text in enumerate(ocr_data.get("text", [])):
        text = (raw_text or "").strip()
        try:
            conf = float(ocr_data["conf"][i])
        except (TypeError, ValueError):
            conf = -1.0
        if not text or conf < 0:
            continue
        key = (ocr_data["block_num"][i], ocr_data["par_num"][i], ocr_data["line_num"][i])
        lines.setdefault(key, []).append(text)
        confidences.append(conf)

    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    logger.debug("Tesseract: %d words on %d lines, confidence %.1f", len(confidences), len(lines), confidence)
    return RecognitionResult(
        text="\n".join(" ".join(words) for words in lines.values()),
        confidence=confidence,
        word_count=len(confidences),
        line_count=len(lines),
    )
