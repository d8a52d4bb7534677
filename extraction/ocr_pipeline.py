"""OCR pipeline: rasterize each page, recognize it, aggregate, and optionally pick the best language.

Per-page work runs on a thread pool. A page that fails to rasterize or
recognize, or that exceeds the page timeout, is recorded as a per-page error
and left out of the confidence mean; the remaining pages still complete.
"""
from __future__ import annotations

import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from config.settings import settings
from document.adapter import load
from document.errors import (
    CollaboratorUnavailable,
    InputMissing,
    InvalidParameter,
    PerPageRecoverableFailure,
)
from document.models import OCRPageResult, OCRResult, RecognitionResult
from extraction.rasterizer import PyMuPDFRasterizer
from utils.logging import logger
from utils.performance import track_time


class Rasterizer(Protocol):
    def rasterize(self, data: bytes, page_number: int, dpi: int) -> bytes: ...


class Recognizer(Protocol):
    def recognize(self, image: bytes, language: str, timeout: Optional[float] = None) -> RecognitionResult: ...


@dataclass(frozen=True)
class OCRConfig:
    """Explicit OCR parameters for one pipeline; defaults come from ``Settings``."""
    language: str = field(default_factory=lambda: settings.ocr_default_language)
    dpi: int = field(default_factory=lambda: settings.ocr_dpi)
    max_workers: int = field(default_factory=lambda: settings.ocr_max_workers)
    page_timeout: float = field(default_factory=lambda: settings.ocr_page_timeout)
    candidate_languages: Tuple[str, ...] = field(
        default_factory=lambda: tuple(settings.ocr_candidate_languages)
    )
    supported_languages: Tuple[str, ...] = field(
        default_factory=lambda: tuple(settings.ocr_supported_languages)
    )

    def __post_init__(self) -> None:
        if self.dpi <= 0:
            raise InvalidParameter(f"DPI must be positive, got {self.dpi}")
        if self.max_workers < 1:
            raise InvalidParameter(f"max_workers must be at least 1, got {self.max_workers}")
        if self.page_timeout <= 0:
            raise InvalidParameter(f"page_timeout must be positive, got {self.page_timeout}")


def _page_separator(page_number: int, text: str) -> str:
    return f"\n--- Page {page_number} ---\n{text}\n"


class OCRPipeline:
    def __init__(
        self,
        rasterizer: Optional[Rasterizer] = None,
        recognizer: Optional[Recognizer] = None,
        config: Optional[OCRConfig] = None,
    ):
        self.rasterizer = rasterizer or PyMuPDFRasterizer()
        self._recognizer = recognizer
        self.config = config or OCRConfig()

    @property
    def recognizer(self) -> Recognizer:
        if self._recognizer is None:
            from extraction.tesseract_ocr_engine import TesseractRecognizer
            self._recognizer = TesseractRecognizer()
        return self._recognizer

    def validate_language(self, language: str) -> str:
        """Accept a Tesseract language string such as ``eng`` or ``eng+deu``."""
        if not language:
            raise InvalidParameter("OCR language must not be empty")
        unsupported = [part for part in language.split("+") if part not in self.config.supported_languages]
        if unsupported:
            raise InvalidParameter(
                f"Unsupported OCR language(s) {', '.join(unsupported)}; "
                f"supported: {', '.join(self.config.supported_languages)}"
            )
        return language

    def recognize_image(self, image: bytes, language: Optional[str] = None) -> RecognitionResult:
        if not image:
            raise InputMissing("Image bytes are empty")
        language = self.validate_language(language or self.config.language)
        return self.recognizer.recognize(image, language, timeout=self.config.page_timeout)

    def run(self, data: bytes, language: Optional[str] = None) -> OCRResult:
        """OCR every page of ``data`` with one language."""
        language = self.validate_language(language or self.config.language)
        with load(data) as document:
            page_count = document.page_count
        recognizer = self.recognizer

        logger.info("OCR: %d page(s), language=%s, dpi=%d", page_count, language, self.config.dpi)
        with track_time("ocr_run", language=language, pages=page_count):
            pages = self._run_pages(data, page_count, language, recognizer)

        text = "".join(_page_separator(p.page_number, p.text) for p in pages if p.ok).strip()
        result = OCRResult(language=language, pages=pages, text=text)
        failed = sum(1 for p in pages if not p.ok)
        if failed:
            logger.warning("OCR: %d of %d page(s) failed", failed, page_count)
        return result

    def run_auto_detect(self, data: bytes, candidates: Optional[Sequence[str]] = None) -> OCRResult:
        """
        Run the full pipeline once per candidate language and keep the best run.

        The winner is the run with the strictly highest mean page confidence, so
        on a tie the earlier candidate stays. When no run yields any confidence,
        the first candidate's run is returned with ``detected_language=None``.
        """
        candidates = list(candidates) if candidates else list(self.config.candidate_languages)
        if not candidates:
            raise InputMissing("At least one candidate language is required")
        for language in candidates:
            self.validate_language(language)

        first: Optional[OCRResult] = None
        best: Optional[OCRResult] = None
        best_score: Optional[float] = None
        for language in candidates:
            result = self.run(data, language)
            score = result.mean_confidence
            logger.info("OCR auto-detect: %s mean confidence %s", language, score)
            if first is None:
                first = result
            if score is not None and (best_score is None or score > best_score):
                best, best_score = result, score

        if best is None:
            logger.warning("OCR auto-detect: no candidate produced a confidence score")
            return first
        best.detected_language = best.language
        return best

    def _run_pages(
        self,
        data: bytes,
        page_count: int,
        language: str,
        recognizer: Recognizer,
    ) -> List[OCRPageResult]:
        """
        Process pages with at most ``max_workers`` live at once.

        A page's deadline starts when it is submitted, and a page is only
        submitted when a slot is free. A page past its deadline is recorded as
        timed out and gives its slot up; its thread is abandoned rather than
        joined, so the pool holds one thread per page to keep queued pages from
        waiting behind it.
        """
        cfg = self.config
        queue = deque(range(1, page_count + 1))
        running: Dict[Future, Tuple[int, float]] = {}
        results: Dict[int, OCRPageResult] = {}
        executor = ThreadPoolExecutor(max_workers=max(page_count, 1))
        try:
            while queue or running:
                while queue and len(running) < cfg.max_workers:
                    page_number = queue.popleft()
                    future = executor.submit(self._process_page, data, page_number, language, recognizer)
                    running[future] = (page_number, time.monotonic() + cfg.page_timeout)

                nearest = min(deadline for _, deadline in running.values())
                done, _ = wait(list(running), timeout=max(0.0, nearest - time.monotonic()),
                               return_when=FIRST_COMPLETED)
                for future in done:
                    page_number, _ = running.pop(future)
                    results[page_number] = future.result()

                now = time.monotonic()
                for future, (page_number, deadline) in list(running.items()):
                    if now >= deadline:
                        del running[future]
                        logger.warning("OCR page %d timed out after %.1fs", page_number, cfg.page_timeout)
                        results[page_number] = OCRPageResult(
                            page_number=page_number, error="Page processing timed out"
                        )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return [results[n] for n in sorted(results)]

    @staticmethod
    def _failed(page_number: int, reason: str) -> OCRPageResult:
        logger.warning("OCR page %d failed: %s", page_number, reason)
        return OCRPageResult(page_number=page_number, error=f"Failed to process page: {reason}")

    def _process_page(
        self,
        data: bytes,
        page_number: int,
        language: str,
        recognizer: Recognizer,
    ) -> OCRPageResult:
        try:
            image = self.rasterizer.rasterize(data, page_number, self.config.dpi)
            rec = recognizer.recognize(image, language, timeout=self.config.page_timeout)
        except CollaboratorUnavailable:
            raise
        except PerPageRecoverableFailure as exc:
            return self._failed(page_number, exc.reason)
        except Exception as exc:
            return self._failed(page_number, str(exc))
        logger.debug("OCR page %d: %d words, confidence %.1f", page_number, rec.word_count, rec.confidence)
        return OCRPageResult(
            page_number=page_number,
            text=rec.text,
            confidence=rec.confidence,
            word_count=rec.word_count,
            line_count=rec.line_count,
        )
