"""
Bytes-in, bytes-out facade over the document engine.

Every call checks its input at the boundary (empty input, upload ceiling),
loads a fresh Document, runs one operation inside ``track_time`` and returns
bytes or a report. No Document outlives the call that loaded it.
"""
from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from analysis import blank_pages, duplicates, orientation
from comparison.review import build_review_document
from comparison.text_comparison import diff_documents
from config.settings import settings
from diagnostics.forms import extract_form_fields, fill_form_fields
from diagnostics.report import validate_document
from document.adapter import Document, load, save
from document.errors import InputMissing, InputTooLarge
from document.models import DiffResult, FormField, OCRResult, RecognitionResult, Rect, ValidationReport
from extraction.ocr_pipeline import OCRConfig, OCRPipeline
from extraction.text_extractor import PyMuPDFTextExtractor
from transforms import convert, metadata, overlay, pages, security
from utils.logging import logger
from utils.performance import track_time


@dataclass
class EngineConfig:
    """Per-engine limits and OCR parameters; defaults come from ``Settings``."""
    max_upload_bytes: int = field(default_factory=lambda: settings.max_upload_bytes)
    ocr: OCRConfig = field(default_factory=OCRConfig)


class DocumentEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        text_extractor=None,
        rasterizer=None,
        recognizer=None,
        encryption_tool=None,
        office_converter=None,
    ):
        self.config = config or EngineConfig()
        self.text_extractor = text_extractor or PyMuPDFTextExtractor()
        self.encryption_tool = encryption_tool
        self.office_converter = office_converter
        self.ocr_pipeline = OCRPipeline(rasterizer=rasterizer, recognizer=recognizer, config=self.config.ocr)

    # ------------------------------------------------------------------
    # Boundary helpers
    # ------------------------------------------------------------------
    def _check(self, data: bytes, what: str = "Document") -> bytes:
        if not data:
            raise InputMissing(f"{what} bytes are empty")
        if len(data) > self.config.max_upload_bytes:
            raise InputTooLarge(
                f"{what} is {len(data)} bytes; the limit is {self.config.max_upload_bytes} bytes"
            )
        return data

    def _load(self, data: bytes, password: Optional[str] = None) -> Document:
        return load(self._check(data), password=password)

    def _transform(self, name: str, data: bytes, operation: Callable[..., Document], *args, **kwargs) -> bytes:
        with self._load(data) as document, track_time(name, size=len(data)):
            result = operation(document, *args, **kwargs)
            try:
                return save(result)
            finally:
                result.close()

    def _report(self, name: str, data: bytes, operation: Callable[..., Any], *args, **kwargs) -> Any:
        with self._load(data) as document, track_time(name, size=len(data)):
            return operation(document, *args, **kwargs)

    # ------------------------------------------------------------------
    # Page transforms
    # ------------------------------------------------------------------
    def merge(self, documents: Sequence[bytes]) -> bytes:
        if not documents:
            raise InputMissing("At least one document is required to merge")
        with ExitStack() as stack, track_time("merge", count=len(documents)):
            loaded = [stack.enter_context(self._load(data)) for data in documents]
            result = stack.enter_context(pages.merge(loaded))
            return save(result)

    def split(self, data: bytes, ranges: Sequence[Sequence[int]]) -> List[bytes]:
        with self._load(data) as document, track_time("split", ranges=len(ranges)):
            parts = pages.split(document, ranges)
            try:
                return [save(part) for part in parts]
            finally:
                for part in parts:
                    part.close()

    def remove_pages(self, data: bytes, indices: Sequence[int]) -> bytes:
        return self._transform("remove_pages", data, pages.remove_pages, indices)

    def extract_pages(self, data: bytes, indices: Sequence[int]) -> bytes:
        return self._transform("extract_pages", data, pages.extract_pages, indices)

    def organize(self, data: bytes, order: Sequence[int]) -> bytes:
        return self._transform("organize", data, pages.organize, order)

    def reverse(self, data: bytes) -> bytes:
        return self._transform("reverse", data, pages.reverse)

    def duplicate(self, data: bytes, indices: Sequence[int]) -> bytes:
        return self._transform("duplicate", data, pages.duplicate, indices)

    def rotate(self, data: bytes, degrees: int) -> bytes:
        return self._transform("rotate", data, pages.rotate, degrees)

    def crop(self, data: bytes, rect: Rect) -> bytes:
        return self._transform("crop", data, pages.crop, rect)

    def resize(self, data: bytes, width: float, height: float) -> bytes:
        return self._transform("resize", data, pages.resize, width, height)

    def compress(self, data: bytes, quality: Optional[int] = None) -> bytes:
        return self._report("compress", data, pages.compress, quality)

    # ------------------------------------------------------------------
    # Overlays and metadata
    # ------------------------------------------------------------------
    def add_text(self, data: bytes, text: str, **options) -> bytes:
        return self._transform("add_text", data, overlay.add_text, text, **options)

    def add_watermark(self, data: bytes, text: str, **options) -> bytes:
        return self._transform("add_watermark", data, overlay.add_watermark, text, **options)

    def add_page_numbers(self, data: bytes, **options) -> bytes:
        return self._transform("add_page_numbers", data, overlay.add_page_numbers, **options)

    def redact(self, data: bytes, page_index: int, rect: Rect, **options) -> bytes:
        return self._transform("redact", data, overlay.redact, page_index, rect, **options)

    def annotate(self, data: bytes, page_index: int, rect: Rect, content: str, **options) -> bytes:
        return self._transform("annotate", data, overlay.annotate, page_index, rect, content, **options)

    def draw_shape(self, data: bytes, page_index: int, shape: str, rect: Rect, **options) -> bytes:
        return self._transform("draw_shape", data, overlay.draw_shape, page_index, shape, rect, **options)

    def add_stamp(self, data: bytes, text: str = "APPROVED", **options) -> bytes:
        return self._transform("add_stamp", data, overlay.add_stamp, text, **options)

    def add_header_footer(self, data: bytes, **options) -> bytes:
        return self._transform("add_header_footer", data, overlay.add_header_footer, **options)

    def add_hyperlink(self, data: bytes, page_index: int, rect: Rect, uri: str) -> bytes:
        return self._transform("add_hyperlink", data, overlay.add_hyperlink, page_index, rect, uri)

    def sign(self, data: bytes, signer_name: str, **options) -> bytes:
        return self._transform("sign", data, overlay.sign, signer_name, **options)

    def set_metadata(self, data: bytes, updates: Mapping[str, Optional[str]]) -> bytes:
        return self._transform("set_metadata", data, metadata.set_metadata, updates)

    def get_info(self, data: bytes) -> Dict[str, Any]:
        return self._report("get_info", data, metadata.get_info)

    # ------------------------------------------------------------------
    # Security (delegated)
    # ------------------------------------------------------------------
    def protect(self, data: bytes, owner_password: str) -> bytes:
        return self._report("protect", data, security.protect, owner_password, tool=self.encryption_tool)

    def encrypt(self, data: bytes, user_password: str, owner_password: Optional[str] = None) -> bytes:
        return self._report(
            "encrypt", data, security.encrypt, user_password, owner_password, tool=self.encryption_tool
        )

    def unlock(self, data: bytes, password: str) -> bytes:
        with track_time("unlock", size=len(data)):
            return security.unlock(self._check(data), password, tool=self.encryption_tool)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------
    def images_to_pdf(self, images: Sequence[bytes]) -> bytes:
        if not images:
            raise InputMissing("At least one image is required")
        for image in images:
            self._check(image, "Image")
        with track_time("images_to_pdf", count=len(images)), convert.images_to_pdf(images) as document:
            return save(document)

    def text_to_pdf(self, text: str, font_size: float = 12) -> bytes:
        with track_time("text_to_pdf"), convert.text_to_pdf(text, font_size=font_size) as document:
            return save(document)

    def html_to_pdf(self, html: str) -> bytes:
        self._check((html or "").encode("utf-8"), "HTML")
        with track_time("html_to_pdf"), convert.html_to_pdf(html) as document:
            return save(document)

    def office_to_pdf(self, data: bytes, suffix: str) -> bytes:
        self._check(data)
        with track_time("office_to_pdf"), convert.office_to_pdf(data, suffix, self.office_converter) as document:
            return save(document)

    def pdf_to_images(self, data: bytes, dpi: int = 150, fmt: str = "png") -> List[bytes]:
        with track_time("pdf_to_images", dpi=dpi):
            return convert.pdf_to_images(self._check(data), dpi=dpi, fmt=fmt, rasterizer=self.ocr_pipeline.rasterizer)

    def pdf_to_text(self, data: bytes) -> str:
        with track_time("pdf_to_text"):
            return convert.pdf_to_text(self._check(data), extractor=self.text_extractor)

    def pdf_to_html(self, data: bytes) -> str:
        with track_time("pdf_to_html"):
            return convert.pdf_to_html(self._check(data), extractor=self.text_extractor)

    # ------------------------------------------------------------------
    # Content analysis
    # ------------------------------------------------------------------
    def find_duplicate_pages(self, data: bytes) -> List[int]:
        return self._report("find_duplicate_pages", data, duplicates.find_duplicate_pages)

    def remove_duplicate_pages(self, data: bytes) -> bytes:
        return self._transform("remove_duplicate_pages", data, duplicates.remove_duplicate_pages)

    def find_blank_pages(self, data: bytes) -> List[int]:
        return self._report("find_blank_pages", data, blank_pages.find_blank_pages, self.text_extractor)

    def remove_blank_pages(self, data: bytes) -> bytes:
        return self._transform("remove_blank_pages", data, blank_pages.remove_blank_pages, self.text_extractor)

    def normalize_orientation(self, data: bytes) -> bytes:
        return self._transform("normalize_orientation", data, orientation.normalize_orientation)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def validate(self, data: bytes) -> ValidationReport:
        with track_time("validate", size=len(data)):
            return validate_document(self._check(data))

    def extract_form_fields(self, data: bytes) -> List[FormField]:
        return self._report("extract_form_fields", data, extract_form_fields)

    def fill_form_fields(self, data: bytes, values: Mapping[str, Any]) -> bytes:
        return self._transform("fill_form_fields", data, fill_form_fields, values)

    # ------------------------------------------------------------------
    # OCR
    # ------------------------------------------------------------------
    def ocr(self, data: bytes, language: Optional[str] = None) -> OCRResult:
        return self.ocr_pipeline.run(self._check(data), language)

    def ocr_auto_detect(self, data: bytes, candidates: Optional[Sequence[str]] = None) -> OCRResult:
        with track_time("ocr_auto_detect"):
            return self.ocr_pipeline.run_auto_detect(self._check(data), candidates)

    def ocr_image(self, image: bytes, language: Optional[str] = None) -> RecognitionResult:
        return self.ocr_pipeline.recognize_image(self._check(image, "Image"), language)

    # ------------------------------------------------------------------
    # Compare
    # ------------------------------------------------------------------
    def diff(self, first: bytes, second: bytes) -> DiffResult:
        self._check(first)
        self._check(second)
        with track_time("diff"):
            return diff_documents(first, second, self.text_extractor)

    def review(self, first: bytes, second: bytes) -> bytes:
        with self._load(first) as a, self._load(second) as b, track_time("review"):
            result = build_review_document(a, b)
            try:
                return save(result)
            finally:
                result.close()


def log_engine_settings() -> None:
    logger.info(
        "Engine settings: upload limit=%d bytes, OCR dpi=%d, workers=%d",
        settings.max_upload_bytes,
        settings.ocr_dpi,
        settings.ocr_max_workers,
    )
