"""Shared data models for the document engine, analysis, OCR and comparison."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Literal, Optional

from document.errors import InvalidParameter


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with (x, y) at its lower-left corner, in points."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidParameter(
                f"Rectangle width and height must be positive, got {self.width}x{self.height}"
            )


@dataclass
class PageInfo:
    index: int
    width: float
    height: float
    rotation: int
    crop_box: Rect

    def to_dict(self) -> dict:
        return asdict(self)


_METADATA_KEYS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "creator": "creator",
    "producer": "producer",
    "keywords": "keywords",
    "creation_date": "creationDate",
    "modification_date": "modDate",
}


@dataclass
class DocumentMetadata:
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: Optional[str] = None
    creation_date: Optional[str] = None  # PDF date string, e.g. "D:20240101120000Z"
    modification_date: Optional[str] = None

    @classmethod
    def from_fitz(cls, meta: Optional[Dict[str, str]]) -> "DocumentMetadata":
        """Build from a PyMuPDF ``Document.metadata`` dict (empty strings become None)."""
        meta = meta or {}
        values = {}
        for attr, key in _METADATA_KEYS.items():
            value = meta.get(key)
            values[attr] = value if value else None
        return cls(**values)

    def to_fitz(self) -> Dict[str, str]:
        """Dict accepted by ``fitz.Document.set_metadata``."""
        return {key: getattr(self, attr) or "" for attr, key in _METADATA_KEYS.items()}

    def to_dict(self) -> dict:
        return asdict(self)


FieldKind = Literal["text", "checkbox"]


@dataclass
class FormField:
    name: str
    kind: FieldKind
    value: str | bool | None = None
    page_index: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ExtractedText:
    """Output of the text-extraction collaborator."""
    text: str
    page_count: int
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    pages: List[str] = field(default_factory=list)


@dataclass
class RecognitionResult:
    """Output of the recognition collaborator for one image."""
    text: str
    confidence: float  # 0-100
    word_count: int
    line_count: int


@dataclass
class OCRPageResult:
    page_number: int  # 1-based
    text: str = ""
    confidence: Optional[float] = None
    word_count: int = 0
    line_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"page_number": self.page_number, "error": self.error}
        return {
            "page_number": self.page_number,
            "text": self.text,
            "confidence": self.confidence,
            "word_count": self.word_count,
            "line_count": self.line_count,
        }


@dataclass
class OCRResult:
    language: str
    pages: List[OCRPageResult] = field(default_factory=list)
    text: str = ""
    detected_language: Optional[str] = None

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def mean_confidence(self) -> Optional[float]:
        """Mean confidence over pages that succeeded; None when none did."""
        scores = [p.confidence for p in self.pages if p.ok and p.confidence is not None]
        if not scores:
            return None
        return sum(scores) / len(scores)

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "detected_language": self.detected_language,
            "total_pages": self.total_pages,
            "mean_confidence": self.mean_confidence,
            "text": self.text,
            "pages": [p.to_dict() for p in self.pages],
        }


@dataclass
class DiffSide:
    page_count: int
    word_count: int
    char_count: int


@dataclass
class DiffResult:
    first: DiffSide
    second: DiffSide
    only_in_first: List[str] = field(default_factory=list)
    only_in_second: List[str] = field(default_factory=list)
    common_word_count: int = 0
    similarity_score: float = 0.0  # percent, 0-100

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ValidationReport:
    valid: bool
    page_count: int
    file_size: int
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    pages: List[PageInfo] = field(default_factory=list)
    is_encrypted: bool = False
    has_form: bool = False
    form_field_count: int = 0
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
