"""Document model: data classes and the error taxonomy.

The PyMuPDF-backed adapter lives in ``document.adapter`` (load / save / clone / copy_pages).
"""
from document.errors import (
    CollaboratorUnavailable,
    DocumentEngineError,
    EncryptedDocument,
    InputMissing,
    InputTooLarge,
    InvalidParameter,
    PageIndexOutOfRange,
    PerPageRecoverableFailure,
    UnparsableDocument,
)
from document.models import (
    DiffResult,
    DocumentMetadata,
    FormField,
    OCRPageResult,
    OCRResult,
    PageInfo,
    Rect,
    ValidationReport,
)

__all__ = [
    "CollaboratorUnavailable",
    "DocumentEngineError",
    "EncryptedDocument",
    "InputMissing",
    "InputTooLarge",
    "InvalidParameter",
    "PageIndexOutOfRange",
    "PerPageRecoverableFailure",
    "UnparsableDocument",
    "DiffResult",
    "DocumentMetadata",
    "FormField",
    "OCRPageResult",
    "OCRResult",
    "PageInfo",
    "Rect",
    "ValidationReport",
]
