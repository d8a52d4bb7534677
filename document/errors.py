"""
Exceptions raised by the document engine.
"""
from __future__ import annotations

from typing import Optional


class DocumentEngineError(Exception):
    """Base exception for all document engine errors"""


class InputMissing(DocumentEngineError, ValueError):
    """Required input is absent; rejected before any processing"""


class InputTooLarge(DocumentEngineError, ValueError):
    """Input exceeds the configured upload ceiling"""


class InvalidParameter(DocumentEngineError, ValueError):
    """An operation parameter is malformed or unsupported"""


class PageIndexOutOfRange(DocumentEngineError, IndexError):
    """A referenced page index is negative or not below the page count"""

    def __init__(self, index: int, page_count: int, message: Optional[str] = None):
        self.index = index
        self.page_count = page_count
        super().__init__(
            message or f"Page index {index} out of range for document with {page_count} page(s)"
        )


class UnparsableDocument(DocumentEngineError):
    """The byte stream cannot be parsed, even in permissive mode"""


class EncryptedDocument(DocumentEngineError):
    """The document is encrypted and no valid password was supplied"""


class CollaboratorUnavailable(DocumentEngineError, RuntimeError):
    """A required external tool or service is missing"""

    def __init__(self, collaborator: str, hint: str):
        self.collaborator = collaborator
        self.hint = hint
        super().__init__(f"{collaborator} is not available: {hint}")


class PerPageRecoverableFailure(DocumentEngineError):
    """A single page failed; the enclosing multi-page operation records it and continues"""

    def __init__(self, page_number: int, reason: str):
        self.page_number = page_number
        self.reason = reason
        super().__init__(f"Page {page_number}: {reason}")
