"""Password protection, encryption and unlocking.

The engine only records intent in the document's ``keywords`` metadata; the
actual encryption is done by an external tool (qpdf by default). When the
tool is missing the call fails with ``CollaboratorUnavailable``; it never
returns an unprotected file as if it were protected.
"""
from __future__ import annotations

import dataclasses
from typing import Optional, Protocol

from document.adapter import Document, clone, load, save
from document.errors import InputMissing
from tools.encryption import QpdfEncryptionTool
from utils.logging import logger

PROTECTED_MARK = "protected"
ENCRYPTED_MARK = "encrypted"


class EncryptionTool(Protocol):
    name: str

    def encrypt(self, data: bytes, user_password: str, owner_password: str,
                restrict_permissions: bool = False) -> bytes: ...

    def decrypt(self, data: bytes, password: str) -> bytes: ...


def _keywords_with(keywords: Optional[str], add: Optional[str] = None, drop=()) -> Optional[str]:
    words = [w.strip() for w in (keywords or "").split(",") if w.strip()]
    words = [w for w in words if w not in drop]
    if add and add not in words:
        words.append(add)
    return ", ".join(words) or None


def _marked(document: Document, mark: str) -> bytes:
    result = clone(document)
    meta = result.metadata
    result.set_metadata(dataclasses.replace(meta, keywords=_keywords_with(meta.keywords, add=mark)))
    try:
        return save(result)
    finally:
        result.close()


def protect(document: Document, owner_password: str, tool: Optional[EncryptionTool] = None) -> bytes:
    """Restrict printing, editing and copying; the file still opens without a password."""
    if not owner_password:
        raise InputMissing("Owner password is required")
    tool = tool or QpdfEncryptionTool()
    data = _marked(document, PROTECTED_MARK)
    logger.info("Delegating permission restriction to %s", tool.name)
    return tool.encrypt(data, "", owner_password, restrict_permissions=True)


def encrypt(
    document: Document,
    user_password: str,
    owner_password: Optional[str] = None,
    tool: Optional[EncryptionTool] = None,
) -> bytes:
    """Require ``user_password`` to open the file."""
    if not user_password:
        raise InputMissing("User password is required")
    tool = tool or QpdfEncryptionTool()
    data = _marked(document, ENCRYPTED_MARK)
    logger.info("Delegating encryption to %s", tool.name)
    return tool.encrypt(data, user_password, owner_password or user_password)


def unlock(data: bytes, password: str, tool: Optional[EncryptionTool] = None) -> bytes:
    """Remove encryption from ``data`` and clear the intent marks."""
    if not data:
        raise InputMissing("Document bytes are empty")
    tool = tool or QpdfEncryptionTool()
    logger.info("Delegating decryption to %s", tool.name)
    plain = tool.decrypt(data, password or "")
    with load(plain) as document:
        meta = document.metadata
        document.set_metadata(dataclasses.replace(
            meta, keywords=_keywords_with(meta.keywords, drop=(PROTECTED_MARK, ENCRYPTED_MARK)),
        ))
        return save(document)
