"""Document model adapter: loads PDF bytes into an ordered page collection and serializes it back.

Every operation works on its own :class:`Document` built from input bytes; nothing is cached
or shared between calls. Transform operations never mutate their input, they work on a
:func:`clone` or on a fresh document assembled with :func:`copy_pages`.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

import fitz  # PyMuPDF

from document.errors import (
    EncryptedDocument,
    InputMissing,
    InvalidParameter,
    UnparsableDocument,
)
from document.models import DocumentMetadata, PageInfo
from utils.coordinates import from_fitz_rect
from utils.logging import logger
from utils.validation import validate_page_index, validate_page_indices


class Document:
    """Ordered page collection plus metadata, backed by a PyMuPDF document."""

    def __init__(self, handle: fitz.Document, *, is_encrypted: bool = False, repaired: bool = False):
        self._handle = handle
        self.is_encrypted = is_encrypted
        self.repaired = repaired

    @property
    def handle(self) -> fitz.Document:
        return self._handle

    @property
    def page_count(self) -> int:
        return self._handle.page_count

    def __len__(self) -> int:
        return self.page_count

    @property
    def is_locked(self) -> bool:
        """True while the document is encrypted and not authenticated."""
        # needs_pass stays set after authenticate(); is_encrypted is cleared by it
        return bool(self._handle.is_encrypted)

    def page(self, index: int) -> fitz.Page:
        validate_page_index(index, self.page_count)
        return self._handle[index]

    def page_info(self, index: int) -> PageInfo:
        page = self.page(index)
        media = page.mediabox
        return PageInfo(
            index=index,
            width=float(media.width),
            height=float(media.height),
            rotation=int(page.rotation) % 360,
            crop_box=from_fitz_rect(tuple(page.cropbox), float(media.height)),
        )

    @property
    def pages(self) -> List[PageInfo]:
        return [self.page_info(i) for i in range(self.page_count)]

    @property
    def metadata(self) -> DocumentMetadata:
        return DocumentMetadata.from_fitz(self._handle.metadata)

    def set_metadata(self, metadata: DocumentMetadata) -> None:
        self._handle.set_metadata(metadata.to_fitz())

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "Document":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def load(
    data: bytes,
    *,
    password: Optional[str] = None,
    strict: bool = False,
    allow_encrypted: bool = False,
) -> Document:
    """
    Parse a PDF byte stream.

    Args:
        data: Complete document bytes
        password: Password used to authenticate an encrypted document
        strict: Reject documents that could only be opened after structural repair
        allow_encrypted: Return a locked Document instead of raising for encrypted input

    Raises:
        InputMissing: empty input
        UnparsableDocument: bytes cannot be parsed (or needed repair in strict mode)
        EncryptedDocument: password required or incorrect
    """
    if not data:
        raise InputMissing("Document bytes are empty")

    try:
        handle = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise UnparsableDocument(f"Cannot parse document: {exc}") from exc

    repaired = bool(getattr(handle, "is_repaired", False))
    if strict and repaired:
        handle.close()
        raise UnparsableDocument("Document could only be opened after structural repair")

    encrypted = bool(handle.needs_pass or (handle.metadata or {}).get("encryption"))
    if handle.needs_pass:
        if password is not None:
            if not handle.authenticate(password):
                handle.close()
                raise EncryptedDocument("Incorrect password for encrypted document")
        elif not allow_encrypted:
            handle.close()
            raise EncryptedDocument(
                "Document is encrypted; supply a password or open it in permissive mode"
            )

    if repaired:
        logger.warning("Document required structural repair while loading")
    logger.debug("Loaded document: %d page(s), encrypted=%s", handle.page_count, encrypted)
    return Document(handle, is_encrypted=encrypted, repaired=repaired)


def save(document: Document, *, compress: bool = False) -> bytes:
    """
    Serialize a Document to bytes.

    Output is deterministic for the same in-memory state: no new file identifier
    is generated. ``compress`` additionally deduplicates objects and packs them
    into object streams; embedded raster content is never recompressed.
    """
    handle = document.handle
    if document.is_locked:
        raise EncryptedDocument("Cannot serialize a locked document")
    if handle.page_count == 0:
        raise InvalidParameter("Cannot serialize a document with zero pages")

    options = {"garbage": 3, "deflate": True, "no_new_id": True}
    if compress:
        options.update(garbage=4, clean=True, use_objstms=1)
    return handle.tobytes(**options)


def new_document() -> Document:
    return Document(fitz.open())


def clone(document: Document) -> Document:
    """Independent copy of a Document; mutations on the copy never reach the original."""
    copy = load(save(document))
    copy.is_encrypted = document.is_encrypted
    return copy


def copy_pages(
    source: Document,
    indices: Iterable[int],
    target: Optional[Document] = None,
) -> Document:
    """
    Copy pages from ``source`` into ``target`` (a new Document by default), in listed order.

    All indices are validated before anything is copied, so a bad index leaves
    ``target`` untouched.

    Raises:
        PageIndexOutOfRange: any index < 0 or >= source page count
        InputMissing: no indices given
    """
    checked = validate_page_indices(indices, source.page_count)
    target = target if target is not None else new_document()
    for index in checked:
        target.handle.insert_pdf(source.handle, from_page=index, to_page=index)
    return target
