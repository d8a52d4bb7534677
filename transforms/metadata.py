"""Document information record: read and update."""
from __future__ import annotations

import dataclasses
from typing import Any, Dict, Mapping, Optional

from document.adapter import Document, clone
from document.errors import InvalidParameter
from document.models import DocumentMetadata

METADATA_FIELDS = tuple(f.name for f in dataclasses.fields(DocumentMetadata))


def set_metadata(document: Document, updates: Mapping[str, Optional[str]]) -> Document:
    """
    Overwrite the named metadata fields; fields not mentioned are left as they are.

    A value of ``None`` or ``""`` clears the field.
    """
    unknown = sorted(set(updates) - set(METADATA_FIELDS))
    if unknown:
        raise InvalidParameter(
            f"Unknown metadata field(s) {', '.join(unknown)}; expected {', '.join(METADATA_FIELDS)}"
        )
    merged = dataclasses.replace(document.metadata, **{k: v or None for k, v in updates.items()})
    result = clone(document)
    result.set_metadata(merged)
    return result


def get_info(document: Document) -> Dict[str, Any]:
    return {
        "page_count": document.page_count,
        "is_encrypted": document.is_encrypted,
        "metadata": document.metadata.to_dict(),
        "pages": [p.to_dict() for p in document.pages],
    }
