"""AcroForm text and checkbox fields: enumerate and fill."""
from __future__ import annotations

from typing import Dict, List, Mapping, Union

import fitz  # PyMuPDF

from document.adapter import Document, clone
from document.errors import InvalidParameter
from document.models import FieldKind, FormField
from utils.logging import logger

_KINDS: Dict[int, FieldKind] = {
    fitz.PDF_WIDGET_TYPE_TEXT: "text",
    fitz.PDF_WIDGET_TYPE_CHECKBOX: "checkbox",
}

FieldValue = Union[str, bool]


def _checkbox_value(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    return raw not in (None, "", "Off")


def _as_checked(value: FieldValue) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def extract_form_fields(document: Document) -> List[FormField]:
    """
    Text and checkbox fields in page order. Other widget kinds are ignored,
    and a name that appears on several widgets is reported once.
    """
    fields: List[FormField] = []
    seen = set()
    if document.is_locked:
        return fields
    for index, page in enumerate(document.handle):
        for widget in page.widgets() or []:
            kind = _KINDS.get(widget.field_type)
            if kind is None or widget.field_name in seen:
                continue
            seen.add(widget.field_name)
            value = _checkbox_value(widget.field_value) if kind == "checkbox" else (widget.field_value or "")
            fields.append(FormField(name=widget.field_name, kind=kind, value=value, page_index=index))
    return fields


def fill_form_fields(document: Document, values: Mapping[str, FieldValue]) -> Document:
    """Set field values by name; every widget carrying a given name is updated."""
    known = {f.name: f.kind for f in extract_form_fields(document)}
    unknown = sorted(set(values) - set(known))
    if unknown:
        raise InvalidParameter(f"Unknown form field(s): {', '.join(unknown)}")

    result = clone(document)
    updated = 0
    for page in result.handle:
        for widget in page.widgets() or []:
            if widget.field_name not in values or widget.field_type not in _KINDS:
                continue
            value = values[widget.field_name]
            if known[widget.field_name] == "checkbox":
                widget.field_value = _as_checked(value)
            else:
                widget.field_value = str(value)
            widget.update()
            updated += 1
    logger.info("Filled %d form widget(s)", updated)
    return result
