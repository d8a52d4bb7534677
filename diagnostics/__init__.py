"""Structural validation and form-field diagnostics."""
from diagnostics.forms import extract_form_fields, fill_form_fields
from diagnostics.report import validate_document

__all__ = ["extract_form_fields", "fill_form_fields", "validate_document"]
