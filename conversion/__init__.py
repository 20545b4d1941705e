"""Markdown conversion entry points."""

from conversion.api import convert_many, convert_to_docx_bytes, convert_to_edit_operations, run_conversion

__all__ = [
    "convert_many",
    "convert_to_docx_bytes",
    "convert_to_edit_operations",
    "run_conversion",
]
