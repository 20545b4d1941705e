"""
Google Docs Package

This package lowers parsed Markdown into Google Docs batchUpdate operations
and submits them through the Docs API.
"""

from gdocs.lowering import DocsLowerer, lower
from gdocs.operations import (
    EditOperation,
    InsertText,
    ParagraphStyle,
    Range,
    SetBullet,
    SetParagraphStyle,
    SetTextStyle,
    describe_operation,
    to_batch_requests,
)
from gdocs.writing import access_token_from_header, build_docs_service, submit_edit_operations

__all__ = [
    "DocsLowerer",
    "lower",
    "EditOperation",
    "InsertText",
    "ParagraphStyle",
    "Range",
    "SetBullet",
    "SetParagraphStyle",
    "SetTextStyle",
    "describe_operation",
    "to_batch_requests",
    "access_token_from_header",
    "build_docs_service",
    "submit_edit_operations",
]
