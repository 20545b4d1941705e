"""
DOCX generation package.

Lowers parsed Markdown into a Word (OOXML) package with python-docx.
"""

from docxgen.lowering import DOCX_MIME_TYPE, DocxLowerer, lower
from docxgen.numbering import NumberingTable

__all__ = ["DOCX_MIME_TYPE", "DocxLowerer", "lower", "NumberingTable"]
