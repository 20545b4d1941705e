"""
ADT to DOCX Lowerer

Builds a Word document from a parsed `Document` with python-docx and returns
the zipped OOXML package. The document tree mirrors the block structure
directly: OOXML addresses content by tree position, so no index bookkeeping is
needed.
"""

from __future__ import annotations

import io
import logging
from itertools import groupby

from docx import Document as new_docx_document
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from core.errors import PackagingError
from docxgen.numbering import NumberingTable
from mdparse.model import (
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    ListItem,
    Paragraph,
    Table,
    ThematicBreak,
)
from mdparse.styles import LINE_BREAK, StyleDescriptor, StyledRun, block_style, styled_runs

logger = logging.getLogger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

CODE_FONT_FAMILY = "Consolas"
CODE_FONT_SIZE_PT = 10
CODE_SHADING = "F5F5F5"

QUOTE_STYLE = "Quote"
QUOTE_INDENT_PT = 36
LIST_STYLE = "List Paragraph"
TABLE_STYLE = "Table Grid"

HR_BORDER_COLOR = "B3B3B3"
HR_BORDER_SIZE = "6"  # eighths of a point


class DocxLowerer:
    """
    Lowers a Document into DOCX bytes.

    Each call builds its own python-docx document, so one instance may serve
    concurrent conversions.
    """

    def lower(self, document: Document) -> bytes:
        """
        Build and package a DOCX file.

        Raises:
            PackagingError: If the package cannot be written. No partial
                bytes are returned.
        """
        docx_document = new_docx_document()
        numbering = NumberingTable.for_document(docx_document, document)

        for block in document.blocks:
            if not isinstance(block, ListItem):
                numbering.restart()
            self._lower_block(docx_document, block, numbering, quote_level=0)

        return self._package(docx_document, len(document.blocks))

    def _lower_block(self, docx_document, block: Block, numbering: NumberingTable, quote_level: int) -> None:
        base = block_style(block, quote_level)

        if isinstance(block, Heading):
            paragraph = docx_document.add_paragraph(style=f"Heading {block.level}")
            self._indent_for_quote(paragraph, quote_level)
            self._add_runs(paragraph, styled_runs(block.inlines, base))

        elif isinstance(block, Paragraph):
            paragraph = docx_document.add_paragraph(style=QUOTE_STYLE if quote_level else None)
            self._indent_for_quote(paragraph, quote_level)
            self._add_runs(paragraph, styled_runs(block.inlines, base))

        elif isinstance(block, ListItem):
            paragraph = docx_document.add_paragraph(style=LIST_STYLE)
            num_id, ilvl = numbering.reference(block.ordered, block.depth)
            num_pr = paragraph._p.get_or_add_pPr().get_or_add_numPr()
            num_pr.get_or_add_ilvl().val = ilvl
            num_pr.get_or_add_numId().val = num_id
            self._add_runs(paragraph, styled_runs(block.inlines, base))
            for child in block.children:
                self._lower_block(docx_document, child, numbering, quote_level)

        elif isinstance(block, CodeBlock):
            self._add_code_block(docx_document, block, base, quote_level)

        elif isinstance(block, Table):
            self._add_table(docx_document, block, base)

        elif isinstance(block, BlockQuote):
            if not block.children:
                paragraph = docx_document.add_paragraph(style=QUOTE_STYLE)
                self._indent_for_quote(paragraph, base.quote_level)
            for child in block.children:
                if not isinstance(child, ListItem):
                    numbering.restart()
                self._lower_block(docx_document, child, numbering, base.quote_level)

        elif isinstance(block, ThematicBreak):
            paragraph = docx_document.add_paragraph()
            p_bdr = OxmlElement("w:pBdr")
            bottom = OxmlElement("w:bottom")
            bottom.set(qn("w:val"), "single")
            bottom.set(qn("w:sz"), HR_BORDER_SIZE)
            bottom.set(qn("w:space"), "1")
            bottom.set(qn("w:color"), HR_BORDER_COLOR)
            p_bdr.append(bottom)
            paragraph._p.get_or_add_pPr().append(p_bdr)

        else:
            raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _add_code_block(self, docx_document, block: CodeBlock, base: StyleDescriptor, quote_level: int) -> None:
        paragraph = docx_document.add_paragraph()
        shading = OxmlElement("w:shd")
        shading.set(qn("w:val"), "clear")
        shading.set(qn("w:color"), "auto")
        shading.set(qn("w:fill"), CODE_SHADING)
        paragraph._p.get_or_add_pPr().append(shading)
        self._indent_for_quote(paragraph, quote_level)

        if block.raw_text:
            run = paragraph.add_run()
            # python-docx turns "\n" into <w:br/> and "\t" into <w:tab/>
            run.text = block.raw_text
            self._apply_run_style(run, base)
        logger.debug(f"Code block ({block.language or 'plain'}): {len(block.raw_text)} chars")

    def _add_table(self, docx_document, block: Table, base: StyleDescriptor) -> None:
        if not block.rows:
            logger.warning("Skipping table with no rows")
            return
        columns = max(len(row.cells) for row in block.rows)
        if columns == 0:
            logger.warning("Skipping table with no columns")
            return

        table = docx_document.add_table(rows=len(block.rows), cols=columns)
        table.style = TABLE_STYLE
        for row_index, row in enumerate(block.rows):
            ambient = StyleDescriptor(bold=True, quote_level=base.quote_level) if row.header else base
            for column_index, cell in enumerate(row.cells):
                paragraph = table.cell(row_index, column_index).paragraphs[0]
                self._add_runs(paragraph, styled_runs(cell.inlines, ambient))
        logger.debug(f"Table: {len(block.rows)}x{columns}")

    def _add_runs(self, paragraph, runs: list[StyledRun]) -> None:
        """Add runs to a paragraph, wrapping consecutive runs with one link target in a hyperlink."""
        for link_url, group in groupby(runs, key=lambda run: run.style.link_url):
            if not link_url:
                for styled in group:
                    self._add_run(paragraph, styled)
                continue

            r_id = paragraph.part.relate_to(link_url, RT.HYPERLINK, is_external=True)
            hyperlink = OxmlElement("w:hyperlink")
            hyperlink.set(qn("r:id"), r_id)
            paragraph._p.append(hyperlink)
            for styled in group:
                run = self._add_run(paragraph, styled)
                hyperlink.append(run._r)

    def _add_run(self, paragraph, styled: StyledRun):
        run = paragraph.add_run()
        run.text = styled.text.replace(LINE_BREAK, "\n")
        self._apply_run_style(run, styled.style)
        return run

    def _apply_run_style(self, run, style: StyleDescriptor) -> None:
        if style.bold:
            run.bold = True
        if style.italic:
            run.italic = True
        if style.underline:
            run.underline = True
        if style.strikethrough:
            run.font.strike = True
        if style.code:
            run.font.name = CODE_FONT_FAMILY
            run.font.size = Pt(CODE_FONT_SIZE_PT)
        if style.color:
            run.font.color.rgb = RGBColor.from_string(style.color.lstrip("#"))

    def _indent_for_quote(self, paragraph, quote_level: int) -> None:
        if quote_level > 0:
            paragraph.paragraph_format.left_indent = Pt(QUOTE_INDENT_PT * quote_level)

    def _package(self, docx_document, block_count: int) -> bytes:
        buffer = io.BytesIO()
        try:
            docx_document.save(buffer)
        except Exception as e:
            logger.error(f"Failed to write DOCX package: {e}", exc_info=True)
            raise PackagingError(f"Failed to write DOCX package: {e}") from e

        data = buffer.getvalue()
        logger.debug(f"Packaged DOCX: {block_count} top-level blocks, {len(data)} bytes")
        return data


def lower(document: Document) -> bytes:
    """Lower a document into DOCX bytes."""
    return DocxLowerer().lower(document)
