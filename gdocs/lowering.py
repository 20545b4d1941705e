"""
ADT to Google Docs Lowerer

This module provides `DocsLowerer`, which walks a parsed `Document` in order
and emits the edit operations that build it inside a Google Doc.

The lowerer follows the "Index Tracker" pattern: a cursor starts at the
caller-supplied index and is advanced by the length of every insertion. The
cursor is threaded through the traversal as an explicit accumulator (each
helper takes it and returns the advanced value), so concurrent conversions
never share state.

For each block the operations are, in order:
    1. insertText for the block's plain text plus a trailing newline
    2. updateParagraphStyle over the inserted range
    3. updateTextStyle for every run styled differently from the block
    4. createParagraphBullets for list items

Nested list items start with one tab per nesting level; the bullet request
converts them into the nesting level (see `to_batch_requests`). Indices and
lengths are counted in UTF-16 code units, as the Docs API counts them.

Example:
    >>> operations = lower(parse("# Title\\n\\nSome **bold** text."))
    >>> [type(op).__name__ for op in operations]
    ['InsertText', 'SetParagraphStyle', 'InsertText', 'SetParagraphStyle', 'SetTextStyle']

Known simplification: tables are flattened to one paragraph per row with
tab-separated cells instead of a native Docs table.
"""

from __future__ import annotations

import logging

from core.errors import LoweringRangeError
from gdocs.operations import (
    LIST_NESTING_CHAR,
    EditOperation,
    InsertText,
    ParagraphStyle,
    Range,
    SetBullet,
    SetParagraphStyle,
    SetTextStyle,
    heading_style_name,
    utf16_len,
)
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
from mdparse.styles import StyleDescriptor, StyledRun, block_style, styled_runs

logger = logging.getLogger(__name__)

# Separator between flattened table cells
TABLE_CELL_SEPARATOR = "\t"

# Google Docs body content starts at index 1
DEFAULT_START_INDEX = 1


class DocsLowerer:
    """
    Lowers a Document into an ordered list of Google Docs edit operations.

    The instance holds no per-conversion state; `lower` may be called from
    several threads at once.
    """

    def lower(self, document: Document, start_index: int = DEFAULT_START_INDEX) -> list[EditOperation]:
        """
        Lower a document into edit operations.

        Args:
            document: The parsed document.
            start_index: Index at which the first block is inserted, normally
                the end of any content already in the target document.

        Returns:
            Operations in document order. An empty document yields ``[]``.
        """
        operations: list[EditOperation] = []
        cursor = start_index
        for block in document.blocks:
            cursor = self._lower_block(block, cursor, operations, quote_level=0)

        logger.debug(f"Lowered {len(document.blocks)} blocks into {len(operations)} operations, cursor={cursor}")
        return operations

    def _lower_block(self, block: Block, cursor: int, operations: list[EditOperation], quote_level: int) -> int:
        base = block_style(block, quote_level)

        if isinstance(block, Heading):
            paragraph_style = ParagraphStyle(named_style=heading_style_name(block.level), quote_level=quote_level)
            return self._emit_paragraph(styled_runs(block.inlines, base), base, paragraph_style, cursor, operations)

        if isinstance(block, Paragraph):
            paragraph_style = ParagraphStyle(quote_level=quote_level)
            return self._emit_paragraph(styled_runs(block.inlines, base), base, paragraph_style, cursor, operations)

        if isinstance(block, ListItem):
            return self._lower_list_item(block, base, cursor, operations, quote_level)

        if isinstance(block, CodeBlock):
            return self._lower_code_block(block, base, cursor, operations, quote_level)

        if isinstance(block, Table):
            return self._lower_table(block, base, cursor, operations, quote_level)

        if isinstance(block, BlockQuote):
            if not block.children:
                paragraph_style = ParagraphStyle(quote_level=base.quote_level)
                return self._emit_paragraph([], base, paragraph_style, cursor, operations)
            for child in block.children:
                cursor = self._lower_block(child, cursor, operations, quote_level=base.quote_level)
            return cursor

        if isinstance(block, ThematicBreak):
            paragraph_style = ParagraphStyle(quote_level=quote_level, horizontal_rule=True)
            return self._emit_paragraph([], base, paragraph_style, cursor, operations)

        raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _lower_list_item(
        self,
        item: ListItem,
        base: StyleDescriptor,
        cursor: int,
        operations: list[EditOperation],
        quote_level: int,
    ) -> int:
        start = cursor
        runs = styled_runs(item.inlines, base)
        if item.depth:
            runs.insert(0, StyledRun(LIST_NESTING_CHAR * item.depth, base))
        paragraph_style = ParagraphStyle(quote_level=quote_level)
        cursor = self._emit_paragraph(runs, base, paragraph_style, cursor, operations)
        operations.append(SetBullet(Range(start, cursor), ordered=item.ordered, nesting_level=item.depth))
        logger.debug(f"List item bullet: ordered={item.ordered}, depth={item.depth}, range=[{start}, {cursor})")

        for child in item.children:
            cursor = self._lower_block(child, cursor, operations, quote_level=quote_level)
        return cursor

    def _lower_code_block(
        self,
        block: CodeBlock,
        base: StyleDescriptor,
        cursor: int,
        operations: list[EditOperation],
        quote_level: int,
    ) -> int:
        """Insert code verbatim and style it monospace; the trailing newline stays unstyled."""
        text = block.raw_text + "\n"
        block_range = Range(cursor, cursor + utf16_len(text))
        operations.append(InsertText(cursor, text))
        operations.append(SetParagraphStyle(block_range, ParagraphStyle(quote_level=quote_level)))
        if block.raw_text:
            code_range = Range(cursor, cursor + utf16_len(block.raw_text))
            _check_within(code_range, block_range)
            operations.append(SetTextStyle(code_range, base))
        logger.debug(f"Code block ({block.language or 'plain'}): {len(block.raw_text)} chars at {cursor}")
        return block_range.end

    def _lower_table(
        self,
        table: Table,
        base: StyleDescriptor,
        cursor: int,
        operations: list[EditOperation],
        quote_level: int,
    ) -> int:
        """Flatten each table row into one paragraph with tab-separated cells; header cells are bold."""
        for row in table.rows:
            row_style = StyleDescriptor(bold=True, quote_level=quote_level) if row.header else base
            runs: list[StyledRun] = []
            for position, cell in enumerate(row.cells):
                if position:
                    runs.append(StyledRun(TABLE_CELL_SEPARATOR, base))
                runs.extend(styled_runs(cell.inlines, row_style))
            paragraph_style = ParagraphStyle(quote_level=quote_level)
            cursor = self._emit_paragraph(runs, base, paragraph_style, cursor, operations)
        return cursor

    def _emit_paragraph(
        self,
        runs: list[StyledRun],
        base: StyleDescriptor,
        paragraph_style: ParagraphStyle,
        cursor: int,
        operations: list[EditOperation],
    ) -> int:
        """
        Emit insert + paragraph style + run styles for one paragraph.

        Run ranges come from cumulative run lengths within the paragraph, so
        they never overlap and always end before the trailing newline.

        Returns:
            The cursor just past the inserted newline.
        """
        text = "".join(run.text for run in runs) + "\n"
        block_range = Range(cursor, cursor + utf16_len(text))
        operations.append(InsertText(cursor, text))
        operations.append(SetParagraphStyle(block_range, paragraph_style))

        offset = cursor
        for run in runs:
            run_range = Range(offset, offset + utf16_len(run.text))
            offset = run_range.end
            if run.style.text_attributes() == base.text_attributes():
                continue
            _check_within(run_range, block_range)
            operations.append(SetTextStyle(run_range, run.style))

        logger.debug(f"Paragraph {paragraph_style.named_style}: {text!r} range=[{block_range.start}, {block_range.end})")
        return block_range.end


def _check_within(inner: Range, outer: Range) -> None:
    if len(inner) <= 0 or not outer.contains(inner):
        raise LoweringRangeError(inner.start, inner.end, outer.start, outer.end)


def lower(document: Document, start_index: int = DEFAULT_START_INDEX) -> list[EditOperation]:
    """Lower a document into Google Docs edit operations."""
    return DocsLowerer().lower(document, start_index)
