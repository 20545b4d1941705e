"""
Markdown to ADT Parser

This module provides `MarkdownParser`, which turns raw Markdown into the
immutable `Document` tree defined in `mdparse.model`.

Tokenisation is done by markdown-it-py (CommonMark preset with the GFM table
and strikethrough extensions plus task lists). The token stream is nested with
`SyntaxTreeNode` and folded into ADT nodes in one pass. The parser never
raises on malformed input: anything it does not recognise degrades to literal
text inside a `Paragraph`.

Example:
    >>> document = parse("# Hello World\n\nThis is **bold** text.")
    >>> [type(block).__name__ for block in document.blocks]
    ['Heading', 'Paragraph']
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from mdit_py_plugins.tasklists import tasklists_plugin

from mdparse.model import (
    Block,
    BlockQuote,
    Bold,
    Code,
    CodeBlock,
    Document,
    Heading,
    Inline,
    Italic,
    LineBreak,
    Link,
    ListItem,
    Paragraph,
    Strikethrough,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)

if TYPE_CHECKING:
    from markdown_it.token import Token

logger = logging.getLogger(__name__)

# Task list checkbox characters (Unicode ballot box symbols)
CHECKBOX_UNCHECKED = "☐"
CHECKBOX_CHECKED = "☑"

LIST_NODE_TYPES = {"bullet_list": False, "ordered_list": True}


class MarkdownParser:
    """
    Builds `Document` trees from Markdown text.

    An instance only holds the configured markdown-it pipeline; all per-parse
    state lives on the call stack, so one instance may parse many documents.
    """

    def __init__(self) -> None:
        self.md = MarkdownIt("commonmark").enable("table").enable("strikethrough").use(tasklists_plugin)

    def parse(self, markdown_text: str) -> Document:
        """
        Parse Markdown into a Document.

        Args:
            markdown_text: The Markdown source. ``None``, empty and
                whitespace-only input all produce an empty Document.

        Returns:
            The parsed, immutable Document.
        """
        if not markdown_text or not markdown_text.strip():
            return Document()

        tokens: list[Token] = self.md.parse(markdown_text)
        root = SyntaxTreeNode(tokens)
        blocks = self._blocks(root.children, list_depth=0)
        logger.debug(f"Parsed {len(tokens)} tokens into {len(blocks)} top-level blocks")
        return Document(blocks=blocks)

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def _blocks(self, nodes: list[SyntaxTreeNode], list_depth: int) -> tuple[Block, ...]:
        blocks: list[Block] = []
        for node in nodes:
            blocks.extend(self._block(node, list_depth))
        return tuple(blocks)

    def _block(self, node: SyntaxTreeNode, list_depth: int) -> list[Block]:
        node_type = node.type

        if node_type == "heading":
            level = int(node.tag[1:]) if node.tag[1:].isdigit() else 1
            return [Heading(level=level, inlines=self._inline_content(node))]
        if node_type == "paragraph":
            return [Paragraph(inlines=self._inline_content(node))]
        if node_type in LIST_NODE_TYPES:
            ordered = LIST_NODE_TYPES[node_type]
            return [self._list_item(child, ordered, list_depth) for child in node.children]
        if node_type in ("fence", "code_block"):
            return [self._code_block(node)]
        if node_type == "blockquote":
            return [BlockQuote(children=self._blocks(node.children, list_depth=0))]
        if node_type == "hr":
            return [ThematicBreak()]
        if node_type == "table":
            return [self._table(node)]
        if node_type == "html_block":
            return [Paragraph(inlines=(Text(node.content.rstrip("\n")),))]

        content = node.content.strip("\n") if node.content else ""
        if content:
            logger.warning(f"Unknown block node {node_type!r}, keeping it as literal text")
            return [Paragraph(inlines=(Text(content),))]
        logger.warning(f"Dropping empty unknown block node {node_type!r}")
        return []

    def _list_item(self, node: SyntaxTreeNode, ordered: bool, depth: int) -> ListItem:
        """
        Fold a list_item node into a ListItem.

        The item's first paragraph supplies its inlines. Nested lists become
        ListItem children one level deeper; any other content (extra
        paragraphs, code) is kept as child blocks in source order.
        """
        children = list(node.children)
        inlines: tuple[Inline, ...] = ()
        if children and children[0].type == "paragraph":
            inlines = self._inline_content(children.pop(0))

        nested: list[Block] = []
        for child in children:
            if child.type in LIST_NODE_TYPES:
                nested.extend(self._block(child, depth + 1))
            else:
                nested.extend(self._block(child, depth))

        logger.debug(f"List item: ordered={ordered}, depth={depth}, children={len(nested)}")
        return ListItem(ordered=ordered, depth=depth, inlines=inlines, children=tuple(nested))

    def _code_block(self, node: SyntaxTreeNode) -> CodeBlock:
        content = node.content
        if content.endswith("\n"):
            content = content[:-1]
        info = (node.info or "").strip()
        language = info.split()[0] if info else None
        return CodeBlock(raw_text=content, language=language)

    def _table(self, node: SyntaxTreeNode) -> Table:
        rows: list[TableRow] = []
        for section in node.children:
            is_header = section.type == "thead"
            for row in section.children:
                cells = tuple(TableCell(inlines=self._inline_content(cell)) for cell in row.children)
                rows.append(TableRow(cells=cells, header=is_header))
        return Table(rows=tuple(rows))

    # -------------------------------------------------------------------------
    # Inlines
    # -------------------------------------------------------------------------

    def _inline_content(self, node: SyntaxTreeNode) -> tuple[Inline, ...]:
        """Return the inlines of the `inline` child of a block node."""
        for child in node.children:
            if child.type == "inline":
                return self._inlines(child.children)
        return ()

    def _inlines(self, nodes: list[SyntaxTreeNode]) -> tuple[Inline, ...]:
        result: list[Inline] = []
        for node in nodes:
            inline = self._inline(node)
            if inline is None:
                continue
            if isinstance(inline, Text) and result and isinstance(result[-1], Text):
                result[-1] = Text(result[-1].value + inline.value)
            else:
                result.append(inline)
        return tuple(result)

    def _inline(self, node: SyntaxTreeNode) -> Inline | None:
        node_type = node.type

        if node_type == "text":
            return Text(node.content) if node.content else None
        if node_type == "softbreak":
            return Text(" ")
        if node_type == "hardbreak":
            return LineBreak()
        if node_type == "strong":
            return Bold(children=self._inlines(node.children))
        if node_type == "em":
            return _bold_outside_italic(Italic(children=self._inlines(node.children)))
        if node_type == "s":
            return Strikethrough(children=self._inlines(node.children))
        if node_type == "link":
            href = node.attrs.get("href", "")
            return Link(href=str(href), children=self._inlines(node.children))
        if node_type == "code_inline":
            return Code(node.content) if node.content else None
        if node_type == "image":
            src = str(node.attrs.get("src", ""))
            alt = node.content or src
            return Link(href=src, children=(Text(alt),)) if src else Text(alt)
        if node_type == "html_inline":
            return self._html_inline(node.content)

        if node.content:
            logger.warning(f"Unknown inline node {node_type!r}, keeping it as literal text")
            return Text(node.content)
        return None

    def _html_inline(self, content: str) -> Inline | None:
        """
        Handle html_inline tokens.

        The tasklists plugin renders ``[ ]`` / ``[x]`` as an ``<input>`` tag; those
        become ballot box glyphs. Any other inline HTML is kept verbatim.
        """
        if not content:
            return None
        if 'class="task-list-item-checkbox"' in content:
            return Text(CHECKBOX_CHECKED if 'checked="checked"' in content else CHECKBOX_UNCHECKED)
        return Text(content)


def _bold_outside_italic(italic: Italic) -> Inline:
    """
    Apply the emphasis tie-break: bold always nests outside italic.

    ``***x***`` and ``_**x**_`` tokenise as em(strong(x)); rewriting them to
    strong(em(x)) gives the same tree as ``**_x_**``.
    """
    if len(italic.children) == 1 and isinstance(italic.children[0], Bold):
        inner = italic.children[0]
        return Bold(children=(Italic(children=inner.children),))
    return italic


def parse(markdown_text: str) -> Document:
    """Parse Markdown text into an immutable Document."""
    return MarkdownParser().parse(markdown_text)
