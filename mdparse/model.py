"""
Abstract Document Tree (ADT) for parsed Markdown.

The tree is format-agnostic: both the Google Docs lowerer and the DOCX lowerer
consume it. Every node is a frozen dataclass holding tuples, so a Document is
immutable once the parser returns it and can be shared between concurrent
lowering calls.

Blocks and inlines are closed unions (`Block`, `Inline`). Consumers dispatch
with `isinstance` over the listed variants rather than extending them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6

# Line breaks inside a paragraph; Google Docs uses a vertical tab for these
LINE_BREAK = "\v"


# =============================================================================
# Inline nodes
# =============================================================================


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Bold:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Italic:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Strikethrough:
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Code:
    value: str


@dataclass(frozen=True)
class Link:
    href: str
    children: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class LineBreak:
    pass


Inline = Union[Text, Bold, Italic, Strikethrough, Code, Link, LineBreak]

# Inline variants that wrap other inlines
CONTAINER_INLINES = (Bold, Italic, Strikethrough, Link)


# =============================================================================
# Block nodes
# =============================================================================


@dataclass(frozen=True)
class Heading:
    level: int
    inlines: tuple[Inline, ...] = ()

    def __post_init__(self) -> None:
        clamped = max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, self.level))
        if clamped != self.level:
            object.__setattr__(self, "level", clamped)


@dataclass(frozen=True)
class Paragraph:
    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class ListItem:
    ordered: bool
    depth: int
    inlines: tuple[Inline, ...] = ()
    children: tuple[Block, ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    raw_text: str
    language: str | None = None


@dataclass(frozen=True)
class TableCell:
    inlines: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class TableRow:
    cells: tuple[TableCell, ...] = ()
    header: bool = False


@dataclass(frozen=True)
class Table:
    rows: tuple[TableRow, ...] = ()


@dataclass(frozen=True)
class BlockQuote:
    children: tuple[Block, ...] = ()


@dataclass(frozen=True)
class ThematicBreak:
    pass


Block = Union[Heading, Paragraph, ListItem, CodeBlock, Table, BlockQuote, ThematicBreak]


@dataclass(frozen=True)
class Document:
    """Root of the ADT: the top-level blocks in source order."""

    blocks: tuple[Block, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.blocks)

    def walk(self) -> Iterator[Block]:
        """Yield every block in document order, descending into list items and quotes."""
        yield from walk_blocks(self.blocks)


def walk_blocks(blocks: tuple[Block, ...]) -> Iterator[Block]:
    for block in blocks:
        yield block
        if isinstance(block, (ListItem, BlockQuote)):
            yield from walk_blocks(block.children)


def plain_text(inlines: tuple[Inline, ...]) -> str:
    """Concatenate the text of an inline sequence as the lowerers insert it."""
    parts: list[str] = []
    for node in inlines:
        if isinstance(node, (Text, Code)):
            parts.append(node.value)
        elif isinstance(node, LineBreak):
            parts.append(LINE_BREAK)
        elif isinstance(node, CONTAINER_INLINES):
            parts.append(plain_text(node.children))
    return "".join(parts)
