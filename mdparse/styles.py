"""
Style resolution for ADT nodes.

`resolve` combines an ambient `StyleDescriptor` (inherited from enclosing
emphasis/link wrappers and the block context) with one inline node. It is a
pure function, so both lowerers can call it freely and get identical results.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from mdparse.model import (
    Block,
    BlockQuote,
    Bold,
    Code,
    CodeBlock,
    Heading,
    Inline,
    LINE_BREAK,
    Italic,
    LineBreak,
    Link,
    ListItem,
    Strikethrough,
    Text,
)

# Hyperlink colour convention (#1155cc, the Google Docs default link blue)
LINK_COLOR = "#1155CC"


class ListMarker(str, Enum):
    NONE = "none"
    BULLET = "bullet"
    ORDERED = "ordered"


@dataclass(frozen=True)
class StyleDescriptor:
    """
    Flattened styling attributes for one run of text.

    Attributes:
        bold: Text is bold.
        italic: Text is italic.
        underline: Text is underlined (always set for links).
        strikethrough: Text is struck through.
        code: Text is rendered monospace.
        heading_level: 1-6 for heading blocks, 0 otherwise.
        list_marker: Bullet kind of the enclosing list item.
        indent_level: List nesting depth of the enclosing list item.
        quote_level: Number of enclosing block quotes.
        link_url: Hyperlink target, carried through unchanged.
        color: Foreground colour as ``#RRGGBB``, or None for the default.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    code: bool = False
    heading_level: int = 0
    list_marker: ListMarker = ListMarker.NONE
    indent_level: int = 0
    quote_level: int = 0
    link_url: str | None = None
    color: str | None = None

    def text_attributes(self) -> tuple:
        """The character-level part of the descriptor, ignoring block context."""
        return (
            self.bold,
            self.italic,
            self.underline,
            self.strikethrough,
            self.code,
            self.link_url,
            self.color,
        )


BASE_STYLE = StyleDescriptor()


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: StyleDescriptor


def resolve(inline: Inline, ambient: StyleDescriptor) -> StyleDescriptor:
    """
    Resolve the style of an inline node under an ambient style.

    Nested Bold inside Bold stays bold. Links always add underline and the
    link colour and carry their href, whatever the ambient emphasis is.
    """
    if isinstance(inline, Bold):
        return replace(ambient, bold=True)
    if isinstance(inline, Italic):
        return replace(ambient, italic=True)
    if isinstance(inline, Strikethrough):
        return replace(ambient, strikethrough=True)
    if isinstance(inline, Code):
        return replace(ambient, code=True)
    if isinstance(inline, Link):
        return replace(ambient, underline=True, color=LINK_COLOR, link_url=inline.href)
    return ambient


def block_style(block: Block, quote_level: int = 0) -> StyleDescriptor:
    """Return the paragraph-level ambient style for a block."""
    if isinstance(block, Heading):
        return StyleDescriptor(heading_level=block.level, quote_level=quote_level)
    if isinstance(block, ListItem):
        marker = ListMarker.ORDERED if block.ordered else ListMarker.BULLET
        return StyleDescriptor(list_marker=marker, indent_level=block.depth, quote_level=quote_level)
    if isinstance(block, CodeBlock):
        return StyleDescriptor(code=True, quote_level=quote_level)
    if isinstance(block, BlockQuote):
        return StyleDescriptor(quote_level=quote_level + 1)
    return StyleDescriptor(quote_level=quote_level)


def styled_runs(inlines: tuple[Inline, ...], ambient: StyleDescriptor) -> list[StyledRun]:
    """
    Flatten an inline tree into styled text runs.

    Adjacent runs with equal styles are merged and empty runs are dropped, so
    the run texts concatenate to exactly the visible text of the inlines.
    """
    runs: list[StyledRun] = []
    _collect_runs(inlines, ambient, runs)
    return runs


def _collect_runs(inlines: tuple[Inline, ...], ambient: StyleDescriptor, runs: list[StyledRun]) -> None:
    for inline in inlines:
        style = resolve(inline, ambient)
        if isinstance(inline, (Text, Code)):
            _append_run(runs, inline.value, style)
        elif isinstance(inline, LineBreak):
            _append_run(runs, LINE_BREAK, style)
        elif isinstance(inline, (Bold, Italic, Strikethrough, Link)):
            _collect_runs(inline.children, style, runs)


def _append_run(runs: list[StyledRun], text: str, style: StyleDescriptor) -> None:
    if not text:
        return
    if runs and runs[-1].style == style:
        runs[-1] = StyledRun(runs[-1].text + text, style)
    else:
        runs.append(StyledRun(text, style))
