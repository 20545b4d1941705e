"""
Markdown parsing package.

Turns Markdown text into the format-agnostic Abstract Document Tree and
resolves the styles of its runs.
"""

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
from mdparse.parser import MarkdownParser, parse
from mdparse.styles import ListMarker, StyleDescriptor, StyledRun, block_style, resolve, styled_runs

__all__ = [
    "Block",
    "BlockQuote",
    "Bold",
    "Code",
    "CodeBlock",
    "Document",
    "Heading",
    "Inline",
    "Italic",
    "LineBreak",
    "Link",
    "ListItem",
    "ListMarker",
    "MarkdownParser",
    "Paragraph",
    "parse",
    "resolve",
    "block_style",
    "Strikethrough",
    "StyleDescriptor",
    "StyledRun",
    "styled_runs",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ThematicBreak",
]
