"""
Google Docs edit operations.

Each operation is an immutable value that knows how to serialise itself into a
Google Docs API ``batchUpdate`` request dict. Indices always refer to the
document as it stands after every earlier operation in the same sequence has
been applied.

Example:
    >>> op = InsertText(at_index=1, text="Hello\\n")
    >>> op.to_request()
    {'insertText': {'location': {'index': 1}, 'text': 'Hello\\n'}}
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Union

from mdparse.styles import StyleDescriptor

# Bullet list presets for the Google Docs API
BULLET_PRESET_UNORDERED = "BULLET_DISC_CIRCLE_SQUARE"
BULLET_PRESET_ORDERED = "NUMBERED_DECIMAL_ALPHA_ROMAN"

# createParagraphBullets reads nesting from leading tabs and removes them
LIST_NESTING_CHAR = "\t"

# Code styling constants
CODE_FONT_FAMILY = "Consolas"
CODE_BACKGROUND_COLOR = {"red": 0.96, "green": 0.96, "blue": 0.96}  # #f5f5f5

# Blockquote styling constants
BLOCKQUOTE_INDENT_PT = 36
BLOCKQUOTE_BORDER_WIDTH_PT = 3.0
BLOCKQUOTE_BORDER_PADDING_PT = 12.0
BLOCKQUOTE_BORDER_COLOR = {"red": 0.7, "green": 0.7, "blue": 0.7}

# Horizontal rule styling constants
# Google Docs has no native HR, so an empty paragraph gets a bottom border
HR_BORDER_WIDTH_PT = 1.0
HR_BORDER_COLOR = {"red": 0.7, "green": 0.7, "blue": 0.7}  # #b3b3b3 light gray
HR_PADDING_BELOW_PT = 6

NAMED_STYLE_NORMAL = "NORMAL_TEXT"


def utf16_len(text: str) -> int:
    """Length of text in UTF-16 code units, the unit Google Docs indices count in."""
    return len(text.encode("utf-16-le")) // 2


def heading_style_name(level: int) -> str:
    """Map a heading level (1-6) to its Google Docs named style."""
    return f"HEADING_{level}"


def hex_to_rgb(color: str) -> dict[str, float]:
    """Convert ``#RRGGBB`` into a Docs ``rgbColor`` dict with 0-1 components."""
    if not isinstance(color, str) or len(color) != 7 or not color.startswith("#"):
        raise ValueError(f"Color must be a hex string like '#RRGGBB', got {color!r}")
    red, green, blue = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    return {"red": red / 255, "green": green / 255, "blue": blue / 255}


@dataclass(frozen=True)
class Range:
    """Half-open index range ``[start, end)``."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, other: Range) -> bool:
        return self.start <= other.start and other.end <= self.end

    def to_api(self) -> dict[str, int]:
        return {"startIndex": self.start, "endIndex": self.end}


@dataclass(frozen=True)
class ParagraphStyle:
    """Paragraph-level style of one lowered block."""

    named_style: str = NAMED_STYLE_NORMAL
    quote_level: int = 0
    horizontal_rule: bool = False

    def to_api(self) -> tuple[dict[str, Any], str]:
        """Return the ``paragraphStyle`` body and its ``fields`` mask."""
        style: dict[str, Any] = {"namedStyleType": self.named_style}
        if self.quote_level > 0:
            margin_pt = BLOCKQUOTE_INDENT_PT * self.quote_level
            style["indentStart"] = {"magnitude": margin_pt, "unit": "PT"}
            style["indentFirstLine"] = {"magnitude": margin_pt, "unit": "PT"}
            style["borderLeft"] = {
                "color": {"color": {"rgbColor": BLOCKQUOTE_BORDER_COLOR}},
                "width": {"magnitude": BLOCKQUOTE_BORDER_WIDTH_PT, "unit": "PT"},
                "padding": {"magnitude": BLOCKQUOTE_BORDER_PADDING_PT, "unit": "PT"},
                "dashStyle": "SOLID",
            }
        if self.horizontal_rule:
            style["borderBottom"] = {
                "color": {"color": {"rgbColor": HR_BORDER_COLOR}},
                "width": {"magnitude": HR_BORDER_WIDTH_PT, "unit": "PT"},
                "dashStyle": "SOLID",
                "padding": {"magnitude": HR_PADDING_BELOW_PT, "unit": "PT"},
            }
        return style, ",".join(style.keys())


def text_style_to_api(style: StyleDescriptor) -> tuple[dict[str, Any], str]:
    """Return the ``textStyle`` body and ``fields`` mask for a run descriptor."""
    text_style: dict[str, Any] = {}
    if style.bold:
        text_style["bold"] = True
    if style.italic:
        text_style["italic"] = True
    if style.underline:
        text_style["underline"] = True
    if style.strikethrough:
        text_style["strikethrough"] = True
    if style.code:
        text_style["weightedFontFamily"] = {"fontFamily": CODE_FONT_FAMILY, "weight": 400}
        text_style["backgroundColor"] = {"color": {"rgbColor": CODE_BACKGROUND_COLOR}}
    if style.color:
        text_style["foregroundColor"] = {"color": {"rgbColor": hex_to_rgb(style.color)}}
    if style.link_url:
        text_style["link"] = {"url": style.link_url}
    return text_style, ",".join(text_style.keys())


# =============================================================================
# Operations
# =============================================================================


@dataclass(frozen=True)
class InsertText:
    at_index: int
    text: str

    @property
    def range(self) -> Range:
        return Range(self.at_index, self.at_index + utf16_len(self.text))

    def to_request(self) -> dict[str, Any]:
        return {"insertText": {"location": {"index": self.at_index}, "text": self.text}}


@dataclass(frozen=True)
class SetParagraphStyle:
    range: Range
    style: ParagraphStyle

    def to_request(self) -> dict[str, Any]:
        paragraph_style, fields = self.style.to_api()
        return {
            "updateParagraphStyle": {
                "range": self.range.to_api(),
                "paragraphStyle": paragraph_style,
                "fields": fields,
            }
        }


@dataclass(frozen=True)
class SetTextStyle:
    range: Range
    style: StyleDescriptor

    def to_request(self) -> dict[str, Any]:
        text_style, fields = text_style_to_api(self.style)
        return {
            "updateTextStyle": {
                "range": self.range.to_api(),
                "textStyle": text_style,
                "fields": fields,
            }
        }


@dataclass(frozen=True)
class SetBullet:
    """
    Bullet one list item paragraph.

    The item's inserted text starts with ``nesting_level`` tab characters;
    ``createParagraphBullets`` turns them into the nesting level and deletes them.
    """

    range: Range
    ordered: bool
    nesting_level: int = 0

    @property
    def bullet_preset(self) -> str:
        return BULLET_PRESET_ORDERED if self.ordered else BULLET_PRESET_UNORDERED

    def to_request(self) -> dict[str, Any]:
        return {
            "createParagraphBullets": {
                "range": self.range.to_api(),
                "bulletPreset": self.bullet_preset,
            }
        }


EditOperation = Union[InsertText, SetParagraphStyle, SetTextStyle, SetBullet]


def _list_runs(bullets: list[SetBullet]) -> list[list[SetBullet]]:
    """
    Group list items into the lists they belong to.

    A list continues while item ranges touch; nested items join their parent's
    list whatever their kind. A top-level item of the other kind starts a new list.
    """
    runs: list[list[SetBullet]] = []
    for bullet in bullets:
        if runs:
            current = runs[-1]
            touches = current[-1].range.end == bullet.range.start
            same_kind = bullet.nesting_level > 0 or bullet.ordered == current[0].ordered
            if touches and same_kind:
                current.append(bullet)
                continue
        runs.append([bullet])
    return runs


def to_batch_requests(operations: list[EditOperation]) -> list[dict[str, Any]]:
    """
    Serialise edit operations into ``batchUpdate`` request dicts.

    Bullet requests go last, one per list, using the preset of the list's first
    item so numbering continues across nested sublists. Each request deletes
    the leading tabs of its nested items, so every later list range is shifted
    back by the tabs removed before it.
    """
    requests: list[dict[str, Any]] = []
    bullets: list[SetBullet] = []
    for operation in operations:
        if isinstance(operation, SetBullet):
            bullets.append(operation)
        else:
            requests.append(operation.to_request())

    removed_tabs = 0
    for run in _list_runs(bullets):
        merged = SetBullet(
            Range(run[0].range.start - removed_tabs, run[-1].range.end - removed_tabs),
            run[0].ordered,
        )
        requests.append(merged.to_request())
        removed_tabs += sum(bullet.nesting_level for bullet in run)
    return requests


def describe_operation(operation: EditOperation) -> dict[str, Any]:
    """Return a JSON-friendly dict of an operation, tagged with its type name."""
    return {"type": type(operation).__name__, **asdict(operation)}
