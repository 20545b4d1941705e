"""
Unit tests for DocsLowerer.

Verifies the edit operations generated for each block type, the index
bookkeeping across blocks, and that every style range stays inside the text
inserted for its block.
"""

import pytest

from core.errors import LoweringRangeError
from gdocs.lowering import DEFAULT_START_INDEX, DocsLowerer, _check_within, lower
from gdocs.operations import (
    BULLET_PRESET_ORDERED,
    InsertText,
    ParagraphStyle,
    Range,
    SetBullet,
    SetParagraphStyle,
    SetTextStyle,
    to_batch_requests,
    utf16_len,
)
from mdparse.model import Document
from mdparse.parser import parse
from mdparse.styles import LINE_BREAK, LINK_COLOR, StyleDescriptor

SAMPLES = [
    "# Title\n\nSome **bold** and *italic* text.",
    "- a\n- b\n  - c\n    1. d\n- e",
    "1. one\n2. two\n\nafter",
    "```python\ndef f():\n    return 1\n```",
    "> quote with [link](https://example.com)\n>\n> > nested **quote**",
    "| H1 | H2 |\n|----|----|\n| *a* | `b` |\n| c |  |",
    "above\n\n---\n\nbelow",
    "line one  \nline two\\\nline three",
    "***both*** ~~gone~~ `code` [**bold link**](https://example.com)",
    "- [ ] todo\n- [x] done",
    "*oops and **unclosed",
    "<div>\nhtml\n</div>\n\ntext",
    "#\n\n>\n\n```\n```",
]


def inserted_text(operations):
    return "".join(op.text for op in operations if isinstance(op, InsertText))


@pytest.fixture
def lowerer():
    return DocsLowerer()


class TestRoundTrip:
    def test_title_and_emphasis(self):
        operations = lower(parse("# Title\n\nSome **bold** and *italic* text."))
        assert operations == [
            InsertText(1, "Title\n"),
            SetParagraphStyle(Range(1, 7), ParagraphStyle(named_style="HEADING_1")),
            InsertText(7, "Some bold and italic text.\n"),
            SetParagraphStyle(Range(7, 34), ParagraphStyle()),
            SetTextStyle(Range(12, 16), StyleDescriptor(bold=True)),
            SetTextStyle(Range(21, 27), StyleDescriptor(italic=True)),
        ]

    def test_empty_document_has_no_operations(self, lowerer):
        assert lowerer.lower(Document()) == []
        assert lower(parse("   \n")) == []

    def test_default_start_index(self):
        operations = lower(parse("hello"))
        assert operations[0] == InsertText(DEFAULT_START_INDEX, "hello\n")

    def test_start_index_offsets_everything(self):
        base = lower(parse("# T\n\n**b**"), 1)
        shifted = lower(parse("# T\n\n**b**"), 51)
        assert [type(op) for op in base] == [type(op) for op in shifted]
        assert shifted[0] == InsertText(51, "T\n")
        assert shifted[-1] == SetTextStyle(Range(53, 54), StyleDescriptor(bold=True))

    def test_start_index_zero_is_accepted(self):
        assert lower(parse("x"), 0)[0] == InsertText(0, "x\n")


class TestIndexInvariants:
    @pytest.mark.parametrize("markdown", SAMPLES)
    def test_inserts_are_contiguous(self, markdown):
        cursor = 1
        for op in lower(parse(markdown)):
            if isinstance(op, InsertText):
                assert op.at_index == cursor
                cursor = op.range.end

    @pytest.mark.parametrize("markdown", SAMPLES)
    def test_style_ranges_stay_inside_their_paragraph(self, markdown):
        inserted_end = 1
        paragraph = None
        for op in lower(parse(markdown)):
            if isinstance(op, InsertText):
                inserted_end = op.range.end
            elif isinstance(op, SetParagraphStyle):
                paragraph = op.range
                assert paragraph.end == inserted_end
            elif isinstance(op, SetTextStyle):
                assert paragraph.contains(op.range)
                assert len(op.range) > 0
                # never covers the paragraph's trailing newline
                assert op.range.end < paragraph.end
            elif isinstance(op, SetBullet):
                assert op.range.end <= inserted_end

    @pytest.mark.parametrize("markdown", SAMPLES)
    def test_text_styles_never_overlap(self, markdown):
        ranges = [op.range for op in lower(parse(markdown)) if isinstance(op, SetTextStyle)]
        for earlier, later in zip(ranges, ranges[1:]):
            assert earlier.end <= later.start

    def test_reconstructs_plain_text(self):
        operations = lower(parse("# Title\n\nSome **bold** text\n\n- one\n- two"))
        assert inserted_text(operations) == "Title\nSome bold text\none\ntwo\n"

    def test_check_within_raises_outside_block(self):
        with pytest.raises(LoweringRangeError) as exc_info:
            _check_within(Range(5, 12), Range(5, 10))
        assert exc_info.value.block_end == 10

    def test_check_within_rejects_empty_range(self):
        with pytest.raises(LoweringRangeError):
            _check_within(Range(5, 5), Range(5, 10))


class TestBlocks:
    def test_heading_named_styles(self):
        operations = lower(parse("# One\n\n### Three"))
        styles = [op.style.named_style for op in operations if isinstance(op, SetParagraphStyle)]
        assert styles == ["HEADING_1", "HEADING_3"]

    def test_heading_runs_are_not_restyled(self):
        operations = lower(parse("## Plain heading"))
        assert not any(isinstance(op, SetTextStyle) for op in operations)

    def test_list_items_get_bullets_with_depth(self):
        operations = lower(parse("- a\n- b\n  - c"))
        bullets = [op for op in operations if isinstance(op, SetBullet)]
        assert bullets == [
            SetBullet(Range(1, 3), ordered=False, nesting_level=0),
            SetBullet(Range(3, 5), ordered=False, nesting_level=0),
            SetBullet(Range(5, 8), ordered=False, nesting_level=1),
        ]

    def test_nested_items_start_with_one_tab_per_level(self):
        operations = lower(parse("- a\n  - b\n    - c"))
        assert inserted_text(operations) == "a\n\tb\n\t\tc\n"

    def test_nesting_tabs_are_not_styled(self):
        operations = lower(parse("- a\n  - **b**"))
        (style_op,) = [op for op in operations if isinstance(op, SetTextStyle)]
        assert style_op.range == Range(4, 5)

    def test_ordered_list(self):
        operations = lower(parse("1. one\n2. two"))
        bullets = [op for op in operations if isinstance(op, SetBullet)]
        assert all(bullet.ordered for bullet in bullets)

    def test_code_block_is_monospace_without_trailing_newline(self):
        operations = lower(parse("```\nx = 1\ny = 2\n```"))
        assert operations == [
            InsertText(1, "x = 1\ny = 2\n"),
            SetParagraphStyle(Range(1, 13), ParagraphStyle()),
            SetTextStyle(Range(1, 12), StyleDescriptor(code=True)),
        ]

    def test_code_block_content_is_verbatim(self):
        operations = lower(parse("```\n**not bold**\n```"))
        assert inserted_text(operations) == "**not bold**\n"
        assert [op.style for op in operations if isinstance(op, SetTextStyle)] == [StyleDescriptor(code=True)]

    def test_empty_code_block_has_no_text_style(self):
        operations = lower(parse("```\n```"))
        assert operations == [InsertText(1, "\n"), SetParagraphStyle(Range(1, 2), ParagraphStyle())]

    def test_table_is_flattened_with_bold_header(self):
        operations = lower(parse("| A | B |\n|---|---|\n| 1 | 2 |"))
        assert inserted_text(operations) == "A\tB\n1\t2\n"
        bold_ranges = [op.range for op in operations if isinstance(op, SetTextStyle)]
        assert bold_ranges == [Range(1, 2), Range(3, 4)]

    def test_block_quote_sets_quote_level(self):
        operations = lower(parse("> outer\n>\n> > inner"))
        levels = [op.style.quote_level for op in operations if isinstance(op, SetParagraphStyle)]
        assert levels == [1, 2]

    def test_thematic_break_is_empty_bordered_paragraph(self):
        operations = lower(parse("---"))
        assert operations == [
            InsertText(1, "\n"),
            SetParagraphStyle(Range(1, 2), ParagraphStyle(horizontal_rule=True)),
        ]

    def test_link_run_style(self):
        operations = lower(parse("see [docs](https://example.com)"))
        (style_op,) = [op for op in operations if isinstance(op, SetTextStyle)]
        assert style_op.range == Range(5, 9)
        assert style_op.style.link_url == "https://example.com"
        assert style_op.style.color == LINK_COLOR
        assert style_op.style.underline

    def test_hard_break_inserts_vertical_tab(self):
        operations = lower(parse("a  \nb"))
        assert operations[0] == InsertText(1, f"a{LINE_BREAK}b\n")

    def test_lowering_same_document_twice_is_identical(self, lowerer):
        document = parse(SAMPLES[1])
        assert lowerer.lower(document) == lowerer.lower(document)


def bullet_requests(markdown):
    requests = to_batch_requests(lower(parse(markdown)))
    return [r["createParagraphBullets"] for r in requests if "createParagraphBullets" in r]


class TestListNesting:
    def test_nested_ordered_item_carries_its_level_as_a_tab(self):
        operations = lower(parse("1. a\n   1. x\n2. b"))
        assert inserted_text(operations) == "a\n\tx\nb\n"
        assert bullet_requests("1. a\n   1. x\n2. b") == [
            {"range": {"startIndex": 1, "endIndex": 8}, "bulletPreset": BULLET_PRESET_ORDERED},
        ]

    def test_bullet_sublist_stays_inside_numbered_list(self):
        assert bullet_requests("1. a\n   - x\n2. b") == [
            {"range": {"startIndex": 1, "endIndex": 8}, "bulletPreset": BULLET_PRESET_ORDERED},
        ]

    def test_later_lists_shift_back_by_removed_tabs(self):
        ranges = [r["range"] for r in bullet_requests("- a\n  - b\n\npara\n\n- c")]
        assert ranges == [{"startIndex": 1, "endIndex": 6}, {"startIndex": 10, "endIndex": 12}]

    def test_bullet_requests_come_after_all_text(self):
        requests = to_batch_requests(lower(parse("- a\n  - b\n\n**after**")))
        kinds = [next(iter(request)) for request in requests]
        assert kinds[-1] == "createParagraphBullets"
        assert kinds.count("createParagraphBullets") == 1


class TestUtf16Indices:
    def test_utf16_len_counts_surrogate_pairs(self):
        assert utf16_len("😀") == 2
        assert utf16_len("é") == 1

    def test_emoji_shifts_later_ranges(self):
        operations = lower(parse("😀 **b**\n\nnext"))
        assert operations[0] == InsertText(1, "😀 b\n")
        assert SetTextStyle(Range(4, 5), StyleDescriptor(bold=True)) in operations
        assert InsertText(6, "next\n") in operations

    def test_emoji_in_list_item_bullet_range(self):
        bullets = [op for op in lower(parse("- 🎉 party\n- two")) if isinstance(op, SetBullet)]
        assert [bullet.range for bullet in bullets] == [Range(1, 10), Range(10, 14)]
