"""
List numbering definitions for generated DOCX packages.

Word lists are driven by ``word/numbering.xml``: an ``w:abstractNum`` holds the
per-level formats and each ``w:num`` instance points at one. A paragraph joins
a list through ``w:numPr`` (``w:numId`` + ``w:ilvl``).

`NumberingTable` builds one abstract definition per list kind (bullet or
ordered) covering every depth the document uses, then hands out
``(numId, ilvl)`` references; each list level gets its own ``w:num`` instance.
"""

from __future__ import annotations

import logging

from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from mdparse.model import Document, ListItem

logger = logging.getLogger(__name__)

# Word supports list levels 0-8
MAX_LIST_LEVEL = 8

LEVEL_INDENT_TWIPS = 720
LEVEL_HANGING_TWIPS = 360

BULLET_GLYPHS = ("•", "◦", "▪")
ORDERED_FORMATS = ("decimal", "lowerLetter", "lowerRoman")


def _element(tag: str, **attributes: str):
    element = OxmlElement(tag)
    for name, value in attributes.items():
        element.set(qn(f"w:{name}"), value)
    return element


class NumberingTable:
    """
    Numbering definitions for one DOCX document.

    Attributes:
        levels: Distinct list levels used, per list kind (``True`` = ordered).
    """

    def __init__(self, numbering_element, list_keys: set[tuple[bool, int]]):
        self._numbering = numbering_element
        self.levels: dict[bool, list[int]] = {}
        for ordered, depth in list_keys:
            self.levels.setdefault(ordered, [])
            level = min(depth, MAX_LIST_LEVEL)
            if level not in self.levels[ordered]:
                self.levels[ordered].append(level)
        for levels in self.levels.values():
            levels.sort()

        self._abstract_ids: dict[bool, int] = {}
        self._active_nums: dict[tuple[bool, int], int] = {}
        if self._numbering is not None:
            self._build_abstract_definitions()

    @classmethod
    def for_document(cls, docx_document, document: Document) -> NumberingTable:
        """Build the table for every ``(ordered, depth)`` pair used in a document."""
        keys = {(block.ordered, block.depth) for block in document.walk() if isinstance(block, ListItem)}
        if not keys:
            return cls(None, set())
        return cls(docx_document.part.numbering_part.element, keys)

    def reference(self, ordered: bool, depth: int) -> tuple[int, int]:
        """
        Return the ``(numId, ilvl)`` pair for a list item.

        Each ``(kind, level)`` gets its own ``w:num`` so numbering restarts per
        list. An item drops the nums of deeper levels, so a sublist under the
        next parent item starts again at 1.
        """
        if ordered not in self._abstract_ids:
            raise KeyError(f"No numbering definition for ordered={ordered}")
        level = min(depth, MAX_LIST_LEVEL)
        for key in [key for key in self._active_nums if key[1] > level]:
            del self._active_nums[key]

        num_id = self._active_nums.get((ordered, level))
        if num_id is None:
            num_id = self._add_num(ordered)
            self._active_nums[(ordered, level)] = num_id
        return num_id, level

    def restart(self) -> None:
        """Make the next list item start a fresh list (ordered numbering restarts at 1)."""
        self._active_nums.clear()

    def _build_abstract_definitions(self) -> None:
        existing = [int(el.get(qn("w:abstractNumId"))) for el in self._numbering.findall(qn("w:abstractNum"))]
        next_id = max(existing, default=-1) + 1

        for ordered in sorted(self.levels):
            abstract = _element("w:abstractNum", abstractNumId=str(next_id))
            abstract.append(_element("w:multiLevelType", val="hybridMultilevel"))
            for level in self.levels[ordered]:
                abstract.append(self._level(ordered, level))

            # Schema order: every abstractNum precedes the first num
            first_num = self._numbering.find(qn("w:num"))
            if first_num is not None:
                first_num.addprevious(abstract)
            else:
                self._numbering.append(abstract)

            self._abstract_ids[ordered] = next_id
            logger.debug(f"Added abstractNum {next_id}: ordered={ordered}, levels={self.levels[ordered]}")
            next_id += 1

    def _level(self, ordered: bool, level: int):
        lvl = _element("w:lvl", ilvl=str(level))
        lvl.append(_element("w:start", val="1"))
        if ordered:
            lvl.append(_element("w:numFmt", val=ORDERED_FORMATS[level % len(ORDERED_FORMATS)]))
            lvl.append(_element("w:lvlText", val=f"%{level + 1}."))
        else:
            lvl.append(_element("w:numFmt", val="bullet"))
            lvl.append(_element("w:lvlText", val=BULLET_GLYPHS[level % len(BULLET_GLYPHS)]))
        lvl.append(_element("w:lvlJc", val="left"))

        p_pr = OxmlElement("w:pPr")
        indent = LEVEL_INDENT_TWIPS * (level + 1)
        p_pr.append(_element("w:ind", left=str(indent), hanging=str(LEVEL_HANGING_TWIPS)))
        lvl.append(p_pr)
        return lvl

    def _add_num(self, ordered: bool) -> int:
        existing = [int(el.get(qn("w:numId"))) for el in self._numbering.findall(qn("w:num"))]
        num_id = max(existing, default=0) + 1

        num = _element("w:num", numId=str(num_id))
        num.append(_element("w:abstractNumId", val=str(self._abstract_ids[ordered])))
        if ordered:
            for level in self.levels[ordered]:
                override = _element("w:lvlOverride", ilvl=str(level))
                override.append(_element("w:startOverride", val="1"))
                num.append(override)
        self._numbering.append(num)
        logger.debug(f"Added num {num_id} -> abstractNum {self._abstract_ids[ordered]}")
        return num_id
