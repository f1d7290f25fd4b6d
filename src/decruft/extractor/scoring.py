"""
Depth-first pruning walk, paragraph scoring and ancestor score propagation.

The walk removes bylines, unlikely candidates and empty containers, normalizes
text-only ``<div>`` elements into paragraphs and records the elements worth
scoring. The scoring pass then spreads each paragraph's score over up to three
ancestors: the parent gets all of it, the grandparent half, and the
great-grandparent a sixth (``level * 3``).
"""

from __future__ import annotations

from typing import List, Optional

import structlog
from bs4 import Tag

from decruft.dom.adapter import TreeAdapter

from . import patterns
from .state import AnalysisState, ExtractionFlags

logger = structlog.get_logger(__name__)

DEFAULT_TAGS_TO_SCORE = frozenset({"SECTION", "H2", "H3", "H4", "H5", "H6", "P", "TD", "PRE"})
DIV_TO_P_ELEMS = frozenset({"A", "BLOCKQUOTE", "DL", "DIV", "IMG", "OL", "P", "PRE", "TABLE", "UL", "SELECT"})
EMPTY_CANDIDATE_TAGS = frozenset({"DIV", "SECTION", "HEADER", "H1", "H2", "H3", "H4", "H5", "H6"})

STYLED_CLASS = "readability-styled"
MAX_ANCESTOR_DEPTH = 3

_TYPE_BONUS = {
    "DIV": 5,
    "PRE": 3,
    "TD": 3,
    "BLOCKQUOTE": 3,
    "ADDRESS": -3,
    "OL": -3,
    "UL": -3,
    "DL": -3,
    "DD": -3,
    "DT": -3,
    "LI": -3,
    "FORM": -3,
    "H1": -5,
    "H2": -5,
    "H3": -5,
    "H4": -5,
    "H5": -5,
    "H6": -5,
    "TH": -5,
}


def comma_count(text: str) -> int:
    return text.count(",")


def score_divider(level: int) -> int:
    """Divider applied to a paragraph's score at ancestor ``level`` (0 = parent)."""
    if level == 0:
        return 1
    if level == 1:
        return 2
    return level * 3


class ScoringEngine:
    """Walks a page, prunes it and scores candidate containers."""

    def __init__(
        self,
        adapter: TreeAdapter,
        state: AnalysisState,
        flags: ExtractionFlags,
        paragraph_char_threshold: int = 25,
        byline: Optional[str] = None,
    ) -> None:
        self.dom = adapter
        self.state = state
        self.flags = flags
        self.paragraph_char_threshold = paragraph_char_threshold
        self.byline = byline

    # --- Weights ---

    def class_weight(self, node: Tag) -> int:
        if not self.flags.weight_classes:
            return 0

        weight = 0
        for value in (self.dom.class_name(node), self.dom.node_id(node)):
            if not value:
                continue
            if patterns.NEGATIVE_CANDIDATES.search(value):
                weight -= 25
            if patterns.POSITIVE_CANDIDATES.search(value):
                weight += 25
        return weight

    def initialize(self, node: Tag) -> None:
        """Give ``node`` its starting score from its tag and class/id weight."""
        entry = self.state.get(node)
        entry.content_score = float(_TYPE_BONUS.get(self.dom.tag_name(node), 0) + self.class_weight(node))
        entry.initialized = True

    def ensure_initialized(self, node: Tag) -> None:
        if not self.state.is_initialized(node):
            self.initialize(node)

    def link_density(self, node: Tag) -> float:
        text_length = len(self.dom.inner_text(node))
        if text_length == 0:
            return 0.0
        link_length = sum(len(self.dom.inner_text(link)) for link in self.dom.descendants_by_tag(node, "a"))
        return min(max(link_length / text_length, 0.0), 1.0)

    # --- Walk ---

    def collect(self, page: Tag) -> List[Tag]:
        """Prune ``page`` in place and return the elements worth scoring."""
        elements: List[Tag] = []
        node: Optional[Tag] = page

        while node is not None:
            match_string = patterns.match_string(self.dom.class_name(node), self.dom.node_id(node))
            tag = self.dom.tag_name(node)

            # The page root is never pruned or replaced
            if node is not page:
                if self._check_byline(node, match_string):
                    node = self._remove_and_get_next(node, "byline")
                    continue

                if self.flags.strip_unlikelys and tag not in ("BODY", "A") and patterns.is_unlikely(match_string):
                    node = self._remove_and_get_next(node, "unlikely")
                    continue

                if tag in EMPTY_CANDIDATE_TAGS and self._is_without_content(node):
                    node = self._remove_and_get_next(node, "empty")
                    continue

            if tag in DEFAULT_TAGS_TO_SCORE:
                elements.append(node)

            if tag == "DIV":
                if node is not page and self._has_single_p_inside(node):
                    paragraph = self.dom.first_element_child(node)
                    self.dom.replace(node, paragraph)
                    node = paragraph
                    elements.append(node)
                elif node is not page and not self._has_block_descendant(node):
                    self.dom.rename(node, "p")
                    elements.append(node)
                else:
                    self._wrap_text_children(node)

            node = self.dom.next_node(node)

        return elements

    def _check_byline(self, node: Tag, match_string: str) -> bool:
        if self.byline:
            return False
        rel = (self.dom.attr(node, "rel") or "").lower()
        if rel != "author" and not patterns.is_byline(match_string):
            return False
        text = self.dom.text_of(node).strip()
        if not 0 < len(text) < 100:
            return False
        self.byline = text
        return True

    def _remove_and_get_next(self, node: Tag, reason: str) -> Optional[Tag]:
        following = self.dom.next_node(node, ignore_children=True)
        logger.debug(
            "Removing node",
            reason=reason,
            tag=self.dom.tag_name(node),
            match=patterns.match_string(self.dom.class_name(node), self.dom.node_id(node)).strip(),
        )
        self.dom.remove(node)
        return following

    def _is_without_content(self, node: Tag) -> bool:
        if self.dom.text_of(node).strip():
            return False
        return all(self.dom.tag_name(child) in ("BR", "HR") for child in self.dom.element_children(node))

    def _has_single_p_inside(self, node: Tag) -> bool:
        children = self.dom.element_children(node)
        if len(children) != 1 or self.dom.tag_name(children[0]) != "P":
            return False
        return not any(
            self.dom.is_text(child) and self.dom.text_of(child).strip() for child in self.dom.children(node)
        )

    def _has_block_descendant(self, node: Tag) -> bool:
        return any(self.dom.tag_name(child) in DIV_TO_P_ELEMS for child in self.dom.descendants_by_tag(node))

    def _wrap_text_children(self, node: Tag) -> None:
        for child in self.dom.children(node):
            if not self.dom.is_text(child):
                continue
            text = self.dom.text_of(child)
            if not text.strip():
                continue
            paragraph = self.dom.create_element("p")
            paragraph.append(self.dom.create_text(text))
            self.dom.set_attr(paragraph, "style", "display: inline;")
            self.dom.set_attr(paragraph, "class", STYLED_CLASS)
            self.dom.replace(child, paragraph)

    # --- Scoring ---

    def score(self, elements: List[Tag]) -> List[Tag]:
        """Propagate paragraph scores to ancestors; returns ancestors in first-touch order."""
        candidates: List[Tag] = []

        for element in elements:
            parent = self.dom.parent(element)
            if parent is None or not self.dom.is_element(parent):
                continue

            text = self.dom.inner_text(element)
            if len(text) < self.paragraph_char_threshold:
                continue

            ancestors = self.dom.get_ancestors(element, MAX_ANCESTOR_DEPTH)
            if not ancestors:
                continue

            content_score = 1 + comma_count(text) + min(len(text) // 100, 3)

            for level, ancestor in enumerate(ancestors):
                if not self.dom.is_element(self.dom.parent(ancestor)):
                    continue
                if not self.state.is_initialized(ancestor):
                    self.initialize(ancestor)
                    candidates.append(ancestor)
                entry = self.state.get(ancestor)
                entry.content_score += content_score / score_divider(level)

        logger.debug("Scored paragraphs", elements=len(elements), candidates=len(candidates))
        return candidates
