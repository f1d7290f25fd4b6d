"""
Cleanup of the gathered article container.

Presentational attributes go first, then tables holding real data are marked
so the conditional rules leave them (and everything inside them) alone, and
finally embeds, forms, duplicate headings and link-heavy blocks are dropped.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional

import structlog
from bs4 import Tag

from decruft.dom.adapter import TreeAdapter

from . import patterns
from .scoring import STYLED_CLASS, ScoringEngine, comma_count
from .state import AnalysisState, ExtractionFlags

logger = structlog.get_logger(__name__)

PRESENTATIONAL_ATTRIBUTES = (
    "align",
    "background",
    "bgcolor",
    "border",
    "cellpadding",
    "cellspacing",
    "frame",
    "hspace",
    "rules",
    "style",
    "valign",
    "vspace",
)
DEPRECATED_SIZE_ATTRIBUTE_ELEMS = frozenset({"TABLE", "TH", "TD", "HR", "PRE"})
DATA_TABLE_DESCENDANTS = ("col", "colgroup", "tfoot", "thead", "th")
EMBED_TAGS = frozenset({"OBJECT", "EMBED", "IFRAME"})
LIST_TAGS = frozenset({"UL", "OL"})

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_span(value: Optional[str]) -> int:
    """``rowspan``/``colspan`` as an int; missing, malformed or 0 means 1."""
    if not value:
        return 1
    match = _LEADING_INT.match(value)
    if match is None:
        logger.debug("Malformed span attribute", value=value)
        return 1
    span = int(match.group(1))
    return span if span > 0 else 1


class ConditionalCleaner:
    """Removes residual junk from the article container."""

    def __init__(
        self,
        adapter: TreeAdapter,
        state: AnalysisState,
        scoring: ScoringEngine,
        flags: ExtractionFlags,
    ) -> None:
        self.dom = adapter
        self.state = state
        self.scoring = scoring
        self.flags = flags

    def prepare(self, article: Tag, title: str = "", keep: Optional[Tag] = None) -> None:
        """Clean ``article`` in place. ``keep`` is never removed conditionally."""
        self.clean_styles(article)
        self.mark_data_tables(article)

        self.clean_conditionally(article, "form", keep)
        self.clean_conditionally(article, "fieldset", keep)
        for tag in ("object", "embed", "h1", "footer", "link", "aside"):
            self.clean(article, tag)

        for child in self.dom.element_children(article):
            self.clean_matched_nodes(child, patterns.SHARE_ELEMENTS)

        self._remove_duplicate_title_heading(article, title)

        for tag in ("iframe", "input", "textarea", "select", "button"):
            self.clean(article, tag)
        self.clean_headers(article)

        for tag in ("table", "ul", "div"):
            self.clean_conditionally(article, tag, keep)

        self._remove_nodes(self.dom.descendants_by_tag(article, "p"), self._is_empty_paragraph)

        for br in self.dom.descendants_by_tag(article, "br"):
            following = self.dom.next_element(br.next_sibling)
            if following is not None and self.dom.tag_name(following) == "P":
                self.dom.remove(br)

    # --- Attributes ---

    def clean_styles(self, root: Tag) -> None:
        """Strip presentational attributes, leaving SVG subtrees untouched."""
        stack: List[Tag] = [root]
        while stack:
            node = stack.pop()
            if self.dom.tag_name(node) == "SVG":
                continue
            if STYLED_CLASS not in self.dom.class_list(node):
                for name in PRESENTATIONAL_ATTRIBUTES:
                    self.dom.remove_attr(node, name)
                if self.dom.tag_name(node) in DEPRECATED_SIZE_ATTRIBUTE_ELEMS:
                    self.dom.remove_attr(node, "width")
                    self.dom.remove_attr(node, "height")
            stack.extend(reversed(self.dom.element_children(node)))

    # --- Data tables ---

    def mark_data_tables(self, root: Tag) -> None:
        for table in self.dom.descendants_by_tag(root, "table"):
            self.state.mark_data_table(table, self.is_data_table(table))

    def is_data_table(self, table: Tag) -> bool:
        if self.dom.attr(table, "role") == "presentation":
            return False
        if self.dom.attr(table, "datatable") == "0":
            return False
        if self.dom.attr(table, "summary") is not None:
            return True

        captions = self.dom.descendants_by_tag(table, "caption")
        if captions and self.dom.children(captions[0]):
            return True
        if any(self.dom.descendants_by_tag(table, tag) for tag in DATA_TABLE_DESCENDANTS):
            return True
        if self.dom.descendants_by_tag(table, "table"):
            return False

        rows, columns = self.row_and_column_count(table)
        if rows >= 10 or columns > 4:
            return True
        return rows * columns > 10

    def row_and_column_count(self, table: Tag) -> tuple[int, int]:
        rows = 0
        columns = 0
        for tr in self.dom.descendants_by_tag(table, "tr"):
            rows += parse_span(self.dom.attr(tr, "rowspan"))
            in_row = sum(parse_span(self.dom.attr(cell, "colspan")) for cell in self.dom.descendants_by_tag(tr, "td"))
            columns = max(columns, in_row)
        return rows, columns

    def _inside_data_table(self, node: Tag) -> bool:
        if self.dom.tag_name(node) == "TABLE" and self.state.is_data_table(node):
            return True
        return self.dom.has_ancestor_tag(node, "table", -1, self.state.is_data_table)

    # --- Removal rules ---

    def _remove_nodes(self, nodes: List[Tag], should_remove: Callable[[Tag], bool]) -> int:
        """Remove matching nodes, walking the snapshot in reverse document order."""
        removed = 0
        for node in reversed(nodes):
            if self.dom.parent(node) is None:
                continue
            if should_remove(node):
                self.dom.remove(node)
                removed += 1
        return removed

    def clean(self, root: Tag, tag: str) -> None:
        """Remove every ``tag`` under ``root``; video embeds survive."""
        is_embed = tag.upper() in EMBED_TAGS

        def should_remove(node: Tag) -> bool:
            if is_embed:
                values = "|".join(self.dom.attr(node, name) or "" for name in node.attrs)
                if patterns.has_video(values) or patterns.has_video(node.decode_contents()):
                    return False
            return True

        removed = self._remove_nodes(self.dom.descendants_by_tag(root, tag), should_remove)
        if removed:
            logger.debug("Cleaned tags", tag=tag, removed=removed)

    def clean_matched_nodes(self, node: Tag, pattern: re.Pattern[str]) -> None:
        """Remove descendants of ``node`` whose class/id matches ``pattern``."""
        end_marker = self.dom.next_node(node, ignore_children=True)
        current = self.dom.next_node(node)
        while current is not None and current is not end_marker:
            if pattern.search(patterns.match_string(self.dom.class_name(current), self.dom.node_id(current))):
                following = self.dom.next_node(current, ignore_children=True)
                self.dom.remove(current)
                current = following
            else:
                current = self.dom.next_node(current)

    def clean_headers(self, root: Tag) -> None:
        self._remove_nodes(
            self.dom.descendants_by_tag(root, "h1", "h2"),
            lambda header: self.scoring.class_weight(header) < 0,
        )

    def _remove_duplicate_title_heading(self, root: Tag, title: str) -> None:
        headings = self.dom.descendants_by_tag(root, "h2")
        if len(headings) != 1 or not title:
            return
        heading_text = self.dom.text_of(headings[0])
        similarity = (len(heading_text) - len(title)) / len(title)
        if abs(similarity) >= 0.5:
            return
        if similarity > 0:
            matches = title in heading_text
        else:
            matches = heading_text in title
        if matches:
            logger.debug("Removing heading duplicating the title", heading=heading_text.strip())
            self.dom.remove(headings[0])

    def clean_conditionally(self, root: Tag, tag: str, keep: Optional[Tag] = None) -> None:
        """Remove ``tag`` elements that look like link lists, ads or widgets."""
        if not self.flags.clean_conditionally:
            return
        is_list = tag.upper() in LIST_TAGS
        removed = self._remove_nodes(
            self.dom.descendants_by_tag(root, tag),
            lambda node: node is not keep and self._should_remove_conditionally(node, is_list),
        )
        if removed:
            logger.debug("Conditionally cleaned", tag=tag, removed=removed)

    def _should_remove_conditionally(self, node: Tag, is_list: bool) -> bool:
        if self._inside_data_table(node):
            return False

        weight = self.scoring.class_weight(node)
        if weight < 0:
            return True

        text = self.dom.inner_text(node)
        if comma_count(text) >= 10:
            return False

        p = len(self.dom.descendants_by_tag(node, "p"))
        img = len(self.dom.descendants_by_tag(node, "img"))
        li = len(self.dom.descendants_by_tag(node, "li"))
        inputs = len(self.dom.descendants_by_tag(node, "input"))
        embeds = sum(
            1
            for embed in self.dom.descendants_by_tag(node, "embed")
            if not patterns.has_video(self.dom.attr(embed, "src", "") or "")
        )
        link_density = self.scoring.link_density(node)
        content_length = len(text)
        in_figure = self.dom.has_ancestor_tag(node, "figure")

        return (
            (img > 1 and p / img < 0.5 and not in_figure)
            or (not is_list and li > p)
            or (inputs > p // 3)
            or (not is_list and content_length < 25 and (img == 0 or img > 2) and not in_figure)
            or (not is_list and weight < 25 and link_density > 0.2)
            or (weight >= 25 and link_density > 0.5)
            or (embeds == 1 and content_length < 75)
            or embeds > 1
        )

    def _is_empty_paragraph(self, paragraph: Tag) -> bool:
        media = self.dom.descendants_by_tag(paragraph, "img", "embed", "object", "iframe")
        return not media and not self.dom.inner_text(paragraph, normalize=False)
