"""
Top candidate ranking, refinement and sibling gathering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import structlog
from bs4 import Tag

from decruft.dom.adapter import TreeAdapter

from . import patterns
from .models import Candidate
from .scoring import ScoringEngine
from .state import AnalysisState

logger = structlog.get_logger(__name__)

MINIMUM_TOP_CANDIDATES = 3
ALTERNATIVE_SCORE_RATIO = 0.75
SIBLING_SCORE_RATIO = 0.2
MIN_SIBLING_SCORE = 10
ALTER_TO_DIV_EXCEPTIONS = frozenset({"DIV", "ARTICLE", "SECTION", "P"})
CONTENT_ID = "readability-content"


@dataclass(slots=True)
class Selection:
    """The chosen top candidate and the parent its siblings are gathered from."""

    top_candidate: Tag
    parent: Tag
    created: bool = False


class CandidateSelector:
    """Chooses the article container among the scored candidates."""

    def __init__(
        self,
        adapter: TreeAdapter,
        state: AnalysisState,
        scoring: ScoringEngine,
        n_top_candidates: int = 5,
    ) -> None:
        self.dom = adapter
        self.state = state
        self.scoring = scoring
        self.n_top_candidates = n_top_candidates

    def rank(self, candidates: List[Tag]) -> List[Candidate]:
        """Weight each score by ``1 - link_density`` and keep the best N.

        Ties keep discovery order.
        """
        top: List[Candidate] = []
        for element in candidates:
            link_density = self.scoring.link_density(element)
            score = self.state.score(element) * (1 - link_density)
            self.state.set_score(element, score)

            candidate = Candidate(element=element, score=score, link_density=link_density)
            for index in range(self.n_top_candidates):
                if index >= len(top) or score > top[index].score:
                    top.insert(index, candidate)
                    del top[self.n_top_candidates :]
                    break
        return top

    def select(self, page: Tag, top_candidates: List[Candidate]) -> Selection:
        best = top_candidates[0].element if top_candidates else None

        if best is None or self.dom.tag_name(best) == "BODY":
            container = self.dom.create_element("div")
            for child in self.dom.children(page):
                self.dom.append(container, child)
            self.dom.append(page, container)
            self.scoring.initialize(container)
            logger.debug("No usable candidate, wrapping page contents")
            return Selection(top_candidate=container, parent=page, created=True)

        top = self._promote_shared_ancestor(page, best, top_candidates)
        self.scoring.ensure_initialized(top)
        top = self._climb(page, top)
        top = self._collapse_only_children(page, top)
        self.scoring.ensure_initialized(top)

        logger.debug(
            "Top candidate selected",
            tag=self.dom.tag_name(top),
            score=round(self.state.score(top), 3),
            match=patterns.match_string(self.dom.class_name(top), self.dom.node_id(top)).strip(),
        )
        return Selection(top_candidate=top, parent=self.dom.parent(top))

    def _is_boundary(self, page: Tag, node: Optional[Tag]) -> bool:
        return node is None or node is page or not self.dom.is_element(node) or self.dom.tag_name(node) == "BODY"

    def _promote_shared_ancestor(self, page: Tag, best: Tag, top_candidates: List[Candidate]) -> Tag:
        best_score = top_candidates[0].score
        if best_score <= 0:
            return best

        alternatives = [
            self.dom.get_ancestors(candidate.element, 3)
            for candidate in top_candidates[1:]
            if candidate.score / best_score >= ALTERNATIVE_SCORE_RATIO
        ]
        if len(alternatives) < MINIMUM_TOP_CANDIDATES:
            return best

        ancestor = self.dom.parent(best)
        while not self._is_boundary(page, ancestor):
            containing = sum(1 for ancestors in alternatives if any(node is ancestor for node in ancestors))
            if containing >= MINIMUM_TOP_CANDIDATES:
                logger.debug("Promoting shared ancestor", tag=self.dom.tag_name(ancestor), lists=containing)
                return ancestor
            ancestor = self.dom.parent(ancestor)
        return best

    def _climb(self, page: Tag, top: Tag) -> Tag:
        """Move up while the parent scores strictly better and stays above a third of the start."""
        threshold = self.state.score(top) / 3
        parent = self.dom.parent(top)
        while not self._is_boundary(page, parent) and self.state.is_initialized(parent):
            parent_score = self.state.score(parent)
            if parent_score < threshold or parent_score <= self.state.score(top):
                break
            top = parent
            parent = self.dom.parent(top)
        return top

    def _collapse_only_children(self, page: Tag, top: Tag) -> Tag:
        parent = self.dom.parent(top)
        while not self._is_boundary(page, parent) and len(self.dom.element_children(parent)) == 1:
            top = parent
            parent = self.dom.parent(top)
        return top

    def gather(self, selection: Selection) -> Tag:
        """Move the top candidate and its qualifying siblings into a new container."""
        top = selection.top_candidate
        top_score = self.state.score(top)
        top_class = self.dom.class_name(top)
        threshold = max(MIN_SIBLING_SCORE, top_score * SIBLING_SCORE_RATIO)

        article = self.dom.create_element("div")
        self.dom.set_attr(article, "id", CONTENT_ID)

        for sibling in self.dom.element_children(selection.parent):
            if not (sibling is top or self._include_sibling(sibling, top_score, top_class, threshold)):
                continue
            if self.dom.tag_name(sibling) not in ALTER_TO_DIV_EXCEPTIONS:
                self.dom.rename(sibling, "div")
            self.dom.append(article, sibling)

        return article

    def _include_sibling(self, sibling: Tag, top_score: float, top_class: str, threshold: float) -> bool:
        bonus = 0.0
        if top_class and self.dom.class_name(sibling) == top_class:
            bonus = top_score * SIBLING_SCORE_RATIO

        if self.state.is_initialized(sibling) and self.state.score(sibling) + bonus > threshold:
            return True

        if self.dom.tag_name(sibling) == "P":
            link_density = self.scoring.link_density(sibling)
            text = self.dom.inner_text(sibling)
            if len(text) > 80 and link_density < 0.25:
                return True
            if 0 < len(text) <= 80 and link_density == 0 and patterns.SENTENCE_TAIL.search(text):
                return True
        return False

    def direction(self, selection: Selection) -> Optional[str]:
        """First ``dir`` attribute around the top candidate."""
        nodes = [selection.parent, selection.top_candidate] + self.dom.get_ancestors(selection.parent, 3)
        for node in nodes:
            if not self.dom.is_element(node):
                continue
            value = self.dom.attr(node, "dir")
            if value:
                return value
        return None
