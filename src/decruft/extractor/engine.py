"""
Main-content extraction engine.

One ``extract`` call runs the whole pipeline over a parsed document, mutating
it in place: preprocessing, metadata, the scoring walk, candidate selection,
sibling gathering, cleanup and link rewriting. Pass a copy when the original
tree is still needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from decruft.config.config import ExtractionConfig
from decruft.dom.adapter import TreeAdapter
from decruft.dom.markup import parse_html
from decruft.errors import InputTooLargeError
from decruft.metadata.metadata_extractor import MetadataExtractor

from .candidates import CandidateSelector
from .cleaner import ConditionalCleaner
from .models import ArticleMetadata, ExtractionResult
from .postprocess import PostProcessor
from .preprocessor import Preprocessor
from .scoring import ScoringEngine
from .state import AnalysisState, ExtractionFlags

logger = structlog.get_logger(__name__)

PAGE_ID = "readability-page-1"
PAGE_CLASS = "page"
ABSOLUTE_SCHEMES = ("http", "https", "file")


@dataclass(slots=True)
class GrabAttempt:
    article: Tag
    direction: Optional[str]
    byline: Optional[str]
    text_length: int


def validate_base_uri(base_uri: str) -> None:
    """Raise ValueError unless ``base_uri`` is an absolute http(s) or file URI."""
    parsed = urlparse(base_uri or "")
    if parsed.scheme not in ABSOLUTE_SCHEMES:
        raise ValueError(f"Base URI must be absolute: {base_uri!r}")
    if parsed.scheme == "file":
        if not (parsed.netloc or parsed.path):
            raise ValueError(f"File URI has no path: {base_uri!r}")
    elif not parsed.netloc:
        raise ValueError(f"Base URI has no host: {base_uri!r}")


def page_root(document: BeautifulSoup) -> Optional[Tag]:
    """The ``<body>``, or the root element when the document has none."""
    body = document.find("body")
    if isinstance(body, Tag):
        return body
    for child in document.contents:
        if isinstance(child, Tag):
            return child
    return None


class ArticleExtractor:
    """Extracts the main article from a parsed HTML document."""

    name = "decruft"

    def __init__(self, config: Optional[ExtractionConfig] = None) -> None:
        self.config = config or ExtractionConfig()
        self.logger = logger.bind(component="article_extractor")

    def extract_html(self, html: str | bytes, base_uri: str) -> ExtractionResult:
        """Parse ``html`` with the configured parser, then extract."""
        return self.extract(parse_html(html, self.config.parser), base_uri)

    def extract(self, document: BeautifulSoup, base_uri: str) -> ExtractionResult:
        """Extract the main content of ``document``.

        Args:
            document: Parsed page; it is modified in place
            base_uri: Absolute URI the page was loaded from

        Returns:
            ExtractionResult; ``success`` is False when nothing usable was found

        Raises:
            ValueError: ``base_uri`` is not absolute
            InputTooLargeError: the document has more elements than allowed
        """
        validate_base_uri(base_uri)
        self._check_size(document)

        with structlog.contextvars.bound_contextvars(document_url=base_uri):
            try:
                return self._extract(document, base_uri)
            except Exception as e:
                self.logger.warning("Extraction failed", error=str(e), error_type=type(e).__name__)
                return ExtractionResult.failed(url=base_uri)

    def _check_size(self, document: BeautifulSoup) -> None:
        limit = self.config.max_elements_to_parse
        if limit <= 0:
            return
        count = TreeAdapter.count_elements(document)
        if count > limit:
            raise InputTooLargeError(count, limit)

    def _extract(self, document: BeautifulSoup, base_uri: str) -> ExtractionResult:
        dom = TreeAdapter(document)

        Preprocessor(dom).run(document)
        metadata = MetadataExtractor(dom).extract(document)

        page = page_root(document)
        if page is None:
            self.logger.info("Document has no page root")
            return ExtractionResult.failed(url=base_uri)

        attempt = self._grab(dom, page, metadata.title)
        if attempt is None:
            self.logger.info("No content found")
            return ExtractionResult.failed(url=base_uri)

        article = attempt.article
        PostProcessor(dom, self.config.classes_to_preserve, self.config.keep_classes).run(article, base_uri, document)

        if not metadata.excerpt:
            paragraphs = dom.descendants_by_tag(article, "p")
            if paragraphs:
                metadata.excerpt = dom.text_of(paragraphs[0]).strip()
        metadata.set_byline(attempt.byline)
        metadata.direction = attempt.direction

        return self._assemble(dom, article, metadata, base_uri)

    def _assemble(self, dom: TreeAdapter, article: Tag, metadata: ArticleMetadata, base_uri: str) -> ExtractionResult:
        text_content = dom.text_of(article)
        if not text_content.strip():
            self.logger.info("Extracted content has no text")
            return ExtractionResult.failed(url=base_uri)

        self.logger.info("Extraction finished", length=len(text_content), title=metadata.title)
        return ExtractionResult(
            success=True,
            content=article,
            text_content=text_content,
            length=len(text_content),
            metadata=metadata,
            url=base_uri,
        )

    def _grab(self, dom: TreeAdapter, page: Tag, title: str) -> Optional[GrabAttempt]:
        """Run grab attempts, relaxing flags while the result stays too short."""
        threshold = self.config.char_threshold
        flags = ExtractionFlags.from_config(self.config)
        snapshot = dom.clone(page) if threshold > 0 else None
        attempts: List[GrabAttempt] = []
        byline: Optional[str] = None

        while True:
            attempt = self._grab_once(dom, page, title, flags, byline)
            byline = byline or attempt.byline
            if snapshot is None or attempt.text_length >= threshold:
                break

            attempts.append(attempt)
            relaxed = flags.relaxed()
            if relaxed is None:
                # Longest attempt wins; the first one on ties
                attempt = max(attempts, key=lambda candidate: candidate.text_length)
                if attempt.text_length == 0:
                    return None
                break

            self.logger.debug("Retrying with relaxed flags", length=attempt.text_length, flags=str(relaxed))
            restored = dom.clone(snapshot)
            dom.replace(page, restored)
            page = restored
            flags = relaxed

        attempt.byline = byline
        return attempt

    def _grab_once(
        self,
        dom: TreeAdapter,
        page: Tag,
        title: str,
        flags: ExtractionFlags,
        byline: Optional[str],
    ) -> GrabAttempt:
        state = AnalysisState()
        scoring = ScoringEngine(dom, state, flags, self.config.paragraph_char_threshold, byline)

        elements = scoring.collect(page)
        candidates = scoring.score(elements)

        selector = CandidateSelector(dom, state, scoring, self.config.n_top_candidates)
        selection = selector.select(page, selector.rank(candidates))
        article = selector.gather(selection)

        # A fabricated wrapper holds the whole page and must survive cleaning
        keep = selection.top_candidate if selection.created else None
        ConditionalCleaner(dom, state, scoring, flags).prepare(article, title, keep)

        if selection.created:
            dom.set_attr(selection.top_candidate, "id", PAGE_ID)
            dom.set_attr(selection.top_candidate, "class", PAGE_CLASS)
        else:
            wrapper = dom.create_element("div")
            dom.set_attr(wrapper, "id", PAGE_ID)
            dom.set_attr(wrapper, "class", PAGE_CLASS)
            for child in dom.children(article):
                dom.append(wrapper, child)
            dom.append(article, wrapper)

        return GrabAttempt(
            article=article,
            direction=selector.direction(selection),
            byline=scoring.byline,
            text_length=len(dom.inner_text(article)),
        )


def extract(document: BeautifulSoup, base_uri: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
    """Extract the main article of ``document`` with a one-off extractor."""
    return ArticleExtractor(config).extract(document, base_uri)
