"""
Metadata Extractor - Title, Byline and Excerpt

Derives the article title from ``<title>`` (trimming site names and section
prefixes), and reads byline, excerpt and social titles from ``<meta>`` tags.
"""

from __future__ import annotations

from typing import Dict, Optional

import structlog
from bs4 import BeautifulSoup

from decruft.dom.adapter import TreeAdapter
from decruft.extractor import patterns
from decruft.extractor.models import ArticleMetadata

logger = structlog.get_logger(__name__)

EXCERPT_KEYS = ("description", "og:description", "twitter:description")
TITLE_KEYS = ("og:title", "twitter:title")


class MetadataExtractor:
    """Reads document-level metadata from a parsed page."""

    def __init__(self, adapter: Optional[TreeAdapter] = None) -> None:
        self.dom = adapter

    def extract(self, document: BeautifulSoup) -> ArticleMetadata:
        dom = self._adapter(document)
        metadata = ArticleMetadata()
        values: Dict[str, str] = {}

        for meta in dom.descendants_by_tag(document, "meta"):
            name = dom.attr(meta, "name")
            prop = dom.attr(meta, "property")
            if "author" in (name, prop):
                metadata.set_byline(dom.attr(meta, "content"))
                continue

            key = None
            if name and patterns.META_NAME.match(name):
                key = name
            elif prop and patterns.META_PROPERTY.match(prop):
                key = prop
            if key is None:
                continue

            content = dom.attr(meta, "content")
            if content:
                values[patterns.WHITESPACE.sub("", key.lower())] = content.strip()

        for key in EXCERPT_KEYS:
            if key in values:
                metadata.excerpt = values[key]
                break

        metadata.title = self.get_article_title(document)
        for key in TITLE_KEYS:
            if values.get(key):
                metadata.title = values[key]
                break

        logger.debug("Metadata extracted", title=metadata.title, byline=metadata.byline)
        return metadata

    def get_article_title(self, document: BeautifulSoup) -> str:
        dom = self._adapter(document)
        title_tags = dom.descendants_by_tag(document, "title")
        original = dom.text_of(title_tags[0]).strip() if title_tags else ""
        current = original
        had_hierarchical_separators = False

        if patterns.TITLE_SEPARATOR.search(current):
            had_hierarchical_separators = bool(patterns.TITLE_HIERARCHICAL_SEPARATOR.search(current))
            current = patterns.TITLE_LEADING_PART.sub(r"\1", original, count=1)
            if patterns.word_count(current) < 3:
                current = patterns.TITLE_TRAILING_PART.sub(r"\1", original, count=1)
        elif ": " in current:
            headings = dom.descendants_by_tag(document, "h1", "h2")
            trimmed = current.strip()
            if not any(dom.text_of(heading).strip() == trimmed for heading in headings):
                current = original[original.rfind(":") + 1 :]
                if patterns.word_count(current) < 3:
                    current = original[original.find(":") + 1 :]
                elif patterns.word_count(original[: original.find(":")]) > 5:
                    current = original
        elif len(current) > 150 or len(current) < 15:
            h1s = dom.descendants_by_tag(document, "h1")
            if h1s:
                current = dom.inner_text(h1s[0])

        current = patterns.NORMALIZE.sub(" ", current.strip())

        # Short titles cut out of a path-like title are usually a section name
        word_count = patterns.word_count(current)
        stripped_count = patterns.word_count(patterns.TITLE_SEPARATOR_RUN.sub("", original))
        if not current or (word_count <= 4 and had_hierarchical_separators and word_count != stripped_count - 1):
            current = original

        return current

    def _adapter(self, document: BeautifulSoup) -> TreeAdapter:
        if self.dom is None:
            return TreeAdapter(document)
        return self.dom
