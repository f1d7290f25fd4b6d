"""
Final touches on the extracted content: absolute links and class cleanup.
"""

from __future__ import annotations

from typing import Iterable, List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from decruft.dom.adapter import TreeAdapter

from .scoring import STYLED_CLASS

logger = structlog.get_logger(__name__)

CLASSES_TO_PRESERVE = (STYLED_CLASS, "page")


class PostProcessor:
    """Rewrites links against the page's base URI and strips unknown classes."""

    def __init__(
        self,
        adapter: TreeAdapter,
        classes_to_preserve: Iterable[str] = (),
        keep_classes: bool = False,
    ) -> None:
        self.dom = adapter
        self.classes_to_preserve = frozenset(CLASSES_TO_PRESERVE) | frozenset(classes_to_preserve)
        self.keep_classes = keep_classes

    def run(self, article: Tag, base_uri: str, document: Optional[BeautifulSoup] = None) -> None:
        self.fix_relative_uris(article, base_uri, self.document_base(document, base_uri))
        if not self.keep_classes:
            self.clean_classes(article)

    def document_base(self, document: Optional[BeautifulSoup], base_uri: str) -> str:
        """The base URI, adjusted by a ``<base href>`` when the page has one."""
        if document is None:
            return base_uri
        base = document.find("base", href=True)
        if not isinstance(base, Tag):
            return base_uri
        href = (self.dom.attr(base, "href") or "").strip()
        if not href:
            return base_uri
        return self._join(base_uri, href)

    def fix_relative_uris(self, article: Tag, document_uri: str, base_uri: str) -> None:
        def to_absolute(uri: str) -> str:
            # In-page anchors stay relative unless <base> points elsewhere
            if base_uri == document_uri and uri.startswith("#"):
                return uri
            return self._join(base_uri, uri)

        replaced = 0
        for link in self.dom.descendants_by_tag(article, "a"):
            href = self.dom.attr(link, "href")
            if not href:
                continue
            if href.strip().lower().startswith("javascript:"):
                self.dom.replace(link, self.dom.create_text(self.dom.text_of(link)))
                replaced += 1
            else:
                self.dom.set_attr(link, "href", to_absolute(href))

        for image in self.dom.descendants_by_tag(article, "img"):
            src = self.dom.attr(image, "src")
            if src:
                self.dom.set_attr(image, "src", to_absolute(src))

        if replaced:
            logger.debug("Replaced javascript links", count=replaced)

    def clean_classes(self, root: Tag) -> None:
        nodes: List[Tag] = [root] + self.dom.descendants_by_tag(root)
        for node in nodes:
            kept = [name for name in self.dom.class_list(node) if name in self.classes_to_preserve]
            if kept:
                self.dom.set_attr(node, "class", " ".join(kept))
            else:
                self.dom.remove_attr(node, "class")

    @staticmethod
    def _join(base: str, uri: str) -> str:
        try:
            return urljoin(base, uri.strip())
        except ValueError:
            logger.debug("Could not resolve URI", uri=uri, base=base)
            return uri
