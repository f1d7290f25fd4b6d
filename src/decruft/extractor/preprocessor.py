"""
Structural normalization run over the whole document before scoring.
"""

from __future__ import annotations

import structlog
from bs4 import BeautifulSoup, Tag

from decruft.dom.adapter import TreeAdapter

logger = structlog.get_logger(__name__)

_UNWRAP_TAGS = ("form", "script", "noscript")
_TEXTLESS_WRAPPERS = {"SCRIPT", "NOSCRIPT"}


class Preprocessor:
    """Strips styles, turns ``<br><br>`` runs into paragraphs and unwraps containers."""

    def __init__(self, adapter: TreeAdapter) -> None:
        self.dom = adapter

    def run(self, document: BeautifulSoup) -> None:
        styles = self.dom.descendants_by_tag(document, "style")
        for style in styles:
            self.dom.remove(style)

        body = document.find("body")
        if isinstance(body, Tag):
            self.replace_brs(body)

        fonts = self.dom.descendants_by_tag(document, "font")
        for font in fonts:
            self.dom.rename(font, "span")

        self.unwrap_containers(document)
        logger.debug("Document preprocessed", styles=len(styles), fonts=len(fonts))

    def replace_brs(self, root: Tag) -> None:
        """Replace runs of two or more ``<br>`` with a ``<p>`` holding the following siblings."""
        for br in self.dom.descendants_by_tag(root, "br"):
            if self.dom.parent(br) is None:
                continue

            replaced = False
            following = self.dom.next_element(br.next_sibling)
            while following is not None and self.dom.tag_name(following) == "BR":
                replaced = True
                after = following.next_sibling
                self.dom.remove(following)
                following = self.dom.next_element(after)

            if not replaced:
                continue

            paragraph = self.dom.create_element("p")
            self.dom.replace(br, paragraph)

            sibling = paragraph.next_sibling
            while sibling is not None:
                # Another <br><br> run starts the next paragraph
                if self.dom.tag_name(sibling) == "BR":
                    ahead = self.dom.next_element(sibling.next_sibling)
                    if ahead is not None and self.dom.tag_name(ahead) == "BR":
                        break
                after = sibling.next_sibling
                self.dom.append(paragraph, sibling)
                sibling = after

    def unwrap_containers(self, document: BeautifulSoup) -> None:
        """Lift the children of form/script/noscript in place and drop the wrapper.

        Script and noscript text never becomes content, so only their element
        children are kept.
        """
        for wrapper in self.dom.descendants_by_tag(document, *_UNWRAP_TAGS):
            if self.dom.parent(wrapper) is None:
                continue
            drop_text = self.dom.tag_name(wrapper) in _TEXTLESS_WRAPPERS
            for child in self.dom.children(wrapper):
                if drop_text and not self.dom.is_element(child):
                    continue
                self.dom.insert_before(wrapper, child)
            self.dom.remove(wrapper)
