"""
Markup in and out: parsing HTML into a bs4 tree and serializing nodes back.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

HTML_COMMENTS = re.compile(
    r"<!--[\s\S]*?(?:-->)?<!---+>?|<!--[\s\S]*?-->|<!(?![dD][oO][cC][tT][yY][pP][eE]|\[CDATA\[)[^>]*>?|<[?][^>]*>?"
)


def parse_html(html: str | bytes, parser: str = "lxml") -> BeautifulSoup:
    """Parse ``html`` with the given bs4 tree builder."""
    return BeautifulSoup(html, parser)


def serialize(node: Tag | None, inner: bool = False) -> str:
    """Serialize ``node`` to markup with HTML comments stripped.

    With ``inner=True`` only the children of ``node`` are serialized.
    """
    if node is None:
        return ""
    markup = node.decode_contents() if inner else str(node)
    return HTML_COMMENTS.sub("", markup)
