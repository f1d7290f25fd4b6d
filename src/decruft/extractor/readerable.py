"""
Cheap check for whether a page is worth running the full extraction on.
"""

from __future__ import annotations

import math
from typing import List

from bs4 import BeautifulSoup, Tag

from decruft.dom.adapter import TreeAdapter

from . import patterns


def is_probably_readerable(document: BeautifulSoup, min_content_length: int = 140, min_score: float = 20) -> bool:
    """Guess whether ``document`` holds an article without mutating it.

    Paragraph-like nodes long enough to count add ``sqrt(length - min_content_length)``
    to a running score; the page is readerable once the score exceeds ``min_score``.
    """
    dom = TreeAdapter(document)

    nodes: List[Tag] = []
    for br in dom.descendants_by_tag(document, "br"):
        parent = dom.parent(br)
        if dom.tag_name(parent) == "DIV" and not any(node is parent for node in nodes):
            nodes.append(parent)
    nodes.extend(dom.descendants_by_tag(document, "p", "pre"))

    score = 0.0
    for node in nodes:
        if patterns.is_unlikely(patterns.match_string(dom.class_name(node), dom.node_id(node))):
            continue
        if dom.tag_name(node) == "P" and dom.has_ancestor_tag(node, "li", -1):
            continue
        length = len(dom.text_of(node).strip())
        if length < min_content_length:
            continue
        score += math.sqrt(length - min_content_length)
        if score > min_score:
            return True
    return False
