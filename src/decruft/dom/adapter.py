"""
Tree adapter over BeautifulSoup documents.

The extraction passes never touch bs4 directly: every query and mutation goes
through TreeAdapter so node identity, element/text discrimination and the
detached-node rules are handled in one place. bs4 compares tags structurally
with ``==``; everything here (and in the callers) compares nodes with ``is``.
"""

from __future__ import annotations

import copy
import re
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

Node = PageElement

_NORMALIZE = re.compile(r"\s{2,}")
_WHITESPACE_ONLY = re.compile(r"^\s*$")


class TreeAdapter:
    """Facade over a parsed bs4 document.

    The document is only needed to fabricate new elements; all queries work on
    any node of the tree.
    """

    def __init__(self, document: BeautifulSoup) -> None:
        self.document = document

    # --- Node kinds ---

    @staticmethod
    def is_document(node: Optional[Node]) -> bool:
        return isinstance(node, BeautifulSoup)

    @staticmethod
    def is_element(node: Optional[Node]) -> bool:
        return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)

    @staticmethod
    def is_text(node: Optional[Node]) -> bool:
        # Comments, doctypes, CDATA and processing instructions are not text
        return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)

    @staticmethod
    def tag_name(node: Optional[Node]) -> str:
        if isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
            return node.name.upper()
        return ""

    # --- Structure queries ---

    @staticmethod
    def parent(node: Node) -> Optional[Tag]:
        return node.parent

    @staticmethod
    def children(node: Node) -> List[Node]:
        if isinstance(node, Tag):
            return list(node.contents)
        return []

    @staticmethod
    def element_children(node: Node) -> List[Tag]:
        if isinstance(node, Tag):
            return [child for child in node.contents if isinstance(child, Tag)]
        return []

    @staticmethod
    def first_element_child(node: Node) -> Optional[Tag]:
        if isinstance(node, Tag):
            for child in node.contents:
                if isinstance(child, Tag):
                    return child
        return None

    @staticmethod
    def next_element_sibling(node: Node) -> Optional[Tag]:
        sibling = node.next_sibling
        while sibling is not None and not isinstance(sibling, Tag):
            sibling = sibling.next_sibling
        return sibling

    def next_node(self, node: Node, ignore_children: bool = False) -> Optional[Tag]:
        """Depth-first pre-order successor of ``node`` over elements.

        Pass ``ignore_children=True`` when ``node`` and its subtree are going
        away and the walk should continue with whatever follows them.
        """
        if not ignore_children:
            child = self.first_element_child(node)
            if child is not None:
                return child
        sibling = self.next_element_sibling(node)
        if sibling is not None:
            return sibling
        current = node.parent
        while current is not None and self.next_element_sibling(current) is None:
            current = current.parent
        if current is None:
            return None
        return self.next_element_sibling(current)

    def next_element(self, node: Optional[Node]) -> Optional[Node]:
        """Skip forward over whitespace-only non-element siblings."""
        current = node
        while current is not None and not isinstance(current, Tag) and _WHITESPACE_ONLY.match(self.text_of(current)):
            current = current.next_sibling
        return current

    def get_ancestors(self, node: Node, max_depth: int = 0) -> List[Tag]:
        """Ancestors of ``node`` nearest first, stopping below the document."""
        ancestors: List[Tag] = []
        current = node.parent
        while current is not None and not self.is_document(current):
            ancestors.append(current)
            if max_depth and len(ancestors) == max_depth:
                break
            current = current.parent
        return ancestors

    def has_ancestor_tag(
        self,
        node: Node,
        tag: str,
        max_depth: int = 3,
        predicate: Optional[Callable[[Tag], bool]] = None,
    ) -> bool:
        """Check whether an ancestor has tag name ``tag``. ``max_depth <= 0`` is unlimited."""
        tag = tag.upper()
        depth = 0
        current = node
        while current.parent is not None:
            if max_depth > 0 and depth > max_depth:
                return False
            parent = current.parent
            if self.tag_name(parent) == tag and (predicate is None or predicate(parent)):
                return True
            current = parent
            depth += 1
        return False

    @staticmethod
    def descendants_by_tag(root: Node, *tags: str) -> List[Tag]:
        """Snapshot of the descendants of ``root`` with any of ``tags``, in document order."""
        if not isinstance(root, Tag):
            return []
        if not tags or "*" in tags:
            return list(root.find_all(True))
        return list(root.find_all([tag.lower() for tag in tags]))

    @staticmethod
    def count_elements(root: Node) -> int:
        if not isinstance(root, Tag):
            return 0
        return len(root.find_all(True))

    # --- Text ---

    @staticmethod
    def text_of(node: Optional[Node]) -> str:
        if node is None:
            return ""
        if isinstance(node, Tag):
            return node.get_text()
        return str(node)

    def inner_text(self, node: Optional[Node], normalize: bool = True) -> str:
        text = self.text_of(node).strip()
        if normalize:
            return _NORMALIZE.sub(" ", text)
        return text

    # --- Attributes ---

    @staticmethod
    def attr(node: Node, name: str, default: Optional[str] = None) -> Optional[str]:
        if not isinstance(node, Tag):
            return default
        value = node.attrs.get(name)
        if value is None:
            return default
        if isinstance(value, (list, tuple)):
            # bs4 splits multi-valued attributes such as class and rel
            return " ".join(value)
        return value

    @staticmethod
    def set_attr(node: Tag, name: str, value: str) -> None:
        node[name] = value

    @staticmethod
    def remove_attr(node: Tag, name: str) -> None:
        node.attrs.pop(name, None)

    def class_name(self, node: Node) -> str:
        return self.attr(node, "class", "") or ""

    def node_id(self, node: Node) -> str:
        return self.attr(node, "id", "") or ""

    def class_list(self, node: Node) -> List[str]:
        return self.class_name(node).split()

    # --- Mutation ---

    @staticmethod
    def remove(node: Node) -> Node:
        """Detach ``node`` (with its subtree). Detached nodes are left alone."""
        if node.parent is None:
            return node
        return node.extract()

    @staticmethod
    def replace(old: Node, new: Node) -> None:
        if old.parent is None:
            return
        old.replace_with(new)

    @staticmethod
    def append(parent: Tag, node: Node) -> None:
        if node.parent is not None:
            node.extract()
        parent.append(node)

    @staticmethod
    def insert_before(reference: Node, node: Node) -> None:
        if reference.parent is None:
            return
        if node.parent is not None:
            node.extract()
        reference.insert_before(node)

    @staticmethod
    def rename(node: Tag, tag: str) -> None:
        node.name = tag.lower()

    def create_element(self, tag: str) -> Tag:
        return self.document.new_tag(tag.lower())

    def create_text(self, text: str) -> NavigableString:
        return self.document.new_string(text)

    @staticmethod
    def clone(node: Tag) -> Tag:
        """Deep, detached copy of ``node``."""
        return copy.copy(node)
