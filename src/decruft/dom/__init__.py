"""BeautifulSoup tree adapter, parsing and serialization."""

from .adapter import Node, TreeAdapter
from .markup import parse_html, serialize

__all__ = ["Node", "TreeAdapter", "parse_html", "serialize"]
