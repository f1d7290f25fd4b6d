"""
Test configuration for decruft.

Shared HTML fixtures and small helpers for building parsed documents.
"""

from typing import Callable

import pytest
from bs4 import BeautifulSoup

from decruft.dom import TreeAdapter, parse_html

# A ~200 word paragraph without commas, so comma counts stay predictable
SENTENCE = "The committee reviewed the proposal in detail and published its findings for the public. "
LONG_PARAGRAPH = (SENTENCE * 15).strip()

ARTICLE_HTML = f"""
<html>
  <head>
    <title>Article Title - Example News</title>
    <meta name="description" content="A short summary of the story.">
    <meta name="author" content="Jane Writer">
  </head>
  <body>
    <nav class="sidebar">
      <ul>
        <li><a href="/home">Home</a></li>
        <li><a href="/about">About us</a></li>
      </ul>
    </nav>
    <div>
      <p>{LONG_PARAGRAPH}</p>
      <p>{LONG_PARAGRAPH}</p>
    </div>
    <div class="footer"><a href="/privacy">Privacy policy</a></div>
  </body>
</html>
"""


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end extraction tests")


@pytest.fixture
def make_soup() -> Callable[[str], BeautifulSoup]:
    """Parse an HTML string with the default lxml tree builder."""

    def _make(html: str) -> BeautifulSoup:
        return parse_html(html)

    return _make


@pytest.fixture
def article_html() -> str:
    """A page with a sidebar nav, two long paragraphs and a footer."""
    return ARTICLE_HTML


@pytest.fixture
def long_paragraph() -> str:
    return LONG_PARAGRAPH


@pytest.fixture
def adapter_for() -> Callable[[BeautifulSoup], TreeAdapter]:
    return TreeAdapter
