"""
Data models for extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bs4 import Tag

from decruft.dom.markup import serialize


@dataclass(slots=True)
class ArticleMetadata:
    """Title, byline, excerpt and text direction of one document."""

    title: str = ""
    byline: str | None = None
    excerpt: str | None = None
    direction: str | None = None

    def set_byline(self, byline: str | None) -> bool:
        """Record ``byline`` unless one is already set. First writer wins."""
        if self.byline or not byline:
            return False
        self.byline = byline.strip()
        return True


@dataclass(slots=True, frozen=True)
class Candidate:
    """A scored element considered as the article container."""

    element: Tag
    score: float
    link_density: float


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Result of one main-content extraction.

    Callers must check ``success`` before reading ``content``.
    """

    success: bool
    content: Tag | None
    text_content: str
    length: int
    metadata: ArticleMetadata
    url: str | None = None

    def __post_init__(self) -> None:
        """Validate the result."""
        if self.success and self.content is None:
            raise ValueError("A successful result needs content")
        if self.length < 0:
            raise ValueError("Length must not be negative")

    @classmethod
    def failed(cls, url: str | None = None) -> ExtractionResult:
        """A failure record: no content and empty metadata."""
        return cls(
            success=False,
            content=None,
            text_content="",
            length=0,
            metadata=ArticleMetadata(),
            url=url,
        )

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def byline(self) -> str | None:
        return self.metadata.byline

    @property
    def excerpt(self) -> str | None:
        return self.metadata.excerpt

    @property
    def direction(self) -> str | None:
        return self.metadata.direction

    @property
    def html(self) -> str:
        """Serialized content with HTML comments stripped, "" on failure."""
        if not self.success:
            return ""
        return serialize(self.content)

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "url": self.url,
            "title": self.title,
            "byline": self.byline,
            "excerpt": self.excerpt,
            "direction": self.direction,
            "length": self.length,
            "text_content": self.text_content,
            "content": self.html,
        }
