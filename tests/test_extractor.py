"""Tests for the extraction engine."""

from __future__ import annotations

import copy

import pytest

from decruft import ArticleExtractor, ExtractionConfig, InputTooLargeError, extract
from decruft.dom import parse_html

BASE_URI = "https://example.com/news/story.html"


@pytest.mark.integration
class TestArticleExtractor:
    """End-to-end extraction of a simple article page."""

    @pytest.fixture
    def extractor(self):
        """Provide an extractor with default settings."""
        return ArticleExtractor()

    def test_extractor_initialization(self, extractor):
        """Defaults come from ExtractionConfig."""
        assert extractor.name == "decruft"
        assert extractor.config == ExtractionConfig()

    def test_boilerplate_is_removed(self, extractor, article_html, long_paragraph):
        """Navigation and footer are dropped; the paragraphs are kept."""
        result = extractor.extract(parse_html(article_html), BASE_URI)

        assert result.success
        assert result.text_content.count(long_paragraph) == 2
        assert "About us" not in result.text_content
        assert "Privacy policy" not in result.text_content
        assert result.length == len(result.text_content)

    def test_content_structure(self, extractor, article_html):
        """Content sits in the readability container and page wrapper."""
        result = extractor.extract(parse_html(article_html), BASE_URI)

        content = result.content
        assert content.get("id") == "readability-content"
        page = content.find(id="readability-page-1")
        assert page is not None
        assert page.get("class") == "page"
        assert len(page.find_all("p")) == 2
        assert result.html.startswith('<div id="readability-content">')

    def test_metadata(self, extractor, article_html):
        """Title, byline and excerpt come from the head."""
        result = extractor.extract(parse_html(article_html), BASE_URI)

        assert result.title == "Article Title"
        assert result.byline == "Jane Writer"
        assert result.excerpt == "A short summary of the story."
        assert result.url == BASE_URI

    def test_excerpt_falls_back_to_first_paragraph(self, extractor, long_paragraph):
        """Without a meta description, the first paragraph is the excerpt."""
        html = f"<html><body><div><p>{long_paragraph}</p><p>Second paragraph of the story.</p></div></body></html>"
        result = extractor.extract(parse_html(html), BASE_URI)
        assert result.excerpt == long_paragraph

    def test_byline_found_in_page(self, extractor, long_paragraph):
        """A byline element is used when no author meta tag exists."""
        html = f'<html><body><div><p class="byline">By Ann Author</p><p>{long_paragraph}</p></div></body></html>'
        result = extractor.extract(parse_html(html), BASE_URI)
        assert result.byline == "By Ann Author"
        assert "By Ann Author" not in result.text_content

    def test_text_direction(self, extractor, article_html):
        """dir is picked up from the candidate's ancestors."""
        result = extractor.extract(parse_html(article_html.replace("<html>", '<html dir="rtl">')), BASE_URI)
        assert result.direction == "rtl"

    def test_body_text_only(self, extractor):
        """A page with bare body text still yields that text."""
        result = extractor.extract(
            parse_html("<html><body>Just some text without any markup at all.</body></html>"), BASE_URI
        )
        assert result.success
        assert "Just some text without any markup at all." in result.text_content

    def test_empty_page_fails(self, extractor):
        """No text means no article."""
        result = extractor.extract(parse_html("<html><body></body></html>"), BASE_URI)
        assert not result.success
        assert result.content is None
        assert result.html == ""

    def test_short_body_text(self, extractor):
        """Body text under the paragraph threshold still comes back."""
        result = extractor.extract(parse_html("<html><body>Short body text.</body></html>"), BASE_URI)
        assert result.success
        assert "Short body text." in result.text_content

    def test_fragment_without_body(self, extractor, long_paragraph):
        """html.parser leaves a fragment without <body>; its root div is the page."""
        result = extractor.extract(parse_html(f"<div><p>{long_paragraph}</p></div>", "html.parser"), BASE_URI)
        assert result.success
        assert long_paragraph in result.text_content

    def test_failure_carries_no_metadata(self, extractor):
        """A failed extraction reports only the URL, even when the head has a title."""
        html = '<html><head><title>Some Title Here</title><meta name="author" content="Ann"></head><body></body></html>'
        result = extractor.extract(parse_html(html), BASE_URI)
        assert not result.success
        assert result.url == BASE_URI
        assert result.title == ""
        assert result.byline is None
        assert result.excerpt is None

    def test_links_are_absolute(self, extractor, long_paragraph):
        """Relative links in the content are resolved against the base URI."""
        html = f'<html><body><div><p>{long_paragraph} <a href="/more">Read more</a></p><p>{long_paragraph}</p></div></body></html>'
        result = extractor.extract(parse_html(html), BASE_URI)
        assert result.content.find("a")["href"] == "https://example.com/more"

    def test_extraction_is_deterministic(self, extractor, article_html):
        """Two copies of a page give identical output."""
        first = extractor.extract(parse_html(article_html), BASE_URI)
        second = ArticleExtractor().extract(parse_html(article_html), BASE_URI)
        assert first.html == second.html
        assert first.as_dict() == second.as_dict()

    def test_extract_html_and_module_function(self, article_html):
        """Raw HTML and the module-level helper give the same result."""
        from_bytes = ArticleExtractor().extract_html(article_html.encode("utf-8"), BASE_URI)
        from_function = extract(parse_html(article_html), BASE_URI)
        assert from_bytes.html == from_function.html

    def test_as_dict(self, extractor, article_html):
        """The dict form carries metadata and serialized content."""
        data = extractor.extract(parse_html(article_html), BASE_URI).as_dict()
        assert set(data) == {
            "success",
            "url",
            "title",
            "byline",
            "excerpt",
            "direction",
            "length",
            "text_content",
            "content",
        }
        assert data["success"] is True
        assert data["content"].startswith("<div")


class TestInputValidation:
    """Errors raised before the document is touched."""

    @pytest.mark.parametrize("base_uri", ["", "not-a-url", "/relative/path", "ftp://example.com/x", "https://"])
    def test_base_uri_must_be_absolute(self, article_html, base_uri):
        """Relative or unsupported base URIs are rejected."""
        with pytest.raises(ValueError):
            ArticleExtractor().extract(parse_html(article_html), base_uri)

    def test_file_uri_is_accepted(self, article_html):
        """file: URIs are absolute too."""
        assert ArticleExtractor().extract(parse_html(article_html), "file:///tmp/page.html").success

    def test_too_many_elements(self, article_html):
        """Oversized documents are refused and left unchanged."""
        document = parse_html(article_html)
        before = str(document)
        extractor = ArticleExtractor(ExtractionConfig(max_elements_to_parse=5))

        with pytest.raises(InputTooLargeError) as excinfo:
            extractor.extract(document, BASE_URI)

        assert excinfo.value.max_elements == 5
        assert excinfo.value.element_count > 5
        assert str(document) == before

    def test_limit_not_reached(self, article_html):
        """A generous limit does not get in the way."""
        extractor = ArticleExtractor(ExtractionConfig(max_elements_to_parse=1000))
        assert extractor.extract(parse_html(article_html), BASE_URI).success


class TestRetries:
    """Relaxing the heuristics when the article comes out too short."""

    def setup_method(self):
        self.long_text = "This sidebar actually holds the story and keeps going for quite a while. " * 20
        self.html = (
            "<html><body>"
            f'<div class="sidebar"><p>{self.long_text}</p><p>{self.long_text}</p></div>'
            "<div><p>A short teaser paragraph here.</p></div>"
            "</body></html>"
        )

    def test_without_threshold_the_first_attempt_wins(self):
        """No retries: the unlikely container is gone."""
        result = ArticleExtractor().extract(parse_html(self.html), BASE_URI)
        assert result.success
        assert "teaser" in result.text_content
        assert "sidebar actually" not in result.text_content

    def test_threshold_triggers_relaxed_attempts(self):
        """A short result is retried until the content is found."""
        config = ExtractionConfig(char_threshold=500)
        result = ArticleExtractor(config).extract(parse_html(self.html), BASE_URI)
        assert result.success
        assert "sidebar actually" in result.text_content
        assert result.length >= 500

    def test_unreachable_threshold_keeps_longest_attempt(self):
        """When every attempt is short, the longest one is returned."""
        config = ExtractionConfig(char_threshold=10**6)
        result = ArticleExtractor(config).extract(parse_html(self.html), BASE_URI)
        assert result.success
        assert "sidebar actually" in result.text_content

    def test_document_copy_is_independent(self):
        """Extraction mutates only the document it is given."""
        document = parse_html(self.html)
        untouched = copy.copy(document)
        ArticleExtractor(ExtractionConfig(char_threshold=500)).extract(document, BASE_URI)
        assert untouched.find(class_="sidebar") is not None
