"""
Unit tests for the shared text patterns.
"""

import pytest

from decruft.extractor import patterns


class TestCandidatePatterns:
    """Class/id matchers."""

    @pytest.mark.parametrize("value", ["sidebar ", "site-header nav", " disqus_thread", "comment-list "])
    def test_unlikely_candidates(self, value):
        """Boilerplate class/id strings are unlikely."""
        assert patterns.is_unlikely(value)

    @pytest.mark.parametrize("value", ["main-sidebar ", "article-comments ", " column-header"])
    def test_maybe_overrides_unlikely(self, value):
        """A maybe-candidate match rescues an unlikely one."""
        assert patterns.UNLIKELY_CANDIDATES.search(value)
        assert not patterns.is_unlikely(value)

    def test_styled_marker_is_not_unlikely(self):
        """Paragraphs synthesized by the scoring walk survive a second walk."""
        assert not patterns.is_unlikely("readability-styled ")

    def test_match_is_case_insensitive(self):
        """Patterns ignore case."""
        assert patterns.POSITIVE_CANDIDATES.search("ArticleBody")
        assert patterns.NEGATIVE_CANDIDATES.search("WIDGET")

    def test_hid_needs_word_boundaries(self):
        """'hid' only counts as a whole class name."""
        assert patterns.NEGATIVE_CANDIDATES.search("hid")
        assert patterns.NEGATIVE_CANDIDATES.search("box hid")
        assert not patterns.NEGATIVE_CANDIDATES.search("chidren")

    def test_byline_and_video(self):
        """Byline and video host helpers."""
        assert patterns.is_byline("post-author ")
        assert not patterns.is_byline("post-body ")
        assert patterns.has_video("https://www.youtube.com/embed/abc")
        assert patterns.has_video("//player.vimeo.com/video/1")
        assert not patterns.has_video("https://example.com/video.mp4")

    def test_match_string(self):
        """Class and id are joined with a single space."""
        assert patterns.match_string("a b", "c") == "a b c"
        assert patterns.match_string("", "") == " "


class TestTitleAndMetaPatterns:
    """Title separators and meta names."""

    def test_separators(self):
        """Separators need surrounding spaces; hierarchical ones exclude '|' and '-'."""
        assert patterns.TITLE_SEPARATOR.search("Title | Site")
        assert patterns.TITLE_SEPARATOR.search("Title - Site")
        assert not patterns.TITLE_SEPARATOR.search("Well-known title")
        assert patterns.TITLE_HIERARCHICAL_SEPARATOR.search("News » World")
        assert not patterns.TITLE_HIERARCHICAL_SEPARATOR.search("Title - Site")

    def test_meta_names(self):
        """Meta name/property patterns accept spacing variants."""
        assert patterns.META_NAME.match("description")
        assert patterns.META_NAME.match(" twitter : title ")
        assert not patterns.META_NAME.match("keywords")
        assert patterns.META_PROPERTY.match("og:description")
        assert not patterns.META_PROPERTY.match("og:image")

    def test_word_count_counts_dangling_whitespace(self):
        """Leading or trailing whitespace adds an empty piece."""
        assert patterns.word_count("two words") == 2
        assert patterns.word_count("two words ") == 3
        assert patterns.word_count("") == 1
