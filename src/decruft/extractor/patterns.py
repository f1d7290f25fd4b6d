"""
Compiled text patterns shared by every extraction stage.

Each pattern is matched case-insensitively against a tag's ``class``, its
``id``, or both joined as ``"<class> <id>"``. The module is immutable after
import and safe to share between threads.
"""

from __future__ import annotations

import re

UNLIKELY_CANDIDATES = re.compile(
    r"sidebar|aside|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|extra|foot|header|"
    r"legends|menu|related|remark|replies|rss|shoutbox|skyscraper|social|sponsor|supplemental|"
    r"ad-break|agegate|pagination|pager|popup|yom-remote",
    re.IGNORECASE,
)
MAYBE_CANDIDATES = re.compile(r"and|article|body|column|main|shadow|section", re.IGNORECASE)
POSITIVE_CANDIDATES = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|pagination|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE_CANDIDATES = re.compile(
    r"hidden|^hid$| hid$| hid |^hid |banner|combx|comment|com-|contact|foot|footer|footnote|masthead|"
    r"media|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|shopping|"
    r"tags|tool|widget",
    re.IGNORECASE,
)
BYLINE_CANDIDATES = re.compile(r"byline|author|dateline|writtenby|p-author", re.IGNORECASE)
VIDEOS = re.compile(r"//(www\.)?(dailymotion|youtube|youtube-nocookie|player\.vimeo)\.com", re.IGNORECASE)

NORMALIZE = re.compile(r"\s{2,}")
WHITESPACE = re.compile(r"\s+")
WHITESPACE_ONLY = re.compile(r"^\s*$")
SENTENCE_TAIL = re.compile(r"\.( |$)")
SHARE_ELEMENTS = re.compile(r"share", re.IGNORECASE)

# Title heuristics
TITLE_SEPARATOR = re.compile(r" [|\-\\/>»] ")
TITLE_HIERARCHICAL_SEPARATOR = re.compile(r" [\\/>»] ")
TITLE_LEADING_PART = re.compile(r"(.*)[|\-\\/>»] .*", re.IGNORECASE)
TITLE_TRAILING_PART = re.compile(r"[^|\-\\/>»]*[|\-\\/>»](.*)", re.IGNORECASE)
TITLE_SEPARATOR_RUN = re.compile(r"[|\-\\/>»]+")

META_NAME = re.compile(r"^\s*((twitter)\s*:\s*)?(description|title)\s*$", re.IGNORECASE)
META_PROPERTY = re.compile(r"^\s*og\s*:\s*(description|title)\s*$", re.IGNORECASE)


def match_string(class_name: str, node_id: str) -> str:
    return f"{class_name} {node_id}"


def is_unlikely(value: str) -> bool:
    """True when ``value`` looks like boilerplate and nothing rescues it."""
    return bool(UNLIKELY_CANDIDATES.search(value)) and not MAYBE_CANDIDATES.search(value)


def is_byline(value: str) -> bool:
    return bool(BYLINE_CANDIDATES.search(value))


def has_video(value: str) -> bool:
    return bool(VIDEOS.search(value))


def word_count(value: str) -> int:
    """Number of pieces ``value`` splits into on whitespace runs.

    Leading or trailing whitespace counts as an extra (empty) piece, which the
    title rules rely on when a separator leaves a dangling space.
    """
    return len(WHITESPACE.split(value))
