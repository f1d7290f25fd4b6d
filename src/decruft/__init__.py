"""
decruft - Main article extraction from HTML pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import ExtractionConfig, Settings
from .errors import DecruftError, InputTooLargeError
from .extractor import ArticleExtractor, ExtractionResult, extract, is_probably_readerable

__all__ = [
    "__version__",
    "ArticleExtractor",
    "DecruftError",
    "ExtractionConfig",
    "ExtractionResult",
    "InputTooLargeError",
    "Settings",
    "extract",
    "is_probably_readerable",
]
