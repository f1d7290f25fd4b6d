"""
Document metadata: article title, byline and excerpt.
"""

from .metadata_extractor import MetadataExtractor

__all__ = ["MetadataExtractor"]
