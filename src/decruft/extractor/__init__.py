"""
decruft Content Extraction Module - Readability-style Article Extraction

Pipeline stages, in the order one extraction runs them:
1. Preprocessor: strips styles, turns <br><br> runs into paragraphs, unwraps forms and scripts
2. ScoringEngine: prunes boilerplate and propagates paragraph scores to ancestors
3. CandidateSelector: ranks, refines and gathers the article container
4. ConditionalCleaner: marks data tables and removes residual junk
5. PostProcessor: absolute links and class cleanup

ArticleExtractor ties the stages together; is_probably_readerable is a cheap
pre-check that leaves the document untouched.
"""

from .candidates import CandidateSelector, Selection
from .cleaner import ConditionalCleaner
from .engine import ArticleExtractor, extract
from .models import ArticleMetadata, Candidate, ExtractionResult
from .postprocess import PostProcessor
from .preprocessor import Preprocessor
from .readerable import is_probably_readerable
from .scoring import ScoringEngine
from .state import AnalysisState, ExtractionFlags, NodeState

__all__ = [
    "AnalysisState",
    "ArticleExtractor",
    "ArticleMetadata",
    "Candidate",
    "CandidateSelector",
    "ConditionalCleaner",
    "ExtractionFlags",
    "ExtractionResult",
    "NodeState",
    "PostProcessor",
    "Preprocessor",
    "ScoringEngine",
    "Selection",
    "extract",
    "is_probably_readerable",
]
