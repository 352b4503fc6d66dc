"""
Customer name matching domain logic.

This module handles:
- Name normalization
- Pairwise similarity scoring
- Blocking (candidate reduction)
- Greedy clustering and canonical name suggestion

All logic is pure business logic; the only shared state is the optional
similarity cache owned by each CustomerMatcher.
"""

from __future__ import annotations

from .blocking import build_index
from .canonical import CanonicalNameStrategy, LongestNormalizedName, PreferredVariantName
from .clustering import CustomerMatcher
from .models import (
    BlockingIndex,
    CandidateCluster,
    MatchReport,
    MatchStats,
    PairDetail,
    SimilarityBreakdown,
    SimilarityResult,
)
from .normalizer import normalize
from .phonetic import DoubleMetaphoneEncoder, PhoneticEncoder
from .similarity import SimilarityEngine, levenshtein_distance

__all__ = [
    "BlockingIndex",
    "CandidateCluster",
    "CanonicalNameStrategy",
    "CustomerMatcher",
    "DoubleMetaphoneEncoder",
    "LongestNormalizedName",
    "MatchReport",
    "MatchStats",
    "PairDetail",
    "PhoneticEncoder",
    "PreferredVariantName",
    "SimilarityBreakdown",
    "SimilarityEngine",
    "SimilarityResult",
    "build_index",
    "levenshtein_distance",
    "normalize",
]
