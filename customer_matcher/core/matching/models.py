"""
Domain models for customer name matching.

These are pure data models with no dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SimilarityBreakdown:
    """Independent component scores of one name comparison, each in [0, 1]."""

    exact_match: float
    token_jaccard: float
    levenshtein: float
    phonetic: float
    prefix: float
    suffix: float

    def as_dict(self) -> dict[str, float]:
        return {
            "exactMatch": self.exact_match,
            "tokenJaccard": self.token_jaccard,
            "levenshtein": self.levenshtein,
            "phonetic": self.phonetic,
            "prefix": self.prefix,
            "suffix": self.suffix,
        }


@dataclass(frozen=True, slots=True)
class SimilarityResult:
    """
    Result of comparing two raw names.

    The score is the weighted average of the components that applied to
    this pair (see SimilarityEngine).
    """

    score: float
    breakdown: SimilarityBreakdown

    def as_dict(self) -> dict:
        return {"score": self.score, "breakdown": self.breakdown.as_dict()}


@dataclass(frozen=True, slots=True)
class CandidateCluster:
    """
    A group of raw names judged to denote the same customer.

    Example:
        members: ("Acme Trading LLC", "Acme Trading Co.", "Acme Intl Trading")
        suggested_canonical_name: "acme intl trading"
        confidence: 0.83
    """

    members: tuple[str, ...]
    """Raw names in grouping order (seed first). Always two or more."""

    suggested_canonical_name: str
    """Canonical name proposed to the reviewer"""

    confidence: float
    """Mean of all pairwise similarity scores within the cluster"""

    @property
    def member_set(self) -> frozenset[str]:
        return frozenset(self.members)

    @property
    def size(self) -> int:
        return len(self.members)

    def as_dict(self) -> dict:
        return {
            "customers": list(self.members),
            "mergedName": self.suggested_canonical_name,
            "confidence": self.confidence,
            "customerCount": len(self.members),
        }


@dataclass(frozen=True, slots=True)
class PairDetail:
    """Pairwise comparison inside a cluster, for reviewer display."""

    pair: tuple[str, str]
    result: SimilarityResult

    def as_dict(self) -> dict:
        return {
            "pair": list(self.pair),
            "similarity": f"{self.result.score * 100:.1f}%",
            "breakdown": self.result.breakdown.as_dict(),
        }


@dataclass
class BlockingIndex:
    """
    Candidate-reduction index over a list of raw names.

    index maps each block key to the raw names in it (input order);
    name_to_blocks maps each raw name to the keys it was filed under.
    """

    index: dict[str, list[str]] = field(default_factory=dict)
    name_to_blocks: dict[str, list[str]] = field(default_factory=dict)

    def bucket(self, name: str) -> list[str]:
        """Union of every block the name participates in, first-seen order."""
        seen: dict[str, None] = {}
        for key in self.name_to_blocks.get(name, ()):
            for member in self.index.get(key, ()):
                seen.setdefault(member, None)
        return list(seen)

    @property
    def block_count(self) -> int:
        return len(self.index)


@dataclass
class MatchStats:
    """Counters for one matching run."""

    mode: str = "blocking"
    names: int = 0
    blocks: int = 0
    comparisons: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    clusters: int = 0
    elapsed_seconds: float = 0.0

    @property
    def naive_comparisons(self) -> int:
        return self.names * (self.names - 1) // 2

    def as_dict(self) -> dict:
        return {
            "mode": self.mode,
            "names": self.names,
            "blocks": self.blocks,
            "comparisons": self.comparisons,
            "naiveComparisons": self.naive_comparisons,
            "cacheHits": self.cache_hits,
            "cacheMisses": self.cache_misses,
            "clusters": self.clusters,
            "elapsedSeconds": round(self.elapsed_seconds, 4),
        }


@dataclass
class MatchReport:
    """Clusters from one run together with the run's counters."""

    clusters: list[CandidateCluster]
    stats: MatchStats
