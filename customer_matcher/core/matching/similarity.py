"""
Similarity scoring between customer names.

Six independent signals are computed on the normalized names and combined
into one weighted confidence:

- exactMatch:   normalized names are identical
- tokenJaccard: overlap of the token sets
- levenshtein:  1 - edit distance / longer length
- phonetic:     overlap of Double Metaphone codes of all tokens
- prefix:       first tokens agree (0.6 when one prefixes the other)
- suffix:       last tokens agree

The weighted average only counts the components that apply to a pair:
exactMatch when it fires, phonetic when either side produced a code, and
prefix/suffix when both names have tokens. Identical names therefore
score exactly 1.0, and the score is symmetric in its arguments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from ...config import SimilarityWeights
from .models import MatchStats, SimilarityBreakdown, SimilarityResult
from .normalizer import normalize, tokenize
from .phonetic import DoubleMetaphoneEncoder, PhoneticEncoder, code_set

PARTIAL_PREFIX_SCORE = 0.6


class SimilarityCacheBackend(Protocol):
    """Protocol for the pairwise result cache."""

    def get(self, key: tuple[str, str]) -> SimilarityResult | None:
        """Return the cached result, or None when absent or expired."""
        ...

    def set(self, key: tuple[str, str], value: SimilarityResult) -> None:
        """Store a result."""
        ...


@dataclass(frozen=True, slots=True)
class NameProfile:
    """Everything the engine needs to know about one raw name."""

    raw: str
    normalized: str
    tokens: tuple[str, ...]
    token_set: frozenset[str]
    codes: frozenset[str]


def levenshtein_distance(s: str, t: str) -> int:
    """
    Classic edit distance (insert, delete, substitute), two rows at a time.

    Examples:
        levenshtein_distance("kitten", "sitting") → 3
        levenshtein_distance("", "abc") → 3
    """
    if s == t:
        return 0
    if len(s) < len(t):
        s, t = t, s
    if not t:
        return len(s)

    previous = list(range(len(t) + 1))
    for i, cs in enumerate(s, start=1):
        current = [i]
        for j, ct in enumerate(t, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (cs != ct),
                )
            )
        previous = current
    return previous[-1]


def levenshtein_similarity(s: str, t: str) -> float:
    if not s and not t:
        return 1.0
    return 1.0 - levenshtein_distance(s, t) / max(len(s), len(t))


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    union = a | b
    if not union:
        return 1.0
    return len(a & b) / len(union)


def prefix_similarity(tokens_a: tuple[str, ...], tokens_b: tuple[str, ...]) -> float:
    if not tokens_a or not tokens_b:
        return 0.0
    first_a, first_b = tokens_a[0], tokens_b[0]
    if first_a == first_b:
        return 1.0
    if first_a.startswith(first_b) or first_b.startswith(first_a):
        return PARTIAL_PREFIX_SCORE
    return 0.0


def suffix_similarity(tokens_a: tuple[str, ...], tokens_b: tuple[str, ...]) -> float:
    # Legal forms are already stripped; a shared last word gets no partial credit.
    if not tokens_a or not tokens_b:
        return 0.0
    return 1.0 if tokens_a[-1] == tokens_b[-1] else 0.0


class SimilarityEngine:
    """
    Computes weighted similarity between raw customer names.

    Usage:
        engine = SimilarityEngine()
        result = engine.similarity("Acme Trading LLC", "ACME TRADING")
        result.score  # 1.0
    """

    def __init__(
        self,
        weights: Optional[SimilarityWeights] = None,
        encoder: Optional[PhoneticEncoder] = None,
        cache: Optional[SimilarityCacheBackend] = None,
    ) -> None:
        self.weights = weights or SimilarityWeights()
        self.encoder = encoder or DoubleMetaphoneEncoder()
        self.cache = cache

    def profile(self, raw: str) -> NameProfile:
        normalized = normalize(raw)
        tokens = tuple(tokenize(normalized))
        return NameProfile(
            raw=raw,
            normalized=normalized,
            tokens=tokens,
            token_set=frozenset(tokens),
            codes=code_set(self.encoder, tokens),
        )

    def similarity(
        self,
        a: str,
        b: str,
        *,
        profiles: Optional[Mapping[str, NameProfile]] = None,
        stats: Optional[MatchStats] = None,
    ) -> SimilarityResult:
        """
        Compare two raw names.

        Args:
            a: First raw name
            b: Second raw name
            profiles: Precomputed profiles keyed by raw name (optional)
            stats: Run counters to update (optional)

        Returns:
            SimilarityResult with the combined score and its breakdown
        """
        if stats is not None:
            stats.comparisons += 1

        key = (a, b)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                if stats is not None:
                    stats.cache_hits += 1
                return cached
            if stats is not None:
                stats.cache_misses += 1

        profile_a = profiles.get(a) if profiles else None
        profile_b = profiles.get(b) if profiles else None
        result = self.compare(profile_a or self.profile(a), profile_b or self.profile(b))

        if self.cache is not None:
            self.cache.set(key, result)
        return result

    def compare(self, a: NameProfile, b: NameProfile) -> SimilarityResult:
        """Score two profiles. Pure; does not touch the cache."""
        exact = 1.0 if a.normalized == b.normalized else 0.0
        breakdown = SimilarityBreakdown(
            exact_match=exact,
            token_jaccard=jaccard(a.token_set, b.token_set),
            levenshtein=levenshtein_similarity(a.normalized, b.normalized),
            phonetic=jaccard(a.codes, b.codes) if (a.codes or b.codes) else 0.0,
            prefix=prefix_similarity(a.tokens, b.tokens),
            suffix=suffix_similarity(a.tokens, b.tokens),
        )

        both_tokenized = bool(a.tokens) and bool(b.tokens)
        w = self.weights
        components = (
            (w.exact_match, breakdown.exact_match, exact == 1.0),
            (w.token_jaccard, breakdown.token_jaccard, True),
            (w.levenshtein, breakdown.levenshtein, True),
            (w.phonetic, breakdown.phonetic, bool(a.codes or b.codes)),
            (w.prefix, breakdown.prefix, both_tokenized),
            (w.suffix, breakdown.suffix, both_tokenized),
        )

        weighted = 0.0
        total = 0.0
        for weight, score, applied in components:
            if not applied:
                continue
            weighted += weight * score
            total += weight

        score = weighted / total if total > 0 else 0.0
        return SimilarityResult(score=min(1.0, max(0.0, score)), breakdown=breakdown)
