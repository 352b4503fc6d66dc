"""
Duplicate detection over a list of raw customer names.

CustomerMatcher walks the names once in input order. Each name that has
not been grouped yet becomes a seed; every ungrouped name sharing a block
with the seed (or, in pairwise mode, every later ungrouped name) is scored
against the seed and joins the seed's group when it reaches the threshold.
Groups of two or more become CandidateClusters.

This is a greedy partition, not a transitive closure: if A matches B and
B matches C but A does not match C, C is only grouped with A when it
reaches the threshold against A itself. Results depend on input order and
are deterministic for a fixed order and configuration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from typing import Optional

from ...cache import SimilarityCache
from ...config import MatcherSettings
from .blocking import build_index
from .canonical import CanonicalNameStrategy, get_strategy
from .models import CandidateCluster, MatchReport, MatchStats, PairDetail, SimilarityResult
from .phonetic import PhoneticEncoder
from .similarity import NameProfile, SimilarityEngine

logger = logging.getLogger(__name__)

PAIRWISE_SIZE_HINT = 2000


def check_names(names: object) -> list[str]:
    if isinstance(names, str) or not isinstance(names, (list, tuple)):
        raise TypeError(
            f"names must be a list of strings, got {type(names).__name__}"
        )
    for position, name in enumerate(names):
        if not isinstance(name, str):
            raise TypeError(
                f"names must be a list of strings; item {position} is {type(name).__name__}"
            )
    return list(names)


def _check_threshold(label: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{label} must be between 0 and 1, got {value}")
    return value


def _pair_key(a: str, b: str) -> frozenset[str]:
    return frozenset((a.casefold(), b.casefold()))


class CustomerMatcher:
    """
    Finds groups of customer names that likely denote the same customer.

    Usage:
        matcher = CustomerMatcher()
        clusters = matcher.find_potential_duplicates(
            ["Acme Trading LLC", "ACME TRADING", "Global Widgets Ltd"]
        )
        clusters[0].members  # ("Acme Trading LLC", "ACME TRADING")

    Each instance owns its similarity cache, so matchers for different
    divisions never share cached state. The cache is lock-guarded and safe
    to use from several threads.
    """

    def __init__(
        self,
        settings: Optional[MatcherSettings] = None,
        *,
        encoder: Optional[PhoneticEncoder] = None,
        canonical_strategy: Optional[CanonicalNameStrategy] = None,
        cache: Optional[SimilarityCache] = None,
    ) -> None:
        self.settings = settings or MatcherSettings()
        if self.settings.cache_enabled:
            if cache is None:
                cache = SimilarityCache(self.settings.cache_ttl_seconds)
            self.cache = cache
        else:
            self.cache = None
        self.engine = SimilarityEngine(
            weights=self.settings.weights,
            encoder=encoder,
            cache=self.cache,
        )
        self.canonical_strategy = canonical_strategy or get_strategy(
            self.settings.canonical_strategy
        )

    def __enter__(self) -> "CustomerMatcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()

    def start_cache_sweeper(self) -> None:
        """Start periodic eviction of expired cache entries (no-op without a cache)."""
        if self.cache is not None:
            self.cache.start_sweeper(self.settings.cache_sweep_interval_seconds)

    def similarity(self, a: str, b: str) -> SimilarityResult:
        return self.engine.similarity(a, b)

    def find_potential_duplicates(
        self,
        names: Sequence[str],
        *,
        force_pairwise: bool = False,
        local_threshold: Optional[float] = None,
        min_confidence: Optional[float] = None,
        n_tokens: Optional[int] = None,
        rejected_pairs: Iterable[tuple[str, str]] = (),
        exclude: Iterable[str] = (),
    ) -> list[CandidateCluster]:
        """
        Group likely duplicates, highest confidence first.

        Args:
            names: Raw customer names
            force_pairwise: Skip blocking and compare every pair (small inputs)
            local_threshold: Grouping threshold for the blocking path
            min_confidence: Grouping threshold for the pairwise path
            n_tokens: Leading tokens used for the prefix block
            rejected_pairs: Name pairs that must never be grouped together
            exclude: Names (case-insensitive) left out of matching entirely

        Returns:
            CandidateClusters of two or more members

        Raises:
            TypeError: names is not a list of strings
        """
        return self.analyze(
            names,
            force_pairwise=force_pairwise,
            local_threshold=local_threshold,
            min_confidence=min_confidence,
            n_tokens=n_tokens,
            rejected_pairs=rejected_pairs,
            exclude=exclude,
        ).clusters

    async def find_potential_duplicates_async(
        self, names: Sequence[str], **options
    ) -> list[CandidateCluster]:
        """Coroutine wrapper for event-loop hosts; runs to completion without yielding."""
        return self.find_potential_duplicates(names, **options)

    def analyze(
        self,
        names: Sequence[str],
        *,
        force_pairwise: bool = False,
        local_threshold: Optional[float] = None,
        min_confidence: Optional[float] = None,
        n_tokens: Optional[int] = None,
        rejected_pairs: Iterable[tuple[str, str]] = (),
        exclude: Iterable[str] = (),
    ) -> MatchReport:
        """Same as find_potential_duplicates, but also returns the run counters."""
        raw_names = check_names(names)
        if force_pairwise:
            threshold = _check_threshold(
                "min_confidence",
                self.settings.min_confidence_threshold if min_confidence is None else min_confidence,
            )
        else:
            threshold = _check_threshold(
                "local_threshold",
                self.settings.local_threshold if local_threshold is None else local_threshold,
            )
        n_tokens = self.settings.n_tokens_blocking if n_tokens is None else n_tokens
        if n_tokens < 1:
            raise ValueError(f"n_tokens must be at least 1, got {n_tokens}")

        excluded = {name.casefold() for name in exclude}
        rejected = {_pair_key(a, b) for a, b in rejected_pairs}
        working = [
            name for name in dict.fromkeys(raw_names) if name.casefold() not in excluded
        ]

        stats = MatchStats(mode="pairwise" if force_pairwise else "blocking", names=len(working))
        started = time.perf_counter()
        if self.cache is not None:
            # Expired entries are otherwise only dropped when their key is read again.
            self.cache.sweep()
        profiles = {name: self.engine.profile(name) for name in working}

        if force_pairwise:
            if len(working) > PAIRWISE_SIZE_HINT:
                logger.warning(
                    "Pairwise matching over %d names; blocking is recommended above %d",
                    len(working),
                    PAIRWISE_SIZE_HINT,
                )
            groups = self._pairwise_groups(working, threshold, profiles, rejected, stats)
        else:
            groups = self._blocked_groups(working, threshold, n_tokens, profiles, rejected, stats)

        clusters = [self._build_cluster(group, profiles, stats) for group in groups]
        clusters.sort(key=lambda cluster: cluster.confidence, reverse=True)

        stats.clusters = len(clusters)
        stats.elapsed_seconds = time.perf_counter() - started
        logger.info(
            "Matched %d names (%s): %d comparisons vs %d naive, %d clusters in %.2fs",
            stats.names,
            stats.mode,
            stats.comparisons,
            stats.naive_comparisons,
            stats.clusters,
            stats.elapsed_seconds,
        )
        return MatchReport(clusters=clusters, stats=stats)

    def _blocked_groups(
        self,
        names: list[str],
        threshold: float,
        n_tokens: int,
        profiles: dict[str, NameProfile],
        rejected: set[frozenset[str]],
        stats: MatchStats,
    ) -> list[list[str]]:
        index = build_index(
            names,
            n_tokens,
            encoder=self.engine.encoder,
            tokens_by_name={name: profile.tokens for name, profile in profiles.items()},
        )
        stats.blocks = index.block_count
        logger.debug("Built %d blocks over %d names", index.block_count, len(names))

        processed: set[str] = set()
        groups: list[list[str]] = []
        for seed in names:
            if seed in processed:
                continue
            processed.add(seed)
            group = self._grow_group(
                seed, index.bucket(seed), threshold, profiles, rejected, processed, stats
            )
            if len(group) >= 2:
                groups.append(group)
        return groups

    def _pairwise_groups(
        self,
        names: list[str],
        threshold: float,
        profiles: dict[str, NameProfile],
        rejected: set[frozenset[str]],
        stats: MatchStats,
    ) -> list[list[str]]:
        processed: set[str] = set()
        groups: list[list[str]] = []
        for position, seed in enumerate(names):
            if seed in processed:
                continue
            processed.add(seed)
            group = self._grow_group(
                seed, names[position + 1:], threshold, profiles, rejected, processed, stats
            )
            if len(group) >= 2:
                groups.append(group)
        return groups

    def _grow_group(
        self,
        seed: str,
        candidates: Iterable[str],
        threshold: float,
        profiles: dict[str, NameProfile],
        rejected: set[frozenset[str]],
        processed: set[str],
        stats: MatchStats,
    ) -> list[str]:
        group = [seed]
        for candidate in candidates:
            if candidate in processed:
                continue
            if rejected and _pair_key(seed, candidate) in rejected:
                continue
            result = self.engine.similarity(seed, candidate, profiles=profiles, stats=stats)
            if result.score >= threshold:
                group.append(candidate)
                processed.add(candidate)
        return group

    def _build_cluster(
        self,
        group: list[str],
        profiles: dict[str, NameProfile],
        stats: MatchStats,
    ) -> CandidateCluster:
        scores = [
            self.engine.similarity(group[i], group[j], profiles=profiles, stats=stats).score
            for i in range(len(group))
            for j in range(i + 1, len(group))
        ]
        confidence = sum(scores) / len(scores)
        canonical = self.canonical_strategy.choose(
            group, [profiles[name].normalized for name in group]
        )
        return CandidateCluster(
            members=tuple(group),
            suggested_canonical_name=canonical,
            confidence=confidence,
        )

    def match_details(self, cluster: CandidateCluster) -> list[PairDetail]:
        """Pairwise breakdown of a cluster for review screens."""
        members = cluster.members
        return [
            PairDetail(
                pair=(members[i], members[j]),
                result=self.engine.similarity(members[i], members[j]),
            )
            for i in range(len(members))
            for j in range(i + 1, len(members))
        ]
