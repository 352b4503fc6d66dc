"""
Blocked vs. pairwise matching benchmark over synthetic customer names.

Names follow a fixed pattern: prefix, business word and legal suffix, with
some address noise and "Int'l" abbreviations mixed in. Generation is
seeded, so a given (count, seed) always yields the same list.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import MatcherSettings
from .core.matching import CustomerMatcher

logger = logging.getLogger(__name__)

PREFIXES = (
    "Al",
    "Golden",
    "Star",
    "Diamond",
    "Phoenix",
    "Royal",
    "Premier",
    "Elite",
    "Global",
    "Metro",
)
MIDDLES = (
    "Trading",
    "Electronics",
    "Group",
    "International",
    "Services",
    "Industries",
    "Solutions",
    "Systems",
)
SUFFIXES = ("LLC", "Limited", "Inc", "Corp", "Est", "FZE", "Co")

STANDARD_SHARE = 0.70
ADDRESS_NOISE_SHARE = 0.15
DEFAULT_SIZES = (100, 200, 500, 700)
DEFAULT_SEED = 42


def generate_names(count: int, seed: int = DEFAULT_SEED) -> list[str]:
    """
    Generate synthetic customer names.

    Examples:
        "Golden Trading LLC"
        "Star Systems Corp, Shop No. 17"
        "Royal Int'l Group FZE"
    """
    if count < 0:
        raise ValueError("count must not be negative")
    rng = random.Random(seed)
    names: list[str] = []
    for _ in range(count):
        prefix = rng.choice(PREFIXES)
        middle = rng.choice(MIDDLES)
        suffix = rng.choice(SUFFIXES)
        variation = rng.random()
        if variation < STANDARD_SHARE:
            names.append(f"{prefix} {middle} {suffix}")
        elif variation < STANDARD_SHARE + ADDRESS_NOISE_SHARE:
            names.append(f"{prefix} {middle} {suffix}, Shop No. {rng.randrange(100)}")
        else:
            names.append(f"{prefix} Int'l {middle} {suffix}")
    return names


@dataclass(slots=True)
class BenchmarkResult:
    size: int
    blocked_seconds: float
    pairwise_seconds: float
    blocked_comparisons: int
    pairwise_comparisons: int
    blocked_clusters: int
    pairwise_clusters: int

    @property
    def speedup(self) -> float:
        if self.blocked_seconds <= 0:
            return float("inf")
        return self.pairwise_seconds / self.blocked_seconds

    @property
    def comparison_ratio(self) -> float:
        if self.blocked_comparisons <= 0:
            return float("inf")
        return self.pairwise_comparisons / self.blocked_comparisons

    def as_dict(self) -> dict:
        return {
            "size": self.size,
            "blockedSeconds": round(self.blocked_seconds, 4),
            "pairwiseSeconds": round(self.pairwise_seconds, 4),
            "speedup": round(self.speedup, 2),
            "blockedComparisons": self.blocked_comparisons,
            "pairwiseComparisons": self.pairwise_comparisons,
            "blockedClusters": self.blocked_clusters,
            "pairwiseClusters": self.pairwise_clusters,
        }


def run_benchmark(
    sizes: Iterable[int] = DEFAULT_SIZES,
    *,
    seed: int = DEFAULT_SEED,
    settings: Optional[MatcherSettings] = None,
) -> list[BenchmarkResult]:
    """
    Time blocked and forced-pairwise matching for each size.

    Both runs use the same threshold and a matcher without a cache, so the
    timings compare the candidate-generation strategies only.
    """
    base = settings or MatcherSettings()
    uncached = base.model_copy(update={"cache_enabled": False})
    threshold = base.local_threshold

    results: list[BenchmarkResult] = []
    for size in sizes:
        names = generate_names(size, seed)
        with CustomerMatcher(uncached) as matcher:
            blocked = matcher.analyze(names, local_threshold=threshold)
        with CustomerMatcher(uncached) as matcher:
            pairwise = matcher.analyze(names, force_pairwise=True, min_confidence=threshold)

        result = BenchmarkResult(
            size=size,
            blocked_seconds=blocked.stats.elapsed_seconds,
            pairwise_seconds=pairwise.stats.elapsed_seconds,
            blocked_comparisons=blocked.stats.comparisons,
            pairwise_comparisons=pairwise.stats.comparisons,
            blocked_clusters=len(blocked.clusters),
            pairwise_clusters=len(pairwise.clusters),
        )
        logger.info(
            "%d names: blocked %.2fs, pairwise %.2fs (%.1fx faster)",
            size,
            result.blocked_seconds,
            result.pairwise_seconds,
            result.speedup,
        )
        results.append(result)
    return results
