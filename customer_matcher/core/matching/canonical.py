"""
Canonical name selection for candidate clusters.

The cluster builder asks a CanonicalNameStrategy for the suggested name of
every cluster it emits, so the heuristic can be replaced without touching
the grouping logic.
"""

from __future__ import annotations

from collections import Counter
from typing import Protocol, Sequence


class CanonicalNameStrategy(Protocol):
    """Protocol for choosing a cluster's suggested canonical name."""

    name: str

    def choose(self, members: Sequence[str], normalized: Sequence[str]) -> str:
        """
        Pick the canonical name.

        Args:
            members: Raw member names in grouping order
            normalized: Normalized form of each member, same order
        """
        ...


class LongestNormalizedName:
    """
    The longest normalized member wins; ties go to the earliest member.

    Examples:
        ["Acme Trading LLC", "Acme Intl Trading"] → "acme intl trading"
    """

    name = "longest"

    def choose(self, members: Sequence[str], normalized: Sequence[str]) -> str:
        if not normalized:
            return ""
        best = normalized[0]
        for candidate in normalized[1:]:
            if len(candidate) > len(best):
                best = candidate
        return best


class PreferredVariantName:
    """
    Choose the most presentable raw variant.

    Selection criteria (in order of importance):
    1. Normalized form shared by the most members
    2. Proper case (not all caps or all lowercase)
    3. Fewer words, then shorter
    4. Alphabetical tiebreaker

    Examples:
        ["ACME TRADING", "Acme Trading LLC", "Acme Trading"] → "Acme Trading"
    """

    name = "preferred_variant"

    def choose(self, members: Sequence[str], normalized: Sequence[str]) -> str:
        if not members:
            return ""

        frequency = Counter(normalized)

        def score(index: int) -> tuple:
            raw = members[index].strip()
            is_all_caps = 1 if raw.isupper() else 0
            is_all_lower = 1 if raw.islower() else 0
            has_proper_case = 1 if not is_all_caps and not is_all_lower else 0
            return (
                -frequency[normalized[index]],
                -has_proper_case,
                is_all_caps,
                len(raw.split()),
                len(raw),
                raw.casefold(),
            )

        best = min(range(len(members)), key=score)
        return members[best].strip()


STRATEGIES: dict[str, type] = {
    LongestNormalizedName.name: LongestNormalizedName,
    PreferredVariantName.name: PreferredVariantName,
}


def get_strategy(name: str) -> CanonicalNameStrategy:
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown canonical strategy {name!r} (expected one of {', '.join(sorted(STRATEGIES))})"
        ) from None
