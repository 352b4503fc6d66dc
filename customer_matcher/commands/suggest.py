from __future__ import annotations

import json
from typing import Sequence

from ..services import MergeSuggestionService
from .output import cache_status, cluster_lines, needs_review


def run(
    service: MergeSuggestionService,
    names: Sequence[str],
    *,
    division: str = "",
    force_pairwise: bool = False,
    json_output: bool = False,
) -> None:
    report = service.suggest(division, names, force_pairwise=force_pairwise)
    if json_output:
        print(json.dumps(report.as_dict(), indent=2))
        return

    if not report.suggestions:
        print("No merge suggestions found.")
    for position, suggestion in enumerate(report.suggestions, start=1):
        for line in cluster_lines(position, suggestion.cluster):
            print(line)

    quality = report.quality
    stats = report.stats
    print()
    print(
        f"Suggestions: {quality.total} "
        f"(high {quality.high_confidence}, medium {quality.medium_confidence}, "
        f"low {quality.low_confidence})"
    )
    for issue in quality.issues:
        print(needs_review(len(issue.members), issue.confidence))
    print(
        f"Comparisons: {stats.comparisons} of {stats.naive_comparisons} possible "
        f"({stats.mode}, {stats.elapsed_seconds:.2f}s)"
    )
    cache = service.matcher_for(report.division).cache
    print(cache_status(None if cache is None else cache.stats().hit_rate))
