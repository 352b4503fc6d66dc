from __future__ import annotations

import json
from typing import Sequence

from ..benchmark import run_benchmark
from ..config import MatcherSettings


def run(
    settings: MatcherSettings,
    *,
    sizes: Sequence[int],
    seed: int,
    json_output: bool = False,
) -> None:
    results = run_benchmark(sizes, seed=seed, settings=settings)
    if json_output:
        print(json.dumps([result.as_dict() for result in results], indent=2))
        return
    print("Size | Blocked   | Pairwise  | Speedup | Comparisons (blocked/pairwise)")
    print("-----|-----------|-----------|---------|-------------------------------")
    for result in results:
        print(
            f"{result.size:<4} | {result.blocked_seconds:>8.3f}s | {result.pairwise_seconds:>8.3f}s "
            f"| {result.speedup:>6.1f}x | {result.blocked_comparisons}/{result.pairwise_comparisons}"
        )
