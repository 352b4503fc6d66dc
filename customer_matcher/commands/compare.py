from __future__ import annotations

import json

from ..core.matching import CustomerMatcher
from .output import percent


def run(matcher: CustomerMatcher, a: str, b: str, *, json_output: bool = False) -> None:
    result = matcher.similarity(a, b)
    if json_output:
        print(json.dumps({"pair": [a, b], **result.as_dict()}, indent=2))
        return
    print(f"{a} <-> {b}: {percent(result.score)}")
    for component, value in result.breakdown.as_dict().items():
        print(f"  {component}: {value:.3f}")
