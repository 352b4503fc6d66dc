from __future__ import annotations

import json
from typing import Sequence

from ..services import MergeRule, MergeSuggestionService, ValidationStatus
from .output import percent, rule_status


def run(
    service: MergeSuggestionService,
    rules: Sequence[MergeRule],
    names: Sequence[str],
    *,
    json_output: bool = False,
) -> bool:
    """Print rule validation results; returns False when any rule needs attention."""
    results = service.validate_rules(rules, names)
    if json_output:
        print(json.dumps([result.as_dict() for result in results], indent=2))
    else:
        if not results:
            print("No merge rules to validate.")
        for result in results:
            print(
                rule_status(
                    result.rule.canonical_name,
                    result.status.value,
                    len(result.found),
                    len(result.missing),
                )
            )
            for replacement in result.replacements:
                print(
                    f"    {replacement.missing} -> {replacement.replacement} "
                    f"({percent(replacement.confidence)})"
                )
    return all(result.status is ValidationStatus.VALID for result in results)
