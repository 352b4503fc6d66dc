from __future__ import annotations

from .merge_suggestions import (
    MergeRule,
    MergeSuggestionService,
    QualityIssue,
    QualityReport,
    ReplacementSuggestion,
    RuleStatus,
    RuleValidation,
    Suggestion,
    SuggestionReport,
    ValidationStatus,
    build_quality_report,
)

__all__ = [
    "MergeRule",
    "MergeSuggestionService",
    "QualityIssue",
    "QualityReport",
    "ReplacementSuggestion",
    "RuleStatus",
    "RuleValidation",
    "Suggestion",
    "SuggestionReport",
    "ValidationStatus",
    "build_quality_report",
]
