"""
Division-level merge suggestion service.

Bridges the pure matcher and the merge-rules store kept by the host
application. Rules and name lists are passed in by the caller; nothing in
this module reads or writes a database.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..config import Settings
from ..core.matching import CandidateCluster, CustomerMatcher, MatchStats, PairDetail
from ..core.matching.clustering import check_names

logger = logging.getLogger(__name__)

MEDIUM_CONFIDENCE_THRESHOLD = 0.75
LARGE_GROUP_SIZE = 3
LARGE_GROUP_MIN_CONFIDENCE = 0.85
REPLACEMENT_THRESHOLD = 0.70
MAX_REPLACEMENTS = 3


class RuleStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"


class ValidationStatus(str, Enum):
    VALID = "VALID"
    NEEDS_UPDATE = "NEEDS_UPDATE"
    ORPHANED = "ORPHANED"


@dataclass(frozen=True, slots=True)
class MergeRule:
    """An admin-approved (or pending) canonical name and the names it replaces."""

    division: str
    canonical_name: str
    original_names: tuple[str, ...]
    status: RuleStatus = RuleStatus.ACTIVE
    rule_id: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: dict, division: Optional[str] = None) -> "MergeRule":
        originals = payload.get("original_customers", payload.get("original_names", []))
        if isinstance(originals, str):
            originals = [originals]
        return cls(
            division=str(payload.get("division") or division or "").upper(),
            canonical_name=str(
                payload.get("merged_customer_name", payload.get("canonical_name", ""))
            ),
            original_names=tuple(str(name) for name in originals),
            status=RuleStatus(str(payload.get("status", RuleStatus.ACTIVE.value)).upper()),
            rule_id=payload.get("id", payload.get("rule_id")),
        )

    @property
    def is_active(self) -> bool:
        return self.status is RuleStatus.ACTIVE


@dataclass(slots=True)
class QualityIssue:
    kind: str
    members: tuple[str, ...]
    confidence: float


@dataclass(slots=True)
class QualityReport:
    total: int = 0
    high_confidence: int = 0
    medium_confidence: int = 0
    low_confidence: int = 0
    average_spread: float = 0.0
    issues: list[QualityIssue] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "totalSuggestions": self.total,
            "highConfidence": self.high_confidence,
            "mediumConfidence": self.medium_confidence,
            "lowConfidence": self.low_confidence,
            "averageSpread": round(self.average_spread, 4),
            "potentialIssues": [
                {"type": issue.kind, "customers": list(issue.members), "confidence": issue.confidence}
                for issue in self.issues
            ],
        }


@dataclass(slots=True)
class Suggestion:
    cluster: CandidateCluster
    details: list[PairDetail]

    def as_dict(self) -> dict:
        payload = self.cluster.as_dict()
        payload["matchDetails"] = [detail.as_dict() for detail in self.details]
        return payload


@dataclass(slots=True)
class SuggestionReport:
    division: str
    suggestions: list[Suggestion]
    quality: QualityReport
    stats: MatchStats
    excluded: list[str] = field(default_factory=list)
    dropped_overlapping: int = 0

    def as_dict(self) -> dict:
        return {
            "division": self.division,
            "suggestions": [suggestion.as_dict() for suggestion in self.suggestions],
            "qualityReport": self.quality.as_dict(),
            "stats": self.stats.as_dict(),
            "excludedCustomers": list(self.excluded),
            "droppedOverlapping": self.dropped_overlapping,
        }


@dataclass(slots=True)
class ReplacementSuggestion:
    missing: str
    replacement: str
    confidence: float
    alternatives: list[tuple[str, float]] = field(default_factory=list)


@dataclass(slots=True)
class RuleValidation:
    rule: MergeRule
    status: ValidationStatus
    found: list[str]
    missing: list[str]
    replacements: list[ReplacementSuggestion] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "ruleId": self.rule.rule_id,
            "ruleName": self.rule.canonical_name,
            "status": self.status.value,
            "found": self.found,
            "missing": self.missing,
            "suggestions": [
                {
                    "missing": item.missing,
                    "replacement": item.replacement,
                    "confidence": f"{item.confidence * 100:.1f}%",
                    "alternatives": [
                        {"name": name, "confidence": f"{score * 100:.1f}%"}
                        for name, score in item.alternatives
                    ],
                }
                for item in self.replacements
            ],
        }


def build_quality_report(
    clusters: Sequence[CandidateCluster], high_confidence_threshold: float
) -> QualityReport:
    report = QualityReport(total=len(clusters))
    if not clusters:
        return report
    for cluster in clusters:
        if cluster.confidence >= high_confidence_threshold:
            report.high_confidence += 1
        elif cluster.confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
            report.medium_confidence += 1
        else:
            report.low_confidence += 1
        if cluster.size > LARGE_GROUP_SIZE and cluster.confidence < LARGE_GROUP_MIN_CONFIDENCE:
            report.issues.append(
                QualityIssue("large_group_low_confidence", cluster.members, cluster.confidence)
            )
    report.average_spread = sum(1.0 - c.confidence for c in clusters) / len(clusters)
    return report


class MergeSuggestionService:
    """
    Produces merge suggestions and validates existing merge rules per division.

    One CustomerMatcher is kept per division, each with its own cache.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self._matchers: dict[str, CustomerMatcher] = {}

    def matcher_for(self, division: str) -> CustomerMatcher:
        key = (division or "").upper()
        matcher = self._matchers.get(key)
        if matcher is None:
            matcher = CustomerMatcher(self.settings.for_division(key))
            self._matchers[key] = matcher
        return matcher

    def close(self) -> None:
        for matcher in self._matchers.values():
            matcher.close()
        self._matchers.clear()

    def suggest(
        self,
        division: str,
        names: Sequence[str],
        *,
        active_rules: Iterable[MergeRule] = (),
        rejected_pairs: Iterable[tuple[str, str]] = (),
        protected_names: Iterable[str] = (),
        min_confidence: Optional[float] = None,
        force_pairwise: bool = False,
    ) -> SuggestionReport:
        """
        Suggest merge groups for a division's customer names.

        Steps:
        1. Leave out names already covered by an active rule, and protected names
        2. Run the matcher
        3. Keep suggestions at or above the minimum confidence
        4. Drop suggestions overlapping an active rule
        5. Build the quality report
        """
        names = check_names(names)
        division = (division or "").upper()
        matcher = self.matcher_for(division)
        matcher_settings = matcher.settings

        covered = {
            name.casefold()
            for rule in active_rules
            if rule.is_active
            for name in rule.original_names
        }
        protected = {name.casefold() for name in protected_names}
        skipped = covered | protected
        excluded = sorted({name for name in names if name.casefold() in skipped})
        if covered:
            logger.info("%s: %d customers already covered by active rules", division, len(covered))
        if protected:
            logger.info("%s: %d protected customers", division, len(protected))

        report = matcher.analyze(
            names,
            force_pairwise=force_pairwise,
            rejected_pairs=rejected_pairs,
            exclude=skipped,
        )

        threshold = matcher_settings.min_confidence_threshold if min_confidence is None else min_confidence
        kept = [cluster for cluster in report.clusters if cluster.confidence >= threshold]
        logger.info(
            "%s: %d suggestions above %.0f%% confidence",
            division,
            len(kept),
            threshold * 100,
        )

        before = len(kept)
        kept = [
            cluster
            for cluster in kept
            if not any(member.casefold() in covered for member in cluster.members)
        ]
        dropped = before - len(kept)
        if dropped:
            logger.info("%s: dropped %d suggestions overlapping active rules", division, dropped)

        suggestions = [Suggestion(cluster, matcher.match_details(cluster)) for cluster in kept]
        return SuggestionReport(
            division=division,
            suggestions=suggestions,
            quality=build_quality_report(kept, matcher_settings.high_confidence_threshold),
            stats=report.stats,
            excluded=excluded,
            dropped_overlapping=dropped,
        )

    async def suggest_async(self, division: str, names: Sequence[str], **options) -> SuggestionReport:
        """Run suggest() on a worker thread so the event loop stays responsive."""
        return await asyncio.to_thread(self.suggest, division, names, **options)

    def validate_rules(
        self, rules: Iterable[MergeRule], current_names: Sequence[str]
    ) -> list[RuleValidation]:
        """
        Check existing rules against the names currently present in the data.

        A rule is VALID when all its original names are still present,
        ORPHANED when none are, and NEEDS_UPDATE otherwise. For missing
        names the closest current names are proposed as replacements.
        """
        present = set(current_names)
        results: list[RuleValidation] = []
        for rule in rules:
            found = [name for name in rule.original_names if name in present]
            missing = [name for name in rule.original_names if name not in present]
            if not missing:
                status = ValidationStatus.VALID
            elif not found:
                status = ValidationStatus.ORPHANED
            else:
                status = ValidationStatus.NEEDS_UPDATE

            validation = RuleValidation(rule=rule, status=status, found=found, missing=missing)
            if missing:
                validation.replacements = self._replacements(rule, missing, current_names)
            results.append(validation)

        counts = {status: 0 for status in ValidationStatus}
        for validation in results:
            counts[validation.status] += 1
        logger.info(
            "Validated %d rules: %d valid, %d need update, %d orphaned",
            len(results),
            counts[ValidationStatus.VALID],
            counts[ValidationStatus.NEEDS_UPDATE],
            counts[ValidationStatus.ORPHANED],
        )
        return results

    def _replacements(
        self, rule: MergeRule, missing: list[str], current_names: Sequence[str]
    ) -> list[ReplacementSuggestion]:
        matcher = self.matcher_for(rule.division)
        originals = set(rule.original_names)
        candidates = list(dict.fromkeys(name for name in current_names if name not in originals))

        suggestions: list[ReplacementSuggestion] = []
        for name in missing:
            scored = [
                (candidate, matcher.similarity(name, candidate).score) for candidate in candidates
            ]
            scored = [item for item in scored if item[1] >= REPLACEMENT_THRESHOLD]
            scored.sort(key=lambda item: item[1], reverse=True)
            if not scored:
                continue
            best, best_score = scored[0]
            suggestions.append(
                ReplacementSuggestion(
                    missing=name,
                    replacement=best,
                    confidence=best_score,
                    alternatives=scored[1:MAX_REPLACEMENTS],
                )
            )
        return suggestions
