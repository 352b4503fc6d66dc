from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.matching import CandidateCluster


@dataclass(frozen=True, slots=True)
class StatusLine:
    """One "<subject>: <STATUS> (<detail>)" report line."""

    subject: str
    status: str
    detail: Optional[str] = None

    def render(self) -> str:
        if self.detail:
            return f"{self.subject}: {self.status} ({self.detail})"
        return f"{self.subject}: {self.status}"


def percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def rule_status(canonical_name: str, status: str, found: int, missing: int) -> str:
    return StatusLine(canonical_name, status, f"{found} found, {missing} missing").render()


def cache_status(hit_rate: Optional[float]) -> str:
    if hit_rate is None:
        return StatusLine("Similarity cache", "DISABLED").render()
    return StatusLine("Similarity cache", "ENABLED", f"hit rate {percent(hit_rate)}").render()


def needs_review(cluster_size: int, confidence: float) -> str:
    return StatusLine(
        "Large group", "REVIEW", f"{cluster_size} customers at {percent(confidence)}"
    ).render()


def cluster_lines(position: int, cluster: CandidateCluster) -> list[str]:
    lines = [
        f"[{position}] {cluster.suggested_canonical_name} "
        f"({cluster.size} customers, {percent(cluster.confidence)})"
    ]
    lines.extend(f"    - {member}" for member in cluster.members)
    return lines
