from __future__ import annotations

from pathlib import Path
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DIVISIONS = ("FP", "SB", "TF", "HCM")


class SimilarityWeights(BaseModel):
    exact_match: float = Field(default=1.0, ge=0.0)
    token_jaccard: float = Field(default=0.35, ge=0.0)
    levenshtein: float = Field(default=0.30, ge=0.0)
    phonetic: float = Field(default=0.6, ge=0.0)
    prefix: float = Field(default=0.2, ge=0.0)
    suffix: float = Field(default=0.15, ge=0.0)

    @model_validator(mode="after")
    def _require_positive_weight(self) -> "SimilarityWeights":
        if sum(self.model_dump().values()) <= 0:
            raise ValueError("at least one similarity weight must be positive")
        return self


class MatcherSettings(BaseModel):
    n_tokens_blocking: int = Field(default=2, ge=1)
    local_threshold: float = Field(default=0.72, ge=0.0, le=1.0)
    min_confidence_threshold: float = Field(default=0.65, ge=0.0, le=1.0)
    high_confidence_threshold: float = Field(default=0.90, ge=0.0, le=1.0)
    weights: SimilarityWeights = SimilarityWeights()
    # Consumed by the caller's persistence layer, not by matching.
    batch_write_size: int = Field(default=500, ge=1)
    cache_enabled: bool = True
    cache_ttl_ms: int = Field(default=1000 * 60 * 30, gt=0)
    cache_sweep_interval_ms: int = Field(default=60_000, gt=0)
    canonical_strategy: Literal["longest", "preferred_variant"] = "longest"

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_ms / 1000.0

    @property
    def cache_sweep_interval_seconds(self) -> float:
        return min(self.cache_sweep_interval_ms, self.cache_ttl_ms) / 1000.0


class Settings(BaseModel):
    matcher: MatcherSettings = MatcherSettings()
    divisions: Dict[str, dict] = Field(default_factory=dict)

    @field_validator("divisions", mode="before")
    @classmethod
    def _upper_division_keys(cls, value: Optional[dict]) -> dict:
        if not value:
            return {}
        return {str(key).upper(): overrides or {} for key, overrides in value.items()}

    @model_validator(mode="after")
    def _validate_overrides(self) -> "Settings":
        for division in self.divisions:
            self.for_division(division)
        return self

    def for_division(self, division: Optional[str]) -> MatcherSettings:
        """Matcher settings for a division: defaults merged with its overrides."""
        if not division:
            return self.matcher
        overrides = self.divisions.get(division.upper())
        if not overrides:
            return self.matcher
        merged = self.matcher.model_dump()
        for key, value in overrides.items():
            if key == "weights" and isinstance(value, dict):
                merged["weights"] = {**merged["weights"], **value}
            else:
                merged[key] = value
        return MatcherSettings.model_validate(merged)

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None


def load_settings(explicit_path: Optional[Path] = None) -> Settings:
    path = find_config(explicit_path)
    if path is None:
        return Settings()
    return Settings.load(path)
