"""Scoring tables and tier thresholds for lead prioritization."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class ScoreTier(str, Enum):
    """Coarse lead priority derived from the numeric score."""
    HOT = "hot"
    WARM = "warm"
    COOL = "cool"

    @property
    def display_name(self) -> str:
        return self.value.title()

    @property
    def emoji(self) -> str:
        return {ScoreTier.HOT: "🔥", ScoreTier.WARM: "⭐"}.get(self, "")


DEFAULT_JOB_TYPE_POINTS: Mapping[str, int] = {
    "full_replacement": 25,
    "repair": 15,
    "gutter": 10,
    "maintenance": 8,
    "inspection": 5,
}

DEFAULT_URGENCY_POINTS: Mapping[str, int] = {
    "emergency": 30,
    "asap": 20,
    "within_month": 12,
    "within_3_months": 6,
    "flexible": 2,
}

# Highest threshold first; anything below the last rung is COOL
DEFAULT_TIER_THRESHOLDS: Tuple[Tuple[ScoreTier, int], ...] = (
    (ScoreTier.HOT, 70),
    (ScoreTier.WARM, 40),
)


@dataclass(frozen=True)
class ScoringRules:
    """
    Immutable point tables and thresholds for LeadScorer.

    Replace the whole object to change business rules; never mutate one
    that a scorer may be reading.
    """
    job_type_points: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_JOB_TYPE_POINTS))
    urgency_points: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_URGENCY_POINTS))
    points_per_photo: int = 2
    photo_points_cap: int = 10
    insurance_claim_points: int = 15
    large_roof_points: int = 5
    large_roof_threshold_sqft: float = 2000
    tier_thresholds: Tuple[Tuple[ScoreTier, int], ...] = DEFAULT_TIER_THRESHOLDS
    min_score: int = 0
    max_score: int = 100

    def __post_init__(self):
        object.__setattr__(self, "job_type_points", MappingProxyType(dict(self.job_type_points)))
        object.__setattr__(self, "urgency_points", MappingProxyType(dict(self.urgency_points)))
        ladder = tuple(
            sorted(
                ((ScoreTier(tier), int(threshold)) for tier, threshold in self.tier_thresholds),
                key=lambda rung: rung[1],
                reverse=True,
            )
        )
        object.__setattr__(self, "tier_thresholds", ladder)

    def tier_for(self, score: int) -> ScoreTier:
        """Map a clamped score onto the tier ladder (lower edge inclusive)."""
        for tier, threshold in self.tier_thresholds:
            if score >= threshold:
                return tier
        return ScoreTier.COOL


DEFAULT_SCORING_RULES = ScoringRules()
