"""Lead scoring: additive point model with hot/warm/cool tiers."""

from .rules import (
    ScoreTier,
    ScoringRules,
    DEFAULT_SCORING_RULES,
    DEFAULT_JOB_TYPE_POINTS,
    DEFAULT_URGENCY_POINTS,
    DEFAULT_TIER_THRESHOLDS,
)
from .lead_scorer import LeadScorer, ScoreInput, ScoreResult, score_lead

__all__ = [
    "ScoreTier",
    "ScoringRules",
    "DEFAULT_SCORING_RULES",
    "DEFAULT_JOB_TYPE_POINTS",
    "DEFAULT_URGENCY_POINTS",
    "DEFAULT_TIER_THRESHOLDS",
    "LeadScorer",
    "ScoreInput",
    "ScoreResult",
    "score_lead",
]
