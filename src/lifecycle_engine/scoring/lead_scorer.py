"""
Lead Scorer

Additive point model ranking leads by urgency and job value.

Evaluation order is fixed so the factor list is reproducible:
1. Job type          - lookup table
2. Timeline urgency  - lookup table
3. Photos            - per-photo points up to a cap
4. Insurance claim   - flat bonus
5. Large roof        - flat bonus above a square-footage threshold

Only the final total is clamped; factors always show the points each
signal actually contributed. Missing or invalid inputs score zero, so
scoring never fails.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging
import math

from .rules import DEFAULT_SCORING_RULES, ScoreTier, ScoringRules

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "y", "1"}


@dataclass(frozen=True)
class ScoreInput:
    """Signals about one lead, as captured by the intake funnel."""
    job_type: Optional[str] = None
    timeline_urgency: Optional[str] = None
    photo_count: Any = 0
    has_insurance_claim: Any = False
    roof_size_sqft: Any = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ScoreInput":
        """Build from an intake record using the stored field names."""
        photo_count = record.get("photos_count")
        if photo_count is None:
            photo_count = record.get("photo_count", 0)
        return cls(
            job_type=record.get("job_type"),
            timeline_urgency=record.get("timeline_urgency"),
            photo_count=photo_count,
            has_insurance_claim=record.get("has_insurance_claim", False),
            roof_size_sqft=record.get("roof_size_sqft"),
        )


@dataclass(frozen=True)
class ScoreResult:
    """Score, tier and the ordered (factor, points) breakdown."""
    score: int
    tier: ScoreTier
    factors: Tuple[Tuple[str, int], ...] = ()

    @property
    def raw_total(self) -> int:
        """Sum of factor points before clamping."""
        return sum(points for _, points in self.factors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier.value,
            "tier_label": self.tier.display_name,
            "tier_emoji": self.tier.emoji,
            "factors": [{"name": name, "points": points} for name, points in self.factors],
        }


def _as_key(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    return key or None


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return max(int(value.strip()), 0)
        except ValueError:
            return 0
    return 0


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


class LeadScorer:
    """
    Scores leads against a ScoringRules value.

    Thread-safe: each call reads the rules reference once, and
    replace_rules() swaps in a whole new immutable rules object.
    """

    def __init__(self, rules: Optional[ScoringRules] = None):
        self._rules = rules or DEFAULT_SCORING_RULES

    @property
    def rules(self) -> ScoringRules:
        return self._rules

    def replace_rules(self, rules: ScoringRules) -> None:
        """Atomically switch to a new rules object for subsequent calls."""
        self._rules = rules
        logger.info("Lead scoring rules replaced")

    def score(self, score_input: ScoreInput) -> ScoreResult:
        """Score a single lead."""
        rules = self._rules
        factors: List[Tuple[str, int]] = []

        job_type = _as_key(score_input.job_type)
        if job_type in rules.job_type_points:
            factors.append(("job_type", rules.job_type_points[job_type]))

        urgency = _as_key(score_input.timeline_urgency)
        if urgency in rules.urgency_points:
            factors.append(("urgency", rules.urgency_points[urgency]))

        photos = _as_count(score_input.photo_count)
        if photos > 0:
            factors.append(("photos", min(photos * rules.points_per_photo, rules.photo_points_cap)))

        if _as_flag(score_input.has_insurance_claim):
            factors.append(("insurance_claim", rules.insurance_claim_points))

        roof_size = _as_number(score_input.roof_size_sqft)
        if roof_size is not None and roof_size > rules.large_roof_threshold_sqft:
            factors.append(("large_roof", rules.large_roof_points))

        total = sum(points for _, points in factors)
        score = max(rules.min_score, min(total, rules.max_score))

        return ScoreResult(score=score, tier=rules.tier_for(score), factors=tuple(factors))

    def rank(
        self,
        inputs: Union[Mapping[Any, ScoreInput], Iterable[Tuple[Any, ScoreInput]]],
    ) -> List[Tuple[Any, ScoreResult]]:
        """
        Score many leads and order them hottest first.

        Args:
            inputs: Mapping or (key, ScoreInput) pairs, e.g. lead ID → input

        Returns:
            (key, ScoreResult) pairs sorted by score descending; ties keep
            their input order
        """
        pairs = inputs.items() if isinstance(inputs, Mapping) else inputs
        scored = [(key, self.score(score_input)) for key, score_input in pairs]
        return sorted(scored, key=lambda item: item[1].score, reverse=True)


def score_lead(score_input: ScoreInput, rules: Optional[ScoringRules] = None) -> ScoreResult:
    """Score one lead with the given (or default) rules."""
    return LeadScorer(rules).score(score_input)
