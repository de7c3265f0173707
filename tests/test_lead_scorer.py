"""
Tests for the Lead Scorer

Verifies:
1. Point tables and the fixed factor order
2. Photo cap, insurance and large-roof bonuses
3. Tier boundaries (lower edge inclusive)
4. Clamping applies to the total only
5. Missing and malformed inputs score zero
6. Ranking and rules replacement
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lifecycle_engine.scoring import (
    LeadScorer,
    ScoreInput,
    ScoreResult,
    ScoreTier,
    ScoringRules,
    DEFAULT_SCORING_RULES,
    score_lead,
)


@pytest.fixture
def scorer():
    return LeadScorer()


def boundary_rules(**overrides):
    """Rules where job type alone sets the score, for exact tier edges."""
    return ScoringRules(
        job_type_points={"p39": 39, "p40": 40, "p69": 69, "p70": 70},
        urgency_points={},
        **overrides,
    )


# =============================================================================
# FACTOR TESTS
# =============================================================================

class TestScoringFactors:
    """Test individual scoring signals."""

    def test_hot_lead(self, scorer):
        result = scorer.score(ScoreInput(
            job_type="full_replacement",
            timeline_urgency="emergency",
            photo_count=5,
            has_insurance_claim=True,
        ))
        assert result.score == 80
        assert result.tier == ScoreTier.HOT
        assert result.factors == (
            ("job_type", 25),
            ("urgency", 30),
            ("photos", 10),
            ("insurance_claim", 15),
        )

    def test_factor_order_is_fixed(self, scorer):
        result = scorer.score(ScoreInput(
            roof_size_sqft=3000,
            has_insurance_claim=True,
            photo_count=1,
            timeline_urgency="flexible",
            job_type="gutter",
        ))
        assert [name for name, _ in result.factors] == [
            "job_type", "urgency", "photos", "insurance_claim", "large_roof",
        ]

    def test_photo_points_capped(self, scorer):
        assert scorer.score(ScoreInput(photo_count=3)).factors == (("photos", 6),)
        assert scorer.score(ScoreInput(photo_count=20)).factors == (("photos", 10),)

    def test_large_roof_threshold_is_exclusive(self, scorer):
        assert scorer.score(ScoreInput(roof_size_sqft=2000)).factors == ()
        assert scorer.score(ScoreInput(roof_size_sqft=2000.5)).factors == (("large_roof", 5),)

    def test_keys_are_case_insensitive(self, scorer):
        result = scorer.score(ScoreInput(job_type=" Repair ", timeline_urgency="ASAP"))
        assert result.factors == (("job_type", 15), ("urgency", 20))

    def test_more_signals_never_lower_score(self, scorer):
        base = ScoreInput(job_type="repair", timeline_urgency="within_month")
        richer = ScoreInput(
            job_type="repair",
            timeline_urgency="within_month",
            photo_count=4,
            has_insurance_claim=True,
            roof_size_sqft=2500,
        )
        assert scorer.score(richer).score >= scorer.score(base).score


# =============================================================================
# INVALID INPUT TESTS
# =============================================================================

class TestInvalidInputs:
    """Scoring never fails; bad signals contribute nothing."""

    def test_empty_input(self, scorer):
        result = scorer.score(ScoreInput())
        assert result.score == 0
        assert result.tier == ScoreTier.COOL
        assert result.factors == ()

    def test_unknown_categories(self, scorer):
        result = scorer.score(ScoreInput(job_type="solar", timeline_urgency="someday"))
        assert result.factors == ()

    @pytest.mark.parametrize("photos", [-3, None, "many", True, float("nan")])
    def test_bad_photo_counts(self, scorer, photos):
        assert scorer.score(ScoreInput(photo_count=photos)).factors == ()

    def test_numeric_strings_accepted(self, scorer):
        result = scorer.score(ScoreInput(photo_count="2", roof_size_sqft="2500"))
        assert result.factors == (("photos", 4), ("large_roof", 5))

    @pytest.mark.parametrize("roof", [None, "huge", float("nan"), float("inf"), True])
    def test_bad_roof_sizes(self, scorer, roof):
        assert scorer.score(ScoreInput(roof_size_sqft=roof)).factors == ()

    def test_insurance_flag_strings(self, scorer):
        assert scorer.score(ScoreInput(has_insurance_claim="yes")).score == 15
        assert scorer.score(ScoreInput(has_insurance_claim="no")).score == 0
        assert scorer.score(ScoreInput(has_insurance_claim=None)).score == 0


# =============================================================================
# TIER TESTS
# =============================================================================

class TestTiers:
    """Tier ladder: hot >= 70, warm >= 40, else cool."""

    @pytest.mark.parametrize("job_type,tier", [
        ("p39", ScoreTier.COOL),
        ("p40", ScoreTier.WARM),
        ("p69", ScoreTier.WARM),
        ("p70", ScoreTier.HOT),
    ])
    def test_boundaries(self, job_type, tier):
        result = LeadScorer(boundary_rules()).score(ScoreInput(job_type=job_type))
        assert result.tier == tier

    def test_warm_default_lead(self, scorer):
        result = scorer.score(ScoreInput(job_type="repair", timeline_urgency="asap", photo_count=3))
        assert result.score == 41
        assert result.tier == ScoreTier.WARM

    def test_tier_labels(self):
        assert ScoreTier.HOT.display_name == "Hot"
        assert ScoreTier.HOT.emoji == "🔥"
        assert ScoreTier.WARM.emoji == "⭐"
        assert ScoreTier.COOL.emoji == ""

    def test_thresholds_sorted_regardless_of_input_order(self):
        rules = ScoringRules(tier_thresholds=((ScoreTier.WARM, 40), (ScoreTier.HOT, 70)))
        assert rules.tier_thresholds == ((ScoreTier.HOT, 70), (ScoreTier.WARM, 40))
        assert rules.tier_for(75) == ScoreTier.HOT


# =============================================================================
# CLAMPING TESTS
# =============================================================================

class TestClamping:
    """Only the final total is clamped."""

    def test_clamped_to_max(self):
        rules = ScoringRules(max_score=50)
        result = LeadScorer(rules).score(
            ScoreInput(job_type="full_replacement", timeline_urgency="emergency")
        )
        assert result.score == 50
        assert result.raw_total == 55
        assert result.factors == (("job_type", 25), ("urgency", 30))

    def test_clamped_to_min(self):
        rules = ScoringRules(job_type_points={"warranty_claim": -10})
        result = LeadScorer(rules).score(ScoreInput(job_type="warranty_claim"))
        assert result.score == 0
        assert result.factors == (("job_type", -10),)

    def test_default_maximum_within_range(self, scorer):
        result = scorer.score(ScoreInput(
            job_type="full_replacement",
            timeline_urgency="emergency",
            photo_count=50,
            has_insurance_claim=True,
            roof_size_sqft=5000,
        ))
        assert result.score == 85
        assert 0 <= result.score <= 100


# =============================================================================
# RULES, RANKING AND SERIALIZATION TESTS
# =============================================================================

class TestLeadScorer:
    """Scorer-level behavior."""

    def test_default_rules(self, scorer):
        assert scorer.rules is DEFAULT_SCORING_RULES

    def test_rules_are_immutable(self):
        with pytest.raises(TypeError):
            DEFAULT_SCORING_RULES.job_type_points["repair"] = 99

    def test_replace_rules(self, scorer):
        scorer.replace_rules(ScoringRules(job_type_points={"repair": 60}))
        assert scorer.score(ScoreInput(job_type="repair")).score == 60
        assert DEFAULT_SCORING_RULES.job_type_points["repair"] == 15

    def test_rank_hottest_first(self, scorer):
        ranked = scorer.rank({
            "cold": ScoreInput(job_type="inspection"),
            "hot": ScoreInput(job_type="full_replacement", timeline_urgency="emergency"),
            "warm": ScoreInput(job_type="repair", timeline_urgency="asap"),
        })
        assert [key for key, _ in ranked] == ["hot", "warm", "cold"]

    def test_rank_ties_keep_input_order(self, scorer):
        ranked = scorer.rank([
            ("a", ScoreInput(job_type="repair")),
            ("b", ScoreInput(job_type="repair")),
            ("c", ScoreInput(job_type="repair")),
        ])
        assert [key for key, _ in ranked] == ["a", "b", "c"]

    def test_from_record(self, scorer):
        record = {
            "job_type": "repair",
            "timeline_urgency": "asap",
            "photos_count": 2,
            "has_insurance_claim": True,
            "roof_size_sqft": None,
        }
        result = scorer.score(ScoreInput.from_record(record))
        assert result.score == 15 + 20 + 4 + 15

    def test_from_record_photo_count_fallback(self):
        assert ScoreInput.from_record({"photo_count": 3}).photo_count == 3

    def test_to_dict(self):
        result = score_lead(ScoreInput(job_type="full_replacement", timeline_urgency="emergency",
                                       has_insurance_claim=True))
        data = result.to_dict()
        assert data["score"] == 70
        assert data["tier"] == "hot"
        assert data["tier_label"] == "Hot"
        assert data["factors"][0] == {"name": "job_type", "points": 25}
        assert isinstance(result, ScoreResult)
