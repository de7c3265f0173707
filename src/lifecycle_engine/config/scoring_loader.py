"""
Scoring Rules Loader.

Loads lead scoring tables from YAML so business rules can change without
touching the scoring algorithm. The bundled scoring_rules.yaml mirrors the
code defaults; LIFECYCLE_SCORING_RULES_PATH points at a replacement file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import ScoringConfigError
from ..scoring.rules import ScoreTier, ScoringRules
from .settings import get_settings

logger = logging.getLogger(__name__)

BUNDLED_RULES_PATH = Path(__file__).parent / "scoring_rules.yaml"


class PhotoPoints(BaseModel):
    per_photo: int = Field(default=2, ge=0)
    cap: int = Field(default=10, ge=0)


class LargeRoofBonus(BaseModel):
    threshold_sqft: float = Field(default=2000, ge=0)
    points: int = Field(default=5, ge=0)


class TierThresholds(BaseModel):
    hot: int = Field(default=70, ge=0)
    warm: int = Field(default=40, ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "TierThresholds":
        if self.warm > self.hot:
            raise ValueError("warm threshold must not exceed hot threshold")
        return self


class ScoringRulesConfig(BaseModel):
    """Validated shape of a scoring rules YAML file."""
    version: str = "1"
    job_type_points: Dict[str, int] = Field(default_factory=dict)
    urgency_points: Dict[str, int] = Field(default_factory=dict)
    photos: PhotoPoints = Field(default_factory=PhotoPoints)
    insurance_claim_points: int = Field(default=15, ge=0)
    large_roof: LargeRoofBonus = Field(default_factory=LargeRoofBonus)
    tiers: TierThresholds = Field(default_factory=TierThresholds)
    max_score: int = Field(default=100, gt=0)

    @model_validator(mode="after")
    def _non_negative_points(self) -> "ScoringRulesConfig":
        for table_name in ("job_type_points", "urgency_points"):
            negative = {k: v for k, v in getattr(self, table_name).items() if v < 0}
            if negative:
                raise ValueError(f"{table_name} must be non-negative: {negative}")
        return self

    def to_rules(self) -> ScoringRules:
        return ScoringRules(
            job_type_points={k.lower(): v for k, v in self.job_type_points.items()},
            urgency_points={k.lower(): v for k, v in self.urgency_points.items()},
            points_per_photo=self.photos.per_photo,
            photo_points_cap=self.photos.cap,
            insurance_claim_points=self.insurance_claim_points,
            large_roof_points=self.large_roof.points,
            large_roof_threshold_sqft=self.large_roof.threshold_sqft,
            tier_thresholds=(
                (ScoreTier.HOT, self.tiers.hot),
                (ScoreTier.WARM, self.tiers.warm),
            ),
            max_score=self.max_score,
        )


def parse_scoring_rules(data: Any, source: str = "<data>") -> ScoringRules:
    """
    Validate already-parsed YAML/JSON data into ScoringRules.

    Raises:
        ScoringConfigError: if the data does not match the expected shape
    """
    if not isinstance(data, dict):
        raise ScoringConfigError(f"Scoring rules in {source} must be a mapping")
    try:
        config = ScoringRulesConfig.model_validate(data)
    except ValidationError as e:
        raise ScoringConfigError(f"Invalid scoring rules in {source}: {e}") from e
    return config.to_rules()


def load_scoring_rules(path: Optional[Path] = None) -> ScoringRules:
    """
    Load scoring rules from a YAML file.

    Args:
        path: YAML file. Defaults to LIFECYCLE_SCORING_RULES_PATH, then the
              bundled scoring_rules.yaml.

    Raises:
        ScoringConfigError: if the file is missing, unreadable or invalid
    """
    path = Path(path or get_settings().scoring_rules_path or BUNDLED_RULES_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ScoringConfigError(f"Cannot read scoring rules {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ScoringConfigError(f"Malformed YAML in {path}: {e}") from e

    rules = parse_scoring_rules(data, source=str(path))
    logger.info(f"Loaded lead scoring rules from {path}")
    return rules
