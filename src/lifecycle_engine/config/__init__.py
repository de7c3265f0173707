"""Configuration module for the lifecycle engine."""

from .settings import EngineSettings, get_settings
from .scoring_loader import (
    BUNDLED_RULES_PATH,
    ScoringRulesConfig,
    load_scoring_rules,
    parse_scoring_rules,
)

__all__ = [
    "EngineSettings",
    "get_settings",
    "BUNDLED_RULES_PATH",
    "ScoringRulesConfig",
    "load_scoring_rules",
    "parse_scoring_rules",
]
