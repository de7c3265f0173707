"""
Lead/Job Lifecycle & Pipeline Engine

Synchronous, side-effect-free decisions and aggregations for the roofing
CRM: status transitions for leads and jobs, lead scoring, funnel/pipeline
reports, receivable aging and funnel velocity.
"""

from .errors import ErrorCode, LifecycleError, InvalidTransition, ScoringConfigError
from .status import (
    EntityKind,
    LeadStatus,
    JobStatus,
    TransitionTable,
    StatusTransitionValidator,
    TransitionGate,
    StatusEntity,
    is_valid_transition,
    allowed_transitions,
    get_transition_table,
    LEAD_TRANSITIONS,
    JOB_TRANSITIONS,
)
from .scoring import LeadScorer, ScoreInput, ScoreResult, ScoreTier, ScoringRules
from .pipeline import PipelineAggregator, AgingBucketer, VelocityAnalyzer

__version__ = "1.0.0"

__all__ = [
    "ErrorCode",
    "LifecycleError",
    "InvalidTransition",
    "ScoringConfigError",
    "EntityKind",
    "LeadStatus",
    "JobStatus",
    "TransitionTable",
    "StatusTransitionValidator",
    "TransitionGate",
    "StatusEntity",
    "is_valid_transition",
    "allowed_transitions",
    "get_transition_table",
    "LEAD_TRANSITIONS",
    "JOB_TRANSITIONS",
    "LeadScorer",
    "ScoreInput",
    "ScoreResult",
    "ScoreTier",
    "ScoringRules",
    "PipelineAggregator",
    "AgingBucketer",
    "VelocityAnalyzer",
]
