"""
Lifecycle Status Engine

Finite-state model for leads (sales funnel) and jobs (production).

Design Principles:
- Closed status sets: anything else is "unrecognized" and has no moves
- Immutable tables: built once, passed explicitly to whoever needs them
- One write path: status changes go through TransitionGate
"""

from .statuses import (
    EntityKind,
    LeadStatus,
    JobStatus,
    LEAD_STATUS_LABELS,
    JOB_STATUS_LABELS,
)

from .transitions import (
    TransitionTable,
    StatusTransitionValidator,
    is_valid_transition,
    allowed_transitions,
    get_transition_table,
    LEAD_TRANSITIONS,
    JOB_TRANSITIONS,
    TRANSITION_TABLES,
)

from .gate import (
    StatusEntity,
    StatusChange,
    TransitionResult,
    TransitionGate,
    job_milestone_updates,
)

__all__ = [
    # Statuses
    "EntityKind",
    "LeadStatus",
    "JobStatus",
    "LEAD_STATUS_LABELS",
    "JOB_STATUS_LABELS",
    # Tables and validation
    "TransitionTable",
    "StatusTransitionValidator",
    "is_valid_transition",
    "allowed_transitions",
    "get_transition_table",
    "LEAD_TRANSITIONS",
    "JOB_TRANSITIONS",
    "TRANSITION_TABLES",
    # Gate
    "StatusEntity",
    "StatusChange",
    "TransitionResult",
    "TransitionGate",
    "job_milestone_updates",
]
