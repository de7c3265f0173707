"""
Status Transition Tables and Validation

Each entity kind owns one immutable TransitionTable: the canonical status
order, human labels, and the allowed targets for every status. Tables are
built once and handed to the validator, the gate and the aggregators, so
tests can substitute alternate tables without touching module state.

Validation rules:
- Unrecognized statuses have no valid moves (False, never an exception)
- A status never transitions to itself, whatever the table says
- Otherwise the move is valid iff the target is listed for the source
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
import logging

from .statuses import (
    EntityKind,
    LeadStatus,
    JobStatus,
    LEAD_STATUS_LABELS,
    JOB_STATUS_LABELS,
)

logger = logging.getLogger(__name__)


def status_key(value: Any) -> Optional[str]:
    """Normalize an enum member or raw string to its stored key."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value
    return None


def _default_label(status: str) -> str:
    return status.replace("_", " ").title()


@dataclass(frozen=True)
class TransitionTable:
    """
    Immutable transition graph for one entity kind.

    Use TransitionTable.build() rather than the constructor; it validates
    membership and freezes the mappings.
    """
    kind: EntityKind
    order: Tuple[str, ...]
    transitions: Mapping[str, Tuple[str, ...]]
    labels: Mapping[str, str]
    success_status: Optional[str] = None

    @classmethod
    def build(
        cls,
        kind: EntityKind,
        order: Iterable[Any],
        transitions: Mapping[Any, Iterable[Any]],
        labels: Optional[Mapping[Any, str]] = None,
        success_status: Any = None,
    ) -> "TransitionTable":
        """
        Build a frozen table.

        Raises:
            ValueError: duplicate statuses, or a source/target outside the set
        """
        ordered = tuple(status_key(s) for s in order)
        if None in ordered:
            raise ValueError(f"{kind.value} statuses must be strings")
        if len(set(ordered)) != len(ordered):
            raise ValueError(f"Duplicate status in {kind.value} order")
        members = set(ordered)

        entries: Dict[str, Tuple[str, ...]] = {status: () for status in ordered}
        for source, targets in transitions.items():
            source_key = status_key(source)
            if source_key not in members:
                raise ValueError(f"Unknown {kind.value} status in table: {source!r}")
            # dict.fromkeys drops duplicates and keeps declaration order
            target_keys = tuple(dict.fromkeys(status_key(t) for t in targets))
            unknown = [t for t in target_keys if t not in members]
            if unknown:
                raise ValueError(
                    f"Unknown {kind.value} target(s) from {source_key!r}: {unknown}"
                )
            entries[source_key] = target_keys

        label_map = {status: _default_label(status) for status in ordered}
        for status, label in (labels or {}).items():
            key = status_key(status)
            if key in members:
                label_map[key] = label

        success_key = status_key(success_status) if success_status is not None else None
        if success_status is not None and success_key not in members:
            raise ValueError(f"Success status {success_status!r} is not a {kind.value} status")

        return cls(
            kind=kind,
            order=ordered,
            transitions=MappingProxyType(entries),
            labels=MappingProxyType(label_map),
            success_status=success_key,
        )

    def __contains__(self, status: Any) -> bool:
        return status_key(status) in self.transitions

    def label(self, status: Any) -> str:
        """Display label for a status; unknown statuses echo back."""
        key = status_key(status)
        if key is None:
            return str(status)
        return self.labels.get(key, key)

    @property
    def terminal_statuses(self) -> Tuple[str, ...]:
        """Statuses with no outgoing transitions, in table order."""
        return tuple(s for s in self.order if not allowed_transitions(self, s))


def is_valid_transition(table: TransitionTable, from_status: Any, to_status: Any) -> bool:
    """Check whether moving from one status to another is allowed."""
    source = status_key(from_status)
    target = status_key(to_status)
    if source is None or target is None:
        return False
    if source == target:
        return False
    return target in table.transitions.get(source, ())


def allowed_transitions(table: TransitionTable, from_status: Any) -> Tuple[str, ...]:
    """Ordered targets reachable from a status; empty if unknown or terminal."""
    source = status_key(from_status)
    if source is None:
        return ()
    return tuple(t for t in table.transitions.get(source, ()) if t != source)


class StatusTransitionValidator:
    """Validator bound to a single transition table."""

    def __init__(self, table: TransitionTable):
        self._table = table

    @property
    def table(self) -> TransitionTable:
        return self._table

    def is_valid(self, from_status: Any, to_status: Any) -> bool:
        valid = is_valid_transition(self._table, from_status, to_status)
        if not valid:
            logger.debug(
                f"Rejected {self._table.kind.value} transition {from_status!r} -> {to_status!r}"
            )
        return valid

    def allowed(self, from_status: Any) -> Tuple[str, ...]:
        return allowed_transitions(self._table, from_status)


# =============================================================================
# JOB LIFECYCLE
# =============================================================================

# Forward progress plus rework loops (punch_list <-> in_progress,
# inspection_pending <-> in_progress, completed -> punch_list). Every open
# status can be closed early; closed is terminal.
JOB_TRANSITIONS = TransitionTable.build(
    kind=EntityKind.JOB,
    order=list(JobStatus),
    transitions={
        JobStatus.PENDING_START: [
            JobStatus.MATERIALS_ORDERED, JobStatus.SCHEDULED, JobStatus.CLOSED,
        ],
        JobStatus.MATERIALS_ORDERED: [
            JobStatus.SCHEDULED, JobStatus.PENDING_START, JobStatus.CLOSED,
        ],
        JobStatus.SCHEDULED: [
            JobStatus.IN_PROGRESS, JobStatus.PENDING_START, JobStatus.CLOSED,
        ],
        JobStatus.IN_PROGRESS: [
            JobStatus.INSPECTION_PENDING, JobStatus.PUNCH_LIST,
            JobStatus.COMPLETED, JobStatus.CLOSED,
        ],
        JobStatus.INSPECTION_PENDING: [
            JobStatus.IN_PROGRESS, JobStatus.PUNCH_LIST,
            JobStatus.COMPLETED, JobStatus.CLOSED,
        ],
        JobStatus.PUNCH_LIST: [
            JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.CLOSED,
        ],
        JobStatus.COMPLETED: [
            JobStatus.WARRANTY_ACTIVE, JobStatus.PUNCH_LIST, JobStatus.CLOSED,
        ],
        JobStatus.WARRANTY_ACTIVE: [JobStatus.CLOSED],
        JobStatus.CLOSED: [],
    },
    labels=JOB_STATUS_LABELS,
    success_status=JobStatus.COMPLETED,
)


# =============================================================================
# LEAD FUNNEL
# =============================================================================

_OPEN_LEAD_STATUSES = [s for s in LeadStatus if s.is_open]
_LEAD_OUTCOMES = [LeadStatus.WON, LeadStatus.LOST, LeadStatus.ARCHIVED]


def _lead_transition_map() -> Dict[LeadStatus, list]:
    # Open stages may skip ahead but never move back
    mapping = {
        status: _OPEN_LEAD_STATUSES[index + 1:] + _LEAD_OUTCOMES
        for index, status in enumerate(_OPEN_LEAD_STATUSES)
    }
    mapping[LeadStatus.WON] = [LeadStatus.ARCHIVED]
    mapping[LeadStatus.LOST] = [LeadStatus.NEW, LeadStatus.ARCHIVED]
    mapping[LeadStatus.ARCHIVED] = []
    return mapping


LEAD_TRANSITIONS = TransitionTable.build(
    kind=EntityKind.LEAD,
    order=list(LeadStatus),
    transitions=_lead_transition_map(),
    labels=LEAD_STATUS_LABELS,
    success_status=LeadStatus.WON,
)


TRANSITION_TABLES: Mapping[EntityKind, TransitionTable] = MappingProxyType({
    EntityKind.LEAD: LEAD_TRANSITIONS,
    EntityKind.JOB: JOB_TRANSITIONS,
})


def get_transition_table(kind: Any) -> TransitionTable:
    """Look up the default table for an entity kind ("lead" or "job")."""
    return TRANSITION_TABLES[EntityKind(status_key(kind))]
