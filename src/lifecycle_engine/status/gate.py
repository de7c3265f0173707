"""
Transition Gate

The single write-path entry point for status changes. Callers hand over the
entity snapshot and the requested status; the gate either returns the
updated (new) entity with an audit record, or raises InvalidTransition.
Persisting the result stays with the caller.

Job milestone dates follow the production write path:
- entering IN_PROGRESS stamps actual_start (if not already set)
- entering COMPLETED or CLOSED stamps actual_end (only once work started)
- entering WARRANTY_ACTIVE stamps warranty_start_date
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..errors import InvalidTransition
from ..logging_config import get_logger
from .statuses import EntityKind, JobStatus
from .transitions import TransitionTable, allowed_transitions, is_valid_transition, status_key


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StatusEntity:
    """Snapshot of a lead or job as far as the lifecycle is concerned."""
    entity_id: str
    status: str
    actual_start: Optional[date] = None
    actual_end: Optional[date] = None
    warranty_start_date: Optional[date] = None


@dataclass(frozen=True)
class StatusChange:
    """Audit record of one accepted status change."""
    entity_id: str
    from_status: str
    to_status: str
    changed_at: datetime
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    field_updates: Dict[str, date] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_at": self.changed_at.isoformat(),
            "changed_by": self.changed_by,
            "notes": self.notes,
            "field_updates": {k: v.isoformat() for k, v in self.field_updates.items()},
        }


@dataclass(frozen=True)
class TransitionResult:
    entity: StatusEntity
    change: StatusChange


def job_milestone_updates(entity: StatusEntity, to_status: str, today: date) -> Dict[str, date]:
    """Date fields a job status change fills in."""
    updates: Dict[str, date] = {}
    if to_status == JobStatus.IN_PROGRESS and entity.actual_start is None:
        updates["actual_start"] = today
    if to_status in (JobStatus.COMPLETED, JobStatus.CLOSED) and entity.actual_start is not None:
        updates["actual_end"] = today
    if to_status == JobStatus.WARRANTY_ACTIVE:
        updates["warranty_start_date"] = today
    return updates


class TransitionGate:
    """
    Mandatory gate for status changes on one entity kind.

    Thread-safe: holds only the immutable table and a clock.
    """

    def __init__(self, table: TransitionTable, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            table: Transition table for the entity kind
            clock: Returns the current time; defaults to UTC now
        """
        self._table = table
        self._clock = clock or _utcnow
        self._log = get_logger(__name__, entity_kind=table.kind.value)

    @property
    def table(self) -> TransitionTable:
        return self._table

    def check(self, entity: StatusEntity, to_status: Any) -> None:
        """
        Validate a status change without applying it.

        Raises:
            InvalidTransition: if the table does not allow the move
        """
        if not is_valid_transition(self._table, entity.status, to_status):
            allowed = allowed_transitions(self._table, entity.status)
            self._log.info(
                f"Blocked {entity.entity_id}: {entity.status!r} -> {to_status!r}"
            )
            raise InvalidTransition(
                entity_id=entity.entity_id,
                from_status=status_key(entity.status) or str(entity.status),
                to_status=status_key(to_status) or str(to_status),
                allowed=allowed,
            )

    def transition(
        self,
        entity: StatusEntity,
        to_status: Any,
        changed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """
        Apply a status change to an entity snapshot.

        Args:
            entity: Current snapshot
            to_status: Requested status
            changed_by: Optional actor ID for the audit record
            notes: Optional free-text note

        Returns:
            TransitionResult with the updated entity and the change record

        Raises:
            InvalidTransition: if the table does not allow the move
        """
        self.check(entity, to_status)

        from_key = status_key(entity.status)
        to_key = status_key(to_status)
        now = self._clock()

        updates: Dict[str, date] = {}
        if self._table.kind == EntityKind.JOB:
            updates = job_milestone_updates(entity, to_key, now.date())

        updated = replace(entity, status=to_key, **updates)
        change = StatusChange(
            entity_id=entity.entity_id,
            from_status=from_key,
            to_status=to_key,
            changed_at=now,
            changed_by=changed_by,
            notes=notes,
            field_updates=updates,
        )

        self._log.info(
            f"{entity.entity_id}: {from_key} -> {to_key}",
            extra={"extra_data": {"changed_by": changed_by}},
        )
        return TransitionResult(entity=updated, change=change)
