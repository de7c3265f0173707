"""
Lifecycle Statuses and Enumerations

Defines the closed status sets for the two tracked entity kinds:
- Leads move through the sales funnel (new → won/lost/archived)
- Jobs move through production (pending_start → closed), with rework loops

Statuses are stored upstream as raw strings, so every enum here is a
``str`` enum and compares equal to its stored value.
"""

from enum import Enum
from typing import Dict, Optional


class EntityKind(str, Enum):
    """Kinds of records that carry a lifecycle status."""
    LEAD = "lead"
    JOB = "job"


class LeadStatus(str, Enum):
    """Sales funnel statuses, in funnel order."""
    NEW = "new"
    INTAKE_STARTED = "intake_started"
    INTAKE_COMPLETE = "intake_complete"
    ESTIMATE_GENERATED = "estimate_generated"
    ESTIMATE_SENT = "estimate_sent"
    CONSULTATION_SCHEDULED = "consultation_scheduled"
    QUOTE_SENT = "quote_sent"
    WON = "won"
    LOST = "lost"
    ARCHIVED = "archived"

    @property
    def display_name(self) -> str:
        """Human-readable status name."""
        return LEAD_STATUS_LABELS[self]

    @property
    def is_open(self) -> bool:
        """Whether the lead is still being worked."""
        return self not in (LeadStatus.WON, LeadStatus.LOST, LeadStatus.ARCHIVED)

    @classmethod
    def from_string(cls, value: str) -> Optional["LeadStatus"]:
        """Convert a stored value to LeadStatus, or None if unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return None


class JobStatus(str, Enum):
    """Production job statuses, in lifecycle order."""
    PENDING_START = "pending_start"
    MATERIALS_ORDERED = "materials_ordered"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    INSPECTION_PENDING = "inspection_pending"
    PUNCH_LIST = "punch_list"
    COMPLETED = "completed"
    WARRANTY_ACTIVE = "warranty_active"
    CLOSED = "closed"

    @property
    def display_name(self) -> str:
        """Human-readable status name."""
        return JOB_STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        """Closed jobs accept no further transitions."""
        return self == JobStatus.CLOSED

    @classmethod
    def from_string(cls, value: str) -> Optional["JobStatus"]:
        """Convert a stored value to JobStatus, or None if unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return None


LEAD_STATUS_LABELS: Dict[LeadStatus, str] = {
    LeadStatus.NEW: "New",
    LeadStatus.INTAKE_STARTED: "Intake Started",
    LeadStatus.INTAKE_COMPLETE: "Intake Complete",
    LeadStatus.ESTIMATE_GENERATED: "Estimate Generated",
    LeadStatus.ESTIMATE_SENT: "Estimate Sent",
    LeadStatus.CONSULTATION_SCHEDULED: "Consultation Scheduled",
    LeadStatus.QUOTE_SENT: "Quote Sent",
    LeadStatus.WON: "Won",
    LeadStatus.LOST: "Lost",
    LeadStatus.ARCHIVED: "Archived",
}

JOB_STATUS_LABELS: Dict[JobStatus, str] = {
    JobStatus.PENDING_START: "Pending Start",
    JobStatus.MATERIALS_ORDERED: "Materials Ordered",
    JobStatus.SCHEDULED: "Scheduled",
    JobStatus.IN_PROGRESS: "In Progress",
    JobStatus.INSPECTION_PENDING: "Inspection Pending",
    JobStatus.PUNCH_LIST: "Punch List",
    JobStatus.COMPLETED: "Completed",
    JobStatus.WARRANTY_ACTIVE: "Warranty Active",
    JobStatus.CLOSED: "Closed",
}
