"""
Tests for Status Transition Tables

Verifies:
1. Lead and job status enumerations
2. Job production lifecycle (rework loops, closed is terminal)
3. Lead funnel (forward-only, outcomes)
4. Unknown statuses and self-transitions are never valid
5. Table construction rejects inconsistent graphs
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lifecycle_engine.status import (
    EntityKind,
    LeadStatus,
    JobStatus,
    TransitionTable,
    StatusTransitionValidator,
    LEAD_TRANSITIONS,
    JOB_TRANSITIONS,
    is_valid_transition,
    allowed_transitions,
    get_transition_table,
)


# =============================================================================
# STATUS ENUM TESTS
# =============================================================================

class TestStatuses:
    """Test status enumerations."""

    def test_statuses_compare_to_stored_strings(self):
        assert LeadStatus.NEW == "new"
        assert JobStatus.IN_PROGRESS == "in_progress"

    def test_display_names(self):
        assert LeadStatus.CONSULTATION_SCHEDULED.display_name == "Consultation Scheduled"
        assert JobStatus.PENDING_START.display_name == "Pending Start"

    def test_open_leads(self):
        assert LeadStatus.NEW.is_open
        assert LeadStatus.QUOTE_SENT.is_open
        assert not LeadStatus.WON.is_open
        assert not LeadStatus.LOST.is_open
        assert not LeadStatus.ARCHIVED.is_open

    def test_only_closed_job_is_terminal(self):
        assert [s for s in JobStatus if s.is_terminal] == [JobStatus.CLOSED]

    def test_from_string(self):
        assert LeadStatus.from_string("won") == LeadStatus.WON
        assert LeadStatus.from_string("bogus") is None
        assert JobStatus.from_string("scheduled") == JobStatus.SCHEDULED
        assert JobStatus.from_string("") is None


# =============================================================================
# JOB LIFECYCLE TESTS
# =============================================================================

class TestJobTransitions:
    """Test the production job lifecycle."""

    def test_table_is_dense(self):
        """Every job status has an entry, even terminal ones."""
        assert set(JOB_TRANSITIONS.transitions) == {s.value for s in JobStatus}
        assert JOB_TRANSITIONS.order == tuple(s.value for s in JobStatus)

    def test_forward_progress(self):
        assert is_valid_transition(JOB_TRANSITIONS, "pending_start", "materials_ordered")
        assert is_valid_transition(JOB_TRANSITIONS, "scheduled", "in_progress")
        assert is_valid_transition(JOB_TRANSITIONS, "in_progress", "completed")
        assert is_valid_transition(JOB_TRANSITIONS, "completed", "warranty_active")
        assert is_valid_transition(JOB_TRANSITIONS, "warranty_active", "closed")

    def test_rework_loops(self):
        assert is_valid_transition(JOB_TRANSITIONS, "punch_list", "in_progress")
        assert is_valid_transition(JOB_TRANSITIONS, "inspection_pending", "in_progress")
        assert is_valid_transition(JOB_TRANSITIONS, "completed", "punch_list")

    def test_cannot_skip_to_in_progress(self):
        assert not is_valid_transition(JOB_TRANSITIONS, "pending_start", "in_progress")
        assert not is_valid_transition(JOB_TRANSITIONS, "pending_start", "completed")

    def test_closed_is_terminal(self):
        assert allowed_transitions(JOB_TRANSITIONS, "closed") == ()
        for status in JobStatus:
            assert not is_valid_transition(JOB_TRANSITIONS, "closed", status)
        assert JOB_TRANSITIONS.terminal_statuses == ("closed",)

    def test_every_open_job_can_close(self):
        for status in JobStatus:
            if status != JobStatus.CLOSED:
                assert is_valid_transition(JOB_TRANSITIONS, status, JobStatus.CLOSED)

    def test_allowed_transitions_in_declared_order(self):
        assert allowed_transitions(JOB_TRANSITIONS, "in_progress") == (
            "inspection_pending", "punch_list", "completed", "closed",
        )

    def test_enum_and_string_inputs_agree(self):
        assert is_valid_transition(JOB_TRANSITIONS, JobStatus.SCHEDULED, "in_progress")
        assert allowed_transitions(JOB_TRANSITIONS, JobStatus.WARRANTY_ACTIVE) == ("closed",)

    def test_labels(self):
        assert JOB_TRANSITIONS.label("punch_list") == "Punch List"
        assert JOB_TRANSITIONS.label("mystery") == "mystery"


# =============================================================================
# LEAD FUNNEL TESTS
# =============================================================================

class TestLeadTransitions:
    """Test the sales funnel graph."""

    def test_table_is_dense(self):
        assert set(LEAD_TRANSITIONS.transitions) == {s.value for s in LeadStatus}

    def test_open_stages_move_forward_only(self):
        assert is_valid_transition(LEAD_TRANSITIONS, "new", "intake_started")
        assert is_valid_transition(LEAD_TRANSITIONS, "new", "quote_sent")
        assert not is_valid_transition(LEAD_TRANSITIONS, "quote_sent", "new")
        assert not is_valid_transition(LEAD_TRANSITIONS, "estimate_sent", "intake_complete")

    def test_open_stages_reach_every_outcome(self):
        for status in LeadStatus:
            if status.is_open:
                for outcome in ("won", "lost", "archived"):
                    assert is_valid_transition(LEAD_TRANSITIONS, status, outcome)

    def test_outcomes(self):
        assert allowed_transitions(LEAD_TRANSITIONS, "won") == ("archived",)
        assert allowed_transitions(LEAD_TRANSITIONS, "lost") == ("new", "archived")
        assert allowed_transitions(LEAD_TRANSITIONS, "archived") == ()

    def test_success_statuses(self):
        assert LEAD_TRANSITIONS.success_status == "won"
        assert JOB_TRANSITIONS.success_status == "completed"


# =============================================================================
# INVALID INPUT TESTS
# =============================================================================

class TestInvalidInputs:
    """Unknown statuses answer False, never raise."""

    @pytest.mark.parametrize("table", [LEAD_TRANSITIONS, JOB_TRANSITIONS])
    def test_self_transitions_never_valid(self, table):
        for status in table.order:
            assert not is_valid_transition(table, status, status)

    def test_self_loop_in_custom_table_is_ignored(self):
        table = TransitionTable.build(
            kind=EntityKind.LEAD,
            order=["a", "b"],
            transitions={"a": ["a", "b"]},
        )
        assert not is_valid_transition(table, "a", "a")
        assert allowed_transitions(table, "a") == ("b",)

    def test_unknown_statuses(self):
        assert not is_valid_transition(JOB_TRANSITIONS, "bogus", "closed")
        assert not is_valid_transition(JOB_TRANSITIONS, "scheduled", "bogus")
        assert allowed_transitions(JOB_TRANSITIONS, "bogus") == ()

    @pytest.mark.parametrize("value", [None, 42, "", "IN_PROGRESS"])
    def test_non_status_values(self, value):
        assert not is_valid_transition(JOB_TRANSITIONS, value, "closed")
        assert not is_valid_transition(JOB_TRANSITIONS, "scheduled", value)

    def test_allowed_for_none(self):
        assert allowed_transitions(LEAD_TRANSITIONS, None) == ()


# =============================================================================
# TABLE CONSTRUCTION TESTS
# =============================================================================

class TestTransitionTable:
    """Test TransitionTable.build validation."""

    def test_duplicate_status_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            TransitionTable.build(EntityKind.JOB, ["a", "a"], {})

    def test_unknown_source_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            TransitionTable.build(EntityKind.JOB, ["a", "b"], {"c": ["a"]})

    def test_unknown_target_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            TransitionTable.build(EntityKind.JOB, ["a", "b"], {"a": ["c"]})

    def test_bad_success_status_rejected(self):
        with pytest.raises(ValueError):
            TransitionTable.build(EntityKind.JOB, ["a"], {}, success_status="z")

    def test_duplicate_targets_collapsed(self):
        table = TransitionTable.build(EntityKind.JOB, ["a", "b"], {"a": ["b", "b"]})
        assert table.transitions["a"] == ("b",)
        assert table.transitions["b"] == ()

    def test_default_labels(self):
        table = TransitionTable.build(EntityKind.JOB, ["on_hold"], {})
        assert table.label("on_hold") == "On Hold"

    def test_table_is_immutable(self):
        with pytest.raises(TypeError):
            JOB_TRANSITIONS.transitions["closed"] = ("pending_start",)

    def test_contains(self):
        assert "won" in LEAD_TRANSITIONS
        assert LeadStatus.WON in LEAD_TRANSITIONS
        assert "closed" not in LEAD_TRANSITIONS


# =============================================================================
# VALIDATOR TESTS
# =============================================================================

class TestStatusTransitionValidator:
    """Test the table-bound validator."""

    def test_lookup_by_kind(self):
        assert get_transition_table("job") is JOB_TRANSITIONS
        assert get_transition_table(EntityKind.LEAD) is LEAD_TRANSITIONS

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            get_transition_table("invoice")

    def test_validator_delegates(self):
        validator = StatusTransitionValidator(JOB_TRANSITIONS)
        assert validator.table is JOB_TRANSITIONS
        assert validator.is_valid("scheduled", "in_progress")
        assert not validator.is_valid("closed", "scheduled")
        assert validator.allowed("warranty_active") == ("closed",)

    def test_validator_with_alternate_table(self):
        table = TransitionTable.build(
            kind=EntityKind.JOB,
            order=["draft", "final"],
            transitions={"draft": ["final"]},
        )
        validator = StatusTransitionValidator(table)
        assert validator.is_valid("draft", "final")
        assert not validator.is_valid("final", "draft")
        assert not validator.is_valid("scheduled", "in_progress")
