"""Tests for signoff.workflow.fsm module."""

import logging

import pytest
from transitions import MachineError

from signoff.lib.errors import UnknownStep
from signoff.models import PHASE_COMPLETE, Initiative, build_artifacts
from signoff.workflow.catalog import ARTIFACT_KINDS
from signoff.workflow.fsm import (
    STATES,
    TERMINAL_STATE,
    TRANSITIONS,
    InitiativeFSM,
    state_of,
)


def make_initiative(step="prd"):
    return Initiative(
        key="FEAT-1",
        title="Test",
        current_step=step,
        artifacts=build_artifacts("FEAT-1", "_bmad-output/initiatives/FEAT-1/artifacts"),
    )


class TestFSMStates:
    """Tests for FSM state definitions."""

    def test_states_follow_catalog(self):
        assert STATES == [*ARTIFACT_KINDS, "complete"]

    def test_one_forward_transition_per_step(self):
        assert len(TRANSITIONS) == len(ARTIFACT_KINDS)
        for t in TRANSITIONS:
            assert t["trigger"] == "complete_step"
            assert STATES.index(t["dest"]) == STATES.index(t["source"]) + 1


class TestFSMBasic:
    """Basic FSM functionality tests."""

    def test_initial_state_from_record(self):
        fsm = InitiativeFSM(make_initiative("architecture"))
        assert fsm.state == "architecture"

    def test_unknown_step_raises(self):
        with pytest.raises(UnknownStep) as exc_info:
            InitiativeFSM(make_initiative("bogus_step"))
        assert exc_info.value.step == "bogus_step"

    def test_terminal_name_is_not_a_step(self):
        with pytest.raises(UnknownStep):
            InitiativeFSM(make_initiative(TERMINAL_STATE))

    def test_unknown_step_checked_when_complete(self):
        initiative = make_initiative("bogus_step")
        initiative.phase = PHASE_COMPLETE
        with pytest.raises(UnknownStep):
            InitiativeFSM(initiative)

    def test_complete_step_moves_pointer(self):
        initiative = make_initiative()
        fsm = InitiativeFSM(initiative)

        fsm.complete_step()

        assert fsm.state == "ux"
        assert initiative.current_step == "ux"

    def test_full_path_to_terminal(self):
        initiative = make_initiative()
        fsm = InitiativeFSM(initiative)

        for _ in ARTIFACT_KINDS:
            fsm.complete_step()

        assert fsm.is_terminal
        assert initiative.phase == PHASE_COMPLETE
        # Pointer stays on the final artifact
        assert initiative.current_step == "readiness"
        assert state_of(initiative) == TERMINAL_STATE

    def test_no_transition_out_of_terminal(self):
        initiative = make_initiative("readiness")
        initiative.phase = PHASE_COMPLETE
        fsm = InitiativeFSM(initiative)

        assert fsm.is_terminal
        assert not fsm.can("complete_step")
        with pytest.raises(MachineError):
            fsm.complete_step()

    def test_no_auto_transitions(self):
        fsm = InitiativeFSM(make_initiative())
        assert fsm.get_available_triggers() == ["complete_step"]
        assert not hasattr(fsm, "to_readiness")


class TestFSMCallback:
    """Tests for on_transition callback."""

    def test_callback_called(self):
        calls = []
        fsm = InitiativeFSM(make_initiative(), on_transition=lambda f, t, trig: calls.append((f, t, trig)))

        fsm.complete_step()

        assert calls == [("prd", "ux", "complete_step")]

    def test_transition_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="signoff")

        InitiativeFSM(make_initiative("readiness")).complete_step()

        assert "[FSM] FEAT-1: readiness -> complete (complete_step)" in caplog.text
