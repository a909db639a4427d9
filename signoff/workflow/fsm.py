"""Initiative progression state machine using transitions library.

States are the catalog's artifact kinds in order, plus the terminal
"complete" state reached once the final artifact's step is completed.
The single trigger, complete_step, moves exactly one step forward; there
are no backward or skipping transitions.

Usage:
    from signoff.workflow.fsm import InitiativeFSM

    fsm = InitiativeFSM(initiative)
    fsm.complete_step()  # prd -> ux, updates initiative.current_step
"""

import logging
from typing import Callable

from transitions import Machine

from signoff.lib.errors import UnknownStep
from signoff.models import PHASE_COMPLETE, Initiative
from signoff.workflow.catalog import ARTIFACT_KINDS, step_index

logger = logging.getLogger(__name__)


TERMINAL_STATE = "complete"

STATES = [*ARTIFACT_KINDS, TERMINAL_STATE]

# Transitions defined as (trigger, source, dest), derived from catalog order
TRANSITIONS = [
    {"trigger": "complete_step", "source": source, "dest": dest}
    for source, dest in zip(STATES, STATES[1:])
]


def state_of(initiative: Initiative) -> str:
    """FSM state for a persisted initiative."""
    if initiative.is_complete:
        return TERMINAL_STATE
    return initiative.current_step


class InitiativeFSM:
    """State machine for one initiative.

    Wraps the transitions library with initiative-specific logic:
    - Initial state comes from the initiative record
    - Transitions write the new step back onto the record
    - All transitions are logged
    Persisting the record is left to the caller.
    """

    def __init__(
        self,
        initiative: Initiative,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """Initialize FSM for an initiative.

        Args:
            initiative: Record to drive; mutated on every transition
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions

        Raises:
            UnknownStep: If the record's current step is not a catalog entry,
                whatever its phase
        """
        self.initiative = initiative
        self.on_transition = on_transition

        if step_index(initiative.current_step) < 0:
            raise UnknownStep(initiative.current_step, initiative.key)
        initial = state_of(initiative)

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition.

        Copies the new state onto the initiative record. The terminal state
        keeps current_step on the final artifact and flips the phase.
        """
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.initiative.key}: {from_state} -> {to_state} ({trigger})")

        if to_state == TERMINAL_STATE:
            self.initiative.phase = PHASE_COMPLETE
        else:
            self.initiative.current_step = to_state

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    @property
    def is_terminal(self) -> bool:
        return self.state == TERMINAL_STATE

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        """Get list of triggers available in current state."""
        return self.machine.get_triggers(self.state)
