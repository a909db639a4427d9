"""Progression engine: the initiative workflow.

Drives an initiative through the artifact catalog in two explicit steps per
artifact:

- advance(key): start the current step. Writes the artifact stub, marks it
  in review and records an audit entry. The step pointer does not move, so
  repeated calls re-stub the same artifact.
- complete_step(key): the external sign-off has happened. Marks the artifact
  approved and moves the pointer one catalog step forward (or into the
  terminal state after the final artifact).

The engine never verifies approvals; it only tracks which groups must sign
off and which step an initiative is on. Every mutation runs under the
initiative's lock and is saved with an optimistic revision check.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from signoff.governance import GovernanceStore
from signoff.lib.config import SignoffConfig
from signoff.lib.errors import (
    GovernanceNotConfigured,
    InitiativeAlreadyExists,
    InitiativeComplete,
    InitiativeNotFound,
    InvalidInitiativeKey,
    InvalidTicketGroup,
    StepNotStarted,
    UnknownStep,
)
from signoff.lib.locking import initiative_lock
from signoff.lib.store import DocumentStore, FileDocumentStore
from signoff.lib.timeline import TimelineEvent, format_entry, format_header
from signoff.models import (
    PHASE_PLANNING,
    STATUS_APPROVED,
    STATUS_IN_REVIEW,
    STATUS_NONE,
    Initiative,
    build_artifacts,
)
from signoff.workflow.catalog import ARTIFACT_KINDS, FIRST_STEP, get_artifact, step_index
from signoff.workflow.fsm import TERMINAL_STATE, InitiativeFSM

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_key(key: str) -> None:
    """Reject keys that are not a single path-safe component.

    Raises:
        InvalidInitiativeKey: If key is empty or not path-safe
    """
    if not isinstance(key, str) or not KEY_PATTERN.fullmatch(key):
        raise InvalidInitiativeKey(key)


@dataclass
class AdvanceResult:
    """What the caller needs to drive PR creation for the current step."""
    key: str
    step: str
    complete: bool
    artifact_path: str = ""                    # Tracked path, relative to project root
    absolute_path: Optional[Path] = None
    required_groups: list[str] = field(default_factory=list)
    branch: str = ""


@dataclass
class CompletionResult:
    key: str
    completed_step: str
    next_step: Optional[str]                   # None once the initiative is complete
    complete: bool


@dataclass
class Progress:
    step: str
    index: int                                 # 1-based position of the current step
    total: int
    complete: bool

    @property
    def fraction(self) -> float:
        return self.index / self.total


def stub_content(key: str, artifact_title: str, step: str, generated_at: str) -> str:
    """Placeholder document written when a step starts."""
    return (
        f"# {artifact_title} (Stub)\n"
        f"\n"
        f"**Initiative:** `{key}`  \n"
        f"**Current step:** `{step}`  \n"
        f"**Generated at:** `{generated_at}`\n"
        f"\n"
        f"---\n"
        f"\n"
        f"This is a **stub artifact** for the signoff workflow.\n"
        f"Signoff happens via PR approval; the repo/PR is the source of truth.\n"
    )


class ProgressionEngine:
    """State transitions and side effects for initiatives."""

    def __init__(
        self,
        config: SignoffConfig,
        store: DocumentStore | None = None,
        clock: Callable[[], str] = utc_now,
    ):
        self.config = config
        self.store = store or FileDocumentStore(config)
        self.governance = GovernanceStore(config, self.store)
        self.clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def exists(self, key: str) -> bool:
        _check_key(key)
        return self.store.initiative_exists(key)

    def list_keys(self) -> list[str]:
        return self.store.list_initiatives()

    def load(self, key: str) -> Initiative:
        """Load an initiative.

        Raises:
            InitiativeNotFound: If no state exists for key
            CorruptState: If the state document is unreadable
        """
        _check_key(key)
        data = self.store.load_initiative(key)
        if data is None:
            raise InitiativeNotFound(key)
        return Initiative.from_document(data)

    def progress(self, initiative: Initiative) -> Progress:
        """Position of the initiative in the catalog.

        Raises:
            UnknownStep: If current_step is not a catalog entry
        """
        idx = step_index(initiative.current_step)
        if idx < 0:
            raise UnknownStep(initiative.current_step, initiative.key)
        return Progress(
            step=initiative.current_step,
            index=idx + 1,
            total=len(ARTIFACT_KINDS),
            complete=initiative.is_complete,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def create(self, key: str, title: str) -> Initiative:
        """Create an initiative at the first catalog step.

        Raises:
            GovernanceNotConfigured: If governance has not been set up
            InvalidInitiativeKey: If key is empty or not path-safe
            InitiativeAlreadyExists: If key is taken
        """
        if not self.governance.is_configured():
            raise GovernanceNotConfigured()
        _check_key(key)

        with initiative_lock(self.config.locks_dir, key, self.config.lock_timeout):
            if self.store.initiative_exists(key):
                raise InitiativeAlreadyExists(key)

            initiative = Initiative(
                key=key,
                title=title,
                current_step=FIRST_STEP,
                phase=PHASE_PLANNING,
                artifacts=build_artifacts(key, self.store.artifact_dir(key)),
                governance_ref=self.governance.location,
            )
            event = self._record(initiative, "Initiative Initialized", {
                "Phase": initiative.phase,
                "Step": initiative.current_step,
                "Action": "Initiative created",
            })

            initiative.revision = self.store.save_initiative(key, initiative.to_document(), None)
            self.store.append_timeline(key, format_header(key, title) + format_entry(event))

        logger.info(f"[ENGINE] {key}: created at step {initiative.current_step}")
        return initiative

    def advance(self, key: str) -> AdvanceResult:
        """Start the current step: write its stub and record the audit entry.

        Once the initiative is complete this is a no-op that reports the
        terminal state.

        Raises:
            InvalidInitiativeKey: If key is not path-safe
            InitiativeNotFound: If key does not exist
            UnknownStep: If the persisted step is not a catalog entry
        """
        _check_key(key)
        with initiative_lock(self.config.locks_dir, key, self.config.lock_timeout):
            initiative = self.load(key)
            fsm = InitiativeFSM(initiative)

            if fsm.is_terminal:
                logger.info(f"[ENGINE] {key}: already complete, nothing to advance")
                return AdvanceResult(key=key, step=initiative.current_step, complete=True)

            step = initiative.current_step
            art = get_artifact(step)
            tracking = initiative.artifacts[step]
            now = self.clock()

            tracking.status = STATUS_IN_REVIEW

            event = self._record(initiative, f"{step.upper()} Step Started", {
                "Phase": initiative.phase,
                "Step": step,
                "Action": "Created artifact stub",
                "Required groups": ", ".join(art.required_groups),
            }, timestamp=now)

            initiative.revision = self.store.save_initiative(key, initiative.to_document(), initiative.revision)
            # Stub goes out only after the revision and schema checks passed
            absolute_path = self.store.write_artifact(
                key, art.filename, stub_content(key, art.title, step, now)
            )
            self.store.append_timeline(key, format_entry(event))

        logger.info(f"[ENGINE] {key}: started {step}, awaiting {', '.join(art.required_groups)}")
        return AdvanceResult(
            key=key,
            step=step,
            complete=False,
            artifact_path=tracking.path,
            absolute_path=absolute_path,
            required_groups=list(art.required_groups),
            branch=tracking.branch,
        )

    def complete_step(self, key: str, note: str = "") -> CompletionResult:
        """Record sign-off of the current step and move to the next one.

        Raises:
            InvalidInitiativeKey: If key is not path-safe
            InitiativeNotFound: If key does not exist
            UnknownStep: If the persisted step is not a catalog entry
            InitiativeComplete: If the final step was already completed
            StepNotStarted: If advance has not generated the current artifact
        """
        _check_key(key)
        with initiative_lock(self.config.locks_dir, key, self.config.lock_timeout):
            initiative = self.load(key)
            fsm = InitiativeFSM(initiative)

            if fsm.is_terminal:
                raise InitiativeComplete(key)

            step = initiative.current_step
            tracking = initiative.artifacts[step]
            if tracking.status == STATUS_NONE:
                raise StepNotStarted(key, step)

            tracking.status = STATUS_APPROVED
            fsm.complete_step()

            facts = {
                "Phase": initiative.phase,
                "Step": step,
                "Action": "Signoff recorded",
                "Next step": initiative.current_step if not fsm.is_terminal else TERMINAL_STATE,
            }
            if tracking.pr_url:
                facts["PR"] = tracking.pr_url
            if note:
                facts["Note"] = note
            event = self._record(initiative, f"{step.upper()} Step Completed", facts)

            initiative.revision = self.store.save_initiative(key, initiative.to_document(), initiative.revision)
            self.store.append_timeline(key, format_entry(event))

        next_step = None if fsm.is_terminal else initiative.current_step
        logger.info(f"[ENGINE] {key}: completed {step} -> {next_step or TERMINAL_STATE}")
        return CompletionResult(
            key=key,
            completed_step=step,
            next_step=next_step,
            complete=fsm.is_terminal,
        )

    def link_review(
        self,
        key: str,
        artifact: str,
        pr_url: Optional[str] = None,
        pr_number: Optional[int] = None,
        tickets: Optional[dict[str, str]] = None,
    ) -> Initiative:
        """Record PR metadata and ticket references created externally.

        Only the fields given are updated.

        Raises:
            InitiativeNotFound: If key does not exist
            UnknownArtifact: If artifact is not a catalog entry
            InvalidInitiativeKey: If key is not path-safe
            InvalidTicketGroup: If tickets name groups the artifact does not need
        """
        _check_key(key)
        art = get_artifact(artifact)
        tickets = tickets or {}
        stray = [group for group in tickets if group not in art.required_groups]
        if stray:
            raise InvalidTicketGroup(artifact, stray)

        with initiative_lock(self.config.locks_dir, key, self.config.lock_timeout):
            initiative = self.load(key)
            tracking = initiative.artifacts[artifact]

            facts = {"Step": artifact}
            if pr_url is not None:
                tracking.pr_url = pr_url
                facts["PR"] = pr_url
            if pr_number is not None:
                tracking.pr_number = pr_number
                facts["PR number"] = str(pr_number)
            for group, ref in tickets.items():
                tracking.signoff_tickets[group] = ref
            if tickets:
                facts["Tickets"] = ", ".join(f"{group}={ref}" for group, ref in tickets.items())

            event = self._record(initiative, f"{artifact.upper()} Review Linked", facts)
            initiative.revision = self.store.save_initiative(key, initiative.to_document(), initiative.revision)
            self.store.append_timeline(key, format_entry(event))

        logger.info(f"[ENGINE] {key}: linked review for {artifact}")
        return initiative

    def _record(
        self,
        initiative: Initiative,
        label: str,
        facts: dict[str, str],
        timestamp: Optional[str] = None,
    ) -> TimelineEvent:
        """Append an audit entry to the record and return it for the timeline."""
        event = TimelineEvent(timestamp=timestamp or self.clock(), label=label, facts=facts)
        initiative.record(event.timestamp, event.label, event.detail())
        return event
