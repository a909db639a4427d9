"""
Operation surface for signoff.

Thin dispatch over the engine, governance store and ticket generator. Every
operation returns an OperationResult and never raises: signoff errors become
structured error results, anything unexpected is logged and reported as
InternalError. The CLI and the MCP server both go through dispatch().
"""

import functools
import inspect
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Optional

from signoff import tickets as ticket_payloads
from signoff.lib.errors import CorruptState, InitiativeNotFound, SignoffError
from signoff.workflow.catalog import ARTIFACT_KINDS, GROUPS
from signoff.workflow.engine import ProgressionEngine

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "InternalError"
UNKNOWN_OPERATION = "UnknownOperation"
INVALID_ARGUMENTS = "InvalidArguments"


@dataclass
class OperationResult:
    ok: bool
    text: str
    data: dict = field(default_factory=dict)
    error: Optional[str] = None  # Error code when ok is False

    def to_dict(self) -> dict:
        return asdict(self)


OPERATIONS: dict[str, Callable[..., OperationResult]] = {}


def operation(name: str):
    """Register an operation and convert its failures into results."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(engine: ProgressionEngine, *args, **kwargs) -> OperationResult:
            try:
                return func(engine, *args, **kwargs)
            except SignoffError as e:
                logger.info(f"[OP] {name} failed: {e.code}: {e.message}")
                return OperationResult(
                    ok=False,
                    text=f"ERROR: {e}",
                    data={"message": e.message, "remediation": e.remediation},
                    error=e.code,
                )
            except Exception as e:
                logger.exception(f"[OP] {name} failed unexpectedly")
                return OperationResult(ok=False, text=f"ERROR: {e}", data={"message": str(e)}, error=INTERNAL_ERROR)

        OPERATIONS[name] = wrapper
        return wrapper

    return decorator


def _leads_text(leads: list[str]) -> str:
    return ", ".join(leads) if leads else "None"


@operation("status")
def status(engine: ProgressionEngine, initiative_key: Optional[str] = None) -> OperationResult:
    """Report governance and, optionally, one initiative's progress."""
    lines = ["## Signoff Flow Status", ""]
    data: dict[str, Any] = {"governance": {"configured": False}}

    try:
        governance = engine.governance.load()
    except CorruptState as e:
        governance = None
        data["governance"]["error"] = e.message
        lines.append(f"**Governance:** Unreadable ({e.message})")
    else:
        if governance is None:
            lines.append("**Governance:** Not configured (run setup_governance first)")
        else:
            lines.append("**Governance:** Configured")

    lines.append("")
    if governance is not None:
        data["governance"] = {
            "configured": True,
            "tracker_project_key": governance.tracker_project_key,
            "leads": {group: governance.leads(group) for group in GROUPS},
        }
        lines.append(f"**Tracker Project:** {governance.tracker_project_key or 'Unknown'}")
        lines.append(f"**BA Leads:** {_leads_text(governance.leads('ba'))}")
        lines.append(f"**Design Leads:** {_leads_text(governance.leads('design'))}")
        lines.append(f"**Dev Leads:** {_leads_text(governance.leads('dev'))}")
        lines.append("")

    if initiative_key:
        report: dict[str, Any] = {"key": initiative_key, "found": False}
        data["initiative"] = report
        try:
            initiative = engine.load(initiative_key)
            progress = engine.progress(initiative)
        except InitiativeNotFound:
            lines.append(f"Initiative {initiative_key} not found.")
        except SignoffError as e:
            report["error"] = e.code
            lines.append(f"Initiative {initiative_key} cannot be read: {e.message}")
        else:
            report.update({
                "found": True,
                "title": initiative.title,
                "current_step": initiative.current_step,
                "phase": initiative.phase,
                "complete": progress.complete,
                "progress": {"index": progress.index, "total": progress.total},
                "fraction": progress.fraction,
            })
            lines.append(f"### Initiative: {initiative_key}")
            lines.append(f"**Title:** {initiative.title}")
            lines.append(f"**Current Step:** {initiative.current_step}")
            lines.append(
                f"**Progress:** {progress.index}/{progress.total} ({' -> '.join(ARTIFACT_KINDS)})"
                + (" - complete" if progress.complete else "")
            )

    return OperationResult(ok=True, text="\n".join(lines) + "\n", data=data)


@operation("setup_governance")
def setup_governance(
    engine: ProgressionEngine,
    ba_leads: list[str],
    design_leads: list[str],
    dev_leads: list[str],
    tracker_project_key: str,
) -> OperationResult:
    """Replace governance with the given leads and tracker project."""
    governance = engine.governance.configure(ba_leads, design_leads, dev_leads, tracker_project_key)
    path = engine.governance.location

    text = (
        "Governance configured!\n\n"
        f"**Path:** {path}\n"
        f"**Tracker Project:** {governance.tracker_project_key}\n"
        f"**BA Leads:** {_leads_text(governance.leads('ba'))}\n"
        f"**Design Leads:** {_leads_text(governance.leads('design'))}\n"
        f"**Dev Leads:** {_leads_text(governance.leads('dev'))}\n\n"
        "You can now create initiatives with new_initiative."
    )
    return OperationResult(ok=True, text=text, data={
        "path": path,
        "tracker_project_key": governance.tracker_project_key,
        "leads": {group: governance.leads(group) for group in GROUPS},
    })


@operation("new_initiative")
def new_initiative(engine: ProgressionEngine, key: str, title: str) -> OperationResult:
    """Create an initiative at its first step."""
    initiative = engine.create(key, title)
    path = engine.config.relative(engine.config.initiative_dir(key))

    text = (
        "Initiative created!\n\n"
        f"**Key:** {initiative.key}\n"
        f"**Title:** {initiative.title}\n"
        f"**Path:** {path}\n"
        f"**Current Step:** {initiative.current_step}\n\n"
        f"Next: run advance to create the {initiative.current_step.upper()} artifact."
    )
    return OperationResult(ok=True, text=text, data={
        "key": initiative.key,
        "title": initiative.title,
        "path": path,
        "current_step": initiative.current_step,
    })


@operation("advance")
def advance(engine: ProgressionEngine, key: str) -> OperationResult:
    """Start the current step of an initiative."""
    result = engine.advance(key)

    if result.complete:
        return OperationResult(
            ok=True,
            text=f"Initiative {key} is complete! All artifacts have been signed off.",
            data={"key": key, "complete": True, "step": result.step},
        )

    text = (
        "Artifact created!\n\n"
        f"**Initiative:** {key}\n"
        f"**Step:** {result.step.upper()}\n"
        f"**Artifact:** {result.artifact_path}\n"
        f"**Required signoffs:** {', '.join(result.required_groups)}\n\n"
        "**Next steps:**\n"
        f"1. Create a PR for branch `{result.branch}`\n"
        "2. Create signoff tickets with create_ticket_payloads\n"
        "3. Request reviews from leads\n"
        "4. When the PR is merged, run complete_step, then advance again"
    )
    return OperationResult(ok=True, text=text, data={
        "key": key,
        "complete": False,
        "step": result.step,
        "artifact_path": result.artifact_path,
        "required_groups": result.required_groups,
        "branch": result.branch,
    })


@operation("complete_step")
def complete_step(engine: ProgressionEngine, key: str, note: str = "") -> OperationResult:
    """Record sign-off of the current step and move to the next."""
    result = engine.complete_step(key, note=note)

    if result.complete:
        text = f"{result.completed_step.upper()} signed off. Initiative {key} is complete!"
    else:
        text = (
            f"{result.completed_step.upper()} signed off.\n\n"
            f"**Current Step:** {result.next_step}\n\n"
            f"Next: run advance to create the {result.next_step.upper()} artifact."
        )
    return OperationResult(ok=True, text=text, data={
        "key": key,
        "completed_step": result.completed_step,
        "current_step": result.next_step,
        "complete": result.complete,
    })


@operation("create_ticket_payloads")
def create_ticket_payloads(
    engine: ProgressionEngine,
    key: str,
    artifact: str,
    pr_url: Optional[str] = None,
) -> OperationResult:
    """Compute the sign-off tickets for an artifact."""
    governance = None
    try:
        governance = engine.governance.load()
    except CorruptState as e:
        logger.warning(f"[OP] governance unreadable, tickets fall back to defaults: {e.message}")

    requests = ticket_payloads.generate(key, artifact, governance, pr_url)
    return OperationResult(
        ok=True,
        text=ticket_payloads.render_markdown(requests),
        data={"tickets": [t.to_dict() for t in requests]},
    )


@operation("link_review")
def link_review(
    engine: ProgressionEngine,
    key: str,
    artifact: str,
    pr_url: Optional[str] = None,
    pr_number: Optional[int] = None,
    tickets: Optional[dict[str, str]] = None,
) -> OperationResult:
    """Record externally created PR and tickets on an artifact."""
    initiative = engine.link_review(key, artifact, pr_url=pr_url, pr_number=pr_number, tickets=tickets)
    tracking = initiative.artifacts[artifact]

    text = (
        f"Review linked for {artifact.upper()} of {key}.\n\n"
        f"**PR:** {tracking.pr_url or '(none)'}\n"
        f"**Tickets:** "
        + (", ".join(f"{g}={r}" for g, r in tracking.signoff_tickets.items() if r) or "(none)")
    )
    return OperationResult(ok=True, text=text, data={"key": key, "artifact": artifact, **tracking.to_document()})


def dispatch(engine: ProgressionEngine, name: str, arguments: Optional[dict] = None) -> OperationResult:
    """Run an operation by name with keyword arguments."""
    func = OPERATIONS.get(name)
    if func is None:
        return OperationResult(
            ok=False,
            text=f"ERROR: Unknown operation: {name}",
            error=UNKNOWN_OPERATION,
        )

    arguments = arguments or {}
    try:
        inspect.signature(func).bind(engine, **arguments)
    except TypeError as e:
        return OperationResult(ok=False, text=f"ERROR: {name}: {e}", error=INVALID_ARGUMENTS)

    return func(engine, **arguments)
