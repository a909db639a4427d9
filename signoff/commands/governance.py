"""
signoff governance - Configure group leads and the tracker project.

Re-running replaces the previous configuration entirely.
"""

from signoff import operations
from signoff.lib.output import emit
from signoff.workflow.engine import ProgressionEngine


def _split(values: list[str] | None) -> list[str]:
    """Accept both repeated flags and comma-separated values."""
    leads = []
    for value in values or []:
        leads.extend(part.strip() for part in value.split(",") if part.strip())
    return leads


def cmd_governance(args, engine: ProgressionEngine) -> int:
    """Set up governance."""
    result = operations.setup_governance(
        engine,
        ba_leads=_split(args.ba),
        design_leads=_split(args.design),
        dev_leads=_split(args.dev),
        tracker_project_key=args.project_key,
    )
    return emit(result, args.json)
