"""
signoff tickets - Print sign-off ticket payloads for an artifact.
"""

from signoff import operations
from signoff.lib.output import emit
from signoff.workflow.engine import ProgressionEngine


def cmd_tickets(args, engine: ProgressionEngine) -> int:
    """Show the tickets an issue tracker should create for an artifact."""
    result = operations.create_ticket_payloads(
        engine, key=args.key, artifact=args.artifact, pr_url=args.pr_url
    )
    return emit(result, args.json)
