"""
signoff status - Show governance and initiative status.
"""

from signoff import operations
from signoff.lib.output import emit
from signoff.workflow.engine import ProgressionEngine


def cmd_status(args, engine: ProgressionEngine) -> int:
    """Show governance configuration and, with a key, initiative progress."""
    result = operations.status(engine, initiative_key=args.key)
    return emit(result, args.json)
