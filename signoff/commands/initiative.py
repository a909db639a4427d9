"""
signoff new/advance/complete/link - Initiative lifecycle commands.
"""

import sys

from signoff import operations
from signoff.lib.output import EXIT_USAGE, emit
from signoff.workflow.engine import ProgressionEngine


def cmd_new(args, engine: ProgressionEngine) -> int:
    """Create an initiative."""
    return emit(operations.new_initiative(engine, key=args.key, title=args.title), args.json)


def cmd_advance(args, engine: ProgressionEngine) -> int:
    """Generate the current step's artifact."""
    return emit(operations.advance(engine, key=args.key), args.json)


def cmd_complete(args, engine: ProgressionEngine) -> int:
    """Record sign-off of the current step."""
    return emit(operations.complete_step(engine, key=args.key, note=args.note or ""), args.json)


def cmd_link(args, engine: ProgressionEngine) -> int:
    """Record PR metadata and ticket references for an artifact."""
    tickets = {}
    for item in args.ticket or []:
        group, sep, ref = item.partition("=")
        if not sep or not group or not ref:
            print(f"ERROR: Invalid --ticket '{item}' (expected GROUP=REF)", file=sys.stderr)
            return EXIT_USAGE
        tickets[group] = ref

    result = operations.link_review(
        engine,
        key=args.key,
        artifact=args.artifact,
        pr_url=args.pr_url,
        pr_number=args.pr_number,
        tickets=tickets or None,
    )
    return emit(result, args.json)
