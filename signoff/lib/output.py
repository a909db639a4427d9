"""Output formatting for CLI commands.

Separates display concerns from the operations themselves.
"""

import json
import sys

from signoff.operations import INVALID_ARGUMENTS, OperationResult

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def emit(result: OperationResult, as_json: bool = False) -> int:
    """Print an operation result and return the process exit code."""
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    elif result.ok:
        print(result.text)
    else:
        print(result.text, file=sys.stderr)

    if result.ok:
        return EXIT_OK
    if result.error == INVALID_ARGUMENTS:
        return EXIT_USAGE
    return EXIT_ERROR


def section(title: str):
    """Print a section header."""
    print(title)
    print("-" * 60)
