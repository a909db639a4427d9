#!/usr/bin/env python3
"""signoff CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from signoff.commands import governance as cmd_governance_module
from signoff.commands import initiative as cmd_initiative_module
from signoff.commands import list as cmd_list_module
from signoff.commands import status as cmd_status_module
from signoff.commands import tickets as cmd_tickets_module
from signoff.lib.config import load_config
from signoff.lib.logging_config import setup_logging
from signoff.workflow.catalog import ARTIFACT_KINDS
from signoff.workflow.engine import ProgressionEngine


def get_engine(args) -> ProgressionEngine:
    """Build the engine for --root / --output-dir."""
    config = load_config(
        Path(args.root) if args.root else Path.cwd(),
        output_dir=Path(args.output_dir) if args.output_dir else None,
    )
    return ProgressionEngine(config)


def cmd_status(args):
    return cmd_status_module.cmd_status(args, get_engine(args))


def cmd_list(args):
    return cmd_list_module.cmd_list(args, get_engine(args))


def cmd_governance(args):
    return cmd_governance_module.cmd_governance(args, get_engine(args))


def cmd_new(args):
    return cmd_initiative_module.cmd_new(args, get_engine(args))


def cmd_advance(args):
    return cmd_initiative_module.cmd_advance(args, get_engine(args))


def cmd_complete(args):
    return cmd_initiative_module.cmd_complete(args, get_engine(args))


def cmd_link(args):
    return cmd_initiative_module.cmd_link(args, get_engine(args))


def cmd_tickets(args):
    return cmd_tickets_module.cmd_tickets(args, get_engine(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='signoff', description='Artifact sign-off workflow')
    parser.add_argument('--root', '-r', help='Project root (default: current directory)')
    parser.add_argument('--output-dir', help='Output directory (default: <root>/_bmad-output)')
    parser.add_argument('--json', action='store_true', help='Print machine-readable JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log progress to stderr')
    parser.add_argument('--log-file', help='Also write a debug log to this file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # signoff status
    p_status = subparsers.add_parser('status', help='Show governance and initiative status')
    p_status.add_argument('key', nargs='?', help='Initiative key')
    p_status.set_defaults(func=cmd_status)

    # signoff list
    p_list = subparsers.add_parser('list', help='List initiatives')
    p_list.set_defaults(func=cmd_list)

    # signoff governance
    p_gov = subparsers.add_parser('governance', help='Configure group leads (replaces previous setup)')
    p_gov.add_argument('--ba', action='append', help='BA lead(s), repeatable or comma-separated')
    p_gov.add_argument('--design', action='append', help='Design lead(s), repeatable or comma-separated')
    p_gov.add_argument('--dev', action='append', help='Dev lead(s), repeatable or comma-separated')
    p_gov.add_argument('--project-key', required=True, help="Tracker project key (e.g., 'PROJ')")
    p_gov.set_defaults(func=cmd_governance)

    # signoff new
    p_new = subparsers.add_parser('new', help='Create an initiative')
    p_new.add_argument('key', help="Initiative key (e.g., 'FEAT-123')")
    p_new.add_argument('title', help='Initiative title')
    p_new.set_defaults(func=cmd_new)

    # signoff advance
    p_advance = subparsers.add_parser('advance', help='Generate the artifact for the current step')
    p_advance.add_argument('key', help='Initiative key')
    p_advance.set_defaults(func=cmd_advance)

    # signoff complete
    p_complete = subparsers.add_parser('complete', help='Record sign-off and move to the next step')
    p_complete.add_argument('key', help='Initiative key')
    p_complete.add_argument('--note', '-n', help='Note for the audit trail')
    p_complete.set_defaults(func=cmd_complete)

    # signoff link
    p_link = subparsers.add_parser('link', help='Record PR and tickets for an artifact')
    p_link.add_argument('key', help='Initiative key')
    p_link.add_argument('artifact', choices=ARTIFACT_KINDS)
    p_link.add_argument('--pr-url', help='PR URL')
    p_link.add_argument('--pr-number', type=int, help='PR number')
    p_link.add_argument('--ticket', '-t', action='append', help='GROUP=TICKET-REF, repeatable')
    p_link.set_defaults(func=cmd_link)

    # signoff tickets
    p_tickets = subparsers.add_parser('tickets', help='Print sign-off ticket payloads')
    p_tickets.add_argument('key', help='Initiative key')
    p_tickets.add_argument('artifact', help=f"One of: {', '.join(ARTIFACT_KINDS)}")
    p_tickets.add_argument('--pr-url', help='PR URL to include in tickets')
    p_tickets.set_defaults(func=cmd_tickets)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=logging.INFO if args.verbose else None,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
