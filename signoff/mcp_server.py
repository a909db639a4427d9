"""MCP server exposing the signoff operations as tools.

Runs over stdio via FastMCP. Each tool is a thin wrapper over
operations.dispatch(); a failed operation raises ToolError so the client
sees an error result carrying the operation's text.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from signoff import operations
from signoff.lib.config import load_config
from signoff.lib.logging_config import setup_logging
from signoff.workflow.engine import ProgressionEngine

logger = logging.getLogger(__name__)

SERVER_NAME = "signoff-flow-mcp"


def call_operation(engine: ProgressionEngine, op_name: str, **arguments) -> str:
    """Run an operation and return its text, raising ToolError on failure."""
    result = operations.dispatch(engine, op_name, arguments)
    if not result.ok:
        logger.info(f"[MCP] {op_name} -> {result.error}")
        raise ToolError(result.text)
    return result.text


def create_server(engine: ProgressionEngine) -> FastMCP:
    """Build the FastMCP server with one tool per operation."""
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool()
    def signoff_status(initiative_key: Optional[str] = None) -> str:
        """Check the status of governance and initiatives. Use this first to understand the current state."""
        return call_operation(engine, "status", initiative_key=initiative_key)

    @mcp.tool()
    def signoff_setup_governance(
        ba_leads: list[str],
        design_leads: list[str],
        dev_leads: list[str],
        tracker_project_key: str,
    ) -> str:
        """Set up governance with leads for BA, Design, and Dev groups.

        Required before creating initiatives. Replaces any previous governance.
        """
        return call_operation(
            engine, "setup_governance",
            ba_leads=ba_leads,
            design_leads=design_leads,
            dev_leads=dev_leads,
            tracker_project_key=tracker_project_key,
        )

    @mcp.tool()
    def signoff_new_initiative(key: str, title: str) -> str:
        """Create a new initiative (key like 'FEAT-123'). Governance must be set up first."""
        return call_operation(engine, "new_initiative", key=key, title=title)

    @mcp.tool()
    def signoff_advance(key: str) -> str:
        """Create the artifact stub for the initiative's current step and report the required signoffs and branch."""
        return call_operation(engine, "advance", key=key)

    @mcp.tool()
    def signoff_complete_step(key: str, note: str = "") -> str:
        """Record that the current step's PR was approved and move the initiative to the next step."""
        return call_operation(engine, "complete_step", key=key, note=note)

    @mcp.tool()
    def signoff_create_tickets(key: str, artifact: str, pr_url: Optional[str] = None) -> str:
        """Compute the signoff tickets to create in the issue tracker for an artifact.

        artifact is one of: prd, ux, architecture, epics_stories, readiness.
        """
        return call_operation(engine, "create_ticket_payloads", key=key, artifact=artifact, pr_url=pr_url)

    @mcp.tool()
    def signoff_link_review(
        key: str,
        artifact: str,
        pr_url: Optional[str] = None,
        pr_number: Optional[int] = None,
        tickets: Optional[dict[str, str]] = None,
    ) -> str:
        """Record the PR and the ticket references (group -> ticket key) created for an artifact."""
        return call_operation(
            engine, "link_review",
            key=key, artifact=artifact, pr_url=pr_url, pr_number=pr_number, tickets=tickets,
        )

    return mcp


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="MCP server for the artifact sign-off workflow")
    parser.add_argument("--root", help="Project root (default: current directory)")
    parser.add_argument("--output-dir", help="Output directory (default: <root>/_bmad-output)")
    parser.add_argument("--log-file", help="Also write a debug log to this file")
    args = parser.parse_args(argv)

    setup_logging(log_file=Path(args.log_file) if args.log_file else None)
    config = load_config(
        Path(args.root) if args.root else Path.cwd(),
        output_dir=Path(args.output_dir) if args.output_dir else None,
    )
    logger.info(f"[MCP] serving {config.project_root}")
    create_server(ProgressionEngine(config)).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
