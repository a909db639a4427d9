"""
Ticket payload generator.

Maps (initiative, artifact, governance) to the sign-off tickets an external
issue tracker should create: one per required group, in catalog order.
Pure: nothing is read from or written to storage here.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

from signoff.governance import DEFAULT_ISSUE_TYPE, Governance
from signoff.workflow.catalog import get_artifact

UNKNOWN_PROJECT = "UNKNOWN"
PENDING_PR = "(pending)"


@dataclass
class TicketRequest:
    """A ticket to be created by the issue tracker."""
    group: str
    summary: str
    project_key: str
    issue_type: str
    labels: list[str]
    description: str
    assignees: list[str] = field(default_factory=list)  # Tracker account ids, may be empty

    def to_dict(self) -> dict:
        return asdict(self)


def _description(key: str, artifact: str, group: str, pr_url: Optional[str]) -> str:
    return (
        "BMAD signoff requested (lead-only).\n"
        "\n"
        f"Initiative: {key}\n"
        f"Artifact: {artifact.upper()}\n"
        f"Group: {group.upper()}\n"
        "\n"
        f"PR: {pr_url or PENDING_PR}\n"
        "\n"
        "Action: Approve the PR to sign off."
    )


def generate(
    key: str,
    artifact: str,
    governance: Optional[Governance],
    pr_url: Optional[str] = None,
) -> list[TicketRequest]:
    """Build sign-off ticket requests for an artifact.

    Args:
        key: Initiative key
        artifact: Catalog artifact kind
        governance: Current governance, or None (project key falls back to UNKNOWN)
        pr_url: PR to embed; "(pending)" when not given

    Raises:
        UnknownArtifact: If artifact is not a catalog entry
    """
    art = get_artifact(artifact)

    project_key = (governance.tracker_project_key if governance else "") or UNKNOWN_PROJECT
    issue_type = governance.issue_type_for_signoff if governance else DEFAULT_ISSUE_TYPE

    return [
        TicketRequest(
            group=group,
            summary=f"[BMAD][{key}][{artifact}] Signoff required - {group.upper()}",
            project_key=project_key,
            issue_type=issue_type,
            labels=["bmad", f"initiative-{key}", f"artifact-{artifact}", f"group-{group}"],
            description=_description(key, artifact, group, pr_url),
            assignees=governance.tracker_accounts(group) if governance else [],
        )
        for group in art.required_groups
    ]


def render_markdown(tickets: list[TicketRequest]) -> str:
    """Human-readable rendering for an agent that creates the tickets."""
    out = ["## Tickets to Create", ""]
    for ticket in tickets:
        out.append(f"### {ticket.group.upper()} Signoff")
        out.append(f"- **Summary:** `{ticket.summary}`")
        out.append(f"- **Project:** {ticket.project_key}")
        out.append(f"- **Type:** {ticket.issue_type}")
        out.append(f"- **Labels:** {', '.join(ticket.labels)}")
        if ticket.assignees:
            out.append(f"- **Assignees:** {', '.join(ticket.assignees)}")
        out.append("- **Description:**")
        out.append("```")
        out.append(ticket.description)
        out.append("```")
        out.append("")
    return "\n".join(out)
