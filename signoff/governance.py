"""
Governance store: org-wide sign-off policy.

Holds the lead lists of the three stakeholder groups and the issue-tracker
project. Setup is a full overwrite, never a merge. The engine only reads it.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from signoff.lib.config import SignoffConfig
from signoff.lib.errors import InvalidGovernance
from signoff.lib.locking import governance_lock
from signoff.lib.store import DocumentStore
from signoff.workflow.catalog import GROUPS, signoff_rules

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
DEFAULT_ISSUE_TYPE = "Task"


@dataclass
class GroupPolicy:
    """Leads of one stakeholder group."""
    leads: list[str] = field(default_factory=list)               # Reviewer handles
    tracker_account_ids: list[str] = field(default_factory=list)  # Issue-tracker accounts
    external_team_ref: str = ""


@dataclass
class Governance:
    groups: dict[str, GroupPolicy]
    tracker_project_key: str
    issue_type_for_signoff: str = DEFAULT_ISSUE_TYPE

    def leads(self, group: str) -> list[str]:
        policy = self.groups.get(group)
        return list(policy.leads) if policy else []

    def tracker_accounts(self, group: str) -> list[str]:
        policy = self.groups.get(group)
        return list(policy.tracker_account_ids) if policy else []

    def to_document(self) -> dict:
        return {
            "version": SCHEMA_VERSION,
            "groups": {
                name: {
                    "leads": {
                        "identities": list(policy.leads),
                        "tracker_account_ids": list(policy.tracker_account_ids),
                    },
                    "external_team_ref": policy.external_team_ref,
                }
                for name, policy in self.groups.items()
            },
            "tracker": {
                "project_key": self.tracker_project_key,
                "issue_types": {"signoff_request": self.issue_type_for_signoff},
            },
            "signoff_rules": signoff_rules(),
        }

    @classmethod
    def from_document(cls, data: dict) -> "Governance":
        groups = {}
        for name in GROUPS:
            entry = data["groups"][name]
            leads = entry.get("leads", {})
            groups[name] = GroupPolicy(
                leads=list(leads.get("identities", [])),
                tracker_account_ids=list(leads.get("tracker_account_ids", [])),
                external_team_ref=entry.get("external_team_ref", ""),
            )

        tracker = data.get("tracker", {})
        issue_types = tracker.get("issue_types") or {}
        return cls(
            groups=groups,
            tracker_project_key=tracker.get("project_key", ""),
            issue_type_for_signoff=issue_types.get("signoff_request", DEFAULT_ISSUE_TYPE),
        )


def _check_leads(name: str, leads) -> list[str]:
    if leads is None:
        raise InvalidGovernance(f"{name} leads are required (use an empty list for none)")
    if isinstance(leads, str) or not all(isinstance(lead, str) for lead in leads):
        raise InvalidGovernance(f"{name} leads must be a list of strings")
    return list(leads)


class GovernanceStore:
    """Reads and replaces the governance document."""

    def __init__(self, config: SignoffConfig, store: DocumentStore):
        self.config = config
        self.store = store

    def configure(
        self,
        ba_leads: list[str],
        design_leads: list[str],
        dev_leads: list[str],
        tracker_project_key: str,
    ) -> Governance:
        """Replace any prior governance with the given leads.

        Empty lead lists are accepted; tickets for such a group carry no
        assignee.

        Raises:
            InvalidGovernance: If a lead list is missing or not a list of strings
        """
        lead_lists = {
            "ba": _check_leads("ba", ba_leads),
            "design": _check_leads("design", design_leads),
            "dev": _check_leads("dev", dev_leads),
        }
        if not isinstance(tracker_project_key, str):
            raise InvalidGovernance("tracker project key must be a string")

        for name, leads in lead_lists.items():
            if not leads:
                logger.warning(f"[GOVERNANCE] group '{name}' has no leads; its signoff tickets will be unassigned")

        governance = Governance(
            groups={name: GroupPolicy(leads=leads) for name, leads in lead_lists.items()},
            tracker_project_key=tracker_project_key,
        )

        with governance_lock(self.config.locks_dir, self.config.lock_timeout):
            location = self.store.save_governance(governance.to_document())

        logger.info(f"[GOVERNANCE] configured at {location} (project {tracker_project_key})")
        return governance

    def is_configured(self) -> bool:
        return self.store.governance_exists()

    def load(self) -> Optional[Governance]:
        """Load governance, or None if not configured.

        Raises:
            CorruptState: If the stored document is unreadable
        """
        data = self.store.load_governance()
        if data is None:
            return None

        stored_rules = data.get("signoff_rules")
        if stored_rules is not None and stored_rules != signoff_rules():
            logger.warning("[GOVERNANCE] stored signoff_rules differ from the artifact catalog; using the catalog")

        return Governance.from_document(data)

    @property
    def location(self) -> str:
        return self.config.relative(self.config.governance_path)
