"""
Data models for initiatives.

The dataclasses mirror the persisted state.yaml document; to_document() and
from_document() convert between the two.
"""

from dataclasses import dataclass, field
from typing import Optional

from signoff.workflow.catalog import CATALOG, FIRST_STEP

SCHEMA_VERSION = 1

PHASE_PLANNING = "planning"
PHASE_COMPLETE = "complete"

# Artifact review status
STATUS_NONE = "none"
STATUS_IN_REVIEW = "in_review"
STATUS_APPROVED = "approved"


@dataclass
class HistoryEntry:
    """One line of the audit trail."""
    timestamp: str                             # ISO timestamp (UTC)
    label: str                                 # "Initiative Initialized", "PRD Step Started", ...
    detail: str = ""

    def to_document(self) -> dict:
        return {"timestamp": self.timestamp, "label": self.label, "detail": self.detail}


@dataclass
class ArtifactTracking:
    """Tracking record for one artifact of an initiative."""
    path: str                                  # Relative to project root
    required_groups: list[str]
    branch: str                                # bmad/<key>/<suffix>
    pr_url: str = ""
    pr_number: Optional[int] = None
    status: str = STATUS_NONE                  # none, in_review, approved
    signoff_tickets: dict[str, str] = field(default_factory=dict)  # group -> ticket ref

    def to_document(self) -> dict:
        return {
            "path": self.path,
            "required_groups": list(self.required_groups),
            "active": {
                "branch": self.branch,
                "pr_url": self.pr_url,
                "pr_number": self.pr_number,
                "status": self.status,
                "signoff_tickets": dict(self.signoff_tickets),
            },
        }

    @classmethod
    def from_document(cls, data: dict) -> "ArtifactTracking":
        active = data.get("active", {})
        return cls(
            path=data["path"],
            required_groups=list(data.get("required_groups", [])),
            branch=active["branch"],
            pr_url=active.get("pr_url") or "",
            pr_number=active.get("pr_number"),
            status=active.get("status", STATUS_NONE),
            signoff_tickets=dict(active.get("signoff_tickets") or {}),
        )


@dataclass
class Initiative:
    """A tracked unit of work progressing through the artifact sequence."""
    key: str
    title: str
    current_step: str = FIRST_STEP
    phase: str = PHASE_PLANNING
    artifacts: dict[str, ArtifactTracking] = field(default_factory=dict)
    history: list[HistoryEntry] = field(default_factory=list)
    tracker_id: str = ""                       # external_ids.tracker
    governance_ref: str = ""                   # Path of the governance document
    revision: int = 0

    @property
    def is_complete(self) -> bool:
        return self.phase == PHASE_COMPLETE

    def record(self, timestamp: str, label: str, detail: str = "") -> HistoryEntry:
        """Append an audit entry. History is never truncated or reordered."""
        entry = HistoryEntry(timestamp=timestamp, label=label, detail=detail)
        self.history.append(entry)
        return entry

    def to_document(self) -> dict:
        return {
            "version": SCHEMA_VERSION,
            "revision": self.revision,
            "key": self.key,
            "title": self.title,
            "external_ids": {"tracker": self.tracker_id},
            "phase": self.phase,
            "current_step": self.current_step,
            "governance_ref": {"path": self.governance_ref},
            "artifacts": {kind: tracking.to_document() for kind, tracking in self.artifacts.items()},
            "history": [entry.to_document() for entry in self.history],
        }

    @classmethod
    def from_document(cls, data: dict) -> "Initiative":
        return cls(
            key=data["key"],
            title=data.get("title", ""),
            current_step=data["current_step"],
            phase=data.get("phase", PHASE_PLANNING),
            artifacts={
                kind: ArtifactTracking.from_document(entry)
                for kind, entry in data.get("artifacts", {}).items()
            },
            history=[
                HistoryEntry(
                    timestamp=entry["timestamp"],
                    label=entry["label"],
                    detail=entry.get("detail", ""),
                )
                for entry in data.get("history", [])
            ],
            tracker_id=(data.get("external_ids") or {}).get("tracker", ""),
            governance_ref=(data.get("governance_ref") or {}).get("path", ""),
            revision=data.get("revision", 0),
        )


def build_artifacts(key: str, artifacts_dir: str) -> dict[str, ArtifactTracking]:
    """Pre-populate tracking records for every catalog entry.

    Args:
        key: Initiative key
        artifacts_dir: Directory (relative to project root) holding the stubs
    """
    return {
        art.kind: ArtifactTracking(
            path=f"{artifacts_dir}/{art.filename}",
            required_groups=list(art.required_groups),
            branch=art.branch_for(key),
            signoff_tickets={group: "" for group in art.required_groups},
        )
        for art in CATALOG
    }
