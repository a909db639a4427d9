"""Artifact catalog: the fixed, ordered sign-off sequence.

Configuration-as-code. Each artifact kind names the stakeholder groups whose
approval it needs, its file name and its branch suffix. Nothing here is
mutated at runtime.

Usage:
    from signoff.workflow.catalog import CATALOG, required_groups

    required_groups("ux")  # ("ba", "design")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from signoff.lib.errors import UnknownArtifact


class Group(Enum):
    """Stakeholder groups. Values are the persisted identifiers."""

    BA = "ba"
    DESIGN = "design"
    DEV = "dev"


GROUPS: tuple[str, ...] = tuple(g.value for g in Group)


@dataclass(frozen=True)
class ArtifactType:
    """One entry of the catalog."""
    kind: str
    title: str
    required_groups: tuple[str, ...]  # Always in GROUPS order
    filename: str
    branch_suffix: str

    def branch_for(self, key: str) -> str:
        """Suggested branch name for this artifact of initiative `key`."""
        return f"bmad/{key}/{self.branch_suffix}"


CATALOG: tuple[ArtifactType, ...] = (
    ArtifactType("prd", "PRD", ("ba", "design", "dev"), "PRD.md", "prd"),
    ArtifactType("ux", "UX", ("ba", "design"), "UX.md", "ux"),
    ArtifactType("architecture", "Architecture", ("dev",), "ARCHITECTURE.md", "architecture"),
    ArtifactType("epics_stories", "Epics & Stories", ("ba", "dev"), "EPICS_AND_STORIES.md", "epics-stories"),
    ArtifactType("readiness", "Implementation Readiness", ("ba", "design", "dev"), "IMPLEMENTATION_READINESS.md", "readiness"),
)

ARTIFACT_KINDS: tuple[str, ...] = tuple(art.kind for art in CATALOG)

FIRST_STEP = ARTIFACT_KINDS[0]
LAST_STEP = ARTIFACT_KINDS[-1]

_BY_KIND = {art.kind: art for art in CATALOG}


def is_artifact(kind: str) -> bool:
    return kind in _BY_KIND


def get_artifact(kind: str) -> ArtifactType:
    """Look up a catalog entry.

    Raises:
        UnknownArtifact: If kind is not in the catalog
    """
    try:
        return _BY_KIND[kind]
    except KeyError:
        raise UnknownArtifact(kind, ARTIFACT_KINDS) from None


def required_groups(kind: str) -> tuple[str, ...]:
    return get_artifact(kind).required_groups


def step_index(kind: str) -> int:
    """Position of kind in the ordered sequence, or -1 if unknown."""
    try:
        return ARTIFACT_KINDS.index(kind)
    except ValueError:
        return -1


def next_step(kind: str) -> Optional[str]:
    """Kind following `kind`, or None after the last step."""
    idx = ARTIFACT_KINDS.index(kind)
    if idx + 1 < len(ARTIFACT_KINDS):
        return ARTIFACT_KINDS[idx + 1]
    return None


def signoff_rules() -> dict[str, dict]:
    """Catalog rendered as the governance document's signoff_rules section."""
    return {art.kind: {"required_groups": list(art.required_groups)} for art in CATALOG}
