"""Tests for signoff.workflow.catalog module."""

import pytest

from signoff.lib.errors import UnknownArtifact
from signoff.workflow.catalog import (
    ARTIFACT_KINDS,
    CATALOG,
    FIRST_STEP,
    GROUPS,
    LAST_STEP,
    get_artifact,
    is_artifact,
    next_step,
    required_groups,
    signoff_rules,
    step_index,
)


class TestCatalogOrder:
    """The catalog is a fixed, ordered sequence."""

    def test_kinds_in_order(self):
        assert ARTIFACT_KINDS == ("prd", "ux", "architecture", "epics_stories", "readiness")

    def test_first_and_last(self):
        assert FIRST_STEP == "prd"
        assert LAST_STEP == "readiness"

    def test_next_step_walks_forward(self):
        assert next_step("prd") == "ux"
        assert next_step("epics_stories") == "readiness"
        assert next_step("readiness") is None

    def test_step_index(self):
        assert step_index("prd") == 0
        assert step_index("readiness") == 4
        assert step_index("bogus") == -1


class TestRequiredGroups:
    """Required sign-off groups per artifact."""

    @pytest.mark.parametrize("kind,expected", [
        ("prd", ("ba", "design", "dev")),
        ("ux", ("ba", "design")),
        ("architecture", ("dev",)),
        ("epics_stories", ("ba", "dev")),
        ("readiness", ("ba", "design", "dev")),
    ])
    def test_groups_match_policy(self, kind, expected):
        assert required_groups(kind) == expected

    def test_groups_non_empty_subsets_in_group_order(self):
        for art in CATALOG:
            assert art.required_groups
            assert set(art.required_groups) <= set(GROUPS)
            assert list(art.required_groups) == [g for g in GROUPS if g in art.required_groups]

    def test_unknown_artifact_raises(self):
        with pytest.raises(UnknownArtifact) as exc_info:
            required_groups("design_doc")
        assert "prd" in str(exc_info.value)


class TestNamingConventions:
    """File names and branch names."""

    def test_filenames(self):
        assert get_artifact("prd").filename == "PRD.md"
        assert get_artifact("epics_stories").filename == "EPICS_AND_STORIES.md"
        assert get_artifact("readiness").filename == "IMPLEMENTATION_READINESS.md"

    def test_branch_for(self):
        assert get_artifact("prd").branch_for("FEAT-1") == "bmad/FEAT-1/prd"
        assert get_artifact("epics_stories").branch_for("FEAT-1") == "bmad/FEAT-1/epics-stories"

    def test_catalog_entries_are_frozen(self):
        with pytest.raises(AttributeError):
            CATALOG[0].filename = "OTHER.md"

    def test_is_artifact(self):
        assert is_artifact("ux")
        assert not is_artifact("UX")

    def test_signoff_rules_mirror_catalog(self):
        rules = signoff_rules()
        assert list(rules) == list(ARTIFACT_KINDS)
        assert rules["ux"] == {"required_groups": ["ba", "design"]}
