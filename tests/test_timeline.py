"""Tests for signoff.lib.timeline and the initiative model."""

from signoff.lib.timeline import TimelineEvent, format_entry, format_header
from signoff.models import Initiative, build_artifacts


class TestTimelineFormat:

    def test_header(self):
        assert format_header("FEAT-1", "Checkout") == "# Timeline: FEAT-1\n\n## Checkout\n\n---\n"

    def test_entry(self):
        event = TimelineEvent("2026-01-01T00:00:00+00:00", "PRD Step Started", {"Step": "prd", "Action": "stub"})

        text = format_entry(event)
        assert "### 2026-01-01T00:00:00+00:00 - PRD Step Started" in text
        assert "- **Step:** prd\n- **Action:** stub" in text
        assert text.endswith("---\n")

    def test_detail_keeps_fact_order(self):
        event = TimelineEvent("t", "label", {"B": "2", "A": "1"})
        assert event.detail() == "B: 2; A: 1"


class TestInitiativeModel:

    def test_document_round_trip(self):
        initiative = Initiative(key="FEAT-1", title="T", artifacts=build_artifacts("FEAT-1", "out/artifacts"))
        initiative.artifacts["ux"].pr_number = 12
        initiative.record("t1", "Initiative Initialized", "Phase: planning")
        initiative.record("t2", "PRD Step Started")

        assert Initiative.from_document(initiative.to_document()) == initiative

    def test_history_is_append_only(self):
        initiative = Initiative(key="FEAT-1", title="T")
        first = initiative.record("t1", "one")
        initiative.record("t2", "two")

        assert initiative.history[0] is first
        assert [e.label for e in initiative.history] == ["one", "two"]

    def test_document_nests_active_fields(self):
        doc = build_artifacts("FEAT-1", "out")["prd"].to_document()
        assert set(doc) == {"path", "required_groups", "active"}
        assert doc["active"]["branch"] == "bmad/FEAT-1/prd"
        assert doc["active"]["pr_number"] is None
