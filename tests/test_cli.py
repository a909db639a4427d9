"""Tests for the signoff CLI."""

import json

import pytest

from signoff.cli import build_parser, main


@pytest.fixture
def run(config, capsys):
    """Run the CLI against the temp project; returns (exit_code, stdout, stderr)."""

    def _run(*argv):
        code = main(["--root", str(config.project_root), *argv])
        out, err = capsys.readouterr()
        return code, out, err

    return _run


@pytest.fixture
def governed(run):
    code, _, _ = run("governance", "--ba", "alice,bob", "--design", "carol", "--dev", "dave", "--project-key", "PROJ")
    assert code == 0
    return run


class TestParser:

    def test_subcommand_required(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_link_rejects_unknown_artifact(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["link", "FEAT-1", "design_doc"])


class TestGovernanceCommand:

    def test_comma_and_repeat_flags(self, run, config):
        code, out, _ = run("governance", "--ba", "alice, bob", "--ba", "erin", "--dev", "dave", "--project-key", "PROJ")

        assert code == 0
        assert "Governance configured!" in out
        assert "**BA Leads:** alice, bob, erin" in out
        assert "**Design Leads:** None" in out
        assert config.governance_path.exists()

    def test_project_key_required(self, run):
        with pytest.raises(SystemExit):
            run("governance", "--ba", "alice")


class TestInitiativeCommands:

    def test_new_requires_governance(self, run):
        code, out, err = run("new", "FEAT-1", "Checkout redesign")

        assert code == 1
        assert out == ""
        assert "Governance not configured." in err

    def test_full_cycle(self, governed, config):
        run = governed
        assert run("new", "FEAT-1", "Checkout redesign")[0] == 0

        code, out, _ = run("advance", "FEAT-1")
        assert code == 0
        assert "**Step:** PRD" in out
        assert (config.initiative_dir("FEAT-1") / "artifacts" / "PRD.md").exists()

        code, out, _ = run("complete", "FEAT-1", "--note", "merged")
        assert code == 0
        assert "**Current Step:** ux" in out

    def test_json_output(self, governed):
        run = governed
        run("new", "FEAT-1", "Checkout redesign")

        code, out, _ = run("--json", "status", "FEAT-1")
        assert code == 0
        payload = json.loads(out)
        assert payload["ok"]
        assert payload["data"]["initiative"]["current_step"] == "prd"

    def test_json_error(self, run):
        code, out, _ = run("--json", "advance", "NOPE-1")

        assert code == 1
        assert json.loads(out)["error"] == "InitiativeNotFound"

    def test_link(self, governed, config):
        run = governed
        run("new", "FEAT-1", "Checkout redesign")

        code, out, _ = run("link", "FEAT-1", "ux", "--pr-url", "https://git.example/pr/4", "--pr-number", "4",
                           "-t", "ba=PROJ-1", "-t", "design=PROJ-2")
        assert code == 0
        assert "ba=PROJ-1, design=PROJ-2" in out

    def test_link_bad_ticket_format(self, governed):
        run = governed
        run("new", "FEAT-1", "Checkout redesign")

        code, _, err = run("link", "FEAT-1", "ux", "-t", "PROJ-1")
        assert code == 2
        assert "expected GROUP=REF" in err


class TestListAndTickets:

    def test_list_empty(self, run):
        code, out, _ = run("list")
        assert code == 0
        assert "Initiatives: none" in out

    def test_list(self, governed):
        run = governed
        run("new", "FEAT-1", "Checkout redesign")
        run("new", "FEAT-2", "Search")

        code, out, _ = run("--json", "list")
        assert code == 0
        rows = json.loads(out)
        assert [r["key"] for r in rows] == ["FEAT-1", "FEAT-2"]
        assert rows[0]["progress"] == "1/5"

    def test_list_reports_corrupt_rows(self, governed, config):
        run = governed
        run("new", "FEAT-1", "Checkout redesign")
        (config.initiative_dir("FEAT-1") / "state.yaml").write_text("[broken\n")

        code, out, _ = run("list")
        assert code == 0
        assert "[WARN] CorruptState" in out

    def test_tickets(self, governed):
        code, out, _ = governed("tickets", "FEAT-1", "ux", "--pr-url", "https://git.example/pr/4")

        assert code == 0
        assert "### BA Signoff" in out
        assert "PR: https://git.example/pr/4" in out

    def test_tickets_unknown_artifact(self, governed):
        code, _, err = governed("tickets", "FEAT-1", "design_doc")
        assert code == 1
        assert "Unknown artifact: design_doc" in err
