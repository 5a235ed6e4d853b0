"""Tests covering the actions, goals, plan, explain and simulate CLI commands."""

from __future__ import annotations

import importlib
import json
from typing import TYPE_CHECKING, Any

import pytest
from typer.testing import CliRunner

from goapfolio.cli.runtime import parse_state_assignments
from goapfolio.core.models import WorldField

cli_main = importlib.import_module("goapfolio.cli.main")

if TYPE_CHECKING:
    from pathlib import Path


runner = CliRunner()


def _invoke_json(*args: str) -> Any:
    result = runner.invoke(cli_main.app, [*args, "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_plan_text_output_lists_numbered_actions() -> None:
    """The text rendering shows the goal header and each action in order."""
    result = runner.invoke(cli_main.app, ["plan", "compute_health_scores"])

    assert result.exit_code == 0, result.output
    assert "=== GOAP Plan for Goal: compute_health_scores ===" in result.stdout
    assert "1. Discover Repositories (cost: 3)" in result.stdout
    assert "2. Generate Project Shards [P] (cost: 5)" in result.stdout
    assert "Total Cost: 11" in result.stdout


def test_plan_json_output() -> None:
    """JSON mode prints the plan payload with action ids."""
    payload = _invoke_json("plan", "scan_repositories")

    assert payload["goal_id"] == "scan_repositories"
    assert payload["action_ids"] == ["discover_repos"]
    assert payload["total_cost"] == 3
    assert payload["end_state"]["repos_scanned"] is True


def test_state_override_can_satisfy_goal() -> None:
    """A goal already met by ``--set`` overrides yields an empty plan."""
    payload = _invoke_json("plan", "scan_repositories", "--set", "repos_scanned=true")

    assert payload["action_ids"] == []
    assert payload["total_cost"] == 0


def test_unknown_goal_exits_with_error() -> None:
    """Unknown goal ids are reported with exit code one."""
    result = runner.invoke(cli_main.app, ["plan", "nope"])

    assert result.exit_code == 1
    assert "Unknown goal: nope" in result.output


def test_plan_multi_defaults_to_configured_targets() -> None:
    """Without goal arguments the configured targets are planned."""
    payload = _invoke_json("plan-multi")

    assert [plan["goal_id"] for plan in payload["plans"]] == ["deliver_report"]


def test_plan_multi_orders_goals_by_dependency() -> None:
    """Dependencies are planned first and later plans continue from earlier end states."""
    payload = _invoke_json("plan-multi", "generate_shards", "scan_repositories")

    plans = payload["plans"]
    assert [plan["goal_id"] for plan in plans] == ["scan_repositories", "generate_shards"]
    assert plans[1]["start_state"] == plans[0]["end_state"]


def test_plan_multi_rejects_unknown_goals() -> None:
    """Any unknown id aborts the request."""
    result = runner.invoke(cli_main.app, ["plan-multi", "scan_repositories", "missing"])

    assert result.exit_code == 1
    assert "Unknown goal: missing" in result.output


def test_explain_json_matches_plan() -> None:
    """Every planned action is explained with a reason."""
    payload = _invoke_json("explain", "compute_health_scores")

    assert [item["action"] for item in payload["explanations"]] == payload["plan"]["action_ids"]
    assert all(item["reason"] for item in payload["explanations"])


def test_simulate_replans_after_failure() -> None:
    """A failing action triggers a replanning step from the observed state."""
    payload = _invoke_json("simulate", "compute_health_scores", "--fail", "generate_project_shards")

    assert payload["replanned"] is True
    assert [item["status"] for item in payload["results"]] == ["completed", "failed"]
    assert payload["final_plan"]["action_ids"] == ["generate_project_shards", "compute_health_metrics"]
    assert payload["final_state"]["repos_scanned"] is True


def test_simulate_text_without_failures() -> None:
    """A clean simulation reports every action as completed."""
    result = runner.invoke(cli_main.app, ["simulate", "scan_repositories"])

    assert result.exit_code == 0, result.output
    assert "discover_repos: completed" in result.stdout
    assert "Plan executed without replanning." in result.stdout


def test_invalid_config_exits_with_code_two(tmp_path: Path) -> None:
    """Validation errors are listed with their location."""
    config_path = tmp_path / "goapfolio.toml"
    config_path.write_text("[planner]\nmax_iterations = 0\n", encoding="utf-8")

    result = runner.invoke(cli_main.app, ["plan", "scan_repositories", "--config", str(config_path)])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output
    assert "planner.max_iterations" in result.output


def test_missing_config_exits_with_code_two(tmp_path: Path) -> None:
    """A config path that does not exist is a usage error."""
    result = runner.invoke(cli_main.app, ["plan", "scan_repositories", "--config", str(tmp_path / "none.toml")])

    assert result.exit_code == 2
    assert "Configuration file not found" in result.output


def test_config_state_and_planner_options_are_applied(tmp_path: Path) -> None:
    """The state table seeds the initial state used for planning."""
    config_path = tmp_path / "goapfolio.toml"
    config_path.write_text("[state]\nrepos_scanned = true\n", encoding="utf-8")

    payload = _invoke_json("plan", "generate_shards", "--config", str(config_path))

    assert payload["action_ids"] == ["generate_project_shards"]


def test_bad_state_assignment_exits_with_code_two() -> None:
    """Unknown fields in ``--set`` are rejected before planning."""
    result = runner.invoke(cli_main.app, ["plan", "scan_repositories", "--set", "nonsense=1"])

    assert result.exit_code == 2
    assert "Unknown world state field" in result.output


def test_actions_can_be_filtered_by_phase() -> None:
    """The phase option narrows the listing."""
    result = runner.invoke(cli_main.app, ["actions", "--phase", "output"])

    assert result.exit_code == 0, result.output
    assert "Actions (6):" in result.stdout
    assert "generate_portfolio_brief [P] phase=output cost=2" in result.stdout


def test_goals_achievable_json() -> None:
    """Only goals pursuable from the pristine state are listed."""
    payload = _invoke_json("goals", "--achievable")

    assert [goal["id"] for goal in payload] == ["scan_repositories", "restore_session_context"]
    assert all(goal["distance"] == 1 for goal in payload)


def test_main_returns_exit_codes(capsys: pytest.CaptureFixture[str]) -> None:
    """The console entry point returns the command's exit status."""
    assert cli_main.main(["plan", "scan_repositories"]) == 0
    assert "Goal: scan_repositories" in capsys.readouterr().out

    assert cli_main.main(["plan", "nope"]) == 1


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["plan"], "Missing argument"),
        (["plan", "scan_repositories", "--bogus"], "No such option"),
    ],
)
def test_main_reports_usage_errors_with_code_two(
    argv: list[str],
    message: str,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Usage errors are printed and mapped to exit code two instead of raising."""
    assert cli_main.main(argv) == 2
    assert message in capsys.readouterr().err


def test_parse_state_assignments_converts_values() -> None:
    """Values are converted to the field's type."""
    parsed = parse_state_assignments(["repos_scanned=yes", "project_count=3", "health_score=7.5"])

    assert parsed == {
        WorldField.repos_scanned: True,
        WorldField.project_count: 3,
        WorldField.health_score: 7.5,
    }


@pytest.mark.parametrize(
    ("assignment", "message"),
    [
        ("repos_scanned", "Expected FIELD=VALUE"),
        ("repos_scanned=maybe", "expects true/false"),
        ("project_count=many", "expects a int"),
    ],
)
def test_parse_state_assignments_rejects_bad_input(assignment: str, message: str) -> None:
    """Malformed assignments raise ValueError with a readable message."""
    with pytest.raises(ValueError, match=message):
        parse_state_assignments([assignment])
