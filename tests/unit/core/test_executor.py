"""Tests for the executor replanning loop."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from goapfolio.core import (
    ActionStatus,
    Catalog,
    ExecutionResult,
    Executor,
    GoapPlanner,
    WorldField,
    WorldState,
    apply_action_effects,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Callable

    from goapfolio.core import Action, Goal


@pytest.fixture
def planner(catalog: Catalog) -> GoapPlanner:
    """Planner over the portfolio catalog."""
    return GoapPlanner(catalog)


@pytest.fixture
def goal(catalog: Catalog) -> Goal:
    """Goal needing a three step plan from the pristine state."""
    found = catalog.get_goal("compute_health_scores")
    assert found is not None
    return found


class FakePipeline:
    """Applies declared effects unless told to fail or drift."""

    def __init__(self, state: WorldState, *, fail: str | None = None, drift: str | None = None) -> None:
        self.state = state
        self.fail = fail
        self.drift = drift
        self.calls: list[str] = []

    def run(self, action: Action) -> bool:
        self.calls.append(action.id)
        if action.id == self.fail:
            return False
        self.state = apply_action_effects(action, self.state)
        if action.id == self.drift:
            self.state = self.state.model_copy(update={"drift_alerts": 2})
        return True

    def observe(self) -> WorldState:
        return self.state


def test_executor_completes_without_replan(planner: GoapPlanner, goal: Goal) -> None:
    """Executor finishes when actions succeed and observations match the simulation."""
    pipeline = FakePipeline(WorldState())
    executor = Executor(planner=planner, observer=pipeline.observe, runner=pipeline.run, goal=goal)

    result = executor.execute(WorldState())

    assert isinstance(result, ExecutionResult)
    assert not result.replanned
    assert result.final_plan is not None
    assert result.executed_actions == result.final_plan.action_ids == pipeline.calls
    assert all(item.status is ActionStatus.completed for item in result.results)
    assert result.final_state.health_scores_computed is True


def test_executor_records_state_changes(planner: GoapPlanner, goal: Goal) -> None:
    """Each result lists the fields its action changed."""
    pipeline = FakePipeline(WorldState())
    executor = Executor(planner=planner, observer=pipeline.observe, runner=pipeline.run, goal=goal)

    result = executor.execute(WorldState())

    first = result.results[0]
    assert first.action_id == "discover_repos"
    assert dict(first.state_changes) == {WorldField.repos_scanned: True}
    assert first.duration_ms is not None
    assert first.finished_at is not None


def test_executor_replans_on_action_failure(planner: GoapPlanner, goal: Goal) -> None:
    """A failed action stops execution and replans from the observed state."""
    pipeline = FakePipeline(WorldState(), fail="generate_project_shards")
    executor = Executor(planner=planner, observer=pipeline.observe, runner=pipeline.run, goal=goal)

    result = executor.execute(WorldState())

    assert result.replanned
    assert result.executed_actions == ["discover_repos"]
    assert result.results[-1].status is ActionStatus.failed
    assert result.results[-1].error
    assert result.final_state == WorldState(repos_scanned=True)
    assert result.final_plan is not None
    assert result.final_plan.start_state == result.final_state
    assert result.final_plan.action_ids == ["generate_project_shards", "compute_health_metrics"]


def test_executor_replans_when_observation_diverges(planner: GoapPlanner, goal: Goal) -> None:
    """Unexpected side effects in the observed state trigger a new plan."""
    pipeline = FakePipeline(WorldState(), drift="discover_repos")
    executor = Executor(planner=planner, observer=pipeline.observe, runner=pipeline.run, goal=goal)

    result = executor.execute(WorldState())

    assert result.replanned
    assert result.executed_actions == []
    assert result.final_state.drift_alerts == 2
    assert result.final_plan is not None
    assert result.final_plan.start_state.drift_alerts == 2


def test_executor_without_reachable_plan(catalog: Catalog, make_goal: Callable[..., Goal]) -> None:
    """When no plan exists the executor does nothing."""
    impossible = make_goal("impossible", target_state={"drift_alerts": 9})
    pipeline = FakePipeline(WorldState())
    executor = Executor(
        planner=GoapPlanner(Catalog(actions=catalog.actions[:2])),
        observer=pipeline.observe,
        runner=pipeline.run,
        goal=impossible,
    )

    result = executor.execute(WorldState())

    assert result.final_plan is None
    assert result.results == []
    assert pipeline.calls == []
