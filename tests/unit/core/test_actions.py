"""Tests for action evaluation, simulation and sequencing helpers."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from goapfolio.core.actions import (
    apply_action_effects,
    calculate_action_sequence_cost,
    can_execute_action,
    estimate_action_sequence_duration,
    get_executable_actions,
    get_parallelizable_actions,
    group_parallel_runs,
    order_actions_by_dependency,
)
from goapfolio.core.models import Action, Catalog, WorldField, WorldState

F = WorldField
ActionFactory = Callable[..., Action]


def test_action_without_preconditions_is_always_executable(make_action: ActionFactory) -> None:
    """An empty precondition map accepts any state."""
    action = make_action("free")

    assert can_execute_action(action, WorldState())
    assert can_execute_action(action, WorldState(report_delivered=True, project_count=9))


def test_precondition_check_only_looks_at_listed_fields(make_action: ActionFactory) -> None:
    """A flag precondition is decided by that flag alone."""
    action = make_action("needs_scan", preconditions={F.repos_scanned: True})

    assert not can_execute_action(action, WorldState(repos_scanned=False, shards_generated=True))
    assert can_execute_action(action, WorldState(repos_scanned=True))
    assert can_execute_action(action, WorldState(repos_scanned=True, drift_alerts=3, memory_persisted=True))


def test_numeric_preconditions_use_strict_equality(make_action: ActionFactory) -> None:
    """Numeric requirements must match exactly."""
    action = make_action("needs_projects", preconditions={F.project_count: 2})

    assert can_execute_action(action, WorldState(project_count=2))
    assert not can_execute_action(action, WorldState(project_count=3))


def test_apply_effects_returns_new_state_and_keeps_field_set(make_action: ActionFactory) -> None:
    """Only the listed fields change and the input stays untouched."""
    action = make_action(
        "health",
        effects={F.health_scores_computed: True, F.metrics_calculated: True},
    )
    before = WorldState(repos_scanned=True)

    after = apply_action_effects(action, before)

    assert after is not before
    assert before == WorldState(repos_scanned=True)
    assert set(after.model_dump()) == set(before.model_dump())
    assert set(before.diff(after)) == {F.health_scores_computed, F.metrics_calculated}
    assert after.repos_scanned is True


def test_apply_effects_overwrites_unconditionally(make_action: ActionFactory) -> None:
    """Effects set values even when they reset an already completed flag."""
    action = make_action("reset", effects={F.repos_scanned: False, F.completion_percentage: 0})

    after = apply_action_effects(action, WorldState(repos_scanned=True, completion_percentage=40))

    assert after.repos_scanned is False
    assert after.completion_percentage == 0


def test_sequence_cost_sums_declared_costs(make_action: ActionFactory) -> None:
    """Costs are summed without any parallel discount."""
    actions = [
        make_action("a", cost=3),
        make_action("b", cost=2.5, parallelizable=True),
    ]

    assert calculate_action_sequence_cost(actions) == pytest.approx(5.5)
    assert calculate_action_sequence_cost([]) == 0


def test_duration_takes_max_of_parallel_run_plus_serial(make_action: ActionFactory) -> None:
    """[P1(10), P2(20), S1(5)] lasts 20 + 5."""
    actions = [
        make_action("p1", parallelizable=True, timeout=10),
        make_action("p2", parallelizable=True, timeout=20),
        make_action("s1", parallelizable=False, timeout=5),
    ]

    assert estimate_action_sequence_duration(actions) == pytest.approx(25)


def test_serial_action_breaks_parallel_runs(make_action: ActionFactory) -> None:
    """A serial action always stands alone and splits surrounding runs."""
    p1 = make_action("p1", parallelizable=True, timeout=10)
    s1 = make_action("s1", timeout=5)
    p2 = make_action("p2", parallelizable=True, timeout=7)
    p3 = make_action("p3", parallelizable=True, timeout=3)

    runs = group_parallel_runs([s1, p1, s1, p2, p3])

    assert [[action.id for action in run] for run in runs] == [["s1"], ["p1"], ["s1"], ["p2", "p3"]]
    assert estimate_action_sequence_duration([s1, p1, s1, p2, p3]) == pytest.approx(5 + 10 + 5 + 7)
    assert estimate_action_sequence_duration([]) == 0


def test_executable_actions_follow_catalog_order(catalog: Catalog) -> None:
    """Only actions without unmet preconditions are offered from the start."""
    executable = get_executable_actions(catalog.actions, WorldState())

    assert [action.id for action in executable] == ["restore_session", "discover_repos"]


def test_parallelizable_filter(catalog: Catalog) -> None:
    """Filtering keeps only parallelizable actions."""
    parallel = get_parallelizable_actions(catalog.actions)

    assert parallel
    assert all(action.parallelizable for action in parallel)
    assert "finalize_output_files" not in {action.id for action in parallel}


def test_order_by_dependency_puts_producers_first(make_action: ActionFactory) -> None:
    """Consumers follow the actions whose effects satisfy their preconditions."""
    produce_a = make_action("produce_a", effects={F.repos_scanned: True})
    produce_b = make_action(
        "produce_b",
        preconditions={F.repos_scanned: True},
        effects={F.shards_generated: True},
    )
    consume_b = make_action("consume_b", preconditions={F.shards_generated: True})

    ordered = order_actions_by_dependency([consume_b, produce_b, produce_a])

    assert [action.id for action in ordered] == ["produce_a", "produce_b", "consume_b"]


def test_order_by_dependency_breaks_cycles_with_first_remaining(make_action: ActionFactory) -> None:
    """Mutually dependent actions still terminate, starting with the first listed."""
    first = make_action(
        "first",
        preconditions={F.shards_generated: True},
        effects={F.repos_scanned: True},
    )
    second = make_action(
        "second",
        preconditions={F.repos_scanned: True},
        effects={F.shards_generated: True},
    )

    ordered = order_actions_by_dependency([first, second])

    assert [action.id for action in ordered] == ["first", "second"]
