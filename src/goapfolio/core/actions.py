"""Helpers that evaluate and simulate catalog actions against world states."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import values_match

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable, Sequence

    from .models import Action, WorldState


def can_execute_action(action: Action, state: WorldState) -> bool:
    """Return ``True`` when every precondition of ``action`` holds in ``state``.

    Only the fields listed in ``action.preconditions`` are checked, using strict
    equality: a boolean flag never matches a numeric value.
    """
    return all(
        values_match(state.get(field), expected)
        for field, expected in action.preconditions.items()
    )


def apply_action_effects(action: Action, state: WorldState) -> WorldState:
    """Return a copy of ``state`` with the effects of ``action`` written over it."""
    if not action.effects:
        return state.model_copy()
    return state.model_copy(update={field.value: value for field, value in action.effects.items()})


def calculate_action_sequence_cost(actions: Iterable[Action]) -> float:
    """Sum the declared cost of every action in ``actions``."""
    return float(sum(action.cost for action in actions))


def group_parallel_runs(actions: Sequence[Action]) -> list[list[Action]]:
    """Split ``actions`` into maximal contiguous runs that may execute together.

    A run grows only while both its first action and the incoming action are
    parallelizable; any serial action forms a run on its own.
    """
    groups: list[list[Action]] = []
    current: list[Action] = []

    for action in actions:
        if action.parallelizable and current and current[0].parallelizable:
            current.append(action)
            continue
        if current:
            groups.append(current)
        current = [action]

    if current:
        groups.append(current)
    return groups


def estimate_action_sequence_duration(actions: Sequence[Action]) -> float:
    """Estimate wall time for ``actions`` assuming parallel runs overlap fully."""
    return float(sum(max(action.timeout for action in group) for group in group_parallel_runs(actions)))


def get_executable_actions(actions: Iterable[Action], state: WorldState) -> list[Action]:
    """Return the actions whose preconditions hold in ``state``, in catalog order."""
    return [action for action in actions if can_execute_action(action, state)]


def get_parallelizable_actions(actions: Iterable[Action]) -> list[Action]:
    return [action for action in actions if action.parallelizable]


def _preconditions_produced(action: Action, ordered: Sequence[Action]) -> bool:
    return all(
        any(
            field in previous.effects and values_match(previous.effects[field], expected)
            for previous in ordered
        )
        for field, expected in action.preconditions.items()
    )


def order_actions_by_dependency(actions: Sequence[Action]) -> list[Action]:
    """Order ``actions`` so producers of a precondition come before its consumers.

    Each pass moves every remaining action whose preconditions are all set by an
    already ordered action. When nothing qualifies the first remaining action is
    taken as-is so the ordering always terminates.
    """
    ordered: list[Action] = []
    remaining = list(actions)

    while remaining:
        ready = [action for action in remaining if _preconditions_produced(action, ordered)]
        if not ready:
            ordered.append(remaining.pop(0))
            continue
        for action in ready:
            ordered.append(action)
            remaining.remove(action)

    return ordered


__all__ = [
    "apply_action_effects",
    "calculate_action_sequence_cost",
    "can_execute_action",
    "estimate_action_sequence_duration",
    "get_executable_actions",
    "get_parallelizable_actions",
    "group_parallel_runs",
    "order_actions_by_dependency",
]
