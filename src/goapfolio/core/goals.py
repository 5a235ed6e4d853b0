"""Goal evaluation helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import values_match

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Iterable

    from .models import Goal, WorldField, WorldState


def unmet_target_fields(goal: Goal, state: WorldState) -> list[WorldField]:
    """Return the target fields of ``goal`` that ``state`` does not yet satisfy."""
    return [
        field
        for field, expected in goal.target_state.items()
        if not values_match(state.get(field), expected)
    ]


def is_goal_satisfied(goal: Goal, state: WorldState) -> bool:
    """Return ``True`` when every field named in the goal's target matches ``state``.

    Fields absent from ``goal.target_state`` are ignored.
    """
    return not unmet_target_fields(goal, state)


def calculate_goal_distance(goal: Goal, state: WorldState) -> int:
    """Count the target fields of ``goal`` that differ in ``state`` (0 means satisfied)."""
    return len(unmet_target_fields(goal, state))


def get_achievable_goals(goals: Iterable[Goal], state: WorldState) -> list[Goal]:
    """Return goals that are still open and whose gating predicate accepts ``state``."""
    return [
        goal
        for goal in goals
        if not is_goal_satisfied(goal, state) and goal.is_pursuable(state)
    ]


__all__ = [
    "calculate_goal_distance",
    "get_achievable_goals",
    "is_goal_satisfied",
    "unmet_target_fields",
]
