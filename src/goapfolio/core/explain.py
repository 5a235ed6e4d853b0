"""Utilities for rendering and explaining plans to users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .actions import calculate_action_sequence_cost, estimate_action_sequence_duration
from .models import values_match

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import Action, Catalog, Plan


@dataclass(frozen=True, slots=True)
class ActionExplanation:
    """Human readable explanation for an action within a plan."""

    action: Action
    reason: str
    alternatives: tuple[str, ...]
    cost: float
    parallel: bool


def _format_seconds(milliseconds: float) -> str:
    return f"{milliseconds / 1000:.1f}s"


def _format_number(value: float) -> str:
    return f"{value:g}"


def format_plan(plan: Plan) -> str:
    """Render ``plan`` as a deterministic, numbered text block."""
    lines: list[str] = [
        f"=== GOAP Plan for Goal: {plan.goal_id} ===",
        f"Total Cost: {_format_number(plan.total_cost)}",
        f"Estimated Duration: {_format_seconds(plan.estimated_duration)}",
        f"Planning Time: {plan.planning_time_ms:.0f}ms",
        f"Nodes Explored: {plan.nodes_explored}",
        "",
        "--- Action Sequence ---",
    ]
    if not plan.actions:
        lines.append("(goal already satisfied; no actions required)")
    for index, action in enumerate(plan.actions, start=1):
        parallel = " [P]" if action.parallelizable else ""
        lines.append(f"{index}. {action.name}{parallel} (cost: {_format_number(action.cost)})")
        if action.description:
            lines.append(f"   └─ {action.description}")
    lines.extend(["", "=== End Plan ==="])
    return "\n".join(lines)


def format_plans(plans: Sequence[Plan]) -> str:
    """Render a chain of plans followed by the combined totals."""
    sections = [format_plan(plan) for plan in plans]
    actions = [action for plan in plans for action in plan.actions]
    summary = [
        "=== Summary ===",
        f"Goals Planned: {len(plans)}",
        f"Total Actions: {len(actions)}",
        f"Total Cost: {_format_number(calculate_action_sequence_cost(actions))}",
        f"Estimated Duration: {_format_seconds(estimate_action_sequence_duration(actions))}",
    ]
    return "\n\n".join([*sections, "\n".join(summary)])


def _alternatives_for(action: Action, catalog: Catalog) -> tuple[str, ...]:
    if not action.effects:
        return ()
    return tuple(
        candidate.id
        for candidate in catalog.actions
        if candidate.id != action.id
        and any(
            field in candidate.effects and values_match(candidate.effects[field], value)
            for field, value in action.effects.items()
        )
    )


def explain_plan(plan: Plan, catalog: Catalog) -> list[ActionExplanation]:
    """Generate explanations for each action within ``plan``.

    Args:
        plan: The plan to explain.
        catalog: Catalog used to look up alternative actions that produce at
            least one of the same effects.

    Returns:
        A list of :class:`ActionExplanation` entries mirroring the order of
        actions within ``plan``.

    """
    return [
        ActionExplanation(
            action=action,
            reason=action.description or "No description provided.",
            alternatives=_alternatives_for(action, catalog),
            cost=action.cost,
            parallel=action.parallelizable,
        )
        for action in plan.actions
    ]


__all__ = ["ActionExplanation", "explain_plan", "format_plan", "format_plans"]
