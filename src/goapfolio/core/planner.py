"""Weighted A* planner and multi-goal orchestration for goapfolio."""

from __future__ import annotations

from dataclasses import dataclass
import heapq
import time
from typing import TYPE_CHECKING

from goapfolio.io.logging import StructuredLogger

from .actions import (
    apply_action_effects,
    calculate_action_sequence_cost,
    can_execute_action,
    estimate_action_sequence_duration,
)
from .goals import is_goal_satisfied, unmet_target_fields
from .models import Plan, PlannerOptions, values_match

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Sequence

    from .models import Action, Catalog, FieldValue, Goal, WorldField, WorldState


PARALLEL_COST_DISCOUNT = 0.9
MISSING_EFFECT_COST = 10.0
FULL_ANALYSIS_GOAL_ID = "deliver_report"

StateKey = tuple["FieldValue", ...]


@dataclass(frozen=True, slots=True)
class PlanNode:
    """Search node wrapping a world state reached through a chain of actions."""

    state: WorldState
    action: Action | None
    parent: PlanNode | None
    g: float
    h: float
    f: float
    depth: int
    sequence: int


class _Frontier:
    """Binary heap of open nodes with replace-on-cheaper semantics per state key.

    Heap entries are ordered by ``(f, sequence, push)``. Replaced nodes keep the
    sequence number of the node they supersede, so ties still resolve by the
    order in which a state first entered the frontier. The push counter is
    unique per entry so nodes themselves are never compared. Superseded entries
    stay in the heap and are dropped when popped.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, int, PlanNode]] = []
        self._live: dict[StateKey, PlanNode] = {}
        self._counter = 0
        self._pushes = 0

    def __len__(self) -> int:
        return len(self._live)

    def next_sequence(self) -> int:
        sequence = self._counter
        self._counter += 1
        return sequence

    def get(self, key: StateKey) -> PlanNode | None:
        return self._live.get(key)

    def push(self, key: StateKey, node: PlanNode) -> None:
        self._live[key] = node
        heapq.heappush(self._heap, (node.f, node.sequence, self._pushes, node))
        self._pushes += 1

    def pop(self) -> PlanNode | None:
        while self._heap:
            _, _, _, node = heapq.heappop(self._heap)
            key = node.state.key()
            if self._live.get(key) is node:
                del self._live[key]
                return node
        return None


class GoapPlanner:
    """Weighted A* planner searching a catalog of actions for goal-reaching sequences.

    The heuristic sums, for every unmet target field, the cheapest single action
    that sets it, ignoring that action's own prerequisites. Together with a
    weight above one this makes the search greedy: plans are valid but not
    guaranteed to be the cheapest. Closed states are never reopened.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        options: PlannerOptions | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        """Create a planner bound to a read-only ``catalog``."""
        self._catalog = catalog
        self._actions: tuple[Action, ...] = catalog.actions
        self._options = options or PlannerOptions()
        self._logger = logger or StructuredLogger(name="goapfolio.planner", level="WARNING")
        self._effect_costs = self._index_effect_costs(self._actions)
        self.last_failure: str | None = None

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def options(self) -> PlannerOptions:
        return self._options

    @staticmethod
    def _index_effect_costs(actions: Sequence[Action]) -> dict[WorldField, list[tuple[FieldValue, float]]]:
        index: dict[WorldField, list[tuple[FieldValue, float]]] = {}
        for action in actions:
            for field, value in action.effects.items():
                index.setdefault(field, []).append((value, action.cost))
        return index

    def effective_cost(self, action: Action) -> float:
        """Return the search cost of ``action``, discounted when parallel work is preferred."""
        if self._options.prefer_parallel and action.parallelizable:
            return action.cost * PARALLEL_COST_DISCOUNT
        return action.cost

    def min_cost_for_effect(self, field: WorldField, value: FieldValue) -> float:
        """Return the cheapest catalog cost that sets ``field`` to ``value``."""
        costs = [
            cost
            for produced, cost in self._effect_costs.get(field, [])
            if values_match(produced, value)
        ]
        return min(costs) if costs else MISSING_EFFECT_COST

    def calculate_heuristic(self, state: WorldState, goal: Goal) -> float:
        """Estimate the remaining cost from ``state`` to ``goal``."""
        return sum(
            self.min_cost_for_effect(field, goal.target_state[field])
            for field in unmet_target_fields(goal, state)
        )

    def plan(self, goal: Goal, initial_state: WorldState) -> Plan | None:
        """Search for an action sequence that takes ``initial_state`` to ``goal``.

        Returns ``None`` when the frontier empties, the iteration budget runs
        out, or the wall-clock budget elapses before a satisfying state is
        popped. No partial plan is returned in those cases.
        """
        started = time.perf_counter()
        self.last_failure = None
        log = self._logger.bind(goal=goal.id)

        if is_goal_satisfied(goal, initial_state):
            log.debug("goal already satisfied")
            return self._build_plan([], goal, initial_state, initial_state, started, 0)

        options = self._options
        frontier = _Frontier()
        closed: set[StateKey] = set()
        nodes_explored = 0

        h = self.calculate_heuristic(initial_state, goal)
        root = PlanNode(
            state=initial_state,
            action=None,
            parent=None,
            g=0.0,
            h=h,
            f=options.heuristic_weight * h,
            depth=0,
            sequence=frontier.next_sequence(),
        )
        frontier.push(initial_state.key(), root)

        failure = "iteration_budget_exhausted"
        while nodes_explored < options.max_iterations:
            if (time.perf_counter() - started) * 1000.0 > options.timeout_ms:
                failure = "timeout"
                break

            current = frontier.pop()
            if current is None:
                failure = "goal_unreachable"
                break
            nodes_explored += 1

            if is_goal_satisfied(goal, current.state):
                plan = self._build_plan(
                    self._reconstruct_actions(current), goal, initial_state, current.state, started, nodes_explored,
                )
                log.info(
                    "plan found",
                    actions=plan.action_ids,
                    total_cost=plan.total_cost,
                    nodes_explored=nodes_explored,
                )
                return plan

            state_key = current.state.key()
            # Kept for step order; pop already drops superseded entries.
            if state_key in closed:
                continue
            closed.add(state_key)

            if current.depth >= options.max_plan_length:
                continue

            self._expand(current, goal, frontier, closed)

        self.last_failure = failure
        log.warning(
            "no plan found",
            reason=failure,
            nodes_explored=nodes_explored,
            frontier_size=len(frontier),
        )
        return None

    def _expand(self, node: PlanNode, goal: Goal, frontier: _Frontier, closed: set[StateKey]) -> None:
        weight = self._options.heuristic_weight
        for action in self._actions:
            if not can_execute_action(action, node.state):
                continue

            successor = apply_action_effects(action, node.state)
            successor_key = successor.key()
            if successor_key in closed:
                continue

            g = node.g + self.effective_cost(action)
            existing = frontier.get(successor_key)
            if existing is not None and g >= existing.g:
                continue

            h = self.calculate_heuristic(successor, goal)
            frontier.push(
                successor_key,
                PlanNode(
                    state=successor,
                    action=action,
                    parent=node,
                    g=g,
                    h=h,
                    f=g + weight * h,
                    depth=node.depth + 1,
                    sequence=existing.sequence if existing is not None else frontier.next_sequence(),
                ),
            )

    @staticmethod
    def _reconstruct_actions(node: PlanNode) -> list[Action]:
        actions: list[Action] = []
        current: PlanNode | None = node
        while current is not None and current.action is not None:
            actions.append(current.action)
            current = current.parent
        actions.reverse()
        return actions

    @staticmethod
    def _build_plan(
        actions: list[Action],
        goal: Goal,
        start_state: WorldState,
        end_state: WorldState,
        started: float,
        nodes_explored: int,
    ) -> Plan:
        return Plan(
            actions=actions,
            total_cost=calculate_action_sequence_cost(actions),
            estimated_duration=estimate_action_sequence_duration(actions),
            goal_id=goal.id,
            start_state=start_state,
            end_state=end_state,
            planning_time_ms=(time.perf_counter() - started) * 1000.0,
            nodes_explored=nodes_explored,
        )

    def plan_by_id(self, goal_id: str, initial_state: WorldState) -> Plan | None:
        """Plan for the catalog goal named ``goal_id``; unknown ids yield ``None``."""
        goal = self._catalog.get_goal(goal_id)
        if goal is None:
            self.last_failure = "unknown_goal"
            self._logger.warning("unknown goal id", goal=goal_id)
            return None
        return self.plan(goal, initial_state)

    def plan_full_analysis(self, initial_state: WorldState) -> Plan | None:
        """Plan the complete pipeline up to delivering the final report."""
        return self.plan_by_id(FULL_ANALYSIS_GOAL_ID, initial_state)

    @staticmethod
    def sort_goals_by_dependency(goals: Sequence[Goal]) -> list[Goal]:
        """Order ``goals`` so that declared dependencies come first.

        Each step takes the first goal whose dependencies are already ordered or
        are not part of the remaining set. When no goal is ready (a dependency
        cycle) the first remaining goal is taken so the ordering terminates.
        """
        ordered: list[Goal] = []
        remaining = list(goals)

        while remaining:
            ordered_ids = {goal.id for goal in ordered}
            remaining_ids = {goal.id for goal in remaining}
            index = next(
                (
                    position
                    for position, goal in enumerate(remaining)
                    if all(dep in ordered_ids or dep not in remaining_ids for dep in goal.depends_on)
                ),
                0,
            )
            ordered.append(remaining.pop(index))

        return ordered

    def plan_multiple(self, goals: Sequence[Goal], initial_state: WorldState) -> list[Plan] | None:
        """Plan ``goals`` in dependency order, chaining each plan's end state.

        Goals already satisfied by the running state are skipped. Any goal that
        cannot be planned aborts the whole request with ``None``.
        """
        plans: list[Plan] = []
        current_state = initial_state

        for goal in self.sort_goals_by_dependency(goals):
            if is_goal_satisfied(goal, current_state):
                continue

            plan = self.plan(goal, current_state)
            if plan is None:
                self._logger.warning("multi-goal planning aborted", goal=goal.id, reason=self.last_failure)
                return None

            plans.append(plan)
            current_state = plan.end_state

        return plans


def create_planner(
    options: PlannerOptions | None = None,
    *,
    logger: StructuredLogger | None = None,
) -> GoapPlanner:
    """Return a planner over the shipped portfolio catalog."""
    from goapfolio.catalog import portfolio_catalog

    return GoapPlanner(portfolio_catalog(), options=options, logger=logger)


def plan_full_analysis(
    initial_state: WorldState | None = None,
    options: PlannerOptions | None = None,
) -> Plan | None:
    """Plan the full portfolio analysis from ``initial_state`` (pristine by default)."""
    from .models import create_initial_world_state

    planner = create_planner(options)
    return planner.plan_full_analysis(initial_state or create_initial_world_state())


__all__ = [
    "FULL_ANALYSIS_GOAL_ID",
    "MISSING_EFFECT_COST",
    "PARALLEL_COST_DISCOUNT",
    "GoapPlanner",
    "PlanNode",
    "create_planner",
    "plan_full_analysis",
]
