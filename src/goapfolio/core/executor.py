"""Execution loop for running plans with observation and replanning."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import time
from typing import TYPE_CHECKING, Protocol

from .actions import apply_action_effects
from .models import ActionResult, ActionStatus

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from goapfolio.io.logging import StructuredLogger

    from .models import Action, Goal, Plan, WorldState
    from .planner import GoapPlanner


class ActionRunner(Protocol):
    """Callable protocol used to perform a single action outside the planner."""

    def __call__(self, action: Action) -> bool:
        """Run ``action`` and return ``True`` when it succeeded."""
        ...


class StateObserver(Protocol):
    """Callable protocol returning the latest observed world state."""

    def __call__(self) -> WorldState:
        """Collect the most recent :class:`WorldState`."""
        ...


@dataclass(slots=True, frozen=True)
class ExecutionResult:
    """Result information for a single executor run."""

    final_plan: Plan | None
    final_state: WorldState
    results: list[ActionResult] = field(default_factory=list)
    replanned: bool = False

    @property
    def executed_actions(self) -> list[str]:
        """Return the ids of actions that completed as simulated."""
        return [result.action_id for result in self.results if result.status is ActionStatus.completed]


class Executor:
    """Drive a plan action-by-action, replanning when reality diverges from the simulation."""

    def __init__(
        self,
        *,
        planner: GoapPlanner,
        observer: StateObserver,
        runner: ActionRunner,
        goal: Goal,
        logger: StructuredLogger | None = None,
    ) -> None:
        """Initialise the executor with the injected collaborators."""
        self._planner = planner
        self._observer = observer
        self._runner = runner
        self._goal = goal
        self._logger = logger

    def execute(self, initial_state: WorldState, plan: Plan | None = None) -> ExecutionResult:
        """Run ``plan`` (planned on demand) and replan from the observed state on divergence."""
        current_plan = plan or self._planner.plan(self._goal, initial_state)
        if current_plan is None:
            return ExecutionResult(final_plan=None, final_state=initial_state)

        results: list[ActionResult] = []
        previous_state = initial_state

        for action in current_plan.actions:
            started_at = datetime.now(UTC)
            started = time.perf_counter()
            success = self._runner(action)
            observed_state = self._observer()
            expected_state = apply_action_effects(action, previous_state)
            diverged = observed_state != expected_state

            status = ActionStatus.completed if success and not diverged else ActionStatus.failed
            results.append(
                ActionResult(
                    action_id=action.id,
                    status=status,
                    started_at=started_at,
                    finished_at=datetime.now(UTC),
                    duration_ms=(time.perf_counter() - started) * 1000.0,
                    error=None if success else "runner reported failure",
                    state_changes=previous_state.diff(observed_state),
                ),
            )

            if status is ActionStatus.failed:
                self._log("replanning after action", action=action.id, success=success, diverged=diverged)
                new_plan = self._planner.plan(self._goal, observed_state)
                return ExecutionResult(
                    final_plan=new_plan,
                    final_state=observed_state,
                    results=results,
                    replanned=True,
                )

            previous_state = observed_state

        return ExecutionResult(final_plan=current_plan, final_state=previous_state, results=results)

    def _log(self, message: str, **fields: object) -> None:
        if self._logger is not None:
            self._logger.info(message, **fields)


__all__ = ["ActionRunner", "ExecutionResult", "Executor", "StateObserver"]
