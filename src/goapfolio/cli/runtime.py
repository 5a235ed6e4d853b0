"""Helpers shared across CLI commands for planning and simulation."""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from goapfolio.catalog import portfolio_catalog
from goapfolio.core.actions import apply_action_effects
from goapfolio.core.models import Config, WorldField, create_initial_world_state, field_kind
from goapfolio.core.planner import GoapPlanner
from goapfolio.io import StructuredLogger, load_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from goapfolio.core.executor import ActionRunner, StateObserver
    from goapfolio.core.models import Action, Catalog, FieldValue, Goal, WorldState


@dataclass(slots=True)
class PlanningContext:
    """Container bundling CLI dependencies for planning."""

    config: Config
    logger: StructuredLogger
    catalog: Catalog
    planner: GoapPlanner
    initial_state: WorldState

    def resolve_goals(self, goal_ids: Sequence[str]) -> tuple[list[Goal], list[str]]:
        """Return the known goals for ``goal_ids`` and the ids that are unknown."""
        goals: list[Goal] = []
        unknown: list[str] = []
        for goal_id in goal_ids:
            goal = self.catalog.get_goal(goal_id)
            if goal is None:
                unknown.append(goal_id)
            else:
                goals.append(goal)
        return goals, unknown


def default_config() -> Config:
    """Return the configuration used when no config file is provided."""
    return Config()


def load_cli_config(config_path: Path | None) -> Config:
    """Load configuration from ``config_path`` or fall back to defaults."""
    if config_path is None:
        return default_config()
    return load_config(path=config_path)


def _parse_value(field: WorldField, raw: str) -> FieldValue:
    kind = field_kind(field)
    text = raw.strip()
    if kind is bool:
        lowered = text.lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
        msg = f"{field.value} expects true/false, got {raw!r}"
        raise ValueError(msg)
    try:
        return int(text) if kind is int else float(text)
    except ValueError as exc:
        msg = f"{field.value} expects a {kind.__name__}, got {raw!r}"
        raise ValueError(msg) from exc


def parse_state_assignments(assignments: Sequence[str]) -> dict[WorldField, FieldValue]:
    """Parse ``FIELD=VALUE`` strings into a sparse world state mapping."""
    parsed: dict[WorldField, FieldValue] = {}
    for assignment in assignments:
        name, separator, raw_value = assignment.partition("=")
        if not separator:
            msg = f"Expected FIELD=VALUE, got {assignment!r}"
            raise ValueError(msg)
        try:
            field = WorldField(name.strip())
        except ValueError as exc:
            msg = f"Unknown world state field: {name.strip()!r}"
            raise ValueError(msg) from exc
        parsed[field] = _parse_value(field, raw_value)
    return parsed


def build_planning_context(
    config: Config,
    *,
    state_assignments: Sequence[str] = (),
    json_logs: bool,
    silence_logs: bool,
) -> PlanningContext:
    """Assemble the context required by CLI commands."""
    stream = io.StringIO() if silence_logs else sys.stderr
    logger = StructuredLogger(
        name="goapfolio.cli",
        json_mode=json_logs or config.logging.json_mode,
        stream=stream,
        level=config.logging.level,
    )
    overrides = {**config.initial_state, **parse_state_assignments(state_assignments)}
    catalog = portfolio_catalog()
    planner = GoapPlanner(catalog, options=config.planner, logger=logger.bind(component="planner"))
    return PlanningContext(
        config=config,
        logger=logger,
        catalog=catalog,
        planner=planner,
        initial_state=create_initial_world_state(overrides),
    )


@dataclass(slots=True)
class SimulatedPipeline:
    """In-memory stand-in for the real pipeline, used by the ``simulate`` command.

    Actions apply their declared effects unless their id is listed in
    ``failing_actions``, in which case the state is left untouched.
    """

    state: WorldState
    failing_actions: frozenset[str] = frozenset()

    @property
    def runner(self) -> ActionRunner:
        def run(action: Action) -> bool:
            if action.id in self.failing_actions:
                return False
            self.state = apply_action_effects(action, self.state)
            return True

        return run

    @property
    def observer(self) -> StateObserver:
        def observe() -> WorldState:
            return self.state

        return observe


__all__ = [
    "PlanningContext",
    "SimulatedPipeline",
    "build_planning_context",
    "default_config",
    "load_cli_config",
    "parse_state_assignments",
]
