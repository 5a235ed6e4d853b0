"""Shared fixtures for the goapfolio test suite."""
from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import pytest

from goapfolio.catalog import portfolio_catalog
from goapfolio.core.models import Action, ActionPhase, Catalog, Goal, GoalCategory, WorldState
from goapfolio.io.logging import StructuredLogger

if TYPE_CHECKING:
    from collections.abc import Callable

    ActionFactory = Callable[..., Action]
    GoalFactory = Callable[..., Goal]


@pytest.fixture
def initial_state() -> WorldState:
    """Return the pristine pipeline state."""
    return WorldState()


@pytest.fixture
def catalog() -> Catalog:
    """Return the shipped portfolio catalog."""
    return portfolio_catalog()


@pytest.fixture
def log_stream() -> io.StringIO:
    """Buffer capturing structured log output."""
    return io.StringIO()


@pytest.fixture
def logger(log_stream: io.StringIO) -> StructuredLogger:
    """JSON logger writing every level into ``log_stream``."""
    return StructuredLogger(name="goapfolio.test", json_mode=True, stream=log_stream, level="DEBUG")


@pytest.fixture
def make_action() -> ActionFactory:
    """Build catalog actions with terse defaults."""

    def _make(action_id: str, **overrides: Any) -> Action:
        fields: dict[str, Any] = {
            "id": action_id,
            "name": action_id.replace("_", " ").title(),
            "phase": ActionPhase.analysis,
            "cost": 1.0,
        }
        fields.update(overrides)
        return Action(**fields)

    return _make


@pytest.fixture
def make_goal() -> GoalFactory:
    """Build goals with terse defaults."""

    def _make(goal_id: str, **overrides: Any) -> Goal:
        fields: dict[str, Any] = {
            "id": goal_id,
            "name": goal_id.replace("_", " ").title(),
            "category": GoalCategory.analysis,
            "target_state": {},
        }
        fields.update(overrides)
        return Goal(**fields)

    return _make
