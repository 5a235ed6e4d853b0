"""Core data models for goapfolio."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
import typing

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class WorldField(str, Enum):
    """Identifiers for every world state field, in canonical key order."""

    repos_scanned = "repos_scanned"
    shards_generated = "shards_generated"
    metrics_calculated = "metrics_calculated"
    brief_generated = "brief_generated"
    dashboard_built = "dashboard_built"
    drift_analyzed = "drift_analyzed"
    health_scores_computed = "health_scores_computed"
    ai_insights_generated = "ai_insights_generated"
    strategic_recommendations_ready = "strategic_recommendations_ready"
    neural_patterns_recorded = "neural_patterns_recorded"
    semantic_embeddings_computed = "semantic_embeddings_computed"
    memory_persisted = "memory_persisted"
    session_context_restored = "session_context_restored"
    output_files_written = "output_files_written"
    report_delivered = "report_delivered"
    project_count = "project_count"
    health_score = "health_score"
    drift_alerts = "drift_alerts"
    completion_percentage = "completion_percentage"


FieldValue = bool | int | float
PartialState = Mapping[WorldField, FieldValue]

_INT_FIELDS = frozenset(
    {WorldField.project_count, WorldField.drift_alerts, WorldField.completion_percentage},
)
_FLOAT_FIELDS = frozenset({WorldField.health_score})


def field_kind(field: WorldField) -> type:
    """Return the Python type a value for ``field`` must have."""
    if field in _INT_FIELDS:
        return int
    if field in _FLOAT_FIELDS:
        return float
    return bool


def _check_field_value(field: WorldField, value: object) -> None:
    kind = field_kind(field)
    if kind is bool:
        valid = isinstance(value, bool)
    elif kind is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, int | float) and not isinstance(value, bool)
    if not valid:
        msg = f"{field.value} expects a {kind.__name__} value, got {value!r}"
        raise ValueError(msg)


def _validate_partial_state(value: PartialState) -> dict[WorldField, FieldValue]:
    for field, item in value.items():
        _check_field_value(field, item)
    return dict(value)


class WorldState(BaseModel):
    """Snapshot of pipeline progress flags and metrics used for planning."""

    repos_scanned: bool = False
    shards_generated: bool = False
    metrics_calculated: bool = False
    brief_generated: bool = False
    dashboard_built: bool = False
    drift_analyzed: bool = False
    health_scores_computed: bool = False
    ai_insights_generated: bool = False
    strategic_recommendations_ready: bool = False
    neural_patterns_recorded: bool = False
    semantic_embeddings_computed: bool = False
    memory_persisted: bool = False
    session_context_restored: bool = False
    output_files_written: bool = False
    report_delivered: bool = False
    project_count: int = 0
    health_score: float = 0.0
    drift_alerts: int = 0
    completion_percentage: int = 0

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    def get(self, field: WorldField) -> FieldValue:
        """Return the value stored for ``field``."""
        return typing.cast("FieldValue", getattr(self, field.value))

    def key(self) -> tuple[FieldValue, ...]:
        """Return the canonical, declaration-ordered encoding of this state."""
        return tuple(getattr(self, field.value) for field in WorldField)

    def diff(self, other: WorldState) -> dict[WorldField, FieldValue]:
        """Return the fields whose value differs in ``other``, with ``other``'s values."""
        return {
            field: other.get(field)
            for field in WorldField
            if not values_match(self.get(field), other.get(field))
        }


def values_match(actual: FieldValue, expected: FieldValue) -> bool:
    """Compare two field values without coercing booleans into numbers."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def create_initial_world_state(overrides: PartialState | None = None) -> WorldState:
    """Return the pristine pipeline state, optionally patched with ``overrides``."""
    if not overrides:
        return WorldState()
    updates = _validate_partial_state({WorldField(field): value for field, value in overrides.items()})
    return WorldState.model_validate(
        {field.value: field_kind(field)(value) for field, value in updates.items()},
    )


class ActionPhase(str, Enum):
    """Pipeline phase an action belongs to."""

    discovery = "discovery"
    analysis = "analysis"
    generation = "generation"
    quality = "quality"
    output = "output"
    learning = "learning"
    memory = "memory"


class ActionStatus(str, Enum):
    """Lifecycle of an action run by a caller."""

    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    skipped = "skipped"


class GoalPriority(str, Enum):
    """Importance ranking attached to goals."""

    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


class GoalCategory(str, Enum):
    """Grouping of goals by pipeline concern."""

    analysis = "analysis"
    quality = "quality"
    insight = "insight"
    output = "output"
    learning = "learning"
    memory = "memory"


class Action(BaseModel):
    """Catalog entry describing a simulated pipeline step."""

    id: str
    name: str
    description: str = ""
    phase: ActionPhase
    preconditions: PartialState = Field(default_factory=dict)
    effects: PartialState = Field(default_factory=dict)
    cost: float = Field(ge=0.0)
    parallelizable: bool = False
    timeout: float = Field(default=0.0, ge=0.0)
    skill_module: str | None = None
    executor: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("preconditions", "effects")
    @classmethod
    def _check_partial_state(cls, value: PartialState) -> dict[WorldField, FieldValue]:
        """Reject values whose type does not match the field they target."""
        return _validate_partial_state(value)


class Goal(BaseModel):
    """Catalog entry describing a desired partial world state."""

    id: str
    name: str
    description: str = ""
    category: GoalCategory
    priority: GoalPriority = GoalPriority.medium
    target_state: PartialState
    preconditions: Callable[[WorldState], bool] | None = Field(default=None, exclude=True)
    desirability: float = Field(default=0.5, ge=0.0, le=1.0)
    estimated_duration: float = Field(default=0.0, ge=0.0)
    parallelizable: bool = False
    depends_on: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("target_state")
    @classmethod
    def _check_target_state(cls, value: PartialState) -> dict[WorldField, FieldValue]:
        """Reject target values whose type does not match the field."""
        return _validate_partial_state(value)

    def is_pursuable(self, state: WorldState) -> bool:
        """Evaluate the optional predicate gating this goal against ``state``."""
        if self.preconditions is None:
            return True
        return bool(self.preconditions(state))


def _empty_actions() -> tuple[Action, ...]:
    return ()


def _empty_goals() -> tuple[Goal, ...]:
    return ()


class Catalog(BaseModel):
    """Read-only, ordered collection of the actions and goals available to planning."""

    actions: tuple[Action, ...] = Field(default_factory=_empty_actions)
    goals: tuple[Goal, ...] = Field(default_factory=_empty_goals)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_unique_ids(self) -> Catalog:
        for label, ids in (
            ("action", [action.id for action in self.actions]),
            ("goal", [goal.id for goal in self.goals]),
        ):
            duplicates = sorted({item for item in ids if ids.count(item) > 1})
            if duplicates:
                msg = f"duplicate {label} ids: {', '.join(duplicates)}"
                raise ValueError(msg)
        return self

    def get_action(self, action_id: str) -> Action | None:
        """Return the action registered under ``action_id``."""
        return next((action for action in self.actions if action.id == action_id), None)

    def get_goal(self, goal_id: str) -> Goal | None:
        """Return the goal registered under ``goal_id``."""
        return next((goal for goal in self.goals if goal.id == goal_id), None)

    def actions_by_phase(self, phase: ActionPhase) -> list[Action]:
        """Return the actions in ``phase``, in catalog order."""
        return [action for action in self.actions if action.phase is phase]

    def goals_by_category(self, category: GoalCategory) -> list[Goal]:
        """Return the goals in ``category``, in catalog order."""
        return [goal for goal in self.goals if goal.category is category]

    def goals_by_priority(self, priority: GoalPriority) -> list[Goal]:
        """Return the goals with ``priority``, in catalog order."""
        return [goal for goal in self.goals if goal.priority is priority]


class PlannerOptions(BaseModel):
    """Search budgets and tuning knobs for the planner."""

    max_iterations: int = Field(default=1000, ge=1)
    max_plan_length: int = Field(default=50, ge=1)
    heuristic_weight: float = Field(default=1.5, ge=1.0)
    prefer_parallel: bool = True
    timeout_ms: float = Field(default=30_000.0, gt=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class Plan(BaseModel):
    """Ordered action sequence that reaches a goal from a start state."""

    actions: list[Action]
    total_cost: float
    estimated_duration: float
    goal_id: str
    start_state: WorldState
    end_state: WorldState
    planning_time_ms: float = 0.0
    nodes_explored: int = 0

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def action_ids(self) -> list[str]:
        """Return the identifiers of the planned actions in order."""
        return [action.id for action in self.actions]


class ActionResult(BaseModel):
    """Outcome reported for one action run outside the planner."""

    action_id: str
    status: ActionStatus
    started_at: datetime
    finished_at: datetime | None = None
    duration_ms: float | None = None
    error: str | None = None
    state_changes: PartialState = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")


class LoggingSettings(BaseModel):
    """Logging switches read from the ``[logging]`` table."""

    json_mode: bool = False
    level: typing.Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    model_config = ConfigDict(extra="forbid")


def _default_targets() -> list[str]:
    return ["deliver_report"]


class Config(BaseModel):
    """Top level configuration schema validated from TOML files."""

    planner: PlannerOptions = Field(default_factory=PlannerOptions)
    initial_state: dict[WorldField, FieldValue] = Field(default_factory=dict)
    targets: list[str] = Field(default_factory=_default_targets)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(extra="forbid")

    @field_validator("initial_state")
    @classmethod
    def _check_initial_state(cls, value: PartialState) -> dict[WorldField, FieldValue]:
        """Reject overrides whose type does not match the field."""
        return _validate_partial_state(value)

    def start_state(self) -> WorldState:
        """Return the world state the configured planning run starts from."""
        return create_initial_world_state(self.initial_state)


__all__ = [
    "Action",
    "ActionPhase",
    "ActionResult",
    "ActionStatus",
    "Catalog",
    "Config",
    "FieldValue",
    "Goal",
    "GoalCategory",
    "GoalPriority",
    "LoggingSettings",
    "PartialState",
    "Plan",
    "PlannerOptions",
    "WorldField",
    "WorldState",
    "create_initial_world_state",
    "field_kind",
    "values_match",
]
