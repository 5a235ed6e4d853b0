"""Core GOAP components for goapfolio."""

from .models import (
    Action,
    ActionPhase,
    ActionResult,
    ActionStatus,
    Catalog,
    Config,
    Goal,
    GoalCategory,
    GoalPriority,
    Plan,
    PlannerOptions,
    WorldField,
    WorldState,
    create_initial_world_state,
)
from .actions import (
    apply_action_effects,
    calculate_action_sequence_cost,
    can_execute_action,
    estimate_action_sequence_duration,
    get_executable_actions,
    get_parallelizable_actions,
    order_actions_by_dependency,
)
from .goals import calculate_goal_distance, get_achievable_goals, is_goal_satisfied
from .planner import GoapPlanner, PlanNode, create_planner, plan_full_analysis
from .explain import ActionExplanation, explain_plan, format_plan, format_plans
from .executor import ActionRunner, ExecutionResult, Executor, StateObserver

__all__ = [
    "Action",
    "ActionExplanation",
    "ActionPhase",
    "ActionResult",
    "ActionRunner",
    "ActionStatus",
    "Catalog",
    "Config",
    "ExecutionResult",
    "Executor",
    "Goal",
    "GoalCategory",
    "GoalPriority",
    "GoapPlanner",
    "Plan",
    "PlanNode",
    "PlannerOptions",
    "StateObserver",
    "WorldField",
    "WorldState",
    "apply_action_effects",
    "calculate_action_sequence_cost",
    "calculate_goal_distance",
    "can_execute_action",
    "create_initial_world_state",
    "create_planner",
    "estimate_action_sequence_duration",
    "explain_plan",
    "format_plan",
    "format_plans",
    "get_achievable_goals",
    "get_executable_actions",
    "get_parallelizable_actions",
    "is_goal_satisfied",
    "order_actions_by_dependency",
    "plan_full_analysis",
]
