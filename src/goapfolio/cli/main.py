"""CLI entry point for goapfolio built with Typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from pydantic import ValidationError

from goapfolio.cli.runtime import (
    PlanningContext,
    SimulatedPipeline,
    build_planning_context,
    load_cli_config,
)
from goapfolio.core.executor import Executor
from goapfolio.core.explain import explain_plan, format_plan, format_plans
from goapfolio.core.goals import calculate_goal_distance, get_achievable_goals
from goapfolio.core.models import ActionPhase

if TYPE_CHECKING:
    from collections.abc import Sequence

    from goapfolio.core.models import Goal, Plan


app = typer.Typer(add_completion=False, no_args_is_help=True)


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False))


def _format_validation_error(error: ValidationError) -> str:
    lines = ["Invalid configuration:"]
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        lines.append(f"  {location}: {detail['msg']}")
    return "\n".join(lines)


def _prepare_context(
    config_path: Path | None,
    state_assignments: Sequence[str] | None,
    *,
    json_logs: bool,
    silence_logs: bool,
) -> PlanningContext:
    try:
        config = load_cli_config(config_path)
        return build_planning_context(
            config,
            state_assignments=list(state_assignments or []),
            json_logs=json_logs,
            silence_logs=silence_logs,
        )
    except FileNotFoundError as exc:
        typer.echo(f"Configuration file not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ValidationError as exc:
        typer.echo(_format_validation_error(exc), err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


def _require_goal(context: PlanningContext, goal_id: str) -> Goal:
    goal = context.catalog.get_goal(goal_id)
    if goal is None:
        typer.echo(f"Unknown goal: {goal_id}", err=True)
        raise typer.Exit(code=1)
    return goal


def _no_plan(goal_id: str, reason: str | None) -> typer.Exit:
    typer.echo(f"No plan found for goal {goal_id} ({reason or 'unknown reason'})", err=True)
    return typer.Exit(code=1)


def _plan_payload(plan: Plan) -> dict[str, Any]:
    payload = plan.model_dump(mode="json")
    payload["action_ids"] = plan.action_ids
    return payload


@app.callback()
def cli_root() -> None:
    """Goal-oriented action planning for the portfolio analysis pipeline."""


ConfigOption = Annotated[Path | None, typer.Option(help="Path to a configuration TOML.")]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", "--json-output", help="Emit JSON instead of text."),
]
StateOption = Annotated[
    list[str] | None,
    typer.Option("--set", help="Override an initial world state field (FIELD=VALUE)."),
]


@app.command("actions")
def actions_command(
    phase: Annotated[ActionPhase | None, typer.Option(help="Only list actions of this phase.")] = None,
    json_output: JsonFlag = False,
) -> None:
    """List the actions in the portfolio catalog."""
    context = _prepare_context(None, None, json_logs=json_output, silence_logs=True)
    actions = context.catalog.actions_by_phase(phase) if phase else list(context.catalog.actions)

    if json_output:
        _emit_json([action.model_dump(mode="json") for action in actions])
        return

    lines = [f"Actions ({len(actions)}):"]
    for action in actions:
        parallel = " [P]" if action.parallelizable else ""
        lines.append(f"  {action.id}{parallel} phase={action.phase.value} cost={action.cost:g}")
    typer.echo("\n".join(lines))


@app.command("goals")
def goals_command(
    config: ConfigOption = None,
    state: StateOption = None,
    achievable: Annotated[bool, typer.Option(help="Only list goals pursuable from the state.")] = False,
    json_output: JsonFlag = False,
) -> None:
    """List catalog goals with their distance from the initial state."""
    context = _prepare_context(config, state, json_logs=json_output, silence_logs=json_output)
    goals = (
        get_achievable_goals(context.catalog.goals, context.initial_state)
        if achievable
        else list(context.catalog.goals)
    )

    if json_output:
        _emit_json(
            [
                {
                    **goal.model_dump(mode="json"),
                    "distance": calculate_goal_distance(goal, context.initial_state),
                }
                for goal in goals
            ],
        )
        return

    lines = [f"Goals ({len(goals)}):"]
    for goal in goals:
        distance = calculate_goal_distance(goal, context.initial_state)
        lines.append(f"  {goal.id} priority={goal.priority.value} distance={distance}")
        if goal.depends_on:
            lines.append(f"     depends on: {', '.join(goal.depends_on)}")
    typer.echo("\n".join(lines))


@app.command("plan")
def plan_command(
    goal_id: Annotated[str, typer.Argument(help="Identifier of the goal to plan for.")],
    config: ConfigOption = None,
    state: StateOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Compute and display a plan for a single goal."""
    context = _prepare_context(config, state, json_logs=json_output, silence_logs=json_output)
    goal = _require_goal(context, goal_id)
    plan = context.planner.plan(goal, context.initial_state)
    if plan is None:
        raise _no_plan(goal_id, context.planner.last_failure)

    if json_output:
        _emit_json(_plan_payload(plan))
        return
    typer.echo(format_plan(plan))


@app.command("plan-multi")
def plan_multi_command(
    goal_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Goals to plan; defaults to the configured targets."),
    ] = None,
    config: ConfigOption = None,
    state: StateOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Plan several goals in dependency order, chaining their end states."""
    context = _prepare_context(config, state, json_logs=json_output, silence_logs=json_output)
    goals, unknown = context.resolve_goals(goal_ids or context.config.targets)
    if unknown:
        typer.echo(f"Unknown goal: {', '.join(unknown)}", err=True)
        raise typer.Exit(code=1)

    plans = context.planner.plan_multiple(goals, context.initial_state)
    if plans is None:
        raise _no_plan(", ".join(goal.id for goal in goals), context.planner.last_failure)

    if json_output:
        _emit_json({"plans": [_plan_payload(plan) for plan in plans]})
        return
    typer.echo(format_plans(plans))


@app.command("explain")
def explain_command(
    goal_id: Annotated[str, typer.Argument(help="Identifier of the goal to plan for.")],
    config: ConfigOption = None,
    state: StateOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Explain each action in the plan computed for a goal."""
    context = _prepare_context(config, state, json_logs=json_output, silence_logs=json_output)
    goal = _require_goal(context, goal_id)
    plan = context.planner.plan(goal, context.initial_state)
    if plan is None:
        raise _no_plan(goal_id, context.planner.last_failure)
    explanations = explain_plan(plan, context.catalog)

    if json_output:
        payload = {
            "plan": _plan_payload(plan),
            "explanations": [
                {
                    "action": explanation.action.id,
                    "reason": explanation.reason,
                    "alternatives": list(explanation.alternatives),
                    "cost": explanation.cost,
                    "parallel": explanation.parallel,
                }
                for explanation in explanations
            ],
        }
        _emit_json(payload)
        return

    lines = [
        f"Goal: {plan.goal_id}",
        f"Plan total cost: {plan.total_cost:g}",
        "Explanations:",
    ]
    for index, explanation in enumerate(explanations, start=1):
        marker = " [P]" if explanation.parallel else ""
        lines.append(f"  {index}. {explanation.action.id}{marker} (cost={explanation.cost:g})")
        lines.append(f"     reason: {explanation.reason}")
        lines.extend(
            f"     alternative: {alternative}"
            for alternative in explanation.alternatives
        )
    typer.echo("\n".join(lines))


@app.command("simulate")
def simulate_command(
    goal_id: Annotated[str, typer.Argument(help="Identifier of the goal to plan for.")],
    fail: Annotated[
        list[str] | None,
        typer.Option("--fail", help="Action id that should fail during the simulation."),
    ] = None,
    config: ConfigOption = None,
    state: StateOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Run a plan against an in-memory pipeline, replanning when an action fails."""
    context = _prepare_context(config, state, json_logs=json_output, silence_logs=json_output)
    goal = _require_goal(context, goal_id)
    pipeline = SimulatedPipeline(state=context.initial_state, failing_actions=frozenset(fail or []))
    executor = Executor(
        planner=context.planner,
        observer=pipeline.observer,
        runner=pipeline.runner,
        goal=goal,
        logger=context.logger,
    )
    result = executor.execute(context.initial_state)

    if json_output:
        _emit_json(
            {
                "goal": goal.id,
                "replanned": result.replanned,
                "results": [item.model_dump(mode="json") for item in result.results],
                "final_plan": _plan_payload(result.final_plan) if result.final_plan else None,
                "final_state": result.final_state.model_dump(mode="json"),
            },
        )
        return

    lines = [
        f"Goal: {goal.id}",
        f"Executed actions: {len(result.executed_actions)}",
    ]
    lines.extend(f"  {item.action_id}: {item.status.value}" for item in result.results)
    if result.replanned:
        lines.append("A replanning step was triggered during execution.")
        if result.final_plan is None:
            lines.append("No plan could be found from the observed state.")
        else:
            lines.append(f"Replanned actions: {', '.join(result.final_plan.action_ids) or '(none)'}")
    else:
        lines.append("Plan executed without replanning.")
    typer.echo("\n".join(lines))


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the goapfolio CLI and return the exit status."""
    command = typer.main.get_command(app)
    try:
        command.main(
            args=list(argv) if argv is not None else None,
            prog_name="goapfolio",
            standalone_mode=True,
        )
    except SystemExit as exc:
        # Standalone mode reports usage errors and typer.Exit codes through SystemExit.
        if exc.code is None or isinstance(exc.code, int):
            return exc.code or 0
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
