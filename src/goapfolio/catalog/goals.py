"""Portfolio analysis goal definitions."""

from __future__ import annotations

from goapfolio.core.models import Goal, GoalCategory, GoalPriority, WorldField, WorldState

F = WorldField


def _repos_scanned(state: WorldState) -> bool:
    return state.repos_scanned


def _shards_generated(state: WorldState) -> bool:
    return state.shards_generated


def _shards_and_embeddings(state: WorldState) -> bool:
    return state.shards_generated and state.semantic_embeddings_computed


def _ready_for_insights(state: WorldState) -> bool:
    return state.health_scores_computed and state.drift_analyzed and state.project_count > 0


def _insights_generated(state: WorldState) -> bool:
    return state.ai_insights_generated


def _metrics_ready(state: WorldState) -> bool:
    return state.metrics_calculated and state.health_scores_computed


def _reports_rendered(state: WorldState) -> bool:
    return state.brief_generated and state.dashboard_built


def _outputs_written(state: WorldState) -> bool:
    return state.output_files_written


def _ready_for_delivery(state: WorldState) -> bool:
    return state.output_files_written and state.health_score >= 0


PORTFOLIO_GOALS: tuple[Goal, ...] = (
    Goal(
        id="scan_repositories",
        name="Scan Repositories",
        description="Discover and scan all project repositories.",
        category=GoalCategory.analysis,
        priority=GoalPriority.critical,
        target_state={F.repos_scanned: True},
        desirability=1.0,
        estimated_duration=30_000,
    ),
    Goal(
        id="generate_shards",
        name="Generate Project Shards",
        description="Create semantic shards for each project.",
        category=GoalCategory.analysis,
        priority=GoalPriority.critical,
        target_state={F.shards_generated: True},
        preconditions=_repos_scanned,
        desirability=0.95,
        estimated_duration=60_000,
        parallelizable=True,
        depends_on=("scan_repositories",),
    ),
    Goal(
        id="compute_embeddings",
        name="Compute Semantic Embeddings",
        description="Generate semantic vectors for clustering.",
        category=GoalCategory.analysis,
        priority=GoalPriority.high,
        target_state={F.semantic_embeddings_computed: True},
        preconditions=_repos_scanned,
        desirability=0.85,
        estimated_duration=45_000,
        parallelizable=True,
        depends_on=("scan_repositories",),
    ),
    Goal(
        id="compute_health_scores",
        name="Compute Health Scores",
        description="Calculate health scores and grades for all projects.",
        category=GoalCategory.quality,
        priority=GoalPriority.high,
        target_state={F.health_scores_computed: True, F.metrics_calculated: True},
        preconditions=_shards_generated,
        desirability=0.9,
        estimated_duration=20_000,
        parallelizable=True,
        depends_on=("generate_shards",),
    ),
    Goal(
        id="analyze_drift",
        name="Analyze Project Drift",
        description="Detect drift between intent and implementation.",
        category=GoalCategory.quality,
        priority=GoalPriority.high,
        target_state={F.drift_analyzed: True},
        preconditions=_shards_and_embeddings,
        desirability=0.85,
        estimated_duration=30_000,
        parallelizable=True,
        depends_on=("generate_shards", "compute_embeddings"),
    ),
    Goal(
        id="generate_ai_insights",
        name="Generate AI Insights",
        description="Generate strategic insights for the portfolio.",
        category=GoalCategory.insight,
        priority=GoalPriority.medium,
        target_state={F.ai_insights_generated: True},
        preconditions=_ready_for_insights,
        desirability=0.8,
        estimated_duration=15_000,
        depends_on=("compute_health_scores", "analyze_drift"),
    ),
    Goal(
        id="generate_strategic_recommendations",
        name="Generate Strategic Recommendations",
        description="Create actionable portfolio recommendations.",
        category=GoalCategory.insight,
        priority=GoalPriority.medium,
        target_state={F.strategic_recommendations_ready: True},
        preconditions=_insights_generated,
        desirability=0.75,
        estimated_duration=10_000,
        depends_on=("generate_ai_insights",),
    ),
    Goal(
        id="generate_brief",
        name="Generate Portfolio Brief",
        description="Create the markdown brief document.",
        category=GoalCategory.output,
        priority=GoalPriority.high,
        target_state={F.brief_generated: True},
        preconditions=_metrics_ready,
        desirability=0.9,
        estimated_duration=5_000,
        parallelizable=True,
        depends_on=("compute_health_scores",),
    ),
    Goal(
        id="build_dashboard",
        name="Build HTML Dashboard",
        description="Generate the interactive dashboard.",
        category=GoalCategory.output,
        priority=GoalPriority.high,
        target_state={F.dashboard_built: True},
        preconditions=_metrics_ready,
        desirability=0.9,
        estimated_duration=8_000,
        parallelizable=True,
        depends_on=("compute_health_scores",),
    ),
    Goal(
        id="write_output_files",
        name="Write Output Files",
        description="Save all generated reports and data.",
        category=GoalCategory.output,
        priority=GoalPriority.critical,
        target_state={F.output_files_written: True},
        preconditions=_reports_rendered,
        desirability=0.95,
        estimated_duration=3_000,
        depends_on=("generate_brief", "build_dashboard"),
    ),
    Goal(
        id="record_neural_patterns",
        name="Record Neural Patterns",
        description="Train neural networks on execution patterns.",
        category=GoalCategory.learning,
        priority=GoalPriority.low,
        target_state={F.neural_patterns_recorded: True},
        preconditions=_outputs_written,
        desirability=0.6,
        estimated_duration=10_000,
        parallelizable=True,
        depends_on=("write_output_files",),
    ),
    Goal(
        id="persist_memory",
        name="Persist Session Memory",
        description="Save session state for future reference.",
        category=GoalCategory.memory,
        priority=GoalPriority.medium,
        target_state={F.memory_persisted: True},
        preconditions=_outputs_written,
        desirability=0.7,
        estimated_duration=5_000,
        parallelizable=True,
        depends_on=("write_output_files",),
    ),
    Goal(
        id="restore_session_context",
        name="Restore Session Context",
        description="Load previous session context if available.",
        category=GoalCategory.memory,
        priority=GoalPriority.low,
        target_state={F.session_context_restored: True},
        desirability=0.5,
        estimated_duration=3_000,
    ),
    Goal(
        id="deliver_report",
        name="Deliver Final Report",
        description="Mark the analysis as complete and ready for delivery.",
        category=GoalCategory.output,
        priority=GoalPriority.critical,
        target_state={F.report_delivered: True, F.completion_percentage: 100},
        preconditions=_ready_for_delivery,
        desirability=1.0,
        estimated_duration=1_000,
        depends_on=("write_output_files",),
    ),
)


__all__ = ["PORTFOLIO_GOALS"]
