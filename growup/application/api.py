"""
Application use cases for the mentee dashboard.

Each function works against a ``MenteeStore`` and leaves committing to the
caller. Domain errors are re-raised unchanged; anything else is logged and
wrapped in a ``GrowUpError`` carrying a message fit for the user.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any, NoReturn

import pandas as pd

from ..domain.catalog import AXES_BY_NAME, PROGRAMS, SPRINT_STAGES, get_program
from ..domain.models import (
    MATURITY_STYLES,
    PRIORITY_LABELS,
    Mentee,
    Pillar,
    Sprint,
    Task,
)
from ..domain.schemas import (
    MenteeCreationInput,
    ProgramChangeInput,
    SprintInput,
    TaskInput,
    sanitize_text,
    validate_input,
)
from ..domain.services import compute_dashboard_metrics
from ..domain.sprint import SprintComposer
from ..domain.wizard import CompletionHandler, DiagnosisResult, DiagnosisWizard
from ..infrastructure.exceptions import (
    ExportError,
    GrowUpError,
    MenteeNotFoundError,
    ValidationError,
    create_user_friendly_error_message,
    log_error_details,
)
from ..infrastructure.logging import LogContext, get_logger, log_operation
from ..infrastructure.store import MenteeStore
from ..utils.exports import PILLAR_COLUMNS, SPRINT_COLUMNS
from ..utils.radar import make_pillar_radar
from .context import DashboardContext
from .guard import SubmissionGuard

logger = get_logger(__name__)


def _raise_wrapped(
    e: Exception, message: str, context: dict[str, Any], user_message: str | None = None
) -> NoReturn:
    error_details = log_error_details(e, context)
    logger.error(message, extra=error_details)
    if isinstance(e, GrowUpError):
        raise e
    raise GrowUpError(
        f"{message}: {e}",
        details=error_details,
        user_message=user_message or create_user_friendly_error_message(e),
    ) from e


def _validated(schema: Any, field: str, data: dict[str, Any]) -> dict[str, Any]:
    result = validate_input(schema, data)
    if not result.success or result.data is None:
        error_msg = "; ".join(f"{e.field}: {e.message}" for e in result.errors)
        logger.warning("Validation failed for %s: %s", field, error_msg)
        raise ValidationError(field, error_msg)
    return result.data


def pillar_payload(pillar: Pillar) -> dict[str, Any]:
    style = MATURITY_STYLES[pillar.maturity_level]
    return {
        "id": pillar.id,
        "name": pillar.name,
        "score": pillar.score,
        "maturity_level": pillar.maturity_level.value,
        "label": style.label,
        "stage": style.stage,
        "color": style.color,
        "sprints": pillar.sprints,
        "tasks_completed": pillar.tasks_completed,
        "tasks_total": pillar.tasks_total,
        "findings": pillar.findings,
    }


def task_payload(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "is_custom": task.is_custom,
        "priority": task.priority.value,
        "priority_label": PRIORITY_LABELS[task.priority],
        "due_date": task.due_date,
        "is_completed": task.is_completed,
    }


def sprint_payload(sprint: Sprint) -> dict[str, Any]:
    return {
        "id": sprint.id,
        "pillar_name": sprint.pillar_name,
        "sprint_name": sprint.sprint_name,
        "sprint_goal": sprint.sprint_goal,
        "created_at": sprint.created_at,
        "tasks": [task_payload(t) for t in sprint.tasks],
    }


def mentee_payload(mentee: Mentee) -> dict[str, Any]:
    program = get_program(mentee.program_id)
    return {
        "id": mentee.id,
        "name": mentee.name,
        "avatar_url": mentee.avatar_url,
        "program_id": mentee.program_id,
        "program_name": program.name if program else None,
        "created_at": mentee.created_at,
    }


@log_operation("complete_diagnosis")
def complete_diagnosis(
    store: MenteeStore, result: DiagnosisResult, avatar_url: str | None = None
) -> Mentee:
    """
    Persist a finished diagnosis as a new mentee with one pillar per axis.

    Example:
        >>> wizard.submit_answer(4.0, on_complete=lambda r: complete_diagnosis(store, r))
    """
    data = _validated(
        MenteeCreationInput,
        "mentee",
        {"name": result.mentee_name, "program_id": result.program_id, "avatar_url": avatar_url},
    )
    try:
        mentee = store.create_mentee(data["name"], data["program_id"], data["avatar_url"])
        with LogContext(mentee_id=mentee.id):
            store.create_pillars(mentee.id, result.assessments)
            logger.info(
                "Diagnosis stored for '%s' with %d assessments",
                mentee.name,
                len(result.assessments),
            )
        return mentee
    except Exception as e:
        _raise_wrapped(
            e,
            "Failed to store diagnosis",
            {"mentee_name": result.mentee_name, "assessments": len(result.assessments)},
            "Unable to save your diagnosis. Your answers were kept, please try again.",
        )


@log_operation("submit_wizard_answer")
def submit_wizard_answer(
    wizard: DiagnosisWizard,
    guard: SubmissionGuard,
    raw: Any = None,
    notes: str | None = None,
    on_complete: CompletionHandler | None = None,
) -> dict[str, Any]:
    """Submit the current step while no other submission for this wizard is running."""
    with LogContext(wizard_id=wizard.id), guard.hold("complete_diagnosis", wizard.id):
        wizard.submit_answer(raw, notes=notes, on_complete=on_complete)
    return wizard.snapshot()


@log_operation("build_dashboard")
def build_dashboard(store: MenteeStore, mentee_id: int | None = None) -> dict[str, Any]:
    """
    Mentee, pillars and summary cards in one payload.

    Raises:
        MenteeNotFoundError: If there is no such mentee (or no mentee at all)
    """
    try:
        context = DashboardContext(store)
        mentee = context.load(mentee_id)
        if mentee is None:
            raise MenteeNotFoundError(mentee_id or 0)
        metrics = context.metrics()
        return {
            "mentee": mentee_payload(mentee),
            "programs": [{"id": p.id, "name": p.name} for p in PROGRAMS],
            "pillars": [pillar_payload(p) for p in context.pillars],
            "metrics": {
                "total_tasks": metrics.total_tasks,
                "completed_tasks": metrics.completed_tasks,
                "active_sprints": metrics.active_sprints,
                "overall_progress": metrics.overall_progress,
            },
        }
    except Exception as e:
        _raise_wrapped(
            e,
            "Failed to build dashboard",
            {"mentee_id": mentee_id},
            "Unable to load the dashboard. Please try again.",
        )


def compose_sprint(
    pillar_name: str,
    sprint_name: str | None,
    sprint_goal: str | None,
    tasks: Sequence[dict[str, Any]],
) -> SprintComposer:
    """
    Rebuild a sprint draft from submitted fields. Blank task titles are skipped.

    Raises:
        ValidationError: If the pillar is unknown or a task carries invalid fields
    """
    if pillar_name not in AXES_BY_NAME:
        raise ValidationError("pillar_name", "unknown pillar", pillar_name)
    composer = SprintComposer(pillar_name)
    if sprint_name is not None:
        composer.sprint_name = sprint_name
    composer.sprint_goal = sprint_goal or ""
    for item in tasks:
        if not sanitize_text(str(item.get("title") or "")).strip():
            continue
        data = _validated(TaskInput, "task", dict(item))
        composer.add_task(data["title"], data["priority"], data.get("due_date"))
    return composer


@log_operation("create_sprint")
def create_sprint(
    store: MenteeStore,
    guard: SubmissionGuard,
    mentee_id: int,
    composer: SprintComposer,
    on_stored: Callable[[], Any] | None = None,
) -> Sprint:
    """
    Submit a sprint draft for a mentee and update the owning pillar's counters.

    ``on_stored`` runs after the store accepted the sprint (e.g. a commit). If
    anything fails the composer keeps its draft.

    Example:
        >>> composer = compose_sprint("Vendas", None, "Estruturar funil", [{"title": "CRM"}])
        >>> sprint = create_sprint(store, guard, mentee.id, composer, on_stored=session.commit)
    """

    def persist(sprint: Sprint) -> None:
        _validated(
            SprintInput,
            "sprint",
            {
                "pillar_name": sprint.pillar_name,
                "sprint_name": sprint.sprint_name,
                "sprint_goal": sprint.sprint_goal,
                "tasks": [
                    {"title": t.title, "priority": t.priority, "due_date": t.due_date}
                    for t in sprint.tasks
                ],
            },
        )
        store.create_sprint(mentee_id, sprint)
        if on_stored is not None:
            on_stored()

    try:
        with LogContext(mentee_id=mentee_id), guard.hold("create_sprint", mentee_id):
            sprint = composer.submit(persist)
        logger.info("Created sprint '%s' for mentee %s", sprint.sprint_name, mentee_id)
        return sprint
    except Exception as e:
        _raise_wrapped(
            e,
            "Failed to create sprint",
            {"mentee_id": mentee_id, "pillar_name": composer.pillar_name},
            "Unable to save the sprint. Your draft was kept, please try again.",
        )


@log_operation("complete_task")
def complete_task(store: MenteeStore, task_id: str) -> Task:
    try:
        return store.complete_task(task_id)
    except Exception as e:
        _raise_wrapped(e, "Failed to complete task", {"task_id": task_id})


@log_operation("change_mentee_program")
def change_mentee_program(store: MenteeStore, mentee_id: int, program_id: str) -> Mentee:
    data = _validated(ProgramChangeInput, "program_id", {"program_id": program_id})
    try:
        context = DashboardContext(store)
        context.load(mentee_id)
        mentee = context.change_program(data["program_id"])
        logger.info("Mentee %s moved to program %s", mentee_id, mentee.program_id)
        return mentee
    except Exception as e:
        _raise_wrapped(
            e, "Failed to change program", {"mentee_id": mentee_id, "program_id": program_id}
        )


@log_operation("get_pillar_details")
def get_pillar_details(store: MenteeStore, mentee_id: int, pillar_name: str) -> dict[str, Any]:
    """Pillar card plus stored answers, the sprints planned for it and the sprint stages."""
    try:
        context = DashboardContext(store)
        context.load(mentee_id)
        pillar = context.pillar(pillar_name)
        axis = AXES_BY_NAME.get(pillar_name)
        return {
            "pillar": pillar_payload(pillar),
            "questions": [q.text for q in axis.questions] if axis else [],
            "responses": [
                {
                    "question_text": r.question_text,
                    "response": r.response,
                    "score": r.score,
                }
                for r in store.load_responses(mentee_id, pillar_name)
            ],
            "sprints": [sprint_payload(s) for s in store.list_sprints(mentee_id, pillar_name)],
            "sprint_structure": [
                {"stage": s.stage, "objective": s.objective, "output": s.output}
                for s in SPRINT_STAGES
            ],
        }
    except Exception as e:
        _raise_wrapped(
            e, "Failed to load pillar details", {"mentee_id": mentee_id, "pillar": pillar_name}
        )


@log_operation("build_dashboard_figures")
def build_dashboard_figures(store: MenteeStore, mentee_id: int) -> dict[str, Any]:
    """Plotly-ready payload: one tile per pillar and the radar figure."""
    try:
        context = DashboardContext(store)
        context.load(mentee_id)
        tiles = [
            {
                "name": p.name,
                "score": p.score,
                "maturity_level": p.maturity_level.value,
                "color": MATURITY_STYLES[p.maturity_level].color,
            }
            for p in context.pillars
        ]
        radar_json: dict[str, Any] | None = None
        if context.pillars:
            radar_json = json.loads(make_pillar_radar(context.pillars).to_json())
        return {"tiles": tiles, "radar": radar_json}
    except Exception as e:
        _raise_wrapped(
            e,
            "Failed to build dashboard figures",
            {"mentee_id": mentee_id},
            "Unable to build dashboard visuals. Please try again.",
        )


@log_operation("export_mentee_results")
def export_mentee_results(
    store: MenteeStore, mentee_id: int
) -> tuple[dict[str, Any], pd.DataFrame, pd.DataFrame]:
    """
    Mentee record plus pillars and sprint tasks as DataFrames.

    Raises:
        MenteeNotFoundError: If the mentee doesn't exist
        ExportError: If the export fails
    """
    try:
        mentee = store.get_mentee(mentee_id)
        pillars = store.load_pillars(mentee_id)
        metrics = compute_dashboard_metrics(pillars)

        pillar_rows = [
            {
                "Pillar": p.name,
                "Score": p.score,
                "MaturityLevel": p.maturity_level.value,
                "Label": MATURITY_STYLES[p.maturity_level].label,
                "Sprints": p.sprints,
                "TasksCompleted": p.tasks_completed,
                "TasksTotal": p.tasks_total,
                "Findings": p.findings,
            }
            for p in pillars
        ]
        sprint_rows = [
            {
                "SprintID": s.id,
                "Pillar": s.pillar_name,
                "SprintName": s.sprint_name,
                "SprintGoal": s.sprint_goal,
                "TaskID": t.id,
                "Task": t.title,
                "Priority": PRIORITY_LABELS[t.priority],
                "DueDate": t.due_date,
                "Completed": t.is_completed,
                "CreatedAt": s.created_at,
            }
            for s in store.list_sprints(mentee_id)
            for t in s.tasks
        ]

        pillars_df = pd.DataFrame(pillar_rows, columns=PILLAR_COLUMNS)
        sprints_df = pd.DataFrame(sprint_rows, columns=SPRINT_COLUMNS)

        record = mentee_payload(mentee)
        record["overall_progress"] = metrics.overall_progress
        logger.info(
            "Exported %d pillars and %d tasks for mentee %s",
            len(pillars_df),
            len(sprints_df),
            mentee_id,
        )
        return record, pillars_df, sprints_df
    except Exception as e:
        error_details = log_error_details(e, {"mentee_id": mentee_id})
        logger.error("Failed to export mentee results", extra=error_details)
        if isinstance(e, GrowUpError):
            raise
        raise ExportError(
            f"Failed to export results for mentee {mentee_id}: {e}", details=error_details
        ) from e

