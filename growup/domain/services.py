from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .catalog import axis_position
from .models import Assessment, Pillar
from .scoring import snap_to_step


def clamp_score(score: float | None) -> float | None:
    if score is None:
        return None
    if not (0 <= score <= 5):
        raise ValueError("Score must be between 0 and 5 inclusive.")
    return float(score)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    total_tasks: int
    completed_tasks: int
    active_sprints: int
    overall_progress: int  # 0..100


def compute_dashboard_metrics(pillars: Iterable[Pillar]) -> DashboardMetrics:
    """
    Summary cards for the dashboard, re-derived from the pillar list on every call.
    - overall_progress = round(100 * completed / total), 0 when there are no tasks.
    """
    total = completed = sprints = 0
    for pillar in pillars:
        total += pillar.tasks_total
        completed += pillar.tasks_completed
        sprints += pillar.sprints

    progress = round_half_up(100 * completed / total) if total > 0 else 0
    return DashboardMetrics(
        total_tasks=total,
        completed_tasks=completed,
        active_sprints=sprints,
        overall_progress=progress,
    )


@dataclass(frozen=True, slots=True)
class PillarScore:
    axis_name: str
    score: float
    notes: str | None
    answers: int


def pillar_scores_from_assessments(assessments: Sequence[Assessment]) -> list[PillarScore]:
    """
    One score per axis, in catalog order.
    - Per-axis diagnoses carry one assessment per axis and keep its score.
    - Per-question diagnoses are averaged and rounded half-up to one decimal.
    - Notes of the axis are joined into the pillar findings.
    """
    grouped: dict[str, list[Assessment]] = {}
    for assessment in assessments:
        clamp_score(assessment.score)
        grouped.setdefault(assessment.axis_name, []).append(assessment)

    results: list[PillarScore] = []
    for axis_name in sorted(grouped, key=axis_position):
        items = grouped[axis_name]
        mean = sum(a.score for a in items) / len(items)
        notes = "\n".join(a.notes for a in items if a.notes) or None
        results.append(PillarScore(axis_name, snap_to_step(mean), notes, len(items)))
    return results


def order_pillars(pillars: Iterable[Pillar]) -> list[Pillar]:
    return sorted(pillars, key=lambda p: axis_position(p.name))
