from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class MaturityLevel(StrEnum):
    RED = "red"
    YELLOW = "yellow"
    BLUE = "blue"
    GREEN = "green"


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def derive_maturity_level(score: float) -> MaturityLevel:
    """Map a 0..5 score onto its maturity band (lower bounds inclusive)."""
    if score < 2:
        return MaturityLevel.RED
    if score < 3:
        return MaturityLevel.YELLOW
    if score < 4:
        return MaturityLevel.BLUE
    return MaturityLevel.GREEN


@dataclass(frozen=True, slots=True)
class MaturityStyle:
    label: str
    stage: str
    color: str


MATURITY_STYLES: dict[MaturityLevel, MaturityStyle] = {
    MaturityLevel.RED: MaturityStyle("Inicial", "Fundação", "#ef4444"),
    MaturityLevel.YELLOW: MaturityStyle("Em Desenvolvimento", "Desenvolvimento", "#eab308"),
    MaturityLevel.BLUE: MaturityStyle("Avançado", "Avançado", "#3b82f6"),
    MaturityLevel.GREEN: MaturityStyle("Excelente", "Excelência", "#22c55e"),
}

PRIORITY_LABELS: dict[TaskPriority, str] = {
    TaskPriority.LOW: "Baixa",
    TaskPriority.MEDIUM: "Média",
    TaskPriority.HIGH: "Alta",
}


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    text: str


@dataclass(frozen=True, slots=True)
class Axis:
    id: str
    name: str
    questions: tuple[Question, ...]


@dataclass(frozen=True, slots=True)
class Program:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class SprintStage:
    stage: str
    objective: str
    output: str


@dataclass(frozen=True, slots=True)
class Assessment:
    axis_id: str
    axis_name: str
    score: float  # 0..5
    notes: str | None = None
    question_id: str | None = None
    question_text: str | None = None
    response: str | None = None

    @property
    def maturity_level(self) -> MaturityLevel:
        return derive_maturity_level(self.score)


@dataclass(slots=True)
class Pillar:
    name: str
    score: float
    sprints: int = 0
    tasks_completed: int = 0
    tasks_total: int = 0
    findings: str | None = None
    id: int | None = None

    @property
    def maturity_level(self) -> MaturityLevel:
        return derive_maturity_level(self.score)


@dataclass(slots=True)
class Mentee:
    id: int
    name: str
    program_id: str
    created_at: datetime
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    is_custom: bool = True
    is_completed: bool = False


@dataclass(frozen=True, slots=True)
class Sprint:
    id: str
    pillar_name: str
    sprint_name: str
    sprint_goal: str
    tasks: tuple[Task, ...]
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, slots=True)
class DiagnosisResponse:
    axis_name: str
    question_text: str
    response: str
    score: float
