from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class Program(BaseModel):
    id: str
    name: str


class Axis(BaseModel):
    id: str
    name: str
    questions: list[str]


class SprintStage(BaseModel):
    stage: str
    objective: str
    output: str


class Mentee(BaseModel):
    id: int
    name: str
    avatar_url: Optional[str] = None
    program_id: str
    program_name: Optional[str] = None
    created_at: datetime


class Pillar(BaseModel):
    id: Optional[int] = None
    name: str
    score: float
    maturity_level: str
    label: str
    stage: str
    color: str
    sprints: int
    tasks_completed: int
    tasks_total: int
    findings: Optional[str] = None


class Metrics(BaseModel):
    total_tasks: int
    completed_tasks: int
    active_sprints: int
    overall_progress: int


class DashboardResponse(BaseModel):
    mentee: Mentee
    programs: list[Program]
    pillars: list[Pillar]
    metrics: Metrics


class PillarTile(BaseModel):
    name: str
    score: float
    maturity_level: str
    color: str


class DashboardFiguresResponse(BaseModel):
    tiles: list[PillarTile]
    radar: Optional[dict[str, Any]] = None


class Task(BaseModel):
    id: str
    title: str
    is_custom: bool
    priority: str
    priority_label: str
    due_date: Optional[date] = None
    is_completed: bool


class Sprint(BaseModel):
    id: str
    pillar_name: str
    sprint_name: str
    sprint_goal: str
    created_at: datetime
    tasks: list[Task]


class DiagnosisResponse(BaseModel):
    question_text: str
    response: str
    score: float


class PillarDetailResponse(BaseModel):
    pillar: Pillar
    questions: list[str]
    responses: list[DiagnosisResponse]
    sprints: list[Sprint]
    sprint_structure: list[SprintStage]


class WizardCreateRequest(BaseModel):
    mode: Optional[Literal["axis", "question"]] = None


class WizardNameRequest(BaseModel):
    name: str = ""


class WizardProgramRequest(BaseModel):
    program_id: Optional[str] = None


class WizardAnswerRequest(BaseModel):
    answer: Optional[float | str] = None
    notes: Optional[str] = None
    avatar_url: Optional[str] = None


class WizardStateResponse(BaseModel):
    id: str
    mode: str
    state: str
    mentee_name: str
    program_id: str
    step_index: Optional[int] = None
    total_steps: int
    axis_index: Optional[int] = None
    question_index: Optional[int] = None
    axis_name: Optional[str] = None
    question: Optional[str] = None
    current_input: Optional[float | str] = None
    current_notes: Optional[str] = None
    answered: int
    can_go_back: bool
    progress: float
    mentee_id: Optional[int] = None


class TaskDraftRequest(BaseModel):
    title: Optional[str] = ""
    priority: Literal["low", "medium", "high"] = "medium"
    due_date: Optional[date] = None


class SprintCreateRequest(BaseModel):
    pillar_name: str
    sprint_name: Optional[str] = None
    sprint_goal: Optional[str] = ""
    tasks: list[TaskDraftRequest] = Field(default_factory=list)


class ProgramChangeRequest(BaseModel):
    program_id: str
