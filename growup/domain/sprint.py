"""Draft a sprint for one pillar and hand it off once it is complete."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..infrastructure.exceptions import MultipleValidationError, ValidationError
from .models import Sprint, Task, TaskPriority


def default_sprint_name(pillar_name: str) -> str:
    return f"Sprint de Foco em {pillar_name}"


@dataclass(slots=True)
class TaskDraft:
    title: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None


class SprintComposer:
    """
    Accumulates tasks into a sprint proposal scoped to a single pillar.

    Example:
        >>> composer = SprintComposer("Finanças")
        >>> composer.sprint_goal = "Organizar o fluxo de caixa"
        >>> task = composer.add_task("Mapear contas a pagar", TaskPriority.HIGH)
        >>> sprint = composer.submit(store_sprint)
    """

    def __init__(self, pillar_name: str, logger: logging.Logger | None = None):
        self.pillar_name = pillar_name
        self.logger = logger or logging.getLogger(__name__)
        self.sprint_name = default_sprint_name(pillar_name)
        self.sprint_goal = ""
        self.draft = TaskDraft()
        self._tasks: list[Task] = []

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def add_task(
        self,
        title: str | None,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        due_date: date | None = None,
    ) -> Task | None:
        """Append a task; a blank title is ignored and returns None."""
        cleaned = (title or "").strip()
        if not cleaned:
            return None
        task = Task(
            id=str(uuid.uuid4()),
            title=cleaned,
            priority=TaskPriority(priority),
            due_date=due_date,
        )
        self._tasks.append(task)
        self.draft = TaskDraft()
        return task

    def add_draft_task(self) -> Task | None:
        return self.add_task(self.draft.title, self.draft.priority, self.draft.due_date)

    def remove_task(self, task_id: str) -> None:
        self._tasks = [task for task in self._tasks if task.id != task_id]

    def validate(self) -> None:
        errors: list[ValidationError] = []
        if not self.sprint_name.strip():
            errors.append(ValidationError("sprint_name", "cannot be empty", self.sprint_name))
        if not self.sprint_goal.strip():
            errors.append(ValidationError("sprint_goal", "cannot be empty", self.sprint_goal))
        if not self._tasks:
            errors.append(ValidationError("tasks", "add at least one task", 0))
        if errors:
            raise MultipleValidationError(
                errors, user_message="Preencha o nome, o objetivo e adicione ao menos uma tarefa."
            )

    def build(self) -> Sprint:
        self.validate()
        return Sprint(
            id=str(uuid.uuid4()),
            pillar_name=self.pillar_name,
            sprint_name=self.sprint_name.strip(),
            sprint_goal=self.sprint_goal.strip(),
            tasks=tuple(self._tasks),
            created_at=datetime.now(),
        )

    def submit(self, on_submit: Callable[[Sprint], Any]) -> Sprint:
        """
        Validate, build the sprint and pass it to ``on_submit``.

        The draft is reset only after ``on_submit`` returns; on failure it is kept
        as-is so the same submission can be retried.
        """
        sprint = self.build()
        on_submit(sprint)
        self.logger.info(
            "Sprint %s submitted for %s with %d tasks", sprint.id, self.pillar_name, len(sprint.tasks)
        )
        self.reset()
        return sprint

    def reset(self) -> None:
        self.sprint_name = default_sprint_name(self.pillar_name)
        self.sprint_goal = ""
        self.draft = TaskDraft()
        self._tasks = []
