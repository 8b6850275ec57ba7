# growup/infrastructure/repositories_sprint.py
from __future__ import annotations

import builtins

from sqlalchemy.orm import Session, selectinload

from ..domain.models import Sprint
from .logging import log_database_operation
from .models import SprintORM, TaskORM
from .repositories_base import BaseRepository


class SprintRepo(BaseRepository[SprintORM]):
    model = SprintORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_database_operation("sprint.create")
    def create_from_domain(self, mentee_id: int, sprint: Sprint) -> SprintORM:
        orm = SprintORM(
            id=sprint.id,
            mentee_id=mentee_id,
            pillar_name=sprint.pillar_name,
            sprint_name=sprint.sprint_name,
            sprint_goal=sprint.sprint_goal,
            created_at=sprint.created_at,
            tasks=[
                TaskORM(
                    id=task.id,
                    title=task.title,
                    is_custom=task.is_custom,
                    priority=task.priority.value,
                    due_date=task.due_date,
                    is_completed=task.is_completed,
                    position=position,
                )
                for position, task in enumerate(sprint.tasks)
            ],
        )
        self.s.add(orm)
        self.s.flush()
        return orm

    @log_database_operation("sprint.list_for_mentee")
    def list_for_mentee(
        self, mentee_id: int, pillar_name: str | None = None
    ) -> builtins.list[SprintORM]:
        q = (
            self.s.query(SprintORM)
            .options(selectinload(SprintORM.tasks))
            .filter(SprintORM.mentee_id == mentee_id)
        )
        if pillar_name is not None:
            q = q.filter(SprintORM.pillar_name == pillar_name)
        return list(q.order_by(SprintORM.created_at.desc()).all())


class TaskRepo(BaseRepository[TaskORM]):
    model = TaskORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_database_operation("task.get")
    def get(self, id_: str) -> TaskORM | None:
        return super().get(id_)

    @log_database_operation("task.mark_completed")
    def mark_completed(self, task: TaskORM) -> TaskORM:
        return super().update(task, is_completed=True)
