# growup/infrastructure/repositories_pillar.py
from __future__ import annotations

import builtins

from sqlalchemy.orm import Session

from .logging import log_database_operation
from .models import PillarORM
from .repositories_base import BaseRepository


class PillarRepo(BaseRepository[PillarORM]):
    model = PillarORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_database_operation("pillar.list_for_mentee")
    def list_for_mentee(self, mentee_id: int) -> builtins.list[PillarORM]:
        return self.list(
            PillarORM.mentee_id == mentee_id, order_by=[PillarORM.position, PillarORM.id]
        )

    @log_database_operation("pillar.get_by_name")
    def get_by_name(self, mentee_id: int, name: str) -> PillarORM | None:
        return (
            self.s.query(PillarORM)
            .filter(PillarORM.mentee_id == mentee_id, PillarORM.name == name)
            .one_or_none()
        )

    @log_database_operation("pillar.create")
    def create_pillar(
        self, mentee_id: int, name: str, position: int, score: float, findings: str | None
    ) -> PillarORM:
        return super().create(
            mentee_id=mentee_id,
            name=name,
            position=position,
            score=score,
            findings=findings,
            sprints=0,
            tasks_completed=0,
            tasks_total=0,
        )

    @log_database_operation("pillar.record_sprint")
    def record_sprint(self, pillar: PillarORM, task_count: int) -> PillarORM:
        return super().update(
            pillar, sprints=pillar.sprints + 1, tasks_total=pillar.tasks_total + task_count
        )

    @log_database_operation("pillar.record_task_completed")
    def record_task_completed(self, pillar: PillarORM) -> PillarORM:
        return super().update(pillar, tasks_completed=pillar.tasks_completed + 1)
