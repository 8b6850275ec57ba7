# growup/infrastructure/repositories_response.py
from __future__ import annotations

import builtins

from sqlalchemy.orm import Session

from .logging import log_database_operation
from .models import DiagnosisResponseORM
from .repositories_base import BaseRepository


class ResponseRepo(BaseRepository[DiagnosisResponseORM]):
    model = DiagnosisResponseORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_database_operation("response.bulk_create")
    def bulk_create(
        self, mentee_id: int, rows: builtins.list[dict]
    ) -> builtins.list[DiagnosisResponseORM]:
        objs = [DiagnosisResponseORM(mentee_id=mentee_id, **row) for row in rows]
        self.s.add_all(objs)
        self.s.flush()
        return objs

    @log_database_operation("response.list_for_axis")
    def list_for_axis(
        self, mentee_id: int, axis_name: str | None = None
    ) -> builtins.list[DiagnosisResponseORM]:
        filters = [DiagnosisResponseORM.mentee_id == mentee_id]
        if axis_name is not None:
            filters.append(DiagnosisResponseORM.axis_name == axis_name)
        return self.list(*filters, order_by=[DiagnosisResponseORM.position])
