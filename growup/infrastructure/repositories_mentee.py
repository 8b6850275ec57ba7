# growup/infrastructure/repositories_mentee.py
from __future__ import annotations

from sqlalchemy.orm import Session

from .logging import log_database_operation
from .models import MenteeORM
from .repositories_base import BaseRepository


class MenteeRepo(BaseRepository[MenteeORM]):
    model = MenteeORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_database_operation("mentee.get")
    def get(self, id_: int) -> MenteeORM | None:
        return super().get(id_)

    @log_database_operation("mentee.latest")
    def latest(self) -> MenteeORM | None:
        return (
            self.s.query(MenteeORM)
            .order_by(MenteeORM.created_at.desc(), MenteeORM.id.desc())
            .limit(1)
            .one_or_none()
        )

    @log_database_operation("mentee.create")
    def create_mentee(
        self, name: str, program_id: str, avatar_url: str | None = None
    ) -> MenteeORM:
        return super().create(name=name, program_id=program_id, avatar_url=avatar_url)

    @log_database_operation("mentee.update_program")
    def update_program(self, mentee: MenteeORM, program_id: str) -> MenteeORM:
        return super().update(mentee, program_id=program_id)
