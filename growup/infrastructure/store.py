"""
Persistence contract of the dashboard and its SQLAlchemy implementation.

``SqlMenteeStore`` works inside the caller's session and only flushes; the
caller commits (route handlers, or ``UnitOfWork.begin`` in scripts), so a
diagnosis is written as one transaction. Backend failures surface as
``PersistenceError`` subclasses.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.catalog import axis_position
from ..domain.models import (
    Assessment,
    DiagnosisResponse,
    Mentee,
    Pillar,
    Sprint,
    Task,
    TaskPriority,
)
from ..domain.services import pillar_scores_from_assessments
from .exceptions import (
    MenteeNotFoundError,
    PillarNotFoundError,
    TaskNotFoundError,
    handle_persistence_error,
)
from .logging import get_logger
from .models import DiagnosisResponseORM, MenteeORM, PillarORM, SprintORM, TaskORM
from .repositories import MenteeRepo, PillarRepo, ResponseRepo, SprintRepo, TaskRepo

logger = get_logger(__name__)


class MenteeStore(Protocol):
    def load_latest_mentee(self) -> Mentee | None: ...

    def get_mentee(self, mentee_id: int) -> Mentee: ...

    def load_pillars(self, mentee_id: int) -> list[Pillar]: ...

    def create_mentee(
        self, name: str, program_id: str, avatar_url: str | None = None
    ) -> Mentee: ...

    def create_pillars(self, mentee_id: int, assessments: Sequence[Assessment]) -> None: ...

    def create_sprint(self, mentee_id: int, sprint: Sprint) -> None: ...

    def update_mentee_program(self, mentee_id: int, program_id: str) -> None: ...

    def load_responses(
        self, mentee_id: int, axis_name: str | None = None
    ) -> list[DiagnosisResponse]: ...

    def list_sprints(self, mentee_id: int, pillar_name: str | None = None) -> list[Sprint]: ...

    def complete_task(self, task_id: str) -> Task: ...


def mentee_from_orm(orm: MenteeORM) -> Mentee:
    return Mentee(
        id=orm.id,
        name=orm.name,
        program_id=orm.program_id,
        created_at=orm.created_at,
        avatar_url=orm.avatar_url,
    )


def pillar_from_orm(orm: PillarORM) -> Pillar:
    return Pillar(
        id=orm.id,
        name=orm.name,
        score=float(orm.score),
        sprints=orm.sprints,
        tasks_completed=orm.tasks_completed,
        tasks_total=orm.tasks_total,
        findings=orm.findings,
    )


def task_from_orm(orm: TaskORM) -> Task:
    return Task(
        id=orm.id,
        title=orm.title,
        priority=TaskPriority(orm.priority),
        due_date=orm.due_date,
        is_custom=orm.is_custom,
        is_completed=orm.is_completed,
    )


def sprint_from_orm(orm: SprintORM) -> Sprint:
    return Sprint(
        id=orm.id,
        pillar_name=orm.pillar_name,
        sprint_name=orm.sprint_name,
        sprint_goal=orm.sprint_goal,
        tasks=tuple(task_from_orm(t) for t in orm.tasks),
        created_at=orm.created_at,
    )


def response_from_orm(orm: DiagnosisResponseORM) -> DiagnosisResponse:
    return DiagnosisResponse(
        axis_name=orm.axis_name,
        question_text=orm.question_text,
        response=orm.response,
        score=float(orm.score),
    )


class SqlMenteeStore:
    """
    ``MenteeStore`` backed by the SQLAlchemy session it is given.

    Example:
        >>> with uow.begin() as s:
        ...     store = SqlMenteeStore(s)
        ...     mentee = store.create_mentee("Ana", "prog-start")
    """

    def __init__(self, session: Session):
        self.s = session
        self.mentees = MenteeRepo(session)
        self.pillars = PillarRepo(session)
        self.responses = ResponseRepo(session)
        self.sprints = SprintRepo(session)
        self.tasks = TaskRepo(session)

    def _require_mentee(self, mentee_id: int) -> MenteeORM:
        orm = self.mentees.get(mentee_id)
        if orm is None:
            raise MenteeNotFoundError(mentee_id)
        return orm

    def load_latest_mentee(self) -> Mentee | None:
        try:
            orm = self.mentees.latest()
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "load latest mentee") from e
        return mentee_from_orm(orm) if orm else None

    def get_mentee(self, mentee_id: int) -> Mentee:
        try:
            return mentee_from_orm(self._require_mentee(mentee_id))
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "load mentee") from e

    def load_pillars(self, mentee_id: int) -> list[Pillar]:
        try:
            rows = self.pillars.list_for_mentee(mentee_id)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "load pillars") from e
        return [pillar_from_orm(r) for r in rows]

    def create_mentee(self, name: str, program_id: str, avatar_url: str | None = None) -> Mentee:
        try:
            orm = self.mentees.create_mentee(name, program_id, avatar_url)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "create mentee") from e
        logger.info("Created mentee %s in program %s", orm.id, program_id)
        return mentee_from_orm(orm)

    def create_pillars(self, mentee_id: int, assessments: Sequence[Assessment]) -> None:
        """One pillar per assessed axis; per-question answers are kept as responses."""
        scores = pillar_scores_from_assessments(assessments)
        responses = [
            {
                "axis_name": a.axis_name,
                "question_id": a.question_id,
                "question_text": a.question_text or "",
                "response": a.response or "",
                "score": a.score,
                "position": position,
            }
            for position, a in enumerate(assessments)
            if a.question_id is not None
        ]
        try:
            self._require_mentee(mentee_id)
            for item in scores:
                self.pillars.create_pillar(
                    mentee_id,
                    item.axis_name,
                    axis_position(item.axis_name),
                    item.score,
                    item.notes,
                )
            if responses:
                self.responses.bulk_create(mentee_id, responses)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "create pillars") from e
        logger.info(
            "Stored %d pillars and %d responses for mentee %s",
            len(scores),
            len(responses),
            mentee_id,
        )

    def create_sprint(self, mentee_id: int, sprint: Sprint) -> None:
        try:
            self._require_mentee(mentee_id)
            pillar = self.pillars.get_by_name(mentee_id, sprint.pillar_name)
            if pillar is None:
                raise PillarNotFoundError(mentee_id, sprint.pillar_name)
            self.sprints.create_from_domain(mentee_id, sprint)
            self.pillars.record_sprint(pillar, len(sprint.tasks))
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "create sprint") from e

    def update_mentee_program(self, mentee_id: int, program_id: str) -> None:
        try:
            self.mentees.update_program(self._require_mentee(mentee_id), program_id)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "update mentee program") from e

    def load_responses(
        self, mentee_id: int, axis_name: str | None = None
    ) -> list[DiagnosisResponse]:
        try:
            rows = self.responses.list_for_axis(mentee_id, axis_name)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "load responses") from e
        return [response_from_orm(r) for r in rows]

    def list_sprints(self, mentee_id: int, pillar_name: str | None = None) -> list[Sprint]:
        try:
            rows = self.sprints.list_for_mentee(mentee_id, pillar_name)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "list sprints") from e
        return [sprint_from_orm(r) for r in rows]

    def complete_task(self, task_id: str) -> Task:
        """Mark a task done; the pillar counter moves only on the first completion."""
        try:
            task = self.tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            if not task.is_completed:
                sprint = task.sprint
                pillar = self.pillars.get_by_name(sprint.mentee_id, sprint.pillar_name)
                self.tasks.mark_completed(task)
                if pillar is not None:
                    self.pillars.record_task_completed(pillar)
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, "complete task") from e
        return task_from_orm(task)
