from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class MenteeORM(Base):
    __tablename__ = "mentees"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    program_id: Mapped[str] = mapped_column(String(50), nullable=False, default="prog-start")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.now, nullable=False, index=True
    )

    pillars: Mapped[list[PillarORM]] = relationship(
        back_populates="mentee", cascade="all, delete-orphan"
    )
    responses: Mapped[list[DiagnosisResponseORM]] = relationship(
        back_populates="mentee", cascade="all, delete-orphan"
    )
    sprints: Mapped[list[SprintORM]] = relationship(
        back_populates="mentee", cascade="all, delete-orphan"
    )


class PillarORM(Base):
    __tablename__ = "pillars"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    mentee_id: Mapped[int] = mapped_column(
        ForeignKey("mentees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    sprints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    findings: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("mentee_id", "name", name="uq_pillar_mentee_name"),
        CheckConstraint("score >= 0 AND score <= 5", name="ck_pillar_score_range"),
        CheckConstraint(
            "tasks_completed >= 0 AND tasks_completed <= tasks_total",
            name="ck_pillar_task_counts",
        ),
    )

    mentee: Mapped[MenteeORM] = relationship(back_populates="pillars")


class DiagnosisResponseORM(Base):
    __tablename__ = "diagnosis_responses"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    mentee_id: Mapped[int] = mapped_column(
        ForeignKey("mentees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    axis_name: Mapped[str] = mapped_column(String(100), nullable=False)
    question_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("score >= 0 AND score <= 5", name="ck_response_score_range"),
    )

    mentee: Mapped[MenteeORM] = relationship(back_populates="responses")


class SprintORM(Base):
    __tablename__ = "sprints"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    mentee_id: Mapped[int] = mapped_column(
        ForeignKey("mentees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    pillar_name: Mapped[str] = mapped_column(String(100), nullable=False)
    sprint_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sprint_goal: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.now, nullable=False
    )

    mentee: Mapped[MenteeORM] = relationship(back_populates="sprints")
    tasks: Mapped[list[TaskORM]] = relationship(
        back_populates="sprint", cascade="all, delete-orphan", order_by="TaskORM.position"
    )


class TaskORM(Base):
    __tablename__ = "tasks"
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    sprint_id: Mapped[str] = mapped_column(
        ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_task_priority"),
    )

    sprint: Mapped[SprintORM] = relationship(back_populates="tasks")
