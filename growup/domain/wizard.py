"""
Diagnosis wizard: name, program, then one step per axis (or per question).

The wizard owns the answers collected so far and hands them to its
``on_complete`` collaborator only once every step has been answered. A failed
hand-off leaves the wizard on the last step so the same answer can be retried.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..infrastructure.exceptions import ValidationError, WizardStateError
from .catalog import DEFAULT_PROGRAM_ID, DIAGNOSIS_AXES, PROGRAM_IDS
from .models import Assessment, Axis, Question
from .schemas import MenteeCreationInput, validate_input
from .scoring import DirectScoreStrategy, KeywordScoreStrategy, ScoringStrategy, score_from_input


class WizardState(StrEnum):
    COLLECTING_NAME = "collecting_name"
    SELECTING_PROGRAM = "selecting_program"
    ASSESSING = "assessing"
    COMPLETE = "complete"


class WizardMode(StrEnum):
    AXIS = "axis"
    QUESTION = "question"


@dataclass(frozen=True, slots=True)
class WizardStep:
    axis_index: int
    question_index: int
    axis: Axis
    question: Question | None = None


@dataclass(frozen=True, slots=True)
class DiagnosisResult:
    mentee_name: str
    program_id: str
    assessments: tuple[Assessment, ...]


CompletionHandler = Callable[[DiagnosisResult], Any]


class DiagnosisWizard:
    """
    Single-pass state machine over the axis catalog.

    Example:
        >>> wizard = DiagnosisWizard(DirectScoreStrategy())
        >>> wizard.submit_name("Ana")
        >>> wizard.submit_program()
        >>> wizard.submit_answer(3.5)
        >>> wizard.position
        (1, 0)
    """

    def __init__(
        self,
        scorer: ScoringStrategy,
        mode: WizardMode = WizardMode.AXIS,
        on_complete: CompletionHandler | None = None,
        axes: tuple[Axis, ...] = DIAGNOSIS_AXES,
        default_program_id: str = DEFAULT_PROGRAM_ID,
        logger: logging.Logger | None = None,
    ):
        self.id = str(uuid.uuid4())
        self.scorer = scorer
        self.mode = WizardMode(mode)
        self.on_complete = on_complete
        self.logger = logger or logging.getLogger(__name__)

        self.state = WizardState.COLLECTING_NAME
        self.mentee_name = ""
        self.program_id = default_program_id
        self.current_input: Any = None
        self.current_notes: str | None = None
        self.outcome: Any = None

        self._steps = self._build_steps(axes)
        self._cursor = 0
        self._history: list[tuple[Assessment, Any]] = []

    def _build_steps(self, axes: tuple[Axis, ...]) -> list[WizardStep]:
        if self.mode is WizardMode.AXIS:
            return [WizardStep(i, 0, axis) for i, axis in enumerate(axes)]
        return [
            WizardStep(i, j, axis, question)
            for i, axis in enumerate(axes)
            for j, question in enumerate(axis.questions)
        ]

    # -- introspection -------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def current_step(self) -> WizardStep | None:
        if self.state is not WizardState.ASSESSING:
            return None
        return self._steps[self._cursor]

    @property
    def position(self) -> tuple[int, int] | None:
        step = self.current_step
        return (step.axis_index, step.question_index) if step else None

    @property
    def assessments(self) -> tuple[Assessment, ...]:
        return tuple(assessment for assessment, _ in self._history)

    @property
    def can_go_back(self) -> bool:
        return self.state is WizardState.ASSESSING and self._cursor > 0

    @property
    def progress(self) -> float:
        if self.state is WizardState.COMPLETE:
            return 1.0
        if self.state is not WizardState.ASSESSING:
            return 0.0
        return (self._cursor + 1) / self.total_steps

    def _require(self, action: str, *states: WizardState) -> None:
        if self.state not in states:
            raise WizardStateError(action, self.state.value)

    # -- transitions ---------------------------------------------------------

    def submit_name(self, name: str | None) -> None:
        """Store the sanitized mentee name; it must also pass the mentee schema."""
        self._require("submit_name", WizardState.COLLECTING_NAME)
        result = validate_input(MenteeCreationInput, {"name": name or ""})
        if not result.success or result.data is None:
            errors = [e for e in result.errors if e.field == "name"] or result.errors
            raise ValidationError("name", "; ".join(e.message for e in errors), name)
        self.mentee_name = result.data["name"]
        self.state = WizardState.SELECTING_PROGRAM

    def select_program(self, program_id: str) -> None:
        self._require("select_program", WizardState.SELECTING_PROGRAM)
        if program_id not in PROGRAM_IDS:
            raise ValidationError("program_id", "unknown program", program_id)
        self.program_id = program_id

    def submit_program(self, program_id: str | None = None) -> None:
        if program_id is not None:
            self.select_program(program_id)
        self._require("submit_program", WizardState.SELECTING_PROGRAM)
        self.state = WizardState.ASSESSING
        self._cursor = 0
        self.logger.debug("Wizard %s started assessing in %s mode", self.id, self.mode.value)

    def set_input(self, raw: Any, notes: str | None = None) -> None:
        """Update the editable value of the current step without submitting it."""
        self._require("set_input", WizardState.ASSESSING)
        self.current_input = raw
        self.current_notes = notes

    def submit_answer(
        self,
        raw: Any = None,
        notes: str | None = None,
        on_complete: CompletionHandler | None = None,
    ) -> WizardState:
        """
        Score the answer of the current step and advance.

        ``raw`` defaults to the current editable value. On the last step the full
        result is passed to ``on_complete`` (or the handler given at construction);
        if that raises, the wizard stays where it is and the error propagates.
        """
        self._require("submit_answer", WizardState.ASSESSING)
        if raw is None:
            raw = self.current_input
        if notes is None:
            notes = self.current_notes
        notes = (notes.strip() or None) if notes else None

        result = score_from_input(raw, self.scorer)
        assessment = self._make_assessment(self._steps[self._cursor], result.score, raw, notes)

        if self._cursor + 1 < self.total_steps:
            self._history.append((assessment, raw))
            self._cursor += 1
            self.current_input = None
            self.current_notes = None
            return self.state

        handoff = DiagnosisResult(
            mentee_name=self.mentee_name,
            program_id=self.program_id,
            assessments=(*self.assessments, assessment),
        )
        handler = on_complete or self.on_complete
        try:
            self.outcome = handler(handoff) if handler else handoff
        except Exception:
            self.current_input = raw
            self.current_notes = notes
            self.logger.warning("Wizard %s hand-off failed; answers kept for retry", self.id)
            raise

        self._history.append((assessment, raw))
        self.current_input = None
        self.current_notes = None
        self.state = WizardState.COMPLETE
        self.logger.info(
            "Wizard %s completed with %d assessments", self.id, len(self._history)
        )
        return self.state

    def back(self) -> None:
        """Return to the previous step, restoring its answer as the editable value."""
        self._require("back", WizardState.ASSESSING)
        if self._cursor == 0:
            raise WizardStateError("back", "first step")
        assessment, raw = self._history.pop()
        self._cursor -= 1
        self.current_input = raw
        self.current_notes = assessment.notes

    def _make_assessment(
        self, step: WizardStep, score: float, raw: Any, notes: str | None
    ) -> Assessment:
        if step.question is None:
            return Assessment(
                axis_id=step.axis.id, axis_name=step.axis.name, score=score, notes=notes
            )
        return Assessment(
            axis_id=step.axis.id,
            axis_name=step.axis.name,
            score=score,
            notes=notes,
            question_id=step.question.id,
            question_text=step.question.text,
            response=str(raw).strip(),
        )

    def snapshot(self) -> dict[str, Any]:
        step = self.current_step
        return {
            "id": self.id,
            "mode": self.mode.value,
            "state": self.state.value,
            "mentee_name": self.mentee_name,
            "program_id": self.program_id,
            "step_index": self._cursor if step else None,
            "total_steps": self.total_steps,
            "axis_index": step.axis_index if step else None,
            "question_index": step.question_index if step else None,
            "axis_name": step.axis.name if step else None,
            "question": step.question.text if step and step.question else None,
            "current_input": self.current_input,
            "current_notes": self.current_notes,
            "answered": len(self._history),
            "can_go_back": self.can_go_back,
            "progress": self.progress,
        }


def create_wizard(
    mode: WizardMode | str = WizardMode.AXIS,
    on_complete: CompletionHandler | None = None,
    default_program_id: str = DEFAULT_PROGRAM_ID,
) -> DiagnosisWizard:
    """Wizard with the scoring strategy that matches its mode."""
    mode = WizardMode(mode)
    scorer: ScoringStrategy = (
        DirectScoreStrategy() if mode is WizardMode.AXIS else KeywordScoreStrategy()
    )
    return DiagnosisWizard(
        scorer, mode=mode, on_complete=on_complete, default_program_id=default_program_id
    )
