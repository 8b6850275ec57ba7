from __future__ import annotations

import io
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from growup.application import api as app_api
from growup.application.guard import SubmissionGuard
from growup.application.wizards import WizardRegistry
from growup.domain.catalog import DIAGNOSIS_AXES, PROGRAMS, SPRINT_STAGES
from growup.domain.wizard import DiagnosisResult, WizardState
from growup.infrastructure.config import get_settings
from growup.infrastructure.exceptions import (
    GrowUpError,
    MenteeNotFoundError,
    MultipleValidationError,
    PersistenceError,
    PillarNotFoundError,
    SubmissionInProgressError,
    TaskNotFoundError,
    ValidationError,
    WizardNotFoundError,
    WizardStateError,
    handle_persistence_error,
)
from growup.infrastructure.store import SqlMenteeStore
from growup.utils.exports import make_json_export_payload, make_xlsx_export_bytes
from growup.web.dependencies import get_db_session, get_guard, get_store, get_wizards
from growup.web.schemas import (
    Axis,
    DashboardFiguresResponse,
    DashboardResponse,
    Mentee,
    PillarDetailResponse,
    Program,
    ProgramChangeRequest,
    Sprint,
    SprintCreateRequest,
    SprintStage,
    Task,
    WizardAnswerRequest,
    WizardCreateRequest,
    WizardNameRequest,
    WizardProgramRequest,
    WizardStateResponse,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _http_error(exc: GrowUpError) -> HTTPException:
    if isinstance(exc, ValidationError | MultipleValidationError):
        code = 422
    elif isinstance(
        exc, MenteeNotFoundError | PillarNotFoundError | TaskNotFoundError | WizardNotFoundError
    ):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, SubmissionInProgressError | WizardStateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.user_message)


def _commit(db: Session, operation: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_persistence_error(e, operation) from e


def _wizard_response(wizard) -> WizardStateResponse:
    snapshot = wizard.snapshot()
    if wizard.state is WizardState.COMPLETE and wizard.outcome is not None:
        snapshot["mentee_id"] = getattr(wizard.outcome, "id", None)
    return WizardStateResponse(**snapshot)


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/programs", response_model=list[Program])
def list_programs() -> list[Program]:
    return [Program(id=p.id, name=p.name) for p in PROGRAMS]


@router.get("/axes", response_model=list[Axis])
def list_axes() -> list[Axis]:
    return [
        Axis(id=a.id, name=a.name, questions=[q.text for q in a.questions]) for a in DIAGNOSIS_AXES
    ]


@router.get("/sprint-structure", response_model=list[SprintStage])
def sprint_structure() -> list[SprintStage]:
    return [SprintStage(stage=s.stage, objective=s.objective, output=s.output) for s in SPRINT_STAGES]


# ---------- Diagnosis wizard ----------


@router.post("/diagnosis", response_model=WizardStateResponse, status_code=status.HTTP_201_CREATED)
def start_diagnosis(
    payload: WizardCreateRequest | None = None,
    wizards: WizardRegistry = Depends(get_wizards),
) -> WizardStateResponse:
    settings = get_settings()
    mode = (payload.mode if payload else None) or settings.app.diagnosis_mode
    wizard = wizards.create(mode, default_program_id=settings.app.default_program_id)
    logger.info("Started %s diagnosis wizard %s", mode, wizard.id)
    return _wizard_response(wizard)


@router.get("/diagnosis/{wizard_id}", response_model=WizardStateResponse)
def get_diagnosis(
    wizard_id: str, wizards: WizardRegistry = Depends(get_wizards)
) -> WizardStateResponse:
    try:
        return _wizard_response(wizards.get(wizard_id))
    except GrowUpError as exc:
        raise _http_error(exc) from exc


@router.post("/diagnosis/{wizard_id}/name", response_model=WizardStateResponse)
def submit_diagnosis_name(
    wizard_id: str,
    payload: WizardNameRequest,
    wizards: WizardRegistry = Depends(get_wizards),
) -> WizardStateResponse:
    try:
        wizard = wizards.get(wizard_id)
        wizard.submit_name(payload.name)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return _wizard_response(wizard)


@router.post("/diagnosis/{wizard_id}/program", response_model=WizardStateResponse)
def submit_diagnosis_program(
    wizard_id: str,
    payload: WizardProgramRequest,
    wizards: WizardRegistry = Depends(get_wizards),
) -> WizardStateResponse:
    try:
        wizard = wizards.get(wizard_id)
        wizard.submit_program(payload.program_id)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return _wizard_response(wizard)


@router.post("/diagnosis/{wizard_id}/answer", response_model=WizardStateResponse)
def submit_diagnosis_answer(
    wizard_id: str,
    payload: WizardAnswerRequest,
    wizards: WizardRegistry = Depends(get_wizards),
    guard: SubmissionGuard = Depends(get_guard),
    store: SqlMenteeStore = Depends(get_store),
    db: Session = Depends(get_db_session),
) -> WizardStateResponse:
    def handoff(result: DiagnosisResult):
        try:
            mentee = app_api.complete_diagnosis(store, result, avatar_url=payload.avatar_url)
            _commit(db, "complete diagnosis")
        except Exception:
            db.rollback()
            raise
        return mentee

    try:
        wizard = wizards.get(wizard_id)
        app_api.submit_wizard_answer(
            wizard, guard, payload.answer, notes=payload.notes, on_complete=handoff
        )
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    response = _wizard_response(wizard)
    if wizard.state is WizardState.COMPLETE:
        wizards.discard(wizard_id)
    return response


@router.post("/diagnosis/{wizard_id}/back", response_model=WizardStateResponse)
def diagnosis_back(
    wizard_id: str, wizards: WizardRegistry = Depends(get_wizards)
) -> WizardStateResponse:
    try:
        wizard = wizards.get(wizard_id)
        wizard.back()
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return _wizard_response(wizard)


# ---------- Dashboard ----------


@router.get("/mentees/latest", response_model=DashboardResponse)
def get_latest_dashboard(store: SqlMenteeStore = Depends(get_store)) -> DashboardResponse:
    try:
        payload = app_api.build_dashboard(store)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return DashboardResponse(**payload)


@router.get("/mentees/{mentee_id}/dashboard", response_model=DashboardResponse)
def get_dashboard(mentee_id: int, store: SqlMenteeStore = Depends(get_store)) -> DashboardResponse:
    try:
        payload = app_api.build_dashboard(store, mentee_id)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return DashboardResponse(**payload)


@router.get("/mentees/{mentee_id}/dashboard/figures", response_model=DashboardFiguresResponse)
def get_dashboard_figures(
    mentee_id: int, store: SqlMenteeStore = Depends(get_store)
) -> DashboardFiguresResponse:
    try:
        payload = app_api.build_dashboard_figures(store, mentee_id)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return DashboardFiguresResponse(**payload)


@router.put("/mentees/{mentee_id}/program", response_model=Mentee)
def change_program(
    mentee_id: int,
    payload: ProgramChangeRequest,
    store: SqlMenteeStore = Depends(get_store),
    db: Session = Depends(get_db_session),
) -> Mentee:
    try:
        mentee = app_api.change_mentee_program(store, mentee_id, payload.program_id)
        _commit(db, "change program")
    except GrowUpError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return Mentee(**app_api.mentee_payload(mentee))


@router.get("/mentees/{mentee_id}/pillars/{pillar_name}", response_model=PillarDetailResponse)
def get_pillar_details(
    mentee_id: int, pillar_name: str, store: SqlMenteeStore = Depends(get_store)
) -> PillarDetailResponse:
    try:
        payload = app_api.get_pillar_details(store, mentee_id, pillar_name)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return PillarDetailResponse(**payload)


# ---------- Sprints ----------


@router.get("/mentees/{mentee_id}/sprints", response_model=list[Sprint])
def list_sprints(
    mentee_id: int,
    pillar_name: str | None = None,
    store: SqlMenteeStore = Depends(get_store),
) -> list[Sprint]:
    try:
        store.get_mentee(mentee_id)
        sprints = store.list_sprints(mentee_id, pillar_name)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    return [Sprint(**app_api.sprint_payload(s)) for s in sprints]


@router.post(
    "/mentees/{mentee_id}/sprints", response_model=Sprint, status_code=status.HTTP_201_CREATED
)
def create_sprint(
    mentee_id: int,
    payload: SprintCreateRequest,
    store: SqlMenteeStore = Depends(get_store),
    guard: SubmissionGuard = Depends(get_guard),
    db: Session = Depends(get_db_session),
) -> Sprint:
    try:
        composer = app_api.compose_sprint(
            payload.pillar_name,
            payload.sprint_name,
            payload.sprint_goal,
            [task.model_dump() for task in payload.tasks],
        )
        sprint = app_api.create_sprint(
            store, guard, mentee_id, composer, on_stored=lambda: _commit(db, "create sprint")
        )
    except GrowUpError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return Sprint(**app_api.sprint_payload(sprint))


@router.post("/tasks/{task_id}/complete", response_model=Task)
def complete_task(
    task_id: str,
    store: SqlMenteeStore = Depends(get_store),
    db: Session = Depends(get_db_session),
) -> Task:
    try:
        task = app_api.complete_task(store, task_id)
        _commit(db, "complete task")
    except GrowUpError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    return Task(**app_api.task_payload(task))


# ---------- Exports ----------


def _require_exports_enabled() -> None:
    if not get_settings().app.enable_data_export:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exports are disabled")


@router.get("/mentees/{mentee_id}/exports/json")
def export_mentee_json(mentee_id: int, store: SqlMenteeStore = Depends(get_store)) -> JSONResponse:
    _require_exports_enabled()
    try:
        mentee, pillars_df, sprints_df = app_api.export_mentee_results(store, mentee_id)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    payload = json.loads(make_json_export_payload(mentee, pillars_df, sprints_df))
    return JSONResponse(content=payload)


@router.get("/mentees/{mentee_id}/exports/xlsx")
def export_mentee_xlsx(
    mentee_id: int, store: SqlMenteeStore = Depends(get_store)
) -> StreamingResponse:
    _require_exports_enabled()
    try:
        _, pillars_df, sprints_df = app_api.export_mentee_results(store, mentee_id)
    except GrowUpError as exc:
        raise _http_error(exc) from exc
    stream = io.BytesIO(make_xlsx_export_bytes(pillars_df, sprints_df))
    stream.seek(0)
    headers = {"Content-Disposition": f"attachment; filename=jornada_{mentee_id}.xlsx"}
    return StreamingResponse(stream, media_type=XLSX_MEDIA_TYPE, headers=headers)
