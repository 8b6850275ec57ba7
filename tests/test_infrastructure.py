"""
Tests for configuration, error handling, logging, validation and the
application use cases that sit between the web layer and the store.
"""

import json
import logging
import sys
import threading

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError as SQLIntegrityError
from sqlalchemy.exc import OperationalError

from growup.application import api as app_api
from growup.application.context import DashboardContext
from growup.application.guard import SubmissionGuard
from growup.application.wizards import WizardRegistry
from growup.domain.models import Assessment
from growup.domain.schemas import (
    MenteeCreationInput,
    SprintInput,
    TaskInput,
    validate_input,
)
from growup.domain.wizard import DiagnosisResult, WizardMode
from growup.infrastructure.config import (
    DatabaseConfig,
    Settings,
    get_settings,
    load_settings_from_file,
    override_settings,
)
from growup.infrastructure.db import create_database_engine, make_engine_and_session
from growup.infrastructure.exceptions import (
    ConfigurationError,
    ExportError,
    GrowUpError,
    IntegrityError,
    MenteeNotFoundError,
    PersistenceConnectionError,
    PersistenceError,
    PillarNotFoundError,
    SubmissionInProgressError,
    ValidationError,
    WizardNotFoundError,
    create_user_friendly_error_message,
    handle_persistence_error,
    log_error_details,
)
from growup.infrastructure.logging import (
    LogContext,
    StructuredFormatter,
    clear_context,
    context_filter,
    get_logger,
    log_operation,
    set_context,
    setup_logging,
)
from growup.utils.exports import make_json_export_payload
from growup.utils.seed import initialise_database


def diagnosis_result(name="Ana Souza", program_id="prog-start", scores=(2.0,) * 8):
    axes = ["Sócios", "Finanças", "Folha", "Clientes", "Vendas"]
    axes += ["IA & Automação", "Reforma Tributária", "Estratégia"]
    return DiagnosisResult(
        mentee_name=name,
        program_id=program_id,
        assessments=tuple(Assessment(n.lower(), n, s) for n, s in zip(axes, scores)),
    )


class TestPydanticValidation:
    """Input schemas used before anything reaches the store."""

    def test_mentee_input_strips_and_sanitizes(self):
        result = validate_input(
            MenteeCreationInput,
            {"name": "  <b>Ana</b> Souza\x00 ", "program_id": "prog-hibrido", "avatar_url": ""},
        )
        assert result.success is True
        assert result.data["name"] == "Ana Souza"
        assert result.data["avatar_url"] is None

    def test_mentee_input_rejects_unknown_program(self):
        result = validate_input(MenteeCreationInput, {"name": "Ana", "program_id": "prog-gold"})
        assert result.success is False
        assert result.errors[0].field == "program_id"

    def test_task_priority_must_be_known(self):
        assert validate_input(TaskInput, {"title": "CRM", "priority": "urgent"}).success is False
        data = validate_input(TaskInput, {"title": "CRM"}).data
        assert data["priority"] == "medium"

    def test_sprint_input_requires_tasks_and_known_pillar(self):
        result = validate_input(
            SprintInput,
            {"pillar_name": "Marketing", "sprint_name": "S", "sprint_goal": "G", "tasks": []},
        )
        assert {e.field for e in result.errors} == {"pillar_name", "tasks"}


class TestErrorHandling:
    """Error taxonomy and user-facing messages."""

    def test_validation_error_carries_field(self):
        error = ValidationError("sprint_goal", "cannot be empty", "")
        assert error.field == "sprint_goal"
        assert error.user_message == "Invalid sprint goal: cannot be empty"
        assert error.details == {"field": "sprint_goal", "value": ""}

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("UNIQUE constraint failed: pillars.mentee_id", IntegrityError),
            ("FOREIGN KEY constraint failed", IntegrityError),
            ("unable to open database file", PersistenceConnectionError),
            ("database is locked", PersistenceError),
        ],
    )
    def test_backend_errors_are_classified(self, message, expected):
        error = handle_persistence_error(SQLIntegrityError("stmt", {}, Exception(message)), "x")
        assert type(error) is expected

    def test_unique_violation_message(self):
        error = handle_persistence_error(
            OperationalError("stmt", {}, Exception("UNIQUE constraint failed")), "create pillars"
        )
        assert error.constraint == "unique"
        assert error.user_message == "This item already exists."

    def test_user_friendly_messages(self):
        assert create_user_friendly_error_message(MenteeNotFoundError(3)).startswith("The selected")
        assert "try again" in create_user_friendly_error_message(RuntimeError("boom")).lower()

    def test_log_error_details(self):
        details = log_error_details(PillarNotFoundError(1, "Vendas"), {"mentee_id": 1})
        assert details["error_type"] == "PillarNotFoundError"
        assert details["context"] == {"mentee_id": 1}
        assert details["error_details"]["pillar_name"] == "Vendas"


class TestLogging:
    """Structured logging with context."""

    def test_logger_names_are_namespaced(self):
        assert get_logger("domain.wizard").name == "growup.domain.wizard"
        assert get_logger("growup.web").name == "growup.web"

    def test_file_logging_writes_json_lines(self, tmp_path):
        log_file = tmp_path / "logs" / "growup.log"
        setup_logging(level="DEBUG", log_file=str(log_file), enable_console=False)
        try:
            with LogContext(mentee_id=7):
                get_logger("tests").info("Pillars loaded")
            for handler in logging.getLogger("growup").handlers:
                handler.flush()
            entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        finally:
            setup_logging(level="WARNING", enable_console=False)
        assert entry["message"] == "Pillars loaded"
        assert entry["mentee_id"] == 7
        assert entry["logger"] == "growup.tests"

    def test_context_is_scoped(self):
        clear_context()
        set_context(wizard_id="abc")
        with LogContext(mentee_id=1):
            assert context_filter.context == {"wizard_id": "abc", "mentee_id": 1}
        assert context_filter.context == {"wizard_id": "abc"}
        clear_context()
        assert context_filter.context == {}

    def test_formatter_includes_exception(self):
        try:
            raise ValueError("bad score")
        except ValueError:
            record = logging.getLogger("growup.tests").makeRecord(
                "growup.tests", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"

    def test_log_operation_reraises(self):
        @log_operation("explode")
        def explode():
            raise ValidationError("name", "cannot be empty")

        with pytest.raises(ValidationError):
            explode()
        assert "operation" not in context_filter.context


class TestConfiguration:
    """Centralized settings."""

    def test_sqlite_memory_uses_static_pool(self):
        config = DatabaseConfig(backend="sqlite", sqlite_path=":memory:")
        assert config.get_connection_url() == "sqlite:///:memory:"
        options = config.get_engine_options()
        assert options["connect_args"] == {"check_same_thread": False}
        assert options["poolclass"].__name__ == "StaticPool"

    def test_sqlite_path_gets_suffix(self, tmp_path):
        config = DatabaseConfig(sqlite_path=str(tmp_path / "data" / "growup"))
        assert config.sqlite_path.endswith("growup.db")
        assert (tmp_path / "data").is_dir()

    def test_mysql_url(self):
        config = DatabaseConfig(
            backend="mysql",
            mysql_host="db",
            mysql_user="growup",
            mysql_password="secret",
            mysql_database="cx",
        )
        assert config.get_connection_url().startswith("mysql+pymysql://growup:secret@db:3306/cx")
        assert "poolclass" not in config.get_engine_options()

    def test_mysql_requires_database(self):
        with pytest.raises(ValueError):
            DatabaseConfig(backend="mysql", mysql_database="")

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("APP_DIAGNOSIS_MODE", "question")
        monkeypatch.setenv("APP_DEFAULT_PROGRAM_ID", "prog-start")
        settings = override_settings(app_default_program_id="prog-hibrido")
        assert settings.app.diagnosis_mode == "question"
        assert settings.app.default_program_id == "prog-hibrido"
        assert settings.is_testing()
        assert get_settings() is settings
        info = settings.get_environment_info()
        assert info["features"] == {"data_export": True}

    def test_production_logging_level(self, monkeypatch):
        monkeypatch.setenv("APP_ENVIRONMENT", "production")
        settings = Settings()
        assert settings.is_production()
        assert settings.logging.level == "WARNING"
        assert settings.logging.as_setup_kwargs()["level"] == "WARNING"

    def test_load_settings_from_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("APP_TITLE", "placeholder")
        config_file = tmp_path / "settings.json"
        config_file.write_text(json.dumps({"app": {"title": "Jornada CX"}}), encoding="utf-8")
        assert load_settings_from_file(str(config_file)).app.title == "Jornada CX"

    def test_invalid_file_value_raises_configuration_error(self, tmp_path, monkeypatch):
        monkeypatch.setenv("APP_DEFAULT_PROGRAM_ID", "prog-start")
        config_file = tmp_path / "settings.json"
        config_file.write_text(
            json.dumps({"app": {"default_program_id": "prog-gold"}}), encoding="utf-8"
        )
        with pytest.raises(ConfigurationError) as exc:
            load_settings_from_file(str(config_file))
        assert exc.value.config_key == "app"

    def test_missing_or_unsupported_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings_from_file(str(tmp_path / "missing.json"))
        yaml_file = tmp_path / "settings.yaml"
        yaml_file.write_text("app: {}", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings_from_file(str(yaml_file))


class TestDatabaseSetup:
    def test_initialise_database_reports_created_tables(self):
        engine, SessionLocal = make_engine_and_session(DatabaseConfig(sqlite_path=":memory:"))
        try:
            assert initialise_database(engine) is False
            assert initialise_database(engine) is True
            assert "pillars" in inspect(engine).get_table_names()
            with SessionLocal() as session:
                assert session.bind is engine
        finally:
            engine.dispose()

    def test_engine_uses_configured_backend(self, tmp_path):
        engine = create_database_engine(DatabaseConfig(sqlite_path=str(tmp_path / "cx.db")))
        try:
            assert engine.url.database.endswith("cx.db")
        finally:
            engine.dispose()


class TestSubmissionGuard:
    def test_duplicate_submission_is_rejected(self):
        guard = SubmissionGuard()
        with guard.hold("create_sprint", 1):
            assert guard.is_busy("create_sprint", 1)
            assert not guard.is_busy("create_sprint", 2)
            with pytest.raises(SubmissionInProgressError):
                with guard.hold("create_sprint", 1):
                    pass
        assert not guard.is_busy("create_sprint", 1)

    def test_guard_is_released_after_failure(self):
        guard = SubmissionGuard()
        with pytest.raises(RuntimeError):
            with guard.hold("complete_diagnosis", "w1"):
                raise RuntimeError("boom")
        with guard.hold("complete_diagnosis", "w1"):
            pass

    def test_guard_across_threads(self):
        guard = SubmissionGuard()
        entered = threading.Event()
        release = threading.Event()

        def slow_submission():
            with guard.hold("create_sprint", 5):
                entered.set()
                release.wait(timeout=5)

        worker = threading.Thread(target=slow_submission)
        worker.start()
        entered.wait(timeout=5)
        try:
            with pytest.raises(SubmissionInProgressError):
                with guard.hold("create_sprint", 5):
                    pass
        finally:
            release.set()
            worker.join()


class TestWizardRegistry:
    def test_create_get_discard(self):
        registry = WizardRegistry()
        wizard = registry.create(WizardMode.QUESTION, default_program_id="prog-exclusive")
        assert registry.get(wizard.id) is wizard
        assert wizard.program_id == "prog-exclusive"
        assert len(registry) == 1
        registry.discard(wizard.id)
        assert len(registry) == 0
        with pytest.raises(WizardNotFoundError):
            registry.get(wizard.id)

    def test_idle_wizards_are_evicted_on_create(self):
        now = [0.0]
        registry = WizardRegistry(max_idle_seconds=60, clock=lambda: now[0])
        stale = registry.create(WizardMode.AXIS, default_program_id="prog-start")
        active = registry.create(WizardMode.AXIS, default_program_id="prog-start")

        now[0] = 45.0
        registry.get(active.id)
        now[0] = 90.0
        fresh = registry.create(WizardMode.AXIS, default_program_id="prog-start")

        assert len(registry) == 2
        assert registry.get(active.id) is active
        assert registry.get(fresh.id) is fresh
        with pytest.raises(WizardNotFoundError):
            registry.get(stale.id)


class TestDashboardContext:
    def test_requires_load(self, store):
        context = DashboardContext(store)
        assert context.is_loaded is False
        with pytest.raises(GrowUpError):
            context.metrics()
        assert context.load() is None

    def test_load_refresh_and_change_program(self, store):
        mentee = app_api.complete_diagnosis(store, diagnosis_result())
        context = DashboardContext(store)
        context.load()
        assert context.mentee.id == mentee.id
        assert len(context.pillars) == 8

        context.change_program("prog-exclusive")
        context.refresh()
        assert context.mentee.program_id == "prog-exclusive"
        assert context.pillar("Folha").score == 2.0
        with pytest.raises(PillarNotFoundError):
            context.pillar("Marketing")


class TestApplicationAPI:
    def test_complete_diagnosis_validates_mentee(self, store):
        with pytest.raises(ValidationError):
            app_api.complete_diagnosis(store, diagnosis_result(program_id="prog-gold"))
        assert store.load_latest_mentee() is None

    def test_submit_wizard_answer_is_guarded(self):
        registry = WizardRegistry()
        wizard = registry.create(WizardMode.AXIS, default_program_id="prog-start")
        wizard.submit_name("Ana")
        wizard.submit_program()
        guard = SubmissionGuard()
        with guard.hold("complete_diagnosis", wizard.id):
            with pytest.raises(SubmissionInProgressError):
                app_api.submit_wizard_answer(wizard, guard, 3.0)
        snapshot = app_api.submit_wizard_answer(wizard, guard, 3.0)
        assert snapshot["answered"] == 1

    def test_create_sprint_keeps_draft_when_commit_fails(self, store):
        mentee = app_api.complete_diagnosis(store, diagnosis_result())
        composer = app_api.compose_sprint("Vendas", None, "Estruturar funil", [{"title": "CRM"}])

        def failing_commit():
            raise handle_persistence_error(Exception("database is locked"), "create sprint")

        with pytest.raises(PersistenceError):
            app_api.create_sprint(store, SubmissionGuard(), mentee.id, composer, failing_commit)
        assert [t.title for t in composer.tasks] == ["CRM"]

    def test_compose_sprint_skips_markup_only_titles(self):
        composer = app_api.compose_sprint(
            "Vendas", None, "Funil", [{"title": "<i></i>"}, {"title": "<b>CRM</b>"}]
        )
        assert [t.title for t in composer.tasks] == ["CRM"]

    def test_compose_sprint_rejects_invalid_task(self):
        with pytest.raises(ValidationError):
            app_api.compose_sprint("Vendas", None, "Funil", [{"title": "CRM", "priority": "now"}])

    def test_build_dashboard_without_mentee(self, store):
        with pytest.raises(MenteeNotFoundError):
            app_api.build_dashboard(store)

    def test_export_without_pillars(self, store):
        mentee = store.create_mentee("Ana", "prog-start")
        record, pillars_df, sprints_df = app_api.export_mentee_results(store, mentee.id)
        assert record["overall_progress"] == 0
        assert pillars_df.empty and sprints_df.empty
        payload = json.loads(make_json_export_payload(record, pillars_df, sprints_df))
        assert payload["pillars"] == [] and payload["sprints"] == []

    def test_export_failure_is_wrapped(self, store, monkeypatch):
        mentee = store.create_mentee("Ana", "prog-start")

        def broken(mentee_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "load_pillars", broken)
        with pytest.raises(ExportError):
            app_api.export_mentee_results(store, mentee.id)
        with pytest.raises(MenteeNotFoundError):
            app_api.export_mentee_results(store, 999)

    def test_unexpected_errors_get_user_message(self, store, monkeypatch):
        def broken():
            raise KeyError("mentee")

        monkeypatch.setattr(store, "load_latest_mentee", broken)
        with pytest.raises(GrowUpError) as exc:
            app_api.build_dashboard(store)
        assert exc.value.user_message == "Unable to load the dashboard. Please try again."
