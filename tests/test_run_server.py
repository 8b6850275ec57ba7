from __future__ import annotations

import pytest

from scripts import run_server


def test_main_prepares_database_then_starts_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, object]] = []

    def fake_setup_logging(**kwargs) -> None:
        calls.append(("logging", kwargs["level"]))

    def fake_initialise(engine) -> bool:
        calls.append(("initialise", engine.url.database))
        return False

    def fake_run(app: str, host: str, port: int, reload: bool) -> None:
        calls.append(("uvicorn", (app, host, port, reload)))

    monkeypatch.setattr(run_server, "setup_logging", fake_setup_logging)
    monkeypatch.setattr(run_server, "initialise_database", fake_initialise)
    monkeypatch.setattr(run_server.uvicorn, "run", fake_run)

    run_server.main()

    assert calls[0] == ("logging", "INFO")
    assert calls[1] == ("initialise", ":memory:")
    assert calls[2] == ("uvicorn", ("growup.web.main:app", "0.0.0.0", 8000, False))


def test_configure_logging_uses_log_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    received: dict[str, object] = {}
    log_file = tmp_path / "server.log"
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.setenv("LOG_FILE_PATH", str(log_file))
    monkeypatch.setenv("LOG_CONSOLE_ENABLED", "false")
    monkeypatch.setattr(run_server, "setup_logging", lambda **kwargs: received.update(kwargs))

    run_server.configure_logging()

    assert received["level"] == "ERROR"
    assert received["log_file"] == str(log_file)
    assert received["enable_console"] is False


def test_ensure_database_reports_created_tables(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(run_server, "initialise_database", lambda engine: True)
    assert run_server.ensure_database() is True
    assert capsys.readouterr().out == ""

    monkeypatch.setattr(run_server, "initialise_database", lambda engine: False)
    assert run_server.ensure_database() is False
    assert "Database tables created" in capsys.readouterr().out
