# tests/test_cli.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskpane import cli
from taskpane.config import DEFAULT_DB_PATH, Settings, get_settings
from taskpane.errors import StoreError
from taskpane.logging_setup import level_from_name, setup_logging


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """No TASKPANE_* variables leak in from the real environment; no .env is found."""
    for name in ("TASKPANE_DB_PATH", "TASKPANE_SEED_DEMO", "TASKPANE_LOG_DIR", "TASKPANE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in handlers:
            h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_settings_defaults(clean_env: Path) -> None:
    s = get_settings(dotenv=False)
    assert s.db_path == DEFAULT_DB_PATH
    assert s.seed_demo is True
    assert s.log_level == "INFO"


def test_settings_from_env(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKPANE_DB_PATH", str(clean_env / "x.db"))
    monkeypatch.setenv("TASKPANE_SEED_DEMO", "no")
    monkeypatch.setenv("TASKPANE_LOG_DIR", str(clean_env / "logs"))
    monkeypatch.setenv("TASKPANE_LOG_LEVEL", "debug")

    s = get_settings(dotenv=False)

    assert s == Settings(
        db_path=clean_env / "x.db",
        seed_demo=False,
        log_dir=clean_env / "logs",
        log_level="DEBUG",
    )


def test_settings_from_dotenv_file(clean_env: Path) -> None:
    (clean_env / ".env").write_text("TASKPANE_DB_PATH=from-dotenv.db\n", encoding="utf-8")
    try:
        s = get_settings()
        assert s.db_path == Path("from-dotenv.db")
    finally:
        import os

        os.environ.pop("TASKPANE_DB_PATH", None)


def test_flags_override_settings(clean_env: Path) -> None:
    settings = get_settings(dotenv=False)
    args = cli.build_parser(settings).parse_args(["--db", "other.db", "--no-seed"])

    merged = cli.apply_args(settings, args)

    assert merged.db_path == Path("other.db")
    assert merged.seed_demo is False
    assert merged.log_dir == settings.log_dir


def test_version_flag(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "taskpane" in capsys.readouterr().out


def test_main_runs_and_logs(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKPANE_LOG_DIR", str(clean_env / "logs"))
    seen: list[Settings] = []
    monkeypatch.setattr(cli, "run", seen.append)

    cli.main(["--db", str(clean_env / "t.db")])

    assert seen and seen[0].db_path == clean_env / "t.db"
    log = (clean_env / "logs" / "taskpane.log").read_text(encoding="utf-8")
    assert "Starting taskpane" in log


def test_main_exits_nonzero_on_fatal_error(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKPANE_LOG_DIR", str(clean_env / "logs"))

    def boom(settings: Settings) -> None:
        raise StoreError("error opening database: unable to open database file")

    monkeypatch.setattr(cli, "run", boom)

    with pytest.raises(SystemExit) as exc:
        cli.main([])

    assert exc.value.code == "taskpane: error opening database: unable to open database file"
    log = (clean_env / "logs" / "taskpane.log").read_text(encoding="utf-8")
    assert "Fatal" in log


def test_run_reports_unopenable_database(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKPANE_LOG_DIR", str(clean_env / "logs"))
    # A directory can't be opened as a database; the terminal is never touched.
    with pytest.raises(SystemExit) as exc:
        cli.main(["--db", str(clean_env)])
    assert str(exc.value.code).startswith("taskpane: error")


def test_level_from_name() -> None:
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("WARNING") == logging.WARNING
    assert level_from_name("nonsense") == logging.INFO


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", file_level=logging.DEBUG)
    logging.getLogger("taskpane.test").debug("hello file")
    for h in logging.getLogger().handlers:
        h.flush()
    assert log_file.name == "taskpane.log"
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_console_handler_only_passes_critical(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs")
    log = logging.getLogger("taskpane.test")
    log.error("Fatal: stays in the file")
    log.critical("cannot continue")
    for h in logging.getLogger().handlers:
        h.flush()

    err = capsys.readouterr().err
    assert "stays in the file" not in err
    assert "CRITICAL taskpane.test: cannot continue" in err
    assert "stays in the file" in log_file.read_text(encoding="utf-8")
