"""Unit tests for archiver configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from workflow_archiver.config import (
    DEFAULT_RETRY_DELAY,
    DEFAULT_WF_TABLE,
    DEFAULT_WFA_TABLE,
    ArchiverConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WORKFLOW_DB_URI", "DATABASE_URL", "DOR_SERVICE_URI", "WORKFLOW_ARCHIVE_RETRY_DELAY"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_named_constants() -> None:
    config = ArchiverConfig()

    assert config.wf_table == DEFAULT_WF_TABLE == "workflow"
    assert config.wfa_table == DEFAULT_WFA_TABLE == "workflow_archive"
    assert config.retry_delay == DEFAULT_RETRY_DELAY == 5
    assert config.db_uri is None
    assert config.db_connection is None
    assert config.dor_service_uri is None


def test_from_env_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://fallback/db")
    monkeypatch.setenv("WORKFLOW_DB_URI", "postgresql://wf/db")
    monkeypatch.setenv("DOR_SERVICE_URI", "http://dor/v1")
    monkeypatch.setenv("WORKFLOW_ARCHIVE_RETRY_DELAY", "0.5")

    config = ArchiverConfig.from_env()

    assert config.db_uri == "postgresql://wf/db"
    assert config.dor_service_uri == "http://dor/v1"
    assert config.retry_delay == 0.5


def test_from_env_overrides_win_and_none_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKFLOW_DB_URI", "postgresql://wf/db")

    config = ArchiverConfig.from_env(db_uri="sqlite:///other.db", wf_table=None, retry_delay=1)

    assert config.db_uri == "sqlite:///other.db"
    assert config.wf_table == "workflow"
    assert config.retry_delay == 1.0


@pytest.mark.parametrize(
    "options",
    [
        {"wf_table": "workflow; drop table workflow"},
        {"wfa_table": ""},
        {"wf_table": "same", "wfa_table": "same"},
        {"retry_delay": -1},
    ],
)
def test_invalid_options_are_rejected(options) -> None:
    with pytest.raises(ValueError):
        ArchiverConfig(**options)


def test_schema_qualified_table_names_are_allowed() -> None:
    config = ArchiverConfig(wf_table="wfs.workflow", wfa_table="wfs.workflow_archive")

    assert config.wf_table == "wfs.workflow"


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown archiver options"):
        ArchiverConfig.from_mapping({"db_url": "sqlite://"})


def test_load_config_reads_yaml_section(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOR_SERVICE_URI", "http://dor-from-env/v1")
    path = tmp_path / "archiver.yml"
    path.write_text(
        "workflow_archiver:\n"
        "  db_uri: sqlite:///workflow.db\n"
        "  wfa_table: workflow_history\n"
        "  retry_delay: 2\n",
        encoding="utf-8",
    )

    config = load_config(path, retry_delay=0)

    assert config.db_uri == "sqlite:///workflow.db"
    assert config.wfa_table == "workflow_history"
    assert config.dor_service_uri == "http://dor-from-env/v1"
    assert config.retry_delay == 0.0


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_load_config_accepts_an_empty_section(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKFLOW_DB_URI", "sqlite:///env.db")
    path = tmp_path / "archiver.yml"
    path.write_text("workflow_archiver:\n", encoding="utf-8")

    config = load_config(path)

    assert config.db_uri == "sqlite:///env.db"
    assert config.wf_table == DEFAULT_WF_TABLE


@pytest.mark.parametrize("body", ["- db_uri\n", "workflow_archiver: sqlite:///workflow.db\n"])
def test_load_config_rejects_non_mapping_settings(tmp_path: Path, body: str) -> None:
    path = tmp_path / "archiver.yml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(TypeError, match="must contain a mapping"):
        load_config(path)
