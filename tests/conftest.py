"""Test fixtures and configuration for workflow archiver tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

_SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine

from workflow_archiver.db import WorkflowTables, create_tables
from workflow_archiver.gateways import VersionResolutionError


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'workflow.db'}"


@pytest.fixture
def engine(db_url: str) -> Engine:
    engine = create_engine(db_url, future=True)
    yield engine
    engine.dispose()


@pytest.fixture
def tables(engine: Engine) -> WorkflowTables:
    return create_tables(engine)


def workflow_row(
    druid: str,
    datastream: str = "accessionWF",
    process: str = "start-accession",
    status: str = "completed",
    repository: Optional[str] = "dor",
    **extra: Any,
) -> Dict[str, Any]:
    row = {
        "druid": druid,
        "datastream": datastream,
        "process": process,
        "status": status,
        "repository": repository,
        "attempts": 0,
        "lifecycle": None,
        "note": None,
        "priority": 0,
        "lane_id": "default",
    }
    row.update(extra)
    return row


def insert_rows(engine: Engine, tables: WorkflowTables, rows: Iterable[Dict[str, Any]]) -> None:
    rows = list(rows)
    if not rows:
        return
    with engine.begin() as connection:
        connection.execute(tables.workflow.insert(), rows)


def fetch_rows(engine: Engine, table) -> List[Dict[str, Any]]:
    with engine.connect() as connection:
        result = connection.execute(select(table).order_by(table.c.druid, table.c.process))
        return [dict(row) for row in result.mappings()]


class FakeResolver:
    """Resolve versions from a mapping; missing druids fail resolution."""

    def __init__(self, versions: Dict[str, str]) -> None:
        self.versions = versions
        self.calls: List[str] = []

    def resolve(self, druid: str) -> str:
        self.calls.append(druid)
        if druid not in self.versions:
            raise VersionResolutionError(druid, "HTTP 500: boom")
        return self.versions[druid]


def events(caplog: pytest.LogCaptureFixture, name: str) -> list:
    return [record for record in caplog.records if getattr(record, "event", None) == name]
