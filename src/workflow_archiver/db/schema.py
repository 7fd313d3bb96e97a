"""SQLAlchemy Core definitions of the active and archive workflow tables."""

from __future__ import annotations

from typing import NamedTuple, Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, Numeric, String, Table, Text
from sqlalchemy.engine import Engine

from ..config import DEFAULT_WF_TABLE, DEFAULT_WFA_TABLE

WF_COLUMNS = (
    "id",
    "druid",
    "datastream",
    "process",
    "status",
    "error_msg",
    "error_txt",
    "datetime",
    "attempts",
    "lifecycle",
    "elapsed",
    "repository",
    "note",
    "priority",
    "lane_id",
)

TERMINAL_STATUSES = ("completed", "skipped")


class WorkflowTables(NamedTuple):
    metadata: MetaData
    workflow: Table
    archive: Table


def _workflow_columns(*, primary_key: bool) -> list[Column]:
    return [
        Column("id", Integer, primary_key=primary_key, nullable=False),
        Column("druid", String(64), nullable=False),
        Column("datastream", String(255), nullable=False),
        Column("process", String(255), nullable=False),
        Column("status", String(255)),
        Column("error_msg", String(1024)),
        Column("error_txt", Text),
        Column("datetime", DateTime),
        Column("attempts", Integer, default=0),
        Column("lifecycle", String(255)),
        Column("elapsed", Numeric(9, 3)),
        Column("repository", String(255)),
        Column("note", String(4000)),
        Column("priority", Integer, default=0),
        Column("lane_id", String(255), default="default"),
    ]


def _split(identifier: str) -> tuple[Optional[str], str]:
    if "." in identifier:
        schema, table = identifier.split(".", 1)
        return schema, table
    return None, identifier


def build_tables(
    wf_table: str = DEFAULT_WF_TABLE,
    wfa_table: str = DEFAULT_WFA_TABLE,
    metadata: MetaData | None = None,
) -> WorkflowTables:
    """Describe both tables; the archive adds a ``version`` column."""

    metadata = metadata or MetaData()
    wf_schema, wf_name = _split(wf_table)
    wfa_schema, wfa_name = _split(wfa_table)
    workflow = Table(wf_name, metadata, *_workflow_columns(primary_key=True), schema=wf_schema)
    archive = Table(
        wfa_name,
        metadata,
        *_workflow_columns(primary_key=False),
        Column("version", String(255)),
        schema=wfa_schema,
    )
    return WorkflowTables(metadata=metadata, workflow=workflow, archive=archive)


def create_tables(
    engine: Engine,
    wf_table: str = DEFAULT_WF_TABLE,
    wfa_table: str = DEFAULT_WFA_TABLE,
) -> WorkflowTables:
    tables = build_tables(wf_table, wfa_table)
    tables.metadata.create_all(engine)
    return tables


__all__ = [
    "TERMINAL_STATUSES",
    "WF_COLUMNS",
    "WorkflowTables",
    "build_tables",
    "create_tables",
]
