"""Database helpers for the workflow archiver."""

from .connection import dispose_engines, get_engine, prepare_engine, resolve_database_url
from .schema import (
    TERMINAL_STATUSES,
    WF_COLUMNS,
    WorkflowTables,
    build_tables,
    create_tables,
)

__all__ = [
    "TERMINAL_STATUSES",
    "WF_COLUMNS",
    "WorkflowTables",
    "build_tables",
    "create_tables",
    "dispose_engines",
    "get_engine",
    "prepare_engine",
    "resolve_database_url",
]
