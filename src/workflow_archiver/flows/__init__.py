"""Prefect flow definitions for the workflow archiver."""

from .archive import archive_datastream_flow, archive_workflows_flow

__all__ = ["archive_datastream_flow", "archive_workflows_flow"]
