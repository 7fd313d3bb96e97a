"""Prefect flows that run the workflow archiver on a schedule or on demand."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from prefect import flow, get_run_logger
from prefect.exceptions import MissingContextError

from ..config import ArchiverConfig, load_config
from ..pipeline import WorkflowArchiver


def _logger():
    try:
        return get_run_logger()
    except MissingContextError:
        return logging.getLogger(__name__)


def _resolve_config(config_path: Optional[str], **overrides: Any) -> ArchiverConfig:
    if config_path:
        return load_config(config_path, **overrides)
    return ArchiverConfig.from_env(**overrides)


@flow(name="workflow-archive")
def archive_workflows_flow(
    config_path: Optional[str] = None,
    db_uri: Optional[str] = None,
    dor_service_uri: Optional[str] = None,
    wf_table: Optional[str] = None,
    wfa_table: Optional[str] = None,
    retry_delay: Optional[float] = None,
) -> Dict[str, Any]:
    """Archive every workflow group whose steps have all completed."""

    logger = _logger()
    config = _resolve_config(
        config_path,
        db_uri=db_uri,
        dor_service_uri=dor_service_uri,
        wf_table=wf_table,
        wfa_table=wfa_table,
        retry_delay=retry_delay,
    )
    logger.info("Archiving completed workflows from %s into %s", config.wf_table, config.wfa_table)
    with WorkflowArchiver(config) as archiver:
        summary = archiver.run()
    if summary.halted:
        logger.warning("Archiving halted after %d error(s)", summary.errors)
    logger.info(
        "Archived %d object(s), %d error(s), %d skipped",
        summary.archived,
        summary.errors,
        summary.skipped,
    )
    return summary.as_dict()


@flow(name="workflow-archive-datastream")
def archive_datastream_flow(
    repository: Optional[str],
    druid: str,
    datastream: str,
    version: str,
    config_path: Optional[str] = None,
    db_uri: Optional[str] = None,
) -> Dict[str, Any]:
    """Archive one object's datastream at a version the caller already knows."""

    logger = _logger()
    config = _resolve_config(config_path, db_uri=db_uri)
    logger.info("Archiving %s %s at version %s", druid, datastream, version)
    with WorkflowArchiver(config) as archiver:
        summary = archiver.archive_one_datastream(repository, druid, datastream, version)
    return summary.as_dict()


__all__ = ["archive_datastream_flow", "archive_workflows_flow"]
