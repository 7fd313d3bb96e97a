"""Configuration for the workflow archiver."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from sqlalchemy.engine import Engine

DEFAULT_WF_TABLE = "workflow"
DEFAULT_WFA_TABLE = "workflow_archive"
DEFAULT_RETRY_DELAY = 5.0

DB_URI_ENV_VARS = ("WORKFLOW_DB_URI", "DATABASE_URL")
DOR_SERVICE_URI_ENV = "DOR_SERVICE_URI"
RETRY_DELAY_ENV = "WORKFLOW_ARCHIVE_RETRY_DELAY"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


@dataclass(frozen=True)
class ArchiverConfig:
    """Settings consumed by :class:`~workflow_archiver.pipeline.WorkflowArchiver`.

    ``db_connection`` takes precedence over ``db_uri`` when both are set.
    """

    db_uri: Optional[str] = None
    wf_table: str = DEFAULT_WF_TABLE
    wfa_table: str = DEFAULT_WFA_TABLE
    retry_delay: float = DEFAULT_RETRY_DELAY
    db_connection: Optional[Engine] = None
    dor_service_uri: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("wf_table", "wfa_table"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _IDENTIFIER.match(value):
                raise ValueError(f"{name} must be a plain table identifier, got {value!r}")
        if self.wf_table == self.wfa_table:
            raise ValueError("wf_table and wfa_table must name different tables")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ArchiverConfig":
        known = {field.name for field in fields(cls)}
        unknown = set(mapping).difference(known)
        if unknown:
            raise ValueError(f"Unknown archiver options: {sorted(unknown)}")
        values = dict(mapping)
        if values.get("retry_delay") is not None:
            values["retry_delay"] = float(values["retry_delay"])
        return cls(**{key: value for key, value in values.items() if value is not None})

    @classmethod
    def from_env(cls, **overrides: Any) -> "ArchiverConfig":
        """Build a config from the environment, letting ``overrides`` win."""

        values: dict[str, Any] = {}
        for env_name in DB_URI_ENV_VARS:
            value = os.getenv(env_name)
            if value:
                values["db_uri"] = value
                break
        dor_uri = os.getenv(DOR_SERVICE_URI_ENV)
        if dor_uri:
            values["dor_service_uri"] = dor_uri
        delay = os.getenv(RETRY_DELAY_ENV)
        if delay:
            values["retry_delay"] = delay
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.from_mapping(values)


def load_config(path: str | Path, **overrides: Any) -> ArchiverConfig:
    """Load archiver settings from a YAML file.

    Environment values fill anything the file leaves out and explicit
    ``overrides`` beat both.
    """

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Archiver config file not found: {p}")
    with p.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    section = payload.get("workflow_archiver", payload) if isinstance(payload, Mapping) else payload
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        raise TypeError(f"Archiver config {p} must contain a mapping")
    merged = {**dict(section), **{k: v for k, v in overrides.items() if v is not None}}
    return ArchiverConfig.from_env(**merged)


__all__ = [
    "ArchiverConfig",
    "DEFAULT_RETRY_DELAY",
    "DEFAULT_WFA_TABLE",
    "DEFAULT_WF_TABLE",
    "load_config",
]
