"""Find workflow groups whose every step has reached a terminal status."""

from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine

from ..db.schema import TERMINAL_STATUSES
from .models import CandidateGroup

LOGGER = logging.getLogger(__name__)

_COMPLETED_QUERY = """
    SELECT DISTINCT w1.repository, w1.druid, w1.datastream
    FROM {table} w1
    WHERE w1.status IN :terminal
    AND NOT EXISTS (
        SELECT 1
        FROM {table} w2
        WHERE w2.druid = w1.druid
        AND w2.datastream = w1.datastream
        AND (
            w2.repository = w1.repository
            OR (w2.repository IS NULL AND w1.repository IS NULL)
        )
        AND (w2.status IS NULL OR w2.status NOT IN :sibling_terminal)
    )
"""


def completed_objects_statement(table: str):
    return text(_COMPLETED_QUERY.format(table=table)).bindparams(
        bindparam("terminal", value=list(TERMINAL_STATUSES), expanding=True),
        bindparam("sibling_terminal", value=list(TERMINAL_STATUSES), expanding=True),
    )


def find_completed_objects(engine: Engine, table: str) -> Iterator[CandidateGroup]:
    """Stream candidate groups from ``table``.

    The generator is single pass; the read connection stays open until it is
    exhausted or closed.
    """

    statement = completed_objects_statement(table)
    with engine.connect() as connection:
        result = connection.execution_options(stream_results=True).execute(statement)
        for row in result.mappings():
            yield CandidateGroup(
                repository=row["repository"],
                druid=row["druid"],
                datastream=row["datastream"],
            )


class CandidateSelector:
    """Bind the completed-object query to one engine and table."""

    def __init__(self, engine: Engine, table: str) -> None:
        self.engine = engine
        self.table = table

    def select(self) -> Iterator[CandidateGroup]:
        LOGGER.debug("Selecting completed workflow groups from %s", self.table)
        return find_completed_objects(self.engine, self.table)


__all__ = ["CandidateSelector", "completed_objects_statement", "find_completed_objects"]
