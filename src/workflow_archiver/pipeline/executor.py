"""Copy-then-delete execution of archive criteria with retries."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..config import DEFAULT_RETRY_DELAY
from ..db.schema import WF_COLUMNS
from .models import ArchiveCriteria, ArchiveSummary

LOGGER = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
ERROR_BUDGET = 3


def match_predicate(criteria: ArchiveCriteria) -> str:
    """WHERE clause shared by the copy and the delete of one criteria."""

    clause = "druid = :druid AND datastream = :datastream"
    if criteria.repository is None:
        return f"{clause} AND repository IS NULL"
    return f"{clause} AND repository = :repository"


def copy_statement(criteria: ArchiveCriteria, wf_table: str, wfa_table: str) -> str:
    columns = ", ".join(WF_COLUMNS)
    return (
        f"INSERT INTO {wfa_table} ({columns}, version) "
        f"SELECT {columns}, :version FROM {wf_table} "
        f"WHERE {match_predicate(criteria)}"
    )


def delete_statement(criteria: ArchiveCriteria, wf_table: str) -> str:
    return f"DELETE FROM {wf_table} WHERE {match_predicate(criteria)}"


class ArchiveExecutor:
    """Archive criteria one at a time inside individual transactions.

    Each criteria gets up to ``max_attempts`` transactions, ``retry_delay``
    seconds apart. A criteria that exhausts its attempts counts as one error;
    once ``error_budget`` errors accumulate the rest of the batch is left
    untouched.
    """

    def __init__(
        self,
        engine: Engine,
        wf_table: str,
        wfa_table: str,
        *,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        max_attempts: int = MAX_ATTEMPTS,
        error_budget: int = ERROR_BUDGET,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if error_budget < 1:
            raise ValueError("error_budget must be at least 1")
        self.engine = engine
        self.wf_table = wf_table
        self.wfa_table = wfa_table
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        self.error_budget = error_budget
        self._sleep = sleep

    def archive_one(self, criteria: ArchiveCriteria) -> int:
        """Run one copy+delete transaction and return the number of rows moved."""

        LOGGER.info(
            "Archiving %r",
            criteria,
            extra={"event": "archive.start", "druid": criteria.druid},
        )
        copy_sql = copy_statement(criteria, self.wf_table, self.wfa_table)
        delete_sql = delete_statement(criteria, self.wf_table)
        params = criteria.bind_params()
        LOGGER.debug("copy_sql is %s", copy_sql)
        LOGGER.debug("delete_sql is %s", delete_sql)

        with self.engine.begin() as connection:
            connection.execute(text(copy_sql), {**params, "version": criteria.version})
            LOGGER.debug("Removing old workflow rows for %s", criteria.druid)
            moved = connection.execute(text(delete_sql), params).rowcount
        return moved

    def _attempt(self, criteria: ArchiveCriteria) -> bool:
        for attempt in range(1, self.max_attempts + 1):
            try:
                moved = self.archive_one(criteria)
            except SQLAlchemyError as exc:
                LOGGER.error(
                    "Rolling back transaction for %s due to: %r",
                    criteria.druid,
                    exc,
                    exc_info=True,
                    extra={"event": "archive.rollback", "druid": criteria.druid, "attempt": attempt},
                )
                if attempt < self.max_attempts:
                    LOGGER.error(
                        "Retrying archive operation in %s seconds...",
                        self.retry_delay,
                        extra={"event": "archive.retry", "druid": criteria.druid, "attempt": attempt},
                    )
                    self._sleep(self.retry_delay)
                continue
            LOGGER.info(
                "Archived %s workflow row(s) for %s",
                moved,
                criteria.druid,
                extra={"event": "archive.archived", "druid": criteria.druid, "rows": moved},
            )
            return True

        LOGGER.error(
            "Too many retries. Giving up on %r",
            criteria,
            extra={"event": "archive.give_up", "druid": criteria.druid, "attempts": self.max_attempts},
        )
        return False

    def execute(
        self,
        criteria: Iterable[ArchiveCriteria],
        summary: ArchiveSummary | None = None,
    ) -> ArchiveSummary:
        """Archive every criteria in order, halting once the error budget is spent."""

        state = summary if summary is not None else ArchiveSummary()
        for item in criteria:
            item.validate()
            if self._attempt(item):
                state.archived += 1
                continue
            state.errors += 1
            if state.errors >= self.error_budget:
                state.halted = True
                LOGGER.critical(
                    "Too many errors. Archiving halted",
                    extra={"event": "archive.halt", "errors": state.errors},
                )
                break
        return state


__all__ = [
    "ArchiveExecutor",
    "ERROR_BUDGET",
    "MAX_ATTEMPTS",
    "copy_statement",
    "delete_statement",
    "match_predicate",
]
