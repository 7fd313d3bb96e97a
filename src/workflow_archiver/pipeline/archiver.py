"""Find completed workflows and move their rows into the archive table."""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, Iterator, Optional

from sqlalchemy.engine import Engine

from ..config import ArchiverConfig
from ..db.connection import get_engine, prepare_engine
from ..gateways.dor import DorVersionResolver
from .criteria import CriteriaBuilder, VersionResolver
from .executor import ArchiveExecutor
from .models import ArchiveCriteria, ArchiveSummary, CandidateGroup
from .selector import CandidateSelector

LOGGER = logging.getLogger(__name__)


class WorkflowArchiver:
    """Wire candidate selection, version resolution and archive execution.

    The engine and version resolver are created lazily so that
    :meth:`archive_one_datastream` never needs a DOR service URI.

    Example:
        >>> archiver = WorkflowArchiver(ArchiverConfig.from_env())
        >>> archiver.run().as_dict()
        {'archived': 12, 'errors': 0, 'skipped': 1, 'halted': False}
    """

    def __init__(
        self,
        config: ArchiverConfig | None = None,
        *,
        resolver: Optional[VersionResolver] = None,
        executor: Optional[ArchiveExecutor] = None,
    ) -> None:
        self.config = config or ArchiverConfig()
        self._engine: Optional[Engine] = self.config.db_connection
        self._resolver = resolver
        self._owns_resolver = False
        self._executor = executor

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine(self.config.db_uri)
        return prepare_engine(self._engine)

    @property
    def resolver(self) -> VersionResolver:
        if self._resolver is None:
            if not self.config.dor_service_uri:
                raise RuntimeError("dor_service_uri must be configured to resolve object versions")
            self._resolver = DorVersionResolver(self.config.dor_service_uri)
            self._owns_resolver = True
        return self._resolver

    @property
    def executor(self) -> ArchiveExecutor:
        if self._executor is None:
            self._executor = ArchiveExecutor(
                self.engine,
                self.config.wf_table,
                self.config.wfa_table,
                retry_delay=self.config.retry_delay,
            )
        return self._executor

    def find_completed_objects(self) -> Iterator[CandidateGroup]:
        return CandidateSelector(self.engine, self.config.wf_table).select()

    def map_result_to_criteria(
        self,
        rows: Iterable[CandidateGroup],
        builder: CriteriaBuilder | None = None,
    ) -> Iterator[ArchiveCriteria]:
        builder = builder or CriteriaBuilder(self.resolver)
        return builder.build_all(rows)

    def archive_rows(
        self,
        criteria: Iterable[ArchiveCriteria],
        summary: ArchiveSummary | None = None,
    ) -> ArchiveSummary:
        return self.executor.execute(criteria, summary)

    def archive_one_datastream(
        self,
        repository: Optional[str],
        druid: str,
        datastream: str,
        version: str,
    ) -> ArchiveSummary:
        """Archive one object's datastream with a caller-supplied version.

        Skips candidate selection and version resolution entirely.
        """

        criteria = ArchiveCriteria(repository, druid, datastream, str(version))
        return self.archive_rows([criteria])

    def run(self) -> ArchiveSummary:
        """Archive every completed workflow group and return the batch counters."""

        candidates = self.find_completed_objects()
        first = next(candidates, None)
        if first is None:
            LOGGER.info("Nothing to archive", extra={"event": "archive.nothing"})
            return ArchiveSummary()

        LOGGER.info(
            "Found completed workflows in %s, archiving to %s",
            self.config.wf_table,
            self.config.wfa_table,
            extra={"event": "archive.found"},
        )
        summary = ArchiveSummary()
        try:
            builder = CriteriaBuilder(self.resolver)
            criteria = self.map_result_to_criteria(itertools.chain([first], candidates), builder)
            try:
                self.archive_rows(criteria, summary)
            finally:
                criteria.close()
        finally:
            candidates.close()
        summary.skipped = builder.skipped

        LOGGER.info(
            "DONE! Processed %s objects with %s errors (%s skipped%s)",
            summary.archived,
            summary.errors,
            summary.skipped,
            ", halted" if summary.halted else "",
            extra={"event": "archive.done", **summary.as_dict()},
        )
        return summary

    archive = run

    def close(self) -> None:
        if self._owns_resolver:
            self._resolver.close()
            self._resolver = None
            self._owns_resolver = False

    def __enter__(self) -> "WorkflowArchiver":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["WorkflowArchiver"]
