"""Turn candidate groups into fully resolved archive criteria."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Protocol

from ..gateways.dor import VersionResolutionError
from .models import ArchiveCriteria, CandidateGroup

LOGGER = logging.getLogger(__name__)


class VersionResolver(Protocol):
    def resolve(self, druid: str) -> str:
        ...


class CriteriaBuilder:
    """Resolve the version of each candidate, once, without retries."""

    def __init__(self, resolver: VersionResolver) -> None:
        self.resolver = resolver
        self.skipped = 0

    def build(self, group: CandidateGroup) -> ArchiveCriteria:
        version = self.resolver.resolve(group.druid)
        return ArchiveCriteria.from_group(group, version)

    def build_all(self, groups: Iterable[CandidateGroup]) -> Iterator[ArchiveCriteria]:
        """Lazily map ``groups`` to criteria, dropping ones that fail to resolve."""

        for group in groups:
            try:
                yield self.build(group)
            except VersionResolutionError as exc:
                self.skipped += 1
                LOGGER.error(
                    "Skipping archiving of %s (%s): %s",
                    group.druid,
                    group.datastream,
                    exc,
                    exc_info=True,
                    extra={
                        "event": "archive.skip",
                        "druid": group.druid,
                        "datastream": group.datastream,
                        "repository": group.repository,
                    },
                )


__all__ = ["CriteriaBuilder", "VersionResolver"]
