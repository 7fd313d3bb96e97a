"""Value types passed between the archiver pipeline stages."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, NamedTuple, Optional


class CandidateGroup(NamedTuple):
    """One (repository, druid, datastream) group whose steps are all terminal."""

    repository: Optional[str]
    druid: str
    datastream: str


@dataclass(frozen=True)
class ArchiveCriteria:
    """Identifies the workflow rows moved by one copy-then-delete transaction.

    ``repository=None`` selects rows whose repository IS NULL; it is not a
    wildcard.
    """

    repository: Optional[str]
    druid: str
    datastream: str
    version: str

    @classmethod
    def from_group(cls, group: CandidateGroup, version: str) -> "ArchiveCriteria":
        return cls(
            repository=group.repository,
            druid=group.druid,
            datastream=group.datastream,
            version=version,
        )

    def validate(self) -> None:
        for name in ("druid", "datastream", "version"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"ArchiveCriteria.{name} must be a non-empty string: {self!r}")
        if self.repository is not None and not isinstance(self.repository, str):
            raise ValueError(f"ArchiveCriteria.repository must be a string or None: {self!r}")

    def bind_params(self) -> Dict[str, str]:
        """Non-null row-matching members keyed by column name."""

        params = {"druid": self.druid, "datastream": self.datastream}
        if self.repository is not None:
            params["repository"] = self.repository
        return params


@dataclass
class ArchiveSummary:
    """Running counters for one archive batch."""

    archived: int = 0
    errors: int = 0
    skipped: int = 0
    halted: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ArchiveCriteria", "ArchiveSummary", "CandidateGroup"]
