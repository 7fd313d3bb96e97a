"""Archive completed workflow rows into the long-term workflow archive table."""

from .config import ArchiverConfig, load_config
from .gateways import DEFAULT_VERSION, DorVersionResolver, VersionResolutionError
from .pipeline import (
    ArchiveCriteria,
    ArchiveExecutor,
    ArchiveSummary,
    CandidateGroup,
    CandidateSelector,
    CriteriaBuilder,
    WorkflowArchiver,
)

__all__ = [
    "ArchiveCriteria",
    "ArchiveExecutor",
    "ArchiveSummary",
    "ArchiverConfig",
    "CandidateGroup",
    "CandidateSelector",
    "CriteriaBuilder",
    "DEFAULT_VERSION",
    "DorVersionResolver",
    "VersionResolutionError",
    "WorkflowArchiver",
    "load_config",
]
