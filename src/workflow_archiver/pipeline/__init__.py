"""The archiver pipeline: selector, criteria builder, executor and orchestrator."""

from .archiver import WorkflowArchiver
from .criteria import CriteriaBuilder
from .executor import ArchiveExecutor, ERROR_BUDGET, MAX_ATTEMPTS
from .models import ArchiveCriteria, ArchiveSummary, CandidateGroup
from .selector import CandidateSelector, find_completed_objects

__all__ = [
    "ArchiveCriteria",
    "ArchiveExecutor",
    "ArchiveSummary",
    "CandidateGroup",
    "CandidateSelector",
    "CriteriaBuilder",
    "ERROR_BUDGET",
    "MAX_ATTEMPTS",
    "WorkflowArchiver",
    "find_completed_objects",
]
