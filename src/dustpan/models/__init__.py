"""Dustpan data models."""

from dustpan.models.candidate import ScanCandidate
from dustpan.models.commit_result import CommitResult
from dustpan.models.config import ScanConfiguration

__all__ = [
    "CommitResult",
    "ScanCandidate",
    "ScanConfiguration",
]
