"""Scan candidate dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ScanCandidate:
    """Single stale file discovered by a scan.

    ``should_delete`` starts out ``True``: every stale file is selected
    until the user opts it out.  ``days_since_access`` is computed once at
    discovery and is not refreshed afterwards.
    """

    file_path: str
    file_name: str
    days_since_access: int
    should_delete: bool = True

    @property
    def is_executable(self) -> bool:
        """Whether this is a Windows executable with possible support files."""
        return self.file_path.lower().endswith(".exe")
