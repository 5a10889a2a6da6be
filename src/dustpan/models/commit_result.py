"""Commit result dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class CommitResult:
    """Result of moving or deleting the selected candidates."""

    moved: int = 0
    associated: int = 0
    failed: int = 0
    permanent: bool = False
    destination: Path | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        """False when a structural failure aborted the whole commit."""
        return not self.error

    @property
    def summary(self) -> str:
        """One-line human readable outcome."""
        if self.error:
            return f"Nothing was touched: {self.error}"
        verb = "Deleted" if self.permanent else "Moved"
        noun = "file" if self.moved == 1 else "files"
        message = f"{verb} {self.moved} {noun}"
        if self.associated:
            extra = "file" if self.associated == 1 else "files"
            message += f" ({self.associated} associated {extra})"
        return f"{message}. {self.failed} failed."
