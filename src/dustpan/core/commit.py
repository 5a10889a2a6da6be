"""Moves selected candidates into a holding directory, or deletes them."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from dustpan.core.scanner import find_associated_files
from dustpan.models.candidate import ScanCandidate
from dustpan.models.commit_result import CommitResult
from dustpan.utils import xdg_data_home

log = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class HoldingDirectoryError(Exception):
    """Raised when the holding directory cannot be created or used."""


def default_holding_dir() -> Path:
    """Return ``$XDG_DATA_HOME/dustpan/holding``."""
    return xdg_data_home() / "dustpan" / "holding"


def ensure_holding_dir(path: Path) -> Path:
    """Create *path* if needed and return it.

    Raises:
        HoldingDirectoryError: When it cannot be created or is not a directory.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise HoldingDirectoryError(f"Cannot create holding directory {path}: {exc}") from exc
    if not path.is_dir():
        raise HoldingDirectoryError(f"Holding path {path} is not a directory")
    return path


def unique_destination(holding_dir: Path, file_name: str, now: datetime | None = None) -> Path:
    """Pick a name inside *holding_dir* that does not clobber an existing file.

    ``report.txt`` stays as is when free, otherwise becomes
    ``report_20240101-120000.txt``, then ``report_20240101-120000-1.txt``.
    """
    target = holding_dir / file_name
    if not os.path.lexists(target):
        return target

    stamp = (now or datetime.now()).strftime(_TIMESTAMP_FORMAT)
    stem, suffix = os.path.splitext(file_name)
    target = holding_dir / f"{stem}_{stamp}{suffix}"
    counter = 1
    while os.path.lexists(target):
        target = holding_dir / f"{stem}_{stamp}-{counter}{suffix}"
        counter += 1
    return target


class _Committer:
    """Processes one commit; remembers which paths it has already handled."""

    def __init__(self, holding_dir: Path | None, now: datetime | None) -> None:
        self._holding_dir = holding_dir
        self._now = now
        self._done: set[str] = set()

    def process(self, path: str) -> bool | None:
        """Move or delete *path*.  None means it was already handled."""
        if path in self._done:
            return None
        self._done.add(path)
        try:
            if self._holding_dir is None:
                os.remove(path)
            else:
                destination = unique_destination(self._holding_dir, os.path.basename(path), self._now)
                shutil.move(path, destination)
        except OSError as exc:
            log.debug("Failed to process %s: %s", path, exc)
            return False
        return True


def commit(
    candidates: Sequence[ScanCandidate],
    *,
    permanent: bool = False,
    holding_dir: Path | None = None,
    now: datetime | None = None,
) -> CommitResult:
    """Move (default) or permanently delete every selected candidate.

    Each selected ``.exe`` takes its associated support files with it; those
    are handled before the executable itself.  Per-file failures are counted
    and never stop the loop.  If the holding directory cannot be prepared,
    nothing is touched and the result carries the error.

    Args:
        candidates: Scan result; only ``should_delete`` entries are consumed.
        permanent: Unlink files instead of moving them.  Irreversible.
        holding_dir: Destination for moved files, default
            ``default_holding_dir()``.
        now: Timestamp used for collision renames.
    """
    result = CommitResult(permanent=permanent)

    target: Path | None = None
    if not permanent:
        try:
            target = ensure_holding_dir(holding_dir or default_holding_dir())
        except HoldingDirectoryError as exc:
            log.warning("Commit aborted: %s", exc)
            result.error = str(exc)
            return result
        result.destination = target

    committer = _Committer(target, now)
    for candidate in candidates:
        if not candidate.should_delete:
            continue

        if candidate.is_executable:
            for support_file in find_associated_files(candidate.file_path):
                outcome = committer.process(support_file)
                if outcome is True:
                    result.associated += 1
                elif outcome is False:
                    result.failed += 1

        outcome = committer.process(candidate.file_path)
        if outcome is True:
            result.moved += 1
        elif outcome is False:
            result.failed += 1

    log.info("%s", result.summary)
    return result
