"""Recursive stale-file scanner and executable association lookup."""

from __future__ import annotations

import logging
import os
import time

from dustpan.core.classifier import Classifier, days_since_access, is_hidden, is_stale
from dustpan.models.candidate import ScanCandidate
from dustpan.models.config import ScanConfiguration

log = logging.getLogger(__name__)

# Support files that belong to an executable when they share its stem.
SUPPORT_EXTENSIONS: tuple[str, ...] = (".dll", ".dat", ".ini", ".cfg", ".config")


def scan(config: ScanConfiguration, now: float | None = None) -> list[ScanCandidate]:
    """Walk every configured directory and collect stale files.

    Read-only with respect to the filesystem.  Unreadable directories and
    entries without metadata are skipped; they never fail the scan.

    Args:
        config: Directories, age threshold and smart-filter flag.
        now: Reference timestamp; defaults to the current time, taken once.

    Returns:
        Candidates in traversal order, each selected for deletion.
    """
    if now is None:
        now = time.time()

    classifier = Classifier(config.smart_filter)
    candidates: list[ScanCandidate] = []
    seen: set[str] = set()

    for root in config.directories():
        log.debug("Scanning %s", root)
        _walk(root, config.threshold_days, now, classifier, candidates, seen)

    log.info("Scan found %d stale files", len(candidates))
    return candidates


def _list_dir(path: str) -> list[os.DirEntry[str]] | None:
    """Read a directory listing, or None when it cannot be read."""
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError:
        log.debug("Cannot read directory: %s", path)
        return None


def _walk(
    root: str,
    threshold_days: int,
    now: float,
    classifier: Classifier,
    candidates: list[ScanCandidate],
    seen: set[str],
) -> None:
    """Depth-first walk driven by a stack of listing iterators.

    A subdirectory is entered as soon as it is met, which yields the same
    visiting order as direct recursion without being bound by the
    interpreter's recursion limit.
    """
    listing = _list_dir(root)
    if listing is None:
        return

    stack = [iter(listing)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        if is_hidden(entry.name):
            continue

        try:
            if entry.is_dir(follow_symlinks=False):
                children = _list_dir(entry.path)
                if children is not None:
                    stack.append(iter(children))
                continue
            if entry.is_dir():
                log.debug("Not following directory link: %s", entry.path)
                continue
        except OSError:
            log.debug("Cannot access: %s", entry.path)
            continue

        if classifier.is_excluded(entry.name):
            continue

        try:
            last_access = entry.stat().st_atime
        except OSError:
            log.debug("No metadata for: %s", entry.path)
            continue

        if not is_stale(last_access, now, threshold_days):
            continue
        if entry.path in seen:
            continue

        seen.add(entry.path)
        candidates.append(
            ScanCandidate(
                file_path=entry.path,
                file_name=entry.name,
                days_since_access=days_since_access(last_access, now),
            )
        )


def find_associated_files(exe_path: str) -> list[str]:
    """Find support files that ship alongside a Windows executable.

    A sibling belongs to ``app.exe`` when its name starts with ``app`` and
    ends with one of ``SUPPORT_EXTENSIONS``, both compared case-insensitively.
    Costs one directory listing, so it is only called at commit time.

    Returns:
        Sorted absolute paths; empty for non-``.exe`` paths or unreadable
        directories.
    """
    if not exe_path.lower().endswith(".exe"):
        return []

    directory, exe_name = os.path.split(exe_path)
    stem = os.path.splitext(exe_name)[0].lower()

    listing = _list_dir(directory or os.curdir)
    if listing is None:
        return []

    associated: list[str] = []
    for entry in listing:
        if entry.name == exe_name:
            continue
        lower = entry.name.lower()
        if not (lower.startswith(stem) and lower.endswith(SUPPORT_EXTENSIONS)):
            continue
        try:
            if entry.is_dir():
                continue
        except OSError:
            continue
        associated.append(os.path.join(directory, entry.name))

    return sorted(associated)
