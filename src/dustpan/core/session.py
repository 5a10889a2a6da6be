"""Scan session: owns the candidate list and its derived tree."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path, PurePath
from typing import Callable

from dustpan.core import commit as commit_mod
from dustpan.core import scanner
from dustpan.core.tree import (
    NodeRef,
    SelectionStatus,
    TreeIndex,
    count_recursive,
    rebuild_tree,
    selection_status,
    set_selection,
)
from dustpan.models.candidate import ScanCandidate
from dustpan.models.commit_result import CommitResult
from dustpan.models.config import ScanConfiguration

log = logging.getLogger(__name__)

ScanDoneCallback = Callable[[list[ScanCandidate]], None]


class SessionBusyError(Exception):
    """Raised when the session is used while a scan is still running."""


class ScanSession:
    """State owned by the presentation layer's control thread.

    A scan, whether synchronous or on the background worker, builds its
    result privately and swaps it in under the lock in one step.  While a
    scan is running, selection changes and commits are refused so that no
    mutation can interleave with the swap.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._candidates: list[ScanCandidate] = []
        self._roots: list[str] = []
        self._tree: TreeIndex | None = None
        self._scanning = False
        self._executor: ThreadPoolExecutor | None = None
        self.status_message = ""

    # -- Queries --

    @property
    def candidates(self) -> list[ScanCandidate]:
        return self._candidates

    @property
    def roots(self) -> list[str]:
        return list(self._roots)

    @property
    def is_scanning(self) -> bool:
        return self._scanning

    @property
    def tree(self) -> TreeIndex:
        """Tree over the current candidates, rebuilt after a scan or commit."""
        with self._lock:
            return self._current_tree()

    def _current_tree(self) -> TreeIndex:
        # Caller holds the lock, so the tree matches self._candidates.
        if self._tree is None:
            self._tree = rebuild_tree(self._candidates, self._roots)
        return self._tree

    def counts(self, node: NodeRef | None = None) -> tuple[int, int]:
        """``(total, selected)`` for *node*, or for the whole session."""
        with self._lock:
            candidates = self._candidates
            tree = self._current_tree() if node is not None else None
        if tree is None:
            return len(candidates), sum(1 for c in candidates if c.should_delete)
        return count_recursive(tree, candidates, node)

    def status(self, node: NodeRef) -> SelectionStatus:
        return selection_status(*self.counts(node))

    def selected(self) -> list[ScanCandidate]:
        return [c for c in self._candidates if c.should_delete]

    # -- Scanning --

    def _begin_scan(self) -> None:
        with self._lock:
            if self._scanning:
                raise SessionBusyError("A scan is already in progress")
            self._scanning = True
        self.status_message = "Scanning..."

    def _finish_scan(self, found: list[ScanCandidate], roots: list[str]) -> None:
        with self._lock:
            self._candidates = found
            self._roots = roots
            self._tree = None
            self._scanning = False
        self.status_message = f"Scan complete. Found {len(found)} files."

    def _abort_scan(self) -> None:
        with self._lock:
            self._scanning = False
        self.status_message = "Scan failed."

    def _run_scan(self, config: ScanConfiguration) -> list[ScanCandidate]:
        try:
            found = scanner.scan(config)
        except Exception:
            log.exception("Scan failed")
            self._abort_scan()
            raise
        self._finish_scan(found, config.directories())
        return found

    def scan(self, config: ScanConfiguration) -> list[ScanCandidate]:
        """Replace the candidates with a fresh scan.

        Raises:
            SessionBusyError: If another scan is still running.
        """
        self._begin_scan()
        return self._run_scan(config)

    def scan_in_background(
        self,
        config: ScanConfiguration,
        on_done: ScanDoneCallback | None = None,
    ) -> Future[list[ScanCandidate]]:
        """Run the scan on a single worker thread.

        *on_done* is called from the worker thread once the result has been
        published; GUI callers should marshal it onto their own loop.
        """
        self._begin_scan()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dustpan-scan")

        def _task() -> list[ScanCandidate]:
            found = self._run_scan(config)
            if on_done:
                on_done(found)
            return found

        try:
            return self._executor.submit(_task)
        except RuntimeError:
            self._abort_scan()
            raise

    def close(self) -> None:
        """Stop the background worker, waiting for a running scan."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # -- Selection --

    def _ensure_idle(self) -> None:
        if self._scanning:
            raise SessionBusyError("Cannot change the session while a scan is running")

    def set_selection(self, node: NodeRef, value: bool) -> int:
        """Select or deselect every candidate at or below directory *node*."""
        with self._lock:
            self._ensure_idle()
            return set_selection(self._current_tree(), self._candidates, node, value)

    def set_file_selection(self, file_path: str, value: bool) -> bool:
        """Select or deselect a single candidate.  False if it is unknown."""
        with self._lock:
            self._ensure_idle()
            for candidate in self._candidates:
                if candidate.file_path == file_path:
                    candidate.should_delete = value
                    return True
        return False

    def exclude(self, path: str) -> int:
        """Deselect a directory node or a single file; returns how many changed."""
        key = PurePath(path)
        if key in self.tree:
            return self.set_selection(key, False)
        return 1 if self.set_file_selection(path, False) else 0

    # -- Commit --

    def commit(self, permanent: bool = False, holding_dir: Path | None = None) -> CommitResult:
        """Process the selected candidates and clear the session.

        The candidates are cleared even when files failed or the commit was
        aborted; callers rescan to see what is left.
        """
        with self._lock:
            self._ensure_idle()
            candidates = self._candidates
            self._candidates = []
            self._tree = None

        result = commit_mod.commit(candidates, permanent=permanent, holding_dir=holding_dir)
        self.status_message = result.summary
        return result
