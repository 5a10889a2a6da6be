"""Decides which filesystem entries are eligible and which are stale."""

from __future__ import annotations

SECONDS_PER_DAY = 86400

# Matched with str.endswith on the lower-cased name.
BINARY_EXTENSIONS: tuple[str, ...] = (
    ".dll", ".so", ".dylib", ".bin", ".o", ".a",
    ".lib", ".sys", ".drv", ".class", ".pyc", ".pyo",
)

# Matched anywhere in the lower-cased name.
SYSTEM_PATTERNS: tuple[str, ...] = (
    ".cache", ".tmp", ".temp", ".log", ".bak", ".swp", ".swo",
    ".lock", ".pid", ".dat", ".db", ".sqlite", ".idx",
)

BUILD_PATTERNS: tuple[str, ...] = (
    "node_modules", "target", "build", "dist", ".git", ".svn",
)


def is_hidden(file_name: str) -> bool:
    """Dot-files and dot-directories are never reported nor descended into."""
    return file_name.startswith(".")


def is_stale(last_access: float, now: float, threshold_days: int) -> bool:
    """Whether *last_access* is strictly older than ``now - threshold``.

    A file accessed exactly at the cutoff counts as recently used.
    """
    return last_access < now - threshold_days * SECONDS_PER_DAY


def days_since_access(last_access: float, now: float) -> int:
    """Whole days elapsed since *last_access*; 0 when the clock is skewed."""
    elapsed = max(0.0, now - last_access)
    return int(elapsed // SECONDS_PER_DAY)


class Classifier:
    """Pattern-based exclusion of binaries, caches and build artifacts.

    With ``smart_filter`` off nothing is excluded here; the hidden-file
    rule is applied separately by the scanner in both modes.
    """

    def __init__(self, smart_filter: bool = True) -> None:
        self.smart_filter = smart_filter

    def is_excluded(self, file_name: str) -> bool:
        if not self.smart_filter:
            return False

        lower = file_name.lower()
        if lower.endswith(BINARY_EXTENSIONS):
            return True
        if any(pattern in lower for pattern in SYSTEM_PATTERNS):
            return True
        return any(pattern in lower for pattern in BUILD_PATTERNS)

    def __repr__(self) -> str:
        return f"Classifier(smart_filter={self.smart_filter})"
