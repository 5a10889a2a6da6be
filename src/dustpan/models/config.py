"""Scan configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass, replace

from dustpan.utils import normalize_dir, xdg_user_dir

DEFAULT_THRESHOLD_DAYS = 14

# (toggle attribute, XDG user-dirs key, fallback name under $HOME)
WELL_KNOWN_DIRS: tuple[tuple[str, str, str], ...] = (
    ("downloads", "DOWNLOAD", "Downloads"),
    ("documents", "DOCUMENTS", "Documents"),
    ("desktop", "DESKTOP", "Desktop"),
)


@dataclass(frozen=True, slots=True)
class ScanConfiguration:
    """Immutable input to a scan.

    Raises ``ValueError`` for a threshold below one day or a blank
    custom directory.
    """

    threshold_days: int = DEFAULT_THRESHOLD_DAYS
    downloads: bool = True
    documents: bool = True
    desktop: bool = True
    custom_directories: tuple[str, ...] = ()
    smart_filter: bool = True

    def __post_init__(self) -> None:
        if self.threshold_days < 1:
            raise ValueError(f"Age threshold must be at least 1 day, got {self.threshold_days}")
        for path in self.custom_directories:
            if not path.strip():
                raise ValueError("Custom directory must not be empty")
        # Accept lists from callers and settings files.
        object.__setattr__(self, "custom_directories", tuple(self.custom_directories))

    def well_known_directories(self) -> list[str]:
        """Enabled well-known directories, in Downloads/Documents/Desktop order."""
        return [
            str(xdg_user_dir(key, fallback))
            for attr, key, fallback in WELL_KNOWN_DIRS
            if getattr(self, attr)
        ]

    def directories(self) -> list[str]:
        """Deduplicated union of enabled well-known and custom directories."""
        seen: set[str] = set()
        result: list[str] = []
        for path in [*self.well_known_directories(), *self.custom_directories]:
            normalized = normalize_dir(path)
            if normalized in seen:
                continue
            seen.add(normalized)
            result.append(normalized)
        return result

    def with_custom_directory(self, path: str) -> ScanConfiguration:
        """Return a copy with *path* appended to the custom directories."""
        if not path.strip():
            raise ValueError("Custom directory must not be empty")
        normalized = normalize_dir(path)
        if normalized in (normalize_dir(p) for p in self.custom_directories):
            return self
        return replace(self, custom_directories=(*self.custom_directories, normalized))

    def without_custom_directory(self, path: str) -> ScanConfiguration:
        """Return a copy with *path* removed from the custom directories."""
        target = normalize_dir(path)
        kept = tuple(p for p in self.custom_directories if normalize_dir(p) != target)
        return replace(self, custom_directories=kept)
