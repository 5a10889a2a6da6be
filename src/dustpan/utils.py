"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

log = logging.getLogger(__name__)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def xdg_user_dir(key: str, fallback: str) -> Path:
    """Resolve a well-known user directory such as Downloads.

    Reads ``XDG_<KEY>_DIR`` from ``user-dirs.dirs`` in the config home and
    falls back to ``~/<fallback>``.  The returned path is not required to
    exist; scanning a missing directory is a silent no-op.
    """
    dirs_file = xdg_config_home() / "user-dirs.dirs"
    home = Path.home()

    if dirs_file.is_file():
        try:
            text = dirs_file.read_text()
            match = re.search(rf'^XDG_{key}_DIR="(.+)"', text, re.MULTILINE)
            if match:
                resolved = Path(match.group(1).replace("$HOME", str(home)))
                # "$HOME/" is how user-dirs.dirs marks a directory as disabled.
                if resolved != home:
                    return resolved
        except OSError:
            log.debug("Cannot read %s", dirs_file)

    return home / fallback


def normalize_dir(path: str) -> str:
    """Expand ``~`` and collapse redundant separators for comparison."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"


def plural(count: int, noun: str, plural_noun: str | None = None) -> str:
    """Return ``'1 file'`` / ``'3 files'``."""
    if count == 1:
        return f"{count:,} {noun}"
    return f"{count:,} {plural_noun or noun + 's'}"
