"""Centralized resolution of application-owned directories.

All intermediate and output artifacts live under a single base
directory. Callers that need per-artifact paths should go through
``core.cache.CacheDirs`` rather than joining paths by hand.
"""

import os
import sys
from pathlib import Path


def get_app_data_dir() -> Path:
    """Return the application data directory for Cutline.

    On macOS: ~/Library/Application Support/Cutline/
    On Windows: %LOCALAPPDATA%/Cutline/
    On Linux: $XDG_DATA_HOME/cutline/ (default ~/.local/share/cutline/)
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Cutline"
    if sys.platform == "win32":
        return Path(os.environ.get(
            "LOCALAPPDATA", str(Path.home() / "AppData" / "Local")
        )) / "Cutline"
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / "cutline"


def get_managed_bin_dir() -> Path:
    """Return the directory for bundled or downloaded binaries (ffmpeg, ffprobe)."""
    return get_app_data_dir() / "bin"
