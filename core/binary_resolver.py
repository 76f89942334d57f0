"""Binary resolution for external media tools (ffmpeg, ffprobe).

Lookup chain:
  1. Explicitly configured path (settings / CUTLINE_FFMPEG)
  2. Managed bin dir (<app data>/bin/)
  3. Common Homebrew / user paths (for macOS GUI launches that lack shell PATH)
  4. Standard PATH via shutil.which()
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from core.paths import get_managed_bin_dir

logger = logging.getLogger(__name__)

_EXTRA_SEARCH_PATHS = [
    "/opt/homebrew/bin",       # Homebrew on Apple Silicon
    "/usr/local/bin",          # Homebrew on Intel / manual installs
    str(Path.home() / ".local" / "bin"),
]


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_binary(name: str, configured: Optional[str] = None) -> Optional[str]:
    """Find an external binary by name.

    Args:
        name: Binary name (e.g., "ffmpeg", "ffprobe")
        configured: Path from settings; used as-is when executable

    Returns:
        Absolute path to the binary, or None if not found.
    """
    if configured:
        if _is_executable(configured):
            return configured
        logger.warning(f"Configured {name} path is not executable: {configured}")

    managed_path = get_managed_bin_dir() / name
    if _is_executable(str(managed_path)):
        logger.debug(f"Found {name} in managed bin dir: {managed_path}")
        return str(managed_path)

    for search_dir in _EXTRA_SEARCH_PATHS:
        candidate = os.path.join(search_dir, name)
        if _is_executable(candidate):
            logger.debug(f"Found {name} in extra path: {candidate}")
            return candidate

    result = shutil.which(name)
    if result:
        logger.debug(f"Found {name} via PATH: {result}")
    else:
        logger.debug(f"{name} not found in any search location")
    return result
