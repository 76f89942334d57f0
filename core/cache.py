"""On-disk layout for previews, segments, renders and captures.

Layout under the application base directory::

    <base>/cache/previews/   poster frames
    <base>/cache/segments/   per-export working dirs (segments + manifest)
    <base>/cache/captures/   screen recordings
    <base>/projects/         finalized renders

Every derivation below is a pure function of its arguments. Export
working files are keyed by a per-invocation token so that two exports
of the same plan never share a segment or manifest path.
"""

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Anything outside this set is replaced when a name becomes a file stem
_UNSAFE_STEM_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def new_token() -> str:
    """Return a collision-resistant token for one export or capture."""
    return uuid.uuid4().hex[:12]


def _now_seconds() -> int:
    return int(time.time())


def safe_stem(name: str) -> str:
    """Reduce ``name`` to a single path component.

    Separators and other unsafe characters become ``_`` and leading dots
    are dropped, so the result can never leave its parent directory.
    """
    stem = _UNSAFE_STEM_CHARS.sub("_", name).lstrip(".")
    return stem or "untitled"


@dataclass(frozen=True)
class CacheDirs:
    """Resolved set of cache directories."""

    base: Path
    previews: Path
    segments: Path
    renders: Path
    captures: Path

    @classmethod
    def create(cls, base_dir: Path) -> "CacheDirs":
        """Resolve and eagerly create the layout under ``base_dir``."""
        base_dir = Path(base_dir).expanduser()
        cache_base = base_dir / "cache"
        dirs = cls(
            base=cache_base,
            previews=cache_base / "previews",
            segments=cache_base / "segments",
            renders=base_dir / "projects",
            captures=cache_base / "captures",
        )
        for dir_path in (dirs.previews, dirs.segments, dirs.renders, dirs.captures):
            dir_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Cache layout ready under {base_dir}")
        return dirs

    def preview_file(self, plan_id: str, at_ms: int) -> Path:
        return self.previews / f"{safe_stem(plan_id)}_{at_ms}.jpg"

    def export_dir(self, token: str) -> Path:
        """Working directory for one export invocation."""
        return self.segments / safe_stem(token)

    def segment_path(self, index: int, token: str) -> Path:
        return self.export_dir(token) / f"segment_{index:04d}.mp4"

    def concat_list_path(self, plan_id: str, token: str) -> Path:
        return self.export_dir(token) / f"{safe_stem(plan_id)}_concat.txt"

    def render_output_path(
        self,
        plan_id: str,
        ext: str,
        token: str,
        timestamp: Optional[int] = None,
    ) -> Path:
        if timestamp is None:
            timestamp = _now_seconds()
        return self.renders / f"{safe_stem(plan_id)}_{timestamp}_{safe_stem(token)}.{ext}"

    def named_render_path(self, filename: str, ext: str) -> Path:
        """Output path for a user-chosen file name, kept inside renders.

        A trailing ``.<ext>`` on ``filename`` is not doubled.
        """
        stem = filename[: -(len(ext) + 1)] if filename.lower().endswith(f".{ext}") else filename
        return self.renders / f"{safe_stem(stem)}.{ext}"

    def capture_output_path(
        self,
        ext: str,
        token: str,
        timestamp: Optional[int] = None,
    ) -> Path:
        if timestamp is None:
            timestamp = _now_seconds()
        return self.captures / f"capture_{timestamp}_{safe_stem(token)}.{ext}"
