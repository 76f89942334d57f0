"""Render an edit plan to a single video file.

The job runs three phases strictly in order:

1. segment  - extract each main-track clip to its own file
2. concat   - write a concat-demuxer manifest listing the segments
3. finalize - join the segments into the output artifact

Segment extraction and finalize each try a stream copy first and fall
back to a fixed H.264/AAC re-encode exactly once. Only the fallback's
failure is fatal, and its diagnostic output is what gets reported.

Segments and the manifest live in a per-export working directory that is
removed when the job ends, whether it succeeded or not.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from core.cache import CacheDirs, new_token
from core.ffmpeg import ToolResult, concat_args, run_ffmpeg, trim_args
from models.edit_plan import EditPlan
from models.export import (
    PHASE_CONCAT,
    PHASE_FINALIZE,
    PHASE_SEGMENT,
    ExportResult,
    ExportSettings,
    ProgressEvent,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class ExportError(Exception):
    """Raised when every encoding strategy for a phase has failed."""

    def __init__(self, phase: str, message: str, stderr: str = ""):
        self.phase = phase
        self.stderr = stderr
        super().__init__(message)


def _attempt(cmd: list[str], phase: str) -> ToolResult:
    try:
        return run_ffmpeg(cmd)
    except OSError as e:
        raise ExportError(phase, f"failed to start ffmpeg: {e}") from e


def _run_with_fallback(primary: list[str], fallback: list[str], phase: str) -> None:
    """Run ``primary``; on failure run ``fallback`` once.

    The primary attempt's diagnostics are discarded.
    """
    if _attempt(primary, phase).ok:
        return

    logger.warning(f"{phase}: stream copy failed, re-encoding with fallback profile")
    result = _attempt(fallback, phase)
    if not result.ok:
        raise ExportError(phase, f"ffmpeg error: {result.stderr.strip()}", result.stderr)


def _escape_manifest_path(path: Path) -> str:
    path_str = str(path.resolve())
    if "\n" in path_str or "\r" in path_str:
        raise ExportError(PHASE_CONCAT, f"Invalid path with newline characters: {path}")
    # Concat demuxer quoting: close the quote, emit an escaped quote, reopen
    return path_str.replace("'", "'\\''")


def write_concat_manifest(segment_paths: list[Path], manifest_path: Path) -> None:
    """Write one ``file '<abs path>'`` line per segment, in the given order."""
    lines = [f"file '{_escape_manifest_path(p)}'\n" for p in segment_paths]
    try:
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(manifest_path, "w", encoding="utf-8") as f:
            f.writelines(lines)
    except OSError as e:
        raise ExportError(PHASE_CONCAT, f"failed to write concat manifest: {e}") from e


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        logger.warning(f"Could not read size of {path}: {e}")
        return 0


def run_export(
    ffmpeg_path: str,
    plan: EditPlan,
    settings: ExportSettings,
    cache: CacheDirs,
    progress_callback: Optional[ProgressCallback] = None,
    token: Optional[str] = None,
) -> ExportResult:
    """
    Export an edit plan to a single file.

    Args:
        ffmpeg_path: Path to the ffmpeg executable
        plan: Validated edit plan; only the main track is rendered
        settings: Export settings (format selects the output extension)
        cache: Cache layout for segments, manifest and output
        progress_callback: Optional sink for ProgressEvent
        token: Per-invocation key for working paths (generated if omitted)

    Returns:
        ExportResult(path, duration_ms, size_bytes). ``duration_ms`` is the
        planned duration, not a measurement of the output.

    Raises:
        ExportError: If both strategies of any phase fail
    """
    token = token or new_token()
    total = len(plan.main_track) + 2  # segments + concat + finalize
    current = 0

    def emit(phase: str, message: str) -> None:
        if progress_callback:
            progress_callback(ProgressEvent(phase, current, total, message))

    logger.info(f"Exporting plan {plan.id} ({len(plan.main_track)} clips, token {token})")
    work_dir = cache.export_dir(token)
    work_dir.mkdir(parents=True, exist_ok=True)

    try:
        segment_paths: list[Path] = []
        for idx, clip in enumerate(plan.main_track):
            emit(PHASE_SEGMENT, f"Trimming clip {idx}")
            seg_path = cache.segment_path(idx, token)
            _run_with_fallback(
                trim_args(ffmpeg_path, clip.src_path, clip.in_ms, clip.duration_ms, seg_path),
                trim_args(ffmpeg_path, clip.src_path, clip.in_ms, clip.duration_ms, seg_path,
                          reencode=True),
                PHASE_SEGMENT,
            )
            segment_paths.append(seg_path)
            current += 1

        emit(PHASE_CONCAT, "Concatenating")
        manifest_path = cache.concat_list_path(plan.id, token)
        write_concat_manifest(segment_paths, manifest_path)
        current += 1

        if settings.filename:
            out_path = cache.named_render_path(settings.filename, settings.extension)
        else:
            out_path = cache.render_output_path(plan.id, settings.extension, token)
        emit(PHASE_FINALIZE, "Writing output")
        try:
            _run_with_fallback(
                concat_args(ffmpeg_path, manifest_path, out_path),
                concat_args(ffmpeg_path, manifest_path, out_path, reencode=True),
                PHASE_FINALIZE,
            )
        except ExportError:
            # A failed export leaves no artifact behind
            out_path.unlink(missing_ok=True)
            raise
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    result = ExportResult(
        path=out_path,
        duration_ms=plan.planned_duration_ms,
        size_bytes=_file_size(out_path),
    )
    logger.info(f"Export complete: {out_path} ({result.size_bytes} bytes)")
    return result
