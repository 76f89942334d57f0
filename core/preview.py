"""Poster-frame previews for a point on the timeline."""

import logging
from pathlib import Path

from core.cache import CacheDirs
from core.ffmpeg import poster_frame_args, run_ffmpeg
from models.edit_plan import EditPlan

logger = logging.getLogger(__name__)


class PreviewError(Exception):
    """Raised when no preview frame can be produced."""
    pass


def extract_poster_frame(
    ffmpeg_path: str,
    plan: EditPlan,
    at_ms: int,
    cache: CacheDirs,
) -> Path:
    """Extract the frame of the main-track clip visible at ``at_ms``.

    The timeline time is mapped into the clip's trim window before seeking.

    Returns:
        Path to the written JPEG under the previews directory
    """
    visible = plan.top_visible_clip(at_ms)
    if visible is None:
        raise PreviewError(f"no clip visible at {at_ms} ms")

    source_ms = visible.in_ms + (at_ms - visible.start_ms)
    out_path = cache.preview_file(plan.id, at_ms)
    try:
        result = run_ffmpeg(poster_frame_args(ffmpeg_path, visible.src_path, source_ms, out_path))
    except OSError as e:
        raise PreviewError(f"ffmpeg failed to start: {e}") from e

    if not result.ok:
        raise PreviewError(f"ffmpeg error: {result.stderr.strip()}")

    logger.debug(f"Preview frame for {plan.id}@{at_ms} written to {out_path}")
    return out_path
