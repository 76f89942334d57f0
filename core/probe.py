"""Media metadata via ffprobe."""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from core.ffmpeg import probe_args, run_ffmpeg
from models.media import MediaMeta

logger = logging.getLogger(__name__)


class ProbeError(Exception):
    """Raised when ffprobe fails or its output cannot be understood."""
    pass


def _seconds_to_ms(value) -> Optional[int]:
    try:
        return int(float(value) * 1000)
    except (TypeError, ValueError):
        return None


def _rotation(stream: dict) -> Optional[int]:
    """Rotation may live on the stream, in tags, or in side data."""
    if "rotation" in stream:
        try:
            return int(stream["rotation"])
        except (TypeError, ValueError):
            return None
    if rotate := (stream.get("tags") or {}).get("rotate"):
        try:
            return int(rotate)
        except ValueError:
            return None
    for side_data in stream.get("side_data_list") or []:
        if "rotation" in side_data:
            try:
                return int(side_data["rotation"])
            except (TypeError, ValueError):
                return None
    return None


def parse_probe_output(data: dict) -> MediaMeta:
    """Convert ffprobe's JSON document into MediaMeta."""
    meta = MediaMeta()
    streams = data.get("streams") or []
    if streams:
        meta.has_audio = False

    for stream in streams:
        codec_type = stream.get("codec_type")
        if codec_type == "video" and meta.codec_video is None:
            meta.width = stream.get("width")
            meta.height = stream.get("height")
            meta.codec_video = stream.get("codec_name")
            meta.rotation_deg = _rotation(stream)
            duration = _seconds_to_ms(stream.get("duration"))
            if duration is not None:
                meta.duration_ms = duration
        elif codec_type == "audio":
            meta.has_audio = True
            if meta.codec_audio is None:
                meta.codec_audio = stream.get("codec_name")

    # Containers like mkv only report duration at the format level
    if meta.duration_ms == 0:
        duration = _seconds_to_ms((data.get("format") or {}).get("duration"))
        if duration is not None:
            meta.duration_ms = duration

    return meta


def probe_media(ffprobe_path: str, path: Union[str, Path]) -> MediaMeta:
    """
    Get media metadata using ffprobe.

    Raises:
        ProbeError: If ffprobe cannot start, exits non-zero, or emits
            output that is not JSON
    """
    try:
        result = run_ffmpeg(probe_args(ffprobe_path, path), timeout=30)
    except OSError as e:
        raise ProbeError(f"ffprobe failed to start: {e}") from e

    if not result.ok:
        raise ProbeError(f"ffprobe error: {result.stderr.strip()}")

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise ProbeError(f"ffprobe json parse error: {e}") from e

    meta = parse_probe_output(data)
    logger.debug(f"Probed {path}: {meta}")
    return meta
