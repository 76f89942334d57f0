"""FFmpeg invocation surface.

Builders return argument lists; ``run_ffmpeg`` executes them. Keeping
the two apart lets the export and capture code describe *what* to run
while tests replace ``subprocess.run`` in one place.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Fixed re-encode profile used whenever stream copy fails
FALLBACK_ENCODE_ARGS = [
    "-c:v", "libx264",
    "-preset", "veryfast",
    "-crf", "23",
    "-c:a", "aac",
    "-b:a", "192k",
]

STREAM_COPY_ARGS = ["-c", "copy"]

CAPTURE_ENCODE_ARGS = [
    "-pix_fmt", "yuv420p",
    "-preset", "veryfast",
    "-crf", "23",
]


@dataclass
class ToolResult:
    """Outcome of one ffmpeg/ffprobe invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def format_ms(ms: int) -> str:
    """Format milliseconds as ``S.mmm`` for ``-ss``/``-t``."""
    return f"{ms // 1000}.{ms % 1000:03d}"


def trim_args(
    ffmpeg_path: str,
    src: PathLike,
    in_ms: int,
    duration_ms: int,
    output: PathLike,
    reencode: bool = False,
) -> list[str]:
    """Seek into ``src`` and write ``duration_ms`` to ``output``.

    Stream copy by default; ``reencode`` swaps in the fallback profile.
    """
    cmd = [
        ffmpeg_path,
        "-y",
        "-ss", format_ms(in_ms),
        "-i", str(src),
        "-t", format_ms(duration_ms),
    ]
    cmd.extend(FALLBACK_ENCODE_ARGS if reencode else STREAM_COPY_ARGS)
    cmd.append(str(output))
    return cmd


def concat_args(
    ffmpeg_path: str,
    manifest: PathLike,
    output: PathLike,
    reencode: bool = False,
) -> list[str]:
    """Join the segments listed in ``manifest`` with the concat demuxer."""
    cmd = [
        ffmpeg_path,
        "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(manifest),
    ]
    cmd.extend(FALLBACK_ENCODE_ARGS if reencode else STREAM_COPY_ARGS)
    cmd.append(str(output))
    return cmd


def poster_frame_args(
    ffmpeg_path: str,
    src: PathLike,
    at_ms: int,
    output: PathLike,
) -> list[str]:
    return [
        ffmpeg_path,
        "-y",
        "-ss", format_ms(at_ms),
        "-i", str(src),
        "-frames:v", "1",
        "-q:v", "5",
        str(output),
    ]


def list_devices_args(ffmpeg_path: str, input_format: str) -> list[str]:
    return [
        ffmpeg_path,
        "-hide_banner",
        "-f", input_format,
        "-list_devices", "true",
        "-i", "",
    ]


def capture_args(
    ffmpeg_path: str,
    input_format: str,
    device: str,
    fps: int,
    output: PathLike,
) -> list[str]:
    """Record ``device`` until ``q`` arrives on stdin."""
    return [
        ffmpeg_path,
        "-y",
        "-f", input_format,
        "-framerate", str(fps),
        "-i", device,
        *CAPTURE_ENCODE_ARGS,
        str(output),
    ]


def probe_args(ffprobe_path: str, src: PathLike) -> list[str]:
    return [
        ffprobe_path,
        "-v", "error",
        "-print_format", "json",
        "-show_streams",
        "-show_format",
        str(src),
    ]


def run_ffmpeg(cmd: list[str], timeout: Optional[float] = None) -> ToolResult:
    """Run a media tool to completion and capture its output.

    Raises:
        OSError: If the executable cannot be started
        subprocess.TimeoutExpired: If ``timeout`` elapses
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
    )
    if result.returncode != 0:
        logger.debug(f"{Path(cmd[0]).name} exited {result.returncode}")
    return ToolResult(
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )
