"""Screen and audio capture through long-running ffmpeg processes.

A ``CaptureRegistry`` owns every live recording. Sessions are created by
``start_session`` and handed back, exactly once, by ``stop_session``;
there are no other mutation points. The session map is guarded by a
lock so concurrent start/stop calls never see a half-updated map.

Device listing parses ffmpeg's free-form diagnostic text. The parser is
a pure function (``classify_device_lines``) so it can be exercised
without spawning anything.
"""

import logging
import re
import subprocess
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from core.cache import CacheDirs, new_token
from core.ffmpeg import capture_args, list_devices_args, run_ffmpeg

logger = logging.getLogger(__name__)

DEFAULT_INPUT_FORMAT = "avfoundation"
DEFAULT_CONTAINER = "mp4"
DEFAULT_DISPLAY_INDEX = 1
DEFAULT_CAPTURE_FPS = 30

# "[AVFoundation indev @ 0x7f...] [1] Capture screen 0" -> index 1, name "Capture screen 0"
_DEVICE_ENTRY_RE = re.compile(r"\[(\d+)\]\s*(.*?)\s*$")


class SessionNotFound(KeyError):
    """Raised when stopping a session id that is not registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self) -> str:
        return f"recording id not found: {self.session_id}"


@dataclass
class CaptureDevices:
    """Device names in the order ffmpeg reported them."""

    displays: list[str] = field(default_factory=list)
    audio_inputs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"displays": self.displays, "audio_inputs": self.audio_inputs}


@dataclass
class CaptureSettings:
    """What to record. ``audio_index`` of None or 0 records no audio."""

    display_index: Optional[int] = None
    audio_index: Optional[int] = None
    fps: Optional[int] = None

    def device_selector(self) -> str:
        display = self.display_index if self.display_index is not None else DEFAULT_DISPLAY_INDEX
        if self.audio_index:
            return f"{display}:{self.audio_index}"
        return f"{display}:none"

    @classmethod
    def from_dict(cls, data: dict) -> "CaptureSettings":
        """Deserialize from dictionary (accepts camelCase keys)."""
        return cls(
            display_index=data.get("display_index", data.get("displayIndex")),
            audio_index=data.get("audio_index", data.get("audioIndex")),
            fps=data.get("fps"),
        )


@dataclass
class CaptureSession:
    """A running capture process and where it is writing."""

    id: str
    process: subprocess.Popen
    output_path: Path


def _is_section_banner(line: str) -> bool:
    return line.rstrip().lower().endswith("devices:")


def classify_device_lines(text: str) -> CaptureDevices:
    """Split ffmpeg's device listing into displays and audio inputs.

    Each ``[N] name`` entry whose name contains "audio" (any case) is an
    audio input; every other entry is treated as a display. Section
    banners are skipped. Unrecognized lines are ignored.
    """
    devices = CaptureDevices()
    for line in text.splitlines():
        if _is_section_banner(line):
            continue
        match = _DEVICE_ENTRY_RE.search(line)
        if not match:
            continue
        name = match.group(2)
        if not name:
            continue
        if "audio" in name.lower():
            devices.audio_inputs.append(name)
        else:
            devices.displays.append(name)
    return devices


def list_devices(ffmpeg_path: str, input_format: str = DEFAULT_INPUT_FORMAT) -> CaptureDevices:
    """Enumerate capture devices.

    ffmpeg exits non-zero after listing (there is no real input), so
    only a failure to start is an error here.
    """
    result = run_ffmpeg(list_devices_args(ffmpeg_path, input_format), timeout=30)
    devices = classify_device_lines(result.stderr)
    logger.debug(
        f"Found {len(devices.displays)} displays, {len(devices.audio_inputs)} audio inputs"
    )
    return devices


def _new_session_id() -> str:
    return f"rec_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class CaptureRegistry:
    """Owns live capture sessions, keyed by session id."""

    def __init__(
        self,
        ffmpeg_path: str,
        cache: CacheDirs,
        input_format: str = DEFAULT_INPUT_FORMAT,
        container: str = DEFAULT_CONTAINER,
    ):
        self.ffmpeg_path = ffmpeg_path
        self.cache = cache
        self.input_format = input_format
        self.container = container
        self._sessions: dict[str, CaptureSession] = {}
        self._lock = threading.Lock()

    def _spawn(self, cmd: list[str]) -> subprocess.Popen:
        logger.debug(f"Spawning: {' '.join(cmd)}")
        return subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def start_session(self, settings: Optional[CaptureSettings] = None) -> tuple[str, Path]:
        """Start recording and return ``(session_id, output_path)``.

        Returns as soon as the process is spawned.

        Raises:
            OSError: If ffmpeg cannot be started
        """
        settings = settings or CaptureSettings()
        output_path = self.cache.capture_output_path(self.container, new_token())
        fps = settings.fps or DEFAULT_CAPTURE_FPS
        cmd = capture_args(
            self.ffmpeg_path,
            self.input_format,
            settings.device_selector(),
            fps,
            output_path,
        )
        process = self._spawn(cmd)

        with self._lock:
            session_id = _new_session_id()
            while session_id in self._sessions:
                session_id = _new_session_id()
            self._sessions[session_id] = CaptureSession(session_id, process, output_path)

        logger.info(f"Started capture {session_id} -> {output_path}")
        return session_id, output_path

    def stop_session(self, session_id: str, timeout: Optional[float] = None) -> Path:
        """Stop a recording gracefully and return its output path.

        Sends ``q`` on the process's stdin and blocks until it exits. With
        a ``timeout``, a process still running afterwards is terminated.

        Raises:
            SessionNotFound: If ``session_id`` is not registered
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)

        process = session.process
        if process.stdin is not None:
            try:
                process.stdin.write(b"q\n")
                process.stdin.flush()
            except (BrokenPipeError, ValueError) as e:
                # Process already gone; wait() below reaps it
                logger.debug(f"Capture {session_id} stdin closed: {e}")
            finally:
                try:
                    process.stdin.close()
                except (BrokenPipeError, OSError):
                    pass

        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"Capture {session_id} did not exit in {timeout}s, terminating")
            process.terminate()
            process.wait()

        logger.info(f"Stopped capture {session_id} (exit {process.returncode})")
        return session.output_path

    def active_sessions(self) -> list[str]:
        """Snapshot of registered session ids."""
        with self._lock:
            return list(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions
