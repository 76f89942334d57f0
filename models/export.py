"""Data models for export jobs."""

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional

SUPPORTED_FORMATS = ("mp4", "mov")
DEFAULT_FORMAT = "mp4"

PHASE_SEGMENT = "segment"
PHASE_CONCAT = "concat"
PHASE_FINALIZE = "finalize"


@dataclass
class ExportSettings:
    """User export choices.

    Dimensions, fps and bitrate are advisory: the fallback encoder
    uses a fixed profile regardless.
    """

    format: str = DEFAULT_FORMAT
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[int] = None
    bitrate: Optional[int] = None
    filename: Optional[str] = None  # Output name under the renders dir

    def __post_init__(self):
        fmt = (self.format or "").lower()
        self.format = fmt if fmt in SUPPORTED_FORMATS else DEFAULT_FORMAT

    @property
    def extension(self) -> str:
        """File extension for the finalized artifact."""
        return "mov" if self.format == "mov" else "mp4"

    @classmethod
    def from_dict(cls, data: dict) -> "ExportSettings":
        """Deserialize from the front end's export settings object."""
        return cls(
            format=data.get("format", DEFAULT_FORMAT),
            width=data.get("width"),
            height=data.get("height"),
            fps=data.get("fps"),
            bitrate=data.get("bitrate"),
            filename=data.get("filename") or None,
        )


@dataclass(frozen=True)
class ProgressEvent:
    """One step of an export, emitted before the step runs."""

    phase: str  # segment, concat, finalize
    current: int
    total: int
    message: str

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.current / self.total


class ExportResult(NamedTuple):
    """Finalized artifact plus its planned duration and on-disk size."""

    path: Path
    duration_ms: int
    size_bytes: int
