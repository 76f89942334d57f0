"""Data models for probed media attributes."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MediaMeta:
    """Structured attributes of a media file as reported by ffprobe."""

    duration_ms: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    has_audio: Optional[bool] = None
    codec_video: Optional[str] = None
    codec_audio: Optional[str] = None
    rotation_deg: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            "duration_ms": self.duration_ms,
            "width": self.width,
            "height": self.height,
            "has_audio": self.has_audio,
            "codec_video": self.codec_video,
            "codec_audio": self.codec_audio,
            "rotation_deg": self.rotation_deg,
        }
