"""Data models for compiled edit plans."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SeqClip:
    """A clip placed on the output timeline."""

    src_path: Path
    in_ms: int  # Trim start within the source
    out_ms: int  # Trim end within the source (exclusive)
    start_ms: int  # Position on the output timeline
    end_ms: int

    @property
    def duration_ms(self) -> int:
        """Length of the trim window."""
        return self.out_ms - self.in_ms

    def is_visible_at(self, t_ms: int) -> bool:
        return self.start_ms <= t_ms < self.end_ms

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            "src_path": str(self.src_path),
            "in_ms": self.in_ms,
            "out_ms": self.out_ms,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
        }


@dataclass(frozen=True)
class EditPlan:
    """A validated, ordered timeline ready for export.

    ``main_track`` is sorted by ``start_ms`` and never overlaps.
    ``overlay_track`` keeps authoring order and carries no invariant.
    """

    id: str
    main_track: tuple[SeqClip, ...] = field(default_factory=tuple)
    overlay_track: tuple[SeqClip, ...] = field(default_factory=tuple)

    @property
    def planned_duration_ms(self) -> int:
        """Sum of main-track trim windows."""
        return sum(clip.duration_ms for clip in self.main_track)

    def top_visible_clip(self, t_ms: int) -> Optional[SeqClip]:
        """Get the main-track clip covering ``t_ms``, or None."""
        for clip in self.main_track:
            if clip.is_visible_at(t_ms):
                return clip
        return None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            "id": self.id,
            "main_track": [clip.to_dict() for clip in self.main_track],
            "overlay_track": [clip.to_dict() for clip in self.overlay_track],
        }
