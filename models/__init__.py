"""Data models for the application."""

from models.edit_plan import EditPlan, SeqClip
from models.export import ExportResult, ExportSettings, ProgressEvent
from models.media import MediaMeta

__all__ = [
    "EditPlan",
    "SeqClip",
    "ExportResult",
    "ExportSettings",
    "ProgressEvent",
    "MediaMeta",
]
