"""Core edit-plan, export and capture modules."""

from core.cache import CacheDirs
from core.capture import CaptureRegistry, SessionNotFound, classify_device_lines, list_devices
from core.edit_plan import PlanError, apply_edits, build_plan
from core.export_job import ExportError, run_export
from core.preview import PreviewError, extract_poster_frame
from core.probe import ProbeError, probe_media

__all__ = [
    "CacheDirs",
    # Edit plans
    "PlanError",
    "apply_edits",
    "build_plan",
    # Export
    "ExportError",
    "run_export",
    # Media
    "PreviewError",
    "ProbeError",
    "extract_poster_frame",
    "probe_media",
    # Capture
    "CaptureRegistry",
    "SessionNotFound",
    "classify_device_lines",
    "list_devices",
]
