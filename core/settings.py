"""Application settings management.

Settings are stored as JSON (~/.config/cutline/config.json) and can be
overridden with environment variables.

Priority order: Environment variables > JSON config > Defaults
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set

from core.paths import get_app_data_dir

logger = logging.getLogger(__name__)

# Config schema version
CONFIG_VERSION = "1.0"

# Environment variable names
ENV_CONFIG_PATH = "CUTLINE_CONFIG"
ENV_DATA_DIR = "CUTLINE_DATA_DIR"
ENV_FFMPEG = "CUTLINE_FFMPEG"
ENV_FFPROBE = "CUTLINE_FFPROBE"
ENV_CAPTURE_FORMAT = "CUTLINE_CAPTURE_FORMAT"


def _get_config_dir() -> Path:
    """Get platform-appropriate config directory (XDG-compliant)."""
    if os.name == "nt":  # Windows
        base = Path(os.environ.get("APPDATA", Path.home()))
        return base / "cutline"
    else:  # macOS/Linux
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "cutline"


def _get_config_path() -> Path:
    """Get config file path, respecting CUTLINE_CONFIG env var."""
    if custom_path := os.environ.get(ENV_CONFIG_PATH):
        return Path(custom_path)
    return _get_config_dir() / "config.json"


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Base directory for cache/ and projects/
    data_dir: Path = field(default_factory=get_app_data_dir)

    # External tools (None = resolve via core.binary_resolver)
    ffmpeg_path: Optional[str] = None
    ffprobe_path: Optional[str] = None

    # Export defaults
    export_format: str = "mp4"  # mp4, mov

    # Capture
    capture_input_format: str = "avfoundation"  # avfoundation, gdigrab, x11grab, ...
    capture_fps: int = 30
    capture_container: str = "mp4"
    stop_timeout_seconds: Optional[float] = None  # None = wait for ffmpeg indefinitely


def _apply_env_overrides(settings: Settings) -> Set[str]:
    """Apply environment variable overrides to settings in place.

    Returns:
        Names of the settings that came from the environment
    """
    overridden: Set[str] = set()

    if data_dir := os.environ.get(ENV_DATA_DIR):
        settings.data_dir = Path(data_dir).expanduser()
        overridden.add("data_dir")

    if ffmpeg := os.environ.get(ENV_FFMPEG):
        settings.ffmpeg_path = ffmpeg
        overridden.add("ffmpeg_path")

    if ffprobe := os.environ.get(ENV_FFPROBE):
        settings.ffprobe_path = ffprobe
        overridden.add("ffprobe_path")

    if capture_format := os.environ.get(ENV_CAPTURE_FORMAT):
        settings.capture_input_format = capture_format
        overridden.add("capture_input_format")

    return overridden


def _load_from_json(config_path: Path, settings: Settings) -> Settings:
    """Load settings from JSON config file.

    Args:
        config_path: Path to the JSON config file
        settings: Settings instance to modify

    Returns:
        Modified settings (same instance)
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config from {config_path}: {e}")
        return settings

    # Paths section
    if paths := data.get("paths"):
        if val := paths.get("data_dir"):
            settings.data_dir = Path(val).expanduser()
        if val := paths.get("ffmpeg"):
            settings.ffmpeg_path = val
        if val := paths.get("ffprobe"):
            settings.ffprobe_path = val

    # Export section
    if export := data.get("export"):
        if val := export.get("format"):
            settings.export_format = val

    # Capture section
    if capture := data.get("capture"):
        if val := capture.get("input_format"):
            settings.capture_input_format = val
        if "fps" in capture:
            try:
                settings.capture_fps = int(capture["fps"])
            except (TypeError, ValueError):
                logger.warning(f"Invalid capture fps in config: {capture['fps']}")
        if val := capture.get("container"):
            settings.capture_container = val
        if "stop_timeout_seconds" in capture:
            val = capture["stop_timeout_seconds"]
            try:
                settings.stop_timeout_seconds = float(val) if val is not None else None
            except (TypeError, ValueError):
                logger.warning(f"Invalid stop_timeout_seconds in config: {val}")

    return settings


def _settings_to_json(settings: Settings) -> dict:
    """Convert settings to JSON-serializable dictionary."""
    return {
        "version": CONFIG_VERSION,
        "paths": {
            "data_dir": str(settings.data_dir),
            "ffmpeg": settings.ffmpeg_path,
            "ffprobe": settings.ffprobe_path,
        },
        "export": {
            "format": settings.export_format,
        },
        "capture": {
            "input_format": settings.capture_input_format,
            "fps": settings.capture_fps,
            "container": settings.capture_container,
            "stop_timeout_seconds": settings.stop_timeout_seconds,
        },
    }


def load_settings() -> Settings:
    """Load settings with priority: env vars > JSON config > defaults.

    Returns:
        Settings instance populated from available sources
    """
    settings = Settings()

    config_path = _get_config_path()
    if config_path.exists():
        settings = _load_from_json(config_path, settings)

    overridden = _apply_env_overrides(settings)

    logger.debug(f"Settings loaded (env overrides: {sorted(overridden)})")
    return settings


def save_settings(settings: Settings) -> bool:
    """Save settings to JSON file.

    Args:
        settings: Settings instance to save

    Returns:
        True if save succeeded
    """
    config_path = _get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _settings_to_json(settings)

        # Atomic write: write to temp file then rename
        temp_path = config_path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(temp_path, config_path)

        logger.info(f"Settings saved to {config_path}")
        return True

    except OSError as e:
        logger.error(f"Failed to save settings: {e}")
        return False
