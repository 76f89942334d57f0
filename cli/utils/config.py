"""Settings, cache layout and tool lookup shared by CLI commands."""

from typing import Optional

from cli.utils.errors import ExitCode, exit_with
from core.binary_resolver import find_binary
from core.cache import CacheDirs
from core.settings import Settings, load_settings


def get_settings() -> Settings:
    """Load settings (env vars > config file > defaults)."""
    return load_settings()


def get_cache_dirs(settings: Settings) -> CacheDirs:
    """Create the cache layout under the configured data directory."""
    try:
        return CacheDirs.create(settings.data_dir)
    except OSError as e:
        exit_with(ExitCode.PERMISSION_ERROR, f"Cannot create cache under {settings.data_dir}: {e}")


def _require(name: str, configured: Optional[str]) -> str:
    path = find_binary(name, configured)
    if path is None:
        exit_with(
            ExitCode.DEPENDENCY_MISSING,
            f"{name} not found. Install FFmpeg or set its path in the config file.",
        )
    return path


def require_ffmpeg(settings: Settings) -> str:
    return _require("ffmpeg", settings.ffmpeg_path)


def require_ffprobe(settings: Settings) -> str:
    return _require("ffprobe", settings.ffprobe_path)
