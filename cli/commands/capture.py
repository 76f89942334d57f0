"""Screen capture commands."""

import subprocess
import time
from typing import Optional

import click

from cli.utils.config import get_cache_dirs, get_settings, require_ffmpeg
from cli.utils.errors import ExitCode, exit_with
from cli.utils.output import output_info, output_result, output_success
from core.capture import CaptureRegistry, CaptureSettings, list_devices


@click.group()
def capture() -> None:
    """Record the screen and audio inputs.

    \b
    Commands:
        devices  List capture devices
        record   Record until Enter (or --duration) and print the file
    """
    pass


@capture.command("devices")
@click.pass_context
def devices(ctx: click.Context) -> None:
    """List displays and audio inputs ffmpeg can capture from."""
    settings = get_settings()
    ffmpeg_path = require_ffmpeg(settings)
    try:
        found = list_devices(ffmpeg_path, settings.capture_input_format)
    except OSError as e:
        exit_with(ExitCode.DEPENDENCY_MISSING, f"Could not run ffmpeg: {e}")
    except subprocess.TimeoutExpired:
        exit_with(ExitCode.GENERAL_ERROR, "Device listing timed out")

    if ctx.obj.get("json", False):
        output_result(found.to_dict(), as_json=True)
        return
    click.echo("Displays:")
    for i, name in enumerate(found.displays):
        click.echo(f"  {i}: {name}")
    click.echo("Audio inputs:")
    for i, name in enumerate(found.audio_inputs):
        click.echo(f"  {i}: {name}")


@capture.command("record")
@click.option("--display", "display_index", type=int, help="Display device index (default: 1)")
@click.option("--audio", "audio_index", type=int, help="Audio device index (0 or omitted: none)")
@click.option("--fps", type=int, help="Capture frame rate")
@click.option("--duration", type=click.FloatRange(min=0), help="Stop after this many seconds")
@click.pass_context
def record(
    ctx: click.Context,
    display_index: Optional[int],
    audio_index: Optional[int],
    fps: Optional[int],
    duration: Optional[float],
) -> None:
    """Record until Enter is pressed (or --duration elapses).

    \b
    Examples:
        cutline capture record
        cutline capture record --display 1 --audio 0 --duration 10
    """
    settings = get_settings()
    registry = CaptureRegistry(
        require_ffmpeg(settings),
        get_cache_dirs(settings),
        input_format=settings.capture_input_format,
        container=settings.capture_container,
    )
    capture_settings = CaptureSettings(
        display_index=display_index,
        audio_index=audio_index,
        fps=fps or settings.capture_fps,
    )

    try:
        session_id, output_path = registry.start_session(capture_settings)
    except OSError as e:
        exit_with(ExitCode.DEPENDENCY_MISSING, f"Could not start ffmpeg: {e}")

    output_info(f"Recording {session_id} to {output_path}")
    try:
        if duration is not None:
            time.sleep(duration)
        else:
            click.prompt("Press Enter to stop", default="", show_default=False, err=True)
    except (KeyboardInterrupt, click.Abort):
        output_info("Interrupted, stopping capture")
    finally:
        output_path = registry.stop_session(session_id, timeout=settings.stop_timeout_seconds)

    if ctx.obj.get("json", False):
        output_result({"session_id": session_id, "path": output_path}, as_json=True)
    else:
        output_success(f"Saved recording to {output_path}")
