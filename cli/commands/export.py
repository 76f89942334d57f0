"""Export command: render a project to a single video file."""

from pathlib import Path
from typing import Optional

import click

from cli.utils.config import get_cache_dirs, get_settings, require_ffmpeg
from cli.utils.errors import handle_error
from cli.utils.output import output_result, output_success
from cli.utils.progress import ProgressContext
from core.edit_plan import PlanError, build_plan
from core.export_job import ExportError, run_export
from models.export import SUPPORTED_FORMATS, ExportSettings


@click.command("export")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(SUPPORTED_FORMATS),
    default=None,
    help="Container format (default: from config, else mp4)",
)
@click.option("--width", type=int, help="Target width (advisory)")
@click.option("--height", type=int, help="Target height (advisory)")
@click.option("--fps", type=int, help="Target frame rate (advisory)")
@click.option("--bitrate", type=int, help="Target bitrate in kbps (advisory)")
@click.option("--name", "filename", help="Output file name (default: <plan id>_<timestamp>_<token>)")
@click.pass_context
def export(
    ctx: click.Context,
    project_file: Path,
    output_format: Optional[str],
    width: Optional[int],
    height: Optional[int],
    fps: Optional[int],
    bitrate: Optional[int],
    filename: Optional[str],
) -> None:
    """Export a project's main track as one video file.

    Each clip is stream-copied when possible and re-encoded to
    H.264/AAC otherwise. The output lands in the projects directory.

    \b
    Examples:
        cutline export project.json
        cutline export project.json --format mov
        cutline export project.json --name final-cut
        cutline --json export project.json
    """
    settings = get_settings()

    try:
        edit_plan = build_plan(project_file.read_text(encoding="utf-8"))
    except (PlanError, OSError) as e:
        handle_error(e)

    ffmpeg_path = require_ffmpeg(settings)
    cache = get_cache_dirs(settings)
    export_settings = ExportSettings(
        format=output_format or settings.export_format,
        width=width,
        height=height,
        fps=fps,
        bitrate=bitrate,
        filename=filename,
    )

    try:
        with ProgressContext("Exporting") as progress:
            result = run_export(
                ffmpeg_path,
                edit_plan,
                export_settings,
                cache,
                progress_callback=progress.on_event,
            )
    except (ExportError, OSError) as e:
        handle_error(e)

    if ctx.obj.get("json", False):
        output_result(
            {
                "path": result.path,
                "duration_ms": result.duration_ms,
                "size_bytes": result.size_bytes,
            },
            as_json=True,
        )
    else:
        output_success(f"Exported {edit_plan.id} to {result.path}")
        output_result({"duration_ms": result.duration_ms, "size_bytes": result.size_bytes})
