"""Media inspection commands: probe and preview."""

from pathlib import Path

import click

from cli.utils.config import get_cache_dirs, get_settings, require_ffmpeg, require_ffprobe
from cli.utils.errors import handle_error
from cli.utils.output import output_result
from core.edit_plan import PlanError, build_plan
from core.preview import PreviewError, extract_poster_frame
from core.probe import ProbeError, probe_media


@click.command("probe")
@click.argument("media_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def probe(ctx: click.Context, media_file: Path) -> None:
    """Show duration, dimensions and codecs of a media file.

    \b
    Examples:
        cutline probe clip.mov
    """
    settings = get_settings()
    ffprobe_path = require_ffprobe(settings)
    try:
        meta = probe_media(ffprobe_path, media_file)
    except ProbeError as e:
        handle_error(e)
    output_result(meta.to_dict(), as_json=ctx.obj.get("json", False))


@click.command("preview")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--at", "at_ms", type=click.IntRange(min=0), required=True,
              help="Timeline position in milliseconds")
@click.pass_context
def preview(ctx: click.Context, project_file: Path, at_ms: int) -> None:
    """Write a poster frame for a timeline position.

    \b
    Examples:
        cutline preview project.json --at 1500
    """
    settings = get_settings()
    try:
        edit_plan = build_plan(project_file.read_text(encoding="utf-8"))
    except (PlanError, OSError) as e:
        handle_error(e)

    ffmpeg_path = require_ffmpeg(settings)
    cache = get_cache_dirs(settings)
    try:
        frame_path = extract_poster_frame(ffmpeg_path, edit_plan, at_ms, cache)
    except PreviewError as e:
        handle_error(e)
    output_result({"path": frame_path, "ts": at_ms}, as_json=ctx.obj.get("json", False))
