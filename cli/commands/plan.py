"""Edit plan commands."""

from pathlib import Path

import click

from cli.utils.errors import handle_error
from cli.utils.output import output_result, output_success
from core.edit_plan import PlanError, apply_edits, build_plan
from models.edit_plan import EditPlan


def _read_project(project_file: Path) -> str:
    return project_file.read_text(encoding="utf-8")


def _summary(plan: EditPlan) -> dict:
    return {
        "plan_id": plan.id,
        "main_clips": len(plan.main_track),
        "overlay_clips": len(plan.overlay_track),
        "duration_ms": plan.planned_duration_ms,
    }


@click.group()
def plan() -> None:
    """Inspect and validate project files.

    \b
    Commands:
        validate  Check a project and show its compiled plan
        apply     Validate a project and persist its plan
    """
    pass


@plan.command("validate")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--show-clips", is_flag=True, help="Include every resolved clip in the output")
@click.pass_context
def validate(ctx: click.Context, project_file: Path, show_clips: bool) -> None:
    """Compile a project file and report its edit plan.

    \b
    Examples:
        cutline plan validate project.json
        cutline --json plan validate project.json --show-clips
    """
    try:
        edit_plan = build_plan(_read_project(project_file))
    except (PlanError, OSError) as e:
        handle_error(e)

    result = _summary(edit_plan)
    if show_clips:
        plan_dict = edit_plan.to_dict()
        result["main_track"] = plan_dict["main_track"]
        result["overlay_track"] = plan_dict["overlay_track"]
    output_result(result, as_json=ctx.obj.get("json", False))


@plan.command("apply")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def apply(ctx: click.Context, project_file: Path) -> None:
    """Validate a project file and persist its plan."""
    try:
        edit_plan = apply_edits(_read_project(project_file))
    except (PlanError, OSError) as e:
        handle_error(e)

    if ctx.obj.get("json", False):
        output_result({"status": "ok", **_summary(edit_plan)}, as_json=True)
    else:
        output_success(f"Applied plan {edit_plan.id}")
