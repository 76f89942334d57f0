"""Cutline CLI entry point."""

import logging

import click

from cli import __version__

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="cutline")
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.option("--verbose", "-v", is_flag=True, help="Log ffmpeg commands and debug details")
@click.pass_context
def cli(ctx: click.Context, output_json: bool, verbose: bool) -> None:
    """Cutline - timeline export and screen capture.

    Compiles editor project files into ffmpeg exports and drives
    screen/audio capture. All operations work headlessly.

    \b
    Examples:
        cutline plan validate project.json
        cutline export project.json --format mov
        cutline capture devices
        cutline capture record --display 1 --audio 0
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    ctx.ensure_object(dict)
    ctx.obj["json"] = output_json


def register_commands() -> None:
    """Register all command modules."""
    # Lazy imports keep CLI startup fast
    from cli.commands import capture, export, media, plan

    cli.add_command(plan.plan)
    cli.add_command(export.export)
    cli.add_command(media.probe)
    cli.add_command(media.preview)
    cli.add_command(capture.capture)


def main() -> None:
    """Main entry point for the CLI."""
    register_commands()
    cli()


if __name__ == "__main__":
    main()
