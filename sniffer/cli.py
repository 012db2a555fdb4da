"""Entrypoint for the command line interface."""

import pathlib
from typing import Optional

import typer

from sniffer.configs.app_configs.config_logging import configure_logging
from sniffer.detect import detect
from sniffer.environment import StaticEnvironment
from sniffer.exceptions import EnvironmentFileError


cli = typer.Typer(no_args_is_help=True, add_completion=False)


@cli.callback()
def setup():
    """CLI Entrypoint"""
    configure_logging()


@cli.command("detect")
def detect_command(
    user_agent: Optional[str] = typer.Option(
        None, "--user-agent", "-u", help="User agent to classify instead of the snapshot's"
    ),
    environment: Optional[pathlib.Path] = typer.Option(
        None,
        "--environment",
        "-e",
        help="JSON capability snapshot of the browser, see StaticEnvironment",
    ),
):
    """Classify a browser and print its descriptor as JSON."""
    snapshot = StaticEnvironment()
    if environment is not None:
        try:
            snapshot = StaticEnvironment.from_file(environment)
        except EnvironmentFileError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)

    detection = detect(snapshot, user_agent)
    typer.echo(detection.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
