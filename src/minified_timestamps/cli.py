"""CLI entrypoint for minified asset timestamping."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

import click
from dotenv import load_dotenv

from .config import TargetConfig, create_example_config, load_stamp_config, reload_settings
from .errors import StampError
from .schemas.report import ApplyReport, CaptureReport
from .session import StampSession

DEFAULT_CONFIG = Path("stamps.yaml")


class FatalStampError(click.ClickException):
    """A fatal engine condition surfaced to the shell."""

    exit_code = StampError.exit_code


class BuildCommandError(click.ClickException):
    """The build command between capture and apply failed."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


@click.group()
@click.version_option(package_name="minified-timestamps")
@click.option("--verbose", "-v", is_flag=True, help="Log every scanned template and file change")
def main(verbose: bool) -> None:
    """Keep cache-busting timestamps of minified assets in sync with templates."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
    reload_settings()
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG,
    show_default=True,
    help="Target configuration file",
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")


def _load_target(config_path: Path, target: str) -> tuple[TargetConfig, Path]:
    stamp_config = load_stamp_config(config_path)
    return stamp_config.target(target), config_path.resolve().parent


def _run_build(command: list[str], cwd: Path, *, echo: bool = True) -> None:
    rendered = shlex.join(command)
    if echo:
        click.echo(f"[exec] {rendered}")
    try:
        result = subprocess.run(command, cwd=cwd, check=False)
    except FileNotFoundError as exc:
        raise BuildCommandError(f"Command not found: {command[0]}") from exc
    if result.returncode != 0:
        raise BuildCommandError(
            f"Command failed ({result.returncode}): {rendered}",
            exit_code=result.returncode,
        )


def _echo_capture(report: CaptureReport) -> None:
    click.echo(f"Target: {report.target}")
    for template in report.templates:
        click.echo(f"\n{template.template} ({template.tracked_count} tracked)")
        for asset in template.assets:
            detail = asset.canonical_path or asset.resolved_path or ""
            click.echo(f"  [{asset.status}] {asset.reference} {detail}".rstrip())


def _echo_apply(report: ApplyReport) -> None:
    click.echo(f"Looking for changes on target {report.target}")
    if not report.changed:
        click.echo("No minified assets changed")
        return
    for artifact in report.artifacts:
        click.echo(f"  {artifact.canonical_path} -> {artifact.new_path}")
        for deleted in artifact.deleted:
            click.echo(f"    - deleted {deleted}")
    for template in report.rewritten_templates:
        click.echo(f"Updated template: {template}")


@main.command()
@click.argument("target")
@config_option
@json_option
def scan(target: str, config_path: Path, as_json: bool) -> None:
    """List the assets tracked on the templates of TARGET."""
    try:
        target_config, base_dir = _load_target(config_path, target)
        with StampSession(target_config, base_dir) as session:
            report = session.capture().to_report(target_config.name)
    except StampError as exc:
        raise FatalStampError(str(exc)) from exc

    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return
    _echo_capture(report)


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("target")
@config_option
@json_option
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def run(target: str, config_path: Path, as_json: bool, command: tuple[str, ...]) -> None:
    """Capture TARGET, run the build COMMAND, then timestamp what changed.

    Example: minified-timestamps run default -- npm run minify
    """
    try:
        target_config, base_dir = _load_target(config_path, target)
        with StampSession(target_config, base_dir) as session:
            store = session.capture()
            if not as_json:
                click.echo(f"Captured {len(store)} template(s) for target {target_config.name}")
            _run_build(list(command), base_dir, echo=not as_json)
            report = session.apply()
    except StampError as exc:
        raise FatalStampError(str(exc)) from exc

    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return
    _echo_apply(report)


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG,
    show_default=True,
    help="Where to write the example configuration",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(output: Path, force: bool) -> None:
    """Write an example target configuration."""
    if output.exists() and not force:
        raise click.ClickException(f"Configuration already exists: {output}")
    output.write_text(create_example_config())
    click.echo(f"Example configuration created: {output}")


if __name__ == "__main__":
    main()
