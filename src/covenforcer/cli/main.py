"""covenforce command - check a Go coverage profile for uncovered code."""

import json
from pathlib import Path
from typing import IO, Any

import click
from rich.console import Console

from covenforcer import __version__
from covenforcer.config import compile_pattern, load_config
from covenforcer.core.errors import ConfigError, CovEnforcerError, MalformedProfileError
from covenforcer.core.logging import configure_logging, get_logger
from covenforcer.coverage import (
    analyze_coverage,
    build_summary_report,
    load_profile,
    render_report,
    report_to_dict,
    write_filtered_profile,
)
from covenforcer.scope import infer_package_path

log = get_logger("cli")


def _validate_pattern(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> str | None:
    if not value:
        return None
    try:
        compile_pattern(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    return value


class JsonErrorException(click.ClickException):
    """Reports a CovEnforcerError as a JSON document on stdout."""

    def __init__(self, error: CovEnforcerError) -> None:
        super().__init__(str(error))
        self.error = error

    def show(self, file: IO[Any] | None = None) -> None:  # noqa: ARG002
        click.echo(json.dumps(self.error.to_dict(), indent=2))


def _cli_error(error: CovEnforcerError, message: str, as_json: bool) -> click.ClickException:
    if as_json:
        return JsonErrorException(error)
    return click.ClickException(message)


@click.command()
@click.version_option(version=__version__, prog_name="covenforce")
@click.argument("profile_path", type=click.Path(path_type=Path))
@click.option("-p", "--package", "package_path", help="Base import path of this package")
@click.option(
    "--skip-files",
    callback=_validate_pattern,
    help="Regex pattern for file paths to be ignored",
)
@click.option(
    "--skip-code",
    callback=_validate_pattern,
    help="Regex pattern for ignoring a code block",
)
@click.option(
    "--show-code/--no-show-code",
    default=None,
    help="Display source code of uncovered blocks",
)
@click.option(
    "-o",
    "--out-profile",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Save the filtered coverage profile to this path",
)
@click.option(
    "--package-stats/--no-package-stats",
    default=None,
    help="Show coverage statistics per package",
)
@click.option(
    "--file-stats/--no-file-stats",
    default=None,
    help="Show coverage statistics per file",
)
@click.option("--json", "as_json", is_flag=True, help="Output the report as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(
    profile_path: Path,
    package_path: str | None,
    skip_files: str | None,
    skip_code: str | None,
    show_code: bool | None,
    output_path: Path | None,
    package_stats: bool | None,
    file_stats: bool | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Check that every block in a Go coverage profile is covered.

    PROFILE_PATH is a profile written by "go test -coverprofile". Exits with
    status 1 if any uncovered block remains after skip rules are applied.
    """
    cwd = Path.cwd()
    try:
        config = load_config(
            cwd,
            package_path=package_path,
            skip_files=skip_files,
            skip_code=skip_code,
            show_code=show_code,
            package_stats=package_stats,
            file_stats=file_stats,
        )
    except ConfigError as e:
        raise _cli_error(e, str(e), as_json) from e

    if verbose:
        configure_logging(level="DEBUG", json_format=as_json)
    else:
        configure_logging(config=config.logging)

    scope = config.package_path or infer_package_path(cwd)
    if not scope:
        raise click.ClickException("Unable to determine package path; use --package option")
    log.debug("covenforce.start", profile=str(profile_path), package_path=scope)

    try:
        profile = load_profile(profile_path)
    except MalformedProfileError as e:
        raise _cli_error(e, f"Error reading profile: {e}", as_json) from e
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Unable to read {profile_path}") from e

    try:
        result = analyze_coverage(profile, config.analyzer_options(scope, source_root=cwd))
    except CovEnforcerError as e:
        raise _cli_error(e, str(e), as_json) from e

    report = build_summary_report(result, scope)
    if as_json:
        click.echo(json.dumps(report_to_dict(report), indent=2))
        passed = report.passed
    else:
        passed = render_report(
            report,
            Console(highlight=False, soft_wrap=True),
            package_stats=config.package_stats,
            file_stats=config.file_stats,
            show_code=config.show_code,
        )

    if output_path is not None:
        try:
            with output_path.open("w", encoding="utf-8") as f:
                write_filtered_profile(profile, result, f)
        except OSError as e:
            raise click.ClickException(f"Unable to write {output_path} ({e})") from e
        if not as_json:
            click.echo(f"Filtered profile written to {output_path}")

    if not passed:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
