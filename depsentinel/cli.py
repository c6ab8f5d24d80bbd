"""CLI entry point: depsentinel.

Usage:
    depsentinel /path/to/repo
    depsentinel /path/to/repo --verbose
    depsentinel /path/to/repo --json
"""

from __future__ import annotations

import dataclasses
import os
import platform
import sys

import click
import structlog

from depsentinel.config import ScanLimits
from depsentinel.core.logging import setup_logging
from depsentinel.engines.package_scanner.locator import validate_repository
from depsentinel.engines.package_scanner.manifest import ensure_capabilities
from depsentinel.engines.package_scanner.scanner import PackageScanner
from depsentinel.exceptions import SentinelError
from depsentinel.report import exit_code, render_json, render_text

log = structlog.get_logger("depsentinel.cli")


class ScanCommand(click.Command):
    """Command whose usage errors exit 1, the same as a failed scan."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


def _log_level(verbose: bool, debug: bool, as_json: bool) -> str | None:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    # Keep stdout/stderr quiet so the JSON document is the only output.
    if as_json:
        return "ERROR"
    return None


def _log_environment(limits: ScanLimits) -> None:
    log.debug(
        "cli.environment",
        platform=platform.platform(),
        python=sys.version.split()[0],
        executable=sys.executable,
        cwd=os.getcwd(),
        limits=dataclasses.asdict(limits),
    )


@click.command(cls=ScanCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("repository")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-j", "--json", "as_json", is_flag=True, help="Output results in JSON format")
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging with environment details")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Scan this many packages concurrently (default: 1)",
)
def main(repository: str, verbose: bool, as_json: bool, debug: bool, workers: int | None) -> None:
    """Check whether REPOSITORY uses any of the flagged npm package versions.

    Exits 0 when at least one package was found, 1 otherwise, on error,
    or on invalid usage.
    """
    setup_logging(level=_log_level(verbose, debug, as_json))

    limits = ScanLimits.from_env()
    if workers is not None:
        limits = dataclasses.replace(limits, workers=workers)
    if debug:
        _log_environment(limits)

    try:
        validate_repository(repository)
        ensure_capabilities()
        result = PackageScanner(limits).scan(repository)
    except SentinelError as exc:
        if not exc.fatal:
            raise
        log.debug("cli.fatal", error=str(exc), error_type=type(exc).__name__)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(render_json(result))
    else:
        click.echo(render_text(result, verbose=verbose or debug, color=True))

    sys.exit(exit_code(result))


if __name__ == "__main__":
    main()
