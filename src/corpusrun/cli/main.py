"""CLI entry point for corpusrun."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from corpusrun import __version__, bootstrap
from corpusrun.core.classifier import available_classifiers
from corpusrun.core.errors import BatchInterrupted, LaunchError
from corpusrun.plan import HarnessPlan, PlanOptions, load_plan, run_plan
from corpusrun.utils.logging import setup_logger


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"corpusrun {__version__}")
    raise click.exceptions.Exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Also write logs to this file.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the corpusrun version and exit.",
)
def cli(verbose: bool, log_file: Optional[Path]) -> None:
    """Run a program once per corpus input and tally the outcomes."""

    setup_logger(log_file, verbose=verbose)
    bootstrap()


@cli.command()
@click.option(
    "--plan",
    "--config",
    "plan_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML harness plan.",
)
@click.option("--command", "command", type=str, help="Program under test (shell-style string).")
@click.option("--corpus", "corpus_root", type=click.Path(file_okay=False), help="Directory searched for inputs.")
@click.option("--extension", type=str, help="Input file extension (default .gb).")
@click.option("--file", "files", type=str, multiple=True, help="Explicit input file; may be repeated.")
@click.option("--flag", "flags", type=str, multiple=True, help="Flag passed after the input path; may be repeated.")
@click.option("--timeout", type=float, help="Per-test wall-clock budget in seconds.")
@click.option("--classifier", type=str, help="Outcome classifier: " + ", ".join(available_classifiers()) + ".")
@click.option("--cases", "case_filters", type=str, help="Comma-separated case name filters (supports globs).")
@click.option("--list", "list_only", is_flag=True, help="List matched cases without running.")
@click.option(
    "--report",
    "report_format",
    type=click.Choice(["terminal", "json"]),
    default="terminal",
    show_default=True,
    help="Report format (terminal by default).",
)
@click.option("--report-path", type=str, help="Write a JSON report to this path.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in terminal output.")
def run(
    plan_path: Optional[str],
    command: Optional[str],
    corpus_root: Optional[str],
    extension: Optional[str],
    files: Tuple[str, ...],
    flags: Tuple[str, ...],
    timeout: Optional[float],
    classifier: Optional[str],
    case_filters: Optional[str],
    list_only: bool,
    report_format: Optional[str],
    report_path: Optional[str],
    no_color: bool,
) -> None:
    """Execute every corpus input and exit 0 only if all of them passed."""

    options = PlanOptions(
        command=command,
        corpus_root=corpus_root,
        extension=extension,
        files=files,
        flags=flags,
        timeout=timeout,
        classifier=classifier,
        cases=_split_csv(case_filters),
        list_only=list_only,
    )
    try:
        plan = load_plan(plan_path) if plan_path else HarnessPlan(command=None)
        exit_code = run_plan(
            plan,
            options,
            report_format=report_format or "terminal",
            report_path=report_path,
            use_color=not no_color,
        )
    except BatchInterrupted as exc:
        click.echo(f"Interrupted by signal {exc.signum}; batch aborted.", err=True)
        raise click.exceptions.Exit(exc.exit_code) from exc
    except LaunchError as exc:
        raise click.ClickException(f"{exc} (check the configured command)") from exc
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    raise click.exceptions.Exit(exit_code)


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return tuple()
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return tuple(parts)


def main(argv: Optional[list[str]] = None) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=argv, prog_name="corpusrun", standalone_mode=True)
    except SystemExit as exc:  # click exits with the command's status
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
