"""Verify CLI command -- classify shards and report placement balance."""

from pathlib import Path
from typing import List, Optional

import typer

from ..analysis import analyze_snapshot
from ..exceptions import AssignmentVerifierError
from ..formatters import get_formatter
from ..logging_config import setup_logging
from ..snapshot import load_locality, load_snapshot
from . import app
from ._common import check_gates, err_console, resolve_config


@app.command()
def verify(
    snapshot: Path = typer.Argument(
        ...,
        help="Placement snapshot file (JSON)",
        dir_okay=False,
    ),
    table: Optional[List[str]] = typer.Option(
        None,
        "--table",
        "-t",
        help="Table to verify (repeatable; default: every table in the snapshot)",
    ),
    locality: Optional[Path] = typer.Option(
        None,
        "--locality",
        "-l",
        help="Locality file (JSON): shard -> hostname -> score",
        dir_okay=False,
    ),
    detail: bool = typer.Option(
        False,
        "--detail",
        "-d",
        help="List individual shards and hosts",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: rich (default), text, json",
    ),
    fail_on_non_favored: bool = typer.Option(
        False,
        "--fail-on-non-favored",
        help="Exit 1 if any shard runs off its favored hosts (for CI gating)",
    ),
    min_compliance: Optional[float] = typer.Option(
        None,
        "--min-compliance",
        help="Exit 1 if the favored share of shards is below this percentage",
        min=0.0,
        max=100.0,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all but ERROR logging",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append logs to this file",
        dir_okay=False,
    ),
):
    """
    Verify shard placement against the preferred-host plan.

    [bold cyan]Examples:[/bold cyan]

      assignment-verifier verify snapshot.json

      assignment-verifier verify snapshot.json --table orders --detail

      assignment-verifier verify snapshot.json --locality locality.json --format text

      assignment-verifier verify snapshot.json --format json | jq .

      assignment-verifier verify snapshot.json --min-compliance 90
    """
    if verbose and quiet:
        err_console.print("[red]Error:[/red] --verbose and --quiet are mutually exclusive")
        raise typer.Exit(1)

    logger = setup_logging(
        verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None
    )

    try:
        settings = resolve_config(
            config=config,
            detail=detail,
            fmt=fmt,
            fail_on_non_favored=fail_on_non_favored,
            min_compliance=min_compliance,
            verbose=verbose,
            quiet=quiet,
        )
        logger.debug(f"Loaded settings: {settings}")

        placement = load_snapshot(snapshot)
        locality_map = load_locality(locality) if locality is not None else None

        table_names = list(table) if table else placement.table_names
        if not table_names:
            err_console.print("[yellow]Snapshot contains no tables.[/yellow]")
            raise typer.Exit(0)

        reports = [
            analyze_snapshot(placement, name, locality_map, logger=logger)
            for name in table_names
        ]
        get_formatter(settings.output_format).render(reports, settings)

        failures = check_gates(reports, settings)
        for failure in failures:
            err_console.print(f"[red]FAIL:[/red] {failure}", highlight=False)
        if failures:
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except AssignmentVerifierError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Verification failed")
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1)
