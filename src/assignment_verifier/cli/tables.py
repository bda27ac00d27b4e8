"""Tables CLI command -- list the tables in a snapshot."""

from pathlib import Path

import typer
from rich.table import Table

from ..exceptions import AssignmentVerifierError
from ..snapshot import load_snapshot
from . import app
from ._common import console, err_console


@app.command()
def tables(
    snapshot: Path = typer.Argument(
        ...,
        help="Placement snapshot file (JSON)",
        dir_okay=False,
    ),
):
    """
    List tables in a snapshot with their shard and assignment counts.
    """
    try:
        placement = load_snapshot(snapshot)
    except AssignmentVerifierError as e:
        err_console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1)

    table = Table(title="Tables", show_header=True, header_style="bold")
    table.add_column("Table")
    table.add_column("Shards", justify="right")
    table.add_column("Assigned", justify="right")
    table.add_column("With plan", justify="right")

    for name in placement.table_names:
        shards = placement.shards_for_table(name) or ()
        assigned = sum(1 for s in shards if s in placement.shard_to_host)
        planned = sum(1 for s in shards if s in placement.plan)
        table.add_row(name, str(len(shards)), str(assigned), str(planned))

    console.print(table)
    console.print(
        f"{len(placement.host_to_shards())} hosting servers, {len(placement.plan)} plan entries",
        highlight=False,
    )
