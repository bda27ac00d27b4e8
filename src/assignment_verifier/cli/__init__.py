"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="assignment-verifier",
    help="Assignment Verifier - check shard placement against its preferred-host plan",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True, no_args_is_help=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Verify where shards run against where they are meant to run.
    """
    if version:
        console.print(
            f"[bold cyan]Assignment Verifier[/bold cyan] version [green]{__version__}[/green]"
        )
        raise typer.Exit(0)


# Import subcommands to register them
from .verify import verify as _verify  # noqa: F401, E402
from .tables import tables as _tables  # noqa: F401, E402
