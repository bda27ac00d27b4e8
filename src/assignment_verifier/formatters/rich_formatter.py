"""Rich terminal formatter for verification reports."""

import io
from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import VerifierConfig
from ..models import PreferenceRank
from ..report import VerificationReport
from .base import BaseFormatter, format_percent

console = Console()


def _compliance_label(percent: float) -> str:
    if percent >= 95.0:
        return f"[green]{percent:.1f}%[/green]"
    elif percent >= 80.0:
        return f"[yellow]{percent:.1f}%[/yellow]"
    else:
        return f"[red bold]{percent:.1f}%[/red bold]"


def _count_style(count: int) -> str:
    return f"[red]{count}[/red]" if count else "[dim]0[/dim]"


class RichFormatter(BaseFormatter):
    """Summary panel plus compliance, locality and load tables per table."""

    def render(self, reports: List[VerificationReport], config: VerifierConfig) -> None:
        for report in reports:
            self._print_report(console, report, config)

    def format(self, reports: List[VerificationReport], config: VerifierConfig) -> str:
        buffer = io.StringIO()
        out = Console(file=buffer, width=100, force_terminal=False, color_system=None)
        for report in reports:
            self._print_report(out, report, config)
        return buffer.getvalue()

    def _print_report(self, out: Console, report: VerificationReport, config: VerifierConfig) -> None:
        self.check_filled(report)

        out.print(
            Panel(
                f"[bold]{report.total_shards}[/bold] shards, "
                f"[bold]{report.total_hosting_servers}[/bold] hosting servers, "
                f"compliance {_compliance_label(report.compliance_percent)}",
                title=f"[bold cyan]Assignment Verification: {report.table_name}[/bold cyan]",
                expand=False,
            )
        )

        placement = Table(title="Placement", show_header=True, header_style="bold")
        placement.add_column("Category")
        placement.add_column("Shards", justify="right")
        for rank in PreferenceRank:
            placement.add_row(f"On {rank.name} host", str(report.favored_count(rank)))
        placement.add_row("[bold]On favored hosts[/bold]", f"[bold]{report.total_favored}[/bold]")
        placement.add_row("Unassigned", _count_style(len(report.unassigned)))
        placement.add_row("NOT on favored hosts", _count_style(len(report.non_favored)))
        placement.add_row("Without favored hosts", _count_style(len(report.without_valid_plan)))
        if report.faults:
            placement.add_row("Could not be verified", _count_style(len(report.faults)))
        out.print(placement)

        if config.detail:
            for label, shards in (
                ("Unassigned", report.unassigned),
                ("NOT on favored hosts", report.non_favored),
                ("Without favored hosts", report.without_valid_plan),
            ):
                if shards:
                    out.print(f"[bold]{label}:[/bold]")
                    for shard in shards:
                        out.print(f"  {shard}", markup=False)
            if report.faults:
                out.print("[bold]Could not be verified:[/bold]")
                for fault in report.faults:
                    out.print(f"  {fault.shard_name}: {fault.reason}", markup=False)

        actual = report.actual_locality_percent
        if actual is not None:
            precision = config.locality_precision
            locality = Table(title="Locality", show_header=True, header_style="bold")
            locality.add_column("Placement")
            locality.add_column("Avg locality", justify="right")
            locality.add_row("Actual", f"{format_percent(actual, precision)} %")
            for rank in PreferenceRank:
                expected = report.expected_locality_percent(rank)
                locality.add_row(
                    f"All on {rank.name} hosts", f"{format_percent(expected, precision)} %"
                )
            out.print(locality)

        if report.total_hosting_servers:
            load = Table(title="Load", show_header=True, header_style="bold")
            load.add_column("Metric")
            load.add_column("Value", justify="right")
            load.add_row("Hosting servers", str(report.total_hosting_servers))
            load.add_row("Avg shards/host", str(report.avg_per_host))
            load.add_row("Max shards/host", str(report.max_per_host))
            load.add_row("Min shards/host", str(report.min_per_host))
            load.add_row("Most loaded hosts", str(len(report.most_loaded)))
            load.add_row("Least loaded hosts", str(len(report.least_loaded)))
            load.add_row("Load Gini", f"{report.load_gini:.3f}")
            out.print(load)

            if config.detail:
                for label, hosts in (
                    ("Most loaded", report.most_loaded),
                    ("Least loaded", report.least_loaded),
                ):
                    names = [h.host_and_port for h in sorted(hosts)]
                    out.print(f"[bold]{label}:[/bold] " + " ; ".join(names), highlight=False)
        else:
            out.print("[dim]No hosting servers[/dim]")
        out.print()
