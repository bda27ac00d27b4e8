"""Plain-text formatter: the classic console verification report."""

from typing import Iterable, List

from ..config import VerifierConfig
from ..models import Host, PreferenceRank, Shard
from ..report import VerificationReport
from .base import BaseFormatter, format_percent

RULE = "=============================="


class TextFormatter(BaseFormatter):
    """Tab-indented report, one block per table."""

    def render(self, reports: List[VerificationReport], config: VerifierConfig) -> None:
        print(self.format(reports, config))

    def format(self, reports: List[VerificationReport], config: VerifierConfig) -> str:
        return "\n".join(self._format_one(r, config) for r in reports)

    def _format_one(self, report: VerificationReport, config: VerifierConfig) -> str:
        self.check_filled(report)
        detail = config.detail
        lines = [
            f"Assignment Verification for Table: {report.table_name}",
            f"\tTotal shards : {report.total_shards}",
            f"\tTotal shards on favored hosts {report.total_favored}",
        ]
        for rank in PreferenceRank:
            lines.append(
                f"\t\tTotal shards on {rank.name} hosts: {report.favored_count(rank)}"
            )

        lines.append(f"\tTotal unassigned shards: {len(report.unassigned)}")
        if detail:
            lines.extend(_shard_lines(report.unassigned))
        lines.append(f"\tTotal shards NOT on favored hosts: {len(report.non_favored)}")
        if detail:
            lines.extend(_shard_lines(report.non_favored))
        lines.append(f"\tTotal shards without favored hosts: {len(report.without_valid_plan)}")
        if detail:
            lines.extend(_shard_lines(report.without_valid_plan))
        if report.faults:
            lines.append(f"\tTotal shards that could not be verified: {len(report.faults)}")
            if detail:
                lines.extend(f"\t\t{f.shard_name}: {f.reason}" for f in report.faults)

        actual = report.actual_locality_percent
        if actual is not None:
            precision = config.locality_precision
            lines.append("")
            lines.append(f"\tThe actual avg locality is {format_percent(actual, precision)} %")
            for rank in PreferenceRank:
                expected = report.expected_locality_percent(rank)
                lines.append(
                    f"\t\tThe expected avg locality if all shards on the {rank.name} hosts: "
                    f"{format_percent(expected, precision)} %"
                )

        lines.append("")
        lines.append(f"\tTotal hosting servers: {report.total_hosting_servers}")
        if report.total_hosting_servers:
            lines.append(
                f"\tAvg shards/host: {report.avg_per_host};"
                f"\tMax shards/host: {report.max_per_host};"
                f"\tMin shards/host: {report.min_per_host}"
            )
            lines.append(f"\tThe number of the most loaded hosts: {len(report.most_loaded)}")
            if detail:
                lines.extend(_host_lines(report.most_loaded, config.hosts_per_line))
            lines.append(f"\tThe number of the least loaded hosts: {len(report.least_loaded)}")
            if detail:
                lines.extend(_host_lines(report.least_loaded, config.hosts_per_line))
        lines.append(RULE)
        return "\n".join(lines)


def _shard_lines(shards: Iterable[Shard]) -> List[str]:
    return [f"\t\t{shard}" for shard in shards]


def _host_lines(hosts: Iterable[Host], per_line: int) -> List[str]:
    ordered = sorted(hosts)
    return [
        "\t\t" + "".join(f"{h.host_and_port} ; " for h in ordered[i:i + per_line]).rstrip()
        for i in range(0, len(ordered), per_line)
    ]
