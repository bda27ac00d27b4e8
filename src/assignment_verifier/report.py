"""Immutable verification report produced by the analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from .math import Gini, Statistics
from .models import FAVORED_NODES_NUM, Host, PreferenceRank, Shard


@dataclass(frozen=True)
class ShardFault:
    """A shard that could not be verified, with the reason it was skipped."""

    shard_name: str
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {"shard": self.shard_name, "reason": self.reason}


@dataclass(frozen=True)
class VerificationReport:
    """Compliance and balance findings for one table.

    Reports are built once by :func:`assignment_verifier.analysis.analyze`
    and never change afterwards. A default-constructed report is empty and
    has ``filled`` set to False; renderers use that flag to flag misuse.

    Every shard of the table appears in exactly one bucket: ``unassigned``,
    ``without_valid_plan``, ``non_favored``, ``faults``, or one of the
    per-rank counts in ``favored_counts``.

    ``locality_enforced`` is True once a locality map was supplied and at
    least one compliant shard reached the locality step, even when the map
    held no score for it. An empty map with a compliant shard therefore
    reports 0 % actual locality rather than None.

    ``host_loads`` is a read-only view and takes no part in equality or
    hashing; the load fields derived from it do.
    """

    # ── Identity ──────────────────────────────────────────────────
    table_name: str = ""
    locality_enforced: bool = False
    filled: bool = False

    # ── Counts ────────────────────────────────────────────────────
    total_shards: int = 0
    favored_counts: Tuple[int, ...] = (0,) * FAVORED_NODES_NUM
    total_favored: int = 0

    # ── Classification ────────────────────────────────────────────
    unassigned: Tuple[Shard, ...] = ()
    without_valid_plan: Tuple[Shard, ...] = ()
    non_favored: Tuple[Shard, ...] = ()
    faults: Tuple[ShardFault, ...] = ()

    # ── Locality ──────────────────────────────────────────────────
    favored_locality_sums: Tuple[float, ...] = (0.0,) * FAVORED_NODES_NUM
    actual_locality_sum: float = 0.0

    # ── Load ──────────────────────────────────────────────────────
    host_loads: Mapping[Host, int] = field(default_factory=dict, compare=False)
    total_hosting_servers: int = 0
    avg_per_host: int = 0
    max_per_host: int = 0
    min_per_host: int = 0
    most_loaded: FrozenSet[Host] = frozenset()
    least_loaded: FrozenSet[Host] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "host_loads", MappingProxyType(dict(self.host_loads)))

    def favored_count(self, rank: PreferenceRank) -> int:
        """Shards currently served from their ``rank`` preferred host."""
        return self.favored_counts[rank]

    @property
    def classified_total(self) -> int:
        """Sum of all buckets; equals ``total_shards`` for a filled report."""
        return (
            sum(self.favored_counts)
            + len(self.unassigned)
            + len(self.without_valid_plan)
            + len(self.non_favored)
            + len(self.faults)
        )

    @property
    def compliance_percent(self) -> float:
        if self.total_shards == 0:
            return 100.0
        return 100.0 * self.total_favored / self.total_shards

    @property
    def actual_locality_percent(self) -> Optional[float]:
        """Average locality of the hosts shards actually run on, in percent."""
        if not self.locality_enforced or self.total_shards == 0:
            return None
        return 100.0 * self.actual_locality_sum / self.total_shards

    def expected_locality_percent(self, rank: PreferenceRank) -> Optional[float]:
        """Average locality if every shard ran on its ``rank`` host, in percent."""
        if not self.locality_enforced or self.total_shards == 0:
            return None
        return 100.0 * self.favored_locality_sums[rank] / self.total_shards

    @property
    def load_gini(self) -> float:
        if not self.host_loads:
            return 0.0
        return Gini.gini_coefficient(list(self.host_loads.values()))

    @property
    def load_stdev(self) -> float:
        return Statistics.stdev(list(self.host_loads.values()))

    @property
    def load_cv(self) -> float:
        """Coefficient of variation of shards per host."""
        return Statistics.coefficient_of_variation(list(self.host_loads.values()))

    def to_dict(self) -> Dict[str, Any]:
        """Plain-value form for JSON output."""
        return {
            "table": self.table_name,
            "filled": self.filled,
            "total_shards": self.total_shards,
            "favored": {
                "total": self.total_favored,
                "by_rank": {rank.name: self.favored_counts[rank] for rank in PreferenceRank},
                "compliance_percent": self.compliance_percent,
            },
            "unassigned": [str(s) for s in self.unassigned],
            "without_valid_plan": [str(s) for s in self.without_valid_plan],
            "non_favored": [str(s) for s in self.non_favored],
            "faults": [f.to_dict() for f in self.faults],
            "locality": {
                "enforced": self.locality_enforced,
                "actual_percent": self.actual_locality_percent,
                "expected_percent": {
                    rank.name: self.expected_locality_percent(rank) for rank in PreferenceRank
                },
            },
            "load": {
                "hosting_servers": self.total_hosting_servers,
                "avg_per_host": self.avg_per_host,
                "max_per_host": self.max_per_host,
                "min_per_host": self.min_per_host,
                "most_loaded": sorted(str(h) for h in self.most_loaded),
                "least_loaded": sorted(str(h) for h in self.least_loaded),
                "gini": self.load_gini,
                "stdev": self.load_stdev,
                "cv": self.load_cv,
            },
        }
