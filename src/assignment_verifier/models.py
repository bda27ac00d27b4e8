"""Placement data model: shards, hosts, preferred-host plans and snapshots.

Everything here is plain, read-only data. The analyzer consumes these
types but never mutates them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# shard encoded name -> hostname -> fraction of the shard's data on that host
LocalityMap = Mapping[str, Mapping[str, float]]


class PreferenceRank(IntEnum):
    """Rank of a host within a shard's preferred-host list."""

    PRIMARY = 0
    SECONDARY = 1
    TERTIARY = 2

    def __str__(self) -> str:
        return self.name


FAVORED_NODES_NUM = len(PreferenceRank)


@dataclass(frozen=True, order=True)
class Host:
    """A serving node, identified by hostname and port."""

    hostname: str
    port: int = 0

    @classmethod
    def parse(cls, address: str) -> "Host":
        """Parse ``host:port`` (or a bare hostname) into a Host."""
        hostname, sep, port = address.strip().rpartition(":")
        if not sep:
            return cls(address.strip())
        if not hostname:
            raise ValueError(f"Missing hostname in address '{address}'")
        try:
            return cls(hostname, int(port))
        except ValueError:
            raise ValueError(f"Invalid port in address '{address}'") from None

    @property
    def host_and_port(self) -> str:
        return f"{self.hostname}:{self.port}"

    def __str__(self) -> str:
        return self.host_and_port


@dataclass(frozen=True, order=True)
class Shard:
    """One contiguous unit of a table's data.

    ``encoded_name`` is the stable key used by the locality map; ``name``
    is the human-readable form shown in reports.
    """

    name: str
    encoded_name: str = ""

    def __post_init__(self) -> None:
        if not self.encoded_name:
            object.__setattr__(self, "encoded_name", self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PlacementPlan:
    """Ranked preferred hosts per shard.

    A plan entry is valid only when it lists exactly ``FAVORED_NODES_NUM``
    hosts; shorter or longer entries are kept as-is so the analyzer can
    report them. A None entry means the shard has no plan, and an entry
    that is not a host sequence at all is stored untouched so that it
    faults that one shard during analysis.
    """

    assignments: Mapping[Shard, Tuple[Host, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {shard: _freeze_entry(hosts) for shard, hosts in self.assignments.items()}
        object.__setattr__(self, "assignments", frozen)

    def get_assignment(self, shard: Shard) -> Optional[Tuple[Host, ...]]:
        """Return the preferred hosts for a shard, or None if it has no plan."""
        return self.assignments.get(shard)

    def __len__(self) -> int:
        return len(self.assignments)

    def __contains__(self, shard: object) -> bool:
        return shard in self.assignments

    @staticmethod
    def is_valid_entry(favored: Optional[Sequence[Host]]) -> bool:
        return favored is not None and len(favored) == FAVORED_NODES_NUM

    @staticmethod
    def favored_position(favored: Sequence[Host], host: Host) -> Optional[PreferenceRank]:
        """Rank of ``host`` in ``favored`` (first match), or None if absent."""
        for i, candidate in enumerate(favored[:FAVORED_NODES_NUM]):
            if candidate == host:
                return PreferenceRank(i)
        return None


@dataclass(frozen=True)
class AssignmentSnapshot:
    """Point-in-time view of where every shard lives and where it should live.

    Attributes:
        table_to_shards: Full shard list per table
        shard_to_host: Host each shard is currently served from
        plan: Preferred hosts per shard
    """

    table_to_shards: Mapping[str, Tuple[Shard, ...]] = field(default_factory=dict)
    shard_to_host: Mapping[Shard, Host] = field(default_factory=dict)
    plan: PlacementPlan = field(default_factory=PlacementPlan)

    def __post_init__(self) -> None:
        tables = {name: tuple(shards) for name, shards in self.table_to_shards.items()}
        object.__setattr__(self, "table_to_shards", tables)

    @property
    def table_names(self) -> List[str]:
        return sorted(self.table_to_shards)

    def shards_for_table(self, table_name: str) -> Optional[Tuple[Shard, ...]]:
        return self.table_to_shards.get(table_name)

    def host_to_shards(self) -> Dict[Host, List[Shard]]:
        """Invert the current assignment."""
        result: Dict[Host, List[Shard]] = {}
        for shard, host in self.shard_to_host.items():
            result.setdefault(host, []).append(shard)
        return result


def _freeze_entry(hosts: Any) -> Any:
    if hosts is None or isinstance(hosts, (str, bytes)) or not isinstance(hosts, Iterable):
        return hosts
    return tuple(hosts)
