"""Assignment verification: classify every shard and measure host balance.

The analysis is two linear passes. The first walks the table's shard list
once, turning each shard into a :class:`ShardOutcome` and folding it into
running counters. The second walks the per-host load table to find the
average load and the tie-preserving sets of most and least loaded hosts.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..exceptions import InvalidLocalityScoreError, InvalidSnapshotError, UnknownTableError
from ..models import (
    FAVORED_NODES_NUM,
    AssignmentSnapshot,
    Host,
    LocalityMap,
    PlacementPlan,
    PreferenceRank,
    Shard,
)
from ..report import ShardFault, VerificationReport

UNKNOWN_SHARD = "unknown"

PlanLike = Union[PlacementPlan, Mapping[Shard, Sequence[Host]]]


class ShardStatus(Enum):
    """Where a shard landed after classification."""

    UNASSIGNED = "unassigned"
    NO_VALID_PLAN = "no_valid_plan"
    NON_FAVORED = "non_favored"
    FAVORED = "favored"
    FAULTED = "faulted"


@dataclass(frozen=True)
class ShardOutcome:
    """Classification of a single shard.

    ``host`` is set whenever the shard is assigned (it counts toward that
    host's load). ``rank`` and the locality fields are set only for
    FAVORED outcomes; a locality entry of None means no score was recorded.
    """

    status: ShardStatus
    shard: Optional[Shard] = None
    host: Optional[Host] = None
    rank: Optional[PreferenceRank] = None
    locality_checked: bool = False
    favored_locality: Tuple[Optional[float], ...] = ()
    actual_locality: Optional[float] = None
    fault: Optional[ShardFault] = None


@dataclass(frozen=True)
class LoadSummary:
    """Second-pass result over the per-host load table."""

    total_hosting_servers: int = 0
    avg_per_host: int = 0
    max_per_host: int = 0
    min_per_host: int = 0
    most_loaded: FrozenSet[Host] = frozenset()
    least_loaded: FrozenSet[Host] = frozenset()


def classify_shard(
    shard: Optional[Shard],
    current_assignment: Mapping[Shard, Host],
    plan: PlacementPlan,
    locality_map: Optional[LocalityMap] = None,
) -> ShardOutcome:
    """Classify one shard against its current host and preferred hosts.

    Never raises: malformed input becomes a FAULTED outcome carrying the
    reason, so the caller can keep going with the rest of the table.
    """
    if shard is None:
        return _faulted(None, "missing shard reference")
    try:
        return _classify(shard, current_assignment, plan, locality_map)
    except Exception as e:
        return _faulted(shard, f"{type(e).__name__}: {e}")


def _classify(
    shard: Shard,
    current_assignment: Mapping[Shard, Host],
    plan: PlacementPlan,
    locality_map: Optional[LocalityMap],
) -> ShardOutcome:
    host = current_assignment.get(shard)
    if host is None:
        return ShardOutcome(ShardStatus.UNASSIGNED, shard)

    favored = plan.get_assignment(shard)
    if not PlacementPlan.is_valid_entry(favored):
        return ShardOutcome(ShardStatus.NO_VALID_PLAN, shard, host)

    rank = PlacementPlan.favored_position(favored, host)
    if rank is None:
        return ShardOutcome(ShardStatus.NON_FAVORED, shard, host)

    if locality_map is None:
        return ShardOutcome(ShardStatus.FAVORED, shard, host, rank)

    scores = locality_map.get(shard.encoded_name)
    if scores is None:
        # Shards without store files have no locality data.
        return ShardOutcome(ShardStatus.FAVORED, shard, host, rank, locality_checked=True)

    favored_locality = tuple(
        _locality_score(shard, scores, favored[r].hostname) for r in PreferenceRank
    )
    return ShardOutcome(
        ShardStatus.FAVORED,
        shard,
        host,
        rank,
        locality_checked=True,
        favored_locality=favored_locality,
        actual_locality=_locality_score(shard, scores, host.hostname),
    )


def _locality_score(shard: Shard, scores: Mapping[str, float], hostname: str) -> Optional[float]:
    raw = scores.get(hostname)
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (numbers.Real, Decimal)):
        raise InvalidLocalityScoreError(shard.name, hostname, raw)
    score = float(raw)
    if not 0.0 <= score <= 1.0:
        raise InvalidLocalityScoreError(shard.name, hostname, raw)
    return score


def _faulted(shard: Optional[Shard], reason: str) -> ShardOutcome:
    name = shard.name if shard is not None else UNKNOWN_SHARD
    return ShardOutcome(ShardStatus.FAULTED, shard, fault=ShardFault(name, reason))


def summarize_load(host_loads: Mapping[Host, int], total_shards: int) -> LoadSummary:
    """Average, extremes and tie-preserving extreme sets of the host loads."""
    max_count = 0
    min_count = 0
    most: set = set()
    least: set = set()
    seeded = False

    for host, count in host_loads.items():
        if count <= 0:
            continue
        if not seeded:
            max_count = min_count = count
            most = {host}
            least = {host}
            seeded = True
            continue

        if count > max_count:
            max_count = count
            most = {host}
        elif count == max_count:
            most.add(host)

        if count < min_count:
            min_count = count
            least = {host}
        elif count == min_count:
            least.add(host)

    hosting = sum(1 for count in host_loads.values() if count > 0)
    return LoadSummary(
        total_hosting_servers=hosting,
        avg_per_host=(total_shards // hosting) if hosting else 0,
        max_per_host=max_count,
        min_per_host=min_count,
        most_loaded=frozenset(most),
        least_loaded=frozenset(least),
    )


def analyze(
    table_name: str,
    shards: Optional[Iterable[Optional[Shard]]],
    current_assignment: Mapping[Shard, Host],
    placement_plan: PlanLike,
    locality_map: Optional[LocalityMap] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> VerificationReport:
    """Verify a table's live placement against its preferred-host plan.

    Args:
        table_name: Table being verified (used for reporting only)
        shards: The table's full shard list; defines the total count
        current_assignment: Shard -> host it is served from now
        placement_plan: Shard -> ranked preferred hosts
        locality_map: Optional encoded shard name -> hostname -> score
        logger: Where per-shard faults are logged; defaults to this module's

    Returns:
        A filled, immutable VerificationReport.

    Raises:
        InvalidSnapshotError: If ``shards`` is None.
    """
    log = logger if logger is not None else logging.getLogger(__name__)

    if shards is None:
        raise InvalidSnapshotError("no shard list", source=table_name)

    plan = placement_plan if isinstance(placement_plan, PlacementPlan) else PlacementPlan(
        dict(placement_plan)
    )
    shard_list = list(shards)

    unassigned: List[Shard] = []
    without_plan: List[Shard] = []
    non_favored: List[Shard] = []
    faults: List[ShardFault] = []
    favored_counts = [0] * FAVORED_NODES_NUM
    favored_locality_sums = [0.0] * FAVORED_NODES_NUM
    actual_locality_sum = 0.0
    total_favored = 0
    locality_enforced = False
    host_loads: Dict[Host, int] = {}

    for shard in shard_list:
        outcome = classify_shard(shard, current_assignment, plan, locality_map)

        if outcome.status is ShardStatus.FAULTED:
            fault = outcome.fault
            log.error(
                "Cannot verify the assignment of shard %s in table %s because of %s",
                fault.shard_name,
                table_name,
                fault.reason,
            )
            faults.append(fault)
            continue

        if outcome.status is ShardStatus.UNASSIGNED:
            unassigned.append(outcome.shard)
            continue

        host_loads[outcome.host] = host_loads.get(outcome.host, 0) + 1

        if outcome.status is ShardStatus.NO_VALID_PLAN:
            without_plan.append(outcome.shard)
            continue
        if outcome.status is ShardStatus.NON_FAVORED:
            non_favored.append(outcome.shard)
            continue

        favored_counts[outcome.rank] += 1
        total_favored += 1

        if outcome.locality_checked:
            locality_enforced = True
        for r, score in enumerate(outcome.favored_locality):
            if score is not None:
                favored_locality_sums[r] += score
        if outcome.actual_locality is not None:
            actual_locality_sum += outcome.actual_locality

    load = summarize_load(host_loads, len(shard_list))

    log.debug(
        "Verified %d shards of table %s: %d favored, %d unassigned, %d without plan, "
        "%d non-favored, %d faulted",
        len(shard_list),
        table_name,
        total_favored,
        len(unassigned),
        len(without_plan),
        len(non_favored),
        len(faults),
    )

    return VerificationReport(
        table_name=table_name,
        locality_enforced=locality_enforced,
        filled=True,
        total_shards=len(shard_list),
        favored_counts=tuple(favored_counts),
        total_favored=total_favored,
        unassigned=tuple(unassigned),
        without_valid_plan=tuple(without_plan),
        non_favored=tuple(non_favored),
        faults=tuple(faults),
        favored_locality_sums=tuple(favored_locality_sums),
        actual_locality_sum=actual_locality_sum,
        host_loads=dict(host_loads),
        total_hosting_servers=load.total_hosting_servers,
        avg_per_host=load.avg_per_host,
        max_per_host=load.max_per_host,
        min_per_host=load.min_per_host,
        most_loaded=load.most_loaded,
        least_loaded=load.least_loaded,
    )


def analyze_snapshot(
    snapshot: AssignmentSnapshot,
    table_name: str,
    locality_map: Optional[LocalityMap] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> VerificationReport:
    """Verify one table of a snapshot.

    Raises:
        UnknownTableError: If the snapshot has no shard list for the table.
    """
    shards = snapshot.shards_for_table(table_name)
    if shards is None:
        raise UnknownTableError(table_name)
    return analyze(
        table_name,
        shards,
        snapshot.shard_to_host,
        snapshot.plan,
        locality_map,
        logger=logger,
    )
