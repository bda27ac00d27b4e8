"""Tests for analysis/verifier.py - shard classification and report building."""

import logging
from decimal import Decimal

import numpy as np
import pytest

from assignment_verifier.analysis import (
    ShardStatus,
    analyze,
    analyze_snapshot,
    classify_shard,
)
from assignment_verifier.exceptions import InvalidSnapshotError, UnknownTableError
from assignment_verifier.models import Host, PlacementPlan, PreferenceRank, Shard


def _assert_partition(report):
    """Every shard lands in exactly one bucket."""
    buckets = [
        set(report.unassigned),
        set(report.without_valid_plan),
        set(report.non_favored),
    ]
    for i, a in enumerate(buckets):
        for b in buckets[i + 1:]:
            assert not (a & b)
    assert report.classified_total == report.total_shards
    assert sum(report.favored_counts) == report.total_favored


class TestScenarios:
    """Worked examples of the classification rules."""

    def test_mixed_ranks_and_unassigned(self, make_shards, h1, h2, h3):
        shard1, shard2, shard3 = make_shards(3)
        plan = {s: (h1, h2, h3) for s in (shard1, shard2, shard3)}
        current = {shard1: h1, shard2: h2}

        report = analyze("t", [shard1, shard2, shard3], current, plan)

        assert report.unassigned == (shard3,)
        assert report.favored_count(PreferenceRank.PRIMARY) == 1
        assert report.favored_count(PreferenceRank.SECONDARY) == 1
        assert report.favored_count(PreferenceRank.TERTIARY) == 0
        assert report.total_favored == 2
        assert report.non_favored == ()
        _assert_partition(report)

    def test_short_plan_is_not_valid(self, make_shards, h1, h2):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: h1}, {shard: (h1, h2)})

        assert report.without_valid_plan == (shard,)
        assert report.total_favored == 0
        _assert_partition(report)

    def test_long_plan_is_not_valid(self, make_shards, hosts):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: hosts[0]}, {shard: tuple(hosts)})

        assert report.without_valid_plan == (shard,)

    def test_missing_plan_is_not_valid(self, make_shards, h1):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: h1}, {})

        assert report.without_valid_plan == (shard,)
        # Still counts toward host load
        assert report.host_loads == {h1: 1}

    def test_none_plan_entry_is_not_valid(self, make_shards, h1, h2, h3):
        s1, s2 = make_shards(2)
        report = analyze("t", [s1, s2], {s1: h1, s2: h1}, {s1: None, s2: (h1, h2, h3)})

        assert report.without_valid_plan == (s1,)
        assert report.favored_count(PreferenceRank.PRIMARY) == 1
        assert report.faults == ()
        _assert_partition(report)

    def test_non_sequence_plan_entry_faults_only_that_shard(self, make_shards, h1, h2, h3):
        s1, s2 = make_shards(2)
        report = analyze("t", [s1, s2], {s1: h1, s2: h1}, {s1: 42, s2: (h1, h2, h3)})

        assert [f.shard_name for f in report.faults] == [s1.name]
        assert "TypeError" in report.faults[0].reason
        assert report.total_favored == 1
        assert report.host_loads == {h1: 1}
        _assert_partition(report)

    def test_host_outside_plan_is_non_favored(self, make_shards, h1, h2, h3, h4):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: h4}, {shard: (h1, h2, h3)})

        assert report.non_favored == (shard,)
        assert report.total_favored == 0
        assert report.host_loads == {h4: 1}
        _assert_partition(report)

    def test_load_extremes_keep_ties(self, make_shards, h1, h2, h3):
        shards = make_shards(5)
        current = {
            shards[0]: h1,
            shards[1]: h1,
            shards[2]: h1,
            shards[3]: h2,
            shards[4]: h3,
        }
        plan = {s: (h1, h2, h3) for s in shards}

        report = analyze("t", shards, current, plan)

        assert report.max_per_host == 3
        assert report.most_loaded == frozenset({h1})
        assert report.min_per_host == 1
        assert report.least_loaded == frozenset({h2, h3})
        assert report.total_hosting_servers == 3
        assert report.avg_per_host == 1

    def test_rank_and_actual_locality_accumulate_independently(self, make_shards, h1, h2, h3):
        (shard1,) = make_shards(1)
        plan = {shard1: (h1, h2, h3)}
        current = {shard1: h2}
        locality = {shard1.encoded_name: {"h1": 0.8, "h2": 0.5}}

        report = analyze("t", [shard1], current, plan, locality)

        assert report.locality_enforced is True
        assert report.favored_locality_sums[PreferenceRank.PRIMARY] == pytest.approx(0.8)
        assert report.favored_locality_sums[PreferenceRank.SECONDARY] == pytest.approx(0.5)
        assert report.favored_locality_sums[PreferenceRank.TERTIARY] == 0.0
        assert report.actual_locality_sum == pytest.approx(0.5)


class TestClassifyShard:
    """Tests for the per-shard result type."""

    def test_favored_outcome_carries_rank_and_host(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        outcome = classify_shard(shard, {shard: h3}, PlacementPlan({shard: (h1, h2, h3)}))

        assert outcome.status is ShardStatus.FAVORED
        assert outcome.rank is PreferenceRank.TERTIARY
        assert outcome.host == h3
        assert outcome.locality_checked is False

    def test_unassigned_outcome_has_no_host(self, make_shards):
        (shard,) = make_shards(1)
        outcome = classify_shard(shard, {}, PlacementPlan())

        assert outcome.status is ShardStatus.UNASSIGNED
        assert outcome.host is None

    def test_none_shard_is_faulted_as_unknown(self):
        outcome = classify_shard(None, {}, PlacementPlan())

        assert outcome.status is ShardStatus.FAULTED
        assert outcome.fault.shard_name == "unknown"

    def test_lookup_exception_is_faulted(self, make_shards):
        (shard,) = make_shards(1)

        class Exploding(dict):
            def get(self, key, default=None):
                raise KeyError("backend gone")

        outcome = classify_shard(shard, Exploding(), PlacementPlan())

        assert outcome.status is ShardStatus.FAULTED
        assert outcome.fault.shard_name == shard.name
        assert "KeyError" in outcome.fault.reason

    def test_out_of_range_locality_is_faulted(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        outcome = classify_shard(
            shard,
            {shard: h1},
            PlacementPlan({shard: (h1, h2, h3)}),
            {shard.encoded_name: {"h1": 1.7}},
        )

        assert outcome.status is ShardStatus.FAULTED
        assert "InvalidLocalityScoreError" in outcome.fault.reason

    def test_first_match_wins_for_duplicate_hosts(self, make_shards, h1, h2):
        (shard,) = make_shards(1)
        outcome = classify_shard(shard, {shard: h2}, PlacementPlan({shard: (h1, h2, h2)}))

        assert outcome.rank is PreferenceRank.SECONDARY

    def test_same_hostname_other_port_is_not_favored(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        outcome = classify_shard(
            shard, {shard: Host("h1", 60030)}, PlacementPlan({shard: (h1, h2, h3)})
        )

        assert outcome.status is ShardStatus.NON_FAVORED


class TestFaults:
    """Bad shards are recorded and skipped without aborting the run."""

    def test_none_shard_goes_to_faults(self, make_shards, h1, h2, h3, caplog):
        shards = make_shards(2)
        plan = {s: (h1, h2, h3) for s in shards}
        current = {shards[0]: h1, shards[1]: h1}

        with caplog.at_level(logging.ERROR):
            report = analyze("t", [shards[0], None, shards[1]], current, plan)

        assert report.total_shards == 3
        assert report.total_favored == 2
        assert len(report.faults) == 1
        assert report.faults[0].shard_name == "unknown"
        assert report.host_loads == {h1: 2}
        assert "Cannot verify the assignment" in caplog.text
        _assert_partition(report)

    def test_faulted_shard_contributes_nothing_else(self, make_shards, h1, h2, h3):
        good, bad = make_shards(2)
        plan = {good: (h1, h2, h3), bad: (h1, h2, h3)}
        current = {good: h1, bad: h2}
        locality = {
            good.encoded_name: {"h1": 0.5},
            bad.encoded_name: {"h1": 0.9, "h2": -0.1},
        }

        report = analyze("t", [good, bad], current, plan, locality)

        assert [f.shard_name for f in report.faults] == [bad.name]
        assert report.favored_count(PreferenceRank.SECONDARY) == 0
        assert report.favored_locality_sums[PreferenceRank.PRIMARY] == pytest.approx(0.5)
        assert report.host_loads == {h1: 1}
        _assert_partition(report)

    def test_injected_logger_receives_faults(self, make_shards):
        logger = logging.getLogger("test.injected")
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Collect()
        logger.addHandler(handler)
        try:
            analyze("t", [None], {}, {}, logger=logger)
        finally:
            logger.removeHandler(handler)

        assert len(records) == 1
        assert records[0].levelno == logging.ERROR

    def test_none_shard_list_raises(self):
        with pytest.raises(InvalidSnapshotError):
            analyze("t", None, {}, {})


class TestLocality:
    def test_without_map_locality_not_enforced(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: h1}, {shard: (h1, h2, h3)})

        assert report.locality_enforced is False
        assert report.actual_locality_percent is None

    def test_shard_without_entry_does_not_shift_sums(self, make_shards, h1, h2, h3):
        a, b = make_shards(2)
        plan = {a: (h1, h2, h3), b: (h1, h2, h3)}
        current = {a: h1, b: h1}
        with_b = analyze("t", [a, b], current, plan, {a.encoded_name: {"h1": 1.0}})
        only_a = analyze("t", [a], {a: h1}, {a: (h1, h2, h3)}, {a.encoded_name: {"h1": 1.0}})

        assert with_b.favored_locality_sums == only_a.favored_locality_sums
        assert with_b.actual_locality_sum == only_a.actual_locality_sum

    def test_missing_host_scores_are_skipped(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        report = analyze(
            "t", [shard], {shard: h1}, {shard: (h1, h2, h3)}, {shard.encoded_name: {"h3": 0.25}}
        )

        assert report.favored_locality_sums == (0.0, 0.0, 0.25)
        assert report.actual_locality_sum == 0.0

    def test_non_favored_shard_not_counted_for_locality(self, make_shards, h1, h2, h3, h4):
        (shard,) = make_shards(1)
        report = analyze(
            "t", [shard], {shard: h4}, {shard: (h1, h2, h3)}, {shard.encoded_name: {"h4": 1.0}}
        )

        assert report.locality_enforced is False
        assert report.actual_locality_sum == 0.0

    def test_empty_map_still_enforces(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        report = analyze("t", [shard], {shard: h1}, {shard: (h1, h2, h3)}, {})

        assert report.locality_enforced is True
        assert report.actual_locality_percent == 0.0

    def test_numpy_and_decimal_scores_accepted(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        scores = {"h1": np.float32(0.5), "h2": Decimal("0.25"), "h3": np.int64(1)}
        report = analyze(
            "t", [shard], {shard: h1}, {shard: (h1, h2, h3)}, {shard.encoded_name: scores}
        )

        assert report.faults == ()
        assert report.favored_locality_sums == pytest.approx((0.5, 0.25, 1.0))
        assert report.actual_locality_sum == pytest.approx(0.5)

    def test_non_numeric_score_is_faulted(self, make_shards, h1, h2, h3):
        (shard,) = make_shards(1)
        report = analyze(
            "t", [shard], {shard: h1}, {shard: (h1, h2, h3)}, {shard.encoded_name: {"h1": "high"}}
        )

        assert len(report.faults) == 1
        assert report.total_favored == 0


class TestReportProperties:
    def test_empty_table(self):
        report = analyze("empty", [], {}, {})

        assert report.filled is True
        assert report.total_shards == 0
        assert report.total_hosting_servers == 0
        assert report.avg_per_host == 0
        assert report.most_loaded == frozenset()
        assert report.least_loaded == frozenset()

    def test_floor_division_contract(self, make_shards, h1, h2, h3):
        shards = make_shards(7)
        current = {s: (h1, h2, h3)[i % 3] for i, s in enumerate(shards)}
        report = analyze("t", shards, current, {})

        n = report.total_hosting_servers
        assert report.avg_per_host * n <= report.total_shards < (report.avg_per_host + 1) * n

    def test_extreme_sets_only_contain_assigned_hosts(self, make_shards, hosts):
        shards = make_shards(6)
        current = {s: hosts[i % 2] for i, s in enumerate(shards[:5])}
        report = analyze("t", shards, current, {})

        for host in report.most_loaded:
            assert report.host_loads[host] == report.max_per_host
        for host in report.least_loaded:
            assert report.host_loads[host] == report.min_per_host
        assert report.most_loaded | report.least_loaded <= set(current.values())

    def test_all_hosts_equal_share_both_sets(self, make_shards, h1, h2):
        shards = make_shards(4)
        current = {shards[0]: h1, shards[1]: h2, shards[2]: h1, shards[3]: h2}
        report = analyze("t", shards, current, {})

        assert report.most_loaded == report.least_loaded == frozenset({h1, h2})
        assert report.max_per_host == report.min_per_host == 2

    def test_idempotent(self, sample_snapshot):
        first = analyze_snapshot(sample_snapshot, "orders")
        second = analyze_snapshot(sample_snapshot, "orders")

        assert first == second

    def test_inputs_not_mutated(self, make_shards, h1, h2, h3):
        shards = make_shards(2)
        current = {shards[0]: h1}
        plan = {shards[0]: (h1, h2, h3)}
        locality = {shards[0].encoded_name: {"h1": 0.4}}

        analyze("t", shards, current, plan, locality)

        assert current == {shards[0]: h1}
        assert plan == {shards[0]: (h1, h2, h3)}
        assert locality == {shards[0].encoded_name: {"h1": 0.4}}


class TestAnalyzeSnapshot:
    def test_orders_table(self, sample_snapshot, h1):
        report = analyze_snapshot(sample_snapshot, "orders")

        assert report.table_name == "orders"
        assert report.total_shards == 4
        assert report.favored_count(PreferenceRank.PRIMARY) == 4
        assert report.most_loaded == frozenset({h1})
        assert report.max_per_host == 2

    def test_users_table(self, sample_snapshot):
        report = analyze_snapshot(sample_snapshot, "users")

        assert len(report.unassigned) == 1
        assert len(report.non_favored) == 1
        _assert_partition(report)

    def test_unknown_table_raises(self, sample_snapshot):
        with pytest.raises(UnknownTableError, match="missing"):
            analyze_snapshot(sample_snapshot, "missing")
