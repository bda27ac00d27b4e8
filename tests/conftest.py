"""Shared test fixtures for Assignment Verifier tests."""

import pytest

from assignment_verifier.models import AssignmentSnapshot, Host, PlacementPlan, Shard


@pytest.fixture
def hosts():
    """Four region servers h1..h4 on the default port."""
    return [Host(f"h{i}", 60020) for i in range(1, 5)]


@pytest.fixture
def h1(hosts):
    return hosts[0]


@pytest.fixture
def h2(hosts):
    return hosts[1]


@pytest.fixture
def h3(hosts):
    return hosts[2]


@pytest.fixture
def h4(hosts):
    return hosts[3]


@pytest.fixture
def make_shards():
    """Factory: make_shards(3) -> [shard1, shard2, shard3]."""

    def _make(n, prefix="shard"):
        return [Shard(f"{prefix}{i}", f"enc{prefix}{i}") for i in range(1, n + 1)]

    return _make


@pytest.fixture
def sample_snapshot(hosts):
    """Two tables: 'orders' fully on its primary hosts, 'users' half unassigned."""
    h1, h2, h3, h4 = hosts
    orders = [Shard(f"orders,{i}", f"o{i}") for i in range(4)]
    users = [Shard(f"users,{i}", f"u{i}") for i in range(2)]
    shard_to_host = {
        orders[0]: h1,
        orders[1]: h2,
        orders[2]: h3,
        orders[3]: h1,
        users[0]: h4,
    }
    plan = {
        orders[0]: (h1, h2, h3),
        orders[1]: (h2, h3, h1),
        orders[2]: (h3, h1, h2),
        orders[3]: (h1, h3, h4),
        users[0]: (h1, h2, h3),
        users[1]: (h1, h2, h3),
    }
    return AssignmentSnapshot(
        table_to_shards={"orders": orders, "users": users},
        shard_to_host=shard_to_host,
        plan=PlacementPlan(plan),
    )
