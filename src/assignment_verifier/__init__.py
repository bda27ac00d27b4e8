"""
Assignment Verifier - shard placement compliance and balance reports.

Given a snapshot of where each shard of a table is served from and the
ranked hosts it is supposed to be served from, produce a report of which
shards are on their preferred hosts (and at which rank), which are not,
how much data locality each placement would give, and how evenly the
shards are spread across hosts.
"""

__version__ = "0.1.0"

from .analysis import analyze, analyze_snapshot
from .models import (
    FAVORED_NODES_NUM,
    AssignmentSnapshot,
    Host,
    PlacementPlan,
    PreferenceRank,
    Shard,
)
from .report import ShardFault, VerificationReport

__all__ = [
    "analyze",  # Main entry point
    "analyze_snapshot",
    "AssignmentSnapshot",
    "Host",
    "PlacementPlan",
    "PreferenceRank",
    "Shard",
    "FAVORED_NODES_NUM",
    "ShardFault",
    "VerificationReport",
]
