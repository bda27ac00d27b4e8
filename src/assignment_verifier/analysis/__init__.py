"""Placement verification analysis."""

from .verifier import (
    LoadSummary,
    ShardOutcome,
    ShardStatus,
    analyze,
    analyze_snapshot,
    classify_shard,
    summarize_load,
)

__all__ = [
    "analyze",
    "analyze_snapshot",
    "classify_shard",
    "summarize_load",
    "ShardOutcome",
    "ShardStatus",
    "LoadSummary",
]
