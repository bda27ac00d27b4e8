"""Placement snapshot files."""

from .loader import load_locality, load_snapshot, parse_snapshot

__all__ = ["load_snapshot", "load_locality", "parse_snapshot"]
