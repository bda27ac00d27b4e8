"""Read already-acquired placement snapshots and locality data from JSON.

Snapshot document::

    {
      "tables": {"orders": ["a1b2", {"name": "orders,,1.a1b2.", "encoded_name": "a1b2"}]},
      "assignments": {"a1b2": "rs1.example.com:60020"},
      "plan": {"a1b2": ["rs1.example.com:60020", "rs2.example.com:60020", "rs3.example.com:60020"]}
    }

Assignments and plan entries are keyed by encoded shard name. Locality
document: ``{"a1b2": {"rs1.example.com": 0.8}}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from ..exceptions import InvalidPathError, InvalidSnapshotError
from ..models import AssignmentSnapshot, Host, PlacementPlan, Shard

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> AssignmentSnapshot:
    """Load a placement snapshot file.

    Raises:
        InvalidPathError: If the file does not exist
        InvalidSnapshotError: If the document is malformed
    """
    data = _read_json(path)
    return parse_snapshot(data, source=str(path))


def parse_snapshot(data: Any, source: str = "<memory>") -> AssignmentSnapshot:
    """Build an AssignmentSnapshot from a decoded JSON document."""
    if not isinstance(data, dict):
        raise InvalidSnapshotError("top level must be an object", source=source)

    tables = data.get("tables")
    if not isinstance(tables, dict):
        raise InvalidSnapshotError("'tables' must be an object", source=source)

    by_encoded: Dict[str, Shard] = {}
    table_to_shards: Dict[str, Tuple[Shard, ...]] = {}
    for table_name, entries in tables.items():
        if not isinstance(entries, list):
            raise InvalidSnapshotError(f"shards of table '{table_name}' must be a list", source=source)
        shards: List[Shard] = []
        for entry in entries:
            shard = _parse_shard(entry, source)
            by_encoded[shard.encoded_name] = shard
            shards.append(shard)
        table_to_shards[table_name] = tuple(shards)

    shard_to_host: Dict[Shard, Host] = {}
    for encoded, address in _section(data, "assignments", source).items():
        shard = _lookup(by_encoded, encoded, "assignments")
        if shard is None:
            continue
        shard_to_host[shard] = _parse_host(address, source)

    plan: Dict[Shard, Tuple[Host, ...]] = {}
    for encoded, addresses in _section(data, "plan", source).items():
        shard = _lookup(by_encoded, encoded, "plan")
        if shard is None:
            continue
        if not isinstance(addresses, list):
            raise InvalidSnapshotError(f"plan for '{encoded}' must be a list", source=source)
        plan[shard] = tuple(_parse_host(a, source) for a in addresses)

    logger.debug(
        "Loaded snapshot %s: %d tables, %d assignments, %d plan entries",
        source,
        len(table_to_shards),
        len(shard_to_host),
        len(plan),
    )
    return AssignmentSnapshot(
        table_to_shards=table_to_shards,
        shard_to_host=shard_to_host,
        plan=PlacementPlan(plan),
    )


def load_locality(path: Path) -> Dict[str, Dict[str, float]]:
    """Load a locality file: encoded shard name -> hostname -> score.

    Scores are kept as given; range problems surface per shard during
    verification.
    """
    data = _read_json(path)
    if not isinstance(data, dict):
        raise InvalidSnapshotError("locality document must be an object", source=str(path))

    result: Dict[str, Dict[str, float]] = {}
    for encoded, scores in data.items():
        if not isinstance(scores, dict):
            raise InvalidSnapshotError(
                f"locality for '{encoded}' must be an object", source=str(path)
            )
        result[encoded] = dict(scores)
    return result


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise InvalidPathError(path, "file does not exist")
    if not path.is_file():
        raise InvalidPathError(path, "not a regular file")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidSnapshotError(f"invalid JSON: {e}", source=str(path)) from e


def _section(data: Mapping[str, Any], key: str, source: str) -> Mapping[str, Any]:
    section = data.get(key, {})
    if not isinstance(section, dict):
        raise InvalidSnapshotError(f"'{key}' must be an object", source=source)
    return section


def _lookup(by_encoded: Mapping[str, Shard], encoded: str, section: str):
    shard = by_encoded.get(encoded)
    if shard is None:
        logger.warning("Ignoring %s entry for shard %s not listed in any table", section, encoded)
    return shard


def _parse_shard(entry: Any, source: str) -> Shard:
    if isinstance(entry, str):
        return Shard(entry)
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return Shard(entry["name"], entry.get("encoded_name") or "")
    raise InvalidSnapshotError(f"invalid shard entry: {entry!r}", source=source)


def _parse_host(address: Any, source: str) -> Host:
    if not isinstance(address, str):
        raise InvalidSnapshotError(f"invalid host address: {address!r}", source=source)
    try:
        return Host.parse(address)
    except ValueError as e:
        raise InvalidSnapshotError(str(e), source=source) from e
