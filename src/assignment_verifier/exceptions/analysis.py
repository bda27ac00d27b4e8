"""Analysis-related exceptions: snapshots, tables, locality data."""

from typing import Optional

from .base import AssignmentVerifierError


class AnalysisError(AssignmentVerifierError):
    """Base class for analysis-related errors."""
    pass


class InvalidSnapshotError(AnalysisError):
    """Raised when a placement snapshot cannot be used to build a report."""

    def __init__(self, reason: str, source: Optional[str] = None):
        details = {"reason": reason}
        if source is not None:
            details["source"] = source

        super().__init__(f"Invalid placement snapshot: {reason}", details=details)
        self.reason = reason
        self.source = source


class UnknownTableError(AnalysisError):
    """Raised when a table is not present in the snapshot."""

    def __init__(self, table_name: str):
        super().__init__(
            f"Table not found in snapshot: {table_name}",
            details={"table": table_name},
        )
        self.table_name = table_name


class InvalidLocalityScoreError(AnalysisError):
    """Raised when a locality score falls outside [0, 1]."""

    def __init__(self, shard_name: str, hostname: str, score: object):
        super().__init__(
            f"Locality score out of range for {shard_name} on {hostname}",
            details={"shard": shard_name, "hostname": hostname, "score": str(score)},
        )
        self.shard_name = shard_name
        self.hostname = hostname
        self.score = score
