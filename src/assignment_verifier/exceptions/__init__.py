"""Exception hierarchy for Assignment Verifier."""

from .analysis import (
    AnalysisError,
    InvalidLocalityScoreError,
    InvalidSnapshotError,
    UnknownTableError,
)
from .base import AssignmentVerifierError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "AssignmentVerifierError",
    "AnalysisError",
    "InvalidSnapshotError",
    "UnknownTableError",
    "InvalidLocalityScoreError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
