"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from assignment_verifier.exceptions import (
    AnalysisError,
    AssignmentVerifierError,
    ConfigurationError,
    InvalidConfigError,
    InvalidLocalityScoreError,
    InvalidPathError,
    InvalidSnapshotError,
    UnknownTableError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls,parent",
        [
            (InvalidSnapshotError, AnalysisError),
            (UnknownTableError, AnalysisError),
            (InvalidLocalityScoreError, AnalysisError),
            (InvalidConfigError, ConfigurationError),
            (InvalidPathError, ConfigurationError),
            (AnalysisError, AssignmentVerifierError),
            (ConfigurationError, AssignmentVerifierError),
        ],
    )
    def test_subclass(self, cls, parent):
        assert issubclass(cls, parent)


class TestMessages:
    def test_base_without_details(self):
        assert str(AssignmentVerifierError("boom")) == "boom"

    def test_base_with_details(self):
        err = AssignmentVerifierError("boom", details={"a": "1", "b": "2"})
        assert str(err) == "boom (a=1, b=2)"

    def test_unknown_table(self):
        err = UnknownTableError("orders")
        assert err.table_name == "orders"
        assert "orders" in str(err)

    def test_invalid_snapshot_source(self):
        err = InvalidSnapshotError("bad", source="snap.json")
        assert err.details == {"reason": "bad", "source": "snap.json"}

    def test_invalid_locality_score(self):
        err = InvalidLocalityScoreError("s1", "h1", 1.5)
        assert err.score == 1.5
        assert "score=1.5" in str(err)

    def test_invalid_path(self):
        err = InvalidPathError(Path("/x"), "missing")
        assert err.reason == "missing"
        assert "/x" in str(err)

    def test_invalid_config(self):
        err = InvalidConfigError("hosts_per_line", 0, "must be at least 1")
        assert err.value == 0
        assert str(err) == "Bad value for hosts_per_line: 0 (key=hosts_per_line, reason=must be at least 1)"
