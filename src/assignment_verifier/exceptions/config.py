"""Errors in the files and settings the CLI is given."""

from pathlib import Path
from typing import Any

from .base import AssignmentVerifierError


class ConfigurationError(AssignmentVerifierError):
    """Bad input to the tool itself, as opposed to a bad snapshot."""


class InvalidPathError(ConfigurationError):
    """A snapshot, locality or config path that does not name a readable file."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot read {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """A setting outside the values ``VerifierConfig`` accepts."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Bad value for {key}: {value!r}",
            details={"key": key, "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
