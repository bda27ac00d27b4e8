"""Root of the error hierarchy raised by the verifier and its CLI."""

from typing import Dict, Optional


class AssignmentVerifierError(Exception):
    """Anything the verifier refuses to do.

    ``details`` carries the offending values (table, path, key and so on)
    as strings; they are appended to the message so the CLI can print the
    error on one line.
    """

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
