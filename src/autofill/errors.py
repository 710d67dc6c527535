from __future__ import annotations


class AutofillError(Exception):
    """Base class for autofill specific exceptions."""


class SnapshotParsingError(AutofillError):
    """Raised when a host view-tree payload cannot be parsed into a valid snapshot."""


class MalformedTree(AutofillError):
    """Raised when traversal detects a cycle or the tree exceeds configured limits."""

    def __init__(self, message: str, address: str | None = None) -> None:
        super().__init__(message)
        self.address = address
