from __future__ import annotations

import abc

from .schemas import CredentialMatch, SaveCandidate


class CredentialStore(abc.ABC):
    """Abstract credential store consulted after classification completes."""

    @abc.abstractmethod
    def lookup(self, match_key: str) -> list[CredentialMatch]:
        """Return stored entries for a package name or web origin."""

    @abc.abstractmethod
    def persist(self, candidate: SaveCandidate) -> None:
        """Hand newly entered credentials over for storage."""
