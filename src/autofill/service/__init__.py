from __future__ import annotations

from .app import AutofillService, CancellationSignal, match_key_for
from .schemas import (
    CredentialMatch,
    FillContext,
    FillRequest,
    FillResponse,
    SaveCandidate,
    SaveRequest,
)
from .store import CredentialStore

__all__ = [
    "AutofillService",
    "CancellationSignal",
    "CredentialStore",
    "CredentialMatch",
    "FillContext",
    "FillRequest",
    "FillResponse",
    "SaveCandidate",
    "SaveRequest",
    "match_key_for",
]
