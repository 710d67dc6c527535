from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ..types import FillPlan, Node


class FillContext(BaseModel):
    """One view-tree snapshot as delivered by the host."""

    model_config = ConfigDict(frozen=True)

    root: Node
    origin: str = Field(..., min_length=1)


class FillRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    contexts: tuple[FillContext, ...]
    request_id: str | None = None
    # Set when the user asked for autofill explicitly rather than by focusing a field.
    is_manual: bool = False


class SaveRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    contexts: tuple[FillContext, ...]
    request_id: str | None = None


class CredentialMatch(BaseModel):
    """A stored entry offered for a match key; the secret itself stays in the store."""

    model_config = ConfigDict(frozen=True)

    username: str | None = None
    secret_handle: str


class FillResponse(BaseModel):
    """What the host may offer for one fill request.

    ``offers_search`` adds an entry that lets the user pick any stored credential,
    and ``offers_generated_password`` one that fills a freshly generated password.
    """

    model_config = ConfigDict(frozen=True)

    plan: FillPlan
    matches: tuple[CredentialMatch, ...] = ()
    offers_search: bool = False
    offers_generated_password: bool = False

    @property
    def ignored_addresses(self) -> tuple[str, ...]:
        return self.plan.form.ignored_addresses


class SaveCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    match_key: str
    username: str | None = None
    password: SecretStr
