from __future__ import annotations

from typing import Any, Literal, get_args

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import SnapshotParsingError

InputKind = Literal[
    "none",
    "text",
    "password",
    "email",
    "username",
    "phone",
    "number",
    "unknown",
]

FieldRole = Literal["username", "current_password", "new_password", "irrelevant"]

PASSWORD_ROLES: frozenset[str] = frozenset({"current_password", "new_password"})

SaveDataType = Literal["username", "password"]

_INPUT_KINDS: frozenset[str] = frozenset(get_args(InputKind))


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Node(_Snapshot):
    """Owned copy of one host view node.

    ``kind`` is ``"none"`` for layout containers and other nodes that do not
    accept text; ``"unknown"`` marks an input whose type the host did not declare
    or declared as something without a classification rule.
    """

    address: str = Field(..., min_length=1)
    kind: InputKind = "none"
    hints: tuple[str, ...] = ()
    id_name: str | None = None
    label_text: str | None = None
    hint_text: str | None = None
    html_tag: str | None = None
    web_domain: str | None = None
    text_value: str | None = None
    is_focusable: bool = True
    is_visible: bool = True
    is_focused: bool = False
    children: tuple[Node, ...] = ()

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, value: Any) -> Any:
        if value is None:
            return "none"
        if isinstance(value, str):
            kind = value.strip().lower() or "none"
            # Kinds the classifier has no rule for (url bars, sliders, ...) are still inputs.
            return kind if kind in _INPUT_KINDS else "unknown"
        return value

    @property
    def is_input(self) -> bool:
        return self.kind != "none"


class ClassifiedField(_Snapshot):
    address: str
    role: FieldRole
    confidence: int = Field(..., ge=1, le=4)

    @property
    def is_password(self) -> bool:
        return self.role in PASSWORD_ROLES

    def __str__(self) -> str:
        return f"{self.role}@{self.address} (rule {self.confidence})"


class LoginForm(_Snapshot):
    username_field: ClassifiedField | None = None
    password_fields: tuple[ClassifiedField, ...]
    package_or_origin: str
    web_domain: str | None = None
    ignored_addresses: tuple[str, ...] = ()

    @field_validator("password_fields")
    @classmethod
    def _require_password(cls, value: tuple[ClassifiedField, ...]) -> tuple[ClassifiedField, ...]:
        if not value:
            raise ValueError("a login form needs at least one password field")
        if any(not field.is_password for field in value):
            raise ValueError("password_fields may only hold password roles")
        return value

    @property
    def fields(self) -> tuple[ClassifiedField, ...]:
        if self.username_field is None:
            return self.password_fields
        return (self.username_field, *self.password_fields)

    @property
    def current_password_fields(self) -> tuple[ClassifiedField, ...]:
        return tuple(field for field in self.password_fields if field.role == "current_password")

    @property
    def new_password_fields(self) -> tuple[ClassifiedField, ...]:
        return tuple(field for field in self.password_fields if field.role == "new_password")


class FillPlan(_Snapshot):
    form: LoginForm
    requested_match_key: str
    offers_generated_password: bool = False


class SavePlan(_Snapshot):
    form: LoginForm
    addresses_to_reread: frozenset[str]
    data_types: frozenset[SaveDataType] = frozenset({"password"})


def parse_view_tree(payload: str | bytes | dict[str, Any]) -> Node:
    """Decode a host view-tree snapshot into an owned ``Node`` tree."""

    if isinstance(payload, dict):
        data: Any = payload
    else:
        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as exc:
            raise SnapshotParsingError(f"Snapshot is not valid JSON: {exc}") from exc
    if isinstance(data, dict) and "root" in data and "address" not in data:
        data = data["root"]
    if not isinstance(data, dict):
        raise SnapshotParsingError("Snapshot root must be a JSON object")
    try:
        return Node.model_validate(data)
    except ValidationError as exc:
        raise SnapshotParsingError(f"Invalid view-tree snapshot: {exc}") from exc
