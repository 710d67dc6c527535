from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence
from urllib.parse import urlparse

from ..config import Settings
from ..types import ClassifiedField, LoginForm
from .classifier import ClassifiedNode

logger = logging.getLogger(__name__)

FORM_TAG = "form"
WHOLE_TREE = ""
SUPPORTED_SCHEMES = ("http", "https")


def canonical_web_domain(value: str) -> str | None:
    """Return the lower-cased host of a web origin, or ``None`` for non-web schemes.

    Hosts often report a bare domain, so a value without a scheme is read as https.
    """

    text = value.strip()
    if "://" not in text:
        text = f"https://{text}"
    try:
        parsed = urlparse(text)
        hostname = parsed.hostname
    except ValueError:
        return None
    if parsed.scheme not in SUPPORTED_SCHEMES or not hostname:
        return None
    return hostname.rstrip(".") or None


@dataclass(slots=True)
class _Group:
    key: str
    members: list[int]


class FormAssembler:
    """Turn a flat list of classified nodes into at most one ``LoginForm``."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def assemble(self, nodes: Sequence[ClassifiedNode], origin: str) -> LoginForm | None:
        if self._settings.is_denylisted(origin):
            return None

        if self._settings.is_single_origin_browser(origin):
            picked = self._pick_focused(nodes)
            if picked is None:
                logger.info("No single focused password field for %s, not filling", origin)
                return None
            password_indices, username_index = picked
        else:
            form_roots = {
                node.address
                for node in nodes
                if node.html_tag is not None and node.html_tag.strip().lower() == FORM_TAG
            }
            group = self._choose_group(nodes, form_roots)
            if group is None:
                return None
            password_indices = [index for index in group.members if nodes[index].field.is_password]
            usernames = [index for index in group.members if nodes[index].field.role == "username"]
            username_index = self._pick_username(nodes, usernames, password_indices[0])

        passwords = [nodes[index] for index in password_indices]
        password_fields = self._disambiguate_passwords([node.field for node in passwords])
        username_field = nodes[username_index].field if username_index is not None else None

        chosen = [node.address for node in passwords]
        if username_field is not None:
            chosen.append(username_field.address)

        web_domain: str | None = None
        if self._settings.is_browser(origin):
            safe, web_domain = self._resolve_web_domain(nodes, set(chosen))
            if not safe:
                logger.info("Fields of %s span several web origins, not filling", origin)
                return None

        in_form = set(chosen)
        ignored = tuple(node.address for node in nodes if node.address not in in_form)
        return LoginForm(
            username_field=username_field,
            password_fields=tuple(password_fields),
            package_or_origin=origin,
            web_domain=web_domain,
            ignored_addresses=ignored,
        )

    def _choose_group(self, nodes: Sequence[ClassifiedNode], form_roots: set[str]) -> _Group | None:
        groups: dict[str, _Group] = {}
        for index, node in enumerate(nodes):
            if node.field.role == "irrelevant":
                continue
            key = self._group_key(node, form_roots)
            groups.setdefault(key, _Group(key=key, members=[])).members.append(index)

        best: tuple[int, int] | None = None
        chosen: _Group | None = None
        for group in groups.values():
            for index in group.members:
                field = nodes[index].field
                if not field.is_password:
                    continue
                rank = (field.confidence, index)
                if best is None or rank < best:
                    best = rank
                    chosen = group
        return chosen

    @staticmethod
    def _group_key(node: ClassifiedNode, form_roots: set[str]) -> str:
        for ancestor in reversed(node.ancestors):
            if ancestor in form_roots:
                return ancestor
        return WHOLE_TREE

    @staticmethod
    def _disambiguate_passwords(fields: list[ClassifiedField]) -> list[ClassifiedField]:
        # First password box is the current one, every later box is a new password
        # (old/new change forms, new/confirm registration forms).
        result: list[ClassifiedField] = []
        for position, field in enumerate(fields):
            role = "current_password" if position == 0 else "new_password"
            result.append(field if field.role == role else field.model_copy(update={"role": role}))
        return result

    @staticmethod
    def _pick_username(
        nodes: Sequence[ClassifiedNode],
        candidates: list[int],
        first_password: int,
    ) -> int | None:
        if not candidates:
            return None

        def sort_key(index: int) -> tuple[int, int, int]:
            before = 0 if index < first_password else 1
            return (nodes[index].field.confidence, before, abs(first_password - index))

        return min(candidates, key=sort_key)

    @staticmethod
    def _pick_focused(nodes: Sequence[ClassifiedNode]) -> tuple[list[int], int | None] | None:
        # A password field qualifies when it has focus or directly follows a focused username field.
        fillable = [index for index, node in enumerate(nodes) if node.field.role != "irrelevant"]
        matches: list[tuple[int, int | None]] = []
        for position, index in enumerate(fillable):
            if not nodes[index].field.is_password:
                continue
            previous = fillable[position - 1] if position > 0 else None
            if previous is not None and nodes[previous].field.role != "username":
                previous = None
            if nodes[index].is_focused or (previous is not None and nodes[previous].is_focused):
                matches.append((index, previous))
        if len(matches) != 1:
            return None
        password_index, username_index = matches[0]
        return [password_index], username_index

    @staticmethod
    def _resolve_web_domain(nodes: Sequence[ClassifiedNode], chosen: set[str]) -> tuple[bool, str | None]:
        seen = {canonical_web_domain(node.web_domain) for node in nodes if node.web_domain}
        if None in seen:
            return False, None
        if len(seen) <= 1:
            return True, next(iter(seen), None)
        # Several origins on one page: only fill when every chosen field names the same one.
        among_fields = {
            canonical_web_domain(node.web_domain) if node.web_domain else None
            for node in nodes
            if node.address in chosen
        }
        if len(among_fields) != 1 or None in among_fields:
            return False, None
        return True, next(iter(among_fields))
