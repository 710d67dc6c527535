from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from ..tree.walker import WalkEntry
from ..types import ClassifiedField, FieldRole, Node

logger = logging.getLogger(__name__)

RULE_EXPLICIT_HINT = 1
RULE_DECLARED_KIND = 2
RULE_TEXT_HEURISTIC = 3
RULE_DEFAULT = 4

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalise_hint(hint: str) -> str:
    return _NON_ALNUM.sub("", hint.lower())


@dataclass(slots=True, frozen=True)
class ClassifiedNode:
    """A classified field together with the tree context the assembler needs."""

    field: ClassifiedField
    ancestors: tuple[str, ...]
    html_tag: str | None = None
    web_domain: str | None = None
    is_focused: bool = False

    @property
    def address(self) -> str:
        return self.field.address


class FieldClassifier:
    """Assign a login role to each node using a fixed rule priority.

    Host-declared hints are trusted most, the declared input kind next, and
    free text in ids, labels and placeholders last.
    """

    PASSWORD_HINTS: frozenset[str] = frozenset({"password", "newpassword", "currentpassword"})
    USERNAME_HINTS: frozenset[str] = frozenset({"username", "newusername", "email", "emailaddress"})

    PASSWORD_KINDS: frozenset[str] = frozenset({"password"})
    USERNAME_KINDS: frozenset[str] = frozenset({"email", "username"})

    PASSWORD_KEYWORDS: Sequence[str] = ("pass", "pwd", "pswd")
    USERNAME_KEYWORDS: Sequence[str] = ("user", "login", "email")

    # Address bars and search boxes accept text but never hold credentials.
    EXCLUDED_TERMS: Sequence[str] = ("url_bar", "search", "find")

    def classify(self, entries: Iterable[WalkEntry]) -> Iterator[ClassifiedNode]:
        for entry in entries:
            node = entry.node
            field = self.classify_node(node)
            if field.role != "irrelevant":
                logger.debug("Classified %s", field)
            yield ClassifiedNode(
                field=field,
                ancestors=entry.ancestors,
                html_tag=node.html_tag,
                web_domain=node.web_domain,
                is_focused=node.is_focused,
            )

    def classify_node(self, node: Node) -> ClassifiedField:
        if not self.is_candidate(node):
            return ClassifiedField(address=node.address, role="irrelevant", confidence=RULE_DEFAULT)

        role = self._match_hints(node.hints)
        if role is not None:
            return ClassifiedField(address=node.address, role=role, confidence=RULE_EXPLICIT_HINT)

        role = self._match_kind(node.kind)
        if role is not None:
            return ClassifiedField(address=node.address, role=role, confidence=RULE_DECLARED_KIND)

        role = self._match_text(node.id_name, node.label_text, node.hint_text)
        if role is not None:
            return ClassifiedField(address=node.address, role=role, confidence=RULE_TEXT_HEURISTIC)

        return ClassifiedField(address=node.address, role="irrelevant", confidence=RULE_DEFAULT)

    def is_candidate(self, node: Node) -> bool:
        if not (node.is_input and node.is_focusable and node.is_visible):
            return False
        return not self._has_excluded_term(node)

    def _has_excluded_term(self, node: Node) -> bool:
        texts = [(value or "").lower() for value in (node.id_name, node.hint_text)]
        return any(term in text for term in self.EXCLUDED_TERMS for text in texts if text)

    def _match_hints(self, hints: Sequence[str]) -> FieldRole | None:
        tokens = {normalise_hint(hint) for hint in hints}
        if tokens & self.PASSWORD_HINTS:
            return "current_password"
        if tokens & self.USERNAME_HINTS:
            return "username"
        return None

    def _match_kind(self, kind: str) -> FieldRole | None:
        if kind in self.PASSWORD_KINDS:
            return "current_password"
        if kind in self.USERNAME_KINDS:
            return "username"
        return None

    def _match_text(self, *texts: str | None) -> FieldRole | None:
        for text in texts:
            if not text:
                continue
            lowered = text.lower()
            if any(keyword in lowered for keyword in self.PASSWORD_KEYWORDS):
                return "current_password"
            if any(keyword in lowered for keyword in self.USERNAME_KEYWORDS):
                return "username"
        return None
