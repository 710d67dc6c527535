from __future__ import annotations

import logging
import threading
from typing import Callable

from pydantic import SecretStr

from ..config import Settings
from ..core.engine import ViewTreeClassifier
from ..errors import MalformedTree
from ..logging import reset_request_context, set_request_context
from ..tree.walker import index_by_address
from ..types import LoginForm, Node
from .schemas import FillContext, FillRequest, FillResponse, SaveCandidate, SaveRequest
from .store import CredentialStore

logger = logging.getLogger(__name__)

MASK_CHARACTERS = frozenset("*•")


class CancellationSignal:
    """Advisory cancellation flag a host may raise while a request is in flight."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            listeners = list(self._listeners)
        for listener in listeners:
            listener()

    def set_on_cancel_listener(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self._listeners.append(listener)
            cancelled = self._event.is_set()
        if cancelled:
            listener()


def match_key_for(form: LoginForm) -> str:
    """Browser forms are matched by web domain, app forms by package name."""

    return form.web_domain or form.package_or_origin


def _latest_context(contexts: tuple[FillContext, ...], kind: str) -> FillContext | None:
    if not contexts:
        logger.info("%s request without fill contexts", kind)
        return None
    if len(contexts) > 1:
        logger.warning("%s request with %d fill contexts, using only the last one", kind, len(contexts))
    return contexts[-1]


class AutofillService:
    """Host boundary: runs the classifier and talks to the credential store."""

    def __init__(
        self,
        settings: Settings,
        store: CredentialStore,
        classifier: ViewTreeClassifier | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._classifier = classifier or ViewTreeClassifier(settings)

    def on_fill_request(
        self,
        request: FillRequest,
        signal: CancellationSignal | None = None,
    ) -> FillResponse | None:
        context = _latest_context(request.contexts, "Fill")
        if context is None:
            return None
        token = set_request_context(request_id=request.request_id, origin=context.origin)
        try:
            if signal is not None:
                signal.set_on_cancel_listener(lambda: logger.info("Fill request cancelled by host"))
            try:
                plan = self._classifier.classify_fill_request(context.root, context.origin)
            except MalformedTree as exc:
                logger.warning("Rejecting malformed view tree: %s", exc)
                return None
            if plan is None:
                logger.debug("No fillable login form")
                return None
            if signal is not None and signal.is_cancelled:
                return None

            # Login forms get stored entries, registration and change forms a generated
            # password; a manual request gets every option.
            offers_login = request.is_manual or not plan.offers_generated_password
            match_key = match_key_for(plan.form)
            matches = self._store.lookup(match_key) if offers_login else []
            logger.info(
                "Fill plan ready",
                extra={
                    "match_key": match_key,
                    "matches": len(matches),
                    "passwords": len(plan.form.password_fields),
                    "manual": request.is_manual,
                },
            )
            return FillResponse(
                plan=plan,
                matches=tuple(matches),
                offers_search=offers_login,
                offers_generated_password=request.is_manual or plan.offers_generated_password,
            )
        finally:
            reset_request_context(token)

    def on_save_request(self, request: SaveRequest) -> SaveCandidate | None:
        context = _latest_context(request.contexts, "Save")
        if context is None:
            return None
        token = set_request_context(request_id=request.request_id, origin=context.origin)
        try:
            try:
                plan = self._classifier.classify_save_request(context.root, context.origin)
                nodes = index_by_address(
                    context.root,
                    max_depth=self._settings.max_tree_depth,
                    max_nodes=self._settings.max_tree_nodes,
                )
            except MalformedTree as exc:
                logger.warning("Rejecting malformed view tree: %s", exc)
                return None
            if plan is None:
                return None

            candidate = self._extract_candidate(plan.form, nodes)
            if candidate is None:
                return None
            self._store.persist(candidate)
            logger.info("Save candidate handed to store", extra={"match_key": candidate.match_key})
            return candidate
        finally:
            reset_request_context(token)

    def _extract_candidate(self, form: LoginForm, nodes: dict[str, Node]) -> SaveCandidate | None:
        def value_of(address: str) -> str:
            node = nodes.get(address)
            return (node.text_value or "") if node is not None else ""

        new_values = {value_of(field.address) for field in form.new_password_fields}
        if len(new_values) > 1:
            logger.info("New password fields do not match, not saving")
            return None
        if new_values:
            password = new_values.pop()
        else:
            password = value_of(form.password_fields[0].address)

        if not password:
            logger.info("Password field is empty, not saving")
            return None
        if all(char in MASK_CHARACTERS for char in password):
            logger.info("Password is masked, not saving")
            return None

        username = value_of(form.username_field.address) if form.username_field is not None else ""
        return SaveCandidate(
            match_key=match_key_for(form),
            username=username or None,
            password=SecretStr(password),
        )
