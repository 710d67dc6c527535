from __future__ import annotations

import logging

from ..config import Settings
from ..tree.walker import walk
from ..types import FillPlan, LoginForm, Node, SavePlan
from .assembler import FormAssembler
from .classifier import ClassifiedNode, FieldClassifier
from .plans import build_fill_plan, build_save_plan

logger = logging.getLogger(__name__)


class ViewTreeClassifier:
    """Entry points that turn one host view-tree snapshot into a fill or save plan.

    The classifier keeps no per-request state; a single instance can serve
    concurrent requests. Both entry points raise ``MalformedTree`` for cyclic
    or oversized trees and return ``None`` when there is nothing to fill,
    including for denylisted origins.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._fields = FieldClassifier()
        self._assembler = FormAssembler(self._settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    def classify_fill_request(self, root: Node, origin: str) -> FillPlan | None:
        form = self.detect_form(root, origin)
        if form is None:
            return None
        return build_fill_plan(form, origin)

    def classify_save_request(self, root: Node, origin: str) -> SavePlan | None:
        form = self.detect_form(root, origin)
        if form is None:
            return None
        return build_save_plan(form)

    def detect_form(self, root: Node, origin: str) -> LoginForm | None:
        if self._settings.is_denylisted(origin):
            return None
        nodes = self.classify_nodes(root)
        form = self._assembler.assemble(nodes, origin)
        if form is None:
            logger.debug("No login form in snapshot from %s", origin)
        return form

    def classify_nodes(self, root: Node) -> list[ClassifiedNode]:
        entries = walk(
            root,
            max_depth=self._settings.max_tree_depth,
            max_nodes=self._settings.max_tree_nodes,
        )
        # Materialise before assembling so a malformed tree never yields a partial form.
        return list(self._fields.classify(entries))
