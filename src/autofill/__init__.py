from __future__ import annotations

from .config import Settings
from .core.engine import ViewTreeClassifier
from .errors import AutofillError, MalformedTree, SnapshotParsingError
from .types import ClassifiedField, FillPlan, LoginForm, Node, SavePlan, parse_view_tree

__version__ = "0.1.0"

__all__ = [
    "ViewTreeClassifier",
    "Settings",
    "Node",
    "ClassifiedField",
    "LoginForm",
    "FillPlan",
    "SavePlan",
    "parse_view_tree",
    "AutofillError",
    "MalformedTree",
    "SnapshotParsingError",
]
