from __future__ import annotations

from .assembler import FormAssembler
from .classifier import ClassifiedNode, FieldClassifier
from .engine import ViewTreeClassifier
from .plans import build_fill_plan, build_save_plan

__all__ = [
    "ViewTreeClassifier",
    "FieldClassifier",
    "ClassifiedNode",
    "FormAssembler",
    "build_fill_plan",
    "build_save_plan",
]
