from __future__ import annotations

from .walker import WalkEntry, index_by_address, walk

__all__ = ["WalkEntry", "walk", "index_by_address"]
