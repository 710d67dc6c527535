from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from ..errors import MalformedTree
from ..types import Node

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256
DEFAULT_MAX_NODES = 10_000


@dataclass(slots=True, frozen=True)
class WalkEntry:
    node: Node
    depth: int
    ancestors: tuple[str, ...]

    @property
    def address(self) -> str:
        return self.node.address


def walk(
    root: Node,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> Iterator[WalkEntry]:
    """Yield every node reachable from ``root``, parent first, siblings in host order.

    The traversal keeps one child iterator per open node instead of indexing
    into child lists, and it stops with ``MalformedTree`` as soon as an address
    repeats on the current root-to-node path or a limit is exceeded.
    """

    path: list[str] = []
    on_path: set[str] = set()
    pending: list[Iterator[Node]] = [iter((root,))]
    produced = 0

    while pending:
        node = next(pending[-1], None)
        if node is None:
            pending.pop()
            if path:
                on_path.discard(path.pop())
            continue

        if node.address in on_path:
            raise MalformedTree(
                f"Node {node.address!r} appears twice on the path {' > '.join(path)}",
                address=node.address,
            )
        depth = len(path)
        if depth > max_depth:
            raise MalformedTree(f"Tree deeper than {max_depth} levels", address=node.address)
        produced += 1
        if produced > max_nodes:
            raise MalformedTree(f"Tree has more than {max_nodes} nodes", address=node.address)

        yield WalkEntry(node=node, depth=depth, ancestors=tuple(path))

        path.append(node.address)
        on_path.add(node.address)
        pending.append(iter(node.children))

    logger.debug("Walked %d nodes from %s", produced, root.address)


def index_by_address(
    root: Node,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> dict[str, Node]:
    """Map addresses to nodes.

    Reading values back by address needs every address to be unique, so an
    address repeated anywhere in the tree raises ``MalformedTree``.
    """

    index: dict[str, Node] = {}
    for entry in walk(root, max_depth=max_depth, max_nodes=max_nodes):
        if entry.address in index:
            raise MalformedTree(f"Address {entry.address!r} is used by more than one node", address=entry.address)
        index[entry.address] = entry.node
    return index
