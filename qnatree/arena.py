"""
Arena - Append-Only Tree Storage

Nodes live in a single growable list and refer to each other by integer id
(their position in that list). Parent links are plain ids, so the arena is
the only owner of every node and no reference cycles exist.

Properties:
- Ids are dense, start at 0 and are never reused or reassigned
- A child is appended to its parent's children at creation time only
- A node's parent always has a smaller id than the node itself
- Payloads are not unique; value lookups return the first match in id order

All value-keyed lookups are linear scans. This is fine for the small
documents this package is built for; larger trees would need a
payload -> id mapping that keeps first-match semantics.

Usage:
    arena: Arena[str] = Arena()
    root = arena.add_node("Delivery")
    question = arena.add_node("How long does it take?", root)
    arena.add_node("Two to three days.", question)
    arena.get_children_by_value("Delivery")   # -> [1]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, TypeVar

import structlog

from qnatree.exceptions import LeafWithoutParentError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NodeId = int


@dataclass
class ArenaNode(Generic[T]):
    """A single entry in the arena."""

    data: T
    parent: NodeId | None = None
    children: list[NodeId] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


class Arena(Generic[T]):
    """
    Append-only forest keyed by stable integer ids.

    A root is any node without a parent. When several exist, "the root"
    is the first one inserted.
    """

    def __init__(self):
        self._nodes: list[ArenaNode[T]] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, data: object) -> bool:
        return self.contains(data)  # type: ignore[arg-type]

    def _node(self, node_id: NodeId) -> ArenaNode[T] | None:
        # Negative ids are unknown ids, not Python negative indexing
        if 0 <= node_id < len(self._nodes):
            return self._nodes[node_id]
        return None

    def add_node(self, data: T, parent: NodeId | None = None) -> NodeId | None:
        """
        Append a node and return its id.

        Args:
            data: Payload of the new node.
            parent: Id of an existing node to attach to, or None for a root.

        Returns:
            The new node's id, or None if ``parent`` is not a known id.
            In that case the arena is left untouched.
        """
        new_id = len(self._nodes)

        if parent is not None:
            parent_node = self._node(parent)
            if parent_node is None:
                logger.debug("add_node_unknown_parent", parent=parent)
                return None
            parent_node.children.append(new_id)

        self._nodes.append(ArenaNode(data=data, parent=parent))
        logger.debug("node_added", node_id=new_id, parent=parent)

        return new_id

    def get_parent(self, node_id: NodeId) -> NodeId | None:
        """Parent id of ``node_id``; None for roots and unknown ids."""
        node = self._node(node_id)
        return node.parent if node is not None else None

    def get_children_by_id(self, node_id: NodeId) -> list[NodeId] | None:
        node = self._node(node_id)
        if node is None:
            return None
        return list(node.children)

    def get_children_by_value(self, data: T) -> list[NodeId] | None:
        """Children of the first node (in id order) whose payload equals ``data``."""
        node_id = self.get_id_by_value(data)
        if node_id is None:
            return None
        return list(self._nodes[node_id].children)

    def get_id_by_value(self, data: T) -> NodeId | None:
        for node_id, node in enumerate(self._nodes):
            if node.data == data:
                return node_id
        return None

    def get_root_value(self) -> T | None:
        """Payload of the first parentless node, or None if the arena is empty."""
        for node in self._nodes:
            if node.parent is None:
                return node.data
        return None

    def get(self, node_id: NodeId) -> T | None:
        node = self._node(node_id)
        return node.data if node is not None else None

    def contains(self, data: T) -> bool:
        return any(node.data == data for node in self._nodes)

    def get_leaves_parents(self) -> list[NodeId]:
        """
        Parent id of every childless node, in id order.

        Every leaf must have a parent. A parentless leaf (for example the
        only node of a single-node arena) violates that precondition.

        Raises:
            LeafWithoutParentError: If a leaf has no parent.
        """
        parents: list[NodeId] = []
        for node_id, node in enumerate(self._nodes):
            if not node.is_leaf:
                continue
            if node.parent is None:
                raise LeafWithoutParentError(node_id)
            parents.append(node.parent)
        return parents

    def iter_nodes(self) -> Iterator[tuple[NodeId, ArenaNode[T]]]:
        """Yield ``(node_id, node)`` pairs in id order."""
        yield from enumerate(self._nodes)

    def dump(self) -> None:
        """Log every node at debug level."""
        for node_id, node in self.iter_nodes():
            logger.debug(
                "arena_node",
                node_id=node_id,
                parent=node.parent,
                children=node.children,
                data=node.data,
            )
