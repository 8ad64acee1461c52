"""
Navigator - Label-Keyed Queries over a Built Q&A Tree

The conversation driver never touches node ids directly for lookups. It
asks the navigator by label:

    nav.get_children()                      # -> ["Delivery", ...] under the root
    nav.get_children("Delivery")            # -> ["How long does it take?"]
    nav.is_answer_bearing("How long does it take?")   # -> True

Labels are not unique. Every label lookup resolves to the first node with
that label in insertion order.

The navigator holds no state beyond the tree it wraps, and the tree is
never mutated after the build, so one instance can be shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from qnatree.arena import NodeId
from qnatree.builder import QATree, TreeBuilder
from qnatree.exceptions import LabelNotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Navigator:
    """Read-only query facade over a QATree."""

    tree: QATree

    @classmethod
    def from_file(cls, path: Path | str) -> "Navigator":
        """Build the tree for ``path`` and wrap it."""
        return cls(TreeBuilder().build_from_file(path))

    @property
    def root_label(self) -> str | None:
        return self.tree.arena.get_root_value()

    def is_answer_bearing(self, label: str) -> bool:
        """
        Whether the node labelled ``label`` has an answer directly attached.

        Raises:
            LabelNotFoundError: If no node has this label.
        """
        node_id = self.tree.arena.get_id_by_value(label)
        if node_id is None:
            raise LabelNotFoundError(label)
        return node_id in self.tree.leaf_parents

    def get_children(self, label: str | None = None) -> list[str]:
        """
        Labels of the children of ``label``, in document order.

        Args:
            label: Node to list. Defaults to the root.

        Raises:
            LabelNotFoundError: If ``label`` matches no node, or the tree
                is empty and no root exists.
        """
        if label is None:
            label = self.root_label
            if label is None:
                raise LabelNotFoundError("root")

        arena = self.tree.arena
        children_ids = arena.get_children_by_value(label)
        if children_ids is None:
            raise LabelNotFoundError(label)

        children = [arena.get(child_id) for child_id in children_ids]

        logger.debug("get_children", label=label, num_children=len(children))
        return children  # type: ignore[return-value]

    def get_answer(self, label: str) -> str | None:
        """
        The answer text for a question label.

        Returns the single child of ``label`` when that child is an answer,
        otherwise None.

        Raises:
            LabelNotFoundError: If no node has this label.
        """
        children = self.get_children(label)
        if len(children) == 1 and self.is_answer_bearing(label):
            return children[0]
        return None

    def contains(self, label: str) -> bool:
        return self.tree.arena.contains(label)

    def get_parent(self, node_id: NodeId) -> NodeId | None:
        return self.tree.arena.get_parent(node_id)
