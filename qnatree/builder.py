"""
Tree Builder - Q&A Document to Arena

Turns a nested JSON document into an Arena, depth-first and pre-order:

    {
        "Delivery": {                        <- category
            "How long does it take?":        <- question
                "Two to three days."         <- answer (leaf)
        }
    }

- Mapping keys become nodes under the current parent, then their values
  are processed with the new node as parent
- Text values become leaf nodes; their parent's id is recorded in the
  leaf-parent index
- Anything else (numbers, booleans, null, arrays) aborts the build

Sibling order is the document's key order. Python's json module keeps
object keys in file order, so re-parsing the same file gives the same tree.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from qnatree.arena import Arena, NodeId
from qnatree.exceptions import DocumentFormatError, DocumentLoadError

logger = structlog.get_logger(__name__)


@dataclass
class QATree:
    """A built arena plus the parent ids of every answer, in encounter order."""

    arena: Arena[str] = field(default_factory=Arena)
    leaf_parents: list[NodeId] = field(default_factory=list)

    @property
    def total_nodes(self) -> int:
        return len(self.arena)

    @property
    def total_leaves(self) -> int:
        return sum(1 for _, node in self.arena.iter_nodes() if node.is_leaf)


class TreeBuilder:
    """
    Builds a QATree from a nested document.

    The builder runs once at startup. A format error anywhere in the
    document is fatal; no partially built tree is ever returned.
    """

    def build_from_file(self, path: Path | str) -> QATree:
        """
        Read a JSON document from disk and build its tree.

        Raises:
            DocumentLoadError: If the file cannot be read.
            DocumentFormatError: If the file is not valid JSON or holds
                a value that is neither a mapping nor text. Overly deep
                nesting is a format error too.
        """
        path = Path(path)

        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except OSError as e:
            raise DocumentLoadError(f"Cannot read document {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"Invalid JSON in {path}: {e}") from e
        except RecursionError as e:
            raise DocumentFormatError("Document nested too deeply") from e

        logger.info("document_loaded", path=str(path))
        return self.build(document)

    def build(self, document: Any) -> QATree:
        """
        Build a tree from an already parsed document.

        Args:
            document: A mapping of labels to nested mappings or answer text.

        Returns:
            QATree with the populated arena and leaf-parent index.
        """
        tree = QATree()

        try:
            self._parse_into_tree(tree, document, parent=None, path=())
        except RecursionError as e:
            raise DocumentFormatError("Document nested too deeply") from e

        if tree.total_nodes == 0:
            logger.warning("empty_document")

        logger.info(
            "tree_built",
            total_nodes=tree.total_nodes,
            total_answers=len(tree.leaf_parents),
            root=tree.arena.get_root_value(),
        )
        tree.arena.dump()

        return tree

    def _parse_into_tree(
        self,
        tree: QATree,
        value: Any,
        parent: NodeId | None,
        path: tuple[str, ...],
    ) -> None:
        if isinstance(value, dict):
            for label, children in value.items():
                if not isinstance(label, str):
                    raise DocumentFormatError(
                        f"Expected a text key, got {type(label).__name__}",
                        path=path,
                    )
                node_id = tree.arena.add_node(label, parent)
                self._parse_into_tree(tree, children, node_id, path + (label,))

        elif isinstance(value, str):
            tree.arena.add_node(value, parent)
            # A bare text document is a lone root leaf with nothing to record
            if parent is not None:
                tree.leaf_parents.append(parent)

        else:
            raise DocumentFormatError(
                f"Expected a mapping or text, got {type(value).__name__}",
                path=path,
            )


def build_tree(path: Path | str) -> QATree:
    """Shortcut for ``TreeBuilder().build_from_file(path)``."""
    return TreeBuilder().build_from_file(path)
