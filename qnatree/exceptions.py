"""
qnatree Custom Exceptions

All module-specific exceptions inherit from QnATreeError.
"""


class QnATreeError(Exception):
    """Base exception for all qnatree errors."""

    pass


# Tree Exceptions
class TreeError(QnATreeError):
    """Base exception for tree construction and lookup errors."""

    pass


class DocumentLoadError(TreeError):
    """Raised when the Q&A document cannot be read."""

    pass


class DocumentFormatError(TreeError):
    """
    Raised when the document holds a value that is neither a mapping nor text.

    Fatal: the build is aborted and no partial tree is returned.
    """

    def __init__(self, message: str, path: tuple[str, ...] = ()):
        self.path = path
        if path:
            message = f"{message} (at {' > '.join(path)})"
        super().__init__(message)


class LabelNotFoundError(TreeError):
    """Raised when a label-keyed lookup finds no node with that label."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"No tree node with label: {label}")


class LeafWithoutParentError(TreeError):
    """Raised when a leaf node has no parent where one is required."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"Leaf node {node_id} has no parent")


# Storage Exceptions
class StorageError(QnATreeError):
    """Raised when the unanswered-question store fails."""

    pass


# Configuration Exceptions
class ConfigError(QnATreeError):
    """Raised when configuration is missing or invalid."""

    pass
