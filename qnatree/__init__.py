"""
qnatree - Q&A Tree Navigation for Chat Bots

Turns a nested JSON document of categories, questions and answers into an
addressable tree and answers the lookups a conversational bot needs:

- Arena: append-only tree storage keyed by stable integer ids
- TreeBuilder: depth-first JSON document -> Arena + answer index
- Navigator: label-keyed queries (children, containment, answer detection)
- ConversationDriver: reply logic for commands, questions and categories
- SQLiteQuestionStore: keeps questions the bot could not answer

Usage:
    from qnatree import Navigator

    nav = Navigator.from_file("db.json")
    nav.get_children()                 # top-level entries under the root
    nav.get_children("Delivery")       # questions in a category
    nav.is_answer_bearing("How long does it take?")

Running the bot in a terminal:
    python -m qnatree chat --document db.json --db questions.db
"""

__version__ = "0.1.0"

from qnatree.arena import Arena, ArenaNode, NodeId
from qnatree.builder import QATree, TreeBuilder, build_tree
from qnatree.navigator import Navigator
from qnatree.conversation import ConversationDriver
from qnatree.storage import InMemoryQuestionStore, QuestionStore, SQLiteQuestionStore
from qnatree.transport import ChatTransport, ConsoleTransport, run_reply_loop
from qnatree.config import BotConfig, configure_logging
from qnatree.exceptions import (
    DocumentFormatError,
    DocumentLoadError,
    LabelNotFoundError,
    LeafWithoutParentError,
    QnATreeError,
)

__all__ = [
    # Version
    "__version__",
    # Tree
    "Arena",
    "ArenaNode",
    "NodeId",
    "QATree",
    "TreeBuilder",
    "build_tree",
    "Navigator",
    # Conversation
    "ConversationDriver",
    "ChatTransport",
    "ConsoleTransport",
    "run_reply_loop",
    # Storage
    "QuestionStore",
    "SQLiteQuestionStore",
    "InMemoryQuestionStore",
    # Config
    "BotConfig",
    "configure_logging",
    # Errors
    "QnATreeError",
    "DocumentFormatError",
    "DocumentLoadError",
    "LabelNotFoundError",
    "LeafWithoutParentError",
]
