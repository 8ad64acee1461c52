"""
qnatree CLI - Command Line Interface

Usage:
    python -m qnatree check db.json
    python -m qnatree tree db.json
    python -m qnatree chat --document db.json --db questions.db
    python -m qnatree questions --db questions.db --limit 20

Settings not given on the command line come from QNATREE_* environment
variables (or a .env file), or from --config FILE.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog
from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from qnatree.builder import QATree, TreeBuilder
from qnatree.config import BotConfig, configure_logging
from qnatree.exceptions import ConfigError, QnATreeError, TreeError

logger = structlog.get_logger(__name__)

console = Console()


def load_config(args) -> BotConfig:
    """Merge --config / environment settings with command-line overrides."""
    config = BotConfig.from_json(args.config) if args.config else BotConfig.from_env()

    if getattr(args, "document", None):
        config.document_path = Path(args.document)
    if getattr(args, "db", None):
        config.questions_db_path = Path(args.db)
    if args.log_level:
        config.log_level = args.log_level

    return config


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {number}")
    return number


def _build_or_exit(path: Path) -> QATree:
    try:
        return TreeBuilder().build_from_file(path)
    except TreeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def cmd_check(args, config: BotConfig):
    """Build the tree and report its size."""
    tree = _build_or_exit(config.document_path)

    console.print(f"✓ {config.document_path} is a valid Q&A document")
    console.print(f"  Root: {tree.arena.get_root_value()}")
    console.print(f"  Total nodes: {tree.total_nodes}")
    console.print(f"  Answers: {len(tree.leaf_parents)}")

    return tree


def cmd_tree(args, config: BotConfig):
    """Print the document hierarchy."""
    tree = _build_or_exit(config.document_path)
    arena = tree.arena

    rendered: dict[int, Tree] = {}
    top = Tree(str(config.document_path), guide_style="dim")

    # Parents always precede their children, so one pass in id order suffices
    for node_id, node in arena.iter_nodes():
        style = "green" if node.is_leaf else "bold"
        parent_tree = rendered[node.parent] if node.parent is not None else top
        rendered[node_id] = parent_tree.add(Text(node.data, style=style))

    console.print(top)
    return tree


def cmd_chat(args, config: BotConfig):
    """Chat with the bot in the terminal."""
    from qnatree.conversation import ConversationDriver
    from qnatree.navigator import Navigator
    from qnatree.storage import SQLiteQuestionStore
    from qnatree.transport import ConsoleTransport, run_reply_loop

    try:
        config.validate()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    navigator = Navigator(_build_or_exit(config.document_path))
    store = SQLiteQuestionStore(config.questions_db_path)
    driver = ConversationDriver(navigator, store)

    console.print("Type a question, /help for help, Ctrl-D to quit.")
    run_reply_loop(ConsoleTransport(console=console), driver)


def cmd_questions(args, config: BotConfig):
    """List saved unanswered questions."""
    from qnatree.storage import SQLiteQuestionStore

    store = SQLiteQuestionStore(config.questions_db_path)
    questions = store.list(limit=args.limit)

    if not questions:
        console.print("No saved questions.")
        return questions

    table = Table(title=f"Unanswered questions ({store.count()} total)")
    table.add_column("ID", justify="right")
    table.add_column("User", justify="right")
    table.add_column("Saved at")
    table.add_column("Question")

    for q in questions:
        table.add_row(
            str(q.id),
            str(q.user_id),
            q.created_at.isoformat(sep=" ") if q.created_at else "",
            q.question,
        )

    console.print(table)
    return questions


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="qnatree - Q&A tree navigation bot"
    )
    parser.add_argument("--config", "-c", help="Path to a JSON config file")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: from config)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate a Q&A document")
    check_parser.add_argument("document", nargs="?", help="Path to the JSON document")

    # Tree command
    tree_parser = subparsers.add_parser("tree", help="Print the document hierarchy")
    tree_parser.add_argument("document", nargs="?", help="Path to the JSON document")

    # Chat command
    chat_parser = subparsers.add_parser("chat", help="Chat with the bot in the terminal")
    chat_parser.add_argument("--document", "-d", help="Path to the JSON document")
    chat_parser.add_argument("--db", help="Unanswered-questions SQLite database")

    # Questions command
    questions_parser = subparsers.add_parser("questions", help="List saved questions")
    questions_parser.add_argument("--db", help="Unanswered-questions SQLite database")
    questions_parser.add_argument(
        "--limit", "-n",
        type=_non_negative_int,
        default=None,
        help="Show only the most recent N questions",
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args)
        configure_logging(config.log_level, config.log_json)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    commands = {
        "check": cmd_check,
        "tree": cmd_tree,
        "chat": cmd_chat,
        "questions": cmd_questions,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return None

    try:
        return handler(args, config)
    except QnATreeError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
