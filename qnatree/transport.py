"""
Transport - Boundary Between the Driver and a Chat Network

A transport delivers user events to the ConversationDriver and sends its
replies back. The package ships a console transport; network transports
implement the same three methods.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import IO, Iterable, Union

import structlog
from rich.console import Console

from qnatree.conversation import COMMANDS, NO_SAVE_CHOICE, SAVE_CHOICE, ConversationDriver
from qnatree.models import CallbackQuery, IncomingMessage, Reply

logger = structlog.get_logger(__name__)

Event = Union[IncomingMessage, CallbackQuery]


class ChatTransport(ABC):
    """Abstract chat transport."""

    @abstractmethod
    def register_commands(self, commands: list[tuple[str, str]]) -> None:
        """Advertise the bot's commands to the chat network."""

    @abstractmethod
    def poll(self) -> Iterable[Event]:
        """Yield incoming events until the transport is closed."""

    @abstractmethod
    def send(self, reply: Reply) -> None:
        """Deliver a reply."""


class ConsoleTransport(ChatTransport):
    """
    Chat with the bot in a terminal.

    Every input line is a message from a single local user. After the
    bot offers to save a question, "yes" / "no" act as button presses.
    """

    CHAT_ID = 0
    USER_ID = 0

    def __init__(
        self,
        input_stream: IO[str] | None = None,
        console: Console | None = None,
    ):
        self.input_stream = input_stream or sys.stdin
        self.console = console or Console()
        self._awaiting_choice = False
        self._message_id = 0

    def register_commands(self, commands: list[tuple[str, str]]) -> None:
        for command, description in commands:
            self.console.print(f"[bold]/{command}[/bold] - {description}")

    def poll(self) -> Iterable[Event]:
        for line in self.input_stream:
            text = line.rstrip("\n")
            self._message_id += 1

            if self._awaiting_choice and text.strip().lower() in {"yes", "no"}:
                self._awaiting_choice = False
                yield CallbackQuery(
                    chat_id=self.CHAT_ID,
                    user_id=self.USER_ID,
                    data=SAVE_CHOICE if text.strip().lower() == "yes" else NO_SAVE_CHOICE,
                    message_id=self._message_id - 1,
                )
                continue

            self._awaiting_choice = False
            yield IncomingMessage(
                chat_id=self.CHAT_ID,
                user_id=self.USER_ID,
                text=text,
                message_id=self._message_id,
            )

    def send(self, reply: Reply) -> None:
        self.console.print(reply.text, markup=False)

        if reply.choices:
            self._awaiting_choice = True
            options = " / ".join(choice.text.lower() for choice in reply.choices)
            self.console.print(f"  ({options})", style="dim")

        if reply.keyboard:
            for label in reply.keyboard:
                self.console.print(f"  > {label}", style="cyan", markup=False)


def run_reply_loop(transport: ChatTransport, driver: ConversationDriver) -> None:
    """
    Feed every transport event through the driver until input ends.

    A failure to handle or send one event is logged and the loop moves on.
    """
    transport.register_commands(COMMANDS)
    logger.info("reply_loop_started", transport=type(transport).__name__)

    try:
        for event in transport.poll():
            try:
                if isinstance(event, CallbackQuery):
                    reply = driver.handle_callback(event)
                else:
                    reply = driver.handle_message(event)
                transport.send(reply)
            except Exception as e:
                logger.error("event_failed", error=str(e), event_type=type(event).__name__)
    except KeyboardInterrupt:
        pass

    logger.info("reply_loop_stopped")
