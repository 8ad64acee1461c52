"""
Conversation Driver - From User Text to Bot Replies

Implements the bot's reply logic independently of any chat network.
A transport turns network updates into IncomingMessage / CallbackQuery
objects, hands them to the driver and sends back the Reply it gets.

For a plain text message the driver:
1. Answers commands (/start, /help, /reset)
2. Answers a known question with its answer text
3. Opens a known category and offers its children as a keyboard
4. Otherwise apologises and offers to save the question for later

The keyboard always reflects where the user is in the tree: the root's
children after an answer or a reset, a category's children while
browsing.
"""

from __future__ import annotations

import structlog

from qnatree.exceptions import LabelNotFoundError, StorageError
from qnatree.models import CallbackQuery, Choice, IncomingMessage, Reply
from qnatree.navigator import Navigator
from qnatree.storage import QuestionStore

logger = structlog.get_logger(__name__)

# (command, description) pairs for transports that register bot commands
COMMANDS: list[tuple[str, str]] = [
    ("start", "Start"),
    ("reset", "Back to the beginning"),
    ("help", "Help"),
]

SAVE_CHOICE = "save"
NO_SAVE_CHOICE = "nosave"

GREETING_TEXT = "Hi! I'm the Q&A bot."
HELP_TEXT = "Pick a question or type your own."
RESET_TEXT = "Back to the start."
UNKNOWN_COMMAND_TEXT = "Unknown command."
NOT_TEXT_TEXT = "Sorry, I only understand text questions!"
UNKNOWN_QUESTION_TEXT = (
    "Sorry, I don't know the answer to your question... "
    "Should I save it so it gets answered later?"
)
CHOICE_SAVED_TEXT = "I saved your choice, thank you!"
CATEGORY_TEXT = 'Category: "{label}"'


class ConversationDriver:
    """
    Turns incoming events into replies using a Navigator.

    Per-chat state is limited to the current keyboard and the last
    question the bot could not answer.
    """

    def __init__(self, navigator: Navigator, question_store: QuestionStore):
        self.navigator = navigator
        self.question_store = question_store

        self._keyboards: dict[int, list[str] | None] = {}
        self._pending: dict[int, IncomingMessage] = {}

    def handle_message(self, message: IncomingMessage) -> Reply:
        """Reply to one text (or non-text) message."""
        chat_id = message.chat_id

        if message.text is None:
            return self._reply(chat_id, NOT_TEXT_TEXT)

        if message.is_command:
            return self._reply(chat_id, self._match_command(chat_id, message.text))

        text = message.text.strip()

        answer = self._query_question(chat_id, text)
        if answer is not None:
            return self._reply(chat_id, answer)

        if self.navigator.contains(text):
            return self._reply(chat_id, CATEGORY_TEXT.format(label=text))

        # Unknown text: remember it and offer to save it
        self._pending[chat_id] = message.model_copy(update={"text": text})
        logger.info("question_unknown", chat_id=chat_id, user_id=message.user_id)

        return self._reply(
            chat_id,
            UNKNOWN_QUESTION_TEXT,
            choices=[
                Choice(text="Yes", data=SAVE_CHOICE),
                Choice(text="No", data=NO_SAVE_CHOICE),
            ],
        )

    def handle_callback(self, callback: CallbackQuery) -> Reply:
        """Handle a press on the save / don't-save buttons."""
        chat_id = callback.chat_id
        pending = self._pending.pop(chat_id, None)

        if callback.data == SAVE_CHOICE and pending is not None:
            self._save_question(pending)

        reply = self._reply(chat_id, CHOICE_SAVED_TEXT)
        reply.remove_choices_from = callback.message_id
        return reply

    def keyboard_for(self, chat_id: int) -> list[str] | None:
        """The keyboard currently shown to ``chat_id``."""
        return self._keyboards.get(chat_id)

    def _reply(
        self,
        chat_id: int,
        text: str,
        choices: list[Choice] | None = None,
    ) -> Reply:
        return Reply(
            chat_id=chat_id,
            text=text,
            keyboard=self._keyboards.get(chat_id),
            choices=choices or [],
        )

    def _match_command(self, chat_id: int, text: str) -> str:
        # "/start@my_bot arg" -> "start"
        command = text[1:].split(maxsplit=1)[0] if len(text) > 1 else ""
        command = command.split("@", 1)[0]

        if command == "start":
            self._reset_keyboard(chat_id)
            return GREETING_TEXT
        if command == "help":
            return HELP_TEXT
        if command == "reset":
            self._reset_keyboard(chat_id)
            return RESET_TEXT

        logger.debug("unknown_command", command=command)
        return UNKNOWN_COMMAND_TEXT

    def _query_question(self, chat_id: int, text: str) -> str | None:
        """
        Look ``text`` up in the tree and move the keyboard accordingly.

        Returns the answer when ``text`` is a question, else None.
        """
        try:
            answer = self.navigator.get_answer(text)
        except LabelNotFoundError as e:
            logger.warning("label_lookup_failed", error=str(e))
            self._reset_keyboard(chat_id)
            return None

        if answer is not None:
            self._reset_keyboard(chat_id)
            return answer

        children = self.navigator.get_children(text)
        if children:
            self._keyboards[chat_id] = children
        else:
            # An answer text was typed back at us
            self._reset_keyboard(chat_id)

        return None

    def _reset_keyboard(self, chat_id: int) -> None:
        try:
            self._keyboards[chat_id] = self.navigator.get_children()
        except LabelNotFoundError as e:
            logger.warning("keyboard_reset_failed", error=str(e))
            self._keyboards[chat_id] = None

    def _save_question(self, message: IncomingMessage) -> None:
        if not message.text:
            return
        try:
            row_id = self.question_store.add(message.text, message.user_id)
        except StorageError as e:
            logger.error("question_save_failed", error=str(e))
            return
        logger.info("question_stored", id=row_id, user_id=message.user_id)
