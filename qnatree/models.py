"""
qnatree Data Models

Pydantic models for the records that cross the conversation boundary:
what a transport hands to the driver, what the driver hands back, and
what the question store keeps.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


# =============================================================================
# Transport Models
# =============================================================================


class IncomingMessage(BaseModel):
    """A message a user sent to the bot."""

    chat_id: int
    user_id: int = 0
    text: str | None = None  # None for stickers, photos and other non-text content
    message_id: int | None = None

    @property
    def is_command(self) -> bool:
        return bool(self.text) and self.text.startswith("/")


class CallbackQuery(BaseModel):
    """A press on one of the inline choice buttons."""

    chat_id: int
    user_id: int = 0
    data: str | None = None
    message_id: int | None = None


class Choice(BaseModel):
    """An inline button attached to a single reply."""

    text: str
    data: str


class Reply(BaseModel):
    """What the bot sends back for one incoming event."""

    chat_id: int
    text: str
    keyboard: list[str] | None = None  # Reply keyboard, one label per row
    choices: list[Choice] = Field(default_factory=list)
    remove_choices_from: int | None = None  # Message whose inline buttons to drop


# =============================================================================
# Storage Models
# =============================================================================


class UnansweredQuestion(BaseModel):
    """A question the bot could not answer and the user chose to save."""

    id: int
    user_id: int
    question: str
    created_at: datetime | None = None
