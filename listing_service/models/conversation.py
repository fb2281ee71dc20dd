"""
Conversation models shared with the AI assistant.
Conversations hold messages; hidden system messages carry assistant context.
"""

from sqlalchemy import String, Text, Boolean, ForeignKey, Enum as SQLEnum, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column
import enum
import uuid
from typing import Optional

from listing_service.database import Base


class MessageSender(str, enum.Enum):
    SYSTEM = "system"
    AI = "ai"
    USER = "user"


class SystemPrompt(Base):
    """Default instructions a conversation starts from."""

    __tablename__ = "system_prompts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)


class Conversation(Base):
    """A chat between a user and the AI assistant."""

    __tablename__ = "conversations"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    system_prompt_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("system_prompts.id", ondelete="SET NULL"),
        nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True
    )


class Message(Base):
    """
    A single conversation message.
    is_visible=False marks context messages that the end user never sees.
    """

    __tablename__ = "messages"

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    sender: Mapped[MessageSender] = mapped_column(
        SQLEnum(MessageSender, values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    is_visible: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True
    )


conversation_history_index = Index(
    "idx_messages_conversation_created",
    Message.conversation_id,
    Message.created_at
)
