"""
Conversation repository for the assistant context kept in hidden system messages.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from listing_service.repositories.base import BaseRepository
from listing_service.models.conversation import Conversation, Message, MessageSender, SystemPrompt
from typing import List, Optional
from datetime import datetime, timezone
import uuid
import logging

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[Conversation]):
    """
    Repository for conversations, their messages and system prompts.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Conversation, db)

    async def get_active_conversations(self) -> List[Conversation]:
        result = await self.db.execute(
            select(Conversation).where(Conversation.is_active.is_(True))
        )
        conversations = list(result.scalars().all())
        logger.debug(f"Found {len(conversations)} active conversations")
        return conversations

    async def get_hidden_system_message(self, conversation_id: uuid.UUID) -> Optional[Message]:
        """Get the hidden system message that carries the assistant context, if any."""
        result = await self.db.execute(
            select(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender == MessageSender.SYSTEM,
                Message.is_visible.is_(False)
            )
            .order_by(Message.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update_message_content(self, message_id: uuid.UUID, content: str) -> None:
        try:
            await self.db.execute(
                update(Message).where(Message.id == message_id).values(content=content)
            )
            await self.db.commit()
            logger.debug(f"Updated content of message {message_id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update message {message_id}: {e}")
            raise

    async def add_hidden_system_message(self, conversation_id: uuid.UUID, content: str) -> Message:
        """
        Insert a system message that is not shown to the end user.

        Args:
            conversation_id: Conversation the message belongs to
            content: Assistant context

        Returns:
            Created message
        """
        try:
            message = Message(
                id=uuid.uuid4(),
                conversation_id=conversation_id,
                sender=MessageSender.SYSTEM,
                content=content,
                is_visible=False,
                created_at=datetime.now(timezone.utc),
            )
            self.db.add(message)
            await self.db.commit()
            await self.db.refresh(message)
            logger.debug(f"Added hidden system message to conversation {conversation_id}")
            return message
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to add system message to conversation {conversation_id}: {e}")
            raise

    async def get_system_prompt(self, prompt_id: uuid.UUID) -> Optional[SystemPrompt]:
        result = await self.db.execute(
            select(SystemPrompt).where(SystemPrompt.id == prompt_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_message_history(self, conversation_id: uuid.UUID) -> List[Message]:
        """All messages of a conversation in creation order."""
        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
