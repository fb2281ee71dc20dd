"""
Listing service for property records, their images, price history and owners.
Assembles the listing aggregate, applies quota and update rules, notifies
wishlisting users of price changes and keeps the AI assistant context in sync.
"""

from typing import Optional, List, Dict, Any, Iterable, Sequence
from collections import defaultdict
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
import asyncio
import uuid
import logging

from listing_service.config import get_settings
from listing_service.models.property import Property, PropertyStatus
from listing_service.models.activity import PricingHistory
from listing_service.models.user import UserRole
from listing_service.repositories.property import PropertyRepository
from listing_service.repositories.user import UserRepository
from listing_service.repositories.image import ImageRepository
from listing_service.repositories.activity import (
    ViewRepository,
    PricingHistoryRepository,
    WishlistRepository
)
from listing_service.repositories.conversation import ConversationRepository
from listing_service.schemas.image import (
    PropertyImageResponse,
    PropertyViewResponse,
    PricingHistoryResponse
)
from listing_service.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyDetails,
    PropertyWithRelations,
    PriceChangeDetails
)
from listing_service.schemas.user import OwnerSummary
from listing_service.services.assistant import (
    ChatModelClient,
    ChatSessionRegistry,
    GeminiChatClient,
    build_chat_history
)
from listing_service.services.notification import EmailService, PriceChangeNotifier
from listing_service.utils.exceptions import (
    PropertyNotFoundError,
    UserNotFoundError,
    QuotaExceededError,
    DeleteFailedError
)

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through a partial update
_REQUIRED_FIELDS = {"title", "price", "currency", "status", "is_verified"}


def _group_by_property(records: Iterable[Any]) -> Dict[uuid.UUID, List[Any]]:
    """Partition child rows by property_id, keeping one row per child id."""
    grouped: Dict[uuid.UUID, Dict[uuid.UUID, Any]] = defaultdict(dict)
    for record in records:
        grouped[record.property_id].setdefault(record.id, record)
    return {property_id: list(children.values()) for property_id, children in grouped.items()}


def _or_unknown(value: Any, suffix: str = "") -> str:
    # Zero counts as missing, like an empty string
    if not value:
        return "Unknown"
    value = getattr(value, "value", value)
    return f"{value}{suffix}"


def build_property_summary(
    property_obj: Property,
    image_count: int,
    pricing_history: Sequence[PricingHistory]
) -> str:
    """
    Build the plain-text listing summary handed to the AI assistant.

    Args:
        property_obj: Verified property
        image_count: Number of images attached to the property
        pricing_history: Price timeline of the property

    Returns:
        Multi-line summary with one "- Label: value" line per attribute
    """
    if pricing_history:
        history_text = ", ".join(
            f"{entry.price} {entry.currency} on {entry.effective_date.isoformat()}"
            for entry in pricing_history
        )
    else:
        history_text = "None"

    price = (
        f"{property_obj.price} {property_obj.currency}"
        if property_obj.price else "Unknown"
    )

    lines = [
        f"- ID: {property_obj.id}",
        f"- Title: {_or_unknown(property_obj.title)}",
        f"- Type: {_or_unknown(property_obj.property_type)}",
        f"- Description: {_or_unknown(property_obj.description)}",
        f"- Transaction: {_or_unknown(property_obj.transaction_type)}",
        f"- Price: {price}",
        f"- Size: {_or_unknown(property_obj.size, ' sqm')}",
        f"- Rooms: {_or_unknown(property_obj.rooms)}",
        f"- Address: {_or_unknown(property_obj.address)}",
        f"- Status: {_or_unknown(property_obj.status)}",
        f"- Is Verified: {'Yes' if property_obj.is_verified else 'No'}",
        f"- Images: {image_count} images",
        f"- Facilities: {_or_unknown(property_obj.facilities)}",
        f"- Pricing History: {history_text}",
    ]
    return "\n".join(lines)


class ListingService:
    """
    Service for property listings.
    Every write commits step by step; a failure part way leaves the earlier steps applied.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        notifier: Optional[PriceChangeNotifier] = None,
        chat_sessions: Optional[ChatSessionRegistry] = None,
        chat_client: Optional[ChatModelClient] = None
    ):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.image_repo = ImageRepository(db_session)
        self.view_repo = ViewRepository(db_session)
        self.pricing_repo = PricingHistoryRepository(db_session)
        self.wishlist_repo = WishlistRepository(db_session)
        self.conversation_repo = ConversationRepository(db_session)
        self.notifier = notifier or EmailService()
        self.chat_sessions = chat_sessions if chat_sessions is not None else ChatSessionRegistry()
        self._chat_client = chat_client
        self.settings = get_settings()

    @property
    def chat_client(self) -> ChatModelClient:
        if self._chat_client is None:
            self._chat_client = GeminiChatClient(self.settings)
        return self._chat_client

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def _load_relations(self, property_ids: List[uuid.UUID]):
        """Fetch images, views and price history of all properties, one query per collection."""
        images = await self.image_repo.get_for_properties(property_ids)
        views = await self.view_repo.get_for_properties(property_ids)
        pricing = await self.pricing_repo.get_for_properties(property_ids)
        return _group_by_property(images), _group_by_property(views), _group_by_property(pricing)

    def _assemble(
        self,
        property_obj: Property,
        owner: OwnerSummary,
        images: Sequence[Any],
        views: Sequence[Any],
        pricing: Sequence[Any],
        is_wished: bool
    ) -> PropertyWithRelations:
        base = PropertyResponse.model_validate(property_obj)
        return PropertyWithRelations(
            **base.model_dump(),
            images=[PropertyImageResponse.model_validate(image) for image in images],
            views=[PropertyViewResponse.model_validate(view) for view in views],
            pricing_history=[PricingHistoryResponse.model_validate(entry) for entry in pricing],
            owner=owner,
            is_wished=is_wished,
        )

    async def get_properties(
        self,
        filter_param: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None
    ) -> List[PropertyWithRelations]:
        """
        List properties for a status filter with their relations.

        Args:
            filter_param: "active", "sold_rented" or "inactive" restrict to verified
                          listings of that status; any other value, or None, returns everything
            user_id: Optional viewing user for the wish flag

        Returns:
            Listing aggregates, empty when nothing matches
        """
        rows = await self.property_repo.list_with_owner(filter_param)
        if not rows:
            return []

        property_ids = [row[0].id for row in rows]
        images_by, views_by, pricing_by = await self._load_relations(property_ids)
        wished = await self.wishlist_repo.get_wished_property_ids(user_id, property_ids)

        results = []
        for property_obj, owner_ref, owner_email, owner_username, owner_role in rows:
            results.append(self._assemble(
                property_obj,
                OwnerSummary.from_columns(owner_ref, owner_email, owner_username, owner_role),
                images_by.get(property_obj.id, []),
                views_by.get(property_obj.id, []),
                pricing_by.get(property_obj.id, []),
                property_obj.id in wished,
            ))

        logger.debug(f"Assembled {len(results)} listings for filter {filter_param!r}")
        return results

    async def get_property(
        self,
        property_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None
    ) -> PropertyWithRelations:
        """
        Get a single listing aggregate.

        Args:
            property_id: UUID of the property
            user_id: Optional viewing user for the wish flag

        Returns:
            Listing aggregate

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        row = await self.property_repo.get_with_owner(property_id, user_id)
        if row is None:
            raise PropertyNotFoundError(str(property_id))

        property_obj, owner_ref, owner_email, owner_username, owner_role, is_wished = row
        images_by, views_by, pricing_by = await self._load_relations([property_obj.id])

        return self._assemble(
            property_obj,
            OwnerSummary.from_columns(owner_ref, owner_email, owner_username, owner_role),
            images_by.get(property_obj.id, []),
            views_by.get(property_obj.id, []),
            pricing_by.get(property_obj.id, []),
            bool(is_wished),
        )

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def add_new_property(self, property_data: PropertyCreate) -> PropertyDetails:
        """
        Create a listing with its images and initial price history entry.

        Args:
            property_data: Property creation data

        Returns:
            Created property with inserted images, no views and one price entry

        Raises:
            UserNotFoundError: If the owner doesn't exist
            QuotaExceededError: If a private seller has no listings left
        """
        quota = await self.user_repo.get_quota(property_data.owner_id)
        if quota is None:
            raise UserNotFoundError(str(property_data.owner_id))

        role, listing_limit = quota
        if role == UserRole.PRIVATE_SELLER and listing_limit is not None and listing_limit <= 0:
            logger.info(f"Listing quota exhausted for user {property_data.owner_id}")
            raise QuotaExceededError()

        currency = property_data.currency or self.settings.default_currency
        create_data = property_data.model_dump(exclude={"images", "currency", "status"})
        create_data["currency"] = currency
        create_data["status"] = property_data.status or PropertyStatus.ACTIVE

        property_obj = await self.property_repo.create_property(create_data)

        # A zero limit never reaches this point through the quota check above;
        # NULL means no quota is tracked, so neither is decremented.
        if role == UserRole.PRIVATE_SELLER and (listing_limit or 0) != 0:
            current = await self.user_repo.get_quota(property_data.owner_id)
            current_limit = current[1] if current else None
            await self.user_repo.set_listing_limit(property_data.owner_id, (current_limit or 1) - 1)

        images = []
        if property_data.images:
            images = await self.image_repo.add_images(property_obj.id, property_data.images)

        pricing_entry = await self.pricing_repo.append(property_obj.id, property_data.price, currency)

        logger.info(f"Property {property_obj.id} listed by user {property_data.owner_id}")
        return PropertyDetails(
            **PropertyResponse.model_validate(property_obj).model_dump(),
            images=[PropertyImageResponse.model_validate(image) for image in images],
            views=[],
            pricing_history=[PricingHistoryResponse.model_validate(pricing_entry)],
        )

    async def _notify_price_change(self, property_id: uuid.UUID, details: PriceChangeDetails) -> int:
        """
        Email every wishlisting user about a price change.
        Sends run concurrently; individual failures are logged and ignored.

        Returns:
            Number of notifications dispatched
        """
        user_ids = await self.wishlist_repo.get_user_ids(property_id)
        recipients = [email for _, email in await self.user_repo.get_emails(user_ids) if email]
        if not recipients:
            return 0

        results = await asyncio.gather(
            *(self.notifier.send_price_change_notification(email, details) for email in recipients),
            return_exceptions=True
        )
        for email, result in zip(recipients, results):
            if isinstance(result, Exception):
                logger.error(f"Price change notification to {email} failed: {result}")

        logger.info(f"Dispatched {len(recipients)} price change notifications for property {property_id}")
        return len(recipients)

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate
    ) -> PropertyWithRelations:
        """
        Apply a partial update to a listing.

        Args:
            property_id: UUID of the property to update
            property_data: Fields to change; only explicitly set fields are applied

        Returns:
            Updated listing aggregate, is_wished is always False

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        existing = await self.property_repo.get_by_id(property_id)
        if not existing:
            raise PropertyNotFoundError(str(property_id))

        old_price = existing.price
        old_currency = existing.currency
        old_title = existing.title
        old_address = existing.address

        update_data = {
            field: value for field, value in property_data.changed_fields().items()
            if value is not None or field not in _REQUIRED_FIELDS
        }
        price_changed = update_data.get("price") is not None and update_data["price"] != old_price
        update_data["updated_at"] = datetime.now(timezone.utc)

        updated = await self.property_repo.update(property_id, update_data)
        if not updated:
            raise PropertyNotFoundError(str(property_id))

        if price_changed:
            await self._notify_price_change(property_id, PriceChangeDetails(
                name=old_title,
                address=old_address or "N/A",
                old_price=old_price,
                new_price=update_data["price"],
            ))

        if property_data.has_images:
            await self.image_repo.replace_images(property_id, property_data.images)

        if "price" in update_data or "currency" in update_data:
            new_price = update_data["price"] if update_data.get("price") is not None else old_price
            new_currency = update_data.get("currency") or old_currency or self.settings.default_currency
            await self.pricing_repo.append(property_id, new_price, new_currency)

        logger.info(f"Property {property_id} updated: {sorted(k for k in update_data if k != 'updated_at')}")

        row = await self.property_repo.get_with_owner(property_id)
        property_obj, owner_ref, owner_email, owner_username, owner_role, _ = row
        images_by, views_by, pricing_by = await self._load_relations([property_id])
        return self._assemble(
            property_obj,
            OwnerSummary.from_columns(owner_ref, owner_email, owner_username, owner_role),
            images_by.get(property_id, []),
            views_by.get(property_id, []),
            pricing_by.get(property_id, []),
            False,
        )

    async def delete_property(self, property_id: uuid.UUID) -> None:
        """
        Delete a listing. Child rows are removed by the store's cascades.

        Args:
            property_id: UUID of the property to delete

        Raises:
            PropertyNotFoundError: If the property doesn't exist
            DeleteFailedError: If the store fails during deletion
        """
        try:
            if not await self.property_repo.exists(property_id):
                raise PropertyNotFoundError(str(property_id))

            await self.property_repo.delete(property_id)
            logger.info(f"Property with ID {property_id} deleted successfully")
        except PropertyNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise DeleteFailedError(str(e)) from e

    # ------------------------------------------------------------------
    # Verification and assistant context
    # ------------------------------------------------------------------

    async def verify_property(self, property_id: uuid.UUID) -> PropertyResponse:
        """
        Mark a listing as verified and publish it to active assistant conversations.

        Args:
            property_id: UUID of the property to verify

        Returns:
            Updated property

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        updated = await self.property_repo.update(property_id, {"is_verified": True})
        if not updated:
            raise PropertyNotFoundError(str(property_id))

        response = PropertyResponse.model_validate(updated)
        logger.info(f"Property {property_id} verified")

        images = await self.image_repo.get_for_properties([property_id])
        pricing = await self.pricing_repo.get_for_properties([property_id])
        summary = build_property_summary(updated, len(images), pricing)

        synced = await self._sync_assistant_context(summary)
        logger.info(f"Property {property_id} added to {synced} assistant conversations")
        return response

    async def _sync_assistant_context(self, summary: str) -> int:
        """
        Append a listing summary to the hidden system message of every active conversation.

        Returns:
            Number of conversations whose context was updated
        """
        synced = 0
        for conversation in await self.conversation_repo.get_active_conversations():
            conversation_id = conversation.id
            if not conversation.system_prompt_id:
                logger.warning(f"Conversation {conversation_id} has no system prompt, skipping")
                continue

            system_message = await self.conversation_repo.get_hidden_system_message(conversation_id)
            if system_message:
                await self.conversation_repo.update_message_content(
                    system_message.id,
                    f"{system_message.content}\n\n### New Property Added:\n{summary}"
                )
            else:
                prompt = await self.conversation_repo.get_system_prompt(conversation.system_prompt_id)
                if not prompt:
                    logger.warning(f"No system prompt found for conversation {conversation_id}")
                    continue
                await self.conversation_repo.add_hidden_system_message(
                    conversation_id,
                    f"{prompt.content}\n\n### Available Properties:\n{summary}"
                )

            synced += 1
            await self._refresh_chat_session(conversation_id)

        return synced

    async def _refresh_chat_session(self, conversation_id: uuid.UUID) -> bool:
        """
        Replace a live chat session with one seeded from the stored history.
        Conversations without a live session are left alone.

        Returns:
            True if the session was rebuilt
        """
        if self.chat_sessions.get(conversation_id) is None:
            return False

        try:
            messages = await self.conversation_repo.get_message_history(conversation_id)
            session = self.chat_client.start_chat(build_chat_history(messages))
            self.chat_sessions.set(conversation_id, session)
            logger.debug(f"Rebuilt chat session for conversation {conversation_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to rebuild chat session for conversation {conversation_id}: {e}")
            return False
