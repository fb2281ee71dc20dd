"""
Price change notifications for wishlisting users.

Uses asyncio.to_thread to wrap the synchronous SendGrid client.
"""

import asyncio
import logging
from typing import Optional, Protocol

import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, HtmlContent

from listing_service.config import Settings, get_settings
from listing_service.schemas.property import PriceChangeDetails

logger = logging.getLogger(__name__)


class PriceChangeNotifier(Protocol):
    """Anything able to tell a user that a wishlisted listing changed price."""

    async def send_price_change_notification(self, email: str, details: PriceChangeDetails) -> bool:
        ...


def _format_price(value) -> str:
    try:
        return f"{float(value):,.2f}"
    except (ValueError, TypeError):
        return str(value)


def build_price_change_html(details: PriceChangeDetails) -> str:
    """Build the price change email body."""
    direction = "dropped" if details.new_price < details.old_price else "changed"
    return f"""
    <div style="font-family: Arial, sans-serif; color: #1f2937;">
        <h2 style="margin-bottom: 8px;">A property on your wishlist has {direction} in price</h2>
        <p style="margin: 4px 0;"><strong>{details.name}</strong></p>
        <p style="margin: 4px 0; color: #4b5563;">{details.address}</p>
        <table style="margin-top: 16px;">
            <tr>
                <td style="padding: 4px 12px 4px 0;">Old price</td>
                <td style="padding: 4px 0; text-decoration: line-through;">{_format_price(details.old_price)}</td>
            </tr>
            <tr>
                <td style="padding: 4px 12px 4px 0;">New price</td>
                <td style="padding: 4px 0; font-weight: 600;">{_format_price(details.new_price)}</td>
            </tr>
        </table>
    </div>
    """


class EmailService:
    """SendGrid-backed sender for listing notifications."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _send_mail(self, mail: Mail) -> bool:
        """Synchronous send via SendGrid. Returns True on success."""
        client = sendgrid.SendGridAPIClient(api_key=self.settings.sendgrid_api_key)
        response = client.send(mail)
        if response.status_code in (200, 201, 202):
            return True
        logger.error(
            "SendGrid returned status %s: %s",
            response.status_code,
            response.body,
        )
        return False

    async def send_price_change_notification(self, email: str, details: PriceChangeDetails) -> bool:
        """
        Send a price change email.

        Args:
            email: Recipient email address.
            details: Listing name, address and the old and new price.

        Returns:
            True on success, False when skipped or rejected by SendGrid.

        Raises:
            Exception: Transport failures propagate to the caller.
        """
        if not self.settings.sendgrid_api_key:
            logger.warning("SENDGRID_API_KEY not set, skipping price change email to %s", email)
            return False

        mail = Mail(
            from_email=Email(self.settings.notification_from_email, self.settings.notification_from_name),
            to_emails=To(email),
            subject=f"Price update for {details.name}",
            html_content=HtmlContent(build_price_change_html(details)),
        )
        result = await asyncio.to_thread(self._send_mail, mail)
        if result:
            logger.info("Price change email sent to %s", email)
        return result
