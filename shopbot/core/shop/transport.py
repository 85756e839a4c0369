"""
Outbound transport interface used by the shop service.
"""

from abc import ABC, abstractmethod

from shopbot.core.shop.models import OutboundMessage


class MessageSender(ABC):
    """Abstract base class for messaging transports."""

    @abstractmethod
    async def send(
        self,
        user_id: str,
        message: OutboundMessage,
        image: bytes | None = None,
    ) -> None:
        """
        Deliver a reply.

        Args:
            user_id: Conversation identifier
            message: Rendered reply; ``message.text`` doubles as the caption
            image: Resolved image bytes, or None for a text-only reply
        """
        pass

    async def typing(self, user_id: str) -> None:
        """Show a typing indicator, if the transport supports one."""
        pass
