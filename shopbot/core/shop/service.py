"""
Shop service - runs the conversation engine for inbound messages.
Loads the session, applies one transition, saves it and delivers replies.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from shopbot.core.analytics import AnalyticsRecorder
from shopbot.core.exceptions import SessionStoreError
from shopbot.core.shop.concurrency import DeferredTasks, KeyedLocks
from shopbot.core.shop.engine import ConversationEngine
from shopbot.core.shop.models import AnalyticsEvent, OutboundMessage, Session
from shopbot.core.shop.transport import MessageSender
from shopbot.db.session_store import SessionStore
from shopbot.integrations.images import ImageFetcher

logger = logging.getLogger(__name__)

STORAGE_ERROR_MESSAGE = (
    "Sorry, we couldn't save your progress just now. Please send your message again."
)
DEFAULT_ERROR_MESSAGE = (
    "Sorry, I encountered an error processing your request. "
    'Please try again or type "menu" to return to the main menu.'
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShopService:
    """
    Entry point for the transport layer.

    Messages for the same user are handled one at a time: the per-user lock
    is held from session load until the replies are sent, and covers the
    deferred post-checkout menu as well.

    Usage:
        service = ShopService(engine, store, sender, image_fetcher, analytics)
        await service.handle_message("42", "Ann", "menu")
    """

    def __init__(
        self,
        engine: ConversationEngine,
        store: SessionStore,
        sender: MessageSender,
        image_fetcher: Optional[ImageFetcher] = None,
        analytics: Optional[AnalyticsRecorder] = None,
        typing_delay: float = 2.0,
        error_message: str = DEFAULT_ERROR_MESSAGE,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.engine = engine
        self.store = store
        self.sender = sender
        self.image_fetcher = image_fetcher
        self.analytics = analytics
        self.typing_delay = typing_delay
        self.error_message = error_message
        self.clock = clock

        self.locks = KeyedLocks()
        self.deferred = DeferredTasks()
        self._background: set[asyncio.Task] = set()

    async def handle_message(
        self,
        user_id: str,
        user_name: str,
        text: str,
        now: Optional[datetime] = None,
    ) -> list[OutboundMessage]:
        """
        Process one inbound message and deliver the replies.

        Returns the replies that were sent. On failure the user gets an
        apology and the stored session is left as it was.
        """
        await self._typing(user_id)

        async with self.locks.get(user_id):
            # A newer message supersedes the pending post-checkout menu
            self.deferred.cancel(user_id)

            if self.typing_delay > 0:
                await asyncio.sleep(self.typing_delay)

            try:
                try:
                    session = await self.store.load(user_id)
                except SessionStoreError as e:
                    logger.error(f"Session load failed for {user_id}: {e}")
                    return await self._send_error(user_id, STORAGE_ERROR_MESSAGE)

                if session is None:
                    logger.info(f"New session for user {user_id}")
                    session = Session()

                now = now or self.clock()
                result = self.engine.transition(session, text, now, user_name=user_name)

                if not await self.store.save(user_id, result.session):
                    return await self._send_error(user_id, STORAGE_ERROR_MESSAGE)

                logger.debug(
                    f"User {user_id}: {session.state.value} -> {result.session.state.value}"
                )

                self._record(user_id, result.events, now)

                if result.deferred is not None:
                    self.deferred.schedule(
                        user_id,
                        result.deferred.delay_seconds,
                        lambda: self._show_menu_later(user_id, user_name),
                    )

                await self._deliver(user_id, result.replies)
                return list(result.replies)

            except Exception as e:
                logger.error(f"Error processing message from {user_id}: {e}", exc_info=True)
                return await self._send_error(user_id, self.error_message)

    async def reset(self, user_id: str) -> bool:
        """Forget a user's session so the next message starts over."""
        async with self.locks.get(user_id):
            self.deferred.cancel(user_id)
            return await self.store.delete(user_id)

    async def close(self) -> None:
        """Cancel deferred tasks and wait for pending analytics writes."""
        await self.deferred.cancel_all()
        await self.drain()

    async def drain(self) -> None:
        """Wait for background analytics tasks."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _show_menu_later(self, user_id: str, user_name: str) -> None:
        async with self.locks.get(user_id):
            session = await self.store.load(user_id)
            if session is None:
                return

            result = self.engine.return_to_menu(session, self.clock(), user_name=user_name)
            if result is None:
                logger.debug(f"User {user_id} moved on, skipping post-checkout menu")
                return

            if not await self.store.save(user_id, result.session):
                logger.warning(f"Post-checkout menu for {user_id} not saved, skipping")
                return

            await self._deliver(user_id, result.replies)

    async def _deliver(self, user_id: str, replies: Iterable[OutboundMessage]) -> None:
        for reply in replies:
            image = await self._fetch_image(reply.image)
            await self.sender.send(user_id, reply, image)

    async def _fetch_image(self, reference: Optional[str]) -> Optional[bytes]:
        if not reference or self.image_fetcher is None:
            return None
        try:
            return await self.image_fetcher.fetch(reference)
        except Exception as e:
            logger.warning(f"Image fetch failed for {reference}: {e}")
            return None

    async def _typing(self, user_id: str) -> None:
        try:
            await self.sender.typing(user_id)
        except Exception as e:
            logger.debug(f"Typing indicator failed for {user_id}: {e}")

    async def _send_error(self, user_id: str, text: str) -> list[OutboundMessage]:
        reply = OutboundMessage(text=text, quick_replies=("menu",))
        try:
            await self.sender.send(user_id, reply)
        except Exception as e:
            logger.error(f"Failed to send error message to {user_id}: {e}")
            return []
        return [reply]

    def _record(
        self, user_id: str, events: Iterable[AnalyticsEvent], now: datetime
    ) -> None:
        """Fire-and-forget analytics; the reply never waits on it."""
        if self.analytics is None:
            return
        for event in events:
            task = asyncio.create_task(
                self.analytics.record(user_id, event.action, event.details, timestamp=now)
            )
            self._background.add(task)
            task.add_done_callback(self._background.discard)
