"""
Shop bot - main entry point.
"""

import asyncio
import logging
import sys
from datetime import timedelta

from shopbot.bot.bot import get_bot, get_dispatcher
from shopbot.bot.handlers import register_handlers
from shopbot.bot.sender import TelegramSender
from shopbot.config import settings
from shopbot.core.analytics import AnalyticsRecorder
from shopbot.core.catalog import load_catalog
from shopbot.core.shop import ConversationEngine, RenderConfig, ResponseRenderer
from shopbot.core.shop.service import ShopService
from shopbot.db.session_store import SessionStore
from shopbot.db.sqlite import db
from shopbot.integrations.images import get_image_fetcher


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_service(bot) -> ShopService:
    """Wire catalog, engine, storage and transport together."""
    catalog = load_catalog(settings.catalog_file)
    renderer = ResponseRenderer(catalog, RenderConfig.from_settings(settings))
    engine = ConversationEngine(
        catalog,
        renderer,
        idle_timeout=timedelta(seconds=settings.idle_timeout_seconds),
        post_checkout_delay=settings.post_checkout_delay_seconds,
    )
    return ShopService(
        engine=engine,
        store=SessionStore(db),
        sender=TelegramSender(bot),
        image_fetcher=get_image_fetcher(),
        analytics=AnalyticsRecorder(db),
        typing_delay=settings.typing_delay_seconds,
        error_message=settings.error_message,
    )


async def on_startup() -> None:
    """Initialize services on startup."""
    logger.info(f"Starting {settings.bot_name}...")

    await db.init()
    logger.info("Database initialized")


async def on_shutdown(shop_service: ShopService) -> None:
    """Cleanup on shutdown."""
    logger.info(f"Shutting down {settings.bot_name}...")

    await shop_service.close()
    await get_image_fetcher().close()
    await db.close()

    logger.info("Cleanup complete")


async def main() -> None:
    """Main function to run the bot."""
    bot = get_bot()
    dp = get_dispatcher()

    # Catalog is loaded once; a broken catalog stops startup here
    dp["shop_service"] = build_service(bot)

    # Register handlers
    register_handlers(dp)

    # Register startup/shutdown hooks
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    # Start polling
    logger.info("Bot is starting...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
