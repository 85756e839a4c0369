"""
Shared fixtures for shop bot tests.
"""

import os

# Settings require a token at import time
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from shopbot.core.analytics import AnalyticsRecorder
from shopbot.core.catalog import catalog_from_dict
from shopbot.core.shop import ConversationEngine, OutboundMessage, RenderConfig, ResponseRenderer
from shopbot.core.shop.service import ShopService
from shopbot.core.shop.transport import MessageSender
from shopbot.db.session_store import SessionStore
from shopbot.db.sqlite import Database
from shopbot.integrations.images import ImageFetcher

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

CATALOG_DATA = {
    "featuredImage": "https://img.test/featured.jpg",
    "categories": [
        {"id": "c1", "name": "T-Shirts", "image": "https://img.test/tshirts.jpg"},
        {"id": "c2", "name": "Hoodies", "image": None},
        {"id": "c3", "name": "Socks", "image": None},
    ],
    "products": [
        {
            "id": "p1",
            "name": "Classic Tee",
            "price": Decimal("19.99"),
            "description": "Plain cotton shirt",
            "category": "c1",
            "image": "https://img.test/p1.jpg",
            "sizes": ["S", "M", "L"],
            "colors": ["white", "blue"],
        },
        {
            "id": "p2",
            "name": "Striped Tee",
            "price": Decimal("0.10"),
            "description": "Blue stripes",
            "category": "c1",
            "image": None,
            "sizes": [],
            "colors": [],
        },
        {
            "id": "p3",
            "name": "Zip Hoodie",
            "price": Decimal("49.90"),
            "description": "Warm fleece with a zip",
            "category": "c2",
            "image": None,
            "sizes": ["M"],
            "colors": ["grey"],
        },
    ],
}


class RecordingSender(MessageSender):
    """Collects everything the service sends."""

    def __init__(self):
        self.sent: list[tuple[str, OutboundMessage, bytes | None]] = []
        self.typing_calls: list[str] = []

    async def send(self, user_id, message, image=None):
        self.sent.append((user_id, message, image))

    async def typing(self, user_id):
        self.typing_calls.append(user_id)

    def texts(self, user_id: str | None = None) -> list[str]:
        return [m.text for uid, m, _ in self.sent if user_id is None or uid == user_id]


class StubImageFetcher(ImageFetcher):
    """Returns fixed bytes for every reference."""

    def __init__(self, payload: bytes | None = b"img"):
        self.payload = payload
        self.requested: list[str] = []

    async def fetch(self, reference):
        self.requested.append(reference)
        return self.payload


@pytest.fixture
def catalog():
    return catalog_from_dict(CATALOG_DATA)


@pytest.fixture
def render_config():
    return RenderConfig(
        bot_name="Test Shop",
        currency="$",
        payment_method="Cash on Delivery",
        default_image="https://img.test/default.jpg",
        cart_image="https://img.test/cart.jpg",
    )


@pytest.fixture
def renderer(catalog, render_config):
    return ResponseRenderer(catalog, render_config)


@pytest.fixture
def engine(catalog, renderer):
    return ConversationEngine(catalog, renderer, post_checkout_delay=0.01)


@pytest.fixture
async def database(tmp_path):
    database = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.init()
    yield database
    await database.close()


@pytest.fixture
def store(database):
    return SessionStore(database)


@pytest.fixture
def analytics(database):
    return AnalyticsRecorder(database)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def image_fetcher():
    return StubImageFetcher()


@pytest.fixture
async def service(engine, store, sender, image_fetcher, analytics):
    service = ShopService(
        engine=engine,
        store=store,
        sender=sender,
        image_fetcher=image_fetcher,
        analytics=analytics,
        typing_delay=0,
        clock=lambda: NOW,
    )
    yield service
    await service.close()
