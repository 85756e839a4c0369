"""
Configuration management for the shop bot.
Loads settings from environment variables with validation.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = Path(__file__).parent.parent / "data"

    # Telegram
    telegram_bot_token: str = Field(..., description="Telegram Bot API token")

    # Catalog
    catalog_path: Optional[Path] = Field(
        default=None, description="Path to catalog JSON (default: data/catalog.json)"
    )

    # Database
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL",
    )

    @property
    def db_url(self) -> str:
        """Get database URL with absolute path."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'shopbot.db'}"

    @property
    def catalog_file(self) -> Path:
        """Catalog file, resolved against data_dir when not set explicitly."""
        return self.catalog_path or self.data_dir / "catalog.json"

    # Shop presentation
    bot_name: str = Field(default="Shop Bot", description="Name shown in greetings")
    currency: str = Field(default="$", description="Currency prefix for prices")
    payment_method: str = Field(
        default="Cash on Delivery", description="Payment method shown at checkout"
    )
    default_image: Optional[str] = Field(
        default=None, description="Image used when nothing more specific exists"
    )
    cart_image: Optional[str] = Field(default=None, description="Cart view image")
    checkout_image: Optional[str] = Field(default=None, description="Checkout view image")

    # Conversation timing
    idle_timeout_seconds: int = Field(
        default=3600, description="Inactivity before offering to resume"
    )
    typing_delay_seconds: float = Field(
        default=2.0, description="Artificial typing delay before replying"
    )
    post_checkout_delay_seconds: float = Field(
        default=2.0, description="Delay before showing the menu after an order"
    )

    # Images
    image_fetch_timeout: float = Field(
        default=10.0, description="Timeout for downloading images, seconds"
    )

    # Messages
    error_message: str = Field(
        default=(
            "Sorry, I encountered an error processing your request. "
            'Please try again or type "menu" to return to the main menu.'
        ),
        description="Reply sent when message handling fails",
    )

    # Debug
    debug: bool = Field(default=False, description="Debug mode")


# Global settings instance
settings = Settings()
