"""
Response renderer: turns catalog selections into reply text and images.
"""

from dataclasses import dataclass
from decimal import Decimal
from html import escape
from typing import Optional

from shopbot.core.catalog import Catalog, Category, Product
from shopbot.core.shop.cart import format_money, resolve_lines
from shopbot.core.shop.models import CartLine, OutboundMessage

MENU_REPLIES = ("search", "menu")
CART_REPLIES = ("checkout", "continue", "menu")
CHECKOUT_REPLIES = ("confirm", "cancel")
RESUME_REPLIES = ("1", "2")


@dataclass(frozen=True)
class RenderConfig:
    """Presentation settings for replies."""
    bot_name: str = "Shop Bot"
    currency: str = "$"
    payment_method: str = "Cash on Delivery"
    default_image: Optional[str] = None
    cart_image: Optional[str] = None
    checkout_image: Optional[str] = None

    @classmethod
    def from_settings(cls, settings) -> "RenderConfig":
        return cls(
            bot_name=settings.bot_name,
            currency=settings.currency,
            payment_method=settings.payment_method,
            default_image=settings.default_image,
            cart_image=settings.cart_image,
            checkout_image=settings.checkout_image,
        )


def first_image(*candidates: Optional[str]) -> Optional[str]:
    """First non-empty image reference in the fallback chain."""
    for candidate in candidates:
        if candidate:
            return candidate
    return None


class ResponseRenderer:
    """Builds outbound messages from catalog data. Reads the catalog only."""

    def __init__(self, catalog: Catalog, config: RenderConfig | None = None):
        self.catalog = catalog
        self.config = config or RenderConfig()

    def money(self, amount: Decimal) -> str:
        return format_money(amount, self.config.currency)

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    def main_menu(self, user_name: str) -> OutboundMessage:
        categories = self.catalog.list_categories()
        lines = [
            f"Hello {escape(user_name)}! 👋",
            f"Welcome to {escape(self.config.bot_name)}.",
            "",
            "Please select a category by number:",
        ]
        for i, category in enumerate(categories, 1):
            lines.append(f"{i}. {escape(category.name)}")
        lines.append("")
        lines.append("Or type 'search' to find specific products.")

        image = first_image(
            self.catalog.featured_image,
            categories[0].image if categories else None,
            self.config.default_image,
        )
        return OutboundMessage(text="\n".join(lines), image=image, quick_replies=MENU_REPLIES)

    def category_products(self, category: Category, products: list[Product]) -> OutboundMessage:
        lines = [f"<b>{escape(category.name)}</b>", "", "Select a product by number:"]
        for i, product in enumerate(products, 1):
            lines.append(f"{i}. {escape(product.name)} - {self.money(product.price)}")
        return OutboundMessage(
            text="\n".join(lines),
            image=first_image(category.image, self.config.default_image),
        )

    def invalid_category(self) -> OutboundMessage:
        count = len(self.catalog.categories)
        return OutboundMessage(
            text=f"Invalid selection. Please choose a number between 1 and {count}.",
            quick_replies=MENU_REPLIES,
        )

    def empty_category(self, category: Category) -> OutboundMessage:
        return OutboundMessage(
            text=(
                f"No products found in {escape(category.name)}. "
                "Please select another category."
            ),
            quick_replies=MENU_REPLIES,
        )

    def category_not_found(self) -> OutboundMessage:
        return OutboundMessage(
            text='Category not found. Please type "menu" to return to the main menu.',
            quick_replies=("menu",),
        )

    def invalid_product(self, count: int) -> OutboundMessage:
        if count == 0:
            text = 'Nothing to choose from here. Type "menu" to return to the main menu.'
        else:
            text = f"Invalid selection. Please choose a number between 1 and {count}."
        return OutboundMessage(text=text, quick_replies=("menu",))

    def product_detail(self, product: Product) -> OutboundMessage:
        lines = [
            f"<b>{escape(product.name)}</b>",
            f"Price: {self.money(product.price)}",
            f"Description: {escape(product.description)}",
            "",
        ]
        if product.sizes:
            lines.append(f"Available Sizes: {escape(', '.join(product.sizes))}")
        if product.colors:
            lines.append(f"Available Colors: {escape(', '.join(product.colors))}")
        lines.append("")
        lines.append("To purchase, please enter quantity, size, and color (comma separated).")
        lines.append('Example: "2,L,blue"')

        category = self.catalog.find_category_by_id(product.category_id)
        image = first_image(
            product.image,
            category.image if category else None,
            self.config.default_image,
        )
        return OutboundMessage(text="\n".join(lines), image=image)

    def product_unavailable(self) -> OutboundMessage:
        return OutboundMessage(
            text="Sorry, this product is no longer available.",
        )

    # =========================================================================
    # SEARCH
    # =========================================================================

    def search_prompt(self) -> OutboundMessage:
        return OutboundMessage(text="Please enter a keyword to search for products:")

    def search_results(self, query: str, results: list[Product]) -> OutboundMessage:
        if not results:
            return OutboundMessage(
                text=(
                    f'No products found for "{escape(query)}". '
                    'Try different keywords or type "menu" to return.'
                ),
                quick_replies=("menu",),
            )
        lines = [f'Search Results for "{escape(query)}":', ""]
        for i, product in enumerate(results, 1):
            lines.append(f"{i}. {escape(product.name)} - {self.money(product.price)}")
        lines.append("")
        lines.append("Select a product by number.")
        return OutboundMessage(text="\n".join(lines))

    # =========================================================================
    # CART & CHECKOUT
    # =========================================================================

    def purchase_reprompt(self, error: str) -> OutboundMessage:
        return OutboundMessage(text=error)

    def empty_cart(self) -> OutboundMessage:
        return OutboundMessage(
            text="Your cart is empty. Please add items to your cart.",
            quick_replies=("continue", "menu"),
        )

    def cart(self, cart: tuple[CartLine, ...]) -> OutboundMessage:
        priced = resolve_lines(cart, self.catalog)
        if not priced:
            return self.empty_cart()

        lines = ["<b>Your Shopping Cart</b>", ""]
        total = Decimal("0")
        for i, item in enumerate(priced, 1):
            total += item.total
            lines.append(f"{i}. {escape(item.product.name)}")
            lines.append(
                f"Qty: {item.line.quantity}, Size: {escape(item.line.size)}, "
                f"Color: {escape(item.line.color)}"
            )
            lines.append(f"Price: {self.money(item.total)}")
            lines.append("")
        lines.append(f"<b>Total: {self.money(total)}</b>")
        lines.append("")
        lines.append('Type "checkout" to proceed with payment or "continue" to add more items.')

        return OutboundMessage(
            text="\n".join(lines),
            image=first_image(self.config.cart_image, self.config.default_image),
            quick_replies=CART_REPLIES,
        )

    def cart_hint(self) -> OutboundMessage:
        return OutboundMessage(
            text='Type "checkout" to proceed with payment or "continue" to add more items.',
            quick_replies=CART_REPLIES,
        )

    def checkout(self, cart: tuple[CartLine, ...], user_name: str) -> OutboundMessage:
        priced = resolve_lines(cart, self.catalog)
        if not priced:
            return self.empty_cart()

        lines = [f"<b>Checkout Summary for {escape(user_name)}</b>", ""]
        total = Decimal("0")
        for item in priced:
            total += item.total
            lines.append(
                f"{escape(item.product.name)} ({item.line.quantity}x) - {self.money(item.total)}"
            )
        lines.append("")
        lines.append(f"<b>Total Amount: {self.money(total)}</b>")
        lines.append("")
        lines.append(f"Payment Method: {escape(self.config.payment_method)}")
        lines.append("")
        lines.append('Type "confirm" to complete your order or "cancel" to return to main menu.')

        return OutboundMessage(
            text="\n".join(lines),
            image=first_image(self.config.checkout_image, self.config.default_image),
            quick_replies=CHECKOUT_REPLIES,
        )

    def checkout_hint(self) -> OutboundMessage:
        return OutboundMessage(
            text='Type "confirm" to complete your order or "cancel" to return to main menu.',
            quick_replies=CHECKOUT_REPLIES,
        )

    def order_confirmation(self, user_name: str, total: Decimal) -> OutboundMessage:
        return OutboundMessage(
            text=(
                f"Thank you for your order, {escape(user_name)}! "
                f"Your payment of {self.money(total)} has been processed successfully.\n\n"
                "Your order will be delivered in 3-5 business days."
            )
        )

    def order_cancelled(self) -> OutboundMessage:
        return OutboundMessage(text="Order canceled. Returning to main menu.")

    # =========================================================================
    # SESSION
    # =========================================================================

    def resume_prompt(self, user_name: str) -> OutboundMessage:
        return OutboundMessage(
            text=(
                f"Welcome back {escape(user_name)}! Would you like to continue "
                "where you left off or start over?\n1. Continue\n2. Start Over"
            ),
            quick_replies=RESUME_REPLIES,
        )
