"""
Cart and checkout arithmetic.

Money is kept as Decimal end to end; formatting to two places happens only
when rendering.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from shopbot.core.catalog import Catalog, Product
from shopbot.core.shop.models import CartLine

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PricedLine:
    """Cart line joined with its catalog product."""
    line: CartLine
    product: Product

    @property
    def total(self) -> Decimal:
        return compute_line_total(self.product, self.line)


def compute_line_total(product: Product, line: CartLine) -> Decimal:
    """Price of one cart line."""
    return product.price * line.quantity


def resolve_lines(cart: Iterable[CartLine], catalog: Catalog) -> list[PricedLine]:
    """Join cart lines with products, skipping lines whose product vanished."""
    priced = []
    for line in cart:
        product = catalog.find_product_by_id(line.product_id)
        if product is not None:
            priced.append(PricedLine(line=line, product=product))
    return priced


def compute_cart_total(cart: Iterable[CartLine], catalog: Catalog) -> Decimal:
    """Sum of line totals over lines whose product resolves."""
    return sum((p.total for p in resolve_lines(cart, catalog)), Decimal("0"))


def format_money(amount: Decimal, currency: str = "") -> str:
    """Format amount with two decimal places and a currency prefix."""
    return f"{currency}{amount.quantize(CENT, rounding=ROUND_HALF_UP)}"
