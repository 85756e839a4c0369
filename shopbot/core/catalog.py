"""
Product catalog: categories and products loaded once at startup.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from shopbot.core.exceptions import CatalogError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
    """Product category."""
    id: str
    name: str
    image: Optional[str] = None


@dataclass(frozen=True)
class Product:
    """Product in the catalog."""
    id: str
    name: str
    price: Decimal
    category_id: str
    description: str = ""
    image: Optional[str] = None
    sizes: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()


@dataclass(frozen=True)
class Catalog:
    """
    Read-only catalog snapshot.

    Lookups never mutate the catalog, so one instance is shared by every
    session for the lifetime of the process.
    """
    categories: tuple[Category, ...] = ()
    products: tuple[Product, ...] = ()
    featured_image: Optional[str] = None
    _by_id: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {p.id: p for p in self.products})

    def list_categories(self) -> list[Category]:
        return list(self.categories)

    def list_products_by_category(self, category_id: str) -> list[Product]:
        return [p for p in self.products if p.category_id == category_id]

    def find_product_by_id(self, product_id: Optional[str]) -> Optional[Product]:
        if product_id is None:
            return None
        return self._by_id.get(product_id)

    def find_category_by_id(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def find_category_by_name(self, name: Optional[str]) -> Optional[Category]:
        """Case-insensitive exact name match."""
        if not name:
            return None
        wanted = name.lower()
        for category in self.categories:
            if category.name.lower() == wanted:
                return category
        return None

    def search_products(self, keyword: str) -> list[Product]:
        """Case-insensitive substring match on name or description."""
        needle = keyword.lower()
        return [
            p for p in self.products
            if needle in p.name.lower() or needle in p.description.lower()
        ]


def _parse_price(raw, product_id: str) -> Decimal:
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, ValueError) as e:
        raise CatalogError(f"Invalid price for product {product_id}: {raw!r}") from e
    if price < 0:
        raise CatalogError(f"Negative price for product {product_id}: {raw!r}")
    return price


def catalog_from_dict(data: dict) -> Catalog:
    """
    Build catalog from decoded JSON.

    Expected shape:
        {"featuredImage": ..., "categories": [{id, name, image}],
         "products": [{id, name, price, description, category, image, sizes, colors}]}
    """
    try:
        categories = tuple(
            Category(id=str(c["id"]), name=c["name"], image=c.get("image"))
            for c in data.get("categories", [])
        )
        products = tuple(
            Product(
                id=str(p["id"]),
                name=p["name"],
                price=_parse_price(p["price"], str(p["id"])),
                category_id=str(p["category"]),
                description=p.get("description") or "",
                image=p.get("image"),
                sizes=tuple(p.get("sizes") or ()),
                colors=tuple(p.get("colors") or ()),
            )
            for p in data.get("products", [])
        )
    except (KeyError, TypeError) as e:
        raise CatalogError(f"Malformed catalog entry: {e}") from e

    names = [c.name.lower() for c in categories]
    if len(names) != len(set(names)):
        raise CatalogError("Category names must be unique (case-insensitive)")

    return Catalog(
        categories=categories,
        products=products,
        featured_image=data.get("featuredImage"),
    )


def load_catalog(path: str | Path) -> Catalog:
    """Load catalog JSON file. Prices are read as Decimal, never float."""
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file is not valid JSON: {path}: {e}") from e

    catalog = catalog_from_dict(data)
    logger.info(
        f"Catalog loaded from {path}: {len(catalog.categories)} categories, "
        f"{len(catalog.products)} products"
    )
    return catalog
