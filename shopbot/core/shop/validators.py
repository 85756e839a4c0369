"""
Validators for user input in the shopping flow.
"""

from typing import Optional, Tuple

from shopbot.core.shop.models import CartLine, DEFAULT_COLOR, DEFAULT_SIZE


class PurchaseInputValidator:
    """Parse "qty,size,color" purchase input."""

    @classmethod
    def validate(
        cls, text: str, product_id: str
    ) -> Tuple[bool, Optional[CartLine], Optional[str]]:
        """
        Validate purchase input.

        Size and color are optional and fall back to defaults.

        Returns:
            Tuple of (is_valid, cart_line, error_message)
        """
        parts = [part.strip() for part in text.split(",")]
        quantity_str = parts[0] if parts else ""

        if not quantity_str:
            return False, None, (
                'Please specify quantity, size, and color (e.g. "2,L,blue"):'
            )

        # Plain ASCII digits only; int() would also take "+2", "1_0" and "²"
        if not (quantity_str.isascii() and quantity_str.isdigit()):
            return False, None, (
                'Quantity must be a whole number. '
                'Please specify quantity, size, and color (e.g. "2,L,blue"):'
            )

        quantity = int(quantity_str)
        if quantity <= 0:
            return False, None, "Quantity must be at least 1. Please try again:"

        size = parts[1] if len(parts) > 1 and parts[1] else DEFAULT_SIZE
        color = parts[2] if len(parts) > 2 and parts[2] else DEFAULT_COLOR

        return True, CartLine(
            product_id=product_id, quantity=quantity, size=size, color=color
        ), None


def match_selection(selection: str, items: list, name_of) -> Optional[object]:
    """
    Pick an item by 1-based number or case-insensitive exact name.

    A numeric selection is tried as an index first and falls back to name
    matching only when it is out of range.
    """
    selection = selection.strip()
    if selection.isascii() and selection.isdigit():
        index = int(selection) - 1
        if 0 <= index < len(items):
            return items[index]

    wanted = selection.lower()
    for item in items:
        if name_of(item).lower() == wanted:
            return item
    return None
