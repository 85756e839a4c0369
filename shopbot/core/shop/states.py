"""
Conversation states for the shopping flow.
"""

from enum import Enum


class SessionState(Enum):
    """States of the shopping conversation."""
    INITIAL = "initial"                      # New or just-finished session
    MAIN_MENU = "main_menu"                  # Choosing a category or search
    SEARCHING = "searching"                  # Waiting for a keyword
    SEARCH_RESULTS = "search_results"        # Choosing from search results
    CATEGORY_SELECTED = "category_selected"  # Choosing a product in category
    ITEM_SELECTED = "item_selected"          # Entering "qty,size,color"
    CART = "cart"                            # Checkout or continue shopping
    CHECKOUT = "checkout"                    # Confirm or cancel


class TempState(Enum):
    """Transient flags overlaying normal dispatch."""
    RETURNING = "returning"                  # Resume prompt is pending
