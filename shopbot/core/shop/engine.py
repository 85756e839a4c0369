"""
Conversation engine: the shopping flow state machine.

The engine is a pure transition function. Given a session, the inbound text
and the current time it returns the next session together with the replies,
analytics events and deferred actions the caller has to carry out. It never
performs I/O; all catalog access is read-only.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from shopbot.core.catalog import Catalog, Product
from shopbot.core.shop.cart import compute_cart_total, resolve_lines
from shopbot.core.shop.models import (
    AnalyticsEvent,
    DeferredMenu,
    OutboundMessage,
    Session,
    Transition,
)
from shopbot.core.shop.renderer import ResponseRenderer
from shopbot.core.shop.states import SessionState, TempState
from shopbot.core.shop.validators import PurchaseInputValidator, match_selection

logger = logging.getLogger(__name__)

MENU_COMMAND = "menu"
SEARCH_COMMAND = "search"
RESUME_ANSWERS = ("1", "continue")


class ConversationEngine:
    """
    State machine for the shopping conversation.

    Usage:
        engine = ConversationEngine(catalog, renderer)
        result = engine.transition(session, "menu", now, user_name="Ann")
        store.save(user_id, result.session)
    """

    def __init__(
        self,
        catalog: Catalog,
        renderer: ResponseRenderer | None = None,
        idle_timeout: timedelta = timedelta(seconds=3600),
        post_checkout_delay: float = 2.0,
    ):
        self.catalog = catalog
        self.renderer = renderer or ResponseRenderer(catalog)
        self.idle_timeout = idle_timeout
        self.post_checkout_delay = post_checkout_delay

        self._handlers: dict[SessionState, Callable[[Session, str, str], Transition]] = {
            SessionState.INITIAL: self._on_initial,
            SessionState.MAIN_MENU: self._on_main_menu,
            SessionState.SEARCHING: self._on_searching,
            SessionState.SEARCH_RESULTS: self._on_product_choice,
            SessionState.CATEGORY_SELECTED: self._on_product_choice,
            SessionState.ITEM_SELECTED: self._on_item_selected,
            SessionState.CART: self._on_cart,
            SessionState.CHECKOUT: self._on_checkout,
        }

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def transition(
        self,
        session: Session,
        text: str,
        now: datetime,
        user_name: str = "User",
    ) -> Transition:
        """Process one inbound message."""
        text = text.strip()
        command = text.lower()

        # "menu" resets from any state, mid-checkout included
        if command == MENU_COMMAND:
            reset = session.evolve(
                state=SessionState.MAIN_MENU,
                temp_state=None,
                current_category=None,
                current_item=None,
                cart=(),
                search_results=(),
            )
            return self._commit(
                Transition(session=reset, replies=(self.renderer.main_menu(user_name),)),
                now,
            )

        if self._is_idle(session, now):
            logger.debug(f"Session idle since {session.last_interaction}, offering resume")
            prompted = session.evolve(temp_state=TempState.RETURNING)
            return self._commit(
                Transition(session=prompted, replies=(self.renderer.resume_prompt(user_name),)),
                now,
            )

        if session.temp_state == TempState.RETURNING:
            if command in RESUME_ANSWERS:
                session = session.evolve(temp_state=None)
            else:
                session = session.evolve(
                    state=SessionState.INITIAL,
                    temp_state=None,
                    current_category=None,
                    current_item=None,
                    cart=(),
                    search_results=(),
                )

        handler = self._handlers.get(session.state, self._on_initial)
        return self._commit(handler(session, text, user_name), now)

    def return_to_menu(
        self,
        session: Session,
        now: datetime,
        user_name: str = "User",
    ) -> Optional[Transition]:
        """
        Deferred step after an order: show the main menu.

        Only applies while the session still sits in INITIAL; returns None if
        the user has moved on in the meantime.
        """
        if session.state != SessionState.INITIAL:
            return None
        return self._commit(
            Transition(
                session=session.evolve(state=SessionState.MAIN_MENU),
                replies=(self.renderer.main_menu(user_name),),
            ),
            now,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _is_idle(self, session: Session, now: datetime) -> bool:
        return (
            session.last_interaction is not None
            and session.last_state != SessionState.INITIAL
            and now - session.last_interaction > self.idle_timeout
        )

    @staticmethod
    def _commit(result: Transition, now: datetime) -> Transition:
        stamped = result.session.evolve(
            last_interaction=now,
            last_state=result.session.state,
        )
        return replace(result, session=stamped)

    def _menu(self, session: Session, user_name: str, *before: OutboundMessage) -> Transition:
        return Transition(
            session=session.evolve(state=SessionState.MAIN_MENU),
            replies=before + (self.renderer.main_menu(user_name),),
        )

    def _displayed_products(self, session: Session) -> Optional[list[Product]]:
        """Products the user is choosing from, or None if the category vanished."""
        if session.state == SessionState.SEARCH_RESULTS:
            found = (self.catalog.find_product_by_id(i) for i in session.search_results)
            return [p for p in found if p is not None]

        category = self.catalog.find_category_by_name(session.current_category)
        if category is None:
            return None
        return self.catalog.list_products_by_category(category.id)

    # =========================================================================
    # STATE HANDLERS
    # =========================================================================

    def _on_initial(self, session: Session, text: str, user_name: str) -> Transition:
        return self._menu(session, user_name)

    def _on_main_menu(self, session: Session, text: str, user_name: str) -> Transition:
        if text.lower() == SEARCH_COMMAND:
            return Transition(
                session=session.evolve(state=SessionState.SEARCHING),
                replies=(self.renderer.search_prompt(),),
            )

        category = match_selection(text, self.catalog.list_categories(), lambda c: c.name)
        if category is None:
            return Transition(session=session, replies=(self.renderer.invalid_category(),))

        products = self.catalog.list_products_by_category(category.id)
        if not products:
            return Transition(session=session, replies=(self.renderer.empty_category(category),))

        return Transition(
            session=session.evolve(
                state=SessionState.CATEGORY_SELECTED,
                current_category=category.name,
                search_results=(),
            ),
            replies=(self.renderer.category_products(category, products),),
        )

    def _on_searching(self, session: Session, text: str, user_name: str) -> Transition:
        results = self.catalog.search_products(text)
        return Transition(
            session=session.evolve(
                state=SessionState.SEARCH_RESULTS,
                search_results=tuple(p.id for p in results),
            ),
            replies=(self.renderer.search_results(text, results),),
            events=(
                AnalyticsEvent("search", {"keyword": text, "resultsCount": len(results)}),
            ),
        )

    def _on_product_choice(self, session: Session, text: str, user_name: str) -> Transition:
        products = self._displayed_products(session)
        if products is None:
            return Transition(session=session, replies=(self.renderer.category_not_found(),))

        product = match_selection(text, products, lambda p: p.name)
        if product is None:
            return Transition(
                session=session, replies=(self.renderer.invalid_product(len(products)),)
            )

        return Transition(
            session=session.evolve(state=SessionState.ITEM_SELECTED, current_item=product.id),
            replies=(self.renderer.product_detail(product),),
            events=(AnalyticsEvent("product_view", {"productId": product.id}),),
        )

    def _on_item_selected(self, session: Session, text: str, user_name: str) -> Transition:
        product = self.catalog.find_product_by_id(session.current_item)
        if product is None:
            return self._menu(
                session.evolve(current_item=None), user_name, self.renderer.product_unavailable()
            )

        is_valid, line, error = PurchaseInputValidator.validate(text, product.id)
        if not is_valid:
            return Transition(session=session, replies=(self.renderer.purchase_reprompt(error),))

        updated = session.add_line(line).evolve(state=SessionState.CART)
        return Transition(
            session=updated,
            replies=(self.renderer.cart(updated.cart),),
            events=(
                AnalyticsEvent("cart_add", {"productId": product.id, "quantity": line.quantity}),
            ),
        )

    def _on_cart(self, session: Session, text: str, user_name: str) -> Transition:
        command = text.lower()
        if command == "checkout":
            if not resolve_lines(session.cart, self.catalog):
                return Transition(session=session, replies=(self.renderer.empty_cart(),))
            return Transition(
                session=session.evolve(state=SessionState.CHECKOUT),
                replies=(self.renderer.checkout(session.cart, user_name),),
            )
        if command == "continue":
            return self._menu(session, user_name)
        return Transition(session=session, replies=(self.renderer.cart_hint(),))

    def _on_checkout(self, session: Session, text: str, user_name: str) -> Transition:
        command = text.lower()
        if command == "confirm":
            priced = resolve_lines(session.cart, self.catalog)
            if not priced:
                return self._menu(session.evolve(cart=()), user_name, self.renderer.empty_cart())

            # Charged amount is derived from the cart as it is now
            total = compute_cart_total(session.cart, self.catalog)
            return Transition(
                session=session.evolve(
                    state=SessionState.INITIAL,
                    cart=(),
                    current_item=None,
                ),
                replies=(self.renderer.order_confirmation(user_name, total),),
                events=(
                    AnalyticsEvent(
                        "checkout",
                        {
                            "items": [item.line.to_dict() for item in priced],
                            "total": str(total),
                        },
                    ),
                ),
                deferred=DeferredMenu(delay_seconds=self.post_checkout_delay),
            )
        if command == "cancel":
            return self._menu(session, user_name, self.renderer.order_cancelled())
        return Transition(session=session, replies=(self.renderer.checkout_hint(),))
