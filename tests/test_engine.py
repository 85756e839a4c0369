"""
Tests for the conversation state machine.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import NOW
from shopbot.core.shop import CartLine, Session, SessionState, TempState, compute_cart_total


def run(engine, session, *messages, now=NOW, user_name="Ann"):
    """Feed messages one after another, returning the last transition."""
    result = None
    for text in messages:
        result = engine.transition(session, text, now, user_name=user_name)
        session = result.session
    return result


def in_state(state, **fields):
    return Session(state=state, last_state=state, last_interaction=NOW, **fields)


# =============================================================================
# MENU COMMAND
# =============================================================================


@pytest.mark.parametrize("state", list(SessionState))
def test_menu_resets_from_any_state(engine, state):
    session = in_state(
        state,
        current_category="T-Shirts",
        current_item="p1",
        cart=(CartLine("p1", 2),),
    )

    result = engine.transition(session, "MENU", NOW, user_name="Ann")

    assert result.session.state == SessionState.MAIN_MENU
    assert result.session.cart == ()
    assert result.session.current_category is None
    assert result.session.current_item is None
    assert "Please select a category by number" in result.replies[0].text


def test_menu_twice_renders_same_menu(engine):
    first = engine.transition(Session(), "menu", NOW, user_name="Ann")
    second = engine.transition(first.session, "menu", NOW, user_name="Ann")

    assert first.replies == second.replies
    assert second.session.state == SessionState.MAIN_MENU


def test_menu_overrides_pending_resume(engine):
    session = in_state(SessionState.CART, temp_state=TempState.RETURNING)

    result = engine.transition(session, "menu", NOW)

    assert result.session.temp_state is None
    assert result.session.state == SessionState.MAIN_MENU


def test_menu_lists_categories_with_featured_image(engine):
    reply = engine.transition(Session(), "menu", NOW, user_name="Ann").replies[0]

    assert "Hello Ann!" in reply.text
    assert "Welcome to Test Shop." in reply.text
    assert "1. T-Shirts\n2. Hoodies\n3. Socks" in reply.text
    assert reply.image == "https://img.test/featured.jpg"


# =============================================================================
# BROWSING
# =============================================================================


def test_initial_state_renders_menu_for_any_input(engine):
    result = engine.transition(Session(), "hello", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert "Please select a category" in result.replies[0].text


def test_browse_and_add_to_cart_scenario(engine):
    result = run(engine, Session(), "menu", "1", "1", "2,L,blue")

    assert result.session.state == SessionState.CART
    assert result.session.cart == (CartLine("p1", 2, "L", "blue"),)
    assert "Total: $39.98" in result.replies[0].text


def test_category_selected_by_name_case_insensitive(engine):
    result = run(engine, in_state(SessionState.MAIN_MENU), "hoodies")

    assert result.session.state == SessionState.CATEGORY_SELECTED
    assert result.session.current_category == "Hoodies"
    assert "1. Zip Hoodie - $49.90" in result.replies[0].text


def test_category_image_falls_back_to_default(engine):
    result = run(engine, in_state(SessionState.MAIN_MENU), "2")

    assert result.replies[0].image == "https://img.test/default.jpg"


def test_invalid_category_stays_in_main_menu(engine):
    session = in_state(SessionState.MAIN_MENU)

    result = engine.transition(session, "9", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert "between 1 and 3" in result.replies[0].text


@pytest.mark.parametrize("text", ["²", "１", "+1"])
def test_non_ascii_number_is_an_invalid_category(engine, text):
    session = in_state(SessionState.MAIN_MENU)

    result = engine.transition(session, text, NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert "between 1 and 3" in result.replies[0].text


def test_empty_category_stays_in_main_menu(engine):
    result = engine.transition(in_state(SessionState.MAIN_MENU), "Socks", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert "No products found in Socks" in result.replies[0].text


def test_product_selected_by_name(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="T-Shirts")

    result = engine.transition(session, "striped tee", NOW)

    assert result.session.state == SessionState.ITEM_SELECTED
    assert result.session.current_item == "p2"


def test_product_detail_shows_options_and_emits_view(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="T-Shirts")

    result = engine.transition(session, "1", NOW)
    reply = result.replies[0]

    assert "Price: $19.99" in reply.text
    assert "Available Sizes: S, M, L" in reply.text
    assert "Available Colors: white, blue" in reply.text
    assert reply.image == "https://img.test/p1.jpg"
    assert [(e.action, e.details) for e in result.events] == [
        ("product_view", {"productId": "p1"})
    ]


def test_product_without_image_uses_category_image(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="T-Shirts")

    result = engine.transition(session, "2", NOW)

    assert result.replies[0].image == "https://img.test/tshirts.jpg"


def test_invalid_product_stays(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="T-Shirts")

    result = engine.transition(session, "7", NOW)

    assert result.session.state == SessionState.CATEGORY_SELECTED
    assert "between 1 and 2" in result.replies[0].text


def test_superscript_digit_is_an_invalid_product(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="T-Shirts")

    result = engine.transition(session, "²", NOW)

    assert result.session.state == SessionState.CATEGORY_SELECTED
    assert "between 1 and 2" in result.replies[0].text


def test_vanished_category_reports_not_found(engine):
    session = in_state(SessionState.CATEGORY_SELECTED, current_category="Gone")

    result = engine.transition(session, "1", NOW)

    assert result.session.state == SessionState.CATEGORY_SELECTED
    assert "Category not found" in result.replies[0].text


# =============================================================================
# SEARCH
# =============================================================================


def test_search_with_no_results(engine):
    result = run(engine, Session(), "menu", "search", "zzz-nonexistent")

    assert result.session.state == SessionState.SEARCH_RESULTS
    assert result.session.search_results == ()
    assert 'No products found for "zzz-nonexistent"' in result.replies[0].text
    assert result.events[0].details == {"keyword": "zzz-nonexistent", "resultsCount": 0}


def test_search_matches_description(engine):
    result = run(engine, in_state(SessionState.MAIN_MENU), "search", "STRIPES")

    assert result.session.search_results == ("p2",)
    assert "1. Striped Tee - $0.10" in result.replies[0].text


def test_search_result_number_indexes_results(engine):
    # "zip" only matches the hoodie, which is product 1 of the results
    result = run(engine, in_state(SessionState.MAIN_MENU), "search", "zip", "1")

    assert result.session.state == SessionState.ITEM_SELECTED
    assert result.session.current_item == "p3"


def test_selection_after_empty_search_stays(engine):
    result = run(engine, in_state(SessionState.MAIN_MENU), "search", "nothing", "1")

    assert result.session.state == SessionState.SEARCH_RESULTS
    assert "menu" in result.replies[0].text


# =============================================================================
# CART
# =============================================================================


def test_large_quantity_is_added_to_cart(engine):
    session = in_state(SessionState.ITEM_SELECTED, current_item="p1")

    result = engine.transition(session, "5000,L,blue", NOW)

    assert result.session.state == SessionState.CART
    assert result.session.cart == (CartLine("p1", 5000, "L", "blue"),)


def test_quantity_only_uses_defaults(engine):
    session = in_state(SessionState.ITEM_SELECTED, current_item="p3")

    result = engine.transition(session, "3", NOW)

    assert result.session.cart == (CartLine("p3", 3, "Standard", "Default"),)
    assert result.events[0].details == {"productId": "p3", "quantity": 3}


@pytest.mark.parametrize("text", ["abc", "0", "-1", ",L,blue", "+2", "1_0", "²"])
def test_invalid_quantity_reprompts(engine, text):
    session = in_state(SessionState.ITEM_SELECTED, current_item="p1")

    result = engine.transition(session, text, NOW)

    assert result.session.state == SessionState.ITEM_SELECTED
    assert result.session.cart == ()
    assert result.events == ()


def test_adding_line_increases_total_by_line_price(engine, catalog):
    existing = (CartLine("p1", 1),)
    session = in_state(SessionState.ITEM_SELECTED, current_item="p3", cart=existing)
    before = compute_cart_total(existing, catalog)

    result = engine.transition(session, "2,M,grey", NOW)

    assert len(result.session.cart) == 2
    assert result.session.cart[-1] == CartLine("p3", 2, "M", "grey")
    assert compute_cart_total(result.session.cart, catalog) - before == Decimal("99.80")


def test_vanished_item_returns_to_menu(engine):
    session = in_state(SessionState.ITEM_SELECTED, current_item="gone")

    result = engine.transition(session, "1", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert "no longer available" in result.replies[0].text


def test_cart_continue_goes_to_menu(engine):
    session = in_state(SessionState.CART, cart=(CartLine("p1", 1),))

    result = engine.transition(session, "continue", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert result.session.cart == (CartLine("p1", 1),)


def test_cart_unknown_input_reprompts(engine):
    session = in_state(SessionState.CART, cart=(CartLine("p1", 1),))

    result = engine.transition(session, "maybe", NOW)

    assert result.session.state == SessionState.CART
    assert "checkout" in result.replies[0].text


# =============================================================================
# CHECKOUT
# =============================================================================


def test_checkout_summary(engine):
    session = in_state(SessionState.CART, cart=(CartLine("p1", 2), CartLine("p2", 3)))

    result = engine.transition(session, "checkout", NOW, user_name="Ann")
    text = result.replies[0].text

    assert result.session.state == SessionState.CHECKOUT
    assert "Checkout Summary for Ann" in text
    assert "Classic Tee (2x) - $39.98" in text
    assert "Striped Tee (3x) - $0.30" in text
    assert "Total Amount: $40.28" in text
    assert "Payment Method: Cash on Delivery" in text


def test_checkout_skips_dangling_lines(engine):
    session = in_state(SessionState.CART, cart=(CartLine("gone", 5), CartLine("p3", 1)))

    result = engine.transition(session, "checkout", NOW)

    assert "Total Amount: $49.90" in result.replies[0].text


def test_confirm_clears_cart_and_schedules_menu(engine):
    session = in_state(SessionState.CHECKOUT, cart=(CartLine("p1", 2), CartLine("gone", 1)))

    result = engine.transition(session, "confirm", NOW, user_name="Ann")

    assert result.session.state == SessionState.INITIAL
    assert result.session.cart == ()
    assert "Your payment of $39.98" in result.replies[0].text
    assert result.deferred is not None
    checkout = result.events[0]
    assert checkout.action == "checkout"
    assert checkout.details["total"] == "39.98"
    assert checkout.details["items"] == [
        {"productId": "p1", "quantity": 2, "size": "Standard", "color": "Default"}
    ]


def test_return_to_menu_after_confirm(engine):
    confirmed = engine.transition(
        in_state(SessionState.CHECKOUT, cart=(CartLine("p1", 1),)), "confirm", NOW
    ).session

    result = engine.return_to_menu(confirmed, NOW + timedelta(seconds=2))

    assert result.session.state == SessionState.MAIN_MENU
    assert "Please select a category" in result.replies[0].text


def test_return_to_menu_ignored_once_user_moved_on(engine):
    assert engine.return_to_menu(in_state(SessionState.SEARCHING), NOW) is None


def test_cancel_keeps_cart_and_shows_menu(engine):
    cart = (CartLine("p1", 1),)
    result = engine.transition(in_state(SessionState.CHECKOUT, cart=cart), "cancel", NOW)

    assert result.session.state == SessionState.MAIN_MENU
    assert result.session.cart == cart
    assert len(result.replies) == 2
    assert result.replies[0].text == "Order canceled. Returning to main menu."
    assert "Please select a category" in result.replies[1].text


def test_checkout_unknown_input_reprompts(engine):
    session = in_state(SessionState.CHECKOUT, cart=(CartLine("p1", 1),))

    result = engine.transition(session, "hmm", NOW)

    assert result.session.state == SessionState.CHECKOUT
    assert "confirm" in result.replies[0].text


# =============================================================================
# IDLE RESUME
# =============================================================================


def test_idle_session_gets_resume_prompt(engine):
    session = Session(
        state=SessionState.CART,
        last_state=SessionState.CART,
        cart=(CartLine("p1", 1),),
        last_interaction=NOW - timedelta(hours=2),
    )

    result = engine.transition(session, "checkout", NOW, user_name="Ann")

    assert result.session.state == SessionState.CART
    assert result.session.temp_state == TempState.RETURNING
    assert "Welcome back Ann!" in result.replies[0].text
    assert result.events == ()


def test_idle_initial_session_is_not_prompted(engine):
    session = Session(last_interaction=NOW - timedelta(days=3))

    result = engine.transition(session, "hi", NOW)

    assert result.session.temp_state is None
    assert result.session.state == SessionState.MAIN_MENU


def test_resume_continue_dispatches_in_previous_state(engine):
    session = Session(
        state=SessionState.CART,
        last_state=SessionState.CART,
        temp_state=TempState.RETURNING,
        cart=(CartLine("p1", 1),),
        last_interaction=NOW - timedelta(minutes=1),
    )

    result = engine.transition(session, "continue", NOW)

    # "continue" is also the cart's own continue-shopping command
    assert result.session.temp_state is None
    assert result.session.state == SessionState.MAIN_MENU
    assert result.session.cart == (CartLine("p1", 1),)


def test_resume_start_over_resets_in_same_turn(engine):
    session = Session(
        state=SessionState.CART,
        last_state=SessionState.CART,
        temp_state=TempState.RETURNING,
        cart=(CartLine("p1", 1),),
        last_interaction=NOW - timedelta(minutes=1),
    )

    result = engine.transition(session, "2", NOW)

    assert result.session.temp_state is None
    assert result.session.cart == ()
    assert result.session.state == SessionState.MAIN_MENU
    assert "Please select a category" in result.replies[0].text


def test_prompted_session_is_answered_not_prompted_again(engine):
    idle = Session(
        state=SessionState.MAIN_MENU,
        last_state=SessionState.MAIN_MENU,
        last_interaction=NOW - timedelta(hours=5),
    )
    prompted = engine.transition(idle, "1", NOW).session

    result = engine.transition(prompted, "1", NOW + timedelta(seconds=5))

    assert result.session.temp_state is None
    assert result.session.state == SessionState.CATEGORY_SELECTED


# =============================================================================
# BOOKKEEPING
# =============================================================================


@pytest.mark.parametrize("text", ["menu", "bogus", "1"])
def test_every_transition_stamps_interaction(engine, text):
    later = NOW + timedelta(minutes=5)
    result = engine.transition(in_state(SessionState.MAIN_MENU), text, later)

    assert result.session.last_interaction == later
    assert result.session.last_state == result.session.state


def test_transition_does_not_mutate_input(engine):
    session = in_state(SessionState.ITEM_SELECTED, current_item="p1")

    engine.transition(session, "2,L,blue", NOW)

    assert session.cart == ()
    assert session.state == SessionState.ITEM_SELECTED
