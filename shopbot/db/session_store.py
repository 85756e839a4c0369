"""
Durable per-user session storage.
"""

import json
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from shopbot.core.exceptions import SessionStoreError
from shopbot.core.shop.models import Session
from shopbot.core.shop.states import SessionState
from shopbot.db.models import UserSession
from shopbot.db.sqlite import Database

logger = logging.getLogger(__name__)


def recover_session(data: dict) -> Session:
    """
    Repair a record that failed to decode.

    Falls back to the record's last committed state with an empty cart, or a
    fresh session when even that is unreadable.
    """
    try:
        last_state = SessionState(data.get("lastState") or SessionState.INITIAL.value)
    except (ValueError, AttributeError):
        return Session()
    if last_state in (SessionState.ITEM_SELECTED, SessionState.CART, SessionState.CHECKOUT):
        # These states need the cart/item that just failed to decode
        last_state = SessionState.MAIN_MENU
    return Session(state=last_state, last_state=last_state)


class SessionStore:
    """Loads and saves sessions as JSON records in the database."""

    def __init__(self, database: Database):
        self.database = database

    async def load(self, user_id: str) -> Optional[Session]:
        """
        Load session for user.

        Returns None for unknown users. Raises SessionStoreError when the
        database is unavailable.
        """
        try:
            async with self.database.session() as session:
                row = await session.get(UserSession, user_id)
                raw = row.data if row else None
        except SQLAlchemyError as e:
            raise SessionStoreError(f"Failed to load session for {user_id}: {e}") from e

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Session record for {user_id} is not valid JSON, starting fresh")
            return Session()

        try:
            return Session.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Session record for {user_id} is corrupt ({e}), attempting recovery")
            return recover_session(data if isinstance(data, dict) else {})

    async def save(self, user_id: str, state: Session) -> bool:
        """Persist session. Returns False if it could not be written."""
        payload = json.dumps(state.to_dict(), ensure_ascii=False)
        try:
            async with self.database.session() as session:
                row = await session.get(UserSession, user_id)
                if row is None:
                    session.add(UserSession(user_id=user_id, data=payload))
                else:
                    row.data = payload
        except SQLAlchemyError as e:
            logger.error(f"Error saving session for {user_id}: {e}")
            return False
        return True

    async def delete(self, user_id: str) -> bool:
        """Remove a user's session."""
        try:
            async with self.database.session() as session:
                row = await session.get(UserSession, user_id)
                if row is not None:
                    await session.delete(row)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting session for {user_id}: {e}")
            return False
        return True
