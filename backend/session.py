import logging
from typing import Callable, Optional

from fastapi import Header

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[str]], None]


class SessionContext:
    """
    Who is using the app right now, as told by the identity provider.
    user_id is None while unauthenticated; reads then see every task.
    """

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id
        self._listeners: list[SessionListener] = []

    @property
    def established(self) -> bool:
        return self.user_id is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for session changes; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def establish(self, user_id: str) -> None:
        if user_id == self.user_id:
            return
        self.user_id = user_id
        self._notify()

    def clear(self) -> None:
        if self.user_id is None:
            return
        self.user_id = None
        self._notify()

    def _notify(self) -> None:
        logger.debug("Session changed: %s", self.user_id)
        for listener in list(self._listeners):
            listener(self.user_id)


def get_session(x_user_id: Optional[str] = Header(default=None)) -> SessionContext:
    """FastAPI dependency: the X-User-Id header carries the authenticated user id."""
    session = SessionContext()
    if x_user_id and x_user_id.strip():
        session.establish(x_user_id.strip())
    return session
