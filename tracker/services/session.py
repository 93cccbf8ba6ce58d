"""
Client session context.

One instance lives for the lifetime of a client process and is passed to
every page controller. The identity provider callback updates it through
``sign_in``/``sign_out``.
"""

from typing import Callable, Optional

from tracker.interfaces.auth_provider import User

SessionListener = Callable[[Optional[User]], None]


class SessionContext:
    """Holds the signed-in user, if any."""

    def __init__(self, user: Optional[User] = None) -> None:
        self._user = user
        self._listeners: list[SessionListener] = []

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_active(self) -> bool:
        return self._user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    def sign_in(self, user: User) -> None:
        self._user = user
        self._emit()

    def sign_out(self) -> None:
        self._user = None
        self._emit()

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register an identity-change listener; returns its remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)
