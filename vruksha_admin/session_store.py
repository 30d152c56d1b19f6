# ==============================================================================
# ALMACÉN DE SESIÓN - Única fuente de verdad del token
# ==============================================================================
# The HTTP adapter, the auth context and the route guard all read the session
# from here. Storage keys are fixed: "token" and "user" (identity as JSON).
#
# INVARIANTE: token and user are written together and removed together.
# A half-written storage (token without user or user without token) is
# repaired on load by clearing both keys.
# ==============================================================================

import json
from typing import Any, Callable, List, MutableMapping, Optional

from vruksha_admin.errors import DecodeError
from vruksha_admin.models import Identity, Session


TOKEN_KEY = 'token'
USER_KEY = 'user'

SessionListener = Callable[[Optional[Session]], None]


class SessionStore:
    """
    Owns the persisted session.

    The storage is resolved on every access through storage_getter, so a
    single store can sit in the application container while each HTTP
    request sees its own cookie session (flask.session).

    Uso:
        store = SessionStore(lambda: flask.session)
        store.save(identity, 't1')
        store.load()   # Session(identity, 't1')
        store.clear()
    """

    def __init__(self, storage_getter: Callable[[], MutableMapping[str, Any]]):
        """
        Args:
            storage_getter: Callable returning the key-value storage
        """
        self._storage_getter = storage_getter
        self._listeners: List[SessionListener] = []

    @property
    def storage(self) -> MutableMapping[str, Any]:
        return self._storage_getter()

    # =========================================================================
    # OBSERVADORES
    # =========================================================================

    def subscribe(self, listener: SessionListener) -> None:
        """Registers a callable notified with the new Session (or None)."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, session: Optional[Session]) -> None:
        for listener in list(self._listeners):
            listener(session)

    # =========================================================================
    # LECTURA / ESCRITURA
    # =========================================================================

    @property
    def token(self) -> Optional[str]:
        """Bearer token, only when the stored session is consistent."""
        session = self.load()
        return session.token if session else None

    def is_authenticated(self) -> bool:
        return self.load() is not None

    def load(self) -> Optional[Session]:
        """
        Restores the session from storage.

        Returns:
            Session if both keys hold valid data, None otherwise
        """
        storage = self.storage
        token = storage.get(TOKEN_KEY)
        raw_user = storage.get(USER_KEY)

        if not token and not raw_user:
            return None

        if not token or not raw_user:
            self.clear()
            return None

        try:
            identity = Identity.from_dict(json.loads(raw_user))
        except (ValueError, TypeError, DecodeError):
            self.clear()
            return None

        return Session(identity=identity, token=token)

    def save(self, identity: Identity, token: str) -> Session:
        """
        Persists identity and token together.

        Raises:
            ValueError: If the token is empty
        """
        if not token:
            raise ValueError('Cannot persist a session without a token')
        storage = self.storage
        storage[TOKEN_KEY] = token
        storage[USER_KEY] = json.dumps(identity.to_dict())
        session = Session(identity=identity, token=token)
        self._notify(session)
        return session

    def clear(self) -> bool:
        """
        Removes both keys. Safe to call any number of times.

        Returns:
            True if something was removed
        """
        storage = self.storage
        had_data = TOKEN_KEY in storage or USER_KEY in storage
        storage.pop(TOKEN_KEY, None)
        storage.pop(USER_KEY, None)
        if had_data:
            self._notify(None)
        return had_data
