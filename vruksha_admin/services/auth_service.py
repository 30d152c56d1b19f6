# ==============================================================================
# SERVICIO DE AUTENTICACIÓN Y CONTEXTO DE SESIÓN
# ==============================================================================
# POST /admin/login {email, password} → {token, id, email, name, role}
# POST /admin/register {...}          → same shape as login
#
# AuthService performs the calls and writes the SessionStore.
# AuthContext is the per-request view of the session used by the route guard
# and the login page: restore() → loading flag → user; it observes the store
# so a session wiped by a 401 in the middle of a request is seen at once.
# ==============================================================================

from typing import Any, Dict, Optional

from vruksha_admin.api_client import ApiClient
from vruksha_admin.errors import AuthenticationError, DecodeError
from vruksha_admin.models import Identity, Session
from vruksha_admin.performance_logger import log_session_event
from vruksha_admin.session_store import SessionStore


class AuthService:
    """
    Servicio de autenticación.

    Responsabilidades:
    - Login / registro contra el backend
    - Persistir token + identidad juntos
    - Logout local (sin llamada de red)
    """

    def __init__(self, client: ApiClient, session_store: SessionStore):
        self.client = client
        self.session_store = session_store

    def login(self, email: str, password: str) -> Identity:
        """
        Args:
            email: Admin email
            password: Plain password (sent to the backend only)

        Returns:
            Identity of the authenticated admin

        Raises:
            AuthenticationError: Credentials rejected or no token returned
        """
        payload = self.client.post('/admin/login', json={'email': email, 'password': password})
        identity = self._persist(payload, 'Login failed: No token received')
        log_session_event('login', identity.email)
        return identity

    def register(self, data: Dict[str, Any]) -> Identity:
        payload = self.client.post('/admin/register', json=data)
        identity = self._persist(payload, 'Registration failed: No token received')
        log_session_event('register', identity.email)
        return identity

    def logout(self) -> None:
        """Clears the session unconditionally. No network call."""
        session = self.session_store.load()
        self.session_store.clear()
        log_session_event('logout', session.identity.email if session else None)

    def current_session(self) -> Optional[Session]:
        return self.session_store.load()

    def _persist(self, payload: Any, no_token_message: str) -> Identity:
        if not isinstance(payload, dict) or not payload.get('token'):
            raise AuthenticationError(no_token_message, body=payload)
        try:
            identity = Identity.from_dict(payload)
        except DecodeError as e:
            raise AuthenticationError(f'Invalid login response: {e.message}', body=payload)
        self.session_store.save(identity, payload['token'])
        return identity


class AuthContext:
    """
    Session state for one request.

    Attributes:
        loading: True only while restore() runs
        user: Current identity or None
    """

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service
        self.loading = True
        self.user: Optional[Identity] = None
        self._store = auth_service.session_store
        self._storage = self._store.storage
        self._store.subscribe(self._on_session_change)

    @property
    def is_authenticated(self) -> bool:
        return not self.loading and self.user is not None

    def restore(self) -> Optional[Identity]:
        """Synchronously restores the session from storage."""
        self.loading = True
        try:
            session = self.auth_service.current_session()
            self.user = session.identity if session else None
        finally:
            self.loading = False
        return self.user

    def login(self, email: str, password: str) -> Identity:
        self.user = self.auth_service.login(email, password)
        return self.user

    def logout(self) -> None:
        self.auth_service.logout()
        self.user = None

    def close(self) -> None:
        """Stops observing the store (end of request)."""
        self._store.unsubscribe(self._on_session_change)

    def _on_session_change(self, session: Optional[Session]) -> None:
        # The store is shared; only changes to this request's storage count
        if self._store.storage is not self._storage:
            return
        self.user = session.identity if session else None
