# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Single place where the HTTP adapter, the session store and the resource
# services are built. It makes it possible to:
#   - share one ApiClient (one connection pool) across requests
#   - replace the HTTP transport in tests (fake backend, no network)
#   - reset everything between tests (reset_instance)
#
# The session store reads flask.session lazily, so the singleton is safe to
# share between requests: each request still sees its own cookie.
# ==============================================================================

from typing import Any, Callable, MutableMapping, Optional

from flask import session as flask_session

from vruksha_admin.api_client import ApiClient, Navigator, DEFAULT_TIMEOUT
from vruksha_admin.session_store import SessionStore
from vruksha_admin.services import (
    AuthService,
    CategoryService,
    ProductService,
    OrderService,
    PaymentService,
    SliderService,
    UserService,
    StatsService,
)


DEFAULT_API_BASE_URL = 'http://localhost:5000/api'


class AppContainer:
    """
    Contenedor de dependencias de la aplicación (singleton).

    Uso:
        container = AppContainer(base_url='https://api.example.com/api')
        categories = container.category_service.list_all()
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        http: Any = None,
        navigator: Optional[Navigator] = None,
        storage_getter: Optional[Callable[[], MutableMapping[str, Any]]] = None
    ):
        """
        Args:
            base_url: Backend base URL
            timeout: Seconds per backend call
            http: requests.Session replacement (tests)
            navigator: Redirect hooks for expired sessions
            storage_getter: Session storage (defaults to flask.session)
        """
        if self._initialized:
            return

        self._base_url = base_url or DEFAULT_API_BASE_URL
        self._timeout = timeout or DEFAULT_TIMEOUT
        self._http = http
        self._navigator = navigator
        self._storage_getter = storage_getter or (lambda: flask_session._get_current_object())

        self._session_store: Optional[SessionStore] = None
        self._api_client: Optional[ApiClient] = None
        self._services = {}

        self._initialized = True

    # =========================================================================
    # INFRAESTRUCTURA
    # =========================================================================

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session_store(self) -> SessionStore:
        if self._session_store is None:
            self._session_store = SessionStore(self._storage_getter)
        return self._session_store

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            self._api_client = ApiClient(
                self._base_url,
                self.session_store,
                http=self._http,
                navigator=self._navigator,
                timeout=self._timeout
            )
        return self._api_client

    def _service(self, cls):
        if cls not in self._services:
            self._services[cls] = cls(self.api_client)
        return self._services[cls]

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def auth_service(self) -> AuthService:
        if AuthService not in self._services:
            self._services[AuthService] = AuthService(self.api_client, self.session_store)
        return self._services[AuthService]

    @property
    def category_service(self) -> CategoryService:
        return self._service(CategoryService)

    @property
    def product_service(self) -> ProductService:
        return self._service(ProductService)

    @property
    def order_service(self) -> OrderService:
        return self._service(OrderService)

    @property
    def payment_service(self) -> PaymentService:
        return self._service(PaymentService)

    @property
    def slider_service(self) -> SliderService:
        return self._service(SliderService)

    @property
    def user_service(self) -> UserService:
        return self._service(UserService)

    @property
    def stats_service(self) -> StatsService:
        return self._service(StatsService)

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        self._session_store = None
        self._api_client = None
        self._services = {}

    @classmethod
    def get_instance(cls, **kwargs) -> 'AppContainer':
        """Returns the singleton; kwargs are only used on first creation."""
        if cls._instance is None:
            return cls(**kwargs)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(**kwargs) -> AppContainer:
    return AppContainer.get_instance(**kwargs)
