# ==============================================================================
# CLIENTE HTTP - Adaptador único hacia el backend REST
# ==============================================================================
# All services talk to the backend through ApiClient. It:
#   - joins the base URL and the relative path
#   - adds "Authorization: Bearer <token>" unless the caller set it
#   - logs every failure (status, body, path) in logs/api_errors.log
#   - on 401 (except from the login endpoint) wipes the session and asks the
#     navigator to send the user to the login view
#   - maps failures to the errors.py taxonomy; it never retries
#
# The 401 policy can run several times in the same request (two calls in one
# page both failing); clearing the store and flagging the redirect are both
# idempotent.
# ==============================================================================

import json
import time
from typing import Any, Dict, List, Optional, Tuple

import requests
from werkzeug.utils import secure_filename

from vruksha_admin.errors import (
    ApiError,
    AuthenticationError,
    TransportError,
    error_for_status,
)
from vruksha_admin.performance_logger import log_api_error, log_backend_call, log_session_event
from vruksha_admin.session_store import SessionStore


LOGIN_PATH_MARKER = '/login'
DEFAULT_TIMEOUT = 15


class Navigator:
    """
    Navigation hooks used by the 401 policy. The Flask application provides
    its own implementation; this default does nothing.
    """

    def is_at_login(self) -> bool:
        return False

    def redirect_to_login(self) -> None:
        pass


# ==============================================================================
# FORMULARIOS MULTIPART
# ==============================================================================

class MultipartForm:
    """
    Ordered multipart/form-data body.

    - field(): scalar value sent as a string part
    - file(): uploaded file sent as a binary part
    - json_field(): structured value sent as one JSON text part

    Uso:
        form = MultipartForm()
        form.field('name', 'Fruits')
        form.file('icon', upload)
        client.post('/categories', form=form)
    """

    def __init__(self):
        self.parts: List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]] = []

    def field(self, name: str, value: Any) -> 'MultipartForm':
        self.parts.append((name, (None, '' if value is None else str(value), None)))
        return self

    def json_field(self, name: str, value: Any) -> 'MultipartForm':
        self.parts.append((name, (None, json.dumps(value), None)))
        return self

    def file(self, name: str, upload: Any) -> 'MultipartForm':
        """
        Args:
            name: Part name expected by the backend ("icon", "images", "image")
            upload: werkzeug FileStorage (or any object with filename/stream)
        """
        filename = secure_filename(upload.filename or '') or name
        stream = getattr(upload, 'stream', upload)
        if hasattr(stream, 'seek'):
            stream.seek(0)
        content = stream.read()
        content_type = getattr(upload, 'mimetype', None) or 'application/octet-stream'
        self.parts.append((name, (filename, content, content_type)))
        return self

    # ---------------------------------------------------------------------
    # Inspección
    # ---------------------------------------------------------------------

    def names(self) -> List[str]:
        return [name for name, _ in self.parts]

    def values(self, name: str) -> List[Any]:
        """Content of every part with this name (strings or bytes)."""
        return [part[1] for part_name, part in self.parts if part_name == name]

    def value(self, name: str) -> Any:
        values = self.values(name)
        return values[0] if values else None

    def is_file(self, name: str) -> bool:
        return any(part[0] is not None for part_name, part in self.parts if part_name == name)

    def to_requests(self) -> List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]]:
        """Parts in the format accepted by requests' files= argument."""
        return [
            (name, (filename, content) if content_type is None else (filename, content, content_type))
            for name, (filename, content, content_type) in self.parts
        ]


# ==============================================================================
# CLIENTE
# ==============================================================================

class ApiClient:
    """
    HTTP adapter shared by every service.

    Uso:
        client = ApiClient('https://api.example.com/api', store)
        categories = client.get('/categories')
    """

    def __init__(
        self,
        base_url: str,
        session_store: SessionStore,
        http: Optional[requests.Session] = None,
        navigator: Optional[Navigator] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        """
        Args:
            base_url: Backend base URL (".../api")
            session_store: Source of the bearer token
            http: requests.Session (or compatible object, used in tests)
            navigator: Redirect hooks for the 401 policy
            timeout: Seconds before a call is considered lost
        """
        self.base_url = base_url.rstrip('/')
        self.session_store = session_store
        self.http = http or requests.Session()
        self.navigator = navigator or Navigator()
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # =========================================================================
    # PETICIONES
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        form: Optional[MultipartForm] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Performs a request and returns the decoded body.

        Args:
            method: HTTP verb
            path: Path relative to the base URL
            json: JSON body for data endpoints
            form: Multipart body for file-bearing endpoints
            headers: Extra headers (an explicit Authorization wins)

        Returns:
            Decoded JSON, text for non-JSON bodies, None for empty bodies

        Raises:
            ApiError: Subclass matching the failure
        """
        headers = dict(headers or {})
        if 'Authorization' not in headers:
            token = self.session_store.token
            if token:
                headers['Authorization'] = f'Bearer {token}'

        kwargs: Dict[str, Any] = {'headers': headers, 'timeout': self.timeout}
        if form is not None:
            kwargs['files'] = form.to_requests()
        elif json is not None:
            kwargs['json'] = json

        start = time.perf_counter()
        try:
            response = self.http.request(method, self.url_for(path), **kwargs)
        except requests.RequestException as e:
            log_backend_call(method, path, (time.perf_counter() - start) * 1000, None)
            log_api_error(method, path, error=e)
            raise TransportError(str(e) or 'Network Error', path=path) from e

        elapsed = (time.perf_counter() - start) * 1000
        status = response.status_code
        log_backend_call(method, path, elapsed, status)
        body = self._decode_body(response)

        if status < 400:
            return body

        log_api_error(method, path, status=status, body=body)
        error = error_for_status(status, self._error_message(status, body), body, path)

        if isinstance(error, AuthenticationError) and LOGIN_PATH_MARKER not in path:
            self._handle_session_expired()

        raise error

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request('POST', path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request('PUT', path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _handle_session_expired(self) -> None:
        session = self.session_store.load()
        if self.session_store.clear():
            log_session_event('expired', session.identity.email if session else None)
        if not self.navigator.is_at_login():
            self.navigator.redirect_to_login()

    @staticmethod
    def _decode_body(response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(status: int, body: Any) -> str:
        if isinstance(body, dict):
            msg = body.get('message') or body.get('error')
            if isinstance(msg, str) and msg:
                return msg
        if isinstance(body, str) and body.strip() and len(body) < 200:
            return body.strip()
        return f'Request failed with status code {status}'


__all__ = ['ApiClient', 'ApiError', 'MultipartForm', 'Navigator']
