# ==============================================================================
# ERRORES - Taxonomía de fallos del backend
# ==============================================================================
# Every failure that can come out of the HTTP adapter or a service is one of
# these classes. Services never swallow them; views turn them into flash
# messages with user_message().
#
#   ApiError
#   ├── TransportError         → no response (connection refused, timeout)
#   ├── AuthenticationError    → 401 (session wiped unless it was the login)
#   ├── PermissionDeniedError  → 403 (session kept)
#   ├── RequestRejectedError   → other 4xx, server message shown verbatim
#   ├── ServerError            → 5xx, generic fallback shown
#   ├── DecodeError            → payload does not match the expected schema
#   └── DraftValidationError   → local form data invalid, nothing was sent
# ==============================================================================

from typing import Any, Optional


PERMISSION_MESSAGE = (
    'You are not authorised to perform this action. '
    'Please check your admin privileges.'
)
NETWORK_MESSAGE = 'Could not reach the server. Please check your connection.'


class ApiError(Exception):
    """
    Base error for everything related to the backend API.

    Attributes:
        message: Human readable message (server message when available)
        status: HTTP status code, None when no response was received
        body: Decoded response body (dict, str or None)
        path: Relative path of the request that failed
    """

    def __init__(
        self,
        message: str = '',
        status: Optional[int] = None,
        body: Any = None,
        path: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body
        self.path = path

    @property
    def server_message(self) -> Optional[str]:
        """Message field of the response body, if the server sent one."""
        if isinstance(self.body, dict):
            msg = self.body.get('message') or self.body.get('error')
            if isinstance(msg, str) and msg.strip():
                return msg
        return None

    def __str__(self) -> str:
        if self.status is not None:
            return f"[{self.status}] {self.message} ({self.path})"
        return self.message


class TransportError(ApiError):
    """No response was received (network down, DNS, timeout)."""
    pass


class AuthenticationError(ApiError):
    """Credentials rejected or session no longer valid (401)."""
    pass


class PermissionDeniedError(ApiError):
    """Authenticated but not allowed (403)."""
    pass


class RequestRejectedError(ApiError):
    """Validation or conflict failure reported by the server (4xx)."""
    pass


class ServerError(ApiError):
    """Unexpected failure on the server side (5xx)."""
    pass


class DecodeError(ApiError):
    """The response payload does not have the expected structure."""
    pass


class DraftValidationError(ApiError):
    """The form draft is invalid; no request was issued."""
    pass


def error_for_status(status: int, message: str, body: Any, path: str) -> ApiError:
    """
    Builds the error class that corresponds to an HTTP status.

    Args:
        status: HTTP status code (>= 400)
        message: Message extracted from the response
        body: Decoded response body
        path: Relative request path

    Returns:
        ApiError subclass instance
    """
    if status == 401:
        cls = AuthenticationError
    elif status == 403:
        cls = PermissionDeniedError
    elif 400 <= status < 500:
        cls = RequestRejectedError
    else:
        cls = ServerError
    return cls(message, status=status, body=body, path=path)


def user_message(error: Exception, fallback: str) -> str:
    """
    Chooses the message shown to the user for a failed action.

    - 403 → fixed permission message
    - 4xx / auth / draft errors → server (or local) message verbatim
    - 5xx, decode errors, unknown exceptions → fallback
    - network failure → connection message

    Args:
        error: Exception raised by a service call
        fallback: Generic message for the action ("Operation failed")

    Returns:
        Text for the flash message
    """
    if isinstance(error, PermissionDeniedError):
        return PERMISSION_MESSAGE
    if isinstance(error, TransportError):
        return NETWORK_MESSAGE
    if isinstance(error, DraftValidationError):
        return error.message or fallback
    if isinstance(error, (RequestRejectedError, AuthenticationError)):
        return error.server_message or error.message or fallback
    return fallback
