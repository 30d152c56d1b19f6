# ==============================================================================
# SERVICIO BASE - Funcionalidad común de los servicios de recursos
# ==============================================================================
# Each service is a thin façade over one backend resource. The base class
# keeps the ApiClient and the helpers to decode payloads and validate
# uploaded images. Errors from the client are never caught here.
# ==============================================================================

import os
from typing import Any, Callable, List, Optional

from vruksha_admin.api_client import ApiClient
from vruksha_admin.errors import DraftValidationError
from vruksha_admin.models import decode_list


ALLOWED_IMAGE_EXTENSIONS = frozenset(['png', 'jpg', 'jpeg', 'gif', 'webp'])


def has_upload(upload: Any) -> bool:
    """True when the form actually carried a file (werkzeug sends empty parts)."""
    return upload is not None and bool(getattr(upload, 'filename', None))


def validate_image(upload: Any, label: str, required: bool) -> None:
    """
    Checks an uploaded image before it is forwarded.

    Args:
        upload: werkzeug FileStorage or None
        label: Field name used in the message ("Icon")
        required: Whether a missing file is an error

    Raises:
        DraftValidationError: Missing required file or wrong extension
    """
    if not has_upload(upload):
        if required:
            raise DraftValidationError(f'{label} image is required')
        return
    ext = os.path.splitext(upload.filename)[1].lower().lstrip('.')
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise DraftValidationError(
            f'{label}: image format not allowed ({", ".join(sorted(ALLOWED_IMAGE_EXTENSIONS))})'
        )


class ResourceService:
    """
    Base para los servicios de recursos.

    Attributes:
        client: Shared HTTP adapter
    """

    def __init__(self, client: ApiClient):
        self.client = client

    def _decode_list(self, payload: Any, decoder: Callable[[Any], Any], what: str) -> List[Any]:
        return decode_list(payload, decoder, what)

    @staticmethod
    def _unwrap(payload: Any, key: str) -> Optional[Any]:
        """Some endpoints wrap the entity ({"category": {...}}); others do not."""
        if isinstance(payload, dict) and isinstance(payload.get(key), (dict, list)):
            return payload[key]
        return payload
