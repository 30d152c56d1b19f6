# ==============================================================================
# SERVICIO DE ESTADÍSTICAS
# ==============================================================================
# GET /stats/          → snapshot shown on the dashboard
# GET /stats/dashboard → extended dashboard payload (raw)
#
# The backend recomputes the snapshot on every call; nothing is cached.
# ==============================================================================

from typing import Any, Dict, Optional

from vruksha_admin.errors import DecodeError
from vruksha_admin.models import StatsSnapshot
from vruksha_admin.services.base import ResourceService


class StatsService(ResourceService):
    """
    Servicio de estadísticas del panel.
    """

    def get_stats(self) -> Optional[StatsSnapshot]:
        """
        Returns:
            StatsSnapshot, or None when the backend has no data yet

        Raises:
            DecodeError: Snapshot present but incomplete (e.g. no "finance")
        """
        payload = self.client.get('/stats/')
        if payload is None or payload == {}:
            return None
        return StatsSnapshot.from_dict(payload)

    def get_dashboard_stats(self) -> Dict[str, Any]:
        payload = self.client.get('/stats/dashboard')
        if not isinstance(payload, dict):
            raise DecodeError('dashboard stats: expected an object', path='/stats/dashboard')
        return payload
