# ==============================================================================
# VISTA DEL DASHBOARD - Snapshot de estadísticas
# ==============================================================================
# One fetch, no mutations. Four distinct outcomes:
#   loading → request in flight
#   empty   → backend answered without data ("no data")
#   loaded  → complete snapshot
#   failed  → request failed OR snapshot structurally incomplete
# A partial snapshot is never rendered.
# ==============================================================================

from typing import Any, List, Optional, Tuple

from vruksha_admin.errors import ApiError, DecodeError, user_message
from vruksha_admin.models import StatsSnapshot


class DashboardView:

    LOADING = 'loading'
    EMPTY = 'empty'
    LOADED = 'loaded'
    FAILED = 'failed'

    def __init__(self, stats_service: Any):
        self.stats_service = stats_service
        self.status = self.LOADING
        self.snapshot: Optional[StatsSnapshot] = None
        self.error: Optional[str] = None

    def load(self) -> str:
        self.status = self.LOADING
        self.snapshot = None
        self.error = None
        try:
            snapshot = self.stats_service.get_stats()
        except DecodeError:
            self.status = self.FAILED
            self.error = 'Statistics are incomplete. Please try again later.'
            return self.status
        except ApiError as e:
            self.status = self.FAILED
            self.error = user_message(e, 'Failed to load statistics')
            return self.status

        if snapshot is None:
            self.status = self.EMPTY
        else:
            self.snapshot = snapshot
            self.status = self.LOADED
        return self.status

    def sections(self) -> List[Tuple[str, List[Tuple[str, Any, str]]]]:
        """
        Cards grouped by section: (title, [(label, value, kind)]).
        kind is 'number' or 'currency'.
        """
        s = self.snapshot
        if s is None:
            return []
        return [
            ('Users Overview', [
                ('Total Users', s.total_users, 'number'),
                ('Business Users', s.business_users, 'number'),
            ]),
            ('Inventory Status', [
                ('Total Categories', s.categories, 'number'),
                ('Total Products', s.products, 'number'),
            ]),
            ('Orders Status', [
                ('Total Orders', s.total_orders, 'number'),
                ('Scheduled', s.scheduled_orders, 'number'),
                ('Processing', s.processing_orders, 'number'),
                ('Delivered', s.delivered_orders, 'number'),
                ('Canceled', s.canceled_orders, 'number'),
            ]),
            ('Business Orders', [
                ('Total Business Orders', s.business_orders, 'number'),
                ('Quoted Amount', s.quoted_amount, 'currency'),
            ]),
            ('Financial Overview', [
                ('Total Income', s.total_income, 'currency'),
            ]),
        ]
