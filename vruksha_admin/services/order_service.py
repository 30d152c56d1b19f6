# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# GET /orders/all, GET /orders/details/{id}
# PUT /orders/status/{id} {status}
# PUT /orders/cancel/{id}
# PUT /orders/recurring/{orderId}/{recurringId}/cancel
#
# The console does not restrict status transitions; the backend decides.
# Only canonical statuses (OrderStatus) can be sent.
# ==============================================================================

from typing import Any, List

from vruksha_admin.errors import DecodeError, DraftValidationError
from vruksha_admin.models import Order, OrderStatus, normalize_status
from vruksha_admin.services.base import ResourceService


class OrderService(ResourceService):
    """Operations on customer orders."""

    def list_all(self) -> List[Order]:
        payload = self.client.get('/orders/all')
        return self._decode_list(self._unwrap(payload, 'orders'), Order.from_dict, 'orders')

    def get_details(self, order_id: str) -> Order:
        payload = self.client.get(f'/orders/details/{order_id}')
        return Order.from_dict(self._unwrap(payload, 'order'))

    def update_status(self, order_id: str, status: Any) -> Any:
        """
        Args:
            order_id: Order identifier
            status: OrderStatus or its string value

        Raises:
            DraftValidationError: Unknown status (nothing is sent)
        """
        try:
            status = normalize_status(status)
        except DecodeError as e:
            raise DraftValidationError(e.message)
        return self.client.put(f'/orders/status/{order_id}', json={'status': status.value})

    def cancel(self, order_id: str) -> Any:
        return self.client.put(f'/orders/cancel/{order_id}')

    def cancel_recurring(self, order_id: str, recurring_order_id: str) -> Any:
        return self.client.put(f'/orders/recurring/{order_id}/{recurring_order_id}/cancel')

    @staticmethod
    def statuses() -> List[str]:
        return [s.value for s in OrderStatus]
