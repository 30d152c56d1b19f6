# ==============================================================================
# VISTA DE PEDIDOS
# ==============================================================================
# The details dialog is the Editing state in EDIT mode: its draft holds the
# status selected in the dialog. Other actions on an order (record COD
# payment, cancel, cancel recurring) run through run_action() and always end
# with the list fetched again.
# ==============================================================================

from typing import Any, Dict, List

from vruksha_admin.models import Order, OrderStatus
from vruksha_admin.views.resource_view import ResourceView


class OrderView(ResourceView):
    """
    Orders page: list, details dialog, status changes, COD payments.
    """

    label = 'Order'
    label_plural = 'orders'

    def __init__(self, service: Any, payment_service: Any, **kwargs):
        super().__init__(service, **kwargs)
        self.payment_service = payment_service

    @property
    def statuses(self) -> List[str]:
        return [s.value for s in OrderStatus]

    def success_message(self, action: str) -> str:
        if action == 'updated':
            return 'Order status updated successfully'
        return super().success_message(action)

    @property
    def operation_failed_message(self) -> str:
        return 'Failed to update order status'

    # =========================================================================
    # DIÁLOGO DE DETALLE
    # =========================================================================

    def open_details(self, order_id: str):
        return self.open_edit(order_id)

    def draft_from(self, entity: Order) -> Dict[str, Any]:
        return {'status': entity.status.value if entity.status else ''}

    def update(self, entity_id: str, draft: Dict[str, Any]) -> Any:
        return self.service.update_status(entity_id, draft['status'])

    def change_status(self, order_id: str, status: str) -> bool:
        """Selecting a status in the dialog sends it immediately."""
        if self.open_details(order_id) is None:
            return False
        self.update_draft(status=status)
        return self.submit()

    # =========================================================================
    # ACCIONES
    # =========================================================================

    def record_payment(self, order_id: str) -> bool:
        """
        Records a COD payment. Only offered for COD orders that are not
        cancelled.
        """
        order = self.find(order_id)
        if order is None:
            self.notify('Order not found', 'warning')
            return False
        if not order.can_record_payment:
            self.notify('Payment can only be recorded for active cash on delivery orders', 'warning')
            return False
        return self.run_action(
            lambda: self.payment_service.record_cod(order_id),
            'Payment recorded successfully',
            'Failed to record payment'
        )

    def cancel_order(self, order_id: str) -> bool:
        order = self.find(order_id)
        if order is None:
            self.notify('Order not found', 'warning')
            return False
        if not order.can_cancel:
            self.notify(f'Order is already {order.status_label.lower()}', 'warning')
            return False
        return self.run_action(
            lambda: self.service.cancel(order_id),
            'Order cancelled successfully',
            'Failed to cancel order'
        )

    def cancel_recurring(self, order_id: str) -> bool:
        order = self.find(order_id)
        if order is None or not order.is_recurring or not order.recurring_id:
            self.notify('Order has no active recurring schedule', 'warning')
            return False
        return self.run_action(
            lambda: self.service.cancel_recurring(order_id, order.recurring_id),
            'Recurring order cancelled successfully',
            'Failed to cancel recurring order'
        )
