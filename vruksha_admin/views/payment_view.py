# ==============================================================================
# VISTA DE PAGOS
# ==============================================================================
# Read-mostly page. A failed fetch keeps last_error so the page can show an
# error banner with a manual Retry instead of an empty table.
# ==============================================================================

from typing import Any, List

from vruksha_admin.views.resource_view import ResourceView


class PaymentView(ResourceView):

    label = 'Payment'
    label_plural = 'payments'

    @property
    def has_error(self) -> bool:
        return self.last_error is not None

    @property
    def cod_statuses(self) -> List[str]:
        return list(self.service.COD_STATUSES)

    def retry(self) -> None:
        """Manual retry after a failed fetch. A fresh view is mounted first."""
        if not self.mounted:
            self.mount()
            return
        self.refresh()

    def update_status(self, payment_id: str, status: str) -> bool:
        payment = self.find(payment_id)
        if payment is None:
            self.notify('Payment not found', 'warning')
            return False
        if not payment.is_cod:
            self.notify('Only cash on delivery payments can be updated', 'warning')
            return False
        return self.run_action(
            lambda: self.service.update_cod_status(payment_id, status),
            'Payment status updated successfully',
            'Failed to update payment status'
        )
