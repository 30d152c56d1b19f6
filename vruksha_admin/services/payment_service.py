# ==============================================================================
# SERVICIO DE PAGOS
# ==============================================================================
# GET  /payments/all
# POST /payments/record-cod {orderId}           → cash received on delivery
# PUT  /payments/update-cod-status/{id} {status}
# POST /payments/create-order {orderId}         → gateway order (thin wrapper)
# POST /payments/verify {...}                   → gateway verification
#
# The gateway flow itself lives in the backend and the payment processor;
# the console only exposes the two calls.
# ==============================================================================

from typing import Any, Dict, List

from vruksha_admin.errors import DraftValidationError
from vruksha_admin.models import Payment
from vruksha_admin.services.base import ResourceService


class PaymentService(ResourceService):
    """
    Servicio para pagos.

    Responsabilidades:
    - Listar pagos (solo administradores)
    - Registrar cobros contra entrega (COD)
    - Cambiar el estado de un pago COD
    """

    # Estados que el backend acepta para pagos COD
    COD_STATUSES = ('Pending', 'Completed', 'Failed')

    def list_all(self) -> List[Payment]:
        payload = self.client.get('/payments/all')
        return self._decode_list(self._unwrap(payload, 'payments'), Payment.from_dict, 'payments')

    def record_cod(self, order_id: str) -> Any:
        """
        Records that cash was received for a COD order.

        Args:
            order_id: Order identifier
        """
        return self.client.post('/payments/record-cod', json={'orderId': order_id})

    def update_cod_status(self, payment_id: str, status: str) -> Any:
        if status not in self.COD_STATUSES:
            raise DraftValidationError(f'Invalid payment status: {status}')
        return self.client.put(f'/payments/update-cod-status/{payment_id}', json={'status': status})

    def create_gateway_order(self, order_id: str) -> Any:
        return self.client.post('/payments/create-order', json={'orderId': order_id})

    def verify_gateway_payment(self, details: Dict[str, Any]) -> Any:
        return self.client.post('/payments/verify', json=details)
