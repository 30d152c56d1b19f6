# ==============================================================================
# CAPA DE SERVICIOS - Fachadas sobre el backend REST
# ==============================================================================
# One service per backend resource. Services:
# 1. Call the ApiClient (never requests directly)
# 2. Validate drafts before sending anything
# 3. Decode responses into models (DecodeError on bad payloads)
# 4. Propagate every ApiError unchanged
#
# ESTRUCTURA:
# ├── auth_service.py      → login, registro, logout, contexto de sesión
# ├── category_service.py  → categorías (multipart: icon)
# ├── product_service.py   → productos (multipart: images + variation JSON)
# ├── order_service.py     → pedidos, estados, cancelaciones
# ├── payment_service.py   → pagos, cobros COD
# ├── slider_service.py    → banners (multipart: image)
# ├── user_service.py      → clientes (solo lectura)
# └── stats_service.py     → snapshot del dashboard
# ==============================================================================

from vruksha_admin.services.auth_service import AuthService, AuthContext
from vruksha_admin.services.category_service import CategoryService
from vruksha_admin.services.product_service import ProductService, coerce_number
from vruksha_admin.services.order_service import OrderService
from vruksha_admin.services.payment_service import PaymentService
from vruksha_admin.services.slider_service import SliderService
from vruksha_admin.services.user_service import UserService
from vruksha_admin.services.stats_service import StatsService

__all__ = [
    'AuthService',
    'AuthContext',
    'CategoryService',
    'ProductService',
    'coerce_number',
    'OrderService',
    'PaymentService',
    'SliderService',
    'UserService',
    'StatsService',
]
