# ==============================================================================
# CAPA DE MODELOS - Proyecciones de los recursos del backend
# ==============================================================================
# Dataclasses for every resource the console displays. The decoders
# (from_dict) validate the structure at the service boundary.
# ==============================================================================

from .entities import (
    # Sesión
    Identity,
    Session,

    # Catálogo
    Category,
    CategoryRef,
    Product,
    Variation,

    # Pedidos
    Order,
    OrderItem,
    OrderStatus,
    Customer,
    ShippingAddress,
    match_status,
    normalize_status,

    # Pagos
    Payment,
    PaymentMode,

    # Contenido y usuarios
    Slider,
    User,

    # Estadísticas
    StatsSnapshot,

    decode_list,
)

__all__ = [
    'Identity',
    'Session',
    'Category',
    'CategoryRef',
    'Product',
    'Variation',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Customer',
    'ShippingAddress',
    'match_status',
    'normalize_status',
    'Payment',
    'PaymentMode',
    'Slider',
    'User',
    'StatsSnapshot',
    'decode_list',
]
