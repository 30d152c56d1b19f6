# ==============================================================================
# CAPA DE VISTAS - Estado de cada página de gestión
# ==============================================================================
# The Flask routes only orchestrate: request → view → template. All the page
# state (list, dialog, confirmation) lives in these classes.
# ==============================================================================

from vruksha_admin.views.resource_view import (
    ResourceView,
    DialogMode,
    Idle,
    Loading,
    Loaded,
    Editing,
    Deleting,
    InvalidTransition,
)
from vruksha_admin.views.category_view import CategoryView
from vruksha_admin.views.product_view import ProductView
from vruksha_admin.views.order_view import OrderView
from vruksha_admin.views.payment_view import PaymentView
from vruksha_admin.views.slider_view import SliderView
from vruksha_admin.views.user_view import UserView
from vruksha_admin.views.dashboard_view import DashboardView

__all__ = [
    'ResourceView',
    'DialogMode',
    'Idle',
    'Loading',
    'Loaded',
    'Editing',
    'Deleting',
    'InvalidTransition',
    'CategoryView',
    'ProductView',
    'OrderView',
    'PaymentView',
    'SliderView',
    'UserView',
    'DashboardView',
]
