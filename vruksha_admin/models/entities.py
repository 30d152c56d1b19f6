# ==============================================================================
# ENTIDADES DEL DOMINIO - Proyecciones de los recursos del backend
# ==============================================================================
# The backend is the owner of every entity. These dataclasses are transient
# projections used by the views for a single page render.
#
# Every from_dict() validates the payload it receives and raises DecodeError
# when the structure is wrong, so templates never render half an object.
# Wire identifiers come as "_id" and are exposed as "id".
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from vruksha_admin.errors import DecodeError


# ==============================================================================
# ENUMERACIONES
# ==============================================================================

class OrderStatus(str, Enum):
    """Canonical order statuses accepted by the console."""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMode(str, Enum):
    """Payment modes reported by the backend."""
    COD = "COD"
    ONLINE = "ONLINE"


# Legacy vocabulary still sent by older order pages
_STATUS_ALIASES = {
    'order placed': OrderStatus.PENDING,
    'scheduled': OrderStatus.PENDING,
    'canceled': OrderStatus.CANCELLED,
}


def match_status(status: Any) -> Optional[OrderStatus]:
    """Canonical status for a status string, or None when it is not known."""
    if isinstance(status, OrderStatus):
        return status
    if not isinstance(status, str):
        return None
    low = status.strip().lower()
    for member in OrderStatus:
        if member.value.lower() == low:
            return member
    return _STATUS_ALIASES.get(low)


def normalize_status(status: Any) -> OrderStatus:
    """
    Normalises a status string to the canonical enumeration.
    Accepts any casing and the legacy synonyms.

    Raises:
        DecodeError: If the status is unknown
    """
    member = match_status(status)
    if member is None:
        raise DecodeError(f'Unknown order status: {status!r}')
    return member


# ==============================================================================
# HELPERS DE DECODIFICACIÓN
# ==============================================================================

def _expect_dict(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f'{what}: expected an object, got {type(data).__name__}')
    return data


def _require(data: Dict[str, Any], key: str, what: str) -> Any:
    if data.get(key) is None:
        raise DecodeError(f'{what}: missing field "{key}"')
    return data[key]


def _require_id(data: Dict[str, Any], what: str) -> str:
    value = data.get('_id', data.get('id'))
    if value is None or value == '':
        raise DecodeError(f'{what}: missing identifier')
    return str(value)


def _number(value: Any, what: str, key: str) -> float:
    # bool is an int subclass; a flag in a numeric field is a schema error
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f'{what}: field "{key}" must be numeric')
    return value


def _opt_str(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _list_of(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise DecodeError(f'{what}: expected a list')
    return data


def decode_list(payload: Any, decoder, what: str) -> List[Any]:
    """
    Decodes a list payload item by item.

    Args:
        payload: Raw JSON payload (must be a list)
        decoder: Callable that decodes one element
        what: Name used in error messages

    Raises:
        DecodeError: If the payload is not a list or one item is invalid
    """
    if not isinstance(payload, list):
        raise DecodeError(f'{what}: expected a list, got {type(payload).__name__}')
    return [decoder(item) for item in payload]


# ==============================================================================
# SESIÓN
# ==============================================================================

@dataclass
class Identity:
    """Authenticated principal."""
    id: str
    email: str
    name: str
    role: str = 'admin'

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'email': self.email, 'name': self.name, 'role': self.role}

    @classmethod
    def from_dict(cls, data: Any) -> 'Identity':
        data = _expect_dict(data, 'Identity')
        return cls(
            id=str(_require(data, 'id', 'Identity')),
            email=_opt_str(data.get('email')),
            name=_opt_str(data.get('name')),
            role=_opt_str(data.get('role')) or 'admin'
        )


@dataclass
class Session:
    """Identity + bearer token pair."""
    identity: Identity
    token: str


# ==============================================================================
# CATÁLOGO
# ==============================================================================

@dataclass
class CategoryRef:
    """Reference to a category embedded in another resource."""
    id: str
    name: str = ''

    @classmethod
    def from_wire(cls, value: Any) -> Optional['CategoryRef']:
        """Accepts a populated object, a bare id string or null."""
        if value is None or value == '':
            return None
        if isinstance(value, str):
            return cls(id=value)
        data = _expect_dict(value, 'CategoryRef')
        return cls(id=_require_id(data, 'CategoryRef'), name=_opt_str(data.get('name')))


@dataclass
class Category:
    """
    Product category. Categories are single level: a category with a parent
    cannot itself be a parent.

    Attributes:
        id: Backend identifier
        name: Display name
        parent: Parent category reference (None for top level)
        icon: URL of the icon image
    """
    id: str
    name: str
    parent: Optional[CategoryRef] = None
    icon: str = ''

    @property
    def is_top_level(self) -> bool:
        return self.parent is None

    @classmethod
    def from_dict(cls, data: Any) -> 'Category':
        data = _expect_dict(data, 'Category')
        return cls(
            id=_require_id(data, 'Category'),
            name=_opt_str(_require(data, 'name', 'Category')),
            parent=CategoryRef.from_wire(data.get('parent')),
            icon=_opt_str(data.get('icon'))
        )


@dataclass
class Variation:
    """
    Priced, weighted sub-unit of a product.

    Attributes:
        weight: Weight label ("250g")
        price: Unit price
        pcs: Number of pieces
    """
    weight: str
    price: float
    pcs: float

    def to_dict(self) -> Dict[str, Any]:
        return {'weight': self.weight, 'price': self.price, 'pcs': self.pcs}

    @classmethod
    def from_dict(cls, data: Any) -> 'Variation':
        data = _expect_dict(data, 'Variation')
        return cls(
            weight=_opt_str(data.get('weight')),
            price=_number(_require(data, 'price', 'Variation'), 'Variation', 'price'),
            pcs=_number(_require(data, 'pcs', 'Variation'), 'Variation', 'pcs')
        )


@dataclass
class Product:
    """
    Catalogue product.

    Attributes:
        id: Backend identifier
        name: Product name
        description: Free text description
        category: Category reference
        images: Ordered image URLs
        variation: Priced variations (at least one on write)
    """
    id: str
    name: str
    description: str = ''
    category: Optional[CategoryRef] = None
    images: List[str] = field(default_factory=list)
    variation: List[Variation] = field(default_factory=list)

    @property
    def cover_image(self) -> str:
        return self.images[0] if self.images else ''

    @classmethod
    def from_dict(cls, data: Any) -> 'Product':
        data = _expect_dict(data, 'Product')
        return cls(
            id=_require_id(data, 'Product'),
            name=_opt_str(_require(data, 'name', 'Product')),
            description=_opt_str(data.get('description')),
            category=CategoryRef.from_wire(data.get('category')),
            images=[str(i) for i in _list_of(data.get('images'), 'Product.images')],
            variation=[Variation.from_dict(v) for v in _list_of(data.get('variation'), 'Product.variation')]
        )


# ==============================================================================
# PEDIDOS
# ==============================================================================

@dataclass
class Customer:
    """Customer reference embedded in an order."""
    id: str = ''
    name: str = ''
    email: str = ''
    phone: str = ''

    @classmethod
    def from_wire(cls, value: Any) -> 'Customer':
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(id=value)
        data = _expect_dict(value, 'Customer')
        return cls(
            id=_opt_str(data.get('_id', data.get('id'))),
            name=_opt_str(data.get('name')),
            email=_opt_str(data.get('email')),
            phone=_opt_str(data.get('phone'))
        )


@dataclass
class ShippingAddress:
    address: str = ''
    city: str = ''
    state: str = ''
    pincode: str = ''

    @classmethod
    def from_wire(cls, value: Any) -> 'ShippingAddress':
        if value is None:
            return cls()
        data = _expect_dict(value, 'ShippingAddress')
        return cls(
            address=_opt_str(data.get('address')),
            city=_opt_str(data.get('city')),
            state=_opt_str(data.get('state')),
            pincode=_opt_str(data.get('pincode'))
        )


@dataclass
class OrderItem:
    """
    Line item of an order.

    Attributes:
        product_id: Product identifier ('' when the product was deleted)
        product_name: Product name at the time of display
        product_image: Product image URL
        variation: Chosen variation, if the backend sends it
        quantity: Units ordered
        price: Line price
    """
    id: str
    product_id: str
    product_name: str
    product_image: str
    quantity: int
    price: float
    variation: Optional[Variation] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'OrderItem':
        data = _expect_dict(data, 'OrderItem')
        product = data.get('product')
        if isinstance(product, dict):
            product_id = _opt_str(product.get('_id', product.get('id')))
            product_name = _opt_str(product.get('name'))
            product_image = _opt_str(product.get('image'))
        else:
            product_id, product_name, product_image = _opt_str(product), '', ''
        variation = data.get('variation')
        return cls(
            id=_opt_str(data.get('_id', data.get('id'))),
            product_id=product_id,
            product_name=product_name,
            product_image=product_image,
            quantity=int(_number(_require(data, 'quantity', 'OrderItem'), 'OrderItem', 'quantity')),
            price=_number(data.get('price', 0), 'OrderItem', 'price'),
            variation=Variation.from_dict(variation) if isinstance(variation, dict) else None
        )


@dataclass
class Order:
    """
    Customer order. The console does not constrain status transitions.

    status_label is the text the backend sent and is what pages display.
    status is its canonical form, or None for a status the console does
    not know; such orders still list and can be moved to a known status.
    """
    id: str
    customer: Customer
    items: List[OrderItem]
    total: float
    status: Optional[OrderStatus]
    status_label: str
    payment_mode: str
    shipping_address: ShippingAddress
    is_recurring: bool = False
    recurring_id: str = ''
    created_at: str = ''

    @property
    def can_record_payment(self) -> bool:
        """Cash on delivery receipts can be recorded until the order is cancelled."""
        return (
            self.payment_mode.upper() == PaymentMode.COD.value
            and self.status != OrderStatus.CANCELLED
        )

    @property
    def can_cancel(self) -> bool:
        return self.status not in (OrderStatus.CANCELLED, OrderStatus.DELIVERED)

    @classmethod
    def from_dict(cls, data: Any) -> 'Order':
        data = _expect_dict(data, 'Order')
        status = data.get('status')
        if not isinstance(status, str) or not status.strip():
            raise DecodeError(f'Order: invalid status {status!r}')
        return cls(
            id=_require_id(data, 'Order'),
            customer=Customer.from_wire(data.get('user')),
            items=[OrderItem.from_dict(i) for i in _list_of(data.get('items'), 'Order.items')],
            total=_number(_require(data, 'total', 'Order'), 'Order', 'total'),
            status=match_status(status),
            status_label=status.strip(),
            payment_mode=_opt_str(data.get('paymentMode')),
            shipping_address=ShippingAddress.from_wire(data.get('shippingAddress')),
            is_recurring=bool(data.get('isRecurring', False)),
            recurring_id=_opt_str(data.get('recurringOrderId') or data.get('recurringId')),
            created_at=_opt_str(data.get('createdAt'))
        )


# ==============================================================================
# PAGOS
# ==============================================================================

@dataclass
class Payment:
    """Payment record attached to an order."""
    id: str
    order_id: str
    payment_mode: str
    amount: float
    status: str
    created_at: str = ''

    @property
    def is_cod(self) -> bool:
        return self.payment_mode.upper() == PaymentMode.COD.value

    @classmethod
    def from_dict(cls, data: Any) -> 'Payment':
        data = _expect_dict(data, 'Payment')
        order = data.get('orderId')
        if isinstance(order, dict):
            order = order.get('_id', order.get('id'))
        return cls(
            id=_require_id(data, 'Payment'),
            order_id=_opt_str(order),
            payment_mode=_opt_str(data.get('paymentMode')),
            amount=_number(_require(data, 'amount', 'Payment'), 'Payment', 'amount'),
            status=_opt_str(data.get('status')),
            created_at=_opt_str(data.get('createdAt'))
        )


# ==============================================================================
# SLIDERS Y USUARIOS
# ==============================================================================

@dataclass
class Slider:
    """Promotional banner."""
    id: str
    image: str
    created_at: str = ''

    @classmethod
    def from_dict(cls, data: Any) -> 'Slider':
        data = _expect_dict(data, 'Slider')
        return cls(
            id=_require_id(data, 'Slider'),
            image=_opt_str(_require(data, 'image', 'Slider')),
            created_at=_opt_str(data.get('createdAt'))
        )


@dataclass
class User:
    """
    Shop customer account. Read-only in the console.

    Attributes:
        saved_address: Raw saved addresses (only the count is displayed)
    """
    id: str
    name: str
    email: str = ''
    phone: str = ''
    is_business: bool = False
    saved_address: List[Dict[str, Any]] = field(default_factory=list)
    profile_image: str = ''
    created_at: str = ''

    @property
    def initial(self) -> str:
        return self.name[:1].upper() if self.name else '?'

    @classmethod
    def from_dict(cls, data: Any) -> 'User':
        data = _expect_dict(data, 'User')
        return cls(
            id=_require_id(data, 'User'),
            name=_opt_str(_require(data, 'name', 'User')),
            email=_opt_str(data.get('email')),
            phone=_opt_str(data.get('phone')),
            is_business=bool(data.get('isBusiness', False)),
            saved_address=list(_list_of(data.get('savedAddress'), 'User.savedAddress')),
            profile_image=_opt_str(data.get('profileImage')),
            created_at=_opt_str(data.get('createdAt'))
        )


# ==============================================================================
# ESTADÍSTICAS
# ==============================================================================

@dataclass
class StatsSnapshot:
    """
    Point-in-time aggregation computed by the backend on every request.
    All five sections are required; a partial snapshot is a DecodeError.
    """
    total_users: int
    business_users: int
    categories: int
    products: int
    total_orders: int
    scheduled_orders: int
    processing_orders: int
    delivered_orders: int
    canceled_orders: int
    business_orders: int
    quoted_amount: float
    total_income: float

    SECTIONS = ('users', 'inventory', 'orders', 'businessOrders', 'finance')

    @classmethod
    def from_dict(cls, data: Any) -> 'StatsSnapshot':
        data = _expect_dict(data, 'Stats')
        for section in cls.SECTIONS:
            _expect_dict(_require(data, section, 'Stats'), f'Stats.{section}')

        def num(section: str, key: str) -> float:
            part = data[section]
            return _number(part.get(key, 0), f'Stats.{section}', key)

        return cls(
            total_users=num('users', 'total'),
            business_users=num('users', 'businessUsers'),
            categories=num('inventory', 'categories'),
            products=num('inventory', 'products'),
            total_orders=num('orders', 'total'),
            scheduled_orders=num('orders', 'scheduled'),
            processing_orders=num('orders', 'processing'),
            delivered_orders=num('orders', 'delivered'),
            canceled_orders=num('orders', 'canceled'),
            business_orders=num('businessOrders', 'total'),
            quoted_amount=num('businessOrders', 'quotedAmount'),
            total_income=num('finance', 'totalIncome')
        )
