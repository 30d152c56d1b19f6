import pytest

from vruksha_admin.errors import DecodeError
from vruksha_admin.models import (
    Category,
    Order,
    OrderStatus,
    Payment,
    Product,
    StatsSnapshot,
    User,
    normalize_status,
)

from conftest import STATS, order_payload


@pytest.mark.parametrize('raw, expected', [
    ('Pending', OrderStatus.PENDING),
    ('processing', OrderStatus.PROCESSING),
    ('Order Placed', OrderStatus.PENDING),
    ('Scheduled', OrderStatus.PENDING),
    ('Canceled', OrderStatus.CANCELLED),
    ('CANCELLED', OrderStatus.CANCELLED),
])
def test_status_normalisation(raw, expected):
    assert normalize_status(raw) is expected


def test_unknown_status_is_rejected():
    with pytest.raises(DecodeError):
        normalize_status('Lost')


def test_category_parent_forms():
    top = Category.from_dict({'_id': 'c1', 'name': 'Fruits'})
    child = Category.from_dict({'_id': 'c2', 'name': 'Mangoes', 'parent': {'_id': 'c1', 'name': 'Fruits'}})
    bare = Category.from_dict({'_id': 'c3', 'name': 'Apples', 'parent': 'c1'})
    assert top.is_top_level
    assert child.parent.name == 'Fruits'
    assert bare.parent.id == 'c1'
    assert not bare.is_top_level


def test_product_requires_numeric_variation():
    product = Product.from_dict({
        '_id': 'p1', 'name': 'Mango', 'category': 'c1',
        'images': ['a.png', 'b.png'],
        'variation': [{'weight': '1kg', 'price': 100, 'pcs': 4}],
    })
    assert product.cover_image == 'a.png'
    assert product.variation[0].price == 100

    with pytest.raises(DecodeError):
        Product.from_dict({'_id': 'p2', 'name': 'X', 'variation': [{'weight': '1kg', 'price': '100', 'pcs': 1}]})


def test_order_decoding():
    order = Order.from_dict(order_payload(status='Order Placed', isRecurring=True, recurringOrderId='r1'))
    assert order.status is OrderStatus.PENDING
    assert order.customer.name == 'Asha'
    assert order.items[0].product_name == 'Mango'
    assert order.recurring_id == 'r1'
    assert order.shipping_address.city == 'Pune'


def test_cancelled_cod_order_cannot_record_payment():
    assert Order.from_dict(order_payload()).can_record_payment
    assert not Order.from_dict(order_payload(status='Cancelled')).can_record_payment
    assert not Order.from_dict(order_payload(paymentMode='ONLINE')).can_record_payment


def test_delivered_order_cannot_be_cancelled():
    assert not Order.from_dict(order_payload(status='Delivered')).can_cancel
    assert Order.from_dict(order_payload(status='Shipped')).can_cancel


def test_order_keeps_the_status_it_was_sent():
    scheduled = Order.from_dict(order_payload(status='Scheduled'))
    assert scheduled.status is OrderStatus.PENDING
    assert scheduled.status_label == 'Scheduled'

    unknown = Order.from_dict(order_payload(status='Out for Delivery'))
    assert unknown.status is None
    assert unknown.status_label == 'Out for Delivery'
    assert unknown.can_cancel


def test_order_without_status_fails_to_decode():
    with pytest.raises(DecodeError):
        Order.from_dict(order_payload(status=None))
    with pytest.raises(DecodeError):
        Order.from_dict(order_payload(status='  '))


def test_payment_order_reference_may_be_populated():
    payment = Payment.from_dict({'_id': 'pay1', 'orderId': {'_id': 'o1'}, 'paymentMode': 'cod', 'amount': 240})
    assert payment.order_id == 'o1'
    assert payment.is_cod


def test_user_fields():
    user = User.from_dict({'_id': 'u1', 'name': 'ravi', 'isBusiness': True, 'savedAddress': [{}, {}]})
    assert user.initial == 'R'
    assert user.is_business
    assert len(user.saved_address) == 2


def test_complete_stats_snapshot():
    snapshot = StatsSnapshot.from_dict(STATS)
    assert snapshot.total_users == 10
    assert snapshot.quoted_amount == 5000
    assert snapshot.total_income == 12345.5


def test_stats_without_finance_is_incomplete():
    partial = {k: v for k, v in STATS.items() if k != 'finance'}
    with pytest.raises(DecodeError):
        StatsSnapshot.from_dict(partial)
