from vruksha_admin.models import OrderStatus
from vruksha_admin.views.formatting import (
    format_count,
    format_currency,
    format_date,
    format_number,
    percentage_change,
    status_color,
    trend_color,
)


def test_currency_and_counts():
    assert format_currency(12345) == '₹12,345'
    assert format_currency(None) == '₹0'
    assert format_count(1500) == '1,500'
    assert format_number(1500) == '1.5K'
    assert format_number(2_000_000) == '2.0M'


def test_percentage_change():
    assert percentage_change(150, 100) == 50
    assert percentage_change(10, 0) == 0


def test_status_colors():
    assert status_color(OrderStatus.DELIVERED) == '#2e7d32'
    assert status_color('Unknown') == '#757575'


def test_dates():
    assert format_date('2024-03-01T10:30:00.000Z') == 'March 01, 2024'
    assert format_date('2024-03-01T10:30:00.000Z', with_time=True) == '01 Mar 2024, 10:30 AM'
    assert format_date('yesterday') == 'yesterday'
    assert format_date('') == ''


def test_trend_colors():
    assert trend_color(5) == '#2E7D32'
    assert trend_color(-1) == '#D32F2F'
    assert trend_color(0) == '#757575'
