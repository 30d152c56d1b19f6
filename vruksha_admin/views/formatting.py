# ==============================================================================
# FORMATO - Helpers de presentación (filtros Jinja)
# ==============================================================================

from datetime import datetime
from typing import Any, Optional


STATUS_COLORS = {
    'Pending': '#f57c00',
    'Processing': '#1976d2',
    'Shipped': '#7b1fa2',
    'Delivered': '#2e7d32',
    'Cancelled': '#d32f2f',
}
DEFAULT_COLOR = '#757575'


def format_currency(value: Any) -> str:
    """12345.6 → "₹12,346" """
    try:
        return f"₹{float(value):,.0f}"
    except (TypeError, ValueError):
        return '₹0'


def format_count(value: Any) -> str:
    """Grouped integer for the stat cards; non numbers are shown as-is."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0:
        return f"{value:,.0f}"
    return str(value)


def format_number(value: float) -> str:
    """
    Large numbers with suffix: 1500 → "1.5K", 2000000 → "2.0M".
    """
    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:.1f}B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def percentage_change(current: float, previous: Optional[float]) -> float:
    if not previous:
        return 0
    return ((current - previous) / previous) * 100


def trend_color(change: float) -> str:
    if change > 0:
        return '#2E7D32'
    if change < 0:
        return '#D32F2F'
    return DEFAULT_COLOR


def status_color(status: Any) -> str:
    value = getattr(status, 'value', status)
    return STATUS_COLORS.get(value, DEFAULT_COLOR)


def _parse_iso(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (ValueError, TypeError):
        return None


def format_date(value: str, with_time: bool = False) -> str:
    """
    "2024-03-01T10:30:00.000Z" → "March 01, 2024" (or "01 Mar 2024, 10:30 AM").
    Unparseable values are returned unchanged.
    """
    parsed = _parse_iso(value)
    if parsed is None:
        return value or ''
    if with_time:
        return parsed.strftime('%d %b %Y, %I:%M %p')
    return parsed.strftime('%B %d, %Y')


def register_filters(app) -> None:
    """Registers the helpers as Jinja filters."""
    app.jinja_env.filters['currency'] = format_currency
    app.jinja_env.filters['number'] = format_count
    app.jinja_env.filters['compact'] = format_number
    app.jinja_env.filters['status_color'] = status_color
    app.jinja_env.filters['date'] = format_date
    app.jinja_env.filters['datetime'] = lambda v: format_date(v, with_time=True)
