# ==============================================================================
# SISTEMA DE LOGS - Rendimiento de rutas y llamadas al backend
# ==============================================================================
# Measures console routes and backend API calls without affecting the user.
# Writes human readable logs to /logs/:
#
#   performance.log   → every console route
#   slow_routes.log   → routes above the thresholds
#   slow_calls.log    → backend calls above the thresholds
#   api_errors.log    → every failed backend call (status, body, path)
#   session.log       → login / logout / expired session events
#
# ACTIVAR/DESACTIVAR: ENABLE_PROFILING (errors and session events are always
# written)
# ==============================================================================

import json
import os
import time
import threading
from datetime import datetime
from collections import defaultdict

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = os.environ.get('VRUKSHA_PROFILING', '1') != '0'

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOGS_DIR = os.environ.get(
    'VRUKSHA_LOGS_DIR',
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
)

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_CALLS_LOG = 'slow_calls.log'
API_ERRORS_LOG = 'api_errors.log'
SESSION_LOG = 'session.log'

ALL_LOGS = (PERFORMANCE_LOG, SLOW_ROUTES_LOG, SLOW_CALLS_LOG, API_ERRORS_LOG, SESSION_LOG)

# Nombres legibles de las rutas de la consola
ROUTE_NAMES = {
    'GET /login': 'Open login',
    'POST /login': 'Sign in',
    'GET /logout': 'Sign out',
    'GET /dashboard': 'View dashboard',
    'GET /categories': 'View categories',
    'POST /categories/new': 'Create category',
    'POST /categories/<category_id>/edit': 'Edit category',
    'POST /categories/<category_id>/delete': 'Delete category',
    'GET /products': 'View products',
    'POST /products/new': 'Create product',
    'POST /products/<product_id>/edit': 'Edit product',
    'POST /products/<product_id>/delete': 'Delete product',
    'GET /orders': 'View orders',
    'POST /orders/<order_id>/status': 'Change order status',
    'POST /orders/<order_id>/payment': 'Record COD payment',
    'POST /orders/<order_id>/cancel': 'Cancel order',
    'GET /payments': 'View payments',
    'GET /payments/retry': 'Retry payments',
    'POST /payments/<payment_id>/status': 'Change COD payment status',
    'GET /sliders': 'View sliders',
    'POST /sliders/new': 'Create slider',
    'POST /sliders/<slider_id>/delete': 'Delete slider',
    'GET /users': 'View users',
}

_write_lock = threading.Lock()

# Estructura: {"GET /categories": {calls, total_time, max_time, errors}}
_call_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0, 'errors': 0})
_stats_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# ESCRITURA
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _log_path(name):
    return os.path.join(LOGS_DIR, name)


def _write_log(name, content):
    """Appends to a log file; a full disk must never break a request."""
    try:
        with _write_lock:
            os.makedirs(LOGS_DIR, exist_ok=True)
            with open(_log_path(name), 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass


def _get_route_name(method, path, rule=None):
    """
    Readable name for a route, falling back to the raw "METHOD /path".
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]
    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]
    return key


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ RUTAS DE LA CONSOLA
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    if not ENABLE_PROFILING:
        return

    log_entry = f"""
════════════════════════════════════════
[PERFORMANCE] {_get_timestamp()}
────────────────────────────────────────
Action: {_get_route_name(method, path, rule)}
User: {user or 'anonymous'}
Route: {method} {path}
Time: {time_ms:.0f} ms
"""
    _write_log(PERFORMANCE_LOG, log_entry)


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    """
    Args:
        level: 'WARNING' (>300ms) or 'CRITICAL' (>700ms)
    """
    if not ENABLE_PROFILING:
        return

    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
    log_entry = f"""
[{level}] {_get_timestamp()}
────────────────────────────────────────
Slow route: {_get_route_name(method, path, rule)}
User: {user or 'anonymous'}
Detail: {method} {path}
Time: {time_ms:.0f} ms (threshold: {threshold} ms)
────────────────────────────────────────
"""
    _write_log(SLOW_ROUTES_LOG, log_entry)


def init_profiling(app):
    """
    Registers before/after request hooks that time every console route.

    Uso:
        from vruksha_admin.performance_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request, session

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000
        path = request.path
        if path.startswith('/static'):
            return response

        method = request.method
        rule = str(request.url_rule) if request.url_rule else path
        user = _session_user_email(session)

        log_route_performance(method, path, rule, elapsed, user)
        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')

        return response


def _session_user_email(session):
    raw = session.get('user')
    if not raw:
        return None
    try:
        return json.loads(raw).get('email')
    except (ValueError, AttributeError):
        return None


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ LLAMADAS AL BACKEND
# ═══════════════════════════════════════════════════════════════════════════

def log_backend_call(method, path, time_ms, status=None):
    """
    Records one backend API call.

    Args:
        method: HTTP verb
        path: Relative API path
        time_ms: Elapsed time in milliseconds
        status: HTTP status (None when no response arrived)
    """
    key = f"{method} {path}"
    with _stats_lock:
        stats = _call_stats[key]
        stats['calls'] += 1
        stats['total_time'] += time_ms
        if time_ms > stats['max_time']:
            stats['max_time'] = time_ms
        if status is None or status >= 400:
            stats['errors'] += 1

    if not ENABLE_PROFILING or time_ms < THRESHOLD_WARNING:
        return

    level = 'CRITICAL' if time_ms >= THRESHOLD_CRITICAL else 'WARNING'
    log_entry = f"""
[{level}] {_get_timestamp()}
Backend call: {method} {path}
Status: {status if status is not None else 'no response'}
Time: {time_ms:.0f} ms
────────────────────────────────────────
"""
    _write_log(SLOW_CALLS_LOG, log_entry)


def log_api_error(method, path, status=None, body=None, error=None):
    """
    Records a failed backend call. Always written, even with profiling off.

    Args:
        status: HTTP status, None for network errors
        body: Decoded response body
        error: Exception for network errors
    """
    if status is None:
        kind = 'NETWORK ERROR'
        detail = f"{type(error).__name__}: {error}" if error else 'no response'
    else:
        kind = 'API ERROR'
        detail = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False, default=str)

    log_entry = f"""
[{kind}] {_get_timestamp()}
Endpoint: {method} {path}
Status: {status if status is not None else '-'}
Detail: {detail}
────────────────────────────────────────
"""
    _write_log(API_ERRORS_LOG, log_entry)


def log_session_event(event, email=None):
    """
    Args:
        event: 'login', 'register', 'logout' or 'expired'
        email: Identity email when known
    """
    _write_log(SESSION_LOG, f"[{_get_timestamp()}] {event.upper()} {email or '-'}\n")


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ REPORTES Y UTILIDADES
# ═══════════════════════════════════════════════════════════════════════════

def get_call_stats():
    """
    Returns:
        dict: {"METHOD /path": {calls, avg_time, max_time, errors}}
    """
    with _stats_lock:
        result = {}
        for key, stats in _call_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[key] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2),
                'errors': stats['errors'],
            }
        return result


def reset_stats():
    """Reinicia las estadísticas (útil para testing)"""
    with _stats_lock:
        _call_stats.clear()


def clear_logs():
    for name in ALL_LOGS:
        path = _log_path(name)
        if os.path.exists(path):
            os.remove(path)


def get_log_summary():
    """
    Returns:
        dict: {log name: {exists, size_kb, lines}}
    """
    summary = {}
    for name in ALL_LOGS:
        path = _log_path(name)
        if os.path.exists(path):
            size = os.path.getsize(path) / 1024
            with open(path, 'r', encoding='utf-8') as f:
                lines = sum(1 for _ in f)
            summary[name] = {'exists': True, 'size_kb': round(size, 2), 'lines': lines}
        else:
            summary[name] = {'exists': False, 'size_kb': 0, 'lines': 0}
    return summary


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'log_backend_call',
    'log_api_error',
    'log_session_event',
    'get_call_stats',
    'reset_stats',
    'clear_logs',
    'get_log_summary',
]
