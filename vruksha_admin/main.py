# ==============================================================================
# VRUKSHA ADMIN - Consola de administración de la tienda
# ==============================================================================
# Flask application that fronts the e-commerce backend REST API. Routes only
# orchestrate request → view → template; the page state lives in views/,
# the backend calls in services/.
# ==============================================================================

import os
import uuid
from functools import wraps
from typing import Any, Dict, List

from flask import (
    Flask,
    flash,
    g,
    has_request_context,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from vruksha_admin.api_client import Navigator
from vruksha_admin.app_container import DEFAULT_API_BASE_URL, get_container
from vruksha_admin.errors import ApiError, user_message
from vruksha_admin.performance_logger import init_profiling
from vruksha_admin.services import AuthContext
from vruksha_admin.views import (
    CategoryView,
    DashboardView,
    OrderView,
    PaymentView,
    ProductView,
    SliderView,
    UserView,
)
from vruksha_admin.views.formatting import register_filters


app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# True = cookies and secrets must come from the environment
PRODUCTION_MODE = os.environ.get('VRUKSHA_PRODUCTION', '0') == '1'

API_BASE_URL = os.environ.get('VRUKSHA_API_BASE_URL', DEFAULT_API_BASE_URL)
API_TIMEOUT = float(os.environ.get('VRUKSHA_API_TIMEOUT', '15'))

_DEFAULT_SECRET = 'vruksha_admin_dev_secret_key_change_in_production'
_SECRET_KEY = os.environ.get('VRUKSHA_SECRET_KEY')

if PRODUCTION_MODE and not _SECRET_KEY:
    print('[WARNING] PRODUCTION_MODE without VRUKSHA_SECRET_KEY')
    print('[WARNING] Define the environment variable to sign session cookies safely')

app.secret_key = _SECRET_KEY or _DEFAULT_SECRET

app.config.update(
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SECURE=PRODUCTION_MODE,
    SESSION_COOKIE_SAMESITE='Lax',
    PERMANENT_SESSION_LIFETIME=86400,  # 24 horas
    MAX_CONTENT_LENGTH=5 * 1024 * 1024,  # 5 MB por petición (imágenes)
)

init_profiling(app)
register_filters(app)

# Pages whose form nonce is kept per browser session
MAX_FORM_PAGES = 20

NAVIGATION = [
    ('dashboard', 'Dashboard'),
    ('categories', 'Categories'),
    ('products', 'Products'),
    ('orders', 'Orders'),
    ('payments', 'Payments'),
    ('sliders', 'Sliders'),
    ('users', 'Users'),
]


# ═══════════════════════════════════════════════════════════════════════════════
# NAVEGACIÓN Y CONTENEDOR
# ═══════════════════════════════════════════════════════════════════════════════

class FlaskNavigator(Navigator):
    """
    Expired-session redirect for the web console. The adapter can call it
    several times per request; it only raises a flag that after_request
    turns into a single redirect.
    """

    def is_at_login(self) -> bool:
        return has_request_context() and request.endpoint == 'login'

    def redirect_to_login(self) -> None:
        if has_request_context():
            g.force_login = True


_navigator = FlaskNavigator()


def container():
    return get_container(base_url=API_BASE_URL, timeout=API_TIMEOUT, navigator=_navigator)


def current_auth() -> AuthContext:
    auth = g.get('auth')
    if auth is None:
        auth = AuthContext(container().auth_service)
        g.auth = auth
    return auth


@app.before_request
def _restore_session():
    if request.endpoint == 'static':
        return
    current_auth().restore()


@app.teardown_request
def _close_auth(exc):
    auth = g.pop('auth', None)
    if auth is not None:
        auth.close()


@app.context_processor
def inject_layout():
    auth = g.get('auth')
    return {
        'navigation': NAVIGATION,
        'current_user': auth.user if auth else None,
    }


def notify(message: str, category: str = 'info') -> None:
    """Toast sink for the views; muted once the session has expired."""
    if not g.get('force_login'):
        flash(message, category)


# ═══════════════════════════════════════════════════════════════════════════════
# PROTECCIÓN DE RUTAS
# ═══════════════════════════════════════════════════════════════════════════════

def _requested_path() -> str:
    if request.query_string:
        return request.full_path
    return request.path


def _safe_next(target: str) -> str:
    """Only local paths are honoured as post-login destinations."""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('dashboard')


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth = current_auth()
        if auth.loading:
            return render_template('loading.html')
        if auth.user is None:
            flash('Please sign in to continue.', 'warning')
            return redirect(url_for('login', next=_requested_path()))
        return f(*args, **kwargs)
    return wrapper


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def issue_form_nonce():
    """
    Single-use token embedded in the mutating forms of a page.

    The forms of one rendered page share a token, and rendering the page
    again replaces it. Only the last MAX_FORM_PAGES pages keep a token, so
    browsing other dialogs does not invalidate a form that is still open.
    """
    if 'page_nonce' in g:
        return g.page_nonce
    page = request.path
    nonce = uuid.uuid4().hex
    entries = [entry for entry in session.get('form_nonces', []) if entry[0] != page]
    entries.append([page, nonce])
    session['form_nonces'] = entries[-MAX_FORM_PAGES:]
    g.page_nonce = nonce
    return nonce


def consume_form_nonce(nonce: str) -> bool:
    entries = session.get('form_nonces', [])
    kept = [entry for entry in entries if entry[1] != nonce]
    if not nonce or len(kept) == len(entries):
        return False
    session['form_nonces'] = kept
    return True


@app.context_processor
def inject_form_tokens():
    return {'csrf_token': generate_csrf_token(), 'form_nonce': issue_form_nonce}


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method == 'POST':
            token = session.get('csrf_token')
            form_token = request.form.get('csrf_token') or request.headers.get('X-CSRF-Token')
            if not token or not form_token or token != form_token:
                flash('Session expired. Please try again.', 'warning')
                if current_auth().user is None:
                    return redirect(url_for('login'))
                return redirect(url_for('dashboard'))
        return f(*args, **kwargs)
    return wrapper


def single_submit(fallback_endpoint):
    """
    Refuses a POST whose form nonce was already used (double click,
    browser resubmission). Nothing reaches the backend in that case.
    """
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if request.method == 'POST' and not consume_form_nonce(request.form.get('form_nonce', '')):
                flash('This form was already submitted.', 'warning')
                return redirect(url_for(fallback_endpoint))
            return f(*args, **kwargs)
        return wrapper
    return deco


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# after_request hooks run in reverse order: this one must run before the headers
@app.after_request
def _redirect_expired_session(response):
    if g.get('force_login') and request.endpoint != 'login':
        flash('Your session has expired. Please sign in again.', 'warning')
        return redirect(url_for('login', next=_requested_path()))
    return response


@app.errorhandler(ApiError)
def handle_api_error(error):
    """The console stays usable whatever the backend does."""
    if g.get('force_login'):
        return redirect(url_for('login', next=_requested_path()))
    message = user_message(error, 'Something went wrong. Please try again.')
    if request.endpoint == 'dashboard':
        view = DashboardView(container().stats_service)
        view.status, view.error = DashboardView.FAILED, message
        return render_template('dashboard.html', view=view), 502
    flash(message, 'danger')
    return redirect(url_for('dashboard'))


# ═══════════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN
# ═══════════════════════════════════════════════════════════════════════════════

@app.route('/')
def index():
    return redirect(url_for('dashboard'))


@app.route('/login', methods=['GET', 'POST'])
@verify_csrf
def login():
    auth = current_auth()
    next_target = _safe_next(request.values.get('next', ''))

    if auth.user is not None:
        return redirect(next_target)

    error = ''
    email = ''
    if request.method == 'POST':
        email = (request.form.get('email') or '').strip()
        password = request.form.get('password') or ''
        if not email or not password:
            error = 'Please enter both email and password'
        else:
            try:
                identity = auth.login(email, password)
            except ApiError as e:
                error = user_message(e, 'Failed to login. Please check your credentials.')
            else:
                session.permanent = True
                flash(f'Welcome, {identity.name or identity.email}.', 'success')
                return redirect(next_target)

    return render_template(
        'login.html',
        error=error,
        email=email,
        next_target=request.values.get('next', ''),
        production_mode=PRODUCTION_MODE
    )


@app.route('/logout')
@login_required
def logout():
    current_auth().logout()
    flash('Signed out.', 'info')
    return redirect(url_for('login'))


# ═══════════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════════

@app.route('/dashboard')
@login_required
def dashboard():
    view = DashboardView(container().stats_service)
    view.load()
    return render_template('dashboard.html', view=view)


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS DE PÁGINAS CRUD
# ═══════════════════════════════════════════════════════════════════════════════

def _mounted(view):
    view.mount()
    return view


def _submit_dialog(view, template, list_endpoint):
    """Submits the open dialog: success → list, failure → dialog again."""
    if view.submit():
        return redirect(url_for(list_endpoint))
    return render_template(template, view=view)


def _confirm_delete(view, entity_id, list_endpoint, title):
    entity = view.request_delete(entity_id)
    if entity is None:
        return redirect(url_for(list_endpoint))
    return render_template(
        'confirm_delete.html',
        view=view,
        entity=entity,
        title=title,
        active_section=list_endpoint,
        cancel_url=url_for(list_endpoint),
        action_url=request.path
    )


def _resolve_delete(view, entity_id, list_endpoint):
    if view.request_delete(entity_id) is not None:
        view.resolve_delete(request.form.get('decision') == 'confirm')
    return redirect(url_for(list_endpoint))


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORÍAS
# ═══════════════════════════════════════════════════════════════════════════════

def _category_view():
    c = container()
    return CategoryView(c.category_service, notify=notify, refresh_after_mutation=False)


def _category_draft() -> Dict[str, Any]:
    return {
        'name': request.form.get('name', ''),
        'parent': request.form.get('parent', ''),
        'icon': request.files.get('icon'),
    }


@app.route('/categories')
@login_required
def categories():
    return render_template('categories.html', view=_mounted(_category_view()))


@app.route('/categories/new', methods=['GET', 'POST'])
@login_required
@verify_csrf
@single_submit('categories')
def category_new():
    view = _mounted(_category_view())
    view.open_create()
    if request.method == 'GET':
        return render_template('categories.html', view=view)
    view.update_draft(**_category_draft())
    return _submit_dialog(view, 'categories.html', 'categories')


@app.route('/categories/<category_id>/edit', methods=['GET', 'POST'])
@login_required
@verify_csrf
@single_submit('categories')
def category_edit(category_id):
    view = _mounted(_category_view())
    if view.open_edit(category_id) is None:
        return redirect(url_for('categories'))
    if request.method == 'GET':
        return render_template('categories.html', view=view)
    view.update_draft(**_category_draft())
    return _submit_dialog(view, 'categories.html', 'categories')


@app.route('/categories/<category_id>/delete', methods=['GET', 'POST'])
@login_required
@verify_csrf
def category_delete(category_id):
    view = _mounted(_category_view())
    if request.method == 'GET':
        return _confirm_delete(view, category_id, 'categories', 'Delete category')
    return _resolve_delete(view, category_id, 'categories')


# ═══════════════════════════════════════════════════════════════════════════════
# PRODUCTOS
# ═══════════════════════════════════════════════════════════════════════════════

def _product_view():
    c = container()
    return ProductView(
        c.product_service,
        c.category_service,
        notify=notify,
        refresh_after_mutation=False
    )


def _variation_rows() -> List[Dict[str, Any]]:
    weights = request.form.getlist('variation_weight')
    prices = request.form.getlist('variation_price')
    pieces = request.form.getlist('variation_pcs')
    return [
        {'weight': w, 'price': p, 'pcs': n}
        for w, p, n in zip(weights, prices, pieces)
    ]


def _product_draft() -> Dict[str, Any]:
    return {
        'name': request.form.get('name', ''),
        'description': request.form.get('description', ''),
        'category': request.form.get('category', ''),
        'variation': _variation_rows(),
        'images': request.files.getlist('images'),
    }


def _product_dialog_post(view):
    """Handles the dialog buttons: add/remove variation row or submit."""
    view.update_draft(**_product_draft())
    action = request.form.get('action', 'submit')
    if action == 'add_variation':
        view.add_variation()
        return render_template('products.html', view=view)
    if action.startswith('remove_variation:'):
        index = action.split(':', 1)[1]
        if index.isdigit():
            view.remove_variation(int(index))
        return render_template('products.html', view=view)
    return _submit_dialog(view, 'products.html', 'products')


@app.route('/products')
@login_required
def products():
    return render_template('products.html', view=_mounted(_product_view()))


@app.route('/products/new', methods=['GET', 'POST'])
@login_required
@verify_csrf
@single_submit('products')
def product_new():
    view = _mounted(_product_view())
    view.open_create()
    if request.method == 'GET':
        return render_template('products.html', view=view)
    return _product_dialog_post(view)


@app.route('/products/<product_id>/edit', methods=['GET', 'POST'])
@login_required
@verify_csrf
@single_submit('products')
def product_edit(product_id):
    view = _mounted(_product_view())
    if view.open_edit(product_id) is None:
        return redirect(url_for('products'))
    if request.method == 'GET':
        return render_template('products.html', view=view)
    return _product_dialog_post(view)


@app.route('/products/<product_id>/delete', methods=['GET', 'POST'])
@login_required
@verify_csrf
def product_delete(product_id):
    view = _mounted(_product_view())
    if request.method == 'GET':
        return _confirm_delete(view, product_id, 'products', 'Delete product')
    return _resolve_delete(view, product_id, 'products')


# ═══════════════════════════════════════════════════════════════════════════════
# PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════════

def _order_view():
    c = container()
    return OrderView(
        c.order_service,
        c.payment_service,
        notify=notify,
        refresh_after_mutation=False
    )


@app.route('/orders')
@login_required
def orders():
    return render_template('orders.html', view=_mounted(_order_view()))


@app.route('/orders/<order_id>')
@login_required
def order_details(order_id):
    view = _mounted(_order_view())
    if view.open_details(order_id) is None:
        return redirect(url_for('orders'))
    return render_template('orders.html', view=view)


@app.route('/orders/<order_id>/status', methods=['POST'])
@login_required
@verify_csrf
@single_submit('orders')
def order_status(order_id):
    view = _mounted(_order_view())
    if view.change_status(order_id, request.form.get('status', '')):
        return redirect(url_for('orders'))
    if view.dialog is None:
        return redirect(url_for('orders'))
    return render_template('orders.html', view=view)


@app.route('/orders/<order_id>/payment', methods=['POST'])
@login_required
@verify_csrf
@single_submit('orders')
def order_payment(order_id):
    view = _mounted(_order_view())
    if view.record_payment(order_id):
        return redirect(url_for('orders'))
    return redirect(url_for('order_details', order_id=order_id))


@app.route('/orders/<order_id>/cancel', methods=['POST'])
@login_required
@verify_csrf
@single_submit('orders')
def order_cancel(order_id):
    view = _mounted(_order_view())
    view.cancel_order(order_id)
    return redirect(url_for('orders'))


@app.route('/orders/<order_id>/recurring/cancel', methods=['POST'])
@login_required
@verify_csrf
@single_submit('orders')
def order_cancel_recurring(order_id):
    view = _mounted(_order_view())
    view.cancel_recurring(order_id)
    return redirect(url_for('orders'))


# ═══════════════════════════════════════════════════════════════════════════════
# PAGOS
# ═══════════════════════════════════════════════════════════════════════════════

def _payment_view():
    return PaymentView(container().payment_service, notify=notify, refresh_after_mutation=False)


@app.route('/payments')
@login_required
def payments():
    return render_template('payments.html', view=_mounted(_payment_view()))


@app.route('/payments/retry')
@login_required
def payments_retry():
    view = _payment_view()
    view.retry()
    return render_template('payments.html', view=view)


@app.route('/payments/<payment_id>/status', methods=['POST'])
@login_required
@verify_csrf
def payment_status(payment_id):
    view = _mounted(_payment_view())
    view.update_status(payment_id, request.form.get('status', ''))
    return redirect(url_for('payments'))


# ═══════════════════════════════════════════════════════════════════════════════
# SLIDERS
# ═══════════════════════════════════════════════════════════════════════════════

def _slider_view():
    return SliderView(container().slider_service, notify=notify, refresh_after_mutation=False)


@app.route('/sliders')
@login_required
def sliders():
    return render_template('sliders.html', view=_mounted(_slider_view()))


@app.route('/sliders/new', methods=['GET', 'POST'])
@login_required
@verify_csrf
@single_submit('sliders')
def slider_new():
    view = _mounted(_slider_view())
    view.open_create()
    if request.method == 'GET':
        return render_template('sliders.html', view=view)
    view.update_draft(image=request.files.get('image'))
    return _submit_dialog(view, 'sliders.html', 'sliders')


@app.route('/sliders/<slider_id>/delete', methods=['GET', 'POST'])
@login_required
@verify_csrf
def slider_delete(slider_id):
    view = _mounted(_slider_view())
    if request.method == 'GET':
        return _confirm_delete(view, slider_id, 'sliders', 'Delete slider')
    return _resolve_delete(view, slider_id, 'sliders')


# ═══════════════════════════════════════════════════════════════════════════════
# USUARIOS
# ═══════════════════════════════════════════════════════════════════════════════

@app.route('/users')
@login_required
def users():
    view = UserView(container().user_service, notify=notify)
    return render_template('users.html', view=_mounted(view))
