import io
import json
import re

from vruksha_admin.errors import ServerError
from vruksha_admin.views import OrderView

from conftest import ADMIN, STATS, extract_tokens, order_payload, sign_in_client


# ==============================================================================
# PROTECCIÓN Y LOGIN
# ==============================================================================

def test_guard_redirects_to_login_with_next(client, http):
    r = client.get('/orders')
    assert r.status_code == 302
    assert '/login?next=%2Forders' in r.headers['Location']
    assert http.calls == []


def test_login_flow_returns_to_requested_page(client, http):
    http.add('POST', '/admin/login', dict(ADMIN, token='t1'))
    page = client.get('/login?next=/orders')
    csrf, _ = extract_tokens(page.get_data(as_text=True))
    assert csrf

    r = client.post('/login', data={
        'email': 'admin@x.com', 'password': 'secret', 'next': '/orders', 'csrf_token': csrf,
    })
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/orders')
    with client.session_transaction() as s:
        assert s['token'] == 't1'
        assert json.loads(s['user'])['id'] == 'u1'


def test_login_requires_both_fields(client, http):
    page = client.get('/login')
    csrf, _ = extract_tokens(page.get_data(as_text=True))
    r = client.post('/login', data={'email': 'admin@x.com', 'password': '', 'csrf_token': csrf})
    assert r.status_code == 200
    assert 'Please enter both email and password' in r.get_data(as_text=True)
    assert http.calls == []


def test_login_shows_server_message(client, http):
    http.add('POST', '/admin/login', {'message': 'Invalid credentials'}, status=401)
    page = client.get('/login')
    csrf, _ = extract_tokens(page.get_data(as_text=True))
    r = client.post('/login', data={'email': 'admin@x.com', 'password': 'bad', 'csrf_token': csrf})
    assert r.status_code == 200
    assert 'Invalid credentials' in r.get_data(as_text=True)


def test_external_next_is_ignored(client, http):
    sign_in_client(client)
    r = client.get('/login?next=//evil.example.com')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/dashboard')


def test_login_without_csrf_is_refused(client, http):
    r = client.post('/login', data={'email': 'admin@x.com', 'password': 'secret'})
    assert r.status_code == 302
    assert http.calls == []


def test_logout_clears_session(client):
    sign_in_client(client)
    r = client.get('/logout')
    assert r.status_code == 302
    with client.session_transaction() as s:
        assert 'token' not in s
        assert 'user' not in s


def test_expired_session_redirects_to_login(client, http):
    sign_in_client(client)
    http.add('GET', '/orders/all', {'message': 'jwt expired'}, status=401)
    r = client.get('/orders')
    assert r.status_code == 302
    assert '/login?next=%2Forders' in r.headers['Location']
    assert r.headers['X-Frame-Options'] == 'DENY'
    with client.session_transaction() as s:
        assert 'token' not in s


# ==============================================================================
# PÁGINAS
# ==============================================================================

def test_dashboard_renders_sections(client, http):
    sign_in_client(client)
    http.add('GET', '/stats/', STATS)
    r = client.get('/dashboard')
    html = r.get_data(as_text=True)
    assert r.status_code == 200
    assert 'Financial Overview' in html
    assert 'Users Overview' in html


def test_dashboard_incomplete_stats(client, http):
    sign_in_client(client)
    http.add('GET', '/stats/', {k: v for k, v in STATS.items() if k != 'finance'})
    html = client.get('/dashboard').get_data(as_text=True)
    assert 'Statistics are incomplete' in html
    assert 'Financial Overview' not in html


def test_orders_page_hides_payment_for_cancelled_cod(client, http):
    sign_in_client(client)
    http.add('GET', '/orders/all', {'orders': [order_payload(status='Canceled')]})
    html = client.get('/orders/o1').get_data(as_text=True)
    assert 'Cancelled' in html
    assert 'Record Payment' not in html


def test_payments_retry_link(client, http):
    sign_in_client(client)
    http.add('GET', '/payments/all', {}, status=500)
    http.add('GET', '/payments/all', {'payments': [{'_id': 'pay1', 'orderId': 'o1', 'paymentMode': 'COD', 'amount': 10}]})
    html = client.get('/payments').get_data(as_text=True)
    assert 'href="/payments/retry"' in html

    html = client.get('/payments/retry').get_data(as_text=True)
    assert 'href="/payments/retry"' not in html
    assert '#pay1' in html
    assert len(http.calls_to('GET', '/payments/all')) == 2


def test_users_page(client, http):
    sign_in_client(client)
    http.add('GET', '/admin/users', {'users': [{'_id': 'u1', 'name': 'Ravi', 'isBusiness': True}]})
    html = client.get('/users').get_data(as_text=True)
    assert 'Ravi' in html
    assert 'Business' in html


# ==============================================================================
# FORMULARIOS
# ==============================================================================

def test_category_create_and_replayed_form(client, http):
    sign_in_client(client)
    http.add('GET', '/categories', [{'_id': 'c1', 'name': 'Fruits'}])
    http.add('POST', '/categories', {'_id': 'c2'})

    page = client.get('/categories/new')
    csrf, nonce = extract_tokens(page.get_data(as_text=True))
    assert nonce

    def submit():
        return client.post('/categories/new', data={
            'name': 'Mangoes',
            'parent': 'c1',
            'icon': (io.BytesIO(b'\x89PNG'), 'mango.png'),
            'csrf_token': csrf,
            'form_nonce': nonce,
        }, content_type='multipart/form-data')

    first = submit()
    assert first.status_code == 302
    assert first.headers['Location'].endswith('/categories')

    second = submit()
    assert second.status_code == 302
    assert len(http.calls_to('POST', '/categories')) == 1

    call = http.calls_to('POST', '/categories')[0]
    assert call.field('name') == 'Mangoes'
    assert call.field('parent') == 'c1'
    assert call.parts('icon')[0][0] == 'mango.png'


def test_open_form_survives_browsing_other_dialogs(client, http):
    sign_in_client(client)
    http.add('GET', '/categories', [])
    http.add('POST', '/categories', {'_id': 'c2'})
    http.add('GET', '/orders/all', {'orders': [order_payload(_id=f'o{n}') for n in range(1, 7)]})
    csrf, nonce = extract_tokens(client.get('/categories/new').get_data(as_text=True))

    for n in range(1, 7):
        page = client.get(f'/orders/o{n}').get_data(as_text=True)
        assert len(set(re.findall(r'name="form_nonce" value="([0-9a-f]+)"', page))) == 1

    r = client.post('/categories/new', data={
        'name': 'Mangoes',
        'icon': (io.BytesIO(b'\x89PNG'), 'mango.png'),
        'csrf_token': csrf,
        'form_nonce': nonce,
    }, content_type='multipart/form-data')
    assert r.status_code == 302
    assert len(http.calls_to('POST', '/categories')) == 1


def test_failed_create_shows_dialog_again(client, http):
    sign_in_client(client)
    http.add('GET', '/categories', [])
    http.add('POST', '/categories', {'message': 'Category already exists'}, status=400)
    csrf, nonce = extract_tokens(client.get('/categories/new').get_data(as_text=True))

    r = client.post('/categories/new', data={
        'name': 'Fruits',
        'icon': (io.BytesIO(b'\x89PNG'), 'f.png'),
        'csrf_token': csrf,
        'form_nonce': nonce,
    }, content_type='multipart/form-data')
    html = r.get_data(as_text=True)
    assert r.status_code == 200
    assert 'Category already exists' in html
    assert 'value="Fruits"' in html


def test_delete_needs_confirmation(client, http):
    sign_in_client(client)
    http.add('GET', '/sliders', [{'_id': 's1', 'image': 'https://cdn/x.png'}])
    http.add('DELETE', '/sliders/s1', {})

    page = client.get('/sliders/s1/delete')
    assert 'Are you sure' in page.get_data(as_text=True)
    csrf, _ = extract_tokens(page.get_data(as_text=True))

    client.post('/sliders/s1/delete', data={'decision': 'cancel', 'csrf_token': csrf})
    assert http.calls_to('DELETE', '/sliders/s1') == []

    client.post('/sliders/s1/delete', data={'decision': 'confirm', 'csrf_token': csrf})
    assert len(http.calls_to('DELETE', '/sliders/s1')) == 1


def test_product_variation_rows_from_form(client, http):
    sign_in_client(client)
    http.add('GET', '/products', [])
    http.add('GET', '/categories', [{'_id': 'c1', 'name': 'Fruits'}])
    http.add('POST', '/products', {'_id': 'p1'})
    csrf, nonce = extract_tokens(client.get('/products/new').get_data(as_text=True))

    r = client.post('/products/new', data={
        'name': 'Mango',
        'description': 'Sweet',
        'category': 'c1',
        'variation_weight': ['1kg', '500g'],
        'variation_price': ['100', '55.5'],
        'variation_pcs': ['4', '2'],
        'action': 'submit',
        'csrf_token': csrf,
        'form_nonce': nonce,
    })
    assert r.status_code == 302
    sent = json.loads(http.calls_to('POST', '/products')[0].field('variation'))
    assert sent == [
        {'weight': '1kg', 'price': 100, 'pcs': 4},
        {'weight': '500g', 'price': 55.5, 'pcs': 2},
    ]


def test_add_variation_row_does_not_submit(client, http):
    sign_in_client(client)
    http.add('GET', '/products', [])
    http.add('GET', '/categories', [])
    csrf, nonce = extract_tokens(client.get('/products/new').get_data(as_text=True))

    r = client.post('/products/new', data={
        'name': 'Mango',
        'variation_weight': ['1kg'],
        'variation_price': ['100'],
        'variation_pcs': ['4'],
        'action': 'add_variation',
        'csrf_token': csrf,
        'form_nonce': nonce,
    })
    assert r.status_code == 200
    assert r.get_data(as_text=True).count('name="variation_weight"') == 2
    assert http.calls_to('POST', '/products') == []


def test_record_payment_route(client, http):
    sign_in_client(client)
    http.add('GET', '/orders/all', {'orders': [order_payload()]})
    http.add('POST', '/payments/record-cod', {})
    page = client.get('/orders/o1').get_data(as_text=True)
    assert 'Record Payment' in page

    csrf, _ = extract_tokens(page)
    _, nonce = extract_tokens(page)
    r = client.post('/orders/o1/payment', data={'csrf_token': csrf, 'form_nonce': nonce})
    assert r.status_code == 302
    assert http.calls_to('POST', '/payments/record-cod')[0].json == {'orderId': 'o1'}


def test_unhandled_api_error_keeps_console_usable(client, http, monkeypatch):
    def broken(self, order_id):
        raise ServerError('boom', status=500)

    sign_in_client(client)
    http.add('GET', '/orders/all', {'orders': [order_payload()]})
    monkeypatch.setattr(OrderView, 'open_details', broken)
    r = client.get('/orders/o1')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/dashboard')


def test_security_headers(client):
    r = client.get('/login')
    assert r.headers['X-Frame-Options'] == 'DENY'
    assert r.headers['X-Content-Type-Options'] == 'nosniff'
