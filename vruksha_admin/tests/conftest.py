import io
import json
import re

import pytest
from werkzeug.datastructures import FileStorage

from vruksha_admin import performance_logger
from vruksha_admin.api_client import ApiClient, Navigator
from vruksha_admin.app_container import AppContainer
from vruksha_admin.models import Identity
from vruksha_admin.session_store import SessionStore


BASE_URL = 'http://backend.test/api'


# ==============================================================================
# BACKEND FALSO
# ==============================================================================

class FakeResponse:
    """Minimal requests.Response replacement."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if payload is not None:
            self.content = json.dumps(payload).encode('utf-8')
        elif text is not None:
            self.content = text.encode('utf-8')
        else:
            self.content = b''

    @property
    def text(self):
        return self.content.decode('utf-8')

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class Call:
    def __init__(self, method, path, headers, json_body, files):
        self.method = method
        self.path = path
        self.headers = headers or {}
        self.json = json_body
        self.files = files or []

    def parts(self, name):
        """(filename, content) of every multipart part with this name."""
        return [(part[0], part[1]) for part_name, part in self.files if part_name == name]

    def field(self, name):
        values = [content for filename, content in self.parts(name) if filename is None]
        return values[0] if values else None


class FakeHttp:
    """
    requests.Session replacement: routes "METHOD /path" to canned responses
    and records every call. Unknown routes answer 404.
    """

    def __init__(self, base_url=BASE_URL):
        self.base_url = base_url
        self.routes = {}
        self.calls = []

    def add(self, method, path, payload=None, status=200, text=None, raises=None):
        self.routes.setdefault((method, path), []).append((status, payload, text, raises))
        return self

    def request(self, method, url, headers=None, timeout=None, json=None, files=None):
        path = url[len(self.base_url):]
        self.calls.append(Call(method, path, headers, json, files))
        queue = self.routes.get((method, path))
        if not queue:
            return FakeResponse(404, {'message': f'Cannot {method} {path}'})
        status, payload, text, raises = queue[0] if len(queue) == 1 else queue.pop(0)
        if raises is not None:
            raise raises
        return FakeResponse(status, payload, text)

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method and c.path == path]


class RecordingNavigator(Navigator):

    def __init__(self, at_login=False):
        self.at_login = at_login
        self.redirects = 0

    def is_at_login(self):
        return self.at_login

    def redirect_to_login(self):
        self.redirects += 1


def make_upload(filename='icon.png', content=b'\x89PNG fake', mimetype='image/png'):
    return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=mimetype)


ADMIN = {'id': 'u1', 'email': 'admin@x.com', 'name': 'Admin', 'role': 'admin'}


# ==============================================================================
# FIXTURES
# ==============================================================================

@pytest.fixture(autouse=True)
def logs_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(performance_logger, 'LOGS_DIR', str(tmp_path / 'logs'))
    performance_logger.reset_stats()
    return tmp_path / 'logs'


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def store(storage):
    return SessionStore(lambda: storage)


@pytest.fixture
def signed_in(store):
    return store.save(Identity.from_dict(ADMIN), 't1')


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def api(store, http, navigator):
    return ApiClient(BASE_URL, store, http=http, navigator=navigator)


@pytest.fixture
def client(http):
    """Flask test client wired to the fake backend."""
    from vruksha_admin.main import app, _navigator

    AppContainer.reset_instance()
    AppContainer(base_url=BASE_URL, http=http, navigator=_navigator)
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c
    AppContainer.reset_instance()


def sign_in_client(client):
    """Writes a consistent session straight into the cookie."""
    with client.session_transaction() as s:
        s['token'] = 't1'
        s['user'] = json.dumps(ADMIN)


def extract_tokens(html):
    """csrf_token and form_nonce of the first form in the page."""
    csrf = re.search(r'name="csrf_token" value="([0-9a-f]+)"', html)
    nonce = re.search(r'name="form_nonce" value="([0-9a-f]+)"', html)
    return (csrf.group(1) if csrf else None, nonce.group(1) if nonce else None)


STATS = {
    'users': {'total': 10, 'businessUsers': 3},
    'inventory': {'categories': 4, 'products': 20},
    'orders': {'total': 7, 'scheduled': 1, 'processing': 2, 'delivered': 3, 'canceled': 1},
    'businessOrders': {'total': 2, 'quotedAmount': 5000},
    'finance': {'totalIncome': 12345.5},
}


def order_payload(**overrides):
    data = {
        '_id': 'o1',
        'user': {'_id': 'u9', 'name': 'Asha', 'email': 'asha@x.com'},
        'items': [{'product': {'_id': 'p1', 'name': 'Mango'}, 'quantity': 2, 'price': 120}],
        'total': 240,
        'status': 'Pending',
        'paymentMode': 'COD',
        'shippingAddress': {'address': '1 Main St', 'city': 'Pune'},
        'createdAt': '2024-03-01T10:30:00.000Z',
    }
    data.update(overrides)
    return data
