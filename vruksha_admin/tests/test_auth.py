import pytest

from vruksha_admin.errors import AuthenticationError
from vruksha_admin.services import AuthContext, AuthService

from conftest import ADMIN


@pytest.fixture
def auth(api, store):
    return AuthService(api, store)


def test_login_persists_token_and_identity(auth, http, store):
    http.add('POST', '/admin/login', dict(ADMIN, token='t1'))
    identity = auth.login('admin@x.com', 'secret')

    assert identity.email == 'admin@x.com'
    assert http.calls[0].json == {'email': 'admin@x.com', 'password': 'secret'}
    session = store.load()
    assert session.token == 't1'
    assert session.identity.name == 'Admin'


def test_requests_after_login_carry_the_token(auth, api, http):
    http.add('POST', '/admin/login', dict(ADMIN, token='t1'))
    http.add('GET', '/categories', [])
    auth.login('admin@x.com', 'secret')
    api.get('/categories')
    assert http.calls[-1].headers['Authorization'] == 'Bearer t1'


def test_login_without_token_fails(auth, http, storage):
    http.add('POST', '/admin/login', dict(ADMIN))
    with pytest.raises(AuthenticationError) as e:
        auth.login('admin@x.com', 'secret')
    assert e.value.message == 'Login failed: No token received'
    assert storage == {}


def test_rejected_credentials_keep_storage_empty(auth, http, storage, navigator):
    http.add('POST', '/admin/login', {'message': 'Invalid credentials'}, status=401)
    with pytest.raises(AuthenticationError):
        auth.login('admin@x.com', 'wrong')
    assert storage == {}
    assert navigator.redirects == 0


def test_register_signs_in(auth, http, store):
    http.add('POST', '/admin/register', dict(ADMIN, token='t2'))
    auth.register({'name': 'Admin', 'email': 'admin@x.com', 'password': 'secret'})
    assert store.token == 't2'


def test_logout_is_local(auth, http, storage, signed_in):
    auth.logout()
    assert storage == {}
    assert http.calls == []


def test_context_restores_existing_session(auth, signed_in):
    ctx = AuthContext(auth)
    assert ctx.loading is True
    assert ctx.restore().email == 'admin@x.com'
    assert ctx.loading is False
    assert ctx.is_authenticated
    ctx.close()


def test_context_follows_a_401_wipe(auth, api, http, signed_in):
    ctx = AuthContext(auth)
    ctx.restore()
    http.add('GET', '/orders/all', {}, status=401)
    with pytest.raises(AuthenticationError):
        api.get('/orders/all')
    assert ctx.user is None
    ctx.close()


def test_closed_context_stops_observing(auth, store, signed_in):
    ctx = AuthContext(auth)
    ctx.restore()
    ctx.close()
    store.clear()
    assert ctx.user is not None
