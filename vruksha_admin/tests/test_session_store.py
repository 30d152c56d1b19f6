import json

import pytest

from vruksha_admin.models import Identity

from conftest import ADMIN


def test_save_writes_both_keys(store, storage):
    store.save(Identity.from_dict(ADMIN), 't1')
    assert storage['token'] == 't1'
    assert json.loads(storage['user'])['email'] == 'admin@x.com'
    session = store.load()
    assert session.token == 't1'
    assert session.identity.id == 'u1'


def test_save_refuses_empty_token(store, storage):
    with pytest.raises(ValueError):
        store.save(Identity.from_dict(ADMIN), '')
    assert storage == {}


@pytest.mark.parametrize('content', [
    {'token': 't1'},
    {'user': json.dumps(ADMIN)},
    {'token': 't1', 'user': 'not json'},
    {'token': 't1', 'user': json.dumps({'email': 'no id'})},
])
def test_half_written_storage_is_repaired(store, storage, content):
    storage.update(content)
    assert store.load() is None
    assert storage == {}


def test_clear_is_idempotent(store, storage, signed_in):
    assert store.clear() is True
    assert store.clear() is False
    assert storage == {}


def test_observers_see_every_change(store):
    seen = []
    store.subscribe(seen.append)
    store.save(Identity.from_dict(ADMIN), 't1')
    store.clear()
    store.clear()
    store.unsubscribe(seen.append)
    store.save(Identity.from_dict(ADMIN), 't2')

    assert len(seen) == 2
    assert seen[0].token == 't1'
    assert seen[1] is None


def test_is_authenticated(store, signed_in):
    assert store.is_authenticated()
    store.clear()
    assert not store.is_authenticated()
