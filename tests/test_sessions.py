import pytest

from sessions import InMemorySessionStore, SessionStore, create_session


def test_set_get_delete():
    store = InMemorySessionStore()
    store.set("abc", 7)
    assert store.get("abc") == 7

    store.delete("abc")
    assert store.get("abc") is None
    store.delete("abc")


def test_create_session_mints_distinct_tokens():
    store = InMemorySessionStore()
    first = create_session(store, 1)
    second = create_session(store, 1)

    assert first != second
    assert len(first) == 64
    assert store.get(first) == 1
    assert len(store) == 2


def test_base_store_is_abstract():
    with pytest.raises(NotImplementedError):
        SessionStore().get("token")
