"""
Tests for the in-memory session state store.
"""

import time

from kartflow.session_store import SessionStore


def test_get_creates_state_once() -> None:
    store = SessionStore(max_size=10, ttl_seconds=60)

    state = store.get("abc")
    state.customer["name"] = "Jane"

    assert store.get("abc").customer == {"name": "Jane"}
    assert len(store) == 1


def test_peek_does_not_create() -> None:
    store = SessionStore(max_size=10, ttl_seconds=60)

    assert store.peek("missing") is None
    assert len(store) == 0


def test_toasts_are_popped_once() -> None:
    store = SessionStore(max_size=10, ttl_seconds=60)
    store.push_toast("abc", "success", "Saved")
    store.push_toast("abc", "bogus", "Heads up")

    toasts = store.pop_toasts("abc")

    assert [(t.level, t.message) for t in toasts] == [("success", "Saved"), ("info", "Heads up")]
    assert store.pop_toasts("abc") == []
    assert store.pop_toasts("unknown") == []


def test_drop_and_clear() -> None:
    store = SessionStore(max_size=10, ttl_seconds=60)
    store.get("a")
    store.get("b")

    store.drop("a")
    store.drop("never-existed")
    assert store.peek("a") is None
    assert len(store) == 1

    store.clear()
    assert len(store) == 0


def test_store_is_bounded() -> None:
    store = SessionStore(max_size=2, ttl_seconds=60)
    for session_id in ("a", "b", "c"):
        store.get(session_id)

    assert len(store) == 2


def test_entries_expire() -> None:
    store = SessionStore(max_size=10, ttl_seconds=0.05)
    store.get("a").customer["name"] = "Jane"

    time.sleep(0.1)

    assert store.peek("a") is None
    assert store.get("a").customer == {}
