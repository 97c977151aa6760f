from nexus.auth.session import SessionStore, sign_session, verify_session


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_signed_cookie_round_trip(monkeypatch):
    monkeypatch.setenv("NEXUS_SECRET_KEY", "k1")
    token = sign_session("abc")
    assert token != "abc"
    assert verify_session(token) == "abc"


def test_cookie_signed_with_other_key_is_rejected(monkeypatch):
    monkeypatch.setenv("NEXUS_SECRET_KEY", "k1")
    token = sign_session("abc")
    monkeypatch.setenv("NEXUS_SECRET_KEY", "k2")
    assert verify_session(token) is None
    assert verify_session("") is None


def test_session_ids_are_unique():
    store = SessionStore()
    ids = {store.create("jane@x.com").id for _ in range(200)}
    assert len(ids) == 200


def test_resolve_records_access_but_ttl_is_fixed():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=1800, clock=clock)
    sess = store.create("jane@x.com")

    clock.now += 1700
    got = store.resolve(sess.id)
    assert got is not None
    assert got.last_access == clock.now
    assert got.created_at == 1000.0

    # Access at 1700s does not extend life past 1800s from creation.
    clock.now += 100
    assert store.resolve(sess.id) is None
    assert len(store) == 0


def test_destroy():
    store = SessionStore()
    sess = store.create("jane@x.com")
    assert store.destroy(sess.id) is True
    assert store.destroy(sess.id) is False
    assert store.resolve(sess.id) is None
