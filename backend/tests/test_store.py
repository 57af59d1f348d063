"""Tests for the in-memory SessionStore."""

import string

from store import SessionStore, generate_session_id
from tests.conftest import T0, FakeChannel


class TestSessionIds:

    def test_id_is_two_base36_parts(self):
        session_id = generate_session_id()
        assert len(session_id) == 26
        assert set(session_id) <= set(string.digits + string.ascii_lowercase)

    def test_ids_are_unique_per_connection(self, store):
        ids = {store.create(FakeChannel()) for _ in range(200)}
        assert len(ids) == 200
        assert len(store) == 200


class TestLifecycle:

    def test_create_defaults(self, store):
        channel = FakeChannel()
        session_id = store.create(channel)

        session = store.get(session_id)
        assert session.session_id == session_id
        assert session.channel is channel
        assert session.start_time == T0
        assert session.language == "en-US"
        assert session.is_active is False

    def test_custom_default_language(self, clock):
        store = SessionStore(clock=clock, default_language="de-DE")
        session_id = store.create(FakeChannel())
        assert store.get(session_id).language == "de-DE"

    def test_get_absent_returns_none(self, store):
        assert store.get("nope") is None

    def test_update_mutates_live_session(self, store):
        session_id = store.create(FakeChannel())
        updated = store.update(session_id, lambda s: setattr(s, "is_active", True))

        assert updated is store.get(session_id)
        assert store.get(session_id).is_active is True

    def test_update_absent_is_noop(self, store):
        calls = []
        assert store.update("nope", calls.append) is None
        assert calls == []

    def test_remove_is_idempotent(self, store):
        session_id = store.create(FakeChannel())

        assert store.remove(session_id) is True
        assert store.remove(session_id) is False
        assert session_id not in store
        assert len(store) == 0

    def test_stores_are_isolated(self, clock):
        a, b = SessionStore(clock=clock), SessionStore(clock=clock)
        a.create(FakeChannel())
        assert len(a) == 1
        assert len(b) == 0


class TestListing:

    def test_list_all_returns_snapshots(self, store):
        session_id = store.create(FakeChannel())
        snapshot = store.list_all()[0]

        snapshot.is_active = True
        assert store.get(session_id).is_active is False

    def test_snapshot_survives_removal(self, store):
        session_id = store.create(FakeChannel())
        snapshot = store.list_all()[0]
        store.remove(session_id)
        assert snapshot.session_id == session_id

    def test_active_except_skips_sender_and_inactive(self, connect, store):
        sender, _ = connect(active=True)
        viewer, _ = connect(active=True)
        connect(active=False)

        recipients = [s.session_id for s in store.active_except(sender)]
        assert recipients == [viewer]

    def test_channel_is_not_serialised(self, store):
        session_id = store.create(FakeChannel())
        dumped = store.get(session_id).model_dump()
        assert "channel" not in dumped
