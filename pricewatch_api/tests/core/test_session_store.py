import asyncio

from pricewatch.core.selection import SelectionState, ViewMode
from pricewatch.core.session_store import SelectionSessionStore
from pricewatch.core.tree_view import TreeViewState


def test_create_load_save_delete(fake_redis):
    store = SelectionSessionStore(fake_redis, ttl=60)

    async def scenario():
        session_id = await store.create_session(TreeViewState(expanded=frozenset({"root"})))
        state, view = await store.get_session(session_id)
        assert state == SelectionState()
        assert view.expanded == {"root"}
        assert fake_redis.ttls[f"console:session:{session_id}"] == 60

        new_state = SelectionState(selected=frozenset({"b", "a"}), active="a", mode=ViewMode.SELECTED)
        await store.save_state(session_id, new_state, view)
        assert await store.get_session(session_id) == (new_state, view)
        assert fake_redis.hashes[f"console:session:{session_id}"]["selected"] == '["a", "b"]'

        assert await store.delete_session(session_id)
        assert await store.get_session(session_id) is None
        assert not await store.delete_session(session_id)

    asyncio.run(scenario())


def test_created_at_survives_saves(fake_redis):
    store = SelectionSessionStore(fake_redis)

    async def scenario():
        session_id = await store.create_session(TreeViewState())
        created = fake_redis.hashes[f"console:session:{session_id}"]["created_at"]
        await store.save_state(session_id, SelectionState(active="x"), TreeViewState())
        assert fake_redis.hashes[f"console:session:{session_id}"]["created_at"] == created

    asyncio.run(scenario())


def test_bytes_values_are_decoded(fake_redis):
    store = SelectionSessionStore(fake_redis)
    fake_redis.hashes["console:session:raw"] = {
        b"selected": b'["a"]',
        b"active": b"a",
        b"mode": b"selected",
        b"expanded": b"[]",
    }
    state, view = asyncio.run(store.get_session("raw"))
    assert state == SelectionState(selected=frozenset({"a"}), active="a", mode=ViewMode.SELECTED)
    assert view == TreeViewState()


def test_session_exists(fake_redis):
    store = SelectionSessionStore(fake_redis)

    async def scenario():
        session_id = await store.create_session(TreeViewState())
        assert await store.session_exists(session_id)
        await store.delete_session(session_id)
        assert not await store.session_exists(session_id)

    asyncio.run(scenario())
