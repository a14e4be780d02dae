"""
Console view sessions: the owner of one mounted products view.

Selection and expansion live in Redis (SelectionSessionStore). The tree
snapshot, its index, the per-session lock and the listing coordinator live
in this process, on the event loop that serves the session.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

from pricewatch.core.catalog_client import CatalogClient
from pricewatch.core.category_tree import CategoryNode, build_index
from pricewatch.core.listing import ListingCoordinator
from pricewatch.core.query_builder import build_query
from pricewatch.core.selection import SelectionState, apply_event, state_to_dict
from pricewatch.core.session_store import SelectionSessionStore
from pricewatch.core.tree_view import (
    collapse_all, default_expanded, expand_all, toggle_expanded, visible_rows
)

logger = logging.getLogger(__name__)


class SessionNotFound(Exception):
    """No view session with this ID."""


@dataclass
class TreeSnapshot:
    """One fetched category tree and its path index."""
    roots: List[CategoryNode] = field(default_factory=list)
    index: Dict[str, CategoryNode] = field(default_factory=dict)
    loaded: bool = False
    fetched_at: Optional[str] = None

    @classmethod
    def from_roots(cls, roots: List[CategoryNode]) -> "TreeSnapshot":
        return cls(
            roots=roots,
            index=build_index(roots),
            loaded=True,
            fetched_at=datetime.utcnow().isoformat()
        )


class SessionRegistry:
    """In-process tree snapshots, locks and listing fetches per session."""

    def __init__(self):
        self.snapshots: Dict[str, TreeSnapshot] = {}
        self.locks: Dict[str, asyncio.Lock] = {}
        self.listings = ListingCoordinator()

    def lock(self, session_id: str) -> asyncio.Lock:
        if session_id not in self.locks:
            self.locks[session_id] = asyncio.Lock()
        return self.locks[session_id]

    def forget(self, session_id: str):
        self.listings.cancel(session_id)
        self.snapshots.pop(session_id, None)
        self.locks.pop(session_id, None)

    def known_sessions(self) -> Set[str]:
        return set(self.snapshots) | set(self.locks) | self.listings.sessions()


class ConsoleSessionService:
    """Session operations used by the API layer."""

    def __init__(
        self,
        store: SelectionSessionStore,
        registry: SessionRegistry,
        client_factory: Callable[[], CatalogClient],
        open_depth: int = 1,
        listing_limit: Optional[int] = None
    ):
        self.store = store
        self.registry = registry
        self.client_factory = client_factory
        self.open_depth = open_depth
        self.listing_limit = listing_limit

    async def _fetch_tree(self) -> TreeSnapshot:
        client = self.client_factory()
        try:
            roots = await client.fetch_category_tree()
        finally:
            await client.close()
        return TreeSnapshot.from_roots(roots)

    async def _load(self, session_id: str):
        loaded = await self.store.get_session(session_id)
        if loaded is None:
            # Unknown or expired: drop whatever this process holds for it
            self.registry.forget(session_id)
            raise SessionNotFound(session_id)
        return loaded

    async def prune_expired(self) -> int:
        """Forget in-process state of sessions that ended by Redis TTL."""
        pruned = 0
        for session_id in self.registry.known_sessions():
            if not await self.store.session_exists(session_id):
                self.registry.forget(session_id)
                pruned += 1
        if pruned:
            logger.info(f"Pruned {pruned} expired view session(s)")
        return pruned

    async def _ensure_snapshot(self, session_id: str) -> TreeSnapshot:
        # Sessions outlive the process; refetch after a restart
        if session_id not in self.registry.snapshots:
            self.registry.snapshots[session_id] = await self._fetch_tree()
        return self.registry.snapshots[session_id]

    async def mount(self) -> str:
        """Create a session and fetch its tree."""
        await self.prune_expired()
        snapshot = await self._fetch_tree()
        view = default_expanded(snapshot.roots, self.open_depth)
        session_id = await self.store.create_session(view)
        self.registry.snapshots[session_id] = snapshot
        logger.info(f"Mounted view session {session_id} ({len(snapshot.index)} categories)")
        return session_id

    async def unmount(self, session_id: str) -> bool:
        self.registry.forget(session_id)
        deleted = await self.store.delete_session(session_id)
        if deleted:
            logger.info(f"Unmounted view session {session_id}")
        return deleted

    async def refresh_tree(self, session_id: str) -> Dict[str, Any]:
        """Refetch the tree. Selection and expansion are kept as they are."""
        async with self.registry.lock(session_id):
            await self._load(session_id)
            self.registry.snapshots[session_id] = await self._fetch_tree()
        return await self.view(session_id)

    async def dispatch(
        self,
        session_id: str,
        event_type: str,
        path: Optional[str] = None,
        mode: Optional[str] = None
    ) -> Dict[str, Any]:
        """Apply a selection event and return the new view."""
        async with self.registry.lock(session_id):
            state, tree_view = await self._load(session_id)
            snapshot = await self._ensure_snapshot(session_id)
            new_state = apply_event(state, snapshot.index, event_type, path=path, mode=mode)
            if new_state != state:
                await self.store.save_state(session_id, new_state, tree_view)
                # After the save, so a listing that read the old state is superseded
                self.registry.listings.invalidate(session_id)
        return await self.view(session_id)

    async def change_expansion(self, session_id: str, action: str, path: Optional[str] = None) -> Dict[str, Any]:
        """
        Expand/collapse tree nodes.

        Args:
            action: "toggle", "expand_all" or "collapse_all"
        """
        async with self.registry.lock(session_id):
            state, tree_view = await self._load(session_id)
            snapshot = await self._ensure_snapshot(session_id)
            if action == "toggle":
                tree_view = toggle_expanded(tree_view, snapshot.index, path or "")
            elif action == "expand_all":
                tree_view = expand_all(snapshot.roots)
            elif action == "collapse_all":
                tree_view = collapse_all()
            else:
                raise ValueError(f"Unknown expansion action: {action}")
            await self.store.save_state(session_id, state, tree_view)
        return await self.view(session_id)

    async def view(self, session_id: str, search: str = "") -> Dict[str, Any]:
        """Everything the console renders for a session."""
        state, tree_view = await self._load(session_id)
        snapshot = await self._ensure_snapshot(session_id)
        rows = visible_rows(snapshot.roots, snapshot.index, tree_view, state, search)
        return _view_payload(session_id, state, snapshot, [r.to_dict() for r in rows])

    async def products(
        self,
        session_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Product listing for the session's current query.

        Raises:
            ListingSuperseded: A newer input arrived while fetching
            CatalogAPIError: Upstream failure
        """
        while True:
            version = self.registry.listings.version(session_id)
            state, _ = await self._load(session_id)
            # A selection saved during the load may or may not be in `state`
            if self.registry.listings.version(session_id) == version:
                break
        query = build_query(state)
        if query is None:
            return {"query": None, "items": [], "total": 0}

        if limit is None:
            limit = self.listing_limit

        async def fetch():
            client = self.client_factory()
            try:
                return await client.fetch_products(query, limit=limit, offset=offset)
            finally:
                await client.close()

        result = await self.registry.listings.run(session_id, fetch, version=version)
        return {
            "query": {"categories": list(query.categories), "subtree": query.subtree},
            "items": result["items"],
            "total": result["total"],
        }


def _view_payload(
    session_id: str,
    state: SelectionState,
    snapshot: TreeSnapshot,
    rows: List[Dict]
) -> Dict[str, Any]:
    query = build_query(state)
    stale = 0
    if snapshot.loaded:
        stale = sum(1 for p in state.selected if p not in snapshot.index)
    data = state_to_dict(state)
    return {
        "sessionId": session_id,
        "mode": data["mode"],
        "active": data["active"],
        "selected": data["selected"],
        "selectedCount": len(state.selected),
        "staleSelected": stale,
        "treeLoaded": snapshot.loaded,
        "fetchedAt": snapshot.fetched_at,
        "rows": rows,
        "query": (
            {"categories": list(query.categories), "subtree": query.subtree}
            if query else None
        ),
    }
