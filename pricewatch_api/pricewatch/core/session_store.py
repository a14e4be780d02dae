"""
Redis-based storage of console view sessions.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as aioredis

from pricewatch.core.selection import SelectionState, state_from_dict, state_to_dict
from pricewatch.core.tree_view import TreeViewState


# TTL: 24 hours
SESSION_TTL = 86400


class SelectionSessionStore:
    """Persist SelectionState and TreeViewState per view session."""

    def __init__(self, redis_client: aioredis.Redis, ttl: int = SESSION_TTL):
        """
        Initialize session store.

        Args:
            redis_client: Redis async client
            ttl: Session TTL in seconds, refreshed on every save
        """
        self.redis = redis_client
        self.ttl = ttl

    def _session_key(self, session_id: str) -> str:
        return f"console:session:{session_id}"

    async def create_session(self, view: TreeViewState) -> str:
        """
        Create a session with an empty selection.

        Returns:
            Session ID
        """
        session_id = str(uuid.uuid4())
        now = datetime.utcnow().isoformat()
        await self._write(session_id, SelectionState(), view, {"created_at": now})
        return session_id

    async def get_session(self, session_id: str) -> Optional[Tuple[SelectionState, TreeViewState]]:
        """
        Load a session.

        Returns:
            (SelectionState, TreeViewState) or None if not found
        """
        raw = await self.redis.hgetall(self._session_key(session_id))
        if not raw:
            return None

        session = {}
        for k, v in raw.items():
            key_str = k.decode() if isinstance(k, bytes) else k
            session[key_str] = v.decode() if isinstance(v, bytes) else v

        try:
            selected = json.loads(session.get("selected") or "[]")
            expanded = json.loads(session.get("expanded") or "[]")
        except ValueError:
            selected, expanded = [], []

        state = state_from_dict({
            "selected": selected,
            "active": session.get("active", ""),
            "mode": session.get("mode"),
        })
        return state, TreeViewState(expanded=frozenset(expanded))

    async def session_exists(self, session_id: str) -> bool:
        return await self.redis.exists(self._session_key(session_id)) > 0

    async def save_state(self, session_id: str, state: SelectionState, view: TreeViewState):
        await self._write(session_id, state, view)

    async def delete_session(self, session_id: str) -> bool:
        """
        Delete a session.

        Returns:
            True if deleted, False if not found
        """
        deleted = await self.redis.delete(self._session_key(session_id))
        return deleted > 0

    async def _write(
        self,
        session_id: str,
        state: SelectionState,
        view: TreeViewState,
        extra: Optional[Dict[str, Any]] = None
    ):
        data = state_to_dict(state)
        # All values must be strings for the Redis hash
        mapping = {
            "session_id": session_id,
            "selected": json.dumps(data["selected"]),
            "active": data["active"],
            "mode": data["mode"],
            "expanded": json.dumps(sorted(view.expanded)),
            "updated_at": datetime.utcnow().isoformat(),
        }
        if extra:
            mapping.update({k: str(v) for k, v in extra.items()})

        key = self._session_key(session_id)
        await self.redis.hset(key, mapping=mapping)
        await self.redis.expire(key, self.ttl)
