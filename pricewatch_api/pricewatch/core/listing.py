"""
Supersession-aware product listing fetches.

Per view session two counters are kept: the state version, bumped whenever
the session's selection changes, and the fetch sequence, bumped by every new
fetch. A fetch whose version or sequence is no longer current when it
completes is discarded, so a late response never replaces a newer one.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

logger = logging.getLogger(__name__)


class ListingSuperseded(Exception):
    """A newer input made this listing fetch obsolete."""


class ListingCoordinator:
    """Track in-flight listing fetches per view session."""

    def __init__(self):
        self._versions: Dict[str, int] = {}
        self._sequence: Dict[str, int] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def version(self, session_id: str) -> int:
        return self._versions.get(session_id, 0)

    def _cancel_task(self, session_id: str):
        task = self._tasks.pop(session_id, None)
        if task is not None and not task.done():
            task.cancel()

    def _is_current(self, session_id: str, version: int, seq: int) -> bool:
        return self.version(session_id) == version and self._sequence.get(session_id) == seq

    def sessions(self) -> Set[str]:
        return set(self._versions) | set(self._sequence) | set(self._tasks)

    def invalidate(self, session_id: str):
        """The session's selection changed: the in-flight fetch is stale."""
        self._versions[session_id] = self.version(session_id) + 1
        self._cancel_task(session_id)

    def cancel(self, session_id: str):
        """Teardown: cancel the in-flight fetch and forget the session."""
        self._cancel_task(session_id)
        self._versions.pop(session_id, None)
        self._sequence.pop(session_id, None)

    async def run(
        self,
        session_id: str,
        fetch: Callable[[], Awaitable[Any]],
        version: Optional[int] = None
    ) -> Any:
        """
        Run a listing fetch for a session.

        Args:
            session_id: View session ID
            fetch: Coroutine factory performing the request
            version: State version the inputs were read under; defaults to
                the current one

        Returns:
            The fetch result

        Raises:
            ListingSuperseded: If a newer fetch or state change happened
        """
        if version is None:
            version = self.version(session_id)
        if version != self.version(session_id):
            raise ListingSuperseded(session_id)

        self._cancel_task(session_id)
        seq = self._sequence.get(session_id, 0) + 1
        self._sequence[session_id] = seq
        task = asyncio.ensure_future(fetch())
        self._tasks[session_id] = task

        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and not self._is_current(session_id, version, seq):
                logger.debug(f"Listing fetch for session {session_id} cancelled by newer input")
                raise ListingSuperseded(session_id)
            raise
        finally:
            if self._tasks.get(session_id) is task:
                del self._tasks[session_id]

        if not self._is_current(session_id, version, seq):
            logger.debug(f"Discarding late listing result for session {session_id}")
            raise ListingSuperseded(session_id)
        return result
