from __future__ import annotations

import os
from collections import OrderedDict
from typing import Generic, Optional, Tuple, TypeVar

from gamekit.core.events import emit
from gamekit.core.ids import new_ulid

S = TypeVar("S")


def get_workspace_limit(default: int = 500) -> int:
    raw = os.getenv("WORKSPACE_LIMIT")
    if raw is None or not raw.strip():
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


class WorkspaceRegistry(Generic[S]):
    """
    In-memory state holder for screens that live as long as a client tab.

    States are replaced wholesale on every mutation (services return new
    values), so `put` is the only write path. Clients close a workspace with
    `remove`; abandoned ones are evicted least-recently-used first once the
    registry holds more than `limit` entries.
    """

    def __init__(self, kind: str, limit: Optional[int] = None) -> None:
        self.kind = kind
        self._limit = limit
        self._items: "OrderedDict[str, S]" = OrderedDict()

    @property
    def limit(self) -> int:
        return self._limit if self._limit is not None else get_workspace_limit()

    def __len__(self) -> int:
        return len(self._items)

    def _evict(self) -> None:
        while len(self._items) > self.limit:
            workspace_id, _ = self._items.popitem(last=False)
            emit("info", "workspace.evicted", f"{self.kind} workspace evicted", None, __name__, workspace_id=workspace_id)

    def create(self, state: S) -> Tuple[str, S]:
        workspace_id = new_ulid()
        self._items[workspace_id] = state
        self._evict()
        return workspace_id, state

    def get(self, workspace_id: str) -> Optional[S]:
        state = self._items.get(workspace_id)
        if state is not None:
            self._items.move_to_end(workspace_id)
        return state

    def put(self, workspace_id: str, state: S) -> S:
        self._items[workspace_id] = state
        self._items.move_to_end(workspace_id)
        self._evict()
        return state

    def remove(self, workspace_id: str) -> bool:
        return self._items.pop(workspace_id, None) is not None

    def clear(self) -> None:
        self._items.clear()
