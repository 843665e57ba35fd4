"""
Persistence boundary for the deep sheet.

The whole SheetState is one JSON blob under a fixed key. Loading merges the
stored object over the defaults (top-level keys only); anything unreadable
falls back to the defaults with a warning event.
"""
from __future__ import annotations

import json
from typing import Optional

from gamekit.core import local_store
from gamekit.core.events import emit

from .schemas import SheetState
from .service import to_json_dict

STORAGE_KEY = "deep-character-sheet"


def merge_saved(saved: str, request_id: Optional[str] = None) -> SheetState:
    defaults = SheetState()
    try:
        parsed = json.loads(saved)
        if not isinstance(parsed, dict):
            raise ValueError(f"stored sheet must be a JSON object, got {type(parsed).__name__}")
        return SheetState.model_validate({**to_json_dict(defaults), **parsed})
    except (ValueError, RecursionError) as e:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueError;
        # RecursionError comes from pathologically nested blobs
        emit("warning", "sheet.load.parse_failed", "Failed to parse saved sheet", request_id, __name__, error=str(e))
        return defaults


def load_sheet(request_id: Optional[str] = None) -> SheetState:
    saved = local_store.get_item(STORAGE_KEY)
    if not saved:
        return SheetState()
    return merge_saved(saved, request_id)


def save_sheet(state: SheetState) -> SheetState:
    local_store.set_item(STORAGE_KEY, json.dumps(to_json_dict(state), ensure_ascii=False))
    return state


def reset_sheet() -> SheetState:
    local_store.remove_item(STORAGE_KEY)
    return SheetState()
