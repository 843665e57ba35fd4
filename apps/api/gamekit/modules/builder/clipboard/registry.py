from __future__ import annotations

import os

from .base import ClipboardAdapter
from .storage_clipboard import StorageClipboard, UnavailableClipboard


def is_clipboard_enabled(*, default: bool = True) -> bool:
    """
    Feature flag:
      CLIPBOARD_ENABLED=0 -> off (every copy reports failure)
      CLIPBOARD_ENABLED=1 -> on
    """
    v = os.environ.get("CLIPBOARD_ENABLED")
    if v is None:
        return default
    v = v.strip().lower()
    return v not in ("0", "false", "no", "")


def get_clipboard() -> ClipboardAdapter:
    if not is_clipboard_enabled():
        return UnavailableClipboard()
    return StorageClipboard()
