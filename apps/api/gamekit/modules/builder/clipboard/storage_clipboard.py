from __future__ import annotations

import asyncio
from pathlib import Path

from gamekit.core.storage import clipboard_path, write_text_atomic


class StorageClipboard:
    """
    Server-side clipboard:
    - keeps the last copied payload under STORAGE_ROOT/clipboard/
    - one file per clipboard slot, overwritten on every copy
    """
    name = "storage"

    def __init__(self, filename: str = "resource-pack.json", root: Path | None = None) -> None:
        self.filename = filename
        self.root = root

    @property
    def path(self) -> Path:
        return clipboard_path(self.filename, self.root)

    async def write_text(self, text: str) -> None:
        await asyncio.to_thread(write_text_atomic, self.path, text)

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


class UnavailableClipboard:
    name = "unavailable"

    async def write_text(self, text: str) -> None:
        raise RuntimeError("clipboard is disabled (CLIPBOARD_ENABLED=0)")
