from __future__ import annotations

from typing import Protocol


class ClipboardAdapter(Protocol):
    """
    Destination for "copy to clipboard".

    write_text is the only suspending call in the builder; implementations
    raise on failure and the caller reports it. No retries.
    """
    name: str

    async def write_text(self, text: str) -> None:
        ...
