from .base import ClipboardAdapter
from .registry import get_clipboard, is_clipboard_enabled
from .storage_clipboard import StorageClipboard, UnavailableClipboard

__all__ = [
    "ClipboardAdapter",
    "StorageClipboard",
    "UnavailableClipboard",
    "get_clipboard",
    "is_clipboard_enabled",
]
