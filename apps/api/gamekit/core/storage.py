"""
Local filesystem storage root.

Holds the server-side clipboard slots (clipboard/<file>) and the /health
write probe.

Defaults:
- STORAGE_ROOT: ./data/storage
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

CLIPBOARD_DIR = "clipboard"


def _repo_root() -> Path:
    # apps/api/gamekit/core/storage.py -> repo root = parents[4]
    return Path(__file__).resolve().parents[4]


def get_storage_root() -> Path:
    raw = os.getenv("STORAGE_ROOT", "./data/storage")
    p = Path(raw)
    return (_repo_root() / p).resolve() if not p.is_absolute() else p


def ensure_storage_root() -> Path:
    root = get_storage_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def clipboard_path(filename: str, root: Path | None = None) -> Path:
    """Slot file for a clipboard payload; rejects names that escape the clipboard dir."""
    name = Path(filename).name
    if not name or name != filename:
        raise ValueError(f"invalid clipboard slot name: {filename!r}")
    base = root if root is not None else ensure_storage_root()
    return base / CLIPBOARD_DIR / name


def write_text_atomic(path: Path, text: str) -> Path:
    # readers of the slot never see a half-written payload
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)
    return path


def storage_health() -> Dict[str, Any]:
    root = get_storage_root()
    try:
        root = ensure_storage_root()
        write_text_atomic(root / ".probe_write", "ok").unlink(missing_ok=True)
        clip = root / CLIPBOARD_DIR
        slots = sorted(p.name for p in clip.glob("*.json")) if clip.is_dir() else []
        return {"status": "ok", "kind": "local_fs", "root": root.as_posix(), "clipboard_slots": slots}
    except OSError as e:
        return {"status": "error", "kind": "local_fs", "root": root.as_posix(), "error": str(e)}
