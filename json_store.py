from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class JsonStoreError(Exception):
    """
    Raised when a JSON file exists but cannot be read or parsed.

    Absence is not an error: callers get None for that.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing or empty files. Raises JsonStoreError for
    unreadable files and invalid JSON, so corruption is never mistaken for
    absence.
    """
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise JsonStoreError(path, f"read failed: {e}") from e
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise JsonStoreError(path, f"invalid JSON: {e}") from e
    except RecursionError as e:
        raise JsonStoreError(path, "invalid JSON: nesting too deep") from e


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.

    The payload is serialized before the temp file is opened, so a payload that
    cannot be encoded leaves the target untouched.
    """
    text = json.dumps(payload, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(text)
        f.write("\n")
    tmp_path.replace(path)
