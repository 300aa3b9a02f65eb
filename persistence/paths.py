from __future__ import annotations

from pathlib import Path

from settings import get_settings


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    configured = get_settings().data_dir
    return ensure_dir(configured if configured is not None else project_root() / "data")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def collection_path(kind: str) -> Path:
    """Absolute path of the JSON array file holding one collection, e.g. data/product.data.json."""
    return (data_dir() / f"{kind}.data.json").resolve()
