from __future__ import annotations

from pathlib import Path


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def file_size_kb(path: Path) -> int:
    return path.stat().st_size // 1024


def canonical_path(path: Path | str) -> str:
    """Absolute, symlink-resolved form used as the key for a database everywhere."""
    return str(Path(path).expanduser().resolve())
