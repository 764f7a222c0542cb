from __future__ import annotations

__version__ = "1.0.1"


def version_string(prefix: bool = False) -> str:
    return f"v{__version__}" if prefix else __version__
