from __future__ import annotations

import os
from pathlib import Path


def as_path(path: str | os.PathLike[str]) -> Path:
    return Path(path).expanduser()


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def temp_path_for(path: Path) -> Path:
    # Sibling of the target so os.replace stays on one filesystem.
    return path.with_suffix(path.suffix + ".tmp")
