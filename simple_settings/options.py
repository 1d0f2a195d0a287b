from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

WRITE_STRATEGIES = ("truncate", "replace")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class StoreOptions:
    # Serialization
    default_format: str = "toml"
    json_indent: int = 2

    # Write-back: "truncate" rewrites in place, "replace" renames a temp file over the target
    write_strategy: str = "truncate"

    # create() makes missing parent directories
    create_parents: bool = False

    def __post_init__(self) -> None:
        if self.write_strategy not in WRITE_STRATEGIES:
            raise ValueError(
                f"write_strategy must be one of {WRITE_STRATEGIES}, got {self.write_strategy!r}"
            )
        if self.json_indent < 0:
            raise ValueError("json_indent must be >= 0")


def get_options(env_file: str | Path | None = None) -> StoreOptions:
    """
    Build StoreOptions from SIMPLE_SETTINGS_* environment variables.

    If env_file is given it is read with python-dotenv first; variables already
    present in the environment take precedence over the file.
    """
    if env_file is not None:
        load_dotenv(env_file)

    default_format = os.getenv("SIMPLE_SETTINGS_FORMAT", "toml").strip().lower()
    write_strategy = os.getenv("SIMPLE_SETTINGS_WRITE_STRATEGY", "truncate").strip().lower()
    json_indent = _env_int("SIMPLE_SETTINGS_JSON_INDENT", 2)
    create_parents = _env_bool("SIMPLE_SETTINGS_CREATE_PARENTS", False)

    return StoreOptions(
        default_format=default_format,
        json_indent=json_indent,
        write_strategy=write_strategy,
        create_parents=create_parents,
    )
