from __future__ import annotations

from pathlib import Path
import sys

import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

ENV_VARS = (
    "SIMPLE_SETTINGS_FORMAT",
    "SIMPLE_SETTINGS_WRITE_STRATEGY",
    "SIMPLE_SETTINGS_JSON_INDENT",
    "SIMPLE_SETTINGS_CREATE_PARENTS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Start every test without SIMPLE_SETTINGS_* variables and restore them afterwards,
    including anything python-dotenv writes into os.environ during the test.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def cfg_path(tmp_path: Path) -> Path:
    return tmp_path / "cfg.toml"
