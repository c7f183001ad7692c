from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'speccascade'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from speccascade.core.logging import reset_logging
from speccascade.core.store import Store


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch):
    """Drop SPECCASCADE_* variables from the host environment."""
    for key in list(os.environ):
        if key.startswith("SPECCASCADE_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_logging()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty, fully resolved workspace root."""
    root = tmp_path.resolve() / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def write_spec(workspace: Path) -> Callable[..., Path]:
    """Write a spec document below the workspace and return its path."""

    def _write(relative: str, text: str = "") -> Path:
        path = workspace / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store(workspace: Path) -> Store:
    """An initialised store rooted at the workspace."""
    s = Store(workspace)
    s.init()
    return s
