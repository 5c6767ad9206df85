from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.module_builder import ModuleBuilder


@pytest.fixture(autouse=True)
def isolated_go_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point GOPATH, GOROOT and the module cache at empty directories."""
    go_home = tmp_path / "gohome"
    monkeypatch.setenv("GOPATH", str(go_home / "path"))
    monkeypatch.setenv("GOMODCACHE", str(go_home / "path" / "pkg" / "mod"))
    monkeypatch.setenv("GOROOT", str(go_home / "root"))
    monkeypatch.setenv("GOOS", "linux")
    monkeypatch.setenv("GOARCH", "amd64")


@pytest.fixture(autouse=True)
def reset_typeface_logger() -> Iterator[None]:
    """Undo configure_logging so records reach caplog in later tests."""
    yield
    logger = logging.getLogger("typeface")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def module_builder(tmp_path: Path) -> ModuleBuilder:
    """Provide a reusable Go module builder rooted at the pytest tmp_path."""
    return ModuleBuilder(tmp_path)
