"""Shared fixtures for packagr tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from packagr.config import SETTINGS_FILE_ENV


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep env overrides and logging handlers from leaking between tests."""
    for name in ("PACKAGR_NPM_EXECUTABLE", "PACKAGR_LOG_FILE", "PACKAGR_LOG_LEVEL", SETTINGS_FILE_ENV):
        monkeypatch.delenv(name, raising=False)
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory holding the project and its sibling microservices."""
    return tmp_path.resolve() / "workspace"


@pytest.fixture
def project_root(workspace: Path) -> Path:
    return workspace / "api"
