"""Shared test fixtures and configuration."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from exo.core.config import ExoConfig, build_config
from exo.core.storage import FileStorage
from exo.core.types import NoteServices


class FakeRenderer:
    """Renderer returning "Template: <Title>" and recording every call."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple[str, Any]] = []

    def render(self, name: str, data: Any) -> str:
        self.calls.append((name, data))
        if self.error is not None:
            raise self.error
        if isinstance(data, dict) and isinstance(data.get("Title"), str):
            return f"Template: {data['Title']}"
        return "Template: unknown"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the user's environment and config out of tests."""
    for var in ("EDITOR", "EXO_DATA_HOME", "EXO_CONFIG_HOME"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("EXO_CONFIG_HOME", str(tmp_path / "config-home"))


@pytest.fixture
def data_home(tmp_path):
    """Data home directory for notes."""
    return tmp_path / "data"


@pytest.fixture
def exo_config(tmp_path, data_home) -> ExoConfig:
    """Resolved config rooted in a temp directory."""
    return build_config(
        {"general": {"editor": "true"}, "dir": {"data_home": str(data_home)}},
        home=tmp_path,
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    """Recording fake renderer."""
    return FakeRenderer()


@pytest.fixture
def make_services(exo_config, renderer):
    """Factory for NoteServices with optional renderer/storage overrides."""

    def _make_services(*, renderer_override=None, storage=None) -> NoteServices:
        return NoteServices(
            config=exo_config,
            renderer=renderer_override or renderer,
            storage=storage or FileStorage(),
        )

    return _make_services


@pytest.fixture
def services(make_services) -> NoteServices:
    """NoteServices over the real filesystem and the fake renderer."""
    return make_services()


@pytest.fixture
def mock_storage():
    """Storage backend mock recording every call."""
    storage = MagicMock(spec=FileStorage)
    storage.exists.return_value = False
    return storage
