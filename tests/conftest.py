"""Shared test fixtures for puml2png."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

import httpx
import pytest

from puml2png.transport import PlantUMLClient

VALID_PUML = "@startuml\nAlice -> Bob : hello\n@enduml\n"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


class FakeRenderer:
    """Stands in for PlantUMLClient; records every source it was asked to render."""

    def __init__(self, image: bytes | None = FAKE_PNG) -> None:
        self.image = image
        self.calls: list[str] = []

    def render(self, source: str) -> bytes | None:
        self.calls.append(source)
        return self.image


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Keep user/project config files out of tests and restore logger state."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    yield
    pkg_logger = logging.getLogger("puml2png")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def write_source():
    """Write a .puml file and optionally backdate it by ``age`` seconds."""

    def _write(path: Path, content: str = VALID_PUML, age: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if age is not None:
            set_age(path, age)
        return path

    return _write


def set_age(path: Path, age: float, now: float | None = None) -> None:
    stamp = (now if now is not None else time.time()) - age
    os.utime(path, (stamp, stamp))


@pytest.fixture
def mock_server():
    """Build a PlantUMLClient whose HTTP calls go to ``handler``."""
    clients: list[httpx.Client] = []

    def _make(handler, **kwargs) -> PlantUMLClient:
        http = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(http)
        return PlantUMLClient("http://plantuml.test/plantuml", http_client=http, **kwargs)

    yield _make
    for http in clients:
        http.close()
