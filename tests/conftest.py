"""Shared fixtures: isolated config directory and a fake inference server."""

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from kysy.configs.config import AppConfig
from kysy.core.client import InferenceClient
from kysy.core.context_store import ContextStore
from kysy.core.session import Session


def artifact_json(
    code: str = "",
    description: str = "",
    programming_language: str = "",
    extension: str = "",
) -> str:
    """Answer text the way a well-behaved model writes it."""
    return json.dumps(
        {
            "code": code,
            "description": description,
            "programming_language": programming_language,
            "extension": extension,
        }
    )


class FakeInferenceServer:
    """Records requests and replies with a canned response."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.status_code = 200
        self.body: Any = {"response": artifact_json(description="ok"), "context": [1]}
        self.raw_body: bytes | None = None
        self.error: Exception | None = None

    def reply(self, response: str, context: list[int]) -> None:
        self.body = {"response": response, "context": context}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            raise self.error
        if self.raw_body is not None:
            return httpx.Response(self.status_code, content=self.raw_body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> dict[str, Any]:
        return self.requests[-1]


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a not-yet-existing temp path."""
    path = tmp_path / "config" / "kysy"
    monkeypatch.setenv("KYSY_CONFIG_DIR", str(path))
    monkeypatch.chdir(tmp_path)
    return path


@pytest.fixture
def app_config(config_dir: Path) -> AppConfig:
    return AppConfig()


@pytest.fixture
def store(app_config: AppConfig) -> ContextStore:
    return ContextStore(app_config.context_file)


@pytest.fixture
def fake_server() -> FakeInferenceServer:
    return FakeInferenceServer()


@pytest.fixture
def client(app_config: AppConfig, fake_server: FakeInferenceServer):
    client = InferenceClient(app_config.inference, transport=fake_server.transport)
    yield client
    client.close()


@pytest.fixture
def session_factory(
    app_config: AppConfig, store: ContextStore, client: InferenceClient
) -> Callable[..., Session]:
    def _make(config: AppConfig | None = None) -> Session:
        return Session(config or app_config, store, client)

    return _make
