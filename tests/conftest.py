"""Shared fixtures: an app wired to a temporary local storage directory."""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from core.settings import Settings
from core.storage.local import LocalStorage
from services.api.main import create_app

TEST_TOKEN = "test-token"
BASE_URI = "https://transcripts.example.com/t"


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("AUTH_TOKEN", TEST_TOKEN)
    return Settings(
        storage={"backend": "local", "local_root": tmp_path / "transcripts"},
        public={"base_uri": BASE_URI + "/"},
    )


@pytest.fixture
def storage(settings: Settings) -> LocalStorage:
    return LocalStorage(settings.storage.local_root)


@pytest.fixture
def app(settings: Settings, storage: LocalStorage):
    return create_app(settings=settings, storage=storage, configure_logging=False)


@pytest_asyncio.fixture
async def client(app) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": TEST_TOKEN}
