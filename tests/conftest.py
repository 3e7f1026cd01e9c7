from __future__ import annotations

import pytest

from asana_youtrack_sync.config import AppConfig
from asana_youtrack_sync.services.sync import SyncService
from tests.helpers import FakeBackend, default_backend, make_service


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig.model_validate(
        {
            "asana": {"token": "asana-token", "project_id": "111"},
            "youtrack": {"base_url": "https://yt.example.com/", "token": "yt-token", "project_id": "DEMO"},
            "ignored_path": tmp_path / "ignored_tickets.json",
        }
    )


@pytest.fixture
def backend() -> FakeBackend:
    return default_backend()


@pytest.fixture
def service(app_config: AppConfig, backend: FakeBackend) -> SyncService:
    return make_service(app_config, backend)
