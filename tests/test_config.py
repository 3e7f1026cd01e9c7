from __future__ import annotations

from pathlib import Path

import pytest

from asana_youtrack_sync.config import AppConfig
from asana_youtrack_sync.errors import ConfigurationError

VALID_CONFIG = """
asana:
  token: asana-token
  project_id: "1200"
youtrack:
  base_url: https://company.youtrack.cloud/
  token: yt-token
  project_id: DEMO
sync:
  syncable_columns: ["Backlog", " Dev ", ""]
  tag_mapping:
    Payments: billing
  dry_run: true
ignored_path: data/ignored.json
"""


def test_load_valid_config(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(VALID_CONFIG, encoding="utf-8")

    config = AppConfig.load(path)

    assert config.asana.base_url == "https://app.asana.com/api/1.0"
    assert config.youtrack.base_url == "https://company.youtrack.cloud"
    assert config.sync.syncable_columns == ["backlog", "dev"]
    assert config.sync.display_only_columns == ["ready for stage", "findings"]
    assert config.sync.tag_mapping == {"Payments": "billing"}
    assert config.sync.dry_run is True
    assert config.ignored_path == Path("data/ignored.json")
    assert config.all_columns() == ["backlog", "dev", "ready for stage", "findings"]


def test_missing_token_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(VALID_CONFIG.replace("token: yt-token", 'token: ""'), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        AppConfig.load(path)


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        AppConfig.load(tmp_path / "absent.yaml")


def test_broken_yaml_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("asana: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        AppConfig.load(path)
