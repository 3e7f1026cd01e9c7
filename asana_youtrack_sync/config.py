"""Загрузка и валидация конфигурации приложения."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from asana_youtrack_sync.errors import ConfigurationError

DEFAULT_SYNCABLE_COLUMNS = ["backlog", "in progress", "dev", "stage", "blocked"]
DEFAULT_DISPLAY_ONLY_COLUMNS = ["ready for stage", "findings"]


class AsanaCredentials(BaseModel):
    """Настройки подключения к Asana."""

    base_url: str = Field("https://app.asana.com/api/1.0", description="Базовый URL REST API Asana")
    token: str = Field(..., min_length=1, description="Personal Access Token Asana")
    project_id: str = Field(..., min_length=1, description="GID проекта Asana, из которого берутся задачи")

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class YouTrackCredentials(BaseModel):
    """Настройки подключения к YouTrack."""

    base_url: str = Field(..., min_length=1, description="Базовый URL YouTrack, например https://company.youtrack.cloud")
    token: str = Field(..., min_length=1, description="Permanent token YouTrack")
    project_id: str = Field(..., min_length=1, description="Короткое имя (shortName) проекта YouTrack")

    @field_validator("base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SyncOptions(BaseModel):
    """Параметры синхронизации."""

    syncable_columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SYNCABLE_COLUMNS),
        description="Колонки Asana, задачи из которых переносятся в YouTrack",
    )
    display_only_columns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DISPLAY_ONLY_COLUMNS),
        description="Колонки, которые только отображаются и никогда не синхронизируются",
    )
    tag_mapping: Dict[str, str] = Field(
        default_factory=dict,
        description="Дополнительные соответствия тег Asana → подсистема YouTrack",
    )
    page_size: int = Field(100, gt=0, description="Размер страницы при выгрузке задач из Asana")
    fetch_limit: int = Field(200, gt=0, description="Максимум задач YouTrack в одном запросе")
    request_timeout: float = Field(30.0, gt=0, description="Таймаут запросов выгрузки и обновления, сек")
    probe_timeout: float = Field(15.0, gt=0, description="Таймаут проверки дубликатов, сек")
    dry_run: bool = Field(False, description="Если True, изменения в YouTrack не выполняются")

    @field_validator("syncable_columns", "display_only_columns")
    @classmethod
    def _normalize_columns(cls, value: List[str]) -> List[str]:
        return [item.strip().lower() for item in value if item.strip()]


class AppConfig(BaseModel):
    """Корневая конфигурация приложения."""

    asana: AsanaCredentials
    youtrack: YouTrackCredentials
    sync: SyncOptions = Field(default_factory=SyncOptions)
    ignored_path: Path = Field(
        Path("ignored_tickets.json"),
        description="Путь к JSON-файлу с постоянно игнорируемыми задачами",
    )

    @field_validator("ignored_path", mode="before")
    @classmethod
    def _ignored_path(cls, value: Path | str) -> Path:
        return Path(value)

    @classmethod
    def load(cls, path: Path | str) -> "AppConfig":
        """Загружает конфигурацию из YAML-файла."""
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigurationError(f"Не удалось прочитать конфигурацию {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Конфигурация {path} не является корректным YAML: {exc}") from exc
        try:
            return cls.model_validate(raw or {})
        except ValidationError as exc:
            raise ConfigurationError(f"Конфигурация {path} некорректна: {exc}") from exc

    def all_columns(self) -> List[str]:
        """Синхронизируемые и отображаемые колонки в одном списке."""
        return [*self.sync.syncable_columns, *self.sync.display_only_columns]

    def ensure_runtime_dirs(self) -> None:
        """Создаёт недостающие служебные каталоги."""
        self.ignored_path.parent.mkdir(parents=True, exist_ok=True)


__all__ = ["AppConfig", "AsanaCredentials", "YouTrackCredentials", "SyncOptions"]
