"""Иерархия ошибок синхронизации."""
from __future__ import annotations

from typing import Sequence, Tuple


class ConfigurationError(ValueError):
    """Некорректные или отсутствующие параметры подключения. Фатальна только при старте."""


class SyncError(RuntimeError):
    """Базовая ошибка синхронизации."""


class SnapshotFetchError(SyncError):
    """Не удалось получить полный снимок задач одной из систем. Прерывает проход."""

    def __init__(
        self,
        system: str,
        message: str,
        failures: Sequence[Tuple[str, Exception]] = (),
    ) -> None:
        self.system = system
        self.failures = list(failures)
        details = "; ".join(f"{name}: {exc}" for name, exc in self.failures)
        text = f"[{system}] {message}"
        if details:
            text = f"{text} ({details})"
        super().__init__(text)


class StorageError(SyncError):
    """Не удалось сохранить постоянный список игнора. Состояние в памяти не меняется."""


class ActionError(SyncError):
    """Ошибка одиночного действия (создание/обновление). Не прерывает пакет."""

    def __init__(self, record_id: str, message: str) -> None:
        self.record_id = record_id
        super().__init__(f"{record_id}: {message}")


__all__ = ["ConfigurationError", "SyncError", "SnapshotFetchError", "StorageError", "ActionError"]
