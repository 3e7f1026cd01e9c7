"""Хранилище игнорируемых задач."""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Set

from asana_youtrack_sync.errors import ConfigurationError, StorageError
from asana_youtrack_sync.models import SuppressionEntry, SuppressionScope

LOGGER = logging.getLogger(__name__)


class SuppressionStore:
    """Временный и постоянный списки игнорируемых задач Asana.

    Временный список живёт, пока живёт процесс. Постоянный целиком
    перезаписывается в JSON-файл при каждом изменении; при нескольких
    процессах побеждает последний записавший.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._temporary: Set[str] = set()
        self._permanent: Set[str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    # region persistence
    def _load(self) -> Set[str]:
        if not self._path.exists():
            return set()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"Не удалось прочитать список игнора {self._path}: {exc}") from exc
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise ConfigurationError(f"Файл {self._path} должен содержать JSON-список идентификаторов")
        LOGGER.debug("Загружено %s постоянно игнорируемых задач", len(data))
        return set(data)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(json.dumps(sorted(self._permanent), indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)

    # endregion

    def _scope_set(self, scope: SuppressionScope) -> Set[str]:
        return self._permanent if scope is SuppressionScope.PERMANENT else self._temporary

    def is_suppressed(self, record_id: str) -> bool:
        with self._lock:
            return record_id in self._temporary or record_id in self._permanent

    __contains__ = is_suppressed

    def _save_or_rollback(self, rollback: Callable[[], None]) -> None:
        try:
            self._save()
        except OSError as exc:
            rollback()
            raise StorageError(f"Не удалось сохранить список игнора {self._path}: {exc}") from exc

    def suppress(self, record_id: str, scope: SuppressionScope = SuppressionScope.TEMPORARY) -> None:
        with self._lock:
            target = self._scope_set(scope)
            if record_id in target:
                return
            target.add(record_id)
            if scope is SuppressionScope.PERMANENT:
                self._save_or_rollback(lambda: target.discard(record_id))
        LOGGER.info("Задача %s добавлена в игнор (%s)", record_id, scope.value)

    def unsuppress(self, record_id: str, scope: SuppressionScope = SuppressionScope.TEMPORARY) -> None:
        with self._lock:
            target = self._scope_set(scope)
            if record_id not in target:
                return
            target.discard(record_id)
            if scope is SuppressionScope.PERMANENT:
                self._save_or_rollback(lambda: target.add(record_id))
        LOGGER.info("Задача %s убрана из игнора (%s)", record_id, scope.value)

    def temporary_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._temporary)

    def permanent_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._permanent)

    def entries(self) -> List[SuppressionEntry]:
        with self._lock:
            return [
                *(SuppressionEntry(key, SuppressionScope.TEMPORARY) for key in sorted(self._temporary)),
                *(SuppressionEntry(key, SuppressionScope.PERMANENT) for key in sorted(self._permanent)),
            ]

    def snapshot(self) -> frozenset[str]:
        """Неизменяемая копия обоих списков для одного прохода сверки."""
        with self._lock:
            return frozenset(self._temporary | self._permanent)


__all__ = ["SuppressionStore"]
