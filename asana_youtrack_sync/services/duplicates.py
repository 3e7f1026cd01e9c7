"""Проверка наличия задачи с тем же заголовком перед созданием."""
from __future__ import annotations

import logging
from typing import Optional

from asana_youtrack_sync.clients.youtrack import YouTrackAPIError, YouTrackClient

LOGGER = logging.getLogger(__name__)


class DuplicateProbe:
    """Поиск дубликата по заголовку (политика fail-open).

    Если YouTrack недоступен или ответил ошибкой, дубликат считается
    отсутствующим и создание разрешается.
    """

    FAIL_OPEN_RESULT = False

    def __init__(self, client: YouTrackClient, project: str, *, timeout: Optional[float] = 15.0) -> None:
        self._client = client
        self._project = project
        self._timeout = timeout

    def exists_by_title(self, title: str) -> bool:
        query = f"project:{self._project} summary:{title}"
        try:
            candidates = self._client.search_issues(query, fields="id,summary", top=5, timeout=self._timeout)
        except YouTrackAPIError as exc:
            LOGGER.warning("Проверка дубликата '%s' не удалась, создание разрешено: %s", title, exc)
            return self.FAIL_OPEN_RESULT
        wanted = title.lower()
        return any((item.get("summary") or "").lower() == wanted for item in candidates)


__all__ = ["DuplicateProbe"]
