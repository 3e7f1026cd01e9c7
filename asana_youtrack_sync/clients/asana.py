"""HTTP-клиент для Asana API."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import requests

from asana_youtrack_sync.config import AsanaCredentials

TASK_FIELDS = ",".join(
    [
        "gid",
        "name",
        "notes",
        "completed_at",
        "created_at",
        "modified_at",
        "memberships.section.gid",
        "memberships.section.name",
        "tags.gid",
        "tags.name",
    ]
)
DEFAULT_TIMEOUT = 30.0


class AsanaAPIError(RuntimeError):
    """Исключение при ошибке Asana API."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class AsanaTaskPage:
    """Контейнер для страницы задач."""

    items: List[Dict]
    next_offset: Optional[str]


class AsanaClient:
    """Минимальный клиент Asana API."""

    def __init__(
        self,
        config: AsanaCredentials,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._config = config
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {config.token}",
            "User-Agent": "asana-youtrack-sync/0.1",
            "Accept": "application/json",
        })

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    # region low-level helpers
    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise AsanaAPIError(f"Сетевая ошибка Asana при запросе {method} {url}: {exc}") from exc
        if response.status_code == 401:
            raise AsanaAPIError(f"Ошибка авторизации Asana при запросе {method} {url}", status_code=401)
        if response.status_code >= 400:
            raise AsanaAPIError(
                f"Ошибка Asana API {response.status_code} при запросе {method} {url}: {response.text}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, endpoint: str, **kwargs) -> Dict:
        response = self._request(method, endpoint, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise AsanaAPIError(f"Asana вернула некорректный JSON на {method} {endpoint}: {exc}") from exc

    # endregion

    def list_tasks(
        self,
        project_id: str,
        *,
        offset: Optional[str] = None,
        page_size: int = 100,
    ) -> AsanaTaskPage:
        """Возвращает страницу задач проекта."""
        params: Dict[str, str] = {
            "opt_fields": TASK_FIELDS,
            "limit": str(page_size),
        }
        if offset:
            params["offset"] = offset
        payload = self._json("GET", f"/projects/{project_id}/tasks", params=params)
        next_page = payload.get("next_page") or {}
        return AsanaTaskPage(items=payload.get("data", []), next_offset=next_page.get("offset"))

    def iter_project_tasks(self, project_id: Optional[str] = None, *, page_size: int = 100) -> Iterable[Dict]:
        """Итерирует задачи проекта с учётом пагинации."""
        project_id = project_id or self._config.project_id
        offset = None
        while True:
            page = self.list_tasks(project_id, offset=offset, page_size=page_size)
            for item in page.items:
                yield item
            if not page.next_offset:
                break
            offset = page.next_offset

    def list_sections(self, project_id: Optional[str] = None) -> List[Dict]:
        """Колонки (секции) проекта."""
        project_id = project_id or self._config.project_id
        payload = self._json("GET", f"/projects/{project_id}/sections", params={"opt_fields": "gid,name"})
        return payload.get("data", [])


__all__ = ["AsanaClient", "AsanaAPIError", "AsanaTaskPage"]
