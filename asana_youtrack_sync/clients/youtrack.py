"""HTTP-клиент для YouTrack REST API."""
from __future__ import annotations

from typing import Dict, List, Optional

import requests

from asana_youtrack_sync.config import YouTrackCredentials

ISSUE_FIELDS = (
    "id,summary,description,created,updated,"
    "customFields(name,value(name,localizedName,description,id,$type)),project(shortName)"
)
PROJECT_FIELDS = "id,name,shortName"
DEFAULT_TIMEOUT = 30.0


class YouTrackAPIError(RuntimeError):
    """Ошибка YouTrack API: сеть, код ответа не 2xx или нечитаемый JSON."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class YouTrackClient:
    """Минимальный клиент YouTrack API."""

    def __init__(
        self,
        config: YouTrackCredentials,
        session: Optional[requests.Session] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._config = config
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {config.token}",
                "User-Agent": "asana-youtrack-sync/0.1",
                "Accept": "application/json",
            }
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    @property
    def project_id(self) -> str:
        return self._config.project_id

    def _request(self, method: str, endpoint: str, *, timeout: Optional[float] = None, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self._session.request(method, url, timeout=timeout or self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise YouTrackAPIError(f"Сетевая ошибка YouTrack при запросе {method} {url}: {exc}") from exc
        if response.status_code >= 400:
            raise YouTrackAPIError(
                f"Ошибка YouTrack {response.status_code} при запросе {method} {url}: {response.text[:300]}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def _json(self, method: str, endpoint: str, **kwargs):
        response = self._request(method, endpoint, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise YouTrackAPIError(
                f"YouTrack вернул некорректный JSON на {method} {endpoint}: {exc}",
                status_code=response.status_code,
                body=response.text,
            ) from exc

    def _json_list(self, endpoint: str, **kwargs) -> List[Dict]:
        payload = self._json("GET", endpoint, **kwargs)
        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise YouTrackAPIError(f"YouTrack вернул не список объектов на GET {endpoint}")
        return payload

    # region issues
    def search_issues(
        self,
        query: str,
        *,
        fields: str = ISSUE_FIELDS,
        top: int = 200,
        timeout: Optional[float] = None,
    ) -> List[Dict]:
        """Поиск задач по запросу YouTrack."""
        params = {"fields": fields, "query": query, "$top": top}
        return self._json_list("/api/issues", params=params, timeout=timeout)

    def list_issues(self, *, fields: str = ISSUE_FIELDS, top: int = 200) -> List[Dict]:
        """Все доступные задачи без фильтра по проекту."""
        return self._json_list("/api/issues", params={"fields": fields, "$top": top})

    def list_project_issues(self, project: str, *, fields: str = ISSUE_FIELDS, top: int = 200) -> List[Dict]:
        """Задачи через вложенный ресурс проекта."""
        return self._json_list(f"/api/admin/projects/{project}/issues", params={"fields": fields, "$top": top})

    def create_issue(self, payload: Dict) -> Dict:
        return self._json("POST", "/api/issues", params={"fields": "id,idReadable"}, json=payload)

    def update_issue(self, issue_id: str, payload: Dict) -> Dict:
        return self._json("POST", f"/api/issues/{issue_id}", params={"fields": "id,idReadable"}, json=payload)

    # endregion

    # region projects
    def list_projects(self, top: int = 100) -> List[Dict]:
        """Проекты YouTrack; при отказе административного эндпоинта используется публичный."""
        params = {"fields": PROJECT_FIELDS, "$top": top}
        try:
            return self._json_list("/api/admin/projects", params=params)
        except YouTrackAPIError:
            return self._json_list("/api/projects", params={"fields": PROJECT_FIELDS})

    def find_project(self, key: Optional[str] = None) -> Optional[Dict]:
        """Ищет проект по id или shortName."""
        key = key or self.project_id
        for project in self.list_projects():
            if key in (project.get("id"), project.get("shortName")):
                return project
        return None

    # endregion


__all__ = ["YouTrackClient", "YouTrackAPIError", "ISSUE_FIELDS"]
