"""Общие заготовки для тестов: фейковый HTTP и фабрики записей."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from asana_youtrack_sync.clients import AsanaClient, YouTrackClient
from asana_youtrack_sync.config import AppConfig
from asana_youtrack_sync.models import SourceRecord, TargetRecord
from asana_youtrack_sync.services.correlation import with_marker
from asana_youtrack_sync.services.suppression_store import SuppressionStore
from asana_youtrack_sync.services.sync import SyncService


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload


Handler = Callable[[str, str, Dict[str, Any]], FakeResponse]


class FakeSession:
    """Заменяет requests.Session: отвечает через handler и запоминает вызовы."""

    def __init__(self, handler: Handler) -> None:
        self.headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self._handler = handler

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self._handler(method, url, kwargs)


def make_source(
    record_id: str,
    group_label: str,
    *,
    title: Optional[str] = None,
    tags: Sequence[str] = (),
) -> SourceRecord:
    return SourceRecord(
        id=record_id,
        title=title or f"Task {record_id}",
        body_text="notes",
        group_label=group_label,
        label_set=tuple(tags),
    )


def make_target(
    key: str,
    state: str,
    *,
    issue_id: Optional[str] = None,
    subsystem: str = "",
    project: str = "DEMO",
) -> TargetRecord:
    return TargetRecord(
        id=issue_id or f"2-{key or 'x'}",
        title=f"Issue {key}",
        body_text=with_marker("description", key) if key else "description without marker",
        state_value=state,
        subsystem_value=subsystem,
        project_ref=project,
    )


def issue_payload(
    issue_id: str,
    *,
    summary: str = "Issue",
    key: str = "",
    state: Optional[str] = "Backlog",
    project: str = "DEMO",
) -> Dict[str, Any]:
    fields = []
    if state is not None:
        fields.append({"name": "State", "value": {"name": state, "localizedName": state}})
    return {
        "id": issue_id,
        "summary": summary,
        "description": with_marker("text", key) if key else "text",
        "created": 1700000000000,
        "updated": 1700000000000,
        "customFields": fields,
        "project": {"shortName": project},
    }


def asana_task(gid: str, section: str, *, name: Optional[str] = None, tags: Sequence[str] = ()) -> Dict[str, Any]:
    return {
        "gid": gid,
        "name": name or f"Task {gid}",
        "notes": "notes",
        "memberships": [{"section": {"gid": "s", "name": section}}],
        "tags": [{"gid": tag, "name": tag} for tag in tags],
    }


class FakeBackend:
    """Обе системы в памяти: задачи Asana, задачи YouTrack и ответы на запись."""

    def __init__(self, tasks: List[Dict], issues: List[Dict]) -> None:
        self.tasks = tasks
        self.issues = issues
        self.duplicates: List[Dict] = []
        self.asana_status = 200
        self.update_responses: Dict[str, List[FakeResponse]] = {}
        self.writes: List[Dict[str, Any]] = []

    def asana(self, method, url, kwargs) -> FakeResponse:
        if self.asana_status != 200:
            return FakeResponse(self.asana_status, text="forbidden")
        return FakeResponse(200, {"data": self.tasks, "next_page": None})

    def youtrack(self, method, url, kwargs) -> FakeResponse:
        params = kwargs.get("params") or {}
        if method == "POST":
            self.writes.append({"url": url, "json": kwargs.get("json")})
            issue_id = url.rsplit("/", 1)[-1]
            queued = self.update_responses.get(issue_id)
            if queued:
                return queued.pop(0)
            return FakeResponse(200, {"id": "2-100", "idReadable": "DEMO-100"})
        if "summary:" in params.get("query", ""):
            return FakeResponse(200, self.duplicates)
        return FakeResponse(200, self.issues)


def default_backend() -> FakeBackend:
    return FakeBackend(
        tasks=[
            asana_task("S1", "Backlog", name="New feature", tags=("Mobile",)),
            asana_task("S2", "Dev"),
            asana_task("S3", "Stage"),
            asana_task("F1", "Findings"),
        ],
        issues=[
            issue_payload("2-2", key="S2", state="In Progress"),
            issue_payload("2-3", key="S3", state="Backlog"),
            issue_payload("2-9", key="F1", state="Done"),
        ],
    )


def make_service(config: AppConfig, backend: FakeBackend) -> SyncService:
    asana = AsanaClient(config.asana, session=FakeSession(backend.asana))
    youtrack = YouTrackClient(config.youtrack, session=FakeSession(backend.youtrack))
    return SyncService(config, asana, youtrack, SuppressionStore(config.ignored_path))
