from __future__ import annotations

from typing import List

import pytest
import requests

from asana_youtrack_sync.clients.youtrack import YouTrackAPIError, YouTrackClient
from asana_youtrack_sync.config import YouTrackCredentials
from asana_youtrack_sync.errors import SnapshotFetchError
from asana_youtrack_sync.models import TargetRecord
from asana_youtrack_sync.services.fetch_strategies import (
    FetchStrategy,
    FetchStrategyResolver,
    build_youtrack_resolver,
)
from asana_youtrack_sync.services.task_mapper import TaskMapper
from tests.helpers import FakeResponse, FakeSession, issue_payload, make_target


class CountingStrategy:
    def __init__(self, result: List[TargetRecord] | None = None, error: Exception | None = None) -> None:
        self.calls = 0
        self._result = result or []
        self._error = error

    def __call__(self) -> List[TargetRecord]:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


def test_first_success_wins_even_when_empty() -> None:
    first = CountingStrategy(result=[])
    second = CountingStrategy(result=[make_target("S1", "Dev")])
    resolver = FetchStrategyResolver([FetchStrategy("first", first), FetchStrategy("second", second)])

    assert resolver.fetch() == []
    assert first.calls == 1
    assert second.calls == 0


def test_failed_strategy_falls_through_without_retry() -> None:
    broken = CountingStrategy(error=YouTrackAPIError("boom", status_code=500))
    working = CountingStrategy(result=[make_target("S1", "Dev")])
    never = CountingStrategy()
    resolver = FetchStrategyResolver(
        [FetchStrategy("broken", broken), FetchStrategy("working", working), FetchStrategy("never", never)]
    )

    records = resolver.fetch()

    assert [record.id for record in records] == ["2-S1"]
    assert (broken.calls, working.calls, never.calls) == (1, 1, 0)


def test_all_strategies_failing_raises_snapshot_error() -> None:
    resolver = FetchStrategyResolver(
        [
            FetchStrategy("a", CountingStrategy(error=YouTrackAPIError("403"))),
            FetchStrategy("b", CountingStrategy(error=YouTrackAPIError("timeout"))),
        ]
    )

    with pytest.raises(SnapshotFetchError) as info:
        resolver.fetch()

    assert info.value.system == "youtrack"
    assert [name for name, _ in info.value.failures] == ["a", "b"]


def _client_for(handler) -> tuple[YouTrackClient, FakeSession]:
    session = FakeSession(handler)
    client = YouTrackClient(
        YouTrackCredentials(base_url="https://yt.example.com", token="t", project_id="DEMO"),
        session=session,
    )
    return client, session


def test_default_chain_uses_client_side_filter_after_query_failures() -> None:
    def handler(method, url, kwargs):
        params = kwargs.get("params") or {}
        if "query" in params:
            return FakeResponse(400, text="bad query")
        if url.endswith("/api/issues"):
            return FakeResponse(
                200,
                [
                    issue_payload("1", key="S1", project="DEMO"),
                    issue_payload("2", key="S2", project="OTHER"),
                ],
            )
        raise AssertionError(f"unexpected call {url}")

    client, session = _client_for(handler)
    resolver = build_youtrack_resolver(client, TaskMapper(project_id="DEMO"), "DEMO")

    records = resolver.fetch()

    assert [record.id for record in records] == ["1"]
    assert len(session.calls) == 4


def test_default_chain_treats_network_and_decode_errors_as_failures() -> None:
    def handler(method, url, kwargs):
        params = kwargs.get("params") or {}
        if "query" in params:
            raise requests.ConnectionError("down")
        if "/admin/projects/" in url:
            return FakeResponse(200, [issue_payload("7", key="S7")])
        return FakeResponse(200, None, text="<html>")

    client, _ = _client_for(handler)
    resolver = build_youtrack_resolver(client, TaskMapper(project_id="DEMO"), "DEMO")

    records = resolver.fetch()

    assert [record.id for record in records] == ["7"]
    assert records[0].state_value == "Backlog"


def test_undecodable_issue_shape_falls_through_to_next_strategy() -> None:
    broken = issue_payload("1", key="S1")
    broken["customFields"] = "not-a-list-of-fields"

    def handler(method, url, kwargs):
        if "/admin/projects/" in url:
            return FakeResponse(200, [issue_payload("5", key="S5")])
        if "query" in (kwargs.get("params") or {}):
            return FakeResponse(200, [broken])
        return FakeResponse(503, text="unavailable")

    client, session = _client_for(handler)
    resolver = build_youtrack_resolver(client, TaskMapper(project_id="DEMO"), "DEMO")

    records = resolver.fetch()

    assert [record.id for record in records] == ["5"]
    assert len(session.calls) == 5


def test_undecodable_shapes_everywhere_raise_snapshot_error() -> None:
    broken = issue_payload("1", key="S1")
    broken["customFields"] = [None]
    client, _ = _client_for(lambda *_: FakeResponse(200, [broken]))
    resolver = build_youtrack_resolver(client, TaskMapper(project_id="DEMO"), "DEMO")

    with pytest.raises(SnapshotFetchError) as info:
        resolver.fetch()

    assert info.value.system == "youtrack"
    assert len(info.value.failures) == 5
