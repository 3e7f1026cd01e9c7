from __future__ import annotations

import requests

from asana_youtrack_sync.clients.youtrack import YouTrackClient
from asana_youtrack_sync.config import YouTrackCredentials
from asana_youtrack_sync.services.duplicates import DuplicateProbe
from tests.helpers import FakeResponse, FakeSession


def _probe(handler) -> tuple[DuplicateProbe, FakeSession]:
    session = FakeSession(handler)
    client = YouTrackClient(
        YouTrackCredentials(base_url="https://yt.example.com", token="t", project_id="DEMO"),
        session=session,
    )
    return DuplicateProbe(client, "DEMO", timeout=15.0), session


def test_exact_title_ignoring_case_is_a_duplicate() -> None:
    probe, session = _probe(lambda *_: FakeResponse(200, [{"id": "1", "summary": "Fix Login"}]))

    assert probe.exists_by_title("fix login") is True
    call = session.calls[0]
    assert call["params"]["query"] == "project:DEMO summary:fix login"
    assert call["params"]["$top"] == 5
    assert call["timeout"] == 15.0


def test_partial_title_is_not_a_duplicate() -> None:
    probe, _ = _probe(lambda *_: FakeResponse(200, [{"id": "1", "summary": "Fix login page"}]))

    assert probe.exists_by_title("Fix login") is False


def test_probe_fails_open_on_transport_errors() -> None:
    def broken(*_):
        raise requests.Timeout("slow")

    probe, _ = _probe(broken)
    assert probe.exists_by_title("anything") is False

    probe, _ = _probe(lambda *_: FakeResponse(503, text="unavailable"))
    assert probe.exists_by_title("anything") is False
