from __future__ import annotations

from asana_youtrack_sync.services.correlation import extract_correlation_key, index_by_key, with_marker
from tests.helpers import make_target


def test_marker_round_trip() -> None:
    body = with_marker("Some notes", "1209")
    assert body.endswith("[Synced from Source ID: 1209]")
    assert extract_correlation_key(body) == "1209"


def test_key_from_free_text() -> None:
    body = "first line\nSource ID:   55  \nanother"
    assert extract_correlation_key(body) == "55"


def test_missing_marker_yields_empty_key() -> None:
    assert extract_correlation_key("") == ""
    assert extract_correlation_key("no link here") == ""
    assert extract_correlation_key("Source ID: ]") == ""


def test_index_keeps_first_duplicate_and_drops_unlinked() -> None:
    first = make_target("S1", "Backlog", issue_id="A")
    second = make_target("S1", "Dev", issue_id="B")
    unlinked = make_target("", "Dev", issue_id="C")

    index = index_by_key([first, second, unlinked])

    assert index == {"S1": first}
