from __future__ import annotations

import pytest

from asana_youtrack_sync.services.categories import (
    STATE_RULES,
    Category,
    build_tag_mapping,
    is_active_state,
    is_display_only,
    map_label_to_state,
    map_label_to_subsystem,
    matches_group,
    tag_mismatch,
)


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Backlog", Category.BACKLOG),
        ("IN PROGRESS", Category.IN_PROGRESS),
        ("Dev", Category.DEV),
        ("Stage", Category.STAGE),
        ("Blocked", Category.BLOCKED),
        ("Findings", Category.FINDINGS),
        ("Ready for Stage", Category.READY_FOR_STAGE),
        ("Ready for Dev", Category.BACKLOG),
        ("Backlog (blocked)", Category.BACKLOG),
        ("Dev findings", Category.DEV),
    ],
)
def test_label_rules_first_match_wins(label: str, expected: Category) -> None:
    assert map_label_to_state(label) is expected


@pytest.mark.parametrize("label", ["", "   ", "Something else", "QA", None])
def test_unknown_labels_default_to_backlog(label) -> None:
    assert map_label_to_state(label) is Category.BACKLOG


def test_rules_are_an_ordered_list() -> None:
    categories = [category for _, category in STATE_RULES]
    assert categories == [
        Category.BACKLOG,
        Category.IN_PROGRESS,
        Category.DEV,
        Category.STAGE,
        Category.BLOCKED,
        Category.FINDINGS,
        Category.READY_FOR_STAGE,
    ]


def test_canonical_state_values() -> None:
    assert map_label_to_state("Stage") == "Stage"
    assert map_label_to_state("dev") == "Dev"


def test_display_only_categories() -> None:
    assert is_display_only(Category.FINDINGS)
    assert is_display_only(Category.READY_FOR_STAGE)
    assert not is_display_only(Category.BLOCKED)


def test_active_states_ignore_case() -> None:
    assert is_active_state("In Progress")
    assert is_active_state("DEV")
    assert not is_active_state("Done")
    assert not is_active_state("")


def test_group_filter_is_substring_match() -> None:
    assert matches_group("Sprint 4 - In Progress", ["in progress"])
    assert not matches_group("Done", ["backlog", "dev"])
    assert not matches_group("", ["backlog"])


def test_subsystem_lookup_exact_then_case_insensitive() -> None:
    assert map_label_to_subsystem("API") == "backend"
    assert map_label_to_subsystem("api") == "backend"
    assert map_label_to_subsystem("Payments") == "payments"


def test_subsystem_lookup_uses_overrides() -> None:
    mapping = build_tag_mapping({"Payments": "billing"})
    assert map_label_to_subsystem("payments", mapping) == "billing"
    assert map_label_to_subsystem("Mobile", mapping) == "mobile"


def test_tag_mismatch_rules() -> None:
    assert tag_mismatch([], "") is False
    assert tag_mismatch(["Mobile"], "") is True
    assert tag_mismatch([], "mobile") is True
    assert tag_mismatch(["Mobile"], "mobile") is False
    assert tag_mismatch(["iOS", "Web"], "WEB") is False
    assert tag_mismatch(["Web"], "backend") is True
