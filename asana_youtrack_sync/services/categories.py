"""Соответствие колонок Asana статусам YouTrack и тегов Asana подсистемам."""
from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple


class Category(str, Enum):
    """Каноническое состояние задачи, выведенное из названия колонки."""

    BACKLOG = "Backlog"
    IN_PROGRESS = "In Progress"
    DEV = "Dev"
    STAGE = "Stage"
    BLOCKED = "Blocked"
    FINDINGS = "Findings"
    READY_FOR_STAGE = "ReadyForStage"


# Порядок важен: срабатывает первое подходящее правило.
STATE_RULES: Tuple[Tuple[Callable[[str], bool], Category], ...] = (
    (lambda label: "backlog" in label, Category.BACKLOG),
    (lambda label: "in progress" in label, Category.IN_PROGRESS),
    (lambda label: "dev" in label and "ready" not in label, Category.DEV),
    (lambda label: "stage" in label and "ready" not in label, Category.STAGE),
    (lambda label: "blocked" in label, Category.BLOCKED),
    (lambda label: "findings" in label, Category.FINDINGS),
    (lambda label: "ready for stage" in label, Category.READY_FOR_STAGE),
)
DEFAULT_CATEGORY = Category.BACKLOG

DISPLAY_ONLY_CATEGORIES = frozenset({Category.FINDINGS, Category.READY_FOR_STAGE})
ACTIVE_STATES = frozenset(
    state.value.lower()
    for state in (Category.BACKLOG, Category.IN_PROGRESS, Category.DEV, Category.STAGE, Category.BLOCKED)
)

DEFAULT_TAG_MAPPING: Dict[str, str] = {
    "Mobile": "mobile",
    "Web": "web",
    "API": "backend",
    "Frontend": "frontend",
    "Backend": "backend",
    "iOS": "mobile",
    "Android": "mobile",
    "Desktop": "desktop",
    "Database": "backend",
    "UI/UX": "frontend",
    "DevOps": "infrastructure",
    "QA": "testing",
    "Testing": "testing",
    "Security": "security",
    "Performance": "performance",
}


def map_label_to_state(group_label: Optional[str]) -> Category:
    """Определяет состояние по названию колонки. Определена для любой строки."""
    label = (group_label or "").lower()
    for predicate, category in STATE_RULES:
        if predicate(label):
            return category
    return DEFAULT_CATEGORY


def is_display_only(category: Category) -> bool:
    return category in DISPLAY_ONLY_CATEGORIES


def is_blocked_label(group_label: Optional[str]) -> bool:
    return "blocked" in (group_label or "").lower()


def is_active_state(state: str) -> bool:
    return (state or "").lower() in ACTIVE_STATES


def matches_group(group_label: Optional[str], groups: Iterable[str]) -> bool:
    """Колонка подходит, если её название содержит хотя бы один из фильтров (без учёта регистра)."""
    label = (group_label or "").lower()
    return any(group.lower() in label for group in groups)


def build_tag_mapping(overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Стандартное соответствие тегов, дополненное настройками из конфигурации."""
    mapping = dict(DEFAULT_TAG_MAPPING)
    if overrides:
        mapping.update(overrides)
    return mapping


def map_label_to_subsystem(tag: str, mapping: Optional[Mapping[str, str]] = None) -> str:
    """Подсистема YouTrack для тега Asana; неизвестный тег превращается в себя же в нижнем регистре."""
    mapping = DEFAULT_TAG_MAPPING if mapping is None else mapping
    if tag in mapping:
        return mapping[tag]
    lowered = tag.lower()
    for key, subsystem in mapping.items():
        if key.lower() == lowered:
            return subsystem
    return lowered


def tag_mismatch(
    source_tags: Sequence[str],
    target_subsystem: Optional[str],
    mapping: Optional[Mapping[str, str]] = None,
) -> bool:
    target_subsystem = target_subsystem or ""
    if not source_tags and not target_subsystem:
        return False
    if not source_tags or not target_subsystem:
        return True
    wanted = target_subsystem.lower()
    return not any(map_label_to_subsystem(tag, mapping).lower() == wanted for tag in source_tags)


__all__ = [
    "Category",
    "STATE_RULES",
    "DEFAULT_CATEGORY",
    "DEFAULT_TAG_MAPPING",
    "map_label_to_state",
    "is_display_only",
    "is_blocked_label",
    "is_active_state",
    "matches_group",
    "build_tag_mapping",
    "map_label_to_subsystem",
    "tag_mismatch",
]
