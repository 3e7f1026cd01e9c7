"""Связь задач YouTrack с задачами Asana через метку в описании."""
from __future__ import annotations

import re
from typing import Dict, Iterable

from asana_youtrack_sync.models import TargetRecord

CORRELATION_MARKER = "Source ID:"
_KEY_RE = re.compile(re.escape(CORRELATION_MARKER) + r"[ \t]*([^\]\s]*)")


def format_marker(source_id: str) -> str:
    return f"[Synced from {CORRELATION_MARKER} {source_id}]"


def with_marker(body_text: str, source_id: str) -> str:
    """Описание задачи YouTrack с меткой исходной задачи в конце."""
    return f"{body_text or ''}\n\n{format_marker(source_id)}"


def extract_correlation_key(body_text: str) -> str:
    """Идентификатор задачи Asana из описания; пустая строка, если метки нет."""
    if not body_text or CORRELATION_MARKER not in body_text:
        return ""
    match = _KEY_RE.search(body_text)
    return match.group(1) if match else ""


def index_by_key(records: Iterable[TargetRecord]) -> Dict[str, TargetRecord]:
    """Индекс ключ → задача. Задачи без ключа отбрасываются, при повторе ключа остаётся первая."""
    index: Dict[str, TargetRecord] = {}
    for record in records:
        key = extract_correlation_key(record.body_text)
        if key and key not in index:
            index[key] = record
    return index


__all__ = ["CORRELATION_MARKER", "format_marker", "with_marker", "extract_correlation_key", "index_by_key"]
