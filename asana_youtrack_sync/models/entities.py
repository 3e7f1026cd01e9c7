"""Определения доменных сущностей."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class SourceRecord:
    """Задача Asana."""

    id: str
    title: str
    body_text: str = ""
    group_label: str = ""
    label_set: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class TargetRecord:
    """Задача YouTrack."""

    id: str
    title: str
    body_text: str = ""
    state_value: str = "Unknown"
    subsystem_value: str = ""
    project_ref: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SuppressionScope(str, Enum):
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


@dataclass(slots=True, frozen=True)
class SuppressionEntry:
    """Игнорируемая задача и область действия игнора."""

    correlation_key: str
    scope: SuppressionScope


__all__ = ["SourceRecord", "TargetRecord", "SuppressionScope", "SuppressionEntry"]
