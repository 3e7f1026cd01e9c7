"""Маппинг задач между Asana и YouTrack."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

from dateutil import parser

from asana_youtrack_sync.models import SourceRecord, TargetRecord
from asana_youtrack_sync.services.categories import (
    build_tag_mapping,
    is_display_only,
    map_label_to_state,
    map_label_to_subsystem,
)
from asana_youtrack_sync.services.correlation import with_marker

LOGGER = logging.getLogger(__name__)

STATE_FIELD = "State"
SUBSYSTEM_FIELD = "Subsystem"


class TaskMapper:
    """Конвертация данных между API и внутренними моделями."""

    def __init__(self, *, project_id: str, tag_mapping: Optional[Mapping[str, str]] = None) -> None:
        self._project_id = project_id
        self._tag_mapping = build_tag_mapping(tag_mapping)

    @property
    def tag_mapping(self) -> Dict[str, str]:
        return self._tag_mapping

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return parser.isoparse(str(value))
        except (ValueError, OverflowError):
            LOGGER.debug("Некорректная дата '%s' пропущена", value)
            return None

    @staticmethod
    def _parse_millis(value: Optional[int]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError, TypeError):
            LOGGER.debug("Некорректная отметка времени '%s' пропущена", value)
            return None

    # region Asana → модели
    def map_task(self, payload: Dict) -> SourceRecord:
        memberships = [item for item in payload.get("memberships") or [] if isinstance(item, dict)]
        section = (memberships[0].get("section") or {}) if memberships else {}
        if not isinstance(section, dict):
            section = {}
        tags = tuple(
            str(tag["name"]) for tag in payload.get("tags") or [] if isinstance(tag, dict) and tag.get("name")
        )
        return SourceRecord(
            id=str(payload.get("gid") or ""),
            title=str(payload.get("name") or ""),
            body_text=str(payload.get("notes") or ""),
            group_label=str(section.get("name") or ""),
            label_set=tags,
            created_at=self._parse_datetime(payload.get("created_at")),
            updated_at=self._parse_datetime(payload.get("modified_at")),
        )

    # endregion

    # region YouTrack → модели
    @staticmethod
    def _custom_field(payload: Dict, name: str) -> Optional[Dict]:
        for field in payload.get("customFields") or []:
            if field.get("name") == name:
                return field
        return None

    @classmethod
    def extract_state(cls, payload: Dict) -> str:
        field = cls._custom_field(payload, STATE_FIELD)
        if field is None:
            return "Unknown"
        value = field.get("value")
        if value is None:
            return "No State"
        if isinstance(value, dict):
            return value.get("localizedName") or value.get("name") or "Unknown"
        if isinstance(value, str) and value:
            return value
        return "Unknown"

    @classmethod
    def extract_subsystem(cls, payload: Dict) -> str:
        field = cls._custom_field(payload, SUBSYSTEM_FIELD)
        if field is None:
            return ""
        value = field.get("value")
        # Subsystem бывает и одиночным, и множественным полем
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            return value.get("name") or value.get("localizedName") or ""
        if isinstance(value, str):
            return value
        return ""

    def map_issue(self, payload: Dict) -> TargetRecord:
        project = payload.get("project") or {}
        return TargetRecord(
            id=str(payload.get("id") or ""),
            title=payload.get("summary") or "",
            body_text=payload.get("description") or "",
            state_value=self.extract_state(payload),
            subsystem_value=self.extract_subsystem(payload),
            project_ref=project.get("shortName") or "",
            created_at=self._parse_millis(payload.get("created")),
            updated_at=self._parse_millis(payload.get("updated")),
        )

    def map_issues(self, payloads: List[Dict]) -> List[TargetRecord]:
        return [self.map_issue(item) for item in payloads]

    # endregion

    # region модели → YouTrack
    def primary_subsystem(self, record: SourceRecord) -> Optional[str]:
        """Подсистема по первому тегу задачи."""
        if not record.label_set:
            return None
        return map_label_to_subsystem(record.label_set[0], self._tag_mapping) or None

    def to_youtrack_payload(
        self,
        record: SourceRecord,
        *,
        include_subsystem: bool = True,
        include_project: bool = False,
    ) -> Dict:
        category = map_label_to_state(record.group_label)
        if is_display_only(category):
            raise ValueError(f"Колонка '{record.group_label}' только для отображения, синхронизация запрещена")

        payload: Dict[str, object] = {
            "$type": "Issue",
            "summary": record.title,
            "description": with_marker(record.body_text, record.id),
        }
        if include_project:
            payload["project"] = {"$type": "Project", "shortName": self._project_id}

        custom_fields: List[Dict[str, object]] = [
            {
                "$type": "StateIssueCustomField",
                "name": STATE_FIELD,
                "value": {"$type": "StateBundleElement", "name": category.value},
            }
        ]
        subsystem = self.primary_subsystem(record) if include_subsystem else None
        if subsystem:
            custom_fields.append(
                {
                    "$type": "MultiOwnedIssueCustomField",
                    "name": SUBSYSTEM_FIELD,
                    "value": [{"$type": "OwnedBundleElement", "name": subsystem}],
                }
            )
        payload["customFields"] = custom_fields
        return payload

    # endregion


__all__ = ["TaskMapper", "STATE_FIELD", "SUBSYSTEM_FIELD"]
