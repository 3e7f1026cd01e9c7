"""Бизнес-логика синхронизации задач."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from asana_youtrack_sync.clients import AsanaAPIError, AsanaClient, YouTrackAPIError, YouTrackClient
from asana_youtrack_sync.config import AppConfig
from asana_youtrack_sync.errors import ActionError, SnapshotFetchError, StorageError
from asana_youtrack_sync.models import (
    ActionOutcome,
    ActionStatus,
    BatchReport,
    ClassificationResult,
    MismatchedTicket,
    SourceRecord,
    SuppressionScope,
    TargetRecord,
)
from asana_youtrack_sync.services.categories import is_display_only, map_label_to_state
from asana_youtrack_sync.services.duplicates import DuplicateProbe
from asana_youtrack_sync.services.fetch_strategies import FetchStrategyResolver, build_youtrack_resolver
from asana_youtrack_sync.services.reconciler import classify
from asana_youtrack_sync.services.suppression_store import SuppressionStore
from asana_youtrack_sync.services.task_mapper import TaskMapper

LOGGER = logging.getLogger(__name__)

# Признак ответа YouTrack, когда в проекте нет поля Subsystem
SUBSYSTEM_FIELD_ERROR = "incompatible-issue-custom-field-name-Subsystem"


class SyncAction(str, Enum):
    SYNC = "sync"
    IGNORE_TEMP = "ignore_temp"
    IGNORE_FOREVER = "ignore_forever"


@dataclass(slots=True)
class SyncRequest:
    ticket_id: str
    action: SyncAction = SyncAction.SYNC


class SyncService:
    """Оркестратор сверки и синхронизации задач Asana → YouTrack."""

    def __init__(
        self,
        config: AppConfig,
        asana_client: AsanaClient,
        youtrack_client: YouTrackClient,
        suppression_store: SuppressionStore,
        task_mapper: Optional[TaskMapper] = None,
        fetch_resolver: Optional[FetchStrategyResolver] = None,
        duplicate_probe: Optional[DuplicateProbe] = None,
    ) -> None:
        self._config = config
        self._asana = asana_client
        self._youtrack = youtrack_client
        self._store = suppression_store
        self._mapper = task_mapper or TaskMapper(
            project_id=config.youtrack.project_id,
            tag_mapping=config.sync.tag_mapping,
        )
        self._resolver = fetch_resolver or build_youtrack_resolver(
            youtrack_client,
            self._mapper,
            config.youtrack.project_id,
            top=config.sync.fetch_limit,
        )
        self._probe = duplicate_probe or DuplicateProbe(
            youtrack_client,
            config.youtrack.project_id,
            timeout=config.sync.probe_timeout,
        )

    @property
    def suppression_store(self) -> SuppressionStore:
        return self._store

    @property
    def youtrack(self) -> YouTrackClient:
        return self._youtrack

    # region snapshots
    def fetch_source_snapshot(self) -> List[SourceRecord]:
        """Все задачи проекта Asana. Частичный снимок не принимается."""
        try:
            raw_tasks = list(
                self._asana.iter_project_tasks(
                    self._config.asana.project_id,
                    page_size=self._config.sync.page_size,
                )
            )
        except AsanaAPIError as exc:
            raise SnapshotFetchError("asana", f"не удалось получить задачи Asana: {exc}") from exc
        records = []
        for raw in raw_tasks:
            if not isinstance(raw, dict):
                LOGGER.warning("Пропущена задача Asana неожиданного формата: %r", raw)
                continue
            records.append(self._mapper.map_task(raw))
        return records

    def fetch_target_snapshot(self) -> List[TargetRecord]:
        return self._resolver.fetch()

    # endregion

    # region analysis
    def analyze(self, groups: Optional[Sequence[str]] = None) -> ClassificationResult:
        """Сверка по выбранным колонкам (по умолчанию по всем настроенным)."""
        groups = list(groups) if groups else self._config.all_columns()
        source = self.fetch_source_snapshot()
        target = self.fetch_target_snapshot()
        LOGGER.info("Сверка колонок %s: задач Asana %s, задач YouTrack %s", ", ".join(groups), len(source), len(target))
        return classify(source, target, groups, self._store.snapshot(), self._mapper.tag_mapping)

    # endregion

    # region target actions
    def _guard_syncable(self, record: SourceRecord) -> None:
        if is_display_only(map_label_to_state(record.group_label)):
            raise ActionError(record.id, f"колонка '{record.group_label}' только для отображения")

    def create_target_record(self, record: SourceRecord) -> Dict:
        """Создаёт задачу YouTrack с меткой исходной задачи."""
        self._guard_syncable(record)
        payload = self._mapper.to_youtrack_payload(record, include_project=True)
        try:
            return self._youtrack.create_issue(payload)
        except YouTrackAPIError as exc:
            raise ActionError(record.id, f"ошибка создания в YouTrack: {exc}") from exc

    def update_target_record(self, issue_id: str, record: SourceRecord) -> Dict:
        """Обновляет задачу YouTrack; без поля Subsystem, если проект его не знает."""
        self._guard_syncable(record)
        payload = self._mapper.to_youtrack_payload(record)
        try:
            return self._youtrack.update_issue(issue_id, payload)
        except YouTrackAPIError as exc:
            if SUBSYSTEM_FIELD_ERROR not in exc.body:
                raise ActionError(record.id, f"ошибка обновления {issue_id} в YouTrack: {exc}") from exc
            LOGGER.info("В проекте нет поля Subsystem, обновляем %s только статусом", issue_id)

        reduced = self._mapper.to_youtrack_payload(record, include_subsystem=False)
        try:
            return self._youtrack.update_issue(issue_id, reduced)
        except YouTrackAPIError as exc:
            raise ActionError(record.id, f"ошибка обновления {issue_id} в YouTrack: {exc}") from exc

    # endregion

    # region batch operations
    def _create_one(self, record: SourceRecord) -> ActionOutcome:
        details: Dict[str, object] = {"source_tags": list(record.label_set)}
        if self._probe.exists_by_title(record.title):
            return ActionOutcome(record.id, record.title, ActionStatus.SKIPPED, "duplicate", details)
        if self._config.sync.dry_run:
            LOGGER.info("[DRY-RUN] Создание задачи %s", record.id)
            return ActionOutcome(record.id, record.title, ActionStatus.SKIPPED, "dry-run", details)
        try:
            response = self.create_target_record(record)
        except ActionError as exc:
            LOGGER.warning("Не удалось создать задачу %s: %s", record.id, exc)
            return ActionOutcome(record.id, record.title, ActionStatus.FAILED, str(exc), details)
        details["youtrack_id"] = response.get("idReadable") or response.get("id")
        subsystem = self._mapper.primary_subsystem(record)
        if subsystem:
            details["mapped_subsystem"] = subsystem
        return ActionOutcome(record.id, record.title, ActionStatus.CREATED, None, details)

    def create_missing(self, groups: Optional[Sequence[str]] = None) -> BatchReport:
        """Создаёт в YouTrack все задачи синхронизируемых колонок, которых там ещё нет."""
        analysis = self.analyze(groups or self._config.sync.syncable_columns)
        report = BatchReport()
        for record in tqdm(analysis.missing_in_target, desc="Создание задач", disable=not analysis.missing_in_target):
            report.record(self._create_one(record))
        LOGGER.info("Создание завершено: %s", vars(report.stats))
        return report

    def create_single(self, task_id: str) -> ActionOutcome:
        """Создаёт задачу YouTrack для одной задачи Asana."""
        for record in self.fetch_source_snapshot():
            if record.id == task_id:
                return self._create_one(record)
        raise ActionError(task_id, "задача не найдена в Asana")

    def _sync_one(self, ticket: MismatchedTicket) -> ActionOutcome:
        record = ticket.source
        details: Dict[str, object] = {
            "youtrack_id": ticket.target.id,
            "status_change": {"from": ticket.target_state, "to": ticket.source_state},
        }
        if self._config.sync.dry_run:
            LOGGER.info("[DRY-RUN] Обновление %s → %s", record.id, ticket.target.id)
            return ActionOutcome(record.id, record.title, ActionStatus.SKIPPED, "dry-run", details)
        try:
            self.update_target_record(ticket.target.id, record)
        except ActionError as exc:
            LOGGER.warning("Не удалось обновить задачу %s: %s", record.id, exc)
            return ActionOutcome(record.id, record.title, ActionStatus.FAILED, str(exc), details)
        if record.label_set:
            details["tag_sync"] = {
                "source_tags": list(record.label_set),
                "mapped_subsystem": self._mapper.primary_subsystem(record),
                "previous_subsystem": ticket.target_subsystem,
            }
        return ActionOutcome(record.id, record.title, ActionStatus.SYNCED, None, details)

    def process_sync_requests(self, requests: Sequence[SyncRequest]) -> BatchReport:
        """Выполняет действия над задачами из текущего списка расхождений."""
        return self._apply_requests(requests, self.analyze(self._config.sync.syncable_columns))

    def _ignore_one(self, ticket: MismatchedTicket, action: SyncAction) -> ActionOutcome:
        record = ticket.source
        if action is SyncAction.IGNORE_TEMP:
            scope, status = SuppressionScope.TEMPORARY, ActionStatus.IGNORED_TEMPORARILY
        else:
            scope, status = SuppressionScope.PERMANENT, ActionStatus.IGNORED_PERMANENTLY
        try:
            self._store.suppress(record.id, scope)
        except StorageError as exc:
            LOGGER.warning("Не удалось добавить задачу %s в игнор: %s", record.id, exc)
            return ActionOutcome(record.id, record.title, ActionStatus.FAILED, str(exc))
        return ActionOutcome(record.id, record.title, status)

    def _apply_requests(self, requests: Sequence[SyncRequest], analysis: ClassificationResult) -> BatchReport:
        mismatched = {ticket.source.id: ticket for ticket in analysis.mismatched}
        report = BatchReport()
        for request in tqdm(requests, desc="Синхронизация", disable=not requests):
            ticket = mismatched.get(request.ticket_id)
            if ticket is None:
                report.record(
                    ActionOutcome(request.ticket_id, "", ActionStatus.FAILED, "нет в списке расхождений")
                )
                continue
            if request.action is SyncAction.SYNC:
                report.record(self._sync_one(ticket))
            else:
                report.record(self._ignore_one(ticket, request.action))
        LOGGER.info("Синхронизация завершена: %s", vars(report.stats))
        return report

    def sync_mismatched(self, ticket_ids: Optional[Sequence[str]] = None) -> BatchReport:
        """Синхронизирует статусы всех (или указанных) расходящихся задач."""
        analysis = self.analyze(self._config.sync.syncable_columns)
        if ticket_ids is None:
            ticket_ids = [ticket.source.id for ticket in analysis.mismatched]
        return self._apply_requests([SyncRequest(ticket_id) for ticket_id in ticket_ids], analysis)

    # endregion

    # region suppression
    def suppress(self, record_id: str, scope: SuppressionScope) -> None:
        self._store.suppress(record_id, scope)

    def unsuppress(self, record_id: str, scope: SuppressionScope) -> None:
        self._store.unsuppress(record_id, scope)

    def suppression_state(self) -> Dict[str, object]:
        return {
            "temp_ignored": self._store.temporary_ids(),
            "forever_ignored": self._store.permanent_ids(),
            "tag_mappings": dict(self._mapper.tag_mapping),
        }

    # endregion

    def status(self) -> Dict[str, object]:
        return {
            "asana_project": self._config.asana.project_id,
            "youtrack_project": self._config.youtrack.project_id,
            "columns": {
                "syncable": list(self._config.sync.syncable_columns),
                "display_only": list(self._config.sync.display_only_columns),
            },
            "temp_ignored": len(self._store.temporary_ids()),
            "forever_ignored": len(self._store.permanent_ids()),
            "tag_mappings": len(self._mapper.tag_mapping),
            "dry_run": self._config.sync.dry_run,
        }


__all__ = ["SyncService", "SyncRequest", "SyncAction", "SUBSYSTEM_FIELD_ERROR"]
