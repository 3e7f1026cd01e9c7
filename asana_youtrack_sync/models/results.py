"""Результаты сверки и пакетных действий."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .entities import SourceRecord, TargetRecord


class ClassificationBucket(str, Enum):
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    MISSING_IN_TARGET = "missing_in_target"
    FINDINGS = "findings"
    READY_FOR_STAGE = "ready_for_stage"
    BLOCKED = "blocked"
    ORPHANED_IN_TARGET = "orphaned_in_target"
    SUPPRESSED = "suppressed"


@dataclass(slots=True)
class MatchedTicket:
    source: SourceRecord
    target: TargetRecord
    state: str
    source_tags: List[str] = field(default_factory=list)
    target_subsystem: str = ""
    tag_mismatch: bool = False


@dataclass(slots=True)
class MismatchedTicket:
    source: SourceRecord
    target: TargetRecord
    source_state: str
    target_state: str
    source_tags: List[str] = field(default_factory=list)
    target_subsystem: str = ""
    tag_mismatch: bool = False


@dataclass(slots=True)
class BlockedTicket:
    """Задача из колонки Blocked; связанная задача YouTrack может отсутствовать."""

    source: SourceRecord
    target: Optional[TargetRecord]
    state: str


@dataclass(slots=True)
class FindingsAlert:
    """Задача в Findings, которая в YouTrack всё ещё в активном статусе."""

    source: SourceRecord
    target: TargetRecord
    target_state: str
    message: str


@dataclass
class ClassificationResult:
    """Результат одного прохода сверки, разложенный по корзинам."""

    selected_groups: List[str] = field(default_factory=list)
    matched: List[MatchedTicket] = field(default_factory=list)
    mismatched: List[MismatchedTicket] = field(default_factory=list)
    missing_in_target: List[SourceRecord] = field(default_factory=list)
    findings: List[SourceRecord] = field(default_factory=list)
    ready_for_stage: List[SourceRecord] = field(default_factory=list)
    blocked: List[BlockedTicket] = field(default_factory=list)
    orphaned_in_target: List[TargetRecord] = field(default_factory=list)
    suppressed: List[str] = field(default_factory=list)
    alerts: List[FindingsAlert] = field(default_factory=list)

    def bucket_of(self, source_id: str) -> List[ClassificationBucket]:
        """Корзины, в которые попала задача Asana (при корректном проходе ровно одна)."""
        buckets: List[ClassificationBucket] = []
        if any(item.source.id == source_id for item in self.matched):
            buckets.append(ClassificationBucket.MATCHED)
        if any(item.source.id == source_id for item in self.mismatched):
            buckets.append(ClassificationBucket.MISMATCHED)
        if any(item.id == source_id for item in self.missing_in_target):
            buckets.append(ClassificationBucket.MISSING_IN_TARGET)
        if any(item.id == source_id for item in self.findings):
            buckets.append(ClassificationBucket.FINDINGS)
        if any(item.id == source_id for item in self.ready_for_stage):
            buckets.append(ClassificationBucket.READY_FOR_STAGE)
        if any(item.source.id == source_id for item in self.blocked):
            buckets.append(ClassificationBucket.BLOCKED)
        if source_id in self.suppressed:
            buckets.append(ClassificationBucket.SUPPRESSED)
        return buckets

    def counts(self) -> Dict[str, int]:
        summary = {
            ClassificationBucket.MATCHED.value: len(self.matched),
            ClassificationBucket.MISMATCHED.value: len(self.mismatched),
            ClassificationBucket.MISSING_IN_TARGET.value: len(self.missing_in_target),
            ClassificationBucket.FINDINGS.value: len(self.findings),
            ClassificationBucket.READY_FOR_STAGE.value: len(self.ready_for_stage),
            ClassificationBucket.BLOCKED.value: len(self.blocked),
            ClassificationBucket.ORPHANED_IN_TARGET.value: len(self.orphaned_in_target),
            ClassificationBucket.SUPPRESSED.value: len(self.suppressed),
            "findings_alerts": len(self.alerts),
        }
        summary["tag_mismatches"] = sum(
            1 for item in [*self.matched, *self.mismatched] if item.tag_mismatch
        )
        return summary

    def to_dict(self) -> Dict[str, object]:
        payload = asdict(self)
        payload["summary"] = self.counts()
        return payload


class ActionStatus(str, Enum):
    CREATED = "created"
    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"
    IGNORED_TEMPORARILY = "ignored_temporarily"
    IGNORED_PERMANENTLY = "ignored_permanently"


@dataclass(slots=True)
class ActionOutcome:
    """Итог действия над одной задачей."""

    record_id: str
    title: str
    status: ActionStatus
    reason: Optional[str] = None
    details: Dict[str, object] = field(default_factory=dict)


@dataclass
class SyncStats:
    created: int = 0
    synced: int = 0
    skipped: int = 0
    failed: int = 0
    ignored: int = 0


@dataclass
class BatchReport:
    """Сводка пакетной операции: счётчики и итог по каждой задаче."""

    stats: SyncStats = field(default_factory=SyncStats)
    outcomes: List[ActionOutcome] = field(default_factory=list)

    def record(self, outcome: ActionOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is ActionStatus.CREATED:
            self.stats.created += 1
        elif outcome.status is ActionStatus.SYNCED:
            self.stats.synced += 1
        elif outcome.status is ActionStatus.SKIPPED:
            self.stats.skipped += 1
        elif outcome.status is ActionStatus.FAILED:
            self.stats.failed += 1
        else:
            self.stats.ignored += 1

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def to_dict(self) -> Dict[str, object]:
        return {
            "stats": vars(self.stats),
            "total": self.total,
            "results": [asdict(outcome) for outcome in self.outcomes],
        }


__all__ = [
    "ClassificationBucket",
    "MatchedTicket",
    "MismatchedTicket",
    "BlockedTicket",
    "FindingsAlert",
    "ClassificationResult",
    "ActionStatus",
    "ActionOutcome",
    "SyncStats",
    "BatchReport",
]
