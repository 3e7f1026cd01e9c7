"""Доменные модели синхронизации."""

from .entities import SourceRecord, SuppressionEntry, SuppressionScope, TargetRecord
from .results import (
    ActionOutcome,
    ActionStatus,
    BatchReport,
    BlockedTicket,
    ClassificationBucket,
    ClassificationResult,
    FindingsAlert,
    MatchedTicket,
    MismatchedTicket,
    SyncStats,
)

__all__ = [
    "SourceRecord",
    "TargetRecord",
    "SuppressionScope",
    "SuppressionEntry",
    "ClassificationBucket",
    "ClassificationResult",
    "MatchedTicket",
    "MismatchedTicket",
    "BlockedTicket",
    "FindingsAlert",
    "ActionStatus",
    "ActionOutcome",
    "SyncStats",
    "BatchReport",
]
