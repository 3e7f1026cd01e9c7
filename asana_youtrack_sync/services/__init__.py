"""Сервисный слой приложения."""

from .duplicates import DuplicateProbe
from .fetch_strategies import FetchStrategy, FetchStrategyResolver, build_youtrack_resolver
from .reconciler import classify
from .suppression_store import SuppressionStore
from .sync import SyncAction, SyncRequest, SyncService
from .task_mapper import TaskMapper

__all__ = [
    "SyncService",
    "SyncRequest",
    "SyncAction",
    "SuppressionStore",
    "TaskMapper",
    "DuplicateProbe",
    "FetchStrategy",
    "FetchStrategyResolver",
    "build_youtrack_resolver",
    "classify",
]
