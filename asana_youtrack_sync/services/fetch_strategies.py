"""Получение снимка задач YouTrack цепочкой запасных стратегий.

Форма YouTrack API зависит от инсталляции: где-то не работает поиск по
запросу, где-то закрыт административный эндпоинт. Стратегии пробуются по
порядку, первая получившая ответ 2xx побеждает (даже с пустым списком).
Ответ, который не удалось разобрать в задачи, тоже считается отказом
стратегии. Повторов нет: при отказе сразу пробуется следующая стратегия.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from asana_youtrack_sync.clients.youtrack import YouTrackAPIError, YouTrackClient
from asana_youtrack_sync.errors import SnapshotFetchError
from asana_youtrack_sync.models import TargetRecord
from asana_youtrack_sync.services.task_mapper import TaskMapper

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchStrategy:
    name: str
    fetch: Callable[[], List[TargetRecord]]


class FetchStrategyResolver:
    """Выполняет стратегии по порядку до первого успеха (политика fail-closed)."""

    def __init__(self, strategies: Sequence[FetchStrategy], *, system: str = "youtrack") -> None:
        self._strategies = list(strategies)
        self._system = system

    @property
    def strategies(self) -> List[FetchStrategy]:
        return list(self._strategies)

    def fetch(self) -> List[TargetRecord]:
        failures: List[Tuple[str, Exception]] = []
        for position, strategy in enumerate(self._strategies, start=1):
            LOGGER.info("Стратегия %s (%s)...", position, strategy.name)
            try:
                records = strategy.fetch()
            except (YouTrackAPIError, ValueError, TypeError, AttributeError, KeyError) as exc:
                LOGGER.warning("Стратегия %s (%s) не сработала: %s", position, strategy.name, exc)
                failures.append((strategy.name, exc))
                continue
            LOGGER.info("Стратегия %s (%s) успешна, задач: %s", position, strategy.name, len(records))
            return records
        raise SnapshotFetchError(self._system, "все стратегии получения задач не сработали", failures)


def build_youtrack_resolver(
    client: YouTrackClient,
    mapper: TaskMapper,
    project: str,
    *,
    top: int = 200,
) -> FetchStrategyResolver:
    """Стандартная цепочка: поиск по запросу, общий список с фильтром, ресурс проекта."""

    def by_query(query: str) -> Callable[[], List[TargetRecord]]:
        return lambda: mapper.map_issues(client.search_issues(query, top=top))

    def all_issues_filtered() -> List[TargetRecord]:
        records = mapper.map_issues(client.list_issues(top=top))
        LOGGER.debug("Фильтрация %s задач по проекту '%s'", len(records), project)
        return [record for record in records if record.project_ref == project]

    def project_issues() -> List[TargetRecord]:
        return mapper.map_issues(client.list_project_issues(project, top=top))

    strategies = [
        FetchStrategy(f"query 'project:{project}'", by_query(f"project:{project}")),
        FetchStrategy(f"query 'project: {project}'", by_query(f"project: {project}")),
        FetchStrategy(f"query '#{project}'", by_query(f"#{project}")),
        FetchStrategy("all issues + project filter", all_issues_filtered),
        FetchStrategy("project issues resource", project_issues),
    ]
    return FetchStrategyResolver(strategies)


__all__ = ["FetchStrategy", "FetchStrategyResolver", "build_youtrack_resolver"]
