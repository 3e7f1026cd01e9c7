"""Сверка снимков Asana и YouTrack и раскладка задач по корзинам."""
from __future__ import annotations

import logging
from typing import Collection, Iterable, Mapping, Optional, Sequence

from asana_youtrack_sync.models import (
    BlockedTicket,
    ClassificationResult,
    FindingsAlert,
    MatchedTicket,
    MismatchedTicket,
    SourceRecord,
    TargetRecord,
)
from asana_youtrack_sync.services.categories import (
    Category,
    is_active_state,
    is_blocked_label,
    map_label_to_state,
    matches_group,
    tag_mismatch,
)
from asana_youtrack_sync.services.correlation import extract_correlation_key, index_by_key

LOGGER = logging.getLogger(__name__)


def filter_by_groups(records: Iterable[SourceRecord], groups: Sequence[str]) -> list[SourceRecord]:
    return [record for record in records if matches_group(record.group_label, groups)]


def classify(
    source_snapshot: Iterable[SourceRecord],
    target_snapshot: Sequence[TargetRecord],
    group_filter: Sequence[str],
    suppressed: Collection[str],
    tag_mapping: Optional[Mapping[str, str]] = None,
) -> ClassificationResult:
    """Раскладывает задачи Asana по корзинам относительно задач YouTrack.

    Функция чистая: не ходит в сеть и не меняет аргументы. Каждая отобранная
    фильтром задача Asana попадает ровно в одну корзину. Задачи YouTrack с
    меткой, которая не указывает ни на одну отобранную задачу, считаются
    осиротевшими. При повторе метки у нескольких задач YouTrack учитывается
    первая, остальные молча игнорируются.
    """
    target_by_key = index_by_key(target_snapshot)
    in_scope = filter_by_groups(source_snapshot, group_filter)
    result = ClassificationResult(selected_groups=list(group_filter))

    for record in in_scope:
        if record.id in suppressed:
            result.suppressed.append(record.id)
            continue

        category = map_label_to_state(record.group_label)
        target = target_by_key.get(record.id)

        if category is Category.FINDINGS:
            result.findings.append(record)
            if target is not None and is_active_state(target.state_value):
                result.alerts.append(
                    FindingsAlert(
                        source=record,
                        target=target,
                        target_state=target.state_value,
                        message=(
                            f"HIGH ALERT: '{record.title}' is in Findings (Asana) "
                            f"but still active in YouTrack ({target.state_value})"
                        ),
                    )
                )
            continue

        if category is Category.READY_FOR_STAGE:
            result.ready_for_stage.append(record)
            continue

        state = category.value
        if is_blocked_label(record.group_label):
            result.blocked.append(BlockedTicket(source=record, target=target, state=state))
        elif target is not None:
            tags = list(record.label_set)
            mismatch = tag_mismatch(tags, target.subsystem_value, tag_mapping)
            if state == target.state_value:
                result.matched.append(
                    MatchedTicket(
                        source=record,
                        target=target,
                        state=state,
                        source_tags=tags,
                        target_subsystem=target.subsystem_value,
                        tag_mismatch=mismatch,
                    )
                )
            else:
                result.mismatched.append(
                    MismatchedTicket(
                        source=record,
                        target=target,
                        source_state=state,
                        target_state=target.state_value,
                        source_tags=tags,
                        target_subsystem=target.subsystem_value,
                        tag_mismatch=mismatch,
                    )
                )
        else:
            result.missing_in_target.append(record)

    in_scope_ids = {record.id for record in in_scope}
    for issue in target_snapshot:
        key = extract_correlation_key(issue.body_text)
        if key and key not in in_scope_ids:
            result.orphaned_in_target.append(issue)

    LOGGER.debug("Итоги сверки по колонкам %s: %s", ", ".join(group_filter), result.counts())
    return result


__all__ = ["classify", "filter_by_groups"]
