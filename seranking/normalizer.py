from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable, List, Union

from seranking.models import (
    AnomalyRecord,
    CreatedTaskRecord,
    NoResultsRecord,
    ProcessingRecord,
    RankResultRecord,
)

Clock = Callable[[], str]
StatusRecord = Union[ProcessingRecord, RankResultRecord, NoResultsRecord]

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(value: Any) -> str:
    return str(value) if value else ""


def parse_position(value: Any) -> int:
    """Integer prefix of ``value``; 0 when absent, unparsable or negative."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return max(int(value), 0)
        except (OverflowError, ValueError):
            return 0
    match = _LEADING_INT.match(str(value))
    return max(int(match.group(1)), 0) if match else 0


def normalize_created_tasks(payload: Any, engine_id: int, now: Clock = now_iso) -> List[Union[CreatedTaskRecord, AnomalyRecord]]:
    if not isinstance(payload, list):
        return [AnomalyRecord(response=payload)]
    records: List[Union[CreatedTaskRecord, AnomalyRecord]] = []
    for task in payload:
        task = task if isinstance(task, dict) else {}
        records.append(
            CreatedTaskRecord(
                query=task.get("query"),
                task_id=task.get("task_id"),
                engine_id=engine_id,
                created_at=now(),
            )
        )
    return records


def normalize_task_status(payload: Any, task_id: str, now: Clock = now_iso) -> List[StatusRecord]:
    """Map one status answer to output records.

    ``processing`` wins over a ``results`` array present in the same answer.
    Anything that is neither is echoed back untouched as completed-no-results.
    """
    data = payload if isinstance(payload, dict) else {}
    if data.get("status") == "processing":
        return [ProcessingRecord(task_id=task_id, checked_at=now())]

    results = data.get("results")
    if isinstance(results, list):
        records: List[StatusRecord] = []
        for index, result in enumerate(results, start=1):
            result = result if isinstance(result, dict) else {}
            records.append(
                RankResultRecord(
                    task_id=task_id,
                    position=parse_position(result.get("position")),
                    url=_text(result.get("url")),
                    title=_text(result.get("title")),
                    snippet=_text(result.get("snippet")),
                    cache_url=_text(result.get("cache_url")),
                    result_index=index,
                    retrieved_at=now(),
                )
            )
        return records

    return [NoResultsRecord(task_id=task_id, data=payload, checked_at=now())]
