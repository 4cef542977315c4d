from __future__ import annotations

from typing import Any, List, Mapping, Union

from seranking.errors import ValidationError
from seranking.models import CreateTaskRequest, Operation, TaskStatusRequest

ResolvedRequest = Union[CreateTaskRequest, TaskStatusRequest]


def parse_keywords(raw: Any) -> List[str]:
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]


def _engine_id(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError("engineId is required and must be an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"engineId must be an integer, got {value!r}") from None
    if not number.is_integer():
        raise ValidationError(f"engineId must be an integer, got {value!r}")
    return int(number)


def resolve_request(operation: Operation, params: Mapping[str, Any]) -> ResolvedRequest:
    """Build the request value object for one item. Never touches the network."""
    if operation is Operation.CREATE_SERP_TASK:
        engine_id = _engine_id(params.get("engineId"))
        keywords = parse_keywords(params.get("keywords"))
        if not keywords:
            raise ValidationError("at least one keyword required")
        return CreateTaskRequest(engine_id=engine_id, keywords=keywords)
    if operation is Operation.GET_TASK_STATUS:
        task_id = str(params.get("taskId") or "").strip()
        if not task_id:
            raise ValidationError("taskId is required")
        return TaskStatusRequest(task_id=task_id)
    raise ValidationError(f"Unsupported operation: {operation!r}")


def split_item_lines(text: Any) -> List[str]:
    """One input item per non-blank line of a host text box."""
    return [line for line in str(text or "").splitlines() if line.strip()]
