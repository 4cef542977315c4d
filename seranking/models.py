from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from seranking.errors import ValidationError


class Operation(str, Enum):
    CREATE_SERP_TASK = "createSerpTask"
    GET_TASK_STATUS = "getTaskStatus"

    @classmethod
    def parse(cls, value: Any) -> "Operation":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip()
        for member in cls:
            if raw in (member.value, member.name):
                return member
        raise ValidationError(f"Unsupported operation: {value!r}")


class RunMode(str, Enum):
    STRICT = "strict"
    TOLERANT = "tolerant"


@dataclass(frozen=True)
class CreateTaskRequest:
    engine_id: int
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TaskStatusRequest:
    task_id: str


@dataclass(frozen=True)
class CreatedTaskRecord:
    query: Any
    task_id: Any
    engine_id: int
    created_at: str
    status: str = "created"

    def to_json(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "task_id": self.task_id,
            "engine_id": self.engine_id,
            "status": self.status,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class RankResultRecord:
    task_id: str
    position: int
    url: str
    title: str
    snippet: str
    cache_url: str
    result_index: int
    retrieved_at: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "position": self.position,
            "url": self.url,
            "title": self.title,
            "snippet": self.snippet,
            "cache_url": self.cache_url,
            "result_index": self.result_index,
            "retrieved_at": self.retrieved_at,
        }


@dataclass(frozen=True)
class ProcessingRecord:
    task_id: str
    checked_at: str
    status: str = "processing"

    def to_json(self) -> Dict[str, Any]:
        return {"task_id": self.task_id, "status": self.status, "checked_at": self.checked_at}


@dataclass(frozen=True)
class NoResultsRecord:
    task_id: str
    data: Any
    checked_at: str
    status: str = "completed_no_results"

    def to_json(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "status": self.status,
            "data": self.data,
            "checked_at": self.checked_at,
        }


@dataclass(frozen=True)
class AnomalyRecord:
    """2xx create-task answer that is not an array; reported, never raised."""

    response: Any
    error: str = "Unexpected response format"

    def to_json(self) -> Dict[str, Any]:
        return {"error": self.error, "response": self.response}


@dataclass(frozen=True)
class ErrorRecord:
    error_message: str
    error_code: str
    item: int

    def to_json(self) -> Dict[str, Any]:
        return {
            "error": True,
            "errorMessage": self.error_message,
            "errorCode": self.error_code,
            "item": self.item,
        }
