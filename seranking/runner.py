from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from seranking.audit_log import AuditLog
from seranking.client import SeRankingClient
from seranking.config import RunConfig
from seranking.errors import ItemFailedError, RunAbortedError, classify_error
from seranking.models import CreateTaskRequest, ErrorRecord, Operation, RunMode
from seranking.normalizer import Clock, now_iso, normalize_created_tasks, normalize_task_status
from seranking.resolver import resolve_request


def process_item(client: SeRankingClient, operation: Operation, params: Mapping[str, Any], now: Clock = now_iso) -> List[Dict[str, Any]]:
    """Resolve, send and normalize a single item. Raises on any failure."""
    request = resolve_request(operation, params)
    if isinstance(request, CreateTaskRequest):
        payload = client.create_serp_task(request)
        records = normalize_created_tasks(payload, request.engine_id, now=now)
    else:
        payload = client.get_task_status(request)
        records = normalize_task_status(payload, request.task_id, now=now)
    return [record.to_json() for record in records]


def run_batch(
    items: Sequence[Mapping[str, Any]],
    config: RunConfig,
    client: Optional[SeRankingClient] = None,
    audit: Optional[AuditLog] = None,
    output: Optional[List[Dict[str, Any]]] = None,
    now: Clock = now_iso,
) -> List[Dict[str, Any]]:
    """Process ``items`` in order, one request in flight at a time.

    ``items`` holds the resolved parameters of each input item. In strict mode
    the first failing item raises :class:`ItemFailedError`; records appended for
    earlier items stay in ``output`` and on the exception. In tolerant mode the
    failing item contributes one error record and the run continues.
    """
    records: List[Dict[str, Any]] = output if output is not None else []
    try:
        operation = Operation.parse(config.operation)
        mode = RunMode(config.mode)
        if client is None:
            if not config.api_token:
                raise RunAbortedError("API token is required")
            client = SeRankingClient(api_token=config.api_token, base_url=config.base_url)
    except Exception as exc:
        raise RunAbortedError(f"SE Ranking Node Error: {exc}") from exc

    for index, params in enumerate(items):
        try:
            item_records = process_item(client, operation, params, now=now)
        except Exception as exc:
            message, code = classify_error(exc)
            tolerant = mode is RunMode.TOLERANT
            if audit is not None:
                audit.log_item(
                    item=index,
                    operation=operation.value,
                    mode=mode.value,
                    outcome="failed",
                    records_emitted=1 if tolerant else 0,
                    error_code=code,
                    error_message=message,
                )
            if tolerant:
                records.append(ErrorRecord(error_message=message, error_code=code, item=index).to_json())
                continue
            raise ItemFailedError(f"SE Ranking API Error: {message}", item_index=index, error_code=code, records=records) from exc

        records.extend(item_records)
        if audit is not None:
            audit.log_item(
                item=index,
                operation=operation.value,
                mode=mode.value,
                outcome="succeeded",
                records_emitted=len(item_records),
            )
    return records
