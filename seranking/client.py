from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from seranking.config import DEFAULT_BASE_URL, REQUEST_TIMEOUT_SECS
from seranking.errors import ApiError, TransportError
from seranking.models import CreateTaskRequest, TaskStatusRequest

CREATE_TASK_PATH = "/v1/serp/tasks"
TASK_STATUS_PATH = "/v1/serp/tasks/status"


class SeRankingClient:
    """SE Ranking SERP API client. One attempt per call, no retries."""

    def __init__(self, api_token: str, base_url: str = DEFAULT_BASE_URL, timeout: int = REQUEST_TIMEOUT_SECS) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.evidence_log: List[Dict[str, Any]] = []

    def _headers(self, include_json: bool = False) -> Dict[str, str]:
        headers = {"Authorization": f"Token {self.api_token}"}
        if include_json:
            headers["Content-Type"] = "application/json"
        return headers

    def _append_evidence(
        self,
        *,
        label: str,
        method: str,
        url: str,
        headers: Dict[str, str],
        status_code: int,
        snippet: str,
    ) -> None:
        self.evidence_log.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "label": label,
                "method": method,
                "url": url,
                "request_header_keys": sorted(headers.keys()),
                "has_api_token": bool(self.api_token),
                "status_code": status_code,
                "response_text_snippet": snippet[:500],
            }
        )

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.text:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _request(
        self,
        *,
        method: str,
        path: str,
        label: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = self._headers(include_json=json_body is not None)
        try:
            if method == "POST":
                response = requests.post(url=url, headers=headers, json=json_body, timeout=self.timeout)
            else:
                response = requests.get(url=url, headers=headers, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            self._append_evidence(label=label, method=method, url=url, headers=headers, status_code=0, snippet=str(exc))
            raise TransportError(f"Request timed out after {self.timeout}s: {exc}", code="TIMEOUT") from exc
        except requests.ConnectionError as exc:
            self._append_evidence(label=label, method=method, url=url, headers=headers, status_code=0, snippet=str(exc))
            raise TransportError(f"Connection failed: {exc}", code="CONNECTION_ERROR") from exc
        except requests.RequestException as exc:
            self._append_evidence(label=label, method=method, url=url, headers=headers, status_code=0, snippet=str(exc))
            raise TransportError(str(exc) or f"{method} {url} failed", code="REQUEST_ERROR") from exc

        self._append_evidence(
            label=label,
            method=method,
            url=url,
            headers=headers,
            status_code=response.status_code,
            snippet=response.text or "",
        )
        payload = self._decode(response)
        if not response.ok:
            raise ApiError(f"Request failed with status code {response.status_code}", response.status_code, payload)
        return payload

    def create_serp_task(self, request: CreateTaskRequest) -> Any:
        return self._request(
            method="POST",
            path=CREATE_TASK_PATH,
            label="Create SERP Task",
            json_body={"engine_id": request.engine_id, "query": list(request.keywords)},
        )

    def get_task_status(self, request: TaskStatusRequest) -> Any:
        return self._request(
            method="GET",
            path=TASK_STATUS_PATH,
            label="Get Task Status",
            params={"task_id": request.task_id},
        )
