from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

UNKNOWN_MESSAGE = "Unknown error occurred"
UNKNOWN_CODE = "UNKNOWN_ERROR"


class SeRankingError(RuntimeError):
    code: Optional[str] = None


class ValidationError(SeRankingError):
    pass


class ConfigError(SeRankingError):
    pass


class TransportError(SeRankingError):
    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class ApiError(SeRankingError):
    """Non-2xx answer from the provider. ``body`` is the decoded JSON or raw text, if any."""

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.code = "ERR_BAD_RESPONSE" if status_code >= 500 else "ERR_BAD_REQUEST"


class RunAbortedError(SeRankingError):
    pass


class ItemFailedError(SeRankingError):
    def __init__(self, message: str, item_index: int, error_code: str, records: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.item_index = item_index
        self.error_code = error_code
        self.description = f"Error Code: {error_code}"
        self.records = list(records or [])


def classify_error(exc: BaseException) -> Tuple[str, str]:
    """Return ``(message, code)`` for a failure raised while processing one item."""
    if isinstance(exc, ApiError) and exc.body is not None and exc.body != "":
        message = None
        if isinstance(exc.body, dict):
            message = exc.body.get("error_description") or exc.body.get("message")
        code = str(exc.status_code) if exc.status_code else "API_ERROR"
        return str(message or exc), code
    message = str(exc)
    if message:
        code = exc.code if isinstance(exc, SeRankingError) else None
        return message, code or "REQUEST_ERROR"
    return UNKNOWN_MESSAGE, UNKNOWN_CODE
