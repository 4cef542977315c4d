from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from seranking.errors import ConfigError
from seranking.models import RunMode

DEFAULT_BASE_URL = "https://api.seranking.com"
REQUEST_TIMEOUT_SECS = 30
TOKEN_ENV_VAR = "SERANKING_API_TOKEN"

REQUIRED_KEYS = {"operation"}
OPTIONAL_KEYS = {"api_token", "base_url", "continue_on_fail"}


@dataclass(frozen=True)
class RunConfig:
    """Everything read once per execution. Immutable for the run."""

    operation: Any
    api_token: str
    base_url: str = DEFAULT_BASE_URL
    mode: RunMode = RunMode.STRICT


def load_credentials(env: Optional[Dict[str, str]] = None) -> str:
    source = os.environ if env is None else env
    token = str(source.get(TOKEN_ENV_VAR, "") or "").strip()
    if not token:
        raise ConfigError(f"{TOKEN_ENV_VAR} is not set")
    return token


def validate_run_config(payload: Dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ConfigError("Run config must be a JSON object")
    keys = set(payload.keys())
    missing = REQUIRED_KEYS - keys
    if missing:
        raise ConfigError(f"Run config is missing keys: {sorted(missing)}")
    unknown = keys - REQUIRED_KEYS - OPTIONAL_KEYS
    if unknown:
        raise ConfigError(f"Run config has unknown keys: {sorted(unknown)}")
    if "continue_on_fail" in payload and not isinstance(payload["continue_on_fail"], bool):
        raise ConfigError("continue_on_fail must be a boolean")
    base_url = payload.get("base_url")
    if base_url is not None and not str(base_url).startswith(("http://", "https://")):
        raise ConfigError(f"Invalid base_url: {base_url!r}")


def load_run_config(path: Union[str, Path], env: Optional[Dict[str, str]] = None) -> RunConfig:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Unable to read run config {path}: {exc}") from exc
    validate_run_config(payload)
    token = str(payload.get("api_token") or "").strip() or load_credentials(env)
    return RunConfig(
        operation=payload["operation"],
        api_token=token,
        base_url=str(payload.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
        mode=RunMode.TOLERANT if payload.get("continue_on_fail") else RunMode.STRICT,
    )
