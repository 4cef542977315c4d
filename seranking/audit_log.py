from __future__ import annotations

import csv
import io
import json
import os
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List

ITEM_FIELDS = ("ts_utc", "item", "operation", "mode", "outcome", "records_emitted", "error_code", "error_message")


class AuditLog:
    """One JSON line per processed input item."""

    def __init__(self, path: str = "logs/seranking_audit.jsonl") -> None:
        self.path = path
        self.entries: List[Dict[str, Any]] = []
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def log_item(
        self,
        *,
        item: int,
        operation: str,
        mode: str,
        outcome: str,
        records_emitted: int = 0,
        error_code: str = "",
        error_message: str = "",
    ) -> Dict[str, Any]:
        entry = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "item": item,
            "operation": operation,
            "mode": mode,
            "outcome": outcome,
            "records_emitted": records_emitted,
            "error_code": error_code,
            "error_message": error_message,
        }
        self.entries.append(entry)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        return entry

    def summary(self) -> Dict[str, Any]:
        failed = [e for e in self.entries if e["outcome"] == "failed"]
        return {
            "items": len(self.entries),
            "succeeded": len(self.entries) - len(failed),
            "failed": len(failed),
            "records_emitted": sum(e["records_emitted"] for e in self.entries),
            "error_codes": dict(Counter(e["error_code"] for e in failed)),
        }

    def export_json(self) -> str:
        return json.dumps({"summary": self.summary(), "items": self.entries}, indent=2, ensure_ascii=False)

    def export_csv(self) -> str:
        if not self.entries:
            return ""
        buff = io.StringIO()
        writer = csv.DictWriter(buff, fieldnames=ITEM_FIELDS)
        writer.writeheader()
        writer.writerows(self.entries)
        return buff.getvalue()
