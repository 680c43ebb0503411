from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import orjson


class RuntimeEventLogger:
    """Append-only JSONL log of round lifecycle and execution events."""

    def __init__(self, data_dir: str | None, filename: str = "runtime_events.jsonl"):
        self.path: Path | None = None
        if data_dir:
            self.path = Path(data_dir) / filename
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.last: dict[str, Any] | None = None

    def emit(self, event: str, **fields: Any) -> None:
        payload = {"ts": time.time(), "event": event, **fields}
        self.last = payload
        if self.path is None:
            return
        with self.path.open("ab") as f:
            f.write(orjson.dumps(payload, default=str) + b"\n")
